#!/usr/bin/env python3
"""Simple CLI for compiling strategies and tracking bridges locally"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from zetayield.core.compiler import get_plan_assembler
from zetayield.core.errors import ZetaYieldError
from zetayield.core.tracking import TrackingStatus, track_cctx_status
from zetayield.logging_config import setup_logging
from zetayield.types import StrategyStep


def load_steps(path: Path) -> List[StrategyStep]:
    """Read steps from a JSON file holding a list or ``{"steps": [...]}``."""
    payload = json.loads(path.read_text())
    if isinstance(payload, dict):
        payload = payload.get("steps", [])
    return TypeAdapter(List[StrategyStep]).validate_python(payload)


async def cli_prepare(address: str, steps_path: Path, now: Optional[float] = None) -> int:
    """Compile a strategy file and print the plan"""
    try:
        steps = load_steps(steps_path)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"❌ Could not read steps from {steps_path}: {e}", file=sys.stderr)
        return 1

    try:
        plan = await get_plan_assembler().build(steps, address, now=now)
    except ZetaYieldError as e:
        print(json.dumps(e.as_dict(), indent=2), file=sys.stderr)
        return 1

    print(json.dumps(plan.to_dict(), indent=2))
    return 0


async def cli_track(tx_hash: str, timeout: Optional[float] = None) -> int:
    """Track a bridge transaction and print the result"""
    print(f"🔍 Tracking {tx_hash}...", file=sys.stderr)
    try:
        result = await track_cctx_status(tx_hash, timeout)
    except httpx.HTTPError as e:
        print(f"❌ CCTX lookup failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 2 if result.status == TrackingStatus.FAILED else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ZetaYield CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--log-format", default=None, choices=["json", "console", "auto"], help="Override LOG_FORMAT")
    subparsers = parser.add_subparsers(dest="command")

    prepare_parser = subparsers.add_parser("prepare", help="Compile strategy steps into transactions")
    prepare_parser.add_argument("--address", required=True, help="Wallet address that will sign")
    prepare_parser.add_argument("--steps", required=True, type=Path, help="JSON file with strategy steps")
    prepare_parser.add_argument("--now", type=float, default=None, help="Unix time used for the swap deadline")

    track_parser = subparsers.add_parser("track", help="Track a bridge transaction on ZetaChain")
    track_parser.add_argument("hash", help="Inbound transaction hash")
    track_parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait (minimum 10)")

    return parser


async def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.log_level, args.log_format)

    if args.command == "prepare":
        return await cli_prepare(args.address, args.steps, args.now)

    if args.command == "track":
        return await cli_track(args.hash, args.timeout)

    print(f"❌ Unknown command: {args.command}", file=sys.stderr)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
