"""
Minimal ABI surface for the gateway, router, ZRC20 and batch executor contracts.

Signatures are canonical Solidity types; tuples are spelled out inline so the
same string serves selector computation and ``eth_abi`` encoding.
"""

from __future__ import annotations

import re
from typing import Any, List, Sequence, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_utils import keccak, to_bytes, to_checksum_address

from .registry import REVERT_GAS_LIMIT, ZERO_ADDRESS


REVERT_OPTIONS_TYPE = "(address,bool,address,bytes,uint256)"

ERC20_APPROVE = "approve(address,uint256)"
ZRC20_WITHDRAW_GAS_FEE = "withdrawGasFee()"
GATEWAY_EVM_DEPOSIT = f"deposit(address,{REVERT_OPTIONS_TYPE})"
GATEWAY_ZEVM_WITHDRAW = f"withdraw(bytes,uint256,address,{REVERT_OPTIONS_TYPE})"
ROUTER_SWAP_EXACT_TOKENS = "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)"
BATCH_SWAP_AND_WITHDRAW = "swapAndWithdraw(address,address,uint256,uint256,bytes,uint256)"

ERC20_APPROVE_SELECTOR = "0x095ea7b3"

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_evm_address(value: str) -> bool:
    return bool(value) and bool(_EVM_ADDRESS_RE.match(value))


def selector(signature: str) -> str:
    """4-byte function selector as a 0x-prefixed hex string."""
    return "0x" + keccak(text=signature)[:4].hex()


def split_argument_types(signature: str) -> List[str]:
    """Split the argument list of a signature at top-level commas.

    ``withdraw(bytes,uint256,address,(address,bool,address,bytes,uint256))``
    yields ``["bytes", "uint256", "address", "(address,bool,address,bytes,uint256)"]``.
    """
    start = signature.index("(")
    inner = signature[start + 1:-1]
    if not inner:
        return []

    types: List[str] = []
    depth = 0
    current = ""
    for char in inner:
        if char == "," and depth == 0:
            types.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    types.append(current)
    return types


def encode_call(signature: str, args: Sequence[Any]) -> str:
    """Encode full calldata (selector + arguments) for ``signature``."""
    types = split_argument_types(signature)
    if len(types) != len(args):
        raise ValueError(f"{signature} expects {len(types)} arguments, got {len(args)}")
    if not types:
        return selector(signature)
    return selector(signature) + abi_encode(types, list(args)).hex()


def decode_result(types: Sequence[str], data: str) -> Tuple[Any, ...]:
    """Decode the hex return data of an ``eth_call``."""
    return abi_decode(list(types), to_bytes(hexstr=data))


def checksum(address: str) -> str:
    """EIP-55 form required by eth_abi for address arguments."""
    return to_checksum_address(address)


def address_bytes(address: str) -> bytes:
    """Raw 20-byte form of an address, for ``bytes receiver`` arguments."""
    return to_bytes(hexstr=address)


def revert_options(sender: str) -> Tuple[str, bool, str, bytes, int]:
    """Revert to the sender, no call-on-revert, empty message, fixed gas budget."""
    return (checksum(sender), False, ZERO_ADDRESS, b"", REVERT_GAS_LIMIT)


__all__ = [
    "ERC20_APPROVE",
    "ERC20_APPROVE_SELECTOR",
    "ZRC20_WITHDRAW_GAS_FEE",
    "GATEWAY_EVM_DEPOSIT",
    "GATEWAY_ZEVM_WITHDRAW",
    "ROUTER_SWAP_EXACT_TOKENS",
    "BATCH_SWAP_AND_WITHDRAW",
    "REVERT_OPTIONS_TYPE",
    "is_evm_address",
    "selector",
    "split_argument_types",
    "encode_call",
    "decode_result",
    "checksum",
    "address_bytes",
    "revert_options",
]
