"""
Plan assembly: turns a full step list into an ordered transaction plan.

Compilation runs in two passes. The first decides which withdraw steps are
absorbed by a batch executor swap; the second replays the steps in their
original order and compiles each one against that decision.
"""

import logging
import time
from typing import Callable, Optional, Sequence

from ...config import settings
from ...providers.zeta_rpc import ZetaRpcProvider
from ...types.strategy import StepType, StrategyStep
from ..chains.abi import is_evm_address
from ..chains.registry import ChainTag, Zrc20Token, resolve_zrc20
from ..errors import MalformedStep, UnsupportedAsset, UnsupportedStep
from .models import CompiledPlan, FusionPlan, SkippedStep
from .step_compiler import SWAP_DEADLINE_SECONDS, CompileContext, GasFeeReader, StepCompiler


logger = logging.getLogger(__name__)


def _withdrawn_token(step: StrategyStep) -> Optional[Zrc20Token]:
    try:
        return resolve_zrc20(step.asset)
    except UnsupportedAsset:
        return None


def build_fusion_plan(steps: Sequence[StrategyStep], executor: Optional[str]) -> FusionPlan:
    """Pair each ZetaChain swap with the first later withdraw of its output.

    A withdraw matches when it withdraws the swap's output token from
    ZetaChain to that token's connected chain and no earlier swap has claimed
    it. Withdraws whose asset does not resolve are never claimed. Nothing is
    fused when no batch executor is configured.
    """
    plan = FusionPlan(executor=executor)
    if not executor:
        return plan

    claimed = set()
    for index, step in enumerate(steps):
        if step.type != StepType.SWAP or step.from_chain != ChainTag.ZETACHAIN:
            continue
        legs = step.swap_legs
        if legs is None:
            continue
        try:
            token_out = resolve_zrc20(legs[1])
        except UnsupportedAsset:
            # surfaced by the compile pass
            continue

        for candidate in steps[index + 1:]:
            if (
                candidate.type != StepType.WITHDRAW
                or candidate.from_chain != ChainTag.ZETACHAIN
                or candidate.to_chain != token_out.foreign_chain
                or candidate.id in claimed
            ):
                continue
            withdrawn = _withdrawn_token(candidate)
            if withdrawn is None or withdrawn.address != token_out.address:
                continue
            plan.swap_to_withdraw[step.id] = candidate.id
            claimed.add(candidate.id)
            break

    return plan


class PlanAssembler:
    """
    Drives the step compiler across a strategy.

    Responsibilities:
    - Validate the sender and step ids
    - Build the fusion plan for the batch executor
    - Compile steps in order and concatenate their transactions
    - Either fail on or explicitly report steps with no encoding
    """

    def __init__(
        self,
        gas_fee_reader: GasFeeReader,
        *,
        batch_executor: Optional[str] = None,
        strict: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        if batch_executor and not is_evm_address(batch_executor):
            raise ValueError(f"Invalid batch executor address: {batch_executor}")
        self.compiler = StepCompiler(gas_fee_reader)
        self.batch_executor = batch_executor or None
        self.strict = strict
        self._clock = clock

    async def build(
        self,
        steps: Sequence[StrategyStep],
        address: str,
        now: Optional[float] = None,
    ) -> CompiledPlan:
        """
        Compile ``steps`` for ``address``.

        Args:
            steps: Strategy steps in execution order
            address: Sender and receiver for every leg
            now: Unix time the swap deadline is derived from (default: clock)

        Returns:
            CompiledPlan with transactions in step order

        Raises:
            CompilationError: on the first step that cannot be compiled
            RpcReadFailure: when a withdraw's gas fee lookup fails
        """
        if not is_evm_address(address):
            raise MalformedStep(f"Invalid sender address: {address!r}")

        seen = set()
        for step in steps:
            if step.id in seen:
                raise MalformedStep(f"Duplicate step id: {step.id}", step_id=step.id)
            seen.add(step.id)

        reference = self._clock() if now is None else now
        fusion = build_fusion_plan(steps, self.batch_executor)
        plan = CompiledPlan(
            address=address,
            deadline=int(reference) + SWAP_DEADLINE_SECONDS,
            fusion=fusion,
        )
        context = CompileContext(sender=address, deadline=plan.deadline, fusion=fusion)

        for step in steps:
            try:
                txs = await self.compiler.compile(step, context)
            except UnsupportedStep as exc:
                if self.strict:
                    raise
                logger.warning("Skipping step %s: %s", step.id, exc.message)
                plan.skipped_steps.append(SkippedStep(step_id=step.id, reason=exc.message))
                continue
            plan.transactions.extend(txs)

        logger.info(
            "Compiled %d transactions from %d steps for %s (fused=%d, skipped=%d)",
            len(plan.transactions),
            len(steps),
            address,
            len(fusion.swap_to_withdraw),
            len(plan.skipped_steps),
        )
        return plan


# Singleton instance
_assembler: Optional[PlanAssembler] = None


def get_plan_assembler() -> PlanAssembler:
    """Get the singleton plan assembler configured from settings."""
    global _assembler
    if _assembler is None:
        _assembler = PlanAssembler(
            ZetaRpcProvider(),
            batch_executor=settings.zetachain_batch_executor,
            strict=settings.strict_step_support,
        )
    return _assembler

