"""
Per-step compilation of strategy steps into unsigned transactions.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Protocol, Tuple

from ...types.strategy import StepType, StrategyStep
from ..chains.registry import (
    ChainTag,
    Zrc20Token,
    chain_id_for,
    contracts_for,
    native_currency_for,
    resolve_zrc20,
)
from ..errors import MalformedStep, UnsupportedStep
from .models import FusionPlan, UnsignedTransaction
from .tx_builder import TransactionBuilder


logger = logging.getLogger(__name__)

# Router and batch executor deadlines are this far past the compilation clock.
SWAP_DEADLINE_SECONDS = 20 * 60


class GasFeeReader(Protocol):
    async def withdraw_gas_fee(self, zrc20_address: str) -> Tuple[str, int]:
        ...


@dataclass(frozen=True)
class CompileContext:
    """Everything a single step needs besides the step itself."""
    sender: str
    deadline: int
    fusion: FusionPlan


def format_amount(amount: Decimal) -> str:
    """Human form of a step amount (``Decimal('0.0100')`` -> ``'0.01'``)."""
    return format(amount.normalize(), "f")


def to_base_units(amount: Decimal, decimals: int, step_id: str) -> int:
    """Scale a human amount to integer base units, refusing lossy conversions."""
    try:
        if not amount.is_finite() or amount <= 0:
            raise MalformedStep(f"Amount must be a positive number, got {amount}", step_id=step_id)
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise MalformedStep(
                f"Amount {amount} has more than {decimals} fractional digits",
                step_id=step_id,
            )
    except InvalidOperation as exc:
        raise MalformedStep(f"Invalid amount {amount}: {exc}", step_id=step_id) from exc
    return int(scaled)


class StepCompiler:
    """
    Compiles one ``StrategyStep`` into zero or more ``UnsignedTransaction``.

    Supported encodings:
    - bridge: native deposit from ETH or BSC into ZetaChain
    - swap: ZRC20 -> ZRC20 on ZetaChain, via the router or fused with a
      withdraw through the batch executor
    - withdraw: ZRC20 from ZetaChain back to its connected chain

    Anything else raises ``UnsupportedStep``; the assembler decides whether
    that is fatal.
    """

    def __init__(self, gas_fee_reader: GasFeeReader):
        self.gas_fee_reader = gas_fee_reader

    async def compile(self, step: StrategyStep, context: CompileContext) -> List[UnsignedTransaction]:
        # Validate both endpoints first so Solana fails the same way for every step type
        chain_id_for(step.from_chain)
        chain_id_for(step.to_chain)

        if step.type == StepType.BRIDGE:
            return self._compile_bridge(step, context)
        if step.type == StepType.SWAP:
            return self._compile_swap(step, context)
        if step.type == StepType.WITHDRAW:
            return await self._compile_withdraw(step, context)

        raise UnsupportedStep(
            f"No on-chain encoding for '{step.type.value}' steps"
            + (f" ({step.protocol})" if step.protocol else ""),
            step_id=step.id,
        )

    def _compile_bridge(self, step: StrategyStep, context: CompileContext) -> List[UnsignedTransaction]:
        if step.to_chain != ChainTag.ZETACHAIN or step.from_chain == ChainTag.ZETACHAIN:
            raise UnsupportedStep(
                f"Bridging {step.from_chain.value} -> {step.to_chain.value} is not supported; "
                "only deposits from a connected chain into ZetaChain are",
                step_id=step.id,
            )

        native = native_currency_for(step.from_chain)
        if step.asset and step.asset.strip().upper() != native.symbol:
            raise UnsupportedStep(
                f"Only native {native.symbol} can be bridged from {step.from_chain.value}, got {step.asset!r}",
                step_id=step.id,
            )

        amount_wei = to_base_units(step.amount, native.decimals, step.id)
        return [
            TransactionBuilder.build_gateway_deposit(
                chain_id=chain_id_for(step.from_chain),
                gateway_address=contracts_for(step.from_chain).gateway,
                receiver=context.sender,
                amount_wei=amount_wei,
                description=f"Bridge {format_amount(step.amount)} {native.symbol} to ZetaChain",
                step_id=step.id,
            )
        ]

    def _swap_tokens(self, step: StrategyStep) -> Tuple[Zrc20Token, Zrc20Token]:
        legs = step.swap_legs
        if legs is None:
            raise MalformedStep(
                f"Swap asset must look like '<from>-><to>', got {step.asset!r}",
                step_id=step.id,
            )
        token_in = resolve_zrc20(legs[0])
        token_out = resolve_zrc20(legs[1])
        if token_in.address == token_out.address:
            raise MalformedStep(f"Swap input and output are both {token_in.symbol}", step_id=step.id)
        return token_in, token_out

    def _compile_swap(self, step: StrategyStep, context: CompileContext) -> List[UnsignedTransaction]:
        if step.from_chain != ChainTag.ZETACHAIN:
            raise UnsupportedStep(
                f"Swaps are only encoded on ZetaChain, got {step.from_chain.value}",
                step_id=step.id,
            )

        token_in, token_out = self._swap_tokens(step)
        amount_in = to_base_units(step.amount, token_in.decimals, step.id)
        chain_id = chain_id_for(ChainTag.ZETACHAIN)
        amount_label = f"{format_amount(step.amount)} {token_in.symbol}"

        if context.fusion.is_fused_swap(step.id) and context.fusion.executor:
            executor = context.fusion.executor
            return [
                TransactionBuilder.build_erc20_approve(
                    chain_id=chain_id,
                    token_address=token_in.address,
                    spender_address=executor,
                    amount=amount_in,
                    description=f"Approve batch executor to spend {amount_label}",
                    step_id=step.id,
                ),
                TransactionBuilder.build_batch_swap_and_withdraw(
                    chain_id=chain_id,
                    executor_address=executor,
                    token_in=token_in.address,
                    token_out=token_out.address,
                    amount_in=amount_in,
                    receiver=context.sender,
                    deadline=context.deadline,
                    description=(
                        f"Batch swap {amount_label} to {token_out.symbol} "
                        f"and withdraw to {token_out.foreign_chain.value}"
                    ),
                    step_id=step.id,
                ),
            ]

        router = contracts_for(ChainTag.ZETACHAIN).router
        return [
            TransactionBuilder.build_erc20_approve(
                chain_id=chain_id,
                token_address=token_in.address,
                spender_address=router,
                amount=amount_in,
                description=f"Approve ZetaSwap to spend {amount_label}",
                step_id=step.id,
            ),
            TransactionBuilder.build_router_swap(
                chain_id=chain_id,
                router_address=router,
                token_in=token_in.address,
                token_out=token_out.address,
                amount_in=amount_in,
                recipient=context.sender,
                deadline=context.deadline,
                description=f"Swap {amount_label} to {token_out.symbol} on ZetaSwap",
                step_id=step.id,
            ),
        ]

    async def _compile_withdraw(self, step: StrategyStep, context: CompileContext) -> List[UnsignedTransaction]:
        if step.from_chain != ChainTag.ZETACHAIN:
            raise UnsupportedStep(
                f"Withdrawals are only encoded from ZetaChain, got {step.from_chain.value}",
                step_id=step.id,
            )

        token = resolve_zrc20(step.asset)
        if token.foreign_chain != step.to_chain:
            raise MalformedStep(
                f"{token.symbol} withdraws to {token.foreign_chain.value}, not {step.to_chain.value}",
                step_id=step.id,
            )

        amount = to_base_units(step.amount, token.decimals, step.id)

        if context.fusion.is_consumed(step.id):
            logger.debug("Withdraw step %s is fused into a batch swap", step.id)
            return []

        chain_id = chain_id_for(ChainTag.ZETACHAIN)
        gateway = contracts_for(ChainTag.ZETACHAIN).gateway
        amount_label = f"{format_amount(step.amount)} {token.symbol}"

        gas_token, gas_fee = await self.gas_fee_reader.withdraw_gas_fee(token.address)

        txs: List[UnsignedTransaction] = []
        if gas_token.lower() != token.address.lower():
            txs.append(
                TransactionBuilder.build_erc20_approve(
                    chain_id=chain_id,
                    token_address=gas_token,
                    spender_address=gateway,
                    amount=gas_fee,
                    description=f"Approve gas fee token for withdraw of {amount_label}",
                    step_id=step.id,
                )
            )

        txs.append(
            TransactionBuilder.build_erc20_approve(
                chain_id=chain_id,
                token_address=token.address,
                spender_address=gateway,
                amount=amount,
                description=f"Approve {amount_label} for withdraw",
                step_id=step.id,
            )
        )
        txs.append(
            TransactionBuilder.build_gateway_withdraw(
                chain_id=chain_id,
                gateway_address=gateway,
                zrc20_address=token.address,
                receiver=context.sender,
                amount=amount,
                description=f"Withdraw {amount_label} to {step.to_chain.value}",
                step_id=step.id,
            )
        )
        return txs
