"""
Tests for whole-strategy plan assembly, including swap+withdraw fusion.
"""

import logging

import pytest

from zetayield.core.chains import resolve_zrc20
from zetayield.core.compiler import PlanAssembler, TransactionType, build_fusion_plan
from zetayield.core.errors import MalformedStep, UnsupportedAsset, UnsupportedChain, UnsupportedStep
from zetayield.types import StrategyStep


SENDER = "0x1234567890abcdef1234567890abcdef12345678"
EXECUTOR = "0x" + "ee" * 20
NOW = 1_700_000_000


class FakeGasFeeReader:
    def __init__(self):
        self.calls = []

    async def withdraw_gas_fee(self, zrc20_address):
        self.calls.append(zrc20_address)
        return "0x" + "ab" * 20, 1000


def step(step_id, step_type, from_chain, to_chain, asset, amount="0.01"):
    return StrategyStep.model_validate({
        "id": step_id,
        "type": step_type,
        "fromChain": from_chain,
        "toChain": to_chain,
        "asset": asset,
        "amount": amount,
    })


def yield_strategy():
    return [
        step("bridge-1", "bridge", "ETH", "ZetaChain", "ETH"),
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ZRC20-ETH->ZRC20-BNB"),
        step("withdraw-1", "withdraw", "ZetaChain", "BSC", "ZRC20-BNB"),
    ]


@pytest.mark.asyncio
async def test_plan_without_batch_executor_keeps_every_step():
    reader = FakeGasFeeReader()
    assembler = PlanAssembler(reader)

    plan = await assembler.build(yield_strategy(), SENDER, now=NOW)

    assert [tx.tx_type for tx in plan.transactions] == [
        TransactionType.BRIDGE,
        TransactionType.APPROVE,
        TransactionType.SWAP,
        TransactionType.APPROVE,
        TransactionType.APPROVE,
        TransactionType.WITHDRAW,
    ]
    assert [tx.step_id for tx in plan.transactions] == [
        "bridge-1", "swap-1", "swap-1", "withdraw-1", "withdraw-1", "withdraw-1",
    ]
    assert plan.deadline == NOW + 1200
    assert plan.fusion.swap_to_withdraw == {}
    assert reader.calls == [resolve_zrc20("BNB").address]


@pytest.mark.asyncio
async def test_batch_executor_fuses_swap_with_later_withdraw():
    reader = FakeGasFeeReader()
    assembler = PlanAssembler(reader, batch_executor=EXECUTOR)

    plan = await assembler.build(yield_strategy(), SENDER, now=NOW)

    assert [tx.tx_type for tx in plan.transactions] == [
        TransactionType.BRIDGE,
        TransactionType.APPROVE,
        TransactionType.BATCH_SWAP_WITHDRAW,
    ]
    assert plan.transactions[2].to == EXECUTOR
    assert plan.to_dict()["fusedSteps"] == {"swap-1": "withdraw-1"}
    assert reader.calls == []


@pytest.mark.asyncio
async def test_withdraw_to_other_chain_is_not_fused():
    assembler = PlanAssembler(FakeGasFeeReader(), batch_executor=EXECUTOR)
    steps = [
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ETH->BNB"),
        step("withdraw-eth", "withdraw", "ZetaChain", "ETH", "ETH"),
    ]

    plan = await assembler.build(steps, SENDER, now=NOW)

    assert plan.fusion.swap_to_withdraw == {}
    assert plan.transactions[1].tx_type == TransactionType.SWAP
    assert plan.transactions[-1].tx_type == TransactionType.WITHDRAW


def test_fusion_only_looks_forward_and_claims_each_withdraw_once():
    steps = [
        step("withdraw-0", "withdraw", "ZetaChain", "BSC", "BNB"),
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ETH->BNB"),
        step("swap-2", "swap", "ZetaChain", "ZetaChain", "ETH->BNB"),
        step("withdraw-1", "withdraw", "ZetaChain", "BSC", "BNB"),
    ]

    fusion = build_fusion_plan(steps, EXECUTOR)

    assert fusion.swap_to_withdraw == {"swap-1": "withdraw-1"}
    assert fusion.consumed == {"withdraw-1"}
    assert build_fusion_plan(steps, None).swap_to_withdraw == {}


def test_fusion_requires_withdraw_of_swap_output():
    steps = [
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ZRC20-ETH->ZRC20-BNB"),
        step("withdraw-eth", "withdraw", "ZetaChain", "BSC", "ZRC20-ETH"),
        step("withdraw-bnb", "withdraw", "ZetaChain", "BSC", "ZRC20-BNB"),
    ]

    fusion = build_fusion_plan(steps, EXECUTOR)

    assert fusion.swap_to_withdraw == {"swap-1": "withdraw-bnb"}
    assert fusion.consumed == {"withdraw-bnb"}


@pytest.mark.asyncio
@pytest.mark.parametrize("executor", [None, EXECUTOR])
async def test_withdraw_to_wrong_chain_fails_with_or_without_executor(executor):
    assembler = PlanAssembler(FakeGasFeeReader(), batch_executor=executor)
    steps = [
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ZRC20-ETH->ZRC20-BNB"),
        step("withdraw-1", "withdraw", "ZetaChain", "BSC", "ZRC20-ETH"),
    ]

    with pytest.raises(MalformedStep) as excinfo:
        await assembler.build(steps, SENDER, now=NOW)
    assert excinfo.value.step_id == "withdraw-1"


@pytest.mark.asyncio
async def test_unknown_withdraw_asset_is_never_fused():
    assembler = PlanAssembler(FakeGasFeeReader(), batch_executor=EXECUTOR)
    steps = [
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ETH->BNB"),
        step("withdraw-1", "withdraw", "ZetaChain", "BSC", "DOGE"),
    ]

    assert build_fusion_plan(steps, EXECUTOR).swap_to_withdraw == {}
    with pytest.raises(UnsupportedAsset):
        await assembler.build(steps, SENDER, now=NOW)


@pytest.mark.asyncio
async def test_fused_withdraw_amount_is_still_validated():
    assembler = PlanAssembler(FakeGasFeeReader(), batch_executor=EXECUTOR)
    steps = [
        step("swap-1", "swap", "ZetaChain", "ZetaChain", "ETH->BNB"),
        step("withdraw-1", "withdraw", "ZetaChain", "BSC", "BNB", amount="0"),
    ]

    with pytest.raises(MalformedStep) as excinfo:
        await assembler.build(steps, SENDER, now=NOW)
    assert excinfo.value.step_id == "withdraw-1"


@pytest.mark.asyncio
async def test_compilation_is_deterministic_for_a_fixed_clock():
    assembler = PlanAssembler(FakeGasFeeReader(), batch_executor=EXECUTOR)

    first = await assembler.build(yield_strategy(), SENDER, now=NOW)
    second = await assembler.build(yield_strategy(), SENDER, now=NOW)

    assert first.to_dict() == second.to_dict()


@pytest.mark.asyncio
async def test_injected_clock_sets_deadline():
    assembler = PlanAssembler(FakeGasFeeReader(), clock=lambda: 1000.7)

    plan = await assembler.build(yield_strategy()[:1], SENDER)

    assert plan.deadline == 2200


@pytest.mark.asyncio
async def test_unsupported_step_fails_whole_plan_in_strict_mode():
    assembler = PlanAssembler(FakeGasFeeReader())
    steps = yield_strategy() + [step("stake-1", "stake", "ZetaChain", "ZetaChain", "ZETA")]

    with pytest.raises(UnsupportedStep) as excinfo:
        await assembler.build(steps, SENDER, now=NOW)
    assert excinfo.value.step_id == "stake-1"


@pytest.mark.asyncio
async def test_lenient_mode_reports_skipped_steps(caplog):
    assembler = PlanAssembler(FakeGasFeeReader(), strict=False)
    steps = [
        step("deposit-1", "deposit", "ZetaChain", "ZetaChain", "ZETA"),
        step("bridge-1", "bridge", "ETH", "ZetaChain", "ETH"),
    ]

    with caplog.at_level(logging.WARNING):
        plan = await assembler.build(steps, SENDER, now=NOW)

    assert len(plan.transactions) == 1
    assert [skipped.step_id for skipped in plan.skipped_steps] == ["deposit-1"]
    assert plan.to_dict()["skippedSteps"][0]["stepId"] == "deposit-1"
    assert "deposit-1" in caplog.text


@pytest.mark.asyncio
async def test_unsupported_chain_is_fatal_even_when_lenient():
    assembler = PlanAssembler(FakeGasFeeReader(), strict=False)

    with pytest.raises(UnsupportedChain):
        await assembler.build([step("b", "bridge", "Solana", "ZetaChain", "SOL")], SENDER, now=NOW)


@pytest.mark.asyncio
async def test_invalid_sender_address():
    assembler = PlanAssembler(FakeGasFeeReader())

    with pytest.raises(MalformedStep):
        await assembler.build(yield_strategy(), "not-an-address", now=NOW)


@pytest.mark.asyncio
async def test_duplicate_step_ids():
    assembler = PlanAssembler(FakeGasFeeReader())
    steps = [
        step("dup", "bridge", "ETH", "ZetaChain", "ETH"),
        step("dup", "bridge", "BSC", "ZetaChain", "BNB"),
    ]

    with pytest.raises(MalformedStep):
        await assembler.build(steps, SENDER, now=NOW)


def test_invalid_batch_executor_address():
    with pytest.raises(ValueError):
        PlanAssembler(FakeGasFeeReader(), batch_executor="0x1234")
