"""
Tests for per-step calldata compilation.
"""

from decimal import Decimal

import pytest
from eth_abi import decode

from zetayield.core.chains import ZERO_ADDRESS, ChainTag, contracts_for, resolve_zrc20
from zetayield.core.chains import abi
from zetayield.core.compiler import (
    CompileContext,
    FusionPlan,
    StepCompiler,
    TransactionType,
    to_base_units,
)
from zetayield.core.errors import (
    MalformedStep,
    RpcReadFailure,
    UnsupportedAsset,
    UnsupportedChain,
    UnsupportedStep,
)
from zetayield.types import StrategyStep


SENDER = "0x1234567890abcdef1234567890abcdef12345678"
GAS_TOKEN = "0x" + "ab" * 20
DEADLINE = 1_700_001_200

ETH_ZRC20 = resolve_zrc20("ETH.ETHSEP").address
BNB_ZRC20 = resolve_zrc20("BNB.BSC").address
ZETA_GATEWAY = contracts_for(ChainTag.ZETACHAIN).gateway
ROUTER = contracts_for(ChainTag.ZETACHAIN).router


class FakeGasFeeReader:
    """Returns a fixed withdrawGasFee() answer and records lookups."""

    def __init__(self, gas_token=GAS_TOKEN, fee=21_000_000_000_000):
        self.gas_token = gas_token
        self.fee = fee
        self.calls = []

    async def withdraw_gas_fee(self, zrc20_address):
        self.calls.append(zrc20_address)
        return (self.gas_token or zrc20_address), self.fee


def make_step(**overrides) -> StrategyStep:
    payload = {
        "id": "step-1",
        "type": "bridge",
        "fromChain": "ETH",
        "toChain": "ZetaChain",
        "asset": "ETH",
        "amount": "0.01",
    }
    payload.update(overrides)
    return StrategyStep.model_validate(payload)


def make_context(fusion=None) -> CompileContext:
    return CompileContext(sender=SENDER, deadline=DEADLINE, fusion=fusion or FusionPlan())


def decode_args(tx, types):
    return decode(types, bytes.fromhex(tx.data[10:]))


@pytest.mark.asyncio
async def test_bridge_eth_is_a_single_gateway_deposit():
    compiler = StepCompiler(FakeGasFeeReader())

    txs = await compiler.compile(make_step(), make_context())

    assert len(txs) == 1
    tx = txs[0]
    assert tx.chain_id == 11155111
    assert tx.to == contracts_for(ChainTag.ETH).gateway
    assert tx.value == 10**16
    assert tx.to_dict()["value"] == "0x2386f26fc10000"
    assert tx.tx_type == TransactionType.BRIDGE
    assert tx.description == "Bridge 0.01 ETH to ZetaChain"
    assert tx.data.startswith(abi.selector(abi.GATEWAY_EVM_DEPOSIT))

    receiver, revert = decode_args(tx, ["address", "(address,bool,address,bytes,uint256)"])
    assert receiver.lower() == SENDER
    assert revert[0].lower() == SENDER
    assert revert[1:] == (False, ZERO_ADDRESS, b"", 200_000)


@pytest.mark.asyncio
async def test_bridge_from_bsc_uses_bsc_gateway():
    compiler = StepCompiler(FakeGasFeeReader())

    txs = await compiler.compile(make_step(fromChain="BSC", asset="BNB", amount="0.5"), make_context())

    assert txs[0].chain_id == 97
    assert txs[0].to == contracts_for(ChainTag.BSC).gateway
    assert txs[0].value == 5 * 10**17


@pytest.mark.asyncio
async def test_bridge_out_of_zetachain_is_unsupported():
    compiler = StepCompiler(FakeGasFeeReader())

    with pytest.raises(UnsupportedStep) as excinfo:
        await compiler.compile(make_step(fromChain="ZetaChain", toChain="ETH"), make_context())
    assert excinfo.value.step_id == "step-1"


@pytest.mark.asyncio
async def test_bridge_of_non_native_asset_is_unsupported():
    compiler = StepCompiler(FakeGasFeeReader())

    with pytest.raises(UnsupportedStep):
        await compiler.compile(make_step(asset="USDC"), make_context())


@pytest.mark.asyncio
async def test_solana_is_rejected_for_every_step_type():
    compiler = StepCompiler(FakeGasFeeReader())

    with pytest.raises(UnsupportedChain):
        await compiler.compile(make_step(fromChain="Solana"), make_context())
    with pytest.raises(UnsupportedChain):
        await compiler.compile(make_step(type="stake", fromChain="ZetaChain", toChain="Solana"), make_context())


@pytest.mark.asyncio
async def test_router_swap_without_batch_executor():
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(
        type="swap",
        fromChain="ZetaChain",
        toChain="ZetaChain",
        asset="ZRC20-ETH->ZRC20-BNB",
    )

    approve, swap = await compiler.compile(step, make_context())

    assert approve.to == ETH_ZRC20
    assert approve.data.startswith(abi.ERC20_APPROVE_SELECTOR)
    spender, amount = decode_args(approve, ["address", "uint256"])
    assert spender.lower() == ROUTER
    assert amount == 10**16
    assert approve.description == "Approve ZetaSwap to spend 0.01 ETH.ETHSEP"

    assert swap.to == ROUTER
    assert swap.chain_id == 7001
    assert swap.value is None
    amount_in, amount_out_min, path, recipient, deadline = decode_args(
        swap, ["uint256", "uint256", "address[]", "address", "uint256"]
    )
    assert amount_in == 10**16
    assert amount_out_min == 0
    assert [address.lower() for address in path] == [ETH_ZRC20, BNB_ZRC20]
    assert recipient.lower() == SENDER
    assert deadline == DEADLINE


@pytest.mark.asyncio
async def test_fused_swap_targets_batch_executor():
    executor = "0x" + "ee" * 20
    fusion = FusionPlan(executor=executor, swap_to_withdraw={"swap-1": "withdraw-1"})
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(
        id="swap-1",
        type="swap",
        fromChain="ZetaChain",
        toChain="ZetaChain",
        asset="ETH->BNB",
    )

    approve, batch = await compiler.compile(step, make_context(fusion))

    spender, _ = decode_args(approve, ["address", "uint256"])
    assert spender.lower() == executor
    assert batch.to == executor
    assert batch.tx_type == TransactionType.BATCH_SWAP_WITHDRAW
    assert batch.description == "Batch swap 0.01 ETH.ETHSEP to BNB.BSC and withdraw to BSC"
    token_in, token_out, amount_in, min_out, receiver, deadline = decode_args(
        batch, ["address", "address", "uint256", "uint256", "bytes", "uint256"]
    )
    assert (token_in.lower(), token_out.lower()) == (ETH_ZRC20, BNB_ZRC20)
    assert amount_in == 10**16
    assert min_out == 0
    assert receiver == bytes.fromhex(SENDER[2:])
    assert deadline == DEADLINE


@pytest.mark.asyncio
async def test_swap_of_identical_tokens_is_malformed():
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(type="swap", fromChain="ZetaChain", toChain="ZetaChain", asset="ETH->ZRC20-ETH")

    with pytest.raises(MalformedStep):
        await compiler.compile(step, make_context())


@pytest.mark.asyncio
async def test_swap_without_legs_is_malformed():
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(type="swap", fromChain="ZetaChain", toChain="ZetaChain", asset="ZRC20-ETH")

    with pytest.raises(MalformedStep):
        await compiler.compile(step, make_context())


@pytest.mark.asyncio
async def test_swap_of_unknown_token():
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(type="swap", fromChain="ZetaChain", toChain="ZetaChain", asset="DOGE->BNB")

    with pytest.raises(UnsupportedAsset):
        await compiler.compile(step, make_context())


@pytest.mark.asyncio
async def test_withdraw_with_foreign_gas_token_needs_two_approvals():
    reader = FakeGasFeeReader()
    compiler = StepCompiler(reader)
    step = make_step(type="withdraw", fromChain="ZetaChain", toChain="BSC", asset="BNB")

    gas_approve, amount_approve, withdraw = await compiler.compile(step, make_context())

    assert reader.calls == [BNB_ZRC20]

    assert gas_approve.to == GAS_TOKEN
    spender, fee = decode_args(gas_approve, ["address", "uint256"])
    assert spender.lower() == ZETA_GATEWAY
    assert fee == reader.fee

    assert amount_approve.to == BNB_ZRC20
    spender, amount = decode_args(amount_approve, ["address", "uint256"])
    assert spender.lower() == ZETA_GATEWAY
    assert amount == 10**16

    assert withdraw.to == ZETA_GATEWAY
    assert withdraw.description == "Withdraw 0.01 BNB.BSC to BSC"
    receiver, amount, zrc20, revert = decode_args(
        withdraw, ["bytes", "uint256", "address", "(address,bool,address,bytes,uint256)"]
    )
    assert receiver == bytes.fromhex(SENDER[2:])
    assert amount == 10**16
    assert zrc20.lower() == BNB_ZRC20
    assert revert[0].lower() == SENDER
    assert revert[4] == 200_000


@pytest.mark.asyncio
async def test_withdraw_paying_gas_in_same_token_skips_gas_approval():
    compiler = StepCompiler(FakeGasFeeReader(gas_token=None))
    step = make_step(type="withdraw", fromChain="ZetaChain", toChain="BSC", asset="BNB")

    txs = await compiler.compile(step, make_context())

    assert [tx.tx_type for tx in txs] == [TransactionType.APPROVE, TransactionType.WITHDRAW]


@pytest.mark.asyncio
async def test_withdraw_to_wrong_chain_is_malformed():
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(type="withdraw", fromChain="ZetaChain", toChain="ETH", asset="BNB")

    with pytest.raises(MalformedStep):
        await compiler.compile(step, make_context())


@pytest.mark.asyncio
async def test_consumed_withdraw_compiles_to_nothing():
    reader = FakeGasFeeReader()
    compiler = StepCompiler(reader)
    fusion = FusionPlan(executor="0x" + "ee" * 20, swap_to_withdraw={"swap-1": "step-1"})
    step = make_step(type="withdraw", fromChain="ZetaChain", toChain="BSC", asset="BNB")

    assert await compiler.compile(step, make_context(fusion)) == []
    assert reader.calls == []


@pytest.mark.asyncio
async def test_gas_fee_read_failure_propagates():
    class BrokenReader:
        async def withdraw_gas_fee(self, zrc20_address):
            raise RpcReadFailure("node unreachable")

    compiler = StepCompiler(BrokenReader())
    step = make_step(type="withdraw", fromChain="ZetaChain", toChain="BSC", asset="BNB")

    with pytest.raises(RpcReadFailure):
        await compiler.compile(step, make_context())


@pytest.mark.asyncio
@pytest.mark.parametrize("step_type", ["deposit", "stake"])
async def test_deposit_and_stake_have_no_encoding(step_type):
    compiler = StepCompiler(FakeGasFeeReader())
    step = make_step(type=step_type, fromChain="ZetaChain", toChain="ZetaChain", protocol="ZetaEarn")

    with pytest.raises(UnsupportedStep) as excinfo:
        await compiler.compile(step, make_context())
    assert "ZetaEarn" in excinfo.value.message


def test_to_base_units():
    assert to_base_units(Decimal("0.01"), 18, "s") == 10**16
    assert to_base_units(Decimal("1.5"), 6, "s") == 1_500_000


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("0.0000001"), Decimal("NaN")])
def test_to_base_units_rejects_lossy_or_non_positive(amount):
    with pytest.raises(MalformedStep):
        to_base_units(amount, 6, "s")
