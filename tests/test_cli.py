import json

import pytest

import cli
from zetayield.core.compiler import PlanAssembler


ADDRESS = "0x1234567890abcdef1234567890abcdef12345678"


class FakeGasFeeReader:
    async def withdraw_gas_fee(self, zrc20_address):
        return zrc20_address, 1000


@pytest.fixture
def steps_file(tmp_path):
    path = tmp_path / "steps.json"
    path.write_text(json.dumps({
        "steps": [
            {"id": "b1", "type": "bridge", "fromChain": "ETH", "toChain": "ZetaChain", "asset": "ETH", "amount": 0.01},
        ]
    }))
    return path


def test_load_steps_accepts_wrapped_list(steps_file):
    steps = cli.load_steps(steps_file)
    assert [step.id for step in steps] == ["b1"]


@pytest.mark.asyncio
async def test_prepare_prints_plan(steps_file, monkeypatch, capsys):
    assembler = PlanAssembler(FakeGasFeeReader())
    monkeypatch.setattr(cli, "get_plan_assembler", lambda: assembler)

    code = await cli.cli_prepare(ADDRESS, steps_file, now=100)

    assert code == 0
    out = capsys.readouterr().out
    plan = json.loads(out[out.index("{\n"):])
    assert plan["deadline"] == 1300
    assert plan["transactions"][0]["value"] == "0x2386f26fc10000"


@pytest.mark.asyncio
async def test_prepare_reports_compilation_errors(tmp_path, monkeypatch, capsys):
    path = tmp_path / "steps.json"
    path.write_text(json.dumps([
        {"id": "s1", "type": "stake", "fromChain": "ZetaChain", "toChain": "ZetaChain", "amount": 1},
    ]))
    monkeypatch.setattr(cli, "get_plan_assembler", lambda: PlanAssembler(FakeGasFeeReader()))

    code = await cli.cli_prepare(ADDRESS, path)

    assert code == 1
    err = capsys.readouterr().err
    assert json.loads(err[err.index("{\n"):])["category"] == "unsupported_step"


@pytest.mark.asyncio
async def test_prepare_reports_unreadable_file(tmp_path, capsys):
    code = await cli.cli_prepare(ADDRESS, tmp_path / "missing.json")

    assert code == 1
    assert "Could not read steps" in capsys.readouterr().err
