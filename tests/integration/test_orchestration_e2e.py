from __future__ import annotations

import pytest

from api.main import create_app
from liquidity.brain.orchestrator import Orchestrator
from liquidity.core.config import Config, OrchestratorConfig, RuntimeConfig
from liquidity.core.types import MasterSignal, Signal, Tier
from liquidity.engines.registry import EngineRegistry
from tests.unit._api_test_client import make_client
from tests.unit._engines import StubEngine


def _three_engines(*, graceful: bool) -> tuple[Orchestrator, StubEngine]:
    cfg = RuntimeConfig(timeout_ms=20, report_ttl_ms=0, graceful_degradation=graceful)
    slow = StubEngine("b", tier=Tier.CORE, delay=1.0)
    reg = EngineRegistry()
    reg.register(StubEngine("a", value=1.0, confidence=80.0), cfg)
    reg.register(slow, cfg)
    reg.register(StubEngine("c", tier=Tier.SYNTHESIS, value=0.5, confidence=70.0), cfg)
    return Orchestrator(reg, OrchestratorConfig(inter_engine_delay_ms=0)), slow


@pytest.mark.anyio
async def test_timed_out_engine_is_reported_and_survivors_decide() -> None:
    orch, slow = _three_engines(graceful=False)

    result = await orch.run()

    assert result.engines_executed == 2
    assert result.errors == (("b", "execution timeout"),)
    assert slow.calls == 1
    # b abstains; a and c vote
    assert result.master_signal is MasterSignal.RISK_ON
    assert result.consensus == 1.0
    assert result.clis == 6.5
    assert [eid for eid, _ in result.per_engine_reports] == ["a", "b", "c"]


@pytest.mark.anyio
async def test_timed_out_engine_degrades_to_neutral_vote() -> None:
    orch, _ = _three_engines(graceful=True)

    result = await orch.run()

    assert result.engines_executed == 2
    assert len(result.errors) == 1
    b = dict(result.per_engine_reports)["b"]
    assert b.is_degraded
    assert b.signal is Signal.NEUTRAL
    assert b.confidence == 25
    assert result.master_signal is MasterSignal.RISK_ON
    assert result.clis == 6.0
    assert result.consensus == pytest.approx(2 / 3)


@pytest.mark.anyio
async def test_fixture_backed_run_through_http(test_config: Config) -> None:
    app = create_app(test_config)
    app.state.orchestrator = Orchestrator.from_config(test_config)

    async with make_client(app) as ac:
        r = await ac.post("/api/v1/orchestrate", json={"action": "orchestrate", "forceExecution": True})
        assert r.status_code == 200
        first = r.json()
        assert first["engines_attempted"] == 6
        assert first["engines_executed"] == 6
        assert first["errors"] == []

        r = await ac.post("/api/v1/orchestrate", json={"action": "orchestrate"})
        second = r.json()

    for key in ("master_signal", "clis", "consensus", "regime", "conflict_level", "strength"):
        assert first[key] == second[key]
