from __future__ import annotations

import asyncio

import pytest

from liquidity.core.config import RuntimeConfig
from liquidity.core.exceptions import OrchestrationError, ProviderError
from liquidity.core.types import EngineReport, EngineState, Signal
from liquidity.engines.events import RuntimeEventKind
from liquidity.engines.runtime import EngineRuntime, compute_health_score
from tests.unit._engines import FakeClock, StubEngine


def _cfg(**kw) -> RuntimeConfig:
    base = {"report_ttl_ms": 0}
    base.update(kw)
    return RuntimeConfig(**base)


def test_health_score_formula() -> None:
    assert compute_health_score(100.0, 0, 0.0) == pytest.approx(70.0)
    assert compute_health_score(100.0, 0, 10.0) == pytest.approx(100.0)
    assert compute_health_score(50.0, 2, 1.0) == pytest.approx(0.4 * 50 + 0.3 * 60 + 0.3 * 10)
    assert compute_health_score(0.0, 10, 0.0) == 0.0


@pytest.mark.anyio
async def test_concurrent_calls_share_one_execution() -> None:
    engine = StubEngine("a", delay=0.05)
    rt = EngineRuntime(engine, _cfg())

    first, second = await asyncio.gather(rt.execute(), rt.execute())

    assert engine.calls == 1
    assert first is second
    assert rt.metrics.total_executions == 1


@pytest.mark.anyio
async def test_sequential_calls_execute_again() -> None:
    engine = StubEngine("a")
    rt = EngineRuntime(engine, _cfg())
    await rt.execute()
    await rt.execute()
    assert engine.calls == 2


@pytest.mark.anyio
async def test_success_updates_metrics_and_state() -> None:
    clock = FakeClock()
    engine = StubEngine("a", confidence=80.0)
    rt = EngineRuntime(engine, _cfg(), clock=clock)
    assert rt.state is EngineState.IDLE

    r = await rt.execute()

    assert r.success
    assert rt.state is EngineState.HEALTHY
    m = rt.metrics
    assert m.total_executions == 1
    assert m.success_rate == 100.0
    assert m.consecutive_failures == 0
    assert m.average_confidence == 80.0
    assert m.health_score == pytest.approx(70.0)
    assert m.last_success_at is not None
    assert rt.is_healthy()


@pytest.mark.anyio
async def test_timeout_produces_degraded_report_with_fallback() -> None:
    engine = StubEngine("slow", delay=0.5)
    rt = EngineRuntime(engine, _cfg(timeout_ms=20))

    r = await rt.execute()

    assert r.success is True
    assert r.confidence == 25
    assert r.signal is Signal.NEUTRAL
    assert r.data["stale"] is True
    assert r.data["fallback"] is True
    assert r.errors == ["execution timeout"]
    assert r.is_degraded
    assert rt.state is EngineState.DEGRADED
    assert rt.metrics.consecutive_failures == 1


@pytest.mark.anyio
async def test_degraded_report_reuses_last_good_data() -> None:
    engine = StubEngine("a", value=1.5, data={"level": 42})
    rt = EngineRuntime(engine, _cfg())
    await rt.execute()

    engine.fail = ProviderError("upstream 503")
    r = await rt.execute()

    assert r.data["level"] == 42
    assert r.data["stale"] is True
    assert r.data["degraded_reason"] == "upstream 503"
    assert r.value == 1.5
    assert r.errors == ["upstream 503"]


@pytest.mark.anyio
async def test_hard_error_when_degradation_disabled() -> None:
    engine = StubEngine("a", fail=ValueError("boom"))
    rt = EngineRuntime(engine, _cfg(graceful_degradation=False))

    r = await rt.execute()

    assert r.success is False
    assert r.confidence == 0
    assert r.errors == ["boom"]
    assert rt.state is EngineState.ERROR


@pytest.mark.anyio
async def test_failure_streak_lowers_health_and_resets_on_success() -> None:
    engine = StubEngine("a", fail=ProviderError("down"))
    rt = EngineRuntime(engine, _cfg(), clock=FakeClock())

    for _ in range(3):
        await rt.execute()
    m = rt.metrics
    assert m.consecutive_failures == 3
    assert m.success_rate == 0.0
    assert m.health_score == pytest.approx(0.3 * 40)
    assert not rt.is_healthy()

    engine.fail = None
    await rt.execute()
    m = rt.metrics
    assert m.consecutive_failures == 0
    assert m.success_rate == pytest.approx(25.0)
    assert rt.state is EngineState.HEALTHY


@pytest.mark.anyio
async def test_report_cache_serves_fresh_report_until_forced() -> None:
    clock = FakeClock()
    engine = StubEngine("a")
    rt = EngineRuntime(engine, _cfg(report_ttl_ms=1000), clock=clock)
    seen: list[RuntimeEventKind] = []
    rt.observers.subscribe(lambda ev: seen.append(ev.kind))

    first = await rt.execute()
    second = await rt.execute()
    assert first is second
    assert engine.calls == 1
    assert seen[-1] is RuntimeEventKind.CACHE_HIT

    await rt.execute(force=True)
    assert engine.calls == 2

    clock.advance(2.0)
    await rt.execute()
    assert engine.calls == 3


@pytest.mark.anyio
async def test_observers_receive_lifecycle_events() -> None:
    engine = StubEngine("a")
    rt = EngineRuntime(engine, _cfg())
    seen: list[tuple[str, str]] = []
    unsubscribe = rt.observers.subscribe(lambda ev: seen.append((ev.kind, ev.engine_id)))

    await rt.execute()
    engine.fail = ProviderError("x")
    await rt.execute()

    assert seen == [("started", "a"), ("succeeded", "a"), ("started", "a"), ("failed", "a")]

    unsubscribe()
    await rt.execute()
    assert len(seen) == 4


@pytest.mark.anyio
async def test_failing_observer_does_not_change_outcome() -> None:
    rt = EngineRuntime(StubEngine("a"), _cfg())

    def bad(ev) -> None:
        raise RuntimeError("observer bug")

    rt.observers.subscribe(bad)
    r = await rt.execute()
    assert r.success
    assert rt.state is EngineState.HEALTHY


def test_cache_accessors_expire_lazily() -> None:
    clock = FakeClock()
    rt = EngineRuntime(StubEngine("a"), _cfg(cache_ttl_ms=500), clock=clock)

    rt.set_cache_data("k", [1, 2])
    assert rt.get_cache_data("k") == [1, 2]
    clock.advance(0.6)
    assert rt.get_cache_data("k") is None

    rt.set_cache_data("long", 1, ttl_ms=5000)
    clock.advance(1.0)
    assert rt.get_cache_data("long") == 1


@pytest.mark.anyio
async def test_shutdown_is_final() -> None:
    rt = EngineRuntime(StubEngine("a"), _cfg())
    rt.set_cache_data("k", 1)
    rt.observers.subscribe(lambda ev: None)
    await rt.execute()

    rt.shutdown()

    assert rt.state is EngineState.IDLE
    assert rt.get_cache_data("k") is None
    assert len(rt.observers) == 0
    with pytest.raises(OrchestrationError):
        await rt.execute()


@pytest.mark.anyio
@pytest.mark.parametrize("fail", [None, ProviderError("late")])
async def test_attempt_in_flight_at_shutdown_leaves_no_trace(fail: Exception | None) -> None:
    rt = EngineRuntime(StubEngine("a", delay=0.05, fail=fail), _cfg(report_ttl_ms=60_000))
    task = asyncio.ensure_future(rt.execute())
    await asyncio.sleep(0.01)

    rt.shutdown()
    r = await task

    assert r.success is (fail is None)
    assert rt.state is EngineState.IDLE
    assert rt.last_report is None
    assert rt.metrics.total_executions == 0
    with pytest.raises(OrchestrationError):
        await rt.execute()


class RejectingEngine(StubEngine):
    reject = False

    async def perform_execution(self) -> EngineReport:
        if not self.reject:
            return await super().perform_execution()
        self.calls += 1
        return EngineReport(
            success=False,
            confidence=0.0,
            signal=Signal.BULLISH,
            value=9.0,
            data={"level": -1},
            errors=["feed rejected"],
        )


@pytest.mark.anyio
async def test_unsuccessful_report_is_treated_as_failure() -> None:
    engine = RejectingEngine("a", value=1.5, data={"level": 42})
    rt = EngineRuntime(engine, _cfg())
    await rt.execute()

    engine.reject = True
    r = await rt.execute()

    assert r.is_degraded
    assert r.signal is Signal.NEUTRAL
    assert r.value == 1.5
    assert r.data["level"] == 42
    assert r.errors == ["feed rejected"]
    assert rt.state is EngineState.DEGRADED
    m = rt.metrics
    assert m.total_executions == 2
    assert m.successful_executions == 1
    assert m.consecutive_failures == 1


def test_unsuccessful_report_requires_zero_confidence() -> None:
    with pytest.raises(ValueError):
        EngineReport(success=False, confidence=80.0, signal=Signal.BULLISH)
    assert EngineReport(success=False, confidence=0.0, signal=Signal.NEUTRAL).errors == []
