"""liquidity.engines.runtime

One runtime wraps one engine and owns everything the engine should not have to
think about:

- single-flight: overlapping `execute()` calls share one in-flight attempt
- timeout: the attempt races the configured timeout; the loser is not cancelled
- caches: a keyed TTL cache for sub-results and a short-lived report cache
- metrics: success rate, consecutive failures, health score
- degradation: a failed attempt becomes a stale, low-confidence neutral report

State machine: idle -> running -> healthy | degraded | error -> running -> ...
Only `shutdown()` returns a runtime to idle, and it does so for good: an attempt
still in flight at shutdown completes for its callers but leaves no trace.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from liquidity.core.cache import TTLCache
from liquidity.core.config import RuntimeConfig
from liquidity.core.exceptions import EngineFailedError, EngineTimeoutError, LiquidityError, OrchestrationError
from liquidity.core.time import utc_now
from liquidity.core.types import EngineMetrics, EngineReport, EngineState, Signal
from liquidity.engines.base import Engine
from liquidity.engines.events import ObserverList, RuntimeEvent, RuntimeEventKind

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "execution timeout"


def compute_health_score(success_rate: float, consecutive_failures: int, hours_up: float) -> float:
    """0.4 * success rate + 0.3 * failure-streak penalty + 0.3 * uptime credit, all on 0..100."""

    streak = max(0.0, 100.0 - 20.0 * consecutive_failures)
    uptime = min(100.0, hours_up * 10.0)
    score = 0.4 * success_rate + 0.3 * streak + 0.3 * uptime
    return max(0.0, min(100.0, score))


class EngineRuntime:
    def __init__(
        self,
        engine: Engine,
        config: RuntimeConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.engine = engine
        self.config = config or RuntimeConfig()
        self.observers = ObserverList()

        self._clock = clock
        self._started_at = clock()
        self._cache = TTLCache(self.config.cache_ttl_ms, clock=clock)
        self._reports = TTLCache(self.config.report_ttl_ms, clock=clock)
        self._state = EngineState.IDLE
        self._metrics = EngineMetrics()
        self._confidence_total = 0.0
        self._inflight: asyncio.Future[EngineReport] | None = None
        self._orphans: set[asyncio.Future[EngineReport]] = set()
        self._last_report: EngineReport | None = None
        self._last_good: EngineReport | None = None
        self._closed = False

        bind = getattr(engine, "bind_cache", None)
        if callable(bind):
            bind(self.get_cache_data, self.set_cache_data)

    @property
    def engine_id(self) -> str:
        return self.engine.id

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def metrics(self) -> EngineMetrics:
        return replace(self._metrics, uptime_ms=self.uptime_ms)

    @property
    def uptime_ms(self) -> float:
        return (self._clock() - self._started_at) * 1000.0

    @property
    def last_report(self) -> EngineReport | None:
        return self._last_report

    @property
    def is_shut_down(self) -> bool:
        return self._closed

    def is_healthy(self) -> bool:
        return self._metrics.health_score > 50 and self._metrics.consecutive_failures < 3

    # ------------------------------------------------------------------ cache

    def set_cache_data(self, key: str, data: Any, ttl_ms: float | None = None) -> None:
        self._cache.set(key, data, ttl_ms=ttl_ms)

    def get_cache_data(self, key: str) -> Any | None:
        return self._cache.get(key)

    # -------------------------------------------------------------- execution

    async def execute(self, *, force: bool = False) -> EngineReport:
        """Run the engine, or join the attempt already in flight.

        With `force=False` a fresh report younger than `report_ttl_ms` is
        returned without running anything.
        """

        if self._closed:
            raise OrchestrationError(f"engine runtime is shut down: {self.engine_id}")

        if not force and self._inflight is None:
            cached = self._reports.get("report")
            if cached is not None:
                self._emit(RuntimeEventKind.CACHE_HIT, report=cached)
                return cached

        if self._inflight is None:
            task = asyncio.ensure_future(self._attempt())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, task: asyncio.Future[EngineReport]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _attempt(self) -> EngineReport:
        self._state = EngineState.RUNNING
        self._emit(RuntimeEventKind.STARTED)
        try:
            report = await self._run_with_timeout()
        except Exception as e:  # noqa: BLE001 - engine isolation boundary
            return self._on_failure(e)
        return self._on_success(report)

    async def _run_with_timeout(self) -> EngineReport:
        inner = asyncio.ensure_future(self.engine.perform_execution())
        try:
            report = await asyncio.wait_for(asyncio.shield(inner), timeout=self.config.timeout_ms / 1000.0)
        except TimeoutError:
            if inner.done():
                raise
            # The computation keeps running; its eventual outcome is discarded.
            self._orphans.add(inner)
            inner.add_done_callback(self._reap_orphan)
            raise EngineTimeoutError(TIMEOUT_MESSAGE) from None

        if not isinstance(report, EngineReport):
            raise TypeError(f"perform_execution returned {type(report).__name__}, expected EngineReport")
        if not report.success:
            raise EngineFailedError(report.errors[0] if report.errors else "engine reported failure")
        return report

    def _reap_orphan(self, task: asyncio.Future[EngineReport]) -> None:
        self._orphans.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("engine_late_failure", extra={"engine_id": self.engine_id, "error": str(exc)})

    def _on_success(self, report: EngineReport) -> EngineReport:
        if self._closed:
            return report
        m = self._metrics
        m.total_executions += 1
        m.successful_executions += 1
        m.consecutive_failures = 0
        m.last_success_at = utc_now()
        self._confidence_total += report.confidence
        m.average_confidence = self._confidence_total / m.successful_executions
        self._refresh_health()

        self._state = EngineState.HEALTHY
        self._last_report = report
        self._last_good = report
        if self.config.report_ttl_ms > 0:
            self._reports.set("report", report)
        self._emit(RuntimeEventKind.SUCCEEDED, report=report)
        return report

    def _on_failure(self, exc: Exception) -> EngineReport:
        message = str(exc) or type(exc).__name__
        if self._closed:
            return EngineReport(success=False, confidence=0.0, signal=Signal.NEUTRAL, errors=[message])
        m = self._metrics
        m.total_executions += 1
        m.consecutive_failures += 1
        self._refresh_health()

        extra = {"engine_id": self.engine_id, "error": message, "consecutive_failures": m.consecutive_failures}
        if isinstance(exc, LiquidityError):
            logger.warning("engine_execution_failed", extra=extra)
        else:
            logger.exception("engine_execution_failed", extra=extra)

        if self.config.graceful_degradation:
            report = self._degraded_report(message)
            self._state = EngineState.DEGRADED
        else:
            report = EngineReport(success=False, confidence=0.0, signal=Signal.NEUTRAL, errors=[message])
            self._state = EngineState.ERROR

        self._last_report = report
        self._emit(RuntimeEventKind.FAILED, report=report, error=message)
        return report

    def _degraded_report(self, message: str) -> EngineReport:
        if self._last_good is not None:
            data = dict(self._last_good.data)
            value = self._last_good.value
        else:
            data = dict(self.engine.fallback_data())
            value = float(getattr(self.engine, "fallback_value", 0.0))
        data["stale"] = True
        data["degraded_reason"] = message
        return EngineReport(
            success=True,
            confidence=self.config.degraded_confidence,
            signal=Signal.NEUTRAL,
            value=value,
            data=data,
            errors=[message],
        )

    def _refresh_health(self) -> None:
        m = self._metrics
        m.success_rate = m.successful_executions / m.total_executions * 100.0 if m.total_executions else 100.0
        hours_up = self.uptime_ms / 3_600_000.0
        m.health_score = compute_health_score(m.success_rate, m.consecutive_failures, hours_up)

    def _emit(self, kind: RuntimeEventKind, *, report: EngineReport | None = None, error: str | None = None) -> None:
        if not self.config.enable_events:
            return
        self.observers.emit(RuntimeEvent(kind=kind, engine_id=self.engine_id, report=report, error=error))

    def shutdown(self) -> None:
        self._closed = True
        self._cache.clear()
        self._reports.clear()
        self.observers.clear()
        self._state = EngineState.IDLE
