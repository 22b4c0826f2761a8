"""liquidity.brain.orchestrator

The orchestrator.

"The conductor does not play the instruments."

One run:
1) pre-run hooks
2) resolve execution order (tier, registration order, dependencies)
3) execute engines one at a time, with a fixed pause between them
4) aggregate the reports into the master signal
5) metrics, post-run hooks

An engine that fails is recorded and skipped; it never aborts the run. The only
error a run raises is `OrchestrationError`.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from liquidity.brain.aggregator import aggregate
from liquidity.brain.hooks import OrchestratorHooks, PostRunContext, PreRunContext
from liquidity.core.config import Config, OrchestratorConfig
from liquidity.core.exceptions import LiquidityError, OrchestrationError
from liquidity.core.metrics import MetricsRegistry
from liquidity.core.types import EngineReport, OrchestrationResult, Signal
from liquidity.engines.base import EngineContext
from liquidity.engines.registry import EngineRegistry
from liquidity.providers.base import ObservationProvider, build_provider

logger = logging.getLogger(__name__)

HEALTHY_RATIO = 0.8
DEGRADED_RATIO = 0.5
HEALTHY_CONFIDENCE = 70.0
DEGRADED_CONFIDENCE = 40.0


def _outcome(report: EngineReport) -> str:
    if report.is_fresh_success:
        return "fresh"
    return "degraded" if report.is_degraded else "error"


class Orchestrator:
    def __init__(
        self,
        registry: EngineRegistry,
        config: OrchestratorConfig | None = None,
        *,
        hooks: OrchestratorHooks | None = None,
        metrics: MetricsRegistry | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.registry = registry
        self.config = config or OrchestratorConfig()
        self.hooks = hooks or OrchestratorHooks()
        self.metrics = metrics or MetricsRegistry()
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        provider: ObservationProvider | None = None,
        metrics: MetricsRegistry | None = None,
        hooks: OrchestratorHooks | None = None,
    ) -> Orchestrator:
        """Wire provider, engine context and catalog registry from config.

        Any wiring failure (provider, catalog, overrides) surfaces as `OrchestrationError`.
        """

        metrics = metrics or MetricsRegistry()
        try:
            ctx = EngineContext(
                config=config,
                provider=provider or build_provider(config.provider, metrics=metrics),
                metrics=metrics,
                logger=logging.getLogger("liquidity.engines"),
            )
            registry = EngineRegistry.from_catalog(ctx, config)
        except OrchestrationError:
            raise
        except LiquidityError as e:
            logger.error("orchestrator_wiring_failed", extra={"error": str(e)})
            raise OrchestrationError(str(e)) from e
        return cls(registry, config.orchestrator, hooks=hooks, metrics=metrics)

    async def run(self, *, force: bool = False) -> OrchestrationResult:
        try:
            return await self._run(force=force)
        except OrchestrationError:
            raise
        except Exception as e:
            logger.exception("orchestration_failed")
            raise OrchestrationError(str(e) or type(e).__name__) from e

    async def _run(self, *, force: bool) -> OrchestrationResult:
        run_id = str(uuid.uuid4())
        start = time.perf_counter()

        order = self.registry.execution_order()
        self.hooks.pre_run(PreRunContext(run_id=run_id, engine_ids=[r.engine_id for r in order], force=force))

        delay_s = self.config.inter_engine_delay_ms / 1000.0
        reports: list[tuple[str, EngineReport]] = []
        errors: list[tuple[str, str]] = []

        for i, runtime in enumerate(order):
            if i > 0 and delay_s > 0:
                await self._sleep(delay_s)

            engine_id = runtime.engine_id
            try:
                report = await runtime.execute(force=force)
            except Exception as e:  # noqa: BLE001 - engine isolation boundary
                logger.exception("engine_invocation_failed", extra={"run_id": run_id, "engine_id": engine_id})
                message = str(e) or type(e).__name__
                report = EngineReport(success=False, confidence=0.0, signal=Signal.NEUTRAL, errors=[message])

            reports.append((engine_id, report))
            self.metrics.inc("engine_runs", engine=engine_id, outcome=_outcome(report))
            if not report.is_fresh_success:
                errors.append((engine_id, report.errors[0] if report.errors else "engine failed"))

        agg = aggregate(reports)
        executed = sum(1 for _, r in reports if r.is_fresh_success)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        result = OrchestrationResult(
            engines_executed=executed,
            engines_attempted=len(reports),
            per_engine_reports=tuple(reports),
            master_signal=agg.master_signal,
            strength=agg.strength,
            clis=agg.clis,
            consensus=agg.consensus,
            conflict_level=agg.conflict_level,
            regime=agg.regime,
            average_confidence=agg.average_confidence,
            errors=tuple(errors),
            execution_time_ms=elapsed_ms,
        )

        self.metrics.inc("orchestrator_runs")
        self.metrics.set("orchestrator_engines_executed", executed)
        self.metrics.set("orchestrator_execution_time_ms", elapsed_ms)
        self.metrics.set("orchestrator_clis", agg.clis)
        logger.info(
            "orchestration_completed",
            extra={
                "run_id": run_id,
                "engines_executed": executed,
                "engines_attempted": len(reports),
                "master_signal": str(agg.master_signal),
                "clis": agg.clis,
                "execution_time_ms": round(elapsed_ms, 1),
            },
        )

        self.hooks.post_run(PostRunContext(run_id=run_id, result=result))
        return result

    def health(self) -> dict[str, Any]:
        return {"status": "healthy", "available_engine_count": len(self.registry)}

    def system_health(self) -> dict[str, Any]:
        runtimes = list(self.registry)
        if not runtimes:
            return {"overall_status": "healthy", "healthy_engines": 0, "total_engines": 0, "average_confidence": 0.0}

        healthy = sum(1 for r in runtimes if r.is_healthy())
        confidences = [r.last_report.confidence for r in runtimes if r.last_report is not None]
        avg_conf = sum(confidences) / len(confidences) if confidences else 0.0
        ratio = healthy / len(runtimes)

        if ratio >= HEALTHY_RATIO and avg_conf >= HEALTHY_CONFIDENCE:
            status = "healthy"
        elif ratio >= DEGRADED_RATIO and avg_conf >= DEGRADED_CONFIDENCE:
            status = "degraded"
        else:
            status = "critical"

        return {
            "overall_status": status,
            "healthy_engines": healthy,
            "total_engines": len(runtimes),
            "average_confidence": avg_conf,
        }

    def shutdown(self) -> None:
        self.registry.shutdown()
