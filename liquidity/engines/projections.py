"""liquidity.engines.projections

Read-only views of a runtime for dashboards and drill-downs.

Pure functions of the runtime's latest report and metrics. Nothing here executes an engine.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.time import age_ms
from liquidity.core.types import Signal
from liquidity.engines.runtime import EngineRuntime


def dashboard_summary(runtime: EngineRuntime) -> dict[str, Any]:
    report = runtime.last_report
    metrics = runtime.metrics
    return {
        "engine_id": runtime.engine_id,
        "name": getattr(runtime.engine, "name", runtime.engine_id),
        "tier": int(runtime.engine.tier),
        "state": str(runtime.state),
        "signal": str(report.signal) if report else str(Signal.NEUTRAL),
        "confidence": report.confidence if report else 0.0,
        "value": report.value if report else None,
        "stale": report.is_degraded if report else False,
        "health_score": round(metrics.health_score, 2),
        "healthy": runtime.is_healthy(),
        "last_updated": report.produced_at.isoformat() if report else None,
        "age_ms": age_ms(report.produced_at) if report else None,
    }


def detailed_view(runtime: EngineRuntime) -> dict[str, Any]:
    report = runtime.last_report
    return {
        **dashboard_summary(runtime),
        "dependencies": list(runtime.engine.dependencies),
        "metrics": runtime.metrics.to_dict(),
        "config": runtime.config.model_dump(),
        "report": report.to_dict() if report else None,
    }
