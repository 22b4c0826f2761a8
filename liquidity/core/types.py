"""liquidity.core.types

Lightweight dataclasses for hot-path objects.

Pydantic models own IO boundaries; dataclasses keep runtime lean.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum
from typing import Any

from liquidity.core.time import utc_now


class Signal(StrEnum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class EngineState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    ERROR = "error"


class MasterSignal(StrEnum):
    RISK_ON = "RISK_ON"
    RISK_OFF = "RISK_OFF"
    NEUTRAL = "NEUTRAL"


class Regime(StrEnum):
    EXPANSION = "expansion"
    CONTRACTION = "contraction"
    TRANSITION = "transition"


class ConflictLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Tier(IntEnum):
    FOUNDATION = 1
    CORE = 2
    SYNTHESIS = 3


@dataclass(frozen=True, slots=True)
class EngineReport:
    """Output of one engine execution.

    `data` belongs to the engine. The runtime only ever writes `stale` (and the
    reason next to it) when it builds a degraded report.
    """

    success: bool
    confidence: float  # 0-100; 0 when success is False
    signal: Signal
    value: float = 0.0
    data: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    produced_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not self.success and self.confidence != 0:
            raise ValueError("an unsuccessful report must carry confidence 0")

    @property
    def is_degraded(self) -> bool:
        return self.success and self.data.get("stale") is True

    @property
    def is_fresh_success(self) -> bool:
        return self.success and not self.is_degraded

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "confidence": self.confidence,
            "signal": str(self.signal),
            "value": self.value,
            "data": dict(self.data),
            "errors": list(self.errors),
            "produced_at": self.produced_at.isoformat(),
        }


@dataclass(slots=True)
class EngineMetrics:
    total_executions: int = 0
    successful_executions: int = 0
    success_rate: float = 100.0  # 0-100
    consecutive_failures: int = 0
    average_confidence: float = 0.0
    health_score: float = 100.0  # 0-100
    uptime_ms: float = 0.0
    last_success_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_executions": self.total_executions,
            "success_rate": self.success_rate,
            "consecutive_failures": self.consecutive_failures,
            "average_confidence": self.average_confidence,
            "health_score": self.health_score,
            "uptime_ms": self.uptime_ms,
            "last_success_at": self.last_success_at.isoformat() if self.last_success_at else None,
        }


@dataclass(frozen=True, slots=True)
class OrchestrationResult:
    engines_executed: int
    engines_attempted: int
    per_engine_reports: tuple[tuple[str, EngineReport], ...]
    master_signal: MasterSignal
    strength: float
    clis: float
    consensus: float
    conflict_level: ConflictLevel
    regime: Regime
    average_confidence: float
    errors: tuple[tuple[str, str], ...]
    execution_time_ms: float
    produced_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "engines_executed": self.engines_executed,
            "engines_attempted": self.engines_attempted,
            "per_engine_reports": [
                {"engine_id": engine_id, "report": report.to_dict()} for engine_id, report in self.per_engine_reports
            ],
            "master_signal": str(self.master_signal),
            "strength": self.strength,
            "clis": self.clis,
            "consensus": self.consensus,
            "conflict_level": str(self.conflict_level),
            "regime": str(self.regime),
            "average_confidence": self.average_confidence,
            "errors": [{"engine_id": engine_id, "message": msg} for engine_id, msg in self.errors],
            "execution_time_ms": self.execution_time_ms,
            "produced_at": self.produced_at.isoformat(),
        }
