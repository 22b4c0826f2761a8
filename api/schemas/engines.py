from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class EngineSummary(BaseModel):
    engine_id: str
    name: str
    tier: int
    state: str
    signal: str
    confidence: float
    value: float | None = None
    stale: bool = False
    health_score: float
    healthy: bool
    last_updated: str | None = None
    age_ms: int | None = None


class EngineDetail(EngineSummary):
    dependencies: list[str] = []
    metrics: dict[str, Any]
    config: dict[str, Any]
    report: dict[str, Any] | None = None


class SystemHealth(BaseModel):
    overall_status: str
    healthy_engines: int
    total_engines: int
    average_confidence: float
