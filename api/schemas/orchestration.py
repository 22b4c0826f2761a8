from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class OrchestrateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["orchestrate", "health"] = "orchestrate"
    force_execution: bool = Field(default=False, alias="forceExecution")


class EngineReportModel(BaseModel):
    success: bool
    confidence: float = Field(ge=0, le=100)
    signal: Literal["bullish", "bearish", "neutral"]
    value: float
    data: dict[str, Any] = {}
    errors: list[str] = []
    produced_at: datetime


class PerEngineReport(BaseModel):
    engine_id: str
    report: EngineReportModel


class EngineErrorModel(BaseModel):
    engine_id: str
    message: str


class OrchestrationResponse(BaseModel):
    engines_executed: int = Field(ge=0)
    engines_attempted: int = Field(ge=0)
    per_engine_reports: list[PerEngineReport]
    master_signal: Literal["RISK_ON", "RISK_OFF", "NEUTRAL"]
    strength: float = Field(ge=0, le=1)
    clis: float = Field(ge=1, le=10)
    consensus: float = Field(ge=0, le=1)
    conflict_level: Literal["low", "medium", "high"]
    regime: Literal["expansion", "contraction", "transition"]
    average_confidence: float
    errors: list[EngineErrorModel]
    execution_time_ms: float
    produced_at: datetime


class OrchestratorHealthResponse(BaseModel):
    status: str
    available_engine_count: int
