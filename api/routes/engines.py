from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_orchestrator
from api.errors import ApiError
from api.schemas.engines import EngineDetail, EngineSummary, SystemHealth
from liquidity.brain.orchestrator import Orchestrator
from liquidity.engines.projections import dashboard_summary, detailed_view

router = APIRouter()


@router.get("/engines", response_model=list[EngineSummary])
def list_engines(orchestrator: Orchestrator = Depends(get_orchestrator)) -> list[EngineSummary]:
    return [EngineSummary(**dashboard_summary(rt)) for rt in orchestrator.registry]


@router.get("/engines/{engine_id}", response_model=EngineDetail)
def get_engine(engine_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)) -> EngineDetail:
    if engine_id not in orchestrator.registry:
        raise ApiError("engine.not_found", f"unknown engine: {engine_id}", status=404, engine_id=engine_id)
    return EngineDetail(**detailed_view(orchestrator.registry.get(engine_id)))


@router.get("/system/health", response_model=SystemHealth)
def system_health(orchestrator: Orchestrator = Depends(get_orchestrator)) -> SystemHealth:
    return SystemHealth(**orchestrator.system_health())
