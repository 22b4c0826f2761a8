from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from api.deps import get_orchestrator
from liquidity import __version__
from liquidity.brain.orchestrator import Orchestrator

router = APIRouter()


class HealthResponse(BaseModel):
    version: str
    uptime_seconds: float
    engine_count: int


@router.get("/health", response_model=HealthResponse)
def health(request: Request, orchestrator: Orchestrator = Depends(get_orchestrator)) -> HealthResponse:
    started_at = float(getattr(request.app.state, "started_at", time.monotonic()))
    uptime = time.monotonic() - started_at

    return HealthResponse(
        version=__version__,
        uptime_seconds=uptime,
        engine_count=len(orchestrator.registry),
    )
