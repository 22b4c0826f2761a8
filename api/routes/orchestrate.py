from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_orchestrator
from api.schemas.common import ErrorResponse
from api.schemas.orchestration import OrchestrateRequest, OrchestrationResponse, OrchestratorHealthResponse
from liquidity.brain.orchestrator import Orchestrator

router = APIRouter()


@router.post(
    "/orchestrate",
    response_model=OrchestrationResponse | OrchestratorHealthResponse,
    responses={500: {"model": ErrorResponse}},
)
async def orchestrate(
    req: OrchestrateRequest | None = None,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> OrchestrationResponse | OrchestratorHealthResponse:
    req = req or OrchestrateRequest()
    if req.action == "health":
        return OrchestratorHealthResponse(**orchestrator.health())

    # OrchestrationError is mapped to 500 by the app-level handler.
    result = await orchestrator.run(force=req.force_execution)
    return OrchestrationResponse.model_validate(result.to_dict())
