from api.schemas.common import ErrorResponse
from api.schemas.engines import EngineDetail, EngineSummary, SystemHealth
from api.schemas.orchestration import (
    EngineReportModel,
    OrchestrateRequest,
    OrchestrationResponse,
    OrchestratorHealthResponse,
)

__all__ = [
    "EngineDetail",
    "EngineReportModel",
    "EngineSummary",
    "ErrorResponse",
    "OrchestrateRequest",
    "OrchestrationResponse",
    "OrchestratorHealthResponse",
    "SystemHealth",
]
