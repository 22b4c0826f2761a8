from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from liquidity.core.exceptions import OrchestrationError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, code: str, message: str, status: int = 400, **extra: object) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.extra = extra


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    body = {"error": {"code": exc.code, "message": exc.message, **exc.extra}}
    return JSONResponse(status_code=exc.status, content=body)


async def orchestration_error_handler(request: Request, exc: OrchestrationError) -> JSONResponse:
    logger.warning("orchestration_request_failed", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=500, content={"error": str(exc)})
