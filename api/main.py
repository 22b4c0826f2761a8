from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.errors import ApiError, api_error_handler, orchestration_error_handler
from api.routes import get_api_router
from liquidity import __version__
from liquidity.core.config import Config
from liquidity.core.exceptions import OrchestrationError
from liquidity.core.logging import configure_logging


def create_app(config: Config | None = None) -> FastAPI:
    start = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = start

        # Expose config/orchestrator in app state for dependency injection + tests.
        if config is not None:
            app.state.config = getattr(app.state, "config", None) or config
        cfg = getattr(app.state, "config", None)
        if cfg is not None:
            configure_logging(cfg.logging)

        yield

        orch = getattr(app.state, "orchestrator", None)
        if orch is not None:
            orch.shutdown()

    openapi_tags = [
        {"name": "health", "description": "Liveness and version metadata."},
        {"name": "orchestrate", "description": "Trigger an orchestration run or probe the orchestrator."},
        {"name": "engines", "description": "Read-only engine projections and system health."},
    ]

    app = FastAPI(
        title="liquidity API",
        description="Engine orchestration and composite liquidity signal",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.started_at = start
    if config is not None:
        app.state.config = config

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(OrchestrationError, orchestration_error_handler)

    app.include_router(get_api_router(), prefix="/api/v1")
    return app


# Module-level app for uvicorn (e.g. `uvicorn api.main:app`).
app = create_app()
