from __future__ import annotations

from fastapi import APIRouter

from api.routes import engines, health, orchestrate


def get_api_router() -> APIRouter:
    router = APIRouter()

    router.include_router(health.router, tags=["health"])
    router.include_router(orchestrate.router, tags=["orchestrate"])
    router.include_router(engines.router, tags=["engines"])

    return router
