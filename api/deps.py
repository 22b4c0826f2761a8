from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi import Request

from liquidity.brain.orchestrator import Orchestrator
from liquidity.core.config import Config


@lru_cache
def _repo_root() -> Path:
    # Assume running from repo root (uvicorn started there). Fallback to parent of this file.
    here = Path(__file__).resolve()
    for p in [Path.cwd(), here.parent.parent]:
        if (p / "config" / "default.yaml").exists():
            return p
    return Path.cwd()


@lru_cache
def _load_config() -> Config:
    return Config.from_repo_defaults(_repo_root())


def get_config(request: Request) -> Config:
    cfg = getattr(request.app.state, "config", None)
    return cfg or _load_config()


def get_orchestrator(request: Request) -> Orchestrator:
    orch = getattr(request.app.state, "orchestrator", None)
    if orch is None:
        orch = Orchestrator.from_config(get_config(request))
        request.app.state.orchestrator = orch
    return orch
