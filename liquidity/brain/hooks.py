"""liquidity.brain.hooks

Pre/post run hooks.

The orchestrator is a coordinator. Hooks are where integration lives:
persisting master signals, alerting, exporting.
"""

from __future__ import annotations

from dataclasses import dataclass

from liquidity.core.types import OrchestrationResult


@dataclass
class PreRunContext:
    run_id: str
    engine_ids: list[str]
    force: bool


@dataclass
class PostRunContext:
    run_id: str
    result: OrchestrationResult


class OrchestratorHooks:
    def pre_run(self, ctx: PreRunContext) -> None:
        return None

    def post_run(self, ctx: PostRunContext) -> None:
        return None
