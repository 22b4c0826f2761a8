"""liquidity.engines.registry

Two layers:

- the catalog: `@register("id", tier=...)` on engine classes, plus module
  auto-discovery (import liquidity.engines.* to trigger decorators)
- `EngineRegistry`: an explicit, injectable set of runtimes for one process

Execution order is tier first, registration order inside a tier, then a
depth-first pass so every dependency runs before the engines that need it.
"""

from __future__ import annotations

import importlib
import pkgutil
import time
from collections.abc import Callable, Iterator
from typing import Any

from liquidity.core.config import Config, RuntimeConfig
from liquidity.core.exceptions import RegistryError
from liquidity.core.types import Tier
from liquidity.engines.base import Engine, EngineContext
from liquidity.engines.runtime import EngineRuntime

_CATALOG: dict[str, type[Any]] = {}
_DISCOVERED = False
_INFRA_MODULES = ("base", "events", "registry", "runtime", "projections")


def register(engine_id: str, *, tier: Tier, name: str | None = None) -> Callable[[type[Any]], type[Any]]:
    def _decorator(cls: type[Any]) -> type[Any]:
        if engine_id in _CATALOG and _CATALOG[engine_id] is not cls:
            raise RegistryError(f"engine already registered: {engine_id}")

        setattr(cls, "id", engine_id)
        setattr(cls, "tier", Tier(tier))
        setattr(cls, "name", name or getattr(cls, "name", None) or engine_id)
        _CATALOG[engine_id] = cls
        return cls

    return _decorator


def discover() -> None:
    global _DISCOVERED
    if _DISCOVERED:
        return

    pkg_name = "liquidity.engines"
    pkg = importlib.import_module(pkg_name)

    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{pkg_name}."):
        if m.name.rsplit(".", 1)[-1] in _INFRA_MODULES:
            continue
        importlib.import_module(m.name)

    _DISCOVERED = True


def get_engine_class(engine_id: str) -> type[Any]:
    if engine_id not in _CATALOG:
        discover()
    if engine_id not in _CATALOG:
        raise RegistryError(f"unknown engine: {engine_id}")
    return _CATALOG[engine_id]


def list_engines() -> list[str]:
    discover()
    return list(_CATALOG)


class EngineRegistry:
    """Ordered set of engine runtimes. Built once, handed to the orchestrator."""

    def __init__(self) -> None:
        self._runtimes: dict[str, EngineRuntime] = {}

    def __len__(self) -> int:
        return len(self._runtimes)

    def __contains__(self, engine_id: object) -> bool:
        return engine_id in self._runtimes

    def __iter__(self) -> Iterator[EngineRuntime]:
        return iter(self._runtimes.values())

    def ids(self) -> list[str]:
        return list(self._runtimes)

    def register(
        self,
        engine: Engine,
        config: RuntimeConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> EngineRuntime:
        if engine.id in self._runtimes:
            raise RegistryError(f"engine already registered: {engine.id}")
        runtime = EngineRuntime(engine, config, clock=clock)
        self._runtimes[engine.id] = runtime
        return runtime

    def get(self, engine_id: str) -> EngineRuntime:
        try:
            return self._runtimes[engine_id]
        except KeyError:
            raise RegistryError(f"unknown engine: {engine_id}") from None

    def execution_order(self) -> list[EngineRuntime]:
        tiered = sorted(
            enumerate(self._runtimes.values()),
            key=lambda pair: (int(pair[1].engine.tier), pair[0]),
        )

        ordered: list[EngineRuntime] = []
        done: set[str] = set()
        visiting: set[str] = set()

        def visit(runtime: EngineRuntime) -> None:
            engine_id = runtime.engine_id
            if engine_id in done:
                return
            if engine_id in visiting:
                raise RegistryError(f"circular dependency detected at {engine_id}")
            visiting.add(engine_id)
            for dep in runtime.engine.dependencies:
                if dep not in self._runtimes:
                    raise RegistryError(f"dependency {dep} not found for {engine_id}")
                visit(self._runtimes[dep])
            visiting.discard(engine_id)
            done.add(engine_id)
            ordered.append(runtime)

        for _, runtime in tiered:
            visit(runtime)
        return ordered

    def shutdown(self) -> None:
        for runtime in self._runtimes.values():
            runtime.shutdown()

    @classmethod
    def from_catalog(
        cls,
        ctx: EngineContext,
        config: Config,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> EngineRegistry:
        discover()
        registry = cls()
        for engine_id, engine_cls in _CATALOG.items():
            if not config.is_enabled(engine_id):
                ctx.logger.info("engine_disabled", extra={"engine_id": engine_id})
                continue
            registry.register(engine_cls(ctx), config.runtime_for(engine_id), clock=clock)
        return registry


def _reset_for_tests() -> None:
    """Clear the catalog and unload engine modules so decorators can re-run."""

    import sys

    global _DISCOVERED
    _CATALOG.clear()
    _DISCOVERED = False

    for key in list(sys.modules.keys()):
        if not key.startswith("liquidity.engines."):
            continue
        if key.rsplit(".", 1)[-1] in _INFRA_MODULES:
            continue
        sys.modules.pop(key, None)
