"""liquidity.engines.base

Engines are the independent computation units of the system.

Each one pulls a handful of series, reduces them to a single report, and is
allowed to fail. Failure handling, caching and timing live in the runtime, not
here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from liquidity.core.config import Config
from liquidity.core.exceptions import ProviderError
from liquidity.core.metrics import MetricsRegistry
from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.providers.base import ObservationProvider


@dataclass(frozen=True, slots=True)
class EngineContext:
    """Shared context injected into every engine."""

    config: Config
    provider: ObservationProvider
    metrics: MetricsRegistry
    logger: logging.Logger


@runtime_checkable
class Engine(Protocol):
    id: str
    name: str
    tier: Tier
    dependencies: tuple[str, ...]

    async def perform_execution(self) -> EngineReport: ...

    def fallback_data(self) -> dict[str, Any]: ...


class BaseEngine(ABC):
    """Template base class.

    Subclasses implement `perform_execution()` and usually override
    `fallback_data()`. The runtime binds a cache accessor after construction so
    engines can memoize sub-results without owning a cache.
    """

    id: str
    name: str
    tier: Tier
    dependencies: tuple[str, ...] = ()
    fallback_value: float = 0.0

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx
        self._cache_get: Callable[[str], Any] = lambda key: None
        self._cache_set: Callable[..., None] = lambda key, data, ttl_ms=None: None

    def bind_cache(self, get: Callable[[str], Any], set_: Callable[..., None]) -> None:
        self._cache_get = get
        self._cache_set = set_

    @abstractmethod
    async def perform_execution(self) -> EngineReport:
        raise NotImplementedError

    def fallback_data(self) -> dict[str, Any]:
        return {}

    async def series(self, series_id: str) -> list[float]:
        """Provider read, memoized through the runtime cache."""

        key = f"series:{series_id}"
        cached = self._cache_get(key)
        if cached is not None:
            return list(cached)
        values = await self.ctx.provider.series(series_id)
        self.ctx.metrics.inc("provider_reads", engine=self.id, series=series_id)
        if not values:
            raise ProviderError(f"{series_id}: empty series")
        self._cache_set(key, list(values))
        return values

    def report(
        self,
        *,
        signal: Signal,
        confidence: float,
        value: float,
        data: dict[str, Any] | None = None,
    ) -> EngineReport:
        return EngineReport(
            success=True,
            confidence=max(0.0, min(100.0, float(confidence))),
            signal=signal,
            value=float(value),
            data=dict(data or {}),
        )
