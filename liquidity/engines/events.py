"""liquidity.engines.events

Runtime lifecycle events and the observer list that receives them.

Observers are called synchronously, in subscription order. An observer that
raises is logged and skipped; it never changes an engine's outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from liquidity.core.time import utc_now
from liquidity.core.types import EngineReport

logger = logging.getLogger(__name__)


class RuntimeEventKind(StrEnum):
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CACHE_HIT = "cache_hit"


@dataclass(frozen=True, slots=True)
class RuntimeEvent:
    kind: RuntimeEventKind
    engine_id: str
    report: EngineReport | None = None
    error: str | None = None
    ts: datetime = field(default_factory=utc_now)


Observer = Callable[[RuntimeEvent], None]


class ObserverList:
    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def __len__(self) -> int:
        return len(self._observers)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Add an observer; returns a callable that removes it again."""

        self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def clear(self) -> None:
        self._observers.clear()

    def emit(self, event: RuntimeEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:  # noqa: BLE001 - observer isolation boundary
                logger.exception("runtime_observer_failed", extra={"engine_id": event.engine_id, "kind": str(event.kind)})
