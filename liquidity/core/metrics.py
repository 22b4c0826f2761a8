"""liquidity.core.metrics

Run-level counters and gauges, labeled by engine or series.

No exporter. The orchestrator, engines and HTTP provider write; `snapshot()`
renders `name{label=value,...}` keys for tests and operators.
"""

from __future__ import annotations

from threading import Lock

_Key = tuple[str, tuple[tuple[str, str], ...]]


def _key(name: str, labels: dict[str, object]) -> _Key:
    return name, tuple(sorted((k, str(v)) for k, v in labels.items()))


def _render(key: _Key) -> str:
    name, labels = key
    if not labels:
        return name
    return name + "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[_Key, float] = {}
        self._gauges: dict[_Key, float] = {}

    def inc(self, name: str, amount: float = 1.0, **labels: object) -> None:
        key = _key(name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0.0) + amount

    def set(self, name: str, value: float, **labels: object) -> None:
        with self._lock:
            self._gauges[_key(name, labels)] = float(value)

    def value(self, name: str, **labels: object) -> float:
        """Exact label match; counters shadow gauges of the same name. Unknown series read 0."""

        key = _key(name, labels)
        with self._lock:
            if key in self._counters:
                return self._counters[key]
            return self._gauges.get(key, 0.0)

    def total(self, name: str) -> float:
        """Counter summed over every label set."""

        with self._lock:
            return sum(v for (n, _), v in self._counters.items() if n == name)

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            data = {_render(k): v for k, v in self._counters.items()}
            data.update({_render(k): v for k, v in self._gauges.items()})
            return data
