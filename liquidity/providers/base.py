"""liquidity.providers.base

Observation providers.

A provider answers one question: what are the recent values of series X, oldest first.
Anything that goes wrong on the way is a `ProviderError`; the engine runtime turns
that into a degraded report.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from liquidity.core.config import ProviderConfig
from liquidity.core.exceptions import ConfigError, ProviderError
from liquidity.core.metrics import MetricsRegistry


@runtime_checkable
class ObservationProvider(Protocol):
    async def series(self, series_id: str) -> list[float]: ...


def coerce_series(series_id: str, raw: object) -> list[float]:
    if isinstance(raw, Mapping):
        raw = raw.get("values")
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise ProviderError(f"{series_id}: expected a list of numbers")

    out: list[float] = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise ProviderError(f"{series_id}: non-numeric observation {item!r}")
        v = float(item)
        if not math.isfinite(v):
            raise ProviderError(f"{series_id}: non-finite observation")
        out.append(v)
    return out


class StaticProvider:
    """In-memory provider. Fixtures, tests, offline runs."""

    def __init__(self, data: Mapping[str, Sequence[float]]) -> None:
        self._data = {str(k): coerce_series(str(k), v) for k, v in data.items()}

    @classmethod
    def from_json_file(cls, path: Path) -> StaticProvider:
        try:
            raw = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ProviderError(f"cannot read fixtures {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ProviderError(f"fixtures root must be an object: {path}")
        return cls(raw)

    def series_ids(self) -> list[str]:
        return sorted(self._data)

    async def series(self, series_id: str) -> list[float]:
        try:
            return list(self._data[series_id])
        except KeyError:
            raise ProviderError(f"unknown series: {series_id}") from None


def build_provider(cfg: ProviderConfig, *, metrics: MetricsRegistry | None = None) -> ObservationProvider:
    if cfg.base_url:
        from liquidity.providers.http import HttpProvider

        return HttpProvider.from_config(cfg, metrics=metrics)
    if cfg.fixtures_path is not None:
        return StaticProvider.from_json_file(cfg.fixtures_path)
    raise ConfigError("provider needs either base_url or fixtures_path")
