"""liquidity.engines.zscore

Composite z-score engine.

For each input series and each lookback window, the latest observation is
standardized against the window with outliers removed. Series where a rise
means tighter liquidity enter with a negative sign. The composite is the mean.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.engines.base import BaseEngine
from liquidity.engines.registry import register
from liquidity.statistics import OutlierConfig, OutlierMethod, analyze_distribution, zscore

# series id -> direction (+1: higher is looser liquidity)
COMPONENTS: dict[str, int] = {"WALCL": 1, "RRPONTSYD": -1, "BAMLH0A0HYM2": -1}
WINDOWS = (20, 52)
SIGNAL_THRESHOLD = 1.0


@register("zscore-composite", tier=Tier.FOUNDATION, name="Z-Score Composite")
class ZScoreCompositeEngine(BaseEngine):
    dependencies = ("data-integrity",)

    def _component_z(self, values: list[float]) -> dict[int, float]:
        out: dict[int, float] = {}
        for window in WINDOWS:
            if len(values) < window:
                continue
            dist = analyze_distribution(
                values[-window:], OutlierConfig(method=OutlierMethod.IQR, threshold=2.5, remove_outliers=True)
            )
            out[window] = zscore(values[-1], dist.clean_mean, dist.std)
        return out

    async def perform_execution(self) -> EngineReport:
        components: dict[str, dict[str, float]] = {}
        signed: list[float] = []

        for series_id, direction in COMPONENTS.items():
            values = await self.series(series_id)
            by_window = self._component_z(values)
            if not by_window:
                continue
            z = sum(by_window.values()) / len(by_window)
            components[series_id] = {f"z_{w}": round(v, 4) for w, v in by_window.items()}
            signed.append(direction * z)

        if not signed:
            composite = 0.0
        else:
            composite = sum(signed) / len(signed)

        if composite > SIGNAL_THRESHOLD:
            signal = Signal.BULLISH
        elif composite < -SIGNAL_THRESHOLD:
            signal = Signal.BEARISH
        else:
            signal = Signal.NEUTRAL

        return self.report(
            signal=signal,
            confidence=min(0.95, abs(composite) / 2.0 + 0.4) * 100.0,
            value=max(-3.0, min(3.0, composite)),
            data={"composite_z": round(composite, 4), "components": components, "windows": list(WINDOWS)},
        )

    def fallback_data(self) -> dict[str, Any]:
        return {"composite_z": 0.0, "components": {}, "windows": list(WINDOWS)}
