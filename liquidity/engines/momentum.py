"""liquidity.engines.momentum

Momentum engine: rate of change of the equity index, judged against its own history.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.exceptions import ValidationError
from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.engines.base import BaseEngine
from liquidity.engines.registry import register
from liquidity.statistics import mean, rolling_statistics, standard_deviation, zscore

SERIES_ID = "SP500"
ROC_LAG = 4
VOL_WINDOW = 12
Z_THRESHOLD = 0.5


def rate_of_change(values: list[float], lag: int) -> list[float]:
    return [(values[i] / values[i - lag] - 1.0) * 100.0 for i in range(lag, len(values)) if values[i - lag] != 0]


@register("momentum", tier=Tier.FOUNDATION, name="Momentum")
class MomentumEngine(BaseEngine):
    async def perform_execution(self) -> EngineReport:
        values = await self.series(SERIES_ID)
        if len(values) < ROC_LAG + VOL_WINDOW:
            raise ValidationError(f"{SERIES_ID}: need at least {ROC_LAG + VOL_WINDOW} observations")

        rocs = rate_of_change(values, ROC_LAG)
        latest = rocs[-1]
        z = zscore(latest, mean(rocs), standard_deviation(rocs))
        acceleration = rocs[-1] - rocs[-2] if len(rocs) > 1 else 0.0

        windows = list(rolling_statistics(values, VOL_WINDOW))
        recent_vol = windows[-1].std
        typical_vol = mean([w.std for w in windows])
        vol_ratio = recent_vol / typical_vol if typical_vol else 1.0

        if z > Z_THRESHOLD and acceleration >= 0:
            signal = Signal.BULLISH
        elif z < -Z_THRESHOLD and acceleration <= 0:
            signal = Signal.BEARISH
        else:
            signal = Signal.NEUTRAL

        # Choppy tape lowers conviction.
        confidence = min(90.0, 50.0 + 20.0 * abs(z)) / max(1.0, vol_ratio)

        return self.report(
            signal=signal,
            confidence=confidence,
            value=max(-3.0, min(3.0, z)),
            data={
                "roc_pct": round(latest, 4),
                "roc_z": round(z, 4),
                "acceleration": round(acceleration, 4),
                "volatility_ratio": round(vol_ratio, 4),
            },
        )

    def fallback_data(self) -> dict[str, Any]:
        return {"roc_pct": 0.0, "roc_z": 0.0, "acceleration": 0.0, "volatility_ratio": 1.0}
