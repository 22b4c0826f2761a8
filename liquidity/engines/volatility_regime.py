"""liquidity.engines.volatility_regime

Volatility regime from the VIX level and how spiky its recent history is.

Runs after the momentum and credit engines so that a provider outage shows up
there first.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.engines.base import BaseEngine
from liquidity.engines.registry import register
from liquidity.statistics import OutlierMethod, analyze_distribution, detect_outliers, zscore

SERIES_ID = "VIXCLS"
CALM_LEVEL = 15.0
STRESS_LEVEL = 25.0
SPIKE_WINDOW = 20


@register("volatility-regime", tier=Tier.SYNTHESIS, name="Volatility Regime")
class VolatilityRegimeEngine(BaseEngine):
    dependencies = ("momentum", "credit-stress")

    async def perform_execution(self) -> EngineReport:
        vix = await self.series(SERIES_ID)
        last = vix[-1]
        dist = analyze_distribution(vix)
        z = zscore(last, dist.mean, dist.std)
        spikes = detect_outliers(vix[-SPIKE_WINDOW:], OutlierMethod.MAD).outliers

        if last >= STRESS_LEVEL or z > 1.5:
            signal = Signal.BEARISH
        elif last <= CALM_LEVEL and not spikes:
            signal = Signal.BULLISH
        else:
            signal = Signal.NEUTRAL

        confidence = min(90.0, 55.0 + 15.0 * abs(z)) - 5.0 * len(spikes)
        return self.report(
            signal=signal,
            confidence=confidence,
            value=max(-3.0, min(3.0, -z)),
            data={"vix": last, "vix_z": round(z, 4), "recent_spikes": len(spikes), "skewness": round(dist.skewness, 4)},
        )

    def fallback_data(self) -> dict[str, Any]:
        return {"vix": None, "vix_z": 0.0, "recent_spikes": 0, "skewness": 0.0}
