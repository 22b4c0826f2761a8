"""liquidity.engines.credit_stress

High-yield spread stress. Wide spreads are risk-off.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.engines.base import BaseEngine
from liquidity.engines.registry import register
from liquidity.statistics import mean, percentile_rank, standard_deviation, zscore

SERIES_ID = "BAMLH0A0HYM2"


@register("credit-stress", tier=Tier.CORE, name="Credit Stress")
class CreditStressEngine(BaseEngine):
    async def perform_execution(self) -> EngineReport:
        spreads = await self.series(SERIES_ID)
        last = spreads[-1]
        z = zscore(last, mean(spreads), standard_deviation(spreads))
        rank = percentile_rank(last, spreads)

        if z > 1.0 or rank >= 80.0:
            signal = Signal.BEARISH
        elif z < -1.0 or rank <= 20.0:
            signal = Signal.BULLISH
        else:
            signal = Signal.NEUTRAL

        return self.report(
            signal=signal,
            confidence=min(95.0, 45.0 + 20.0 * abs(z)),
            value=max(-3.0, min(3.0, -z)),
            data={"spread": last, "spread_z": round(z, 4), "percentile_rank": round(rank, 2)},
        )

    def fallback_data(self) -> dict[str, Any]:
        return {"spread": None, "spread_z": 0.0, "percentile_rank": 50.0}
