"""liquidity.engines.net_liquidity

Net liquidity = Fed balance sheet - alpha * Treasury General Account - reverse repo.

Level is read as a z-score against history; direction as the correlation of the
recent path with time.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.exceptions import ValidationError
from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.engines.base import BaseEngine
from liquidity.engines.registry import register
from liquidity.statistics import OutlierConfig, OutlierMethod, analyze_distribution, correlation, zscore

TREND_WINDOW = 13
MIN_OBSERVATIONS = 26


@register("net-liquidity", tier=Tier.CORE, name="Net Liquidity")
class NetLiquidityEngine(BaseEngine):
    dependencies = ("data-integrity",)
    alpha = 1.0

    async def net_liquidity_series(self) -> list[float]:
        walcl = await self.series("WALCL")
        tga = await self.series("WTREGEN")
        rrp = await self.series("RRPONTSYD")
        n = min(len(walcl), len(tga), len(rrp))
        if n < MIN_OBSERVATIONS:
            raise ValidationError(f"net liquidity needs {MIN_OBSERVATIONS} aligned observations, got {n}")
        return [w - self.alpha * t - r for w, t, r in zip(walcl[-n:], tga[-n:], rrp[-n:], strict=True)]

    async def perform_execution(self) -> EngineReport:
        net = await self.net_liquidity_series()
        dist = analyze_distribution(net, OutlierConfig(method=OutlierMethod.MAD))
        z = zscore(net[-1], dist.clean_mean, dist.std)

        recent = net[-TREND_WINDOW:]
        trend = correlation([float(i) for i in range(len(recent))], recent)

        if z > 0.5 and trend > 0.3:
            signal = Signal.BULLISH
        elif z < -0.5 and trend < -0.3:
            signal = Signal.BEARISH
        else:
            signal = Signal.NEUTRAL

        return self.report(
            signal=signal,
            confidence=min(95.0, 40.0 + 25.0 * abs(z) + 20.0 * abs(trend)),
            value=max(-3.0, min(3.0, z)),
            data={
                "net_liquidity": net[-1],
                "net_liquidity_z": round(z, 4),
                "trend": round(trend, 4),
                "change": net[-1] - net[-TREND_WINDOW],
                "alpha": self.alpha,
            },
        )

    def fallback_data(self) -> dict[str, Any]:
        return {"net_liquidity": None, "net_liquidity_z": 0.0, "trend": 0.0, "change": 0.0, "alpha": self.alpha}
