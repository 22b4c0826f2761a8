"""liquidity.engines.data_integrity

Data integrity engine.

Scores how complete and well-behaved the input series are. Downstream engines
depend on it so that a broken feed is visible before anything reads it.
"""

from __future__ import annotations

from typing import Any

from liquidity.core.exceptions import ProviderError, ValidationError
from liquidity.core.types import EngineReport, Signal, Tier
from liquidity.engines.base import BaseEngine
from liquidity.engines.registry import register
from liquidity.statistics import OutlierMethod, detect_outliers

MONITORED_SERIES = ("WALCL", "WTREGEN", "RRPONTSYD", "BAMLH0A0HYM2", "VIXCLS", "SP500")
MIN_OBSERVATIONS = 20


@register("data-integrity", tier=Tier.FOUNDATION, name="Data Integrity")
class DataIntegrityEngine(BaseEngine):
    def _series_quality(self, values: list[float]) -> tuple[float, int]:
        if len(values) < MIN_OBSERVATIONS:
            return 100.0 * len(values) / MIN_OBSERVATIONS, 0
        anomalies = detect_outliers(values, OutlierMethod.MAD, threshold=5.0).outliers
        return 100.0 * (1.0 - len(anomalies) / len(values)), len(anomalies)

    async def perform_execution(self) -> EngineReport:
        per_series: dict[str, float] = {}
        missing: list[str] = []
        anomalies = 0

        for series_id in MONITORED_SERIES:
            try:
                values = await self.series(series_id)
                quality, n_anomalies = self._series_quality(values)
            except (ProviderError, ValidationError) as e:
                self.ctx.logger.info("integrity_series_unavailable", extra={"series_id": series_id, "error": str(e)})
                missing.append(series_id)
                per_series[series_id] = 0.0
                continue
            per_series[series_id] = quality
            anomalies += n_anomalies

        if len(missing) == len(MONITORED_SERIES):
            raise ProviderError("no monitored series available")

        score = sum(per_series.values()) / len(per_series)
        if score >= 98.0:
            signal = Signal.BULLISH
        elif score <= 90.0:
            signal = Signal.BEARISH
        else:
            signal = Signal.NEUTRAL

        return self.report(
            signal=signal,
            confidence=min(95.0, score),
            value=max(-2.0, min(2.0, (score - 94.0) / 4.0)),
            data={
                "integrity_score": round(score, 2),
                "series_quality": {k: round(v, 2) for k, v in per_series.items()},
                "missing_series": missing,
                "anomalies": anomalies,
            },
        )

    def fallback_data(self) -> dict[str, Any]:
        return {"integrity_score": None, "series_quality": {}, "missing_series": list(MONITORED_SERIES), "anomalies": 0}
