"""liquidity.statistics

Pure, stateless numerical helpers used by the engines.

Conventions:
- variance and standard deviation are sample statistics (divisor n-1)
- percentiles interpolate linearly between the bracketing order statistics
- empty or non-finite input raises `ValidationError`; degenerate spread returns 0
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

import numpy as np

from liquidity.core.exceptions import ValidationError


class OutlierMethod(StrEnum):
    IQR = "iqr"
    MAD = "mad"
    PERCENTILE = "percentile"
    ZSCORE = "zscore"


DEFAULT_THRESHOLDS: dict[OutlierMethod, float] = {
    OutlierMethod.IQR: 1.5,
    OutlierMethod.MAD: 2.5,
    OutlierMethod.PERCENTILE: 5.0,
    OutlierMethod.ZSCORE: 2.5,
}

# Scales MAD to be comparable with a standard deviation under normality.
_MAD_SCALE = 0.6745


@dataclass(frozen=True, slots=True)
class OutlierConfig:
    method: OutlierMethod = OutlierMethod.IQR
    threshold: float | None = None
    remove_outliers: bool = True


@dataclass(frozen=True, slots=True)
class OutlierResult:
    outliers: list[float]
    clean_data: list[float]


@dataclass(frozen=True, slots=True)
class DistributionMetrics:
    mean: float  # raw data
    clean_mean: float  # equals `mean` when no outlier config is given
    median: float
    std: float
    variance: float
    skewness: float
    kurtosis: float
    quartiles: tuple[float, float, float]
    outliers: list[float] = field(default_factory=list)
    clean_data: list[float] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RollingWindowStats:
    index: int  # index of the last element in the window
    mean: float
    std: float
    min: float
    max: float
    range: float


def validate_inputs(data: Sequence[float], label: str = "dataset") -> None:
    if len(data) == 0:
        raise ValidationError(f"{label} cannot be empty")
    if not all(math.isfinite(float(v)) for v in data):
        raise ValidationError(f"{label} contains non-finite values")


def _arr(data: Sequence[float], label: str = "dataset") -> np.ndarray:
    validate_inputs(data, label)
    return np.asarray(data, dtype=float)


def mean(data: Sequence[float]) -> float:
    return float(np.mean(_arr(data)))


def median(data: Sequence[float]) -> float:
    return float(np.median(_arr(data)))


def variance(data: Sequence[float]) -> float:
    a = _arr(data)
    if a.size < 2:
        return 0.0
    return float(np.var(a, ddof=1))


def standard_deviation(data: Sequence[float]) -> float:
    return math.sqrt(variance(data))


def percentile(sorted_data: Sequence[float], p: float) -> float:
    """Value at the p-th percentile, 0 <= p <= 100.

    Position is `p/100 * (n-1)`; between two order statistics the result is
    interpolated linearly.
    """

    a = _arr(sorted_data)
    if not 0.0 <= p <= 100.0:
        raise ValidationError(f"percentile must be within 0..100, got {p}")
    return float(np.percentile(a, p, method="linear"))


def percentile_rank(value: float, data: Sequence[float]) -> float:
    """Share of observations <= value, in percent."""

    a = _arr(data)
    return float(np.count_nonzero(a <= value) / a.size * 100.0)


def zscore(value: float, mean_: float, std: float) -> float:
    if std == 0:
        return 0.0
    return (value - mean_) / std


def skewness(data: Sequence[float], mean_: float | None = None, std: float | None = None) -> float:
    a = _arr(data)
    m = float(np.mean(a)) if mean_ is None else mean_
    s = standard_deviation(data) if std is None else std
    if s == 0:
        return 0.0
    return float(np.sum(((a - m) / s) ** 3) / a.size)


def kurtosis(data: Sequence[float], mean_: float | None = None, std: float | None = None) -> float:
    """Excess kurtosis (normal distribution -> 0)."""

    a = _arr(data)
    m = float(np.mean(a)) if mean_ is None else mean_
    s = standard_deviation(data) if std is None else std
    if s == 0:
        return 0.0
    return float(np.sum(((a - m) / s) ** 4) / a.size - 3.0)


def detect_outliers(
    data: Sequence[float],
    method: OutlierMethod | str = OutlierMethod.IQR,
    threshold: float | None = None,
) -> OutlierResult:
    a = _arr(data)
    method = OutlierMethod(method)
    t = DEFAULT_THRESHOLDS[method] if threshold is None else float(threshold)

    mask = np.zeros(a.size, dtype=bool)
    if method is OutlierMethod.IQR:
        q1, q3 = np.percentile(a, [25, 75], method="linear")
        spread = q3 - q1
        mask = (a < q1 - t * spread) | (a > q3 + t * spread)
    elif method is OutlierMethod.MAD:
        med = float(np.median(a))
        mad = float(np.median(np.abs(a - med)))
        if mad != 0:
            mask = _MAD_SCALE * np.abs(a - med) / mad > t
    elif method is OutlierMethod.PERCENTILE:
        if not 0.0 <= t <= 50.0:
            raise ValidationError(f"percentile threshold must be within 0..50, got {t}")
        lo, hi = np.percentile(a, [t, 100.0 - t], method="linear")
        mask = (a < lo) | (a > hi)
    elif method is OutlierMethod.ZSCORE:
        s = standard_deviation(data)
        if s != 0:
            mask = np.abs(a - np.mean(a)) / s > t

    return OutlierResult(outliers=a[mask].tolist(), clean_data=a[~mask].tolist())


def analyze_distribution(data: Sequence[float], config: OutlierConfig | None = None) -> DistributionMetrics:
    """Moments and quartiles of `data`.

    Mean, median, spread and quartiles always describe the full data. With a
    config, the clean mean, skewness and kurtosis are recomputed on the data
    left after outlier removal, standardized by the full-data std.
    """

    a = _arr(data)
    m = float(np.mean(a))
    var = variance(data)
    std = math.sqrt(var)
    q1, q2, q3 = (float(q) for q in np.percentile(a, [25, 50, 75], method="linear"))

    outliers: list[float] = []
    clean = a.tolist()
    if config is not None:
        result = detect_outliers(data, config.method, config.threshold)
        outliers = result.outliers
        if config.remove_outliers and result.clean_data:
            clean = result.clean_data

    clean_mean = float(np.mean(clean))
    return DistributionMetrics(
        mean=m,
        clean_mean=clean_mean,
        median=float(np.median(a)),
        std=std,
        variance=var,
        skewness=skewness(clean, clean_mean, std),
        kurtosis=kurtosis(clean, clean_mean, std),
        quartiles=(q1, q2, q3),
        outliers=outliers,
        clean_data=clean,
    )


class RollingStatistics:
    """Lazy sequence of per-window stats. Iterating again starts over."""

    def __init__(self, data: Sequence[float], window_size: int) -> None:
        a = _arr(data)
        if window_size < 1:
            raise ValidationError(f"window size must be >= 1, got {window_size}")
        if window_size > a.size:
            raise ValidationError(f"window size {window_size} exceeds data length {a.size}")
        self._data = a
        self.window_size = int(window_size)

    def __len__(self) -> int:
        return self._data.size - self.window_size + 1

    def __iter__(self) -> Iterator[RollingWindowStats]:
        w = self.window_size
        for end in range(w - 1, self._data.size):
            window = self._data[end - w + 1 : end + 1]
            lo = float(np.min(window))
            hi = float(np.max(window))
            yield RollingWindowStats(
                index=end,
                mean=float(np.mean(window)),
                std=float(np.std(window, ddof=1)) if w > 1 else 0.0,
                min=lo,
                max=hi,
                range=hi - lo,
            )


def rolling_statistics(data: Sequence[float], window_size: int) -> RollingStatistics:
    return RollingStatistics(data, window_size)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0 when either side has no variance."""

    if len(x) != len(y):
        raise ValidationError(f"length mismatch: {len(x)} != {len(y)}")
    a = _arr(x, "x")
    b = _arr(y, "y")
    dx = a - np.mean(a)
    dy = b - np.mean(b)
    den = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if den == 0:
        return 0.0
    return float(np.sum(dx * dy) / den)
