from __future__ import annotations

import math

import pytest

from liquidity.core.exceptions import ValidationError
from liquidity.statistics import (
    OutlierConfig,
    OutlierMethod,
    analyze_distribution,
    correlation,
    detect_outliers,
    kurtosis,
    mean,
    median,
    percentile,
    percentile_rank,
    rolling_statistics,
    skewness,
    standard_deviation,
    validate_inputs,
    variance,
    zscore,
)


def test_basic_moments() -> None:
    data = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
    assert mean(data) == 5.0
    assert median(data) == 4.5
    # sample variance: sum of squared deviations 32 / (n-1)
    assert variance(data) == pytest.approx(32 / 7)
    assert standard_deviation(data) == pytest.approx(math.sqrt(32 / 7))


def test_variance_of_single_observation_is_zero() -> None:
    assert variance([3.0]) == 0.0
    assert standard_deviation([3.0]) == 0.0


def test_percentile_interpolates_linearly() -> None:
    data = [1.0, 2.0, 3.0, 4.0, 5.0, 100.0]
    assert percentile(data, 25) == pytest.approx(2.25)
    assert percentile(data, 75) == pytest.approx(4.75)
    assert percentile(data, 0) == 1.0
    assert percentile(data, 100) == 100.0


def test_percentile_rejects_empty_and_out_of_range() -> None:
    with pytest.raises(ValidationError):
        percentile([], 50)
    with pytest.raises(ValidationError):
        percentile([1.0, 2.0], 101)


def test_percentile_rank_counts_less_or_equal() -> None:
    assert percentile_rank(3.0, [1.0, 2.0, 3.0, 4.0]) == 75.0
    assert percentile_rank(0.0, [1.0, 2.0]) == 0.0


def test_zscore_with_zero_std_is_zero() -> None:
    assert zscore(5.0, 5.0, 0.0) == 0.0
    assert zscore(7.0, 5.0, 2.0) == 1.0


def test_skewness_and_kurtosis_are_zero_for_constant_data() -> None:
    data = [4.0, 4.0, 4.0]
    assert skewness(data) == 0.0
    assert kurtosis(data) == 0.0


def test_skewness_sign_follows_tail() -> None:
    assert skewness([1.0, 1.0, 1.0, 1.0, 10.0]) > 0
    assert skewness([1.0, 10.0, 10.0, 10.0, 10.0]) < 0


def test_iqr_flags_the_extreme_value() -> None:
    res = detect_outliers([1, 2, 3, 4, 5, 100], OutlierMethod.IQR)
    assert res.outliers == [100.0]
    assert res.clean_data == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_mad_returns_nothing_when_mad_is_zero() -> None:
    res = detect_outliers([5, 5, 5, 5, 50], OutlierMethod.MAD)
    assert res.outliers == []
    assert len(res.clean_data) == 5


def test_mad_flags_spike() -> None:
    res = detect_outliers([10, 11, 9, 10, 12, 10, 40], "mad")
    assert res.outliers == [40.0]


def test_zscore_method_returns_nothing_for_constant_data() -> None:
    assert detect_outliers([3, 3, 3], OutlierMethod.ZSCORE).outliers == []


def test_zscore_method_respects_threshold() -> None:
    data = [0.0] * 20 + [10.0]
    assert detect_outliers(data, OutlierMethod.ZSCORE, threshold=2.5).outliers == [10.0]
    assert detect_outliers(data, OutlierMethod.ZSCORE, threshold=10.0).outliers == []


def test_percentile_method_trims_both_tails() -> None:
    data = [float(i) for i in range(1, 101)]
    res = detect_outliers(data, OutlierMethod.PERCENTILE, threshold=5)
    assert min(res.clean_data) >= 5.95
    assert max(res.clean_data) <= 95.05
    assert 1.0 in res.outliers
    assert 100.0 in res.outliers


def test_analyze_distribution_keeps_raw_and_clean_means() -> None:
    data = [1, 2, 3, 4, 5, 100]
    m = analyze_distribution(data, OutlierConfig(method=OutlierMethod.IQR))
    assert m.mean == pytest.approx(115 / 6)
    assert m.clean_mean == pytest.approx(3.0)
    assert m.outliers == [100.0]
    assert m.quartiles == pytest.approx((2.25, 3.5, 4.75))
    assert m.median == pytest.approx(3.5)
    assert m.std == pytest.approx(standard_deviation(data))


def test_analyze_distribution_without_config_uses_all_data() -> None:
    m = analyze_distribution([1.0, 2.0, 3.0])
    assert m.clean_mean == m.mean == 2.0
    assert m.outliers == []
    assert m.skewness == pytest.approx(0.0)


def test_rolling_statistics_windows() -> None:
    stats = rolling_statistics([1.0, 2.0, 3.0, 4.0, 5.0], 3)
    rows = list(stats)
    assert [r.index for r in rows] == [2, 3, 4]
    assert rows[0].mean == 2.0
    assert rows[0].std == pytest.approx(1.0)
    assert rows[-1].min == 3.0
    assert rows[-1].max == 5.0
    assert rows[-1].range == 2.0
    assert len(stats) == 3


def test_rolling_statistics_is_restartable() -> None:
    stats = rolling_statistics([1.0, 2.0, 3.0, 4.0], 2)
    assert list(stats) == list(stats)


def test_rolling_statistics_rejects_oversized_window() -> None:
    with pytest.raises(ValidationError):
        rolling_statistics([1.0, 2.0], 3)
    with pytest.raises(ValidationError):
        rolling_statistics([1.0, 2.0], 0)


def test_correlation() -> None:
    assert correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)
    assert correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)
    assert correlation([1, 2, 3], [5, 5, 5]) == 0.0


def test_correlation_length_mismatch() -> None:
    with pytest.raises(ValidationError):
        correlation([1, 2, 3], [1, 2])


def test_validate_inputs() -> None:
    with pytest.raises(ValidationError, match="cannot be empty"):
        validate_inputs([], "spreads")
    with pytest.raises(ValidationError, match="non-finite"):
        validate_inputs([1.0, float("nan")])
    with pytest.raises(ValueError):
        mean([])
