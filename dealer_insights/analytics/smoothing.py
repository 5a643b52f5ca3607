"""
Trend Smoother

Trailing weighted moving averages over a weekly series. For a window of N
weeks the weights are N, N-1, ..., 1 with the most recent week heaviest.
Near the start of the series fewer than N weeks exist; the average then
uses only the weights of the weeks present and normalizes by their sum.

Values stay unrounded floats; rounding belongs to presentation.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import polars as pl

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.analytics.guards import percent_change


def weighted_moving_average(values: Sequence[float], window: int) -> np.ndarray:
    """
    Linearly weighted trailing moving average.

    Args:
        values: Chronological series
        window: Number of weeks N (>= 1)

    Returns:
        Array aligned index-for-index with values
    """
    if window < 1:
        raise ValueError("window must be >= 1")

    series = np.asarray(values, dtype=float)
    result = np.zeros(len(series), dtype=float)
    weights = np.arange(window, 0, -1, dtype=float)  # weight for lag 0, 1, ...

    for i in range(len(series)):
        lo = max(0, i - window + 1)
        recent_first = series[lo:i + 1][::-1]
        used = weights[:len(recent_first)]
        result[i] = float(np.dot(recent_first, used) / used.sum())

    return result


@dataclass
class TrendSeries:
    """Smoothed views of one collection's weekly series"""
    retail_trend: np.ndarray
    signal: np.ndarray
    baseline: np.ndarray

    @property
    def latest_signal(self) -> float:
        return float(self.signal[-1]) if len(self.signal) else 0.0

    @property
    def latest_baseline(self) -> float:
        return float(self.baseline[-1]) if len(self.baseline) else 0.0

    def momentum_delta(self, index: Optional[int] = None) -> float:
        """Signal vs baseline in percent at index (default: most recent week)"""
        if not len(self.signal):
            return 0.0
        i = len(self.signal) - 1 if index is None else index
        return momentum_delta(float(self.signal[i]), float(self.baseline[i]))


def momentum_delta(signal: float, baseline: float) -> float:
    """((signal - baseline) / baseline) * 100; 0 for a zero or undefined baseline"""
    return percent_change(signal, baseline)


def retail_trend(series: pl.DataFrame, policy: Optional[InsightsPolicy] = None) -> np.ndarray:
    """Recurring-demand trend: stocking + replenishment volume, projects excluded"""
    policy = policy or get_policy()
    retail = (series["stocking_volume"] + series["replenishment_volume"]).to_numpy()
    return weighted_moving_average(retail, policy.retail_trend_window)


def signal_baseline(
    series: pl.DataFrame,
    policy: Optional[InsightsPolicy] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fast and slow WMAs of total revenue, all order types included"""
    policy = policy or get_policy()
    revenue = series["revenue"].to_numpy()
    return (
        weighted_moving_average(revenue, policy.signal_window),
        weighted_moving_average(revenue, policy.baseline_window),
    )


def smooth_series(series: pl.DataFrame, policy: Optional[InsightsPolicy] = None) -> TrendSeries:
    """All standard smoothing configurations for one chronological collection series"""
    policy = policy or get_policy()
    signal, baseline = signal_baseline(series, policy)
    return TrendSeries(
        retail_trend=retail_trend(series, policy),
        signal=signal,
        baseline=baseline,
    )
