"""
Velocity Leaderboard

Ranks collections by retail run rate: the retail-trend WMA (stocking plus
replenishment revenue, projects excluded) at the latest week. Week-over-week
movement gives the trend arrow and rank delta; recently introduced
collections that climb fast are surfaced as hot new intros.
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

import polars as pl
import structlog

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.results import (
    LeaderboardEntry,
    LeaderboardPoint,
    LeaderboardReport,
    LeaderboardTrend,
    ReasonCode,
)
from dealer_insights.transformation.cleaners import filter_period
from dealer_insights.analytics.aggregation import aggregate_weekly, collection_series, week_range
from dealer_insights.analytics.classifier import classify_orders
from dealer_insights.analytics.guards import percent_change
from dealer_insights.analytics.smoothing import retail_trend

logger = structlog.get_logger(__name__)


def leaderboard_trend(
    run_rate: float,
    previous_run_rate: float,
    policy: Optional[InsightsPolicy] = None,
) -> LeaderboardTrend:
    """Direction of the run rate against the previous week"""
    policy = policy or get_policy()
    if previous_run_rate == 0:
        return LeaderboardTrend.NEW if run_rate > 0 else LeaderboardTrend.FLAT
    change = percent_change(run_rate, previous_run_rate)
    if change > policy.leaderboard_trend_band:
        return LeaderboardTrend.UP
    if change < -policy.leaderboard_trend_band:
        return LeaderboardTrend.DOWN
    return LeaderboardTrend.FLAT


def _ranks(values: Dict[str, float]) -> Dict[str, int]:
    ordered = sorted(values, key=lambda name: (-values[name], name))
    return {name: i + 1 for i, name in enumerate(ordered)}


def hot_new_intros(
    entries: Sequence[LeaderboardEntry],
    policy: Optional[InsightsPolicy] = None,
) -> List[LeaderboardEntry]:
    """
    New intros that climbed more than the rank-jump threshold.

    Only entries with retail sales before the last three sparkline weeks
    qualify; a jump from nothing is not a climb.
    """
    policy = policy or get_policy()
    hot = []
    for entry in entries:
        if not entry.is_new_intro or entry.rank_delta <= policy.hot_intro_rank_jump:
            continue
        earlier = entry.weekly_data[:-3]
        if len(entry.weekly_data) >= 4 and any(p.retail_volume > 0 for p in earlier):
            hot.append(entry)
    hot.sort(key=lambda e: (-e.rank_delta, e.collection_name))
    return hot


def compute_velocity_leaderboard(
    orders: pl.DataFrame,
    as_of: date,
    customer_id: Optional[str] = None,
    policy: Optional[InsightsPolicy] = None,
) -> LeaderboardReport:
    """
    Retail velocity ranking over the rolling window ending at as_of.

    Args:
        orders: Cleaned order frame (territory, or filtered by customer_id)
        as_of: Window end (inclusive)
        customer_id: Restrict to one customer's orders

    Returns:
        LeaderboardReport; reason is set when the window is too short
    """
    policy = policy or get_policy()
    window_start = as_of - timedelta(days=policy.momentum_window_days)

    if customer_id is not None:
        orders = orders.filter(pl.col("customer_id") == customer_id)
    orders = filter_period(orders, window_start, as_of)

    if orders.is_empty():
        return LeaderboardReport(window_start=window_start, window_end=as_of, reason=ReasonCode.NO_ORDERS)

    first_order = orders["order_date"].min()
    if len(week_range(first_order, as_of)) < policy.leaderboard_min_weeks:
        return LeaderboardReport(window_start=window_start, window_end=as_of, reason=ReasonCode.INSUFFICIENT_DATA)

    classified = classify_orders(orders, policy)
    weekly = aggregate_weekly(classified, start=first_order, end=as_of)
    stats = classified.group_by("collection_name").agg(
        pl.col("sku").n_unique().alias("sku_count"),
        pl.col("order_date").min().alias("first_sale"),
    )

    current: Dict[str, float] = {}
    previous: Dict[str, float] = {}
    series_by_collection: Dict[str, pl.DataFrame] = {}
    trends = {}
    for name in stats["collection_name"].to_list():
        series = collection_series(weekly, name)
        trend = retail_trend(series, policy)
        series_by_collection[name] = series
        trends[name] = trend
        current[name] = float(trend[-1])
        previous[name] = float(trend[-2]) if len(trend) > 1 else 0.0

    current_ranks = _ranks(current)
    previous_ranks = _ranks(previous)
    new_intro_cutoff = as_of - timedelta(days=policy.new_intro_days)
    sparkline = policy.leaderboard_sparkline_weeks

    entries = []
    for row in stats.iter_rows(named=True):
        name = row["collection_name"]
        series = series_by_collection[name]
        retail = series["stocking_volume"] + series["replenishment_volume"]
        points = [
            LeaderboardPoint(
                week_start=week["week_start"],
                retail_volume=week["stocking_volume"] + week["replenishment_volume"],
                project_volume=week["project_volume"],
                retail_trend=float(trends[name][i]),
            )
            for i, week in enumerate(series.iter_rows(named=True))
        ]
        entries.append(LeaderboardEntry(
            collection_name=name,
            rank=current_ranks[name],
            run_rate=current[name],
            previous_run_rate=previous[name],
            trend=leaderboard_trend(current[name], previous[name], policy),
            trend_percent=percent_change(current[name], previous[name]),
            rank_delta=previous_ranks[name] - current_ranks[name],
            retail_volume=float(retail.sum()),
            project_volume=float(series["project_volume"].sum()),
            sku_count=int(row["sku_count"]),
            first_sale_date=row["first_sale"],
            is_new_intro=row["first_sale"] >= new_intro_cutoff,
            weekly_data=points[-sparkline:],
        ))

    entries.sort(key=lambda e: e.rank)
    logger.info("Velocity leaderboard built", collections=len(entries), customer_id=customer_id)
    return LeaderboardReport(
        window_start=window_start,
        window_end=as_of,
        entries=entries,
        hot_new_intros=hot_new_intros(entries, policy),
    )
