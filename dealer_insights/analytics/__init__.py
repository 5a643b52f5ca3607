"""
Analytics Module

Order classification, weekly aggregation, trend smoothing and the scoring
built on top of them.
"""
from .aggregation import aggregate_weekly, build_weekly_series, week_start
from .asset_health import evaluate_asset_health
from .classifier import OrderGroup, classify_order_group, classify_orders, classify_raw_orders
from .leaderboard import compute_velocity_leaderboard
from .momentum import MomentumRanker, MomentumView
from .opportunities import money_on_table, opportunity_collections
from .performance import Period, compute_collection_performance, resolve_period
from .quadrant import classify_quadrant, group_by_quadrant
from .smoothing import TrendSeries, smooth_series, weighted_moving_average
from .territory import build_territory_aggregate

__all__ = [
    "aggregate_weekly",
    "build_weekly_series",
    "week_start",
    "evaluate_asset_health",
    "OrderGroup",
    "classify_order_group",
    "classify_orders",
    "classify_raw_orders",
    "compute_velocity_leaderboard",
    "MomentumRanker",
    "MomentumView",
    "money_on_table",
    "opportunity_collections",
    "Period",
    "compute_collection_performance",
    "resolve_period",
    "classify_quadrant",
    "group_by_quadrant",
    "TrendSeries",
    "smooth_series",
    "weighted_moving_average",
    "build_territory_aggregate",
]
