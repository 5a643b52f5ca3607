"""
Asset Health Evaluator

Judges whether a customer's floor displays earn their space:

- turn rate per displayed collection against the territory benchmark
- non-performing assets (displays that do not pay for themselves)
- ghost performers (SKUs selling with no display behind them)
- swap candidates and the best single swap
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

import polars as pl
import structlog

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.results import (
    AssetHealthReport,
    CollectionEfficiency,
    CollectionPerformance,
    EfficiencyStatus,
    GhostPerformer,
    NonPerformingAsset,
    ReasonCode,
    SwapCandidate,
    SwapRecommendation,
)
from dealer_insights.models.territory import TerritoryAggregate
from dealer_insights.transformation.cleaners import active_displays
from dealer_insights.analytics.guards import roi_months, safe_divide
from dealer_insights.analytics.performance import Period, months_on_floor

logger = structlog.get_logger(__name__)

DAYS_PER_YEAR = 365
MIN_PERIOD_DAYS = 30


def turn_rate(units_sold: float, display_count: int, annualization: float = 1.0) -> float:
    """Units per display face, scaled to a year by ``annualization``"""
    return safe_divide(units_sold, display_count) * annualization


def annualization_factor(period: Optional[Period], customer_orders: pl.DataFrame) -> float:
    """
    Multiplier turning period figures into yearly ones.

    An unbounded period spans from the customer's first order to the period
    end. Spans shorter than a month count as a month.
    """
    if period is None:
        return 1.0
    start = period.start
    if start is None:
        if customer_orders.is_empty():
            return 1.0
        start = customer_orders["order_date"].min()
    days = max((period.end - start).days, MIN_PERIOD_DAYS)
    return DAYS_PER_YEAR / days


def efficiency_status(
    display_count: int,
    turns: float,
    benchmark_turns: float,
    policy: Optional[InsightsPolicy] = None,
) -> EfficiencyStatus:
    """Classify one collection's display efficiency"""
    policy = policy or get_policy()
    if display_count <= 0:
        return EfficiencyStatus.GHOST
    if benchmark_turns > 0 and turns >= policy.star_turn_multiplier * benchmark_turns:
        return EfficiencyStatus.STAR
    if turns < policy.drag_turn_rate:
        return EfficiencyStatus.DRAG
    return EfficiencyStatus.AVERAGE


def _rows_by(df: pl.DataFrame, key: str) -> Dict[str, Dict]:
    return {row[key]: row for row in df.iter_rows(named=True)}


def collection_efficiency(
    customer_orders: pl.DataFrame,
    customer_displays: pl.DataFrame,
    territory: TerritoryAggregate,
    policy: Optional[InsightsPolicy] = None,
    annualization: float = 1.0,
) -> List[CollectionEfficiency]:
    """Yearly turn rate and status for every collection sold or displayed"""
    policy = policy or get_policy()

    sold = _rows_by(
        customer_orders.group_by("collection_name").agg(pl.col("quantity").sum().alias("units")),
        "collection_name",
    )
    shown = _rows_by(
        active_displays(customer_displays).group_by("collection_name").agg(pl.col("faces").sum().alias("faces")),
        "collection_name",
    )

    results = []
    for name in sorted(set(sold) | set(shown)):
        units = float(sold.get(name, {}).get("units", 0.0))
        faces = int(shown.get(name, {}).get("faces", 0))
        turns = turn_rate(units, faces, annualization)
        benchmark = territory.get(name).average_units_per_store * annualization
        results.append(CollectionEfficiency(
            collection_name=name,
            display_count=faces,
            units_sold=units,
            turn_rate=turns,
            benchmark_turns=benchmark,
            status=efficiency_status(faces, turns, benchmark, policy),
        ))
    return results


def non_performing_assets(
    efficiencies: Sequence[CollectionEfficiency],
    customer_orders: pl.DataFrame,
    as_of: date,
    policy: Optional[InsightsPolicy] = None,
) -> List[NonPerformingAsset]:
    """Displayed collections turning below the drag rate, slowest first"""
    policy = policy or get_policy()
    last_sale = _rows_by(
        customer_orders.group_by("collection_name").agg(pl.col("order_date").max().alias("last_sale")),
        "collection_name",
    )

    assets = []
    for eff in efficiencies:
        if eff.display_count <= 0 or eff.turn_rate >= policy.drag_turn_rate:
            continue
        last = last_sale.get(eff.collection_name, {}).get("last_sale")
        assets.append(NonPerformingAsset(
            collection_name=eff.collection_name,
            display_count=eff.display_count,
            units_sold=eff.units_sold,
            turn_rate=eff.turn_rate,
            days_since_last_sale=None if last is None else (as_of - last).days,
        ))
    assets.sort(key=lambda a: (a.turn_rate, a.collection_name))
    return assets


def ghost_performers(
    customer_orders: pl.DataFrame,
    customer_displays: pl.DataFrame,
    lifts: Dict[str, float],
) -> List[GhostPerformer]:
    """SKUs with sales and no active display, highest revenue first"""
    displayed = set(active_displays(customer_displays)["sku"].to_list())
    skus = customer_orders.group_by("sku").agg(
        pl.col("collection_name").first().alias("collection_name"),
        pl.col("quantity").sum().alias("units"),
        pl.col("revenue").sum().alias("revenue"),
    )

    ghosts = [
        GhostPerformer(
            sku=row["sku"],
            collection_name=row["collection_name"],
            units_customer=float(row["units"]),
            revenue_customer=float(row["revenue"]),
            projected_revenue_lift=lifts.get(row["collection_name"], 0.0),
        )
        for row in skus.iter_rows(named=True)
        if row["units"] > 0 and row["sku"] not in displayed
    ]
    ghosts.sort(key=lambda g: (-g.revenue_customer, g.sku))
    return ghosts


def swap_candidates(
    customer_orders: pl.DataFrame,
    customer_displays: pl.DataFrame,
    as_of: date,
    policy: Optional[InsightsPolicy] = None,
) -> List[SwapCandidate]:
    """Displayed SKUs past their grace period with sales at or below the floor, weakest first"""
    policy = policy or get_policy()
    units_by_sku = _rows_by(
        customer_orders.group_by("sku").agg(pl.col("quantity").sum().alias("units")),
        "sku",
    )
    floor = active_displays(customer_displays).group_by("sku").agg(
        pl.col("collection_name").first().alias("collection_name"),
        pl.col("installed_at").min().alias("installed_at"),
        pl.col("faces").sum().alias("faces"),
    )

    candidates = []
    for row in floor.iter_rows(named=True):
        units = float(units_by_sku.get(row["sku"], {}).get("units", 0.0))
        months = months_on_floor(row["installed_at"], as_of, policy)
        if units <= policy.swap_unit_floor and months >= policy.swap_grace_months:
            candidates.append(SwapCandidate(
                sku=row["sku"],
                collection_name=row["collection_name"],
                on_display_since=row["installed_at"],
                months_on_floor=months,
                units_customer=units,
                faces=int(row["faces"]),
            ))
    candidates.sort(key=lambda c: (c.units_customer, -c.months_on_floor, c.sku))
    return candidates


def recommend_swap(
    ghosts: Sequence[GhostPerformer],
    candidates: Sequence[SwapCandidate],
    policy: Optional[InsightsPolicy] = None,
) -> Optional[SwapRecommendation]:
    """Pair the best ghost performer with the weakest swap candidate"""
    policy = policy or get_policy()
    if not ghosts or not candidates:
        return None
    best = ghosts[0]
    return SwapRecommendation(
        remove=candidates[0],
        add=best,
        net_gain=best.projected_revenue_lift,
        roi_months=roi_months(best.projected_revenue_lift, policy.display_cost),
    )


def evaluate_asset_health(
    customer_id: str,
    customer_orders: pl.DataFrame,
    customer_displays: pl.DataFrame,
    territory: TerritoryAggregate,
    performance: Sequence[CollectionPerformance],
    as_of: date,
    policy: Optional[InsightsPolicy] = None,
    period: Optional[Period] = None,
) -> AssetHealthReport:
    """
    Full asset-health view for one customer.

    Args:
        customer_orders: Cleaned orders for the customer, filtered to the period
        customer_displays: Cleaned displays for the customer
        territory: Territory benchmarks for the period
        performance: Collection performance for the same inputs, source of
            the projected lift carried by ghost performers
        as_of: Reference date for ages and recency
        period: Reporting period the inputs were filtered to; turn rates are
            annualized over it. Without one the inputs are taken as a year.
    """
    policy = policy or get_policy()

    if customer_orders.is_empty() and active_displays(customer_displays).is_empty():
        return AssetHealthReport(customer_id=customer_id, reason=ReasonCode.NO_ORDERS)

    lifts = {p.collection_name: p.projected_revenue_lift for p in performance}
    efficiencies = collection_efficiency(
        customer_orders,
        customer_displays,
        territory,
        policy,
        annualization_factor(period, customer_orders),
    )
    ghosts = ghost_performers(customer_orders, customer_displays, lifts)
    candidates = swap_candidates(customer_orders, customer_displays, as_of, policy)

    report = AssetHealthReport(
        customer_id=customer_id,
        collections=efficiencies,
        ghost_performers=ghosts,
        swap_candidates=candidates,
        non_performing_assets=non_performing_assets(efficiencies, customer_orders, as_of, policy),
        swap_recommendation=recommend_swap(ghosts, candidates, policy),
    )
    logger.info(
        "Asset health evaluated",
        customer_id=customer_id,
        ghost_performers=len(report.ghost_performers),
        swap_candidates=len(report.swap_candidates),
        non_performing=len(report.non_performing_assets),
    )
    return report
