"""
Collection Performance Calculator

Combines one customer's per-collection sales with the territory benchmarks
and the customer's floor displays to derive velocity, performance index,
presence, months on floor and projected revenue lift for each collection.
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional

import polars as pl
import structlog

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.results import CollectionPerformance
from dealer_insights.models.territory import CollectionBenchmark, TerritoryAggregate
from dealer_insights.transformation.cleaners import active_displays
from dealer_insights.analytics.guards import clamp, safe_divide
from dealer_insights.analytics.quadrant import classify_quadrant

logger = structlog.get_logger(__name__)

_TRAILING_MONTHS = re.compile(r"^L(\d+)M$")


# =============================================================================
# PERIODS
# =============================================================================

@dataclass(frozen=True)
class Period:
    """Reporting period; start is exclusive, None means unbounded"""
    label: str
    start: Optional[date]
    end: date

    def contains(self, day: date) -> bool:
        return (self.start is None or day > self.start) and day <= self.end


def _months_back(day: date, months: int) -> date:
    year, month = divmod(day.year * 12 + day.month - 1 - months, 12)
    month += 1
    # Clamp to the last day of the target month
    next_month = date(year + (month == 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def resolve_period(period_label: str, as_of: date) -> Period:
    """
    Resolve a period label against the as-of date.

    Accepts ``L12M`` style trailing months, ``YTD`` and ``ALL``.

    Raises:
        ValueError: For an unknown label
    """
    label = (period_label or "L12M").strip().upper()

    if label == "ALL":
        return Period(label=label, start=None, end=as_of)
    if label == "YTD":
        return Period(label=label, start=date(as_of.year - 1, 12, 31), end=as_of)

    match = _TRAILING_MONTHS.match(label)
    if match and int(match.group(1)) >= 1:
        months = int(match.group(1))
        if months == 12:
            start = as_of - timedelta(days=365)
        else:
            start = _months_back(as_of, months)
        return Period(label=label, start=start, end=as_of)

    raise ValueError(f"Unknown period label: {period_label!r}")


def describe_period(first: Optional[date], last: Optional[date]) -> str:
    """Human label such as 'Jan 6 - Nov 4, 2025'"""
    if first is None or last is None:
        return ""
    return f"{first:%b} {first.day} - {last:%b} {last.day}, {last.year}"


# =============================================================================
# FORMULAS
# =============================================================================

def market_average_presence(
    benchmark: CollectionBenchmark,
    policy: Optional[InsightsPolicy] = None,
) -> float:
    """Average faces per showroom that displays the collection"""
    policy = policy or get_policy()
    return safe_divide(
        benchmark.total_display_faces,
        benchmark.showroom_count_with_display,
        fallback=policy.default_market_presence,
    )


def projected_revenue_lift(
    revenue_customer: float,
    benchmark: CollectionBenchmark,
    policy: Optional[InsightsPolicy] = None,
) -> float:
    """Gap to the territory average, or a fixed lift rate once above it"""
    policy = policy or get_policy()
    if not benchmark.has_sales:
        return 0.0
    average = benchmark.average_revenue_per_store
    if revenue_customer < average:
        return average - revenue_customer
    return revenue_customer * policy.above_average_lift_rate


def months_on_floor(
    installed_at: Optional[date],
    as_of: date,
    policy: Optional[InsightsPolicy] = None,
) -> float:
    """Months since install, 0 when unknown"""
    policy = policy or get_policy()
    if installed_at is None:
        return 0.0
    return max(0.0, safe_divide((as_of - installed_at).days, policy.days_per_month))


def collection_floor_state(displays: pl.DataFrame) -> pl.DataFrame:
    """Active faces and earliest active install per collection"""
    return active_displays(displays).group_by("collection_name").agg(
        pl.col("faces").sum().alias("faces"),
        pl.col("installed_at").min().alias("first_installed_at"),
    )


# =============================================================================
# CALCULATOR
# =============================================================================

def compute_collection_performance(
    customer_orders: pl.DataFrame,
    territory: TerritoryAggregate,
    customer_displays: pl.DataFrame,
    as_of: date,
    policy: Optional[InsightsPolicy] = None,
) -> List[CollectionPerformance]:
    """
    Performance of every collection the customer bought or actively displays.

    Args:
        customer_orders: Cleaned order frame, one customer, already filtered
            to the reporting period
        territory: Territory benchmarks for the same period
        customer_displays: Cleaned display frame for the customer
        as_of: Reference date for months on floor

    Returns:
        Collections sorted by customer revenue descending, then name
    """
    policy = policy or get_policy()

    sales = customer_orders.group_by("collection_name").agg(
        pl.col("quantity").sum().alias("units"),
        pl.col("revenue").sum().alias("revenue"),
    )
    sales_by_collection: Dict[str, Dict] = {
        row["collection_name"]: row for row in sales.iter_rows(named=True)
    }
    floor_by_collection: Dict[str, Dict] = {
        row["collection_name"]: row
        for row in collection_floor_state(customer_displays).iter_rows(named=True)
    }

    top_revenue = max((row["revenue"] for row in sales_by_collection.values()), default=0.0)

    results: List[CollectionPerformance] = []
    for name in set(sales_by_collection) | set(floor_by_collection):
        sold = sales_by_collection.get(name, {})
        floor = floor_by_collection.get(name, {})
        benchmark = territory.get(name)

        units = float(sold.get("units", 0.0))
        revenue = float(sold.get("revenue", 0.0))
        presence = int(floor.get("faces", 0))
        market_average = market_average_presence(benchmark, policy)
        velocity = clamp(safe_divide(revenue, top_revenue))

        results.append(CollectionPerformance(
            collection_name=name,
            units_customer=units,
            revenue_customer=revenue,
            display_presence_score=presence,
            market_average_presence=market_average,
            months_on_floor=months_on_floor(floor.get("first_installed_at"), as_of, policy),
            sales_velocity_index=velocity,
            performance_index=safe_divide(units, benchmark.average_units_per_store),
            quadrant=classify_quadrant(velocity, presence, market_average, policy),
            projected_revenue_lift=projected_revenue_lift(revenue, benchmark, policy),
            units_territory_per_store=benchmark.average_units_per_store,
            territory_average_revenue=benchmark.average_revenue_per_store,
        ))

    results.sort(key=lambda c: (-c.revenue_customer, c.collection_name))
    return results
