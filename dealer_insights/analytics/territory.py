"""
Territory Aggregates

Sums order and display frames across every customer to produce the
per-collection benchmarks the customer-level calculations compare against.
"""

from datetime import date
from typing import Optional

import polars as pl
import structlog

from dealer_insights.models.territory import CollectionBenchmark, TerritoryAggregate
from dealer_insights.transformation.cleaners import active_displays

logger = structlog.get_logger(__name__)


def build_territory_aggregate(
    orders: pl.DataFrame,
    displays: pl.DataFrame,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
) -> TerritoryAggregate:
    """
    Per-collection territory totals.

    Args:
        orders: Cleaned order frame for the whole territory and period
        displays: Cleaned display frame for the whole territory

    Returns:
        TerritoryAggregate covering every collection sold or displayed
    """
    sales = orders.group_by("collection_name").agg(
        pl.col("revenue").sum().alias("total_revenue"),
        pl.col("quantity").sum().alias("total_units"),
        pl.col("customer_id").n_unique().alias("customers"),
    )

    floor = active_displays(displays).group_by("collection_name").agg(
        pl.col("faces").sum().alias("faces"),
        pl.col("customer_id").n_unique().alias("showrooms"),
    )

    benchmarks = {}
    for row in sales.iter_rows(named=True):
        benchmarks[row["collection_name"]] = CollectionBenchmark(
            collection_name=row["collection_name"],
            total_revenue_all_customers=float(row["total_revenue"]),
            total_units_all_customers=float(row["total_units"]),
            customer_count_with_purchases=int(row["customers"]),
        )

    for row in floor.iter_rows(named=True):
        name = row["collection_name"]
        current = benchmarks.get(name, CollectionBenchmark(collection_name=name))
        benchmarks[name] = CollectionBenchmark(
            collection_name=name,
            total_revenue_all_customers=current.total_revenue_all_customers,
            total_units_all_customers=current.total_units_all_customers,
            customer_count_with_purchases=current.customer_count_with_purchases,
            total_display_faces=int(row["faces"]),
            showroom_count_with_display=int(row["showrooms"]),
        )

    logger.debug("Territory aggregate built", collections=len(benchmarks))
    return TerritoryAggregate(
        benchmarks=benchmarks,
        period_start=period_start,
        period_end=period_end,
    )
