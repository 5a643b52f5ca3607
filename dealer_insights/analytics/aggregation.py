"""
Weekly Aggregator

Buckets classified order lines into Monday-aligned weeks per collection.
The output is contiguous: every week between the first and last week exists
for every collection, zero-filled when nothing sold, because the moving
averages downstream assume a fixed weekly grid.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

import polars as pl

from dealer_insights.models.records import ClassifiedOrder, OrderType
from dealer_insights.models.results import WeeklyBucket

VOLUME_COLUMNS = [
    "revenue",
    "units",
    "stocking_volume",
    "replenishment_volume",
    "project_volume",
    "project_units",
]

WEEKLY_SCHEMA = {
    "collection_name": pl.Utf8,
    "week_start": pl.Date,
    **{c: pl.Float64 for c in VOLUME_COLUMNS},
}


def week_start(day: date) -> date:
    """Monday of the ISO week containing day"""
    return day - timedelta(days=day.weekday())


def week_range(start: date, end: date) -> List[date]:
    """Every Monday from week_start(start) through week_start(end)"""
    first, last = week_start(start), week_start(end)
    weeks = []
    current = first
    while current <= last:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks


def _typed_volume(order_type: OrderType, value: str) -> pl.Expr:
    return (
        pl.when(pl.col("order_type") == order_type.value)
        .then(pl.col(value))
        .otherwise(0.0)
        .sum()
    )


def aggregate_weekly(
    df: pl.DataFrame,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> pl.DataFrame:
    """
    Gap-filled weekly buckets per collection.

    Args:
        df: Classified order frame (order_date, collection_name, quantity,
            revenue, order_type)
        start: First day of the series (defaults to the earliest order)
        end: Last day of the series (defaults to the latest order); pass
            the as-of date for a live series

    Returns:
        DataFrame sorted by collection_name, week_start
    """
    if df.is_empty() and (start is None or end is None):
        return pl.DataFrame(schema=WEEKLY_SCHEMA)

    start = start or df["order_date"].min()
    end = end or df["order_date"].max()
    weeks = week_range(start, end)

    lines = df.filter(
        (pl.col("order_date") >= weeks[0]) & (pl.col("order_date") < weeks[-1] + timedelta(days=7))
    ).with_columns(
        pl.col("order_date").dt.truncate("1w").alias("week_start"),
    )

    sums = lines.group_by(["collection_name", "week_start"]).agg(
        pl.col("revenue").sum().alias("revenue"),
        pl.col("quantity").sum().alias("units"),
        _typed_volume(OrderType.STOCKING, "revenue").alias("stocking_volume"),
        _typed_volume(OrderType.REPLENISHMENT, "revenue").alias("replenishment_volume"),
        _typed_volume(OrderType.PROJECT, "revenue").alias("project_volume"),
        _typed_volume(OrderType.PROJECT, "quantity").alias("project_units"),
    )

    collections = pl.DataFrame(
        {"collection_name": sorted(lines["collection_name"].unique().to_list())},
        schema={"collection_name": pl.Utf8},
    )
    grid = collections.join(
        pl.DataFrame({"week_start": weeks}, schema={"week_start": pl.Date}),
        how="cross",
    )

    return (
        grid.join(sums, on=["collection_name", "week_start"], how="left")
        .with_columns([pl.col(c).fill_null(0.0).cast(pl.Float64) for c in VOLUME_COLUMNS])
        .select(list(WEEKLY_SCHEMA))
        .sort(["collection_name", "week_start"])
    )


def collection_series(weekly: pl.DataFrame, collection_name: str) -> pl.DataFrame:
    """One collection's chronological slice of an aggregate_weekly frame"""
    return weekly.filter(pl.col("collection_name") == collection_name).sort("week_start")


def to_buckets(weekly: pl.DataFrame) -> List[WeeklyBucket]:
    """Materialize an aggregate_weekly frame as WeeklyBucket records"""
    return [WeeklyBucket(**row) for row in weekly.iter_rows(named=True)]


def build_weekly_series(
    orders: Iterable[ClassifiedOrder],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[WeeklyBucket]:
    """
    Weekly buckets straight from classified order records.

    Convenience wrapper over aggregate_weekly for callers holding records
    rather than frames.
    """
    orders = list(orders)
    df = pl.DataFrame(
        {
            "collection_name": [o.order.collection_name for o in orders],
            "order_date": [o.order.order_date for o in orders],
            "quantity": [float(o.order.quantity) for o in orders],
            "revenue": [float(o.revenue) for o in orders],
            "order_type": [o.order_type.value for o in orders],
        },
        schema={
            "collection_name": pl.Utf8,
            "order_date": pl.Date,
            "quantity": pl.Float64,
            "revenue": pl.Float64,
            "order_type": pl.Utf8,
        },
    )
    return to_buckets(aggregate_weekly(df, start=start, end=end))
