"""
Record Cleaning Module

Turns collaborator records into typed polars frames the analytics modules
work on. Handles:
- Catalog resolution of missing collection/price data
- Whitespace normalization
- Collection name extraction from item descriptions
- Validation with row-level rejection
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

import polars as pl
import structlog

from dealer_insights.models.records import (
    CatalogEntry,
    DisplayRecord,
    RawOrder,
    RejectedRecord,
)
from dealer_insights.quality.validators import (
    REJECTION_REASON,
    create_displays_validator,
    create_orders_validator,
)

logger = structlog.get_logger(__name__)


ORDER_SCHEMA = {
    "sku": pl.Utf8,
    "collection_name": pl.Utf8,
    "quantity": pl.Float64,
    "unit_price": pl.Float64,
    "order_date": pl.Date,
    "customer_id": pl.Utf8,
    "order_number": pl.Utf8,
}

DISPLAY_SCHEMA = {
    "sku": pl.Utf8,
    "collection_name": pl.Utf8,
    "customer_id": pl.Utf8,
    "installed_at": pl.Date,
    "status": pl.Utf8,
    "last_verified_at": pl.Date,
    "faces": pl.Int64,
}


class CatalogResolver(Protocol):
    """Anything that can resolve a SKU to catalog data"""

    def resolve(self, sku: str) -> Optional[CatalogEntry]:
        ...


@dataclass
class CleaningStats:
    """Statistics from cleaning operations"""
    total_rows: int
    rows_after_cleaning: int
    catalog_resolved: int
    rejected: int


def extract_collection_name(item_description: Optional[str]) -> Optional[str]:
    """
    Collection name from an item description.

    "Catania, 1 Light LED Pendant, Chrome" -> "Catania"
    """
    if item_description is None:
        return None
    name = item_description.split(",")[0].strip()
    return name or None


def resolve_catalog(
    orders: Iterable[RawOrder],
    catalog: Optional[CatalogResolver],
) -> Tuple[List[RawOrder], int]:
    """
    Fill missing collection names and unit prices from the catalog.

    Orders are never modified; resolved orders are new records. Orders the
    catalog cannot resolve are returned unchanged and left for validation to
    reject.
    """
    resolved: List[RawOrder] = []
    count = 0
    for order in orders:
        if catalog is not None and (not order.collection_name or order.unit_price is None):
            entry = catalog.resolve(order.sku)
            if entry is not None:
                order = replace(
                    order,
                    collection_name=order.collection_name or entry.collection_name,
                    unit_price=order.unit_price if order.unit_price is not None else entry.unit_price,
                )
                count += 1
        resolved.append(order)
    return resolved, count


def _trim_strings(df: pl.DataFrame, columns: Sequence[str]) -> pl.DataFrame:
    """Trim whitespace from string columns"""
    return df.with_columns([pl.col(c).str.strip_chars() for c in columns if c in df.columns])


def orders_to_frame(orders: Sequence[RawOrder]) -> pl.DataFrame:
    """Build an order-line frame with a fixed schema"""
    df = pl.DataFrame(
        {
            "sku": [o.sku for o in orders],
            "collection_name": [o.collection_name for o in orders],
            "quantity": [None if o.quantity is None else float(o.quantity) for o in orders],
            "unit_price": [None if o.unit_price is None else float(o.unit_price) for o in orders],
            "order_date": [o.order_date for o in orders],
            "customer_id": [o.customer_id for o in orders],
            "order_number": [o.order_number for o in orders],
        },
        schema=ORDER_SCHEMA,
    )
    return _trim_strings(df, ["sku", "collection_name", "customer_id", "order_number"])


def displays_to_frame(displays: Sequence[DisplayRecord]) -> pl.DataFrame:
    """Build a display frame with a fixed schema"""
    df = pl.DataFrame(
        {
            "sku": [d.sku for d in displays],
            "collection_name": [d.collection_name for d in displays],
            "customer_id": [d.customer_id for d in displays],
            "installed_at": [d.installed_at for d in displays],
            "status": [getattr(d.status, "value", d.status) for d in displays],
            "last_verified_at": [d.last_verified_at for d in displays],
            "faces": [d.faces for d in displays],
        },
        schema=DISPLAY_SCHEMA,
    )
    return _trim_strings(df, ["sku", "collection_name", "customer_id", "status"])


def _rejections(kind: str, rejected: pl.DataFrame) -> List[RejectedRecord]:
    records = []
    for row in rejected.iter_rows(named=True):
        reason = row.pop(REJECTION_REASON)
        records.append(RejectedRecord(kind=kind, reason=reason, record=row))
    return records


def clean_orders(
    orders: Sequence[RawOrder],
    catalog: Optional[CatalogResolver] = None,
) -> Tuple[pl.DataFrame, List[RejectedRecord], CleaningStats]:
    """
    Resolve, frame and validate order lines.

    Returns:
        (valid order frame with a ``revenue`` column, rejected records, stats)
    """
    resolved, resolved_count = resolve_catalog(orders, catalog)
    df = orders_to_frame(resolved)
    valid, rejected = create_orders_validator().split(df)

    valid = valid.with_columns(
        (pl.col("quantity") * pl.col("unit_price")).alias("revenue"),
    )

    stats = CleaningStats(
        total_rows=len(df),
        rows_after_cleaning=len(valid),
        catalog_resolved=resolved_count,
        rejected=len(rejected),
    )
    logger.debug("Orders cleaned", **stats.__dict__)
    return valid, _rejections("order", rejected), stats


def clean_displays(
    displays: Sequence[DisplayRecord],
) -> Tuple[pl.DataFrame, List[RejectedRecord]]:
    """Frame and validate display records"""
    df = displays_to_frame(displays)
    valid, rejected = create_displays_validator().split(df)
    return valid, _rejections("display", rejected)


def active_displays(df: pl.DataFrame) -> pl.DataFrame:
    """Displays currently on the floor"""
    return df.filter((pl.col("status") == "ACTIVE") & (pl.col("faces") > 0))


def filter_period(
    df: pl.DataFrame,
    start: Optional[date],
    end: Optional[date],
    column: str = "order_date",
) -> pl.DataFrame:
    """Rows with start < column <= end (either bound optional)"""
    if start is not None:
        df = df.filter(pl.col(column) > start)
    if end is not None:
        df = df.filter(pl.col(column) <= end)
    return df
