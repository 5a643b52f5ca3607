"""
Order Classifier

Labels order-groups (lines sharing a submission) from their width and depth:

- stocking: many distinct SKUs, one or two of each (initial floor setup)
- project: many units per SKU (pass-through job-site order)
- replenishment: everything else (proof of sell-through)

Rules are applied in that priority order. The scalar and vectorized forms
read the same policy and must always agree.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import polars as pl

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.records import ClassifiedOrder, OrderType, RawOrder
from dealer_insights.analytics.guards import safe_divide

ORDER_KEY = "order_key"


@dataclass(frozen=True)
class OrderGroup:
    """Width/depth summary of one order submission"""
    sku_count: int
    total_units: float
    total_value: float = 0.0

    @property
    def depth(self) -> float:
        """Average units per distinct SKU"""
        return safe_divide(self.total_units, self.sku_count)

    @classmethod
    def from_lines(cls, lines: Iterable[RawOrder]) -> "OrderGroup":
        lines = list(lines)
        return cls(
            sku_count=len({line.sku for line in lines}),
            total_units=sum(line.quantity for line in lines),
            total_value=sum(line.revenue for line in lines),
        )


def classify_order_group(group: OrderGroup, policy: Optional[InsightsPolicy] = None) -> OrderType:
    """Classify one order-group. Pure: same group, same answer."""
    policy = policy or get_policy()
    depth = group.depth

    if group.sku_count >= policy.stocking_min_skus and depth < policy.stocking_max_depth:
        return OrderType.STOCKING
    if depth > policy.project_min_depth:
        return OrderType.PROJECT
    return OrderType.REPLENISHMENT


def order_key_expr() -> pl.Expr:
    """Submission identity: the order number, else customer + order date"""
    return pl.coalesce([
        pl.when(pl.col("order_number").str.len_chars() > 0).then(pl.col("order_number")),
        pl.concat_str(
            [pl.col("customer_id"), pl.col("order_date").cast(pl.Utf8)],
            separator="|",
        ),
    ]).alias(ORDER_KEY)


def order_type_expr(policy: InsightsPolicy) -> pl.Expr:
    """Vectorized form of classify_order_group over order_sku_count/order_depth"""
    return (
        pl.when(
            (pl.col("order_sku_count") >= policy.stocking_min_skus)
            & (pl.col("order_depth") < policy.stocking_max_depth)
        )
        .then(pl.lit(OrderType.STOCKING.value))
        .when(pl.col("order_depth") > policy.project_min_depth)
        .then(pl.lit(OrderType.PROJECT.value))
        .otherwise(pl.lit(OrderType.REPLENISHMENT.value))
        .alias("order_type")
    )


def classify_orders(df: pl.DataFrame, policy: Optional[InsightsPolicy] = None) -> pl.DataFrame:
    """
    Add order-group statistics and an ``order_type`` column to an order frame.

    Row order is preserved. Expects the cleaned order schema.
    """
    policy = policy or get_policy()

    df = df.with_columns(order_key_expr())
    df = df.with_columns(
        pl.col("sku").n_unique().over(ORDER_KEY).alias("order_sku_count"),
        pl.col("quantity").sum().over(ORDER_KEY).alias("order_units"),
    )
    df = df.with_columns(
        pl.when(pl.col("order_sku_count") > 0)
        .then(pl.col("order_units") / pl.col("order_sku_count"))
        .otherwise(0.0)
        .alias("order_depth")
    )
    return df.with_columns(order_type_expr(policy))


def classify_raw_orders(
    orders: Sequence[RawOrder],
    policy: Optional[InsightsPolicy] = None,
) -> List[ClassifiedOrder]:
    """Classify records directly, grouping lines by submission identity"""
    policy = policy or get_policy()
    groups = {}
    for order in orders:
        groups.setdefault(_order_key(order), []).append(order)

    types = {key: classify_order_group(OrderGroup.from_lines(lines), policy) for key, lines in groups.items()}
    return [ClassifiedOrder(order=order, order_type=types[_order_key(order)]) for order in orders]


def _order_key(order: RawOrder) -> str:
    return order.order_number or f"{order.customer_id}|{order.order_date.isoformat()}"
