"""
Momentum Ranker

Ranks collections across the territory by ARPD (revenue per stocking
dealer) over a rolling window ending at the as-of date, scores momentum as
the fast revenue WMA against the slow one, and assigns status buckets:

- rent-payer: top share of the ARPD ranking
- rising-star / decelerating: momentum delta beyond the policy bands
- high-value-stable: flat momentum but ARPD above the value bar
- stable: everything else
"""

import math
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional

import polars as pl
import structlog

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.results import (
    MomentumEntry,
    MomentumGroups,
    MomentumReport,
    MomentumStatus,
    ReasonCode,
    WeeklyMomentumPoint,
)
from dealer_insights.transformation.cleaners import filter_period
from dealer_insights.analytics.aggregation import aggregate_weekly, collection_series, week_range, week_start
from dealer_insights.analytics.classifier import classify_orders
from dealer_insights.analytics.guards import safe_divide
from dealer_insights.analytics.smoothing import smooth_series

logger = structlog.get_logger(__name__)


class MomentumView(str, Enum):
    """Shape of a momentum report"""
    GROUPS = "groups"
    RAW = "raw"


_GROUP_BY_STATUS = {
    MomentumStatus.RENT_PAYER: "rent_payers",
    MomentumStatus.RISING_STAR: "rising_stars",
    MomentumStatus.HIGH_VALUE_STABLE: "high_value_stable",
    MomentumStatus.DECELERATING: "decelerating",
    MomentumStatus.STABLE: "other",
}


def rent_payer_count(n: int, policy: Optional[InsightsPolicy] = None) -> int:
    """Number of top-ranked entries marked rent-payer"""
    policy = policy or get_policy()
    return min(n, max(policy.rent_payer_min_count, math.ceil(n * policy.rent_payer_top_fraction)))


def momentum_status(
    productivity_score: float,
    revenue_momentum_delta: float,
    has_sufficient_history: bool = True,
    policy: Optional[InsightsPolicy] = None,
) -> MomentumStatus:
    """Status for an entry outside the rent-payer band"""
    policy = policy or get_policy()
    if has_sufficient_history:
        if revenue_momentum_delta >= policy.rising_star_delta:
            return MomentumStatus.RISING_STAR
        if revenue_momentum_delta <= policy.decelerating_delta:
            return MomentumStatus.DECELERATING
    if productivity_score >= policy.high_value_arpd:
        return MomentumStatus.HIGH_VALUE_STABLE
    return MomentumStatus.STABLE


def group_entries(entries: List[MomentumEntry]) -> MomentumGroups:
    """Filter ranked entries into status groups; rank order is kept"""
    groups = MomentumGroups()
    for entry in sorted(entries, key=lambda e: e.rank):
        getattr(groups, _GROUP_BY_STATUS[entry.status]).append(entry)
    return groups


class MomentumRanker:
    """
    ARPD ranking with dual-WMA momentum.

    Stateless apart from the policy; one instance can serve many requests.
    """

    def __init__(self, policy: Optional[InsightsPolicy] = None):
        self.policy = policy or get_policy()

    def window(self, as_of: date) -> date:
        """Exclusive start of the rolling window ending at as_of"""
        return as_of - timedelta(days=self.policy.momentum_window_days)

    def rank(
        self,
        orders: pl.DataFrame,
        as_of: date,
        customer_id: Optional[str] = None,
    ) -> MomentumReport:
        """
        Rank every collection with revenue in the window.

        Args:
            orders: Cleaned territory order frame
            as_of: Window end (inclusive)
            customer_id: Restrict to one customer's orders; the dealer
                sample-size gate is then skipped

        Returns:
            MomentumReport with ranked entries and status groups
        """
        policy = self.policy
        window_start = self.window(as_of)

        if customer_id is not None:
            orders = orders.filter(pl.col("customer_id") == customer_id)
        orders = filter_period(orders, window_start, as_of)

        if orders.is_empty():
            logger.info("No orders in momentum window", customer_id=customer_id, as_of=str(as_of))
            return MomentumReport(
                view=MomentumView.GROUPS.value,
                window_start=window_start,
                window_end=as_of,
                groups=MomentumGroups(),
                reason=ReasonCode.NO_ORDERS,
            )

        first_order = orders["order_date"].min()
        weeks = week_range(first_order, as_of)
        if len(weeks) < policy.momentum_min_weeks:
            logger.info(
                "Momentum window too short",
                weeks=len(weeks),
                required=policy.momentum_min_weeks,
                customer_id=customer_id,
            )
            return MomentumReport(
                view=MomentumView.GROUPS.value,
                window_start=window_start,
                window_end=as_of,
                groups=MomentumGroups(),
                reason=ReasonCode.INSUFFICIENT_DATA,
            )

        classified = classify_orders(orders, policy)
        weekly = aggregate_weekly(classified, start=first_order, end=as_of)
        stats = self._collection_stats(classified)

        entries: List[MomentumEntry] = []
        for row in stats.iter_rows(named=True):
            if row["total_revenue"] <= 0:
                continue
            if customer_id is None and row["dealers"] < policy.min_stocking_dealers:
                continue
            entries.append(self._entry(row, collection_series(weekly, row["collection_name"])))

        entries.sort(key=lambda e: (-e.productivity_score, -e.total_revenue, e.collection_name))
        top = rent_payer_count(len(entries), policy)
        for i, entry in enumerate(entries):
            entry.rank = i + 1
            if i < top:
                entry.status = MomentumStatus.RENT_PAYER

        logger.info(
            "Momentum ranked",
            collections=len(entries),
            rent_payers=top,
            weeks=len(weeks),
            customer_id=customer_id,
        )
        return MomentumReport(
            view=MomentumView.GROUPS.value,
            window_start=window_start,
            window_end=as_of,
            groups=group_entries(entries),
            entries=entries,
        )

    def report(
        self,
        orders: pl.DataFrame,
        as_of: date,
        view: str = "groups",
        customer_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> MomentumReport:
        """
        Momentum in the requested view.

        ``groups`` carries status groups and every entry; ``raw`` carries
        the rank-ordered entries only, truncated to limit.

        Raises:
            ValueError: For an unknown view
        """
        try:
            momentum_view = MomentumView(view)
        except ValueError:
            raise ValueError(f"Unknown momentum view: {view!r}") from None

        report = self.rank(orders, as_of, customer_id=customer_id)
        report.view = momentum_view.value
        if momentum_view is MomentumView.RAW:
            report.groups = None
            if limit is not None:
                report.entries = report.entries[:max(0, limit)]
        return report

    @staticmethod
    def _collection_stats(classified: pl.DataFrame) -> pl.DataFrame:
        is_project = pl.col("order_type") == "project"
        return classified.group_by("collection_name").agg(
            pl.col("revenue").sum().alias("total_revenue"),
            pl.col("quantity").sum().alias("total_units"),
            pl.when(is_project).then(pl.col("quantity")).otherwise(0.0).sum().alias("project_units"),
            pl.col("customer_id").n_unique().alias("dealers"),
            pl.col("sku").n_unique().alias("sku_count"),
            pl.col("order_date").min().alias("first_sale"),
        ).sort("collection_name")

    def _entry(self, row: Dict, series: pl.DataFrame) -> MomentumEntry:
        policy = self.policy

        # Series starts at the collection's first sale week
        history = series.filter(pl.col("week_start") >= week_start(row["first_sale"]))
        sufficient = len(history) >= policy.momentum_min_weeks
        trend = smooth_series(history, policy)
        delta = trend.momentum_delta() if sufficient else 0.0

        productivity = safe_divide(row["total_revenue"], row["dealers"])
        avg_price = safe_divide(row["total_revenue"], row["total_units"])

        weekly_data = [
            WeeklyMomentumPoint(
                week_start=point["week_start"],
                revenue=point["revenue"],
                signal_ma=float(trend.signal[i]),
                baseline_ma=float(trend.baseline[i]),
                stocking_volume=point["stocking_volume"],
                replenishment_volume=point["replenishment_volume"],
                project_volume=point["project_volume"],
            )
            for i, point in enumerate(history.iter_rows(named=True))
        ]

        return MomentumEntry(
            collection_name=row["collection_name"],
            rank=0,
            productivity_score=productivity,
            total_revenue=float(row["total_revenue"]),
            stocking_dealer_count=int(row["dealers"]),
            avg_unit_price=avg_price,
            is_high_ticket=avg_price > policy.high_ticket_unit_price,
            revenue_momentum_delta=delta,
            status=momentum_status(productivity, delta, sufficient, policy),
            sku_count=int(row["sku_count"]),
            retail_units=float(row["total_units"] - row["project_units"]),
            project_units=float(row["project_units"]),
            has_sufficient_history=sufficient,
            weekly_data=weekly_data,
        )
