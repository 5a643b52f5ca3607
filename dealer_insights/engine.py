"""
Insights Engine

Facade over the analytics modules. Pulls records from the collaborator
sources, cleans and validates them, resolves the as-of date and reporting
period, and hands plain frames to the pure calculations.

Every call builds its results from scratch; nothing is cached between calls.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import polars as pl
import structlog

from dealer_insights.config import InsightsPolicy, get_policy, get_settings
from dealer_insights.ingestion.sources import (
    CatalogLookup,
    DisplaySource,
    OrderSource,
    TerritoryAggregateSource,
)
from dealer_insights.models.records import RejectedRecord
from dealer_insights.models.results import (
    AssetHealthReport,
    CollectionPerformance,
    CustomerInsights,
    LeaderboardReport,
    MomentumReport,
    PerformanceReport,
    ReasonCode,
)
from dealer_insights.models.territory import TerritoryAggregate
from dealer_insights.transformation.cleaners import active_displays, clean_displays, clean_orders, filter_period
from dealer_insights.analytics.asset_health import evaluate_asset_health
from dealer_insights.analytics.leaderboard import compute_velocity_leaderboard
from dealer_insights.analytics.momentum import MomentumRanker
from dealer_insights.analytics.opportunities import money_on_table, opportunity_collections
from dealer_insights.analytics.performance import (
    Period,
    compute_collection_performance,
    describe_period,
    resolve_period,
)
from dealer_insights.analytics.territory import build_territory_aggregate

logger = structlog.get_logger(__name__)


@dataclass
class CustomerSnapshot:
    """Cleaned inputs for one customer and period"""
    customer_id: str
    as_of: date
    period: Period
    orders: pl.DataFrame
    displays: pl.DataFrame
    territory: TerritoryAggregate
    rejected: List[RejectedRecord] = field(default_factory=list)

    @property
    def has_activity(self) -> bool:
        return not self.orders.is_empty() or not active_displays(self.displays).is_empty()

    @property
    def period_label(self) -> str:
        if self.orders.is_empty():
            return self.period.label
        return describe_period(self.orders["order_date"].min(), self.orders["order_date"].max())


class InsightsEngine:
    """
    Dealer performance analytics over pluggable sources.

    Example:
        engine = InsightsEngine(InMemoryOrderSource(orders), InMemoryDisplaySource(displays))
        report = engine.compute_collection_performance("C10001")
    """

    def __init__(
        self,
        order_source: OrderSource,
        display_source: DisplaySource,
        catalog: Optional[CatalogLookup] = None,
        territory_source: Optional[TerritoryAggregateSource] = None,
        policy: Optional[InsightsPolicy] = None,
        as_of: Optional[date] = None,
    ):
        self.order_source = order_source
        self.display_source = display_source
        self.catalog = catalog
        self.territory_source = territory_source
        self.policy = policy or get_policy()
        self._as_of = as_of

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def _orders(self):
        orders, rejected, _ = clean_orders(self.order_source.orders(), self.catalog)
        return orders, rejected

    def _displays(self, customer_id: Optional[str] = None):
        return clean_displays(self.display_source.displays(customer_id))

    def resolve_as_of(self, orders: pl.DataFrame) -> date:
        """Explicit as-of, then the configured one, then the latest order date"""
        if self._as_of is not None:
            return self._as_of
        configured = get_settings().as_of
        if configured:
            return date.fromisoformat(configured)
        if not orders.is_empty():
            return orders["order_date"].max()
        return date.today()

    def _territory(self, period_orders: pl.DataFrame, displays: pl.DataFrame, period: Period) -> TerritoryAggregate:
        if self.territory_source is not None:
            return self.territory_source.territory_aggregate(period.start, period.end)
        return build_territory_aggregate(period_orders, displays, period.start, period.end)

    def snapshot(self, customer_id: str, period_label: str = "L12M") -> CustomerSnapshot:
        """Cleaned customer and territory inputs for a period"""
        orders, rejected = self._orders()
        displays, rejected_displays = self._displays()
        as_of = self.resolve_as_of(orders)
        period = resolve_period(period_label, as_of)

        period_orders = filter_period(orders, period.start, period.end)
        return CustomerSnapshot(
            customer_id=customer_id,
            as_of=as_of,
            period=period,
            orders=period_orders.filter(pl.col("customer_id") == customer_id),
            displays=displays.filter(pl.col("customer_id") == customer_id),
            territory=self._territory(period_orders, displays, period),
            rejected=rejected + rejected_displays,
        )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _performance(self, snap: CustomerSnapshot) -> List[CollectionPerformance]:
        return compute_collection_performance(
            snap.orders,
            snap.territory,
            snap.displays,
            snap.as_of,
            self.policy,
        )

    def _performance_report(self, snap: CustomerSnapshot) -> PerformanceReport:
        report = PerformanceReport(
            customer_id=snap.customer_id,
            period_label=snap.period_label,
            period_start=snap.period.start,
            period_end=snap.period.end,
            rejected=snap.rejected,
        )
        if not snap.has_activity:
            report.reason = ReasonCode.NO_ORDERS
            return report
        report.collections = self._performance(snap)
        return report

    def compute_collection_performance(self, customer_id: str, period_label: str = "L12M") -> PerformanceReport:
        """
        Per-collection performance for one customer.

        Raises:
            ValueError: For an unknown period label
        """
        snap = self.snapshot(customer_id, period_label)
        report = self._performance_report(snap)
        logger.info(
            "Collection performance computed",
            customer_id=customer_id,
            period=snap.period.label,
            collections=len(report.collections),
            rejected=len(report.rejected),
        )
        return report

    def compute_momentum_groups(
        self,
        view: str = "groups",
        customer_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> MomentumReport:
        """
        ARPD momentum ranking, territory-wide or for one customer.

        Raises:
            ValueError: For an unknown view
        """
        orders, rejected = self._orders()
        report = MomentumRanker(self.policy).report(
            orders,
            self.resolve_as_of(orders),
            view=view,
            customer_id=customer_id,
            limit=limit,
        )
        report.rejected = rejected
        return report

    def _asset_health(self, snap: CustomerSnapshot, performance: List[CollectionPerformance]) -> AssetHealthReport:
        report = evaluate_asset_health(
            snap.customer_id,
            snap.orders,
            snap.displays,
            snap.territory,
            performance,
            snap.as_of,
            self.policy,
            period=snap.period,
        )
        report.rejected = snap.rejected
        return report

    def compute_asset_health(self, customer_id: str, period_label: str = "L12M") -> AssetHealthReport:
        """Display efficiency, ghost performers and swap candidates for one customer"""
        snap = self.snapshot(customer_id, period_label)
        return self._asset_health(snap, self._performance(snap))

    def compute_velocity_leaderboard(self, customer_id: Optional[str] = None) -> LeaderboardReport:
        """Retail run-rate ranking, territory-wide or for one customer"""
        orders, _ = self._orders()
        return compute_velocity_leaderboard(orders, self.resolve_as_of(orders), customer_id, self.policy)

    def build_customer_insights(self, customer_id: str, period_label: str = "L12M") -> CustomerInsights:
        """Performance, opportunities, money on the table and asset health in one bundle"""
        snap = self.snapshot(customer_id, period_label)
        performance = self._performance_report(snap)

        insights = CustomerInsights(
            customer_id=customer_id,
            period_label=performance.period_label,
            total_units=performance.total_units,
            total_collections_active=performance.total_collections_active,
            performance=performance,
            opportunities=opportunity_collections(snap.territory, performance.collections, self.policy),
            money_on_table=money_on_table(performance.collections, self.policy),
            asset_health=self._asset_health(snap, performance.collections),
        )
        logger.info(
            "Customer insights built",
            customer_id=customer_id,
            collections=len(performance.collections),
            opportunities=len(insights.opportunities),
            money_on_table=insights.money_on_table.total_opportunity,
        )
        return insights
