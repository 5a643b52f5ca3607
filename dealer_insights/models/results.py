"""
Analytics Results

Plain data produced by the engine. Every result is freshly built per request
and carries no behavior beyond convenience properties, so callers can
serialize it with ``to_dict``.
"""

import math
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .records import RejectedRecord


class ReasonCode(str, Enum):
    """Why a result is empty or partial"""
    INSUFFICIENT_DATA = "insufficient_data"
    NO_ORDERS = "no_orders"


class Quadrant(str, Enum):
    """Strategic quadrant from sales velocity x display presence"""
    UNREALIZED = "unrealized"  # High sales, low display
    OPTIMIZED = "optimized"  # High sales, high display
    EVALUATE = "evaluate"  # Low sales, high display
    SLEEPER = "sleeper"  # Low sales, low display


class MomentumStatus(str, Enum):
    """Momentum status bucket"""
    RENT_PAYER = "rent-payer"
    RISING_STAR = "rising-star"
    DECELERATING = "decelerating"
    HIGH_VALUE_STABLE = "high-value-stable"
    STABLE = "stable"


class EfficiencyStatus(str, Enum):
    """Display efficiency from turn rate"""
    STAR = "star"
    AVERAGE = "average"
    DRAG = "drag"
    GHOST = "ghost"


class LeaderboardTrend(str, Enum):
    """Week-over-week run rate direction"""
    UP = "up"
    DOWN = "down"
    FLAT = "flat"
    NEW = "new"


# =============================================================================
# WEEKLY SERIES
# =============================================================================

@dataclass(frozen=True)
class WeeklyBucket:
    """One collection-week of sales split by order type"""
    week_start: date
    collection_name: str
    revenue: float = 0.0
    units: float = 0.0
    stocking_volume: float = 0.0
    replenishment_volume: float = 0.0
    project_volume: float = 0.0
    project_units: float = 0.0

    @property
    def retail_volume(self) -> float:
        """Recurring demand, projects excluded"""
        return self.stocking_volume + self.replenishment_volume


# =============================================================================
# COLLECTION PERFORMANCE
# =============================================================================

@dataclass
class CollectionPerformance:
    """Customer performance for one collection against the territory"""
    collection_name: str
    units_customer: float
    revenue_customer: float
    display_presence_score: int
    market_average_presence: float
    months_on_floor: float
    sales_velocity_index: float
    performance_index: float
    quadrant: Quadrant
    projected_revenue_lift: float
    units_territory_per_store: float
    territory_average_revenue: float

    @property
    def on_display(self) -> bool:
        return self.display_presence_score > 0


@dataclass
class PerformanceReport:
    """Result of compute_collection_performance"""
    customer_id: str
    period_label: str
    period_start: Optional[date]
    period_end: date
    collections: List[CollectionPerformance] = field(default_factory=list)
    reason: Optional[ReasonCode] = None
    rejected: List[RejectedRecord] = field(default_factory=list)

    @property
    def total_units(self) -> float:
        return sum(c.units_customer for c in self.collections)

    @property
    def total_collections_active(self) -> int:
        return sum(1 for c in self.collections if c.units_customer > 0)


# =============================================================================
# MOMENTUM
# =============================================================================

@dataclass(frozen=True)
class WeeklyMomentumPoint:
    """Chart point for one week of a collection's momentum"""
    week_start: date
    revenue: float
    signal_ma: float
    baseline_ma: float
    stocking_volume: float
    replenishment_volume: float
    project_volume: float


@dataclass
class MomentumEntry:
    """ARPD ranking entry for one collection"""
    collection_name: str
    rank: int
    productivity_score: float  # ARPD
    total_revenue: float
    stocking_dealer_count: int
    avg_unit_price: float
    is_high_ticket: bool
    revenue_momentum_delta: float
    status: MomentumStatus
    sku_count: int = 0
    retail_units: float = 0.0
    project_units: float = 0.0
    has_sufficient_history: bool = True
    weekly_data: List[WeeklyMomentumPoint] = field(default_factory=list)


@dataclass
class MomentumGroups:
    """Entries grouped by status, each group in rank order"""
    rent_payers: List[MomentumEntry] = field(default_factory=list)
    rising_stars: List[MomentumEntry] = field(default_factory=list)
    high_value_stable: List[MomentumEntry] = field(default_factory=list)
    decelerating: List[MomentumEntry] = field(default_factory=list)
    other: List[MomentumEntry] = field(default_factory=list)

    @property
    def totals(self) -> Dict[str, int]:
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}


@dataclass
class MomentumReport:
    """Result of compute_momentum_groups"""
    view: str
    window_start: Optional[date]
    window_end: Optional[date]
    groups: Optional[MomentumGroups] = None
    entries: List[MomentumEntry] = field(default_factory=list)
    reason: Optional[ReasonCode] = None
    rejected: List[RejectedRecord] = field(default_factory=list)


# =============================================================================
# ASSET HEALTH
# =============================================================================

@dataclass
class CollectionEfficiency:
    """Turn rate of a collection's floor displays"""
    collection_name: str
    display_count: int
    units_sold: float
    turn_rate: float
    benchmark_turns: float
    status: EfficiencyStatus


@dataclass
class NonPerformingAsset:
    """Displayed collection that does not pay for its space"""
    collection_name: str
    display_count: int
    units_sold: float
    turn_rate: float
    days_since_last_sale: Optional[int]


@dataclass
class GhostPerformer:
    """SKU selling with no display behind it"""
    sku: str
    collection_name: str
    units_customer: float
    revenue_customer: float
    projected_revenue_lift: float


@dataclass
class SwapCandidate:
    """Displayed SKU with negligible sales"""
    sku: str
    collection_name: str
    on_display_since: Optional[date]
    months_on_floor: float
    units_customer: float
    faces: int


@dataclass
class SwapRecommendation:
    """Replace a swap candidate with a ghost performer"""
    remove: SwapCandidate
    add: GhostPerformer
    net_gain: float
    roi_months: Optional[int]


@dataclass
class AssetHealthReport:
    """Result of compute_asset_health"""
    customer_id: str
    collections: List[CollectionEfficiency] = field(default_factory=list)
    ghost_performers: List[GhostPerformer] = field(default_factory=list)
    swap_candidates: List[SwapCandidate] = field(default_factory=list)
    non_performing_assets: List[NonPerformingAsset] = field(default_factory=list)
    swap_recommendation: Optional[SwapRecommendation] = None
    reason: Optional[ReasonCode] = None
    rejected: List[RejectedRecord] = field(default_factory=list)


# =============================================================================
# LEADERBOARD & OPPORTUNITIES
# =============================================================================

@dataclass(frozen=True)
class LeaderboardPoint:
    """Sparkline point"""
    week_start: date
    retail_volume: float
    project_volume: float
    retail_trend: float


@dataclass
class LeaderboardEntry:
    """Retail velocity ranking entry for one collection"""
    collection_name: str
    rank: int
    run_rate: float
    previous_run_rate: float
    trend: LeaderboardTrend
    trend_percent: float
    rank_delta: int
    retail_volume: float
    project_volume: float
    sku_count: int
    first_sale_date: date
    is_new_intro: bool
    weekly_data: List[LeaderboardPoint] = field(default_factory=list)


@dataclass
class LeaderboardReport:
    """Result of compute_velocity_leaderboard"""
    window_start: Optional[date]
    window_end: Optional[date]
    entries: List[LeaderboardEntry] = field(default_factory=list)
    hot_new_intros: List[LeaderboardEntry] = field(default_factory=list)
    reason: Optional[ReasonCode] = None


@dataclass
class OpportunityCollection:
    """Collection the territory sells well but the customer does not"""
    collection_name: str
    territory_avg_units: float
    territory_avg_revenue: float
    customer_units: float
    customer_revenue: float
    opportunity_gap: float
    performance_index: float


@dataclass
class MoneyOnTableEntry:
    """Projected gain of adding a display for an unrealized collection"""
    collection_name: str
    current_revenue: float
    projected_revenue: float
    projected_revenue_lift: float
    roi_months: Optional[int]


@dataclass
class MoneyOnTable:
    """Unrealized revenue across a customer's collections"""
    entries: List[MoneyOnTableEntry] = field(default_factory=list)

    @property
    def total_opportunity(self) -> float:
        return sum(e.projected_revenue_lift for e in self.entries)


@dataclass
class CustomerInsights:
    """Everything the insights view needs for one customer"""
    customer_id: str
    period_label: str
    total_units: float
    total_collections_active: int
    performance: PerformanceReport
    opportunities: List[OpportunityCollection]
    money_on_table: MoneyOnTable
    asset_health: AssetHealthReport


def to_dict(obj: Any) -> Any:
    """
    Convert a result into JSON-ready primitives.

    Dataclass fields become dict keys (properties are not included). Enums
    are replaced by their values and dates by ISO strings; NaN and
    infinite floats become None.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    return obj
