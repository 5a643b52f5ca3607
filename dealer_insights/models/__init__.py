"""
Data Models
"""
from .records import (
    CatalogEntry,
    ClassifiedOrder,
    DisplayRecord,
    DisplayStatus,
    OrderType,
    RawOrder,
    RejectedRecord,
)
from .results import (
    AssetHealthReport,
    CollectionEfficiency,
    CollectionPerformance,
    CustomerInsights,
    EfficiencyStatus,
    GhostPerformer,
    LeaderboardEntry,
    LeaderboardPoint,
    LeaderboardReport,
    LeaderboardTrend,
    MomentumEntry,
    MomentumGroups,
    MomentumReport,
    MomentumStatus,
    MoneyOnTable,
    MoneyOnTableEntry,
    NonPerformingAsset,
    OpportunityCollection,
    PerformanceReport,
    Quadrant,
    ReasonCode,
    SwapCandidate,
    SwapRecommendation,
    WeeklyBucket,
    WeeklyMomentumPoint,
    to_dict,
)
from .territory import CollectionBenchmark, TerritoryAggregate

__all__ = [
    "CatalogEntry",
    "ClassifiedOrder",
    "DisplayRecord",
    "DisplayStatus",
    "OrderType",
    "RawOrder",
    "RejectedRecord",
    "AssetHealthReport",
    "CollectionEfficiency",
    "CollectionPerformance",
    "CustomerInsights",
    "EfficiencyStatus",
    "GhostPerformer",
    "LeaderboardEntry",
    "LeaderboardPoint",
    "LeaderboardReport",
    "LeaderboardTrend",
    "MomentumEntry",
    "MomentumGroups",
    "MomentumReport",
    "MomentumStatus",
    "MoneyOnTable",
    "MoneyOnTableEntry",
    "NonPerformingAsset",
    "OpportunityCollection",
    "PerformanceReport",
    "Quadrant",
    "ReasonCode",
    "SwapCandidate",
    "SwapRecommendation",
    "WeeklyBucket",
    "WeeklyMomentumPoint",
    "to_dict",
    "CollectionBenchmark",
    "TerritoryAggregate",
]
