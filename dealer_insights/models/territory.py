"""
Territory Aggregates

Cross-customer totals passed explicitly into the per-customer calculations,
so those stay pure functions of their inputs.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional


@dataclass(frozen=True)
class CollectionBenchmark:
    """Territory totals for one collection"""
    collection_name: str
    total_revenue_all_customers: float = 0.0
    total_units_all_customers: float = 0.0
    customer_count_with_purchases: int = 0
    total_display_faces: int = 0
    showroom_count_with_display: int = 0

    @property
    def has_sales(self) -> bool:
        return self.total_revenue_all_customers > 0 and self.customer_count_with_purchases > 0

    @property
    def average_revenue_per_store(self) -> float:
        if self.customer_count_with_purchases <= 0:
            return 0.0
        return self.total_revenue_all_customers / self.customer_count_with_purchases

    @property
    def average_units_per_store(self) -> float:
        if self.customer_count_with_purchases <= 0:
            return 0.0
        return self.total_units_all_customers / self.customer_count_with_purchases


@dataclass(frozen=True)
class TerritoryAggregate:
    """Territory benchmarks keyed by collection name"""
    benchmarks: Dict[str, CollectionBenchmark] = field(default_factory=dict)
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    def get(self, collection_name: str) -> CollectionBenchmark:
        """Benchmark for a collection, all zeros when the territory never sold it"""
        benchmark = self.benchmarks.get(collection_name)
        if benchmark is None:
            return CollectionBenchmark(collection_name=collection_name)
        return benchmark

    def __contains__(self, collection_name: str) -> bool:
        return collection_name in self.benchmarks

    def __len__(self) -> int:
        return len(self.benchmarks)
