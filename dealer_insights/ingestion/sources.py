"""
Data Sources

Collaborator interfaces the engine reads from, plus in-memory
implementations used by the CLI and the tests. Storage backends implement
the same protocols.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol

from dealer_insights.models.records import CatalogEntry, DisplayRecord, RawOrder
from dealer_insights.models.territory import TerritoryAggregate


class OrderSource(Protocol):
    """Order history provider"""

    def orders(
        self,
        customer_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[RawOrder]:
        ...


class DisplaySource(Protocol):
    """Display inventory provider"""

    def displays(self, customer_id: Optional[str] = None) -> List[DisplayRecord]:
        ...


class CatalogLookup(Protocol):
    """SKU to collection/price resolution"""

    def resolve(self, sku: str) -> Optional[CatalogEntry]:
        ...


class TerritoryAggregateSource(Protocol):
    """Precomputed territory benchmarks"""

    def territory_aggregate(self, start: Optional[date], end: date) -> TerritoryAggregate:
        ...


class InMemoryOrderSource:
    """Order source over a list of records"""

    def __init__(self, orders: Iterable[RawOrder]):
        self._orders = list(orders)

    def orders(
        self,
        customer_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[RawOrder]:
        """Orders for one customer (or all) with start <= order_date <= end"""
        return [
            o for o in self._orders
            if (customer_id is None or o.customer_id == customer_id)
            and (start is None or o.order_date >= start)
            and (end is None or o.order_date <= end)
        ]

    def __len__(self) -> int:
        return len(self._orders)


class InMemoryDisplaySource:
    """Display source over a list of records"""

    def __init__(self, displays: Iterable[DisplayRecord]):
        self._displays = list(displays)

    def displays(self, customer_id: Optional[str] = None) -> List[DisplayRecord]:
        return [d for d in self._displays if customer_id is None or d.customer_id == customer_id]


class InMemoryCatalog:
    """Catalog keyed by SKU"""

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries: Dict[str, CatalogEntry] = {e.sku: e for e in entries}

    def resolve(self, sku: str) -> Optional[CatalogEntry]:
        return self._entries.get(sku)

    def __len__(self) -> int:
        return len(self._entries)
