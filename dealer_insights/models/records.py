"""
Input Records

Immutable value objects supplied by the engine's collaborators (order source,
display source, catalog). The engine never mutates them.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional


class OrderType(str, Enum):
    """Order-group classification"""
    STOCKING = "stocking"  # Wide initial floor setup
    PROJECT = "project"  # Deep one-off job-site order
    REPLENISHMENT = "replenishment"  # Standard reorder


class DisplayStatus(str, Enum):
    """Display audit status"""
    ACTIVE = "ACTIVE"
    MISSING = "MISSING"
    ARCHIVED = "ARCHIVED"


@dataclass(frozen=True)
class RawOrder:
    """One order line as ingested from the order source"""
    sku: str
    collection_name: Optional[str]
    quantity: float
    unit_price: Optional[float]
    order_date: date
    customer_id: str
    order_number: Optional[str] = None

    @property
    def revenue(self) -> float:
        return self.quantity * (self.unit_price or 0.0)


@dataclass(frozen=True)
class ClassifiedOrder:
    """Order line with the classification of its order-group"""
    order: RawOrder
    order_type: OrderType

    @property
    def revenue(self) -> float:
        return self.order.revenue


@dataclass(frozen=True)
class DisplayRecord:
    """A SKU on display in a customer's showroom"""
    sku: str
    collection_name: str
    customer_id: str
    installed_at: Optional[date] = None
    status: DisplayStatus = DisplayStatus.ACTIVE
    last_verified_at: Optional[date] = None
    faces: int = 1


@dataclass(frozen=True)
class CatalogEntry:
    """Catalog lookup result for a SKU"""
    sku: str
    collection_name: str
    unit_price: float
    product_name: Optional[str] = None


@dataclass(frozen=True)
class RejectedRecord:
    """A record skipped because it failed validation"""
    kind: str  # "order" or "display"
    reason: str
    record: Dict[str, Any]
