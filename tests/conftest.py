"""
Test Suite Configuration
"""
from datetime import date, timedelta
from typing import Callable, List, Optional

import pytest
import polars as pl

from dealer_insights.config import InsightsPolicy, Settings
from dealer_insights.models import DisplayRecord, DisplayStatus, RawOrder
from dealer_insights.transformation import clean_displays, clean_orders

# A Monday
WEEK_0 = date(2025, 1, 6)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def policy() -> InsightsPolicy:
    """Default business policy"""
    return InsightsPolicy()


@pytest.fixture
def make_order() -> Callable[..., RawOrder]:
    """Factory for order lines with sensible defaults"""
    def _make(
        sku: str = "10101-01",
        collection_name: Optional[str] = "Catania",
        quantity: float = 1,
        unit_price: Optional[float] = 100.0,
        order_date: date = WEEK_0,
        customer_id: str = "C10001",
        order_number: Optional[str] = None,
    ) -> RawOrder:
        return RawOrder(
            sku=sku,
            collection_name=collection_name,
            quantity=quantity,
            unit_price=unit_price,
            order_date=order_date,
            customer_id=customer_id,
            order_number=order_number,
        )
    return _make


@pytest.fixture
def make_display() -> Callable[..., DisplayRecord]:
    """Factory for display records"""
    def _make(
        sku: str = "10101-01",
        collection_name: str = "Catania",
        customer_id: str = "C10001",
        installed_at: Optional[date] = WEEK_0,
        status: DisplayStatus = DisplayStatus.ACTIVE,
        faces: int = 1,
    ) -> DisplayRecord:
        return DisplayRecord(
            sku=sku,
            collection_name=collection_name,
            customer_id=customer_id,
            installed_at=installed_at,
            status=status,
            faces=faces,
        )
    return _make


@pytest.fixture
def order_frame() -> Callable[[List[RawOrder]], pl.DataFrame]:
    """Cleaned order frame from records"""
    def _frame(orders: List[RawOrder]) -> pl.DataFrame:
        frame, _, _ = clean_orders(orders)
        return frame
    return _frame


@pytest.fixture
def display_frame() -> Callable[[List[DisplayRecord]], pl.DataFrame]:
    """Cleaned display frame from records"""
    def _frame(displays: List[DisplayRecord]) -> pl.DataFrame:
        frame, _ = clean_displays(displays)
        return frame
    return _frame


@pytest.fixture
def territory_orders(make_order) -> List[RawOrder]:
    """
    Ten weeks of orders for three showrooms.

    Catania sells weekly at C10001 and C10002, Sorrento only at C10001,
    Calcolo is a single project order at C10003.
    """
    orders = []
    for week in range(10):
        day = WEEK_0 + timedelta(weeks=week)
        orders.append(make_order(sku="10101-01", quantity=1, unit_price=200.0, order_date=day, customer_id="C10001"))
        orders.append(make_order(sku="10101-02", quantity=2, unit_price=150.0, order_date=day, customer_id="C10002"))
        if week % 2 == 0:
            orders.append(make_order(
                sku="10205-01",
                collection_name="Sorrento",
                quantity=1,
                unit_price=400.0,
                order_date=day + timedelta(days=2),
                customer_id="C10001",
            ))
    orders.append(make_order(
        sku="10310-01",
        collection_name="Calcolo",
        quantity=10,
        unit_price=300.0,
        order_date=WEEK_0 + timedelta(weeks=5),
        customer_id="C10003",
    ))
    return orders


@pytest.fixture
def territory_displays(make_display) -> List[DisplayRecord]:
    """Floor displays for the territory_orders showrooms"""
    return [
        make_display(sku="10101-01", customer_id="C10001", faces=1),
        make_display(sku="10101-02", customer_id="C10002", faces=2),
        make_display(sku="10310-02", collection_name="Calcolo", customer_id="C10001", faces=1),
        make_display(
            sku="10205-01",
            collection_name="Sorrento",
            customer_id="C10002",
            status=DisplayStatus.ARCHIVED,
        ),
    ]
