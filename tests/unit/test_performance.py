"""
Unit Tests - Collection Performance
"""
from datetime import date, timedelta

import polars as pl
import pytest

from dealer_insights.analytics.performance import (
    Period,
    compute_collection_performance,
    describe_period,
    market_average_presence,
    months_on_floor,
    projected_revenue_lift,
    resolve_period,
)
from dealer_insights.analytics.territory import build_territory_aggregate
from dealer_insights.models import CollectionBenchmark, Quadrant

WEEK_0 = date(2025, 1, 6)
AS_OF = WEEK_0 + timedelta(weeks=10)


def _benchmark(revenue=20000.0, customers=2, faces=0, showrooms=0, units=0.0) -> CollectionBenchmark:
    return CollectionBenchmark(
        collection_name="Catania",
        total_revenue_all_customers=revenue,
        total_units_all_customers=units,
        customer_count_with_purchases=customers,
        total_display_faces=faces,
        showroom_count_with_display=showrooms,
    )


class TestFormulas:
    """Tests for the per-collection formulas"""

    def test_lift_closes_gap_to_average(self, policy):
        """Below-average revenue lifts to parity"""
        assert projected_revenue_lift(4000.0, _benchmark(), policy) == pytest.approx(6000.0)

    def test_lift_above_average(self, policy):
        """Above-average revenue lifts by ten percent"""
        assert projected_revenue_lift(20000.0, _benchmark(), policy) == pytest.approx(2000.0)

    def test_lift_at_average(self, policy):
        """Exactly average counts as above"""
        assert projected_revenue_lift(10000.0, _benchmark(), policy) == pytest.approx(1000.0)

    def test_lift_without_territory_sales(self, policy):
        """No territory sales, no lift"""
        assert projected_revenue_lift(500.0, _benchmark(revenue=0.0, customers=0), policy) == 0.0

    def test_market_presence_average(self, policy):
        """Faces per displaying showroom"""
        assert market_average_presence(_benchmark(faces=6, showrooms=4), policy) == pytest.approx(1.5)

    def test_market_presence_fallback(self, policy):
        """No displaying showroom falls back to 2.0"""
        assert market_average_presence(_benchmark(), policy) == 2.0

    @pytest.mark.parametrize("installed_at,expected", [
        (None, 0.0),
        (AS_OF - timedelta(days=90), 3.0),
        (AS_OF, 0.0),
        (AS_OF + timedelta(days=10), 0.0),
    ])
    def test_months_on_floor(self, installed_at, expected, policy):
        """Thirty-day months since install, never negative"""
        assert months_on_floor(installed_at, AS_OF, policy) == pytest.approx(expected)


class TestPeriods:
    """Tests for period resolution"""

    def test_trailing_twelve_months(self):
        """L12M is the trailing 365 days"""
        period = resolve_period("L12M", date(2025, 11, 4))
        assert period.start == date(2024, 11, 4)
        assert period.end == date(2025, 11, 4)

    def test_trailing_months_clamp_day(self):
        """Month arithmetic clamps to the end of shorter months"""
        assert resolve_period("L3M", date(2025, 5, 31)).start == date(2025, 2, 28)

    def test_trailing_months_cross_year(self):
        """Months back across a year boundary"""
        assert resolve_period("l6m", date(2025, 3, 15)).start == date(2024, 9, 15)

    def test_year_to_date(self):
        """YTD starts after the last day of the prior year"""
        period = resolve_period("YTD", date(2025, 6, 1))
        assert period.start == date(2024, 12, 31)
        assert period.contains(date(2025, 1, 1))
        assert not period.contains(date(2024, 12, 31))

    def test_all(self):
        """ALL has no lower bound"""
        period = resolve_period("ALL", date(2025, 6, 1))
        assert period.start is None
        assert period.contains(date(1999, 1, 1))
        assert not period.contains(date(2025, 6, 2))

    def test_default_label(self):
        """An empty label means L12M"""
        assert resolve_period("", date(2025, 6, 1)).label == "L12M"

    @pytest.mark.parametrize("label", ["bogus", "L0M", "12M", "LXM"])
    def test_unknown_label(self, label):
        """Unknown labels are rejected"""
        with pytest.raises(ValueError):
            resolve_period(label, date(2025, 6, 1))

    def test_period_bounds(self):
        """Start exclusive, end inclusive"""
        period = Period(label="L1M", start=date(2025, 1, 1), end=date(2025, 2, 1))
        assert not period.contains(date(2025, 1, 1))
        assert period.contains(date(2025, 2, 1))

    def test_describe_period(self):
        """Human-readable span"""
        assert describe_period(date(2025, 1, 6), date(2025, 11, 4)) == "Jan 6 - Nov 4, 2025"
        assert describe_period(None, date(2025, 11, 4)) == ""


class TestComputeCollectionPerformance:
    """Tests for compute_collection_performance"""

    @pytest.fixture
    def performance(self, territory_orders, territory_displays, order_frame, display_frame, policy):
        orders = order_frame(territory_orders)
        displays = display_frame(territory_displays)
        territory = build_territory_aggregate(orders, displays)
        return compute_collection_performance(
            orders.filter(pl.col("customer_id") == "C10001"),
            territory,
            displays.filter(pl.col("customer_id") == "C10001"),
            AS_OF,
            policy,
        )

    def test_purchased_and_displayed_collections(self, performance):
        """Bought collections plus displayed ones, by revenue then name"""
        assert [c.collection_name for c in performance] == ["Catania", "Sorrento", "Calcolo"]

    def test_under_displayed_best_seller(self, performance):
        """Catania sells but sits below market presence"""
        catania = performance[0]
        assert catania.units_customer == 10
        assert catania.revenue_customer == pytest.approx(2000.0)
        assert catania.display_presence_score == 1
        assert catania.market_average_presence == pytest.approx(1.5)
        assert catania.sales_velocity_index == pytest.approx(1.0)
        assert catania.performance_index == pytest.approx(10 / 15)
        assert catania.quadrant == Quadrant.UNREALIZED
        assert catania.projected_revenue_lift == pytest.approx(500.0)
        assert catania.months_on_floor == pytest.approx(70 / 30)

    def test_archived_displays_do_not_count(self, performance):
        """Sorrento's only display is archived, so presence falls back"""
        sorrento = performance[1]
        assert sorrento.display_presence_score == 0
        assert sorrento.market_average_presence == 2.0
        assert sorrento.months_on_floor == 0.0
        assert sorrento.projected_revenue_lift == pytest.approx(200.0)

    def test_displayed_without_sales(self, performance):
        """Calcolo is on the floor but never bought by this customer"""
        calcolo = performance[2]
        assert calcolo.revenue_customer == 0.0
        assert calcolo.sales_velocity_index == 0.0
        assert calcolo.performance_index == 0.0
        assert calcolo.quadrant == Quadrant.EVALUATE
        assert calcolo.projected_revenue_lift == pytest.approx(3000.0)

    def test_no_orders(self, order_frame, display_frame, policy):
        """An empty customer gives an empty result"""
        orders = order_frame([])
        displays = display_frame([])
        territory = build_territory_aggregate(orders, displays)
        assert compute_collection_performance(orders, territory, displays, AS_OF, policy) == []

    def test_velocity_bounded(self, performance):
        """Velocity is always in [0, 1]"""
        assert all(0.0 <= c.sales_velocity_index <= 1.0 for c in performance)
