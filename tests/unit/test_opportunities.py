"""
Unit Tests - Opportunities and Money on the Table
"""
import pytest

from dealer_insights.analytics.opportunities import money_on_table, opportunity_collections
from dealer_insights.config import InsightsPolicy
from dealer_insights.models import (
    CollectionBenchmark,
    CollectionPerformance,
    Quadrant,
    TerritoryAggregate,
)


def _performance(name, units=0.0, revenue=0.0, quadrant=Quadrant.SLEEPER, lift=0.0) -> CollectionPerformance:
    return CollectionPerformance(
        collection_name=name,
        units_customer=units,
        revenue_customer=revenue,
        display_presence_score=0,
        market_average_presence=2.0,
        months_on_floor=0.0,
        sales_velocity_index=0.0,
        performance_index=0.0,
        quadrant=quadrant,
        projected_revenue_lift=lift,
        units_territory_per_store=0.0,
        territory_average_revenue=0.0,
    )


@pytest.fixture
def territory() -> TerritoryAggregate:
    def bench(name, revenue, units, customers):
        return CollectionBenchmark(
            collection_name=name,
            total_revenue_all_customers=revenue,
            total_units_all_customers=units,
            customer_count_with_purchases=customers,
        )
    return TerritoryAggregate(benchmarks={
        "Alba": bench("Alba", 60000.0, 30.0, 3),
        "Bruma": bench("Bruma", 20000.0, 40.0, 2),
        "Cora": bench("Cora", 5000.0, 10.0, 1),
        "Dune": bench("Dune", 100000.0, 100.0, 10),
    })


class TestOpportunityCollections:
    """Tests for opportunity_collections"""

    def test_trailing_collections(self, territory, policy):
        """Under-bought collections with real territory volume, largest gap first"""
        performance = [
            _performance("Alba", units=9.0, revenue=18000.0),
            _performance("Bruma", units=4.0, revenue=2000.0),
        ]
        result = opportunity_collections(territory, performance, policy)

        assert [o.collection_name for o in result] == ["Dune", "Bruma"]
        dune, bruma = result
        assert dune.opportunity_gap == pytest.approx(10000.0)
        assert dune.performance_index == 0.0
        assert bruma.territory_avg_units == pytest.approx(20.0)
        assert bruma.performance_index == pytest.approx(0.2)
        assert bruma.opportunity_gap == pytest.approx(8000.0)

    def test_small_territory_collections_skipped(self, territory, policy):
        """Territory revenue must exceed the minimum"""
        result = opportunity_collections(territory, [], policy)
        assert "Cora" not in [o.collection_name for o in result]

    def test_limit(self, territory):
        """Result size comes from policy"""
        result = opportunity_collections(territory, [], InsightsPolicy(opportunity_limit=1))
        assert [o.collection_name for o in result] == ["Alba"]

    def test_empty_territory(self, policy):
        """No benchmarks, no opportunities"""
        assert opportunity_collections(TerritoryAggregate(), [], policy) == []


class TestMoneyOnTable:
    """Tests for money_on_table"""

    def test_unrealized_only(self, policy):
        """Only unrealized collections, largest lift first"""
        performance = [
            _performance("Alba", revenue=4000.0, quadrant=Quadrant.UNREALIZED, lift=6000.0),
            _performance("Bruma", revenue=9000.0, quadrant=Quadrant.OPTIMIZED, lift=900.0),
            _performance("Cora", revenue=1000.0, quadrant=Quadrant.UNREALIZED, lift=0.0),
            _performance("Dune", revenue=20000.0, quadrant=Quadrant.UNREALIZED, lift=2400.0),
        ]
        result = money_on_table(performance, policy)

        assert [e.collection_name for e in result.entries] == ["Alba", "Dune", "Cora"]
        assert result.entries[0].projected_revenue == pytest.approx(10000.0)
        assert result.entries[0].roi_months == 1
        assert result.entries[1].roi_months == 3
        assert result.entries[2].roi_months is None
        assert result.total_opportunity == pytest.approx(8400.0)

    def test_nothing_unrealized(self, policy):
        """Empty table"""
        result = money_on_table([_performance("Alba", quadrant=Quadrant.OPTIMIZED)], policy)
        assert result.entries == []
        assert result.total_opportunity == 0.0
