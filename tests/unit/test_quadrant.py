"""
Unit Tests - Quadrant Classification
"""
import itertools

import pytest

from dealer_insights.analytics.quadrant import classify_quadrant, group_by_quadrant
from dealer_insights.config import InsightsPolicy
from dealer_insights.models import CollectionPerformance, Quadrant


def _performance(name: str, quadrant: Quadrant) -> CollectionPerformance:
    return CollectionPerformance(
        collection_name=name,
        units_customer=0.0,
        revenue_customer=0.0,
        display_presence_score=0,
        market_average_presence=2.0,
        months_on_floor=0.0,
        sales_velocity_index=0.0,
        performance_index=0.0,
        quadrant=quadrant,
        projected_revenue_lift=0.0,
        units_territory_per_store=0.0,
        territory_average_revenue=0.0,
    )


class TestClassifyQuadrant:
    """Tests for classify_quadrant"""

    def test_selling_without_display_is_unrealized(self, policy):
        """Velocity 0.5 with nothing on the floor"""
        assert classify_quadrant(0.5, 0, 2.0, policy) == Quadrant.UNREALIZED

    def test_displayed_without_sales_is_evaluate(self, policy):
        """Velocity 0.1 with three faces against an average of two"""
        assert classify_quadrant(0.1, 3, 2.0, policy) == Quadrant.EVALUATE

    def test_selling_and_displayed_is_optimized(self, policy):
        """Best seller at market presence"""
        assert classify_quadrant(1.0, 2, 2.0, policy) == Quadrant.OPTIMIZED

    def test_neither_is_sleeper(self, policy):
        """Low sales and under-displayed"""
        assert classify_quadrant(0.2, 1, 2.0, policy) == Quadrant.SLEEPER

    def test_velocity_threshold_is_exclusive(self, policy):
        """Exactly 0.3 is not high sales"""
        assert classify_quadrant(0.3, 0, 2.0, policy) == Quadrant.SLEEPER

    def test_presence_threshold_is_inclusive(self, policy):
        """Presence equal to the market average is high display"""
        assert classify_quadrant(0.0, 2, 2.0, policy) == Quadrant.EVALUATE

    def test_threshold_from_policy(self):
        """A stricter velocity bar demotes a collection"""
        policy = InsightsPolicy(high_sales_velocity=0.6)
        assert classify_quadrant(0.5, 0, 2.0, policy) == Quadrant.SLEEPER

    @pytest.mark.parametrize("velocity,presence", list(itertools.product(
        [0.0, 0.1, 0.3, 0.31, 0.5, 1.0],
        [0, 1, 2, 3, 10],
    )))
    def test_total(self, velocity, presence, policy):
        """Every input lands in exactly one quadrant"""
        assert classify_quadrant(velocity, presence, 2.0, policy) in set(Quadrant)


class TestGroupByQuadrant:
    """Tests for group_by_quadrant"""

    def test_groups_keep_input_order(self):
        """Each collection appears once under its quadrant"""
        collections = [
            _performance("Catania", Quadrant.UNREALIZED),
            _performance("Sorrento", Quadrant.SLEEPER),
            _performance("Alba", Quadrant.UNREALIZED),
        ]
        groups = group_by_quadrant(collections)

        assert set(groups) == set(Quadrant)
        assert [c.collection_name for c in groups[Quadrant.UNREALIZED]] == ["Catania", "Alba"]
        assert groups[Quadrant.OPTIMIZED] == []
        assert sum(len(v) for v in groups.values()) == 3
