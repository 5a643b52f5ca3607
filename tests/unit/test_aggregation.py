"""
Unit Tests - Weekly Aggregation
"""
from datetime import date, timedelta

import pytest
import polars as pl

from dealer_insights.analytics.aggregation import (
    aggregate_weekly,
    build_weekly_series,
    collection_series,
    week_range,
    week_start,
)
from dealer_insights.analytics.classifier import classify_orders, classify_raw_orders

WEEK_0 = date(2025, 1, 6)


@pytest.fixture
def classified(order_frame, policy):
    """Classify records into a frame"""
    def _classify(orders):
        return classify_orders(order_frame(orders), policy)
    return _classify


class TestWeekStart:
    """Tests for Monday alignment"""

    @pytest.mark.parametrize("day,expected", [
        (date(2025, 1, 6), date(2025, 1, 6)),
        (date(2025, 1, 8), date(2025, 1, 6)),
        (date(2025, 1, 12), date(2025, 1, 6)),
        (date(2025, 1, 13), date(2025, 1, 13)),
    ])
    def test_week_start(self, day, expected):
        """Every day maps to the Monday of its week"""
        assert week_start(day) == expected

    def test_week_range_inclusive(self):
        """Both end weeks are included"""
        weeks = week_range(date(2025, 1, 8), date(2025, 2, 2))
        assert weeks[0] == WEEK_0
        assert weeks[-1] == date(2025, 1, 27)
        assert len(weeks) == 4


class TestAggregateWeekly:
    """Tests for aggregate_weekly"""

    def test_n_plus_one_buckets(self, make_order, classified):
        """Orders in weeks 0 and 4 give five contiguous buckets"""
        orders = [
            make_order(order_date=WEEK_0, order_number="SO1"),
            make_order(order_date=WEEK_0 + timedelta(weeks=4, days=3), order_number="SO2"),
        ]
        result = aggregate_weekly(classified(orders))

        assert len(result) == 5
        assert result["week_start"].to_list() == [WEEK_0 + timedelta(weeks=i) for i in range(5)]
        assert result["revenue"].to_list() == [100.0, 0.0, 0.0, 0.0, 100.0]

    def test_every_collection_covers_the_range(self, make_order, classified):
        """A collection selling once still gets every week"""
        orders = [
            make_order(order_date=WEEK_0, order_number="SO1"),
            make_order(order_date=WEEK_0 + timedelta(weeks=3), order_number="SO2"),
            make_order(sku="10205-01", collection_name="Sorrento", order_date=WEEK_0 + timedelta(weeks=1),
                       order_number="SO3"),
        ]
        result = aggregate_weekly(classified(orders))

        counts = dict(result.group_by("collection_name").len().iter_rows())
        assert counts == {"Catania": 4, "Sorrento": 4}
        sorrento = collection_series(result, "Sorrento")
        assert sorrento["revenue"].to_list() == [0.0, 100.0, 0.0, 0.0]

    def test_revenue_equals_sum_of_typed_volumes(self, make_order, classified):
        """Unified revenue is the sum across order types"""
        orders = (
            [make_order(sku=f"S{i}", order_number="SO1") for i in range(10)]
            + [make_order(sku="P1", quantity=10, order_number="SO2")]
            + [make_order(sku="R1", quantity=2, order_number="SO3")]
        )
        result = aggregate_weekly(classified(orders))
        row = result.row(0, named=True)

        assert row["stocking_volume"] == 1000.0
        assert row["project_volume"] == 1000.0
        assert row["replenishment_volume"] == 200.0
        assert row["revenue"] == row["stocking_volume"] + row["project_volume"] + row["replenishment_volume"]
        assert row["units"] == 22.0
        assert row["project_units"] == 10.0

    def test_no_order_dropped(self, territory_orders, classified):
        """Total revenue survives aggregation"""
        frame = classified(territory_orders)
        result = aggregate_weekly(frame)
        assert result["revenue"].sum() == pytest.approx(frame["revenue"].sum())

    def test_sorted_by_collection_then_week(self, territory_orders, classified):
        """Output is sorted by collection, then chronologically"""
        result = aggregate_weekly(classified(territory_orders))
        assert result.equals(result.sort(["collection_name", "week_start"]))

    def test_explicit_end_extends_series(self, make_order, classified):
        """A live series runs through the as-of week with zeros"""
        orders = [make_order(order_date=WEEK_0, order_number="SO1")]
        result = aggregate_weekly(classified(orders), end=WEEK_0 + timedelta(weeks=2, days=1))
        assert result["revenue"].to_list() == [100.0, 0.0, 0.0]

    def test_explicit_start_excludes_earlier_weeks(self, make_order, classified):
        """Lines before the first week are outside the series"""
        orders = [
            make_order(order_date=WEEK_0, order_number="SO1"),
            make_order(order_date=WEEK_0 + timedelta(weeks=2), order_number="SO2"),
        ]
        result = aggregate_weekly(classified(orders), start=WEEK_0 + timedelta(weeks=1))
        assert result["week_start"].to_list() == [WEEK_0 + timedelta(weeks=1), WEEK_0 + timedelta(weeks=2)]
        assert result["revenue"].sum() == 100.0

    def test_empty_frame(self, classified):
        """No orders, no buckets"""
        result = aggregate_weekly(classified([]))
        assert result.is_empty()
        assert "stocking_volume" in result.columns


class TestBuildWeeklySeries:
    """Tests for record-based aggregation"""

    def test_buckets_from_classified_records(self, make_order, policy):
        """Buckets carry retail volume without projects"""
        orders = [
            make_order(sku="P1", quantity=6, order_number="SO1"),
            make_order(sku="R1", quantity=1, order_number="SO2", order_date=WEEK_0 + timedelta(weeks=1)),
        ]
        buckets = build_weekly_series(classify_raw_orders(orders, policy))

        assert [b.week_start for b in buckets] == [WEEK_0, WEEK_0 + timedelta(weeks=1)]
        assert buckets[0].project_volume == 600.0
        assert buckets[0].retail_volume == 0.0
        assert buckets[1].retail_volume == 100.0
