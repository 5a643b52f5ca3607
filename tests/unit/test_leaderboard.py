"""
Unit Tests - Velocity Leaderboard
"""
from datetime import date, timedelta

import pytest

from dealer_insights.analytics.leaderboard import (
    compute_velocity_leaderboard,
    hot_new_intros,
    leaderboard_trend,
)
from dealer_insights.models import LeaderboardEntry, LeaderboardPoint, LeaderboardTrend, ReasonCode

WEEK_0 = date(2025, 1, 6)
AS_OF = WEEK_0 + timedelta(weeks=9, days=2)


def _entry(name, rank_delta, retail, is_new_intro=True) -> LeaderboardEntry:
    return LeaderboardEntry(
        collection_name=name,
        rank=1,
        run_rate=100.0,
        previous_run_rate=50.0,
        trend=LeaderboardTrend.UP,
        trend_percent=100.0,
        rank_delta=rank_delta,
        retail_volume=sum(retail),
        project_volume=0.0,
        sku_count=1,
        first_sale_date=WEEK_0,
        is_new_intro=is_new_intro,
        weekly_data=[
            LeaderboardPoint(WEEK_0 + timedelta(weeks=i), value, 0.0, value)
            for i, value in enumerate(retail)
        ],
    )


class TestLeaderboardTrend:
    """Tests for leaderboard_trend"""

    @pytest.mark.parametrize("current,previous,expected", [
        (100.0, 0.0, LeaderboardTrend.NEW),
        (0.0, 0.0, LeaderboardTrend.FLAT),
        (106.0, 100.0, LeaderboardTrend.UP),
        (94.0, 100.0, LeaderboardTrend.DOWN),
        (104.0, 100.0, LeaderboardTrend.FLAT),
        (0.0, 100.0, LeaderboardTrend.DOWN),
    ])
    def test_trend(self, current, previous, expected, policy):
        """Moves inside the five percent band are flat"""
        assert leaderboard_trend(current, previous, policy) == expected


class TestHotNewIntros:
    """Tests for hot_new_intros"""

    def test_climbing_intro_with_history(self, policy):
        """Big climb backed by earlier retail sales"""
        entries = [_entry("Nova", 12, [10.0, 0.0, 0.0, 50.0, 80.0, 90.0])]
        assert [e.collection_name for e in hot_new_intros(entries, policy)] == ["Nova"]

    @pytest.mark.parametrize("rank_delta,retail,is_new_intro", [
        (10, [10.0, 0.0, 0.0, 50.0], True),
        (12, [0.0, 0.0, 0.0, 50.0, 80.0, 90.0], True),
        (12, [10.0, 50.0, 80.0], True),
        (12, [10.0, 0.0, 0.0, 50.0], False),
    ])
    def test_not_hot(self, rank_delta, retail, is_new_intro, policy):
        """Small jumps, jumps from nothing and established collections are skipped"""
        entries = [_entry("Nova", rank_delta, retail, is_new_intro)]
        assert hot_new_intros(entries, policy) == []


class TestComputeVelocityLeaderboard:
    """Tests for compute_velocity_leaderboard"""

    def test_ranking(self, territory_orders, order_frame, policy):
        """Retail run rate ranks collections; projects do not count"""
        report = compute_velocity_leaderboard(order_frame(territory_orders), AS_OF, policy=policy)

        assert report.reason is None
        assert [e.collection_name for e in report.entries] == ["Catania", "Sorrento", "Calcolo"]
        assert [e.rank for e in report.entries] == [1, 2, 3]

    def test_steady_seller(self, territory_orders, order_frame, policy):
        """Catania sells 500 of retail every week"""
        report = compute_velocity_leaderboard(order_frame(territory_orders), AS_OF, policy=policy)
        catania = report.entries[0]

        assert catania.run_rate == pytest.approx(500.0)
        assert catania.trend == LeaderboardTrend.FLAT
        assert catania.retail_volume == pytest.approx(5000.0)
        assert catania.sku_count == 2
        assert len(catania.weekly_data) == policy.leaderboard_sparkline_weeks
        assert catania.weekly_data[-1].week_start == WEEK_0 + timedelta(weeks=9)

    def test_project_only_collection(self, territory_orders, order_frame, policy):
        """Calcolo has project volume and no run rate"""
        report = compute_velocity_leaderboard(order_frame(territory_orders), AS_OF, policy=policy)
        calcolo = report.entries[-1]

        assert calcolo.run_rate == 0.0
        assert calcolo.retail_volume == 0.0
        assert calcolo.project_volume == pytest.approx(3000.0)
        assert calcolo.trend == LeaderboardTrend.FLAT

    def test_rank_delta(self, make_order, order_frame, policy):
        """A surge overtakes the steady leader"""
        orders = []
        for week in range(12):
            day = WEEK_0 + timedelta(weeks=week)
            orders.append(make_order(sku="A-1", collection_name="Alba", unit_price=1000.0,
                                     order_date=day, customer_id="C1"))
            price = 50000.0 if week == 11 else 100.0
            orders.append(make_order(sku="B-1", collection_name="Bruma", unit_price=price,
                                     order_date=day, customer_id="C2"))
        report = compute_velocity_leaderboard(order_frame(orders), WEEK_0 + timedelta(weeks=11), policy=policy)
        bruma, alba = report.entries

        assert bruma.collection_name == "Bruma"
        assert bruma.rank_delta == 1
        assert bruma.trend == LeaderboardTrend.UP
        assert alba.rank_delta == -1

    def test_customer_scope(self, territory_orders, order_frame, policy):
        """One customer's leaderboard"""
        report = compute_velocity_leaderboard(
            order_frame(territory_orders), AS_OF, customer_id="C10003", policy=policy,
        )
        assert [e.collection_name for e in report.entries] == ["Calcolo"]

    def test_no_orders(self, order_frame, policy):
        """Empty input reports no orders"""
        report = compute_velocity_leaderboard(order_frame([]), AS_OF, policy=policy)
        assert report.reason == ReasonCode.NO_ORDERS
        assert report.entries == []

    def test_too_few_weeks(self, make_order, order_frame, policy):
        """Fewer than three weeks is insufficient"""
        orders = [make_order(order_date=WEEK_0)]
        report = compute_velocity_leaderboard(order_frame(orders), WEEK_0 + timedelta(weeks=1), policy=policy)
        assert report.reason == ReasonCode.INSUFFICIENT_DATA
