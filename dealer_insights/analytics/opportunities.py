"""
Opportunities and Money on the Table

Projections built on top of collection performance: collections the
territory sells well that the customer under-buys, and the revenue an extra
display would unlock for unrealized collections.
"""

from typing import Dict, List, Optional, Sequence

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.results import (
    CollectionPerformance,
    MoneyOnTable,
    MoneyOnTableEntry,
    OpportunityCollection,
    Quadrant,
)
from dealer_insights.models.territory import TerritoryAggregate
from dealer_insights.analytics.guards import roi_months, safe_divide


def opportunity_collections(
    territory: TerritoryAggregate,
    performance: Sequence[CollectionPerformance],
    policy: Optional[InsightsPolicy] = None,
) -> List[OpportunityCollection]:
    """
    Territory collections where the customer trails the average store.

    Args:
        territory: Territory benchmarks for the period
        performance: The customer's collection performance

    Returns:
        Largest revenue gaps first, at most ``opportunity_limit`` entries
    """
    policy = policy or get_policy()
    by_name: Dict[str, CollectionPerformance] = {p.collection_name: p for p in performance}

    opportunities = []
    for name, benchmark in territory.benchmarks.items():
        if benchmark.total_revenue_all_customers <= policy.opportunity_min_territory_revenue:
            continue
        mine = by_name.get(name)
        units = mine.units_customer if mine else 0.0
        revenue = mine.revenue_customer if mine else 0.0
        index = safe_divide(units, benchmark.average_units_per_store)
        if index >= policy.opportunity_max_index:
            continue
        opportunities.append(OpportunityCollection(
            collection_name=name,
            territory_avg_units=benchmark.average_units_per_store,
            territory_avg_revenue=benchmark.average_revenue_per_store,
            customer_units=units,
            customer_revenue=revenue,
            opportunity_gap=benchmark.average_revenue_per_store - revenue,
            performance_index=index,
        ))

    opportunities.sort(key=lambda o: (-o.opportunity_gap, o.collection_name))
    return opportunities[:policy.opportunity_limit]


def money_on_table(
    performance: Sequence[CollectionPerformance],
    policy: Optional[InsightsPolicy] = None,
) -> MoneyOnTable:
    """Projected revenue of displaying every unrealized collection"""
    policy = policy or get_policy()
    entries = [
        MoneyOnTableEntry(
            collection_name=p.collection_name,
            current_revenue=p.revenue_customer,
            projected_revenue=p.revenue_customer + p.projected_revenue_lift,
            projected_revenue_lift=p.projected_revenue_lift,
            roi_months=roi_months(p.projected_revenue_lift, policy.display_cost),
        )
        for p in performance
        if p.quadrant == Quadrant.UNREALIZED
    ]
    entries.sort(key=lambda e: (-e.projected_revenue_lift, e.collection_name))
    return MoneyOnTable(entries=entries)
