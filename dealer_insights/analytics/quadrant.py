"""
Quadrant Classifier

Places a collection on the sales-velocity x display-presence matrix. High
sales means above 30% of the customer's best seller, so several
collections can qualify at once.
"""

from typing import Dict, List, Optional, Sequence

from dealer_insights.config import InsightsPolicy, get_policy
from dealer_insights.models.results import CollectionPerformance, Quadrant


def classify_quadrant(
    sales_velocity_index: float,
    display_presence_score: float,
    market_average_presence: float,
    policy: Optional[InsightsPolicy] = None,
) -> Quadrant:
    """Exactly one quadrant for any input"""
    policy = policy or get_policy()
    high_sales = sales_velocity_index > policy.high_sales_velocity
    high_display = display_presence_score >= market_average_presence

    if high_sales and not high_display:
        return Quadrant.UNREALIZED
    if high_sales and high_display:
        return Quadrant.OPTIMIZED
    if high_display:
        return Quadrant.EVALUATE
    return Quadrant.SLEEPER


def group_by_quadrant(
    collections: Sequence[CollectionPerformance],
) -> Dict[Quadrant, List[CollectionPerformance]]:
    """Collections per quadrant, input order kept"""
    groups: Dict[Quadrant, List[CollectionPerformance]] = {q: [] for q in Quadrant}
    for collection in collections:
        groups[collection.quadrant].append(collection)
    return groups
