"""
Dealer Insights Engine

Dealer-performance analytics for a wholesale lighting distributor.
"""

from dealer_insights.engine import InsightsEngine

__version__ = "1.0.0"

__all__ = ["InsightsEngine", "__version__"]
