"""
Dealer Insights Engine
Configuration Module
"""
from .settings import InsightsPolicy, Settings, get_policy, get_settings

__all__ = ["InsightsPolicy", "Settings", "get_policy", "get_settings"]
