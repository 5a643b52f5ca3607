"""
Data Transformation Module
"""
from .cleaners import (
    CleaningStats,
    active_displays,
    clean_displays,
    clean_orders,
    displays_to_frame,
    extract_collection_name,
    filter_period,
    orders_to_frame,
    resolve_catalog,
)

__all__ = [
    "CleaningStats",
    "active_displays",
    "clean_displays",
    "clean_orders",
    "displays_to_frame",
    "extract_collection_name",
    "filter_period",
    "orders_to_frame",
    "resolve_catalog",
]
