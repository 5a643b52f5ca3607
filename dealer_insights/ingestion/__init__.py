"""
Data Ingestion Module
"""
from .sales_loader import (
    LoadResult,
    LoadStatus,
    SalesExportLoader,
    SalesFileConfig,
    load_displays,
    write_displays,
    write_sales_export,
)
from .sources import (
    CatalogLookup,
    DisplaySource,
    InMemoryCatalog,
    InMemoryDisplaySource,
    InMemoryOrderSource,
    OrderSource,
    TerritoryAggregateSource,
)

__all__ = [
    "LoadResult",
    "LoadStatus",
    "SalesExportLoader",
    "SalesFileConfig",
    "load_displays",
    "write_displays",
    "write_sales_export",
    "CatalogLookup",
    "DisplaySource",
    "InMemoryCatalog",
    "InMemoryDisplaySource",
    "InMemoryOrderSource",
    "OrderSource",
    "TerritoryAggregateSource",
]
