"""
Data Generation Module
"""
from .generators import Collection, Dealer, TerritoryDataset, TerritoryGenerator

__all__ = [
    "Collection",
    "Dealer",
    "TerritoryDataset",
    "TerritoryGenerator",
]
