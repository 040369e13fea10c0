"""Point-of-interest placement on generated terrain."""

from .manager import Placement, PlacementSpawner, POIManager
from .placement import CATEGORY_RULES, CategoryRule, POICategory, POIPlacer

__all__ = [
    "CATEGORY_RULES",
    "CategoryRule",
    "POICategory",
    "POIManager",
    "POIPlacer",
    "Placement",
    "PlacementSpawner",
]
