"""Procedural world generation: terrain height-fields and POI placement."""

from .config import TerrainVariant, WorldConfig, find_config, load_config
from .exceptions import ConfigurationError, WorldGenError
from .poi import Placement, POICategory, POIManager, POIPlacer
from .terrain import Biome, Terrain, Triangle, TriangleInfo, WorldGenerator
from .types import Vector3

__all__ = [
    # Config
    "TerrainVariant",
    "WorldConfig",
    "find_config",
    "load_config",
    # Terrain
    "Biome",
    "Terrain",
    "Triangle",
    "TriangleInfo",
    "WorldGenerator",
    # POI
    "POICategory",
    "POIManager",
    "POIPlacer",
    "Placement",
    # Types
    "Vector3",
    # Exceptions
    "ConfigurationError",
    "WorldGenError",
]
