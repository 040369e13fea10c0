"""Procedural terrain generation package.

This package implements seeded gradient noise, landmass shaping (island and
tiled variants), biome classification, and triangulated height-field meshes.
"""

from .biomes import BIOME_TABLE, Biome, BiomeType, classify_triangle_height
from .generator import TriangleInfo, WorldGenerator
from .mesh import Terrain, Triangle
from .noise import NoiseGenerator
from .shaping import HeightShaper, IslandShaper, TiledShaper, make_shaper
from .validation import ValidationResult, validate_placements, validate_terrain

__all__ = [
    "BIOME_TABLE",
    "Biome",
    "BiomeType",
    "HeightShaper",
    "IslandShaper",
    "NoiseGenerator",
    "Terrain",
    "TiledShaper",
    "Triangle",
    "TriangleInfo",
    "ValidationResult",
    "WorldGenerator",
    "classify_triangle_height",
    "make_shaper",
    "validate_placements",
    "validate_terrain",
]
