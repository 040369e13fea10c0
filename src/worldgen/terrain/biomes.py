"""Height-to-biome classification with an ordered, first-match table."""

from dataclasses import dataclass
from enum import Enum


class Biome(str, Enum):
    """Named height bands, lowest first."""

    OCEAN_DEEP = "ocean_deep"
    OCEAN = "ocean"
    BEACH = "beach"
    DUNES = "dunes"
    LOWLAND = "lowland"
    HIGHLAND = "highland"
    TREELINE = "treeline"
    MOUNTAIN = "mountain"
    SNOW = "snow"


@dataclass(frozen=True)
class BiomeType:
    """A biome's inclusive height band (percent of reference height) and look."""

    biome: Biome
    height_range_percent: tuple[float, float]
    color: str
    texture: str

    def contains(self, height_percent: float) -> bool:
        low, high = self.height_range_percent
        return low <= height_percent <= high


# Order matters: where bands touch, the earlier entry wins.
BIOME_TABLE: tuple[BiomeType, ...] = (
    BiomeType(Biome.OCEAN_DEEP, (0.0, 0.0), "#0a1525", "deepwater"),
    BiomeType(Biome.OCEAN, (0.0, 0.0), "#1a3045", "water"),
    BiomeType(Biome.BEACH, (0.0, 0.1), "#d2b98b", "sand"),
    BiomeType(Biome.DUNES, (0.1, 2.0), "#ffe599", "dunes"),
    BiomeType(Biome.LOWLAND, (2.0, 15.0), "#407339", "grass"),
    BiomeType(Biome.HIGHLAND, (15.0, 40.0), "#2d5929", "highland"),
    BiomeType(Biome.TREELINE, (40.0, 50.0), "#744700", "treeline"),
    BiomeType(Biome.MOUNTAIN, (50.0, 90.0), "#736d69", "rock"),
    BiomeType(Biome.SNOW, (90.0, 100.0), "#e8e8e8", "snow"),
)

BIOME_TYPES: dict[Biome, BiomeType] = {entry.biome: entry for entry in BIOME_TABLE}

# Fixed height reference for triangle classification, independent
# of the configurable base_world_height used for vertex colors.
TRIANGLE_HEIGHT_REFERENCE = 400.0
# Absolute height at or above which everything is snow
SNOW_HEIGHT = 400.0


def lookup_biome(height_percent: float) -> Biome:
    """Return the first biome (in table order) whose band contains the value.

    Falls back to OCEAN when no band matches.
    """
    for entry in BIOME_TABLE:
        if entry.contains(height_percent):
            return entry.biome
    return Biome.OCEAN


def classify_triangle_height(avg_height: float) -> Biome:
    """Classify a triangle by the average height of its vertices."""
    if avg_height <= 0:
        return Biome.OCEAN_DEEP
    if avg_height >= SNOW_HEIGHT:
        return Biome.SNOW
    return lookup_biome(avg_height / TRIANGLE_HEIGHT_REFERENCE * 100)


def classify_vertex_height(height: float, base_world_height: float) -> Biome:
    """Classify a single mesh vertex relative to the configured world height."""
    if height <= 0:
        return Biome.OCEAN
    if height >= SNOW_HEIGHT:
        return Biome.SNOW
    return lookup_biome(height / base_world_height * 100)


def biome_color(biome: Biome) -> str:
    """Representative ``#rrggbb`` color of a biome."""
    return BIOME_TYPES[biome].color


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Convert ``#rrggbb`` to an (r, g, b) tuple of floats in [0, 1]."""
    return (
        int(color[1:3], 16) / 255,
        int(color[3:5], 16) / 255,
        int(color[5:7], 16) / 255,
    )
