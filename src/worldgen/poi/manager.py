"""POI orchestration: run every category and hand placements to the world."""

from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np
import structlog

from ..terrain.mesh import Triangle
from ..types import Vector3
from .placement import (
    CATEGORY_RULES,
    DungeonPlacer,
    FishingPlacer,
    ForestPlacer,
    POICategory,
    TownPlacer,
    TriangleSource,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class Placement:
    """One accepted POI, ready to be instantiated as a world object."""

    category: POICategory
    center: Vector3
    dimensions: tuple[float, float, float]  # width, height, depth
    # Visual size multiplier; dimensions stay unscaled for collision
    scale: float = 1.0


class PlacementSpawner(Protocol):
    """External collaborator that turns placements into physical objects."""

    def spawn(self, placement: Placement) -> None: ...


# (low, high) uniform ranges for width, height, depth
TOWN_DIMENSIONS = ((6.0, 10.0), (10.0, 16.0), (6.0, 10.0))
DUNGEON_DIMENSIONS = ((8.0, 12.0), (6.0, 9.0), (8.0, 12.0))
# Fishing spots are a fixed-size pole
FISHING_POLE_DIMENSIONS = (0.3, 4.0, 0.3)
# Forest collision box is fixed; only the visual scale varies
FOREST_DIMENSIONS = (15.0, 18.0, 15.0)
FOREST_SCALE_RANGE = (0.8, 1.2)


def triangle_center(triangle: Triangle) -> Vector3:
    """3D centroid of a triangle."""
    return triangle.center


class POIManager:
    """Places towns, dungeons, fishing spots and optionally forests.

    Args:
        terrain: Source of candidate triangles.
        spawner: Receives every placement as it is made. Placements are
            returned either way.
        rng: Random source for sampling and dimensions. Unseeded if None.
        include_forests: Also place forests in ``generate_all_pois``.
    """

    def __init__(
        self,
        terrain: TriangleSource,
        spawner: PlacementSpawner | None = None,
        rng: np.random.Generator | None = None,
        include_forests: bool = False,
    ):
        self.terrain = terrain
        self.spawner = spawner
        self.rng = rng if rng is not None else np.random.default_rng()
        self.include_forests = include_forests

        self.town_placer = TownPlacer(terrain, self.rng)
        self.dungeon_placer = DungeonPlacer(terrain, self.rng)
        self.fishing_placer = FishingPlacer(terrain, self.rng)
        self.forest_placer = ForestPlacer(terrain, self.rng)

    def generate_all_pois(self) -> dict[POICategory, list[Placement]]:
        """Place every category, dispatching results to the spawner."""
        results = {
            POICategory.TOWN: self.generate_towns(),
            POICategory.DUNGEON: self.generate_dungeons(),
            POICategory.FISHING: self.generate_fishing_spots(),
        }
        if self.include_forests:
            results[POICategory.FOREST] = self.generate_forests()

        logger.info(
            "pois_placed",
            **{category.value: len(found) for category, found in results.items()},
        )
        return results

    def generate_towns(self) -> list[Placement]:
        locations = self.town_placer.find_town_locations(
            CATEGORY_RULES[POICategory.TOWN].target_count
        )
        return self._emit(POICategory.TOWN, locations, self._ranged(TOWN_DIMENSIONS))

    def generate_dungeons(self) -> list[Placement]:
        locations = self.dungeon_placer.find_dungeon_locations(
            CATEGORY_RULES[POICategory.DUNGEON].target_count
        )
        return self._emit(
            POICategory.DUNGEON, locations, self._ranged(DUNGEON_DIMENSIONS)
        )

    def generate_fishing_spots(self) -> list[Placement]:
        locations = self.fishing_placer.find_fishing_locations(
            CATEGORY_RULES[POICategory.FISHING].target_count
        )
        return self._emit(
            POICategory.FISHING, locations, lambda: FISHING_POLE_DIMENSIONS
        )

    def generate_forests(self) -> list[Placement]:
        locations = self.forest_placer.find_forest_locations(
            CATEGORY_RULES[POICategory.FOREST].target_count
        )

        return self._emit(
            POICategory.FOREST,
            locations,
            lambda: FOREST_DIMENSIONS,
            scale=lambda: float(self.rng.uniform(*FOREST_SCALE_RANGE)),
        )

    def _ranged(
        self, ranges: tuple[tuple[float, float], ...]
    ) -> Callable[[], tuple[float, float, float]]:
        def draw() -> tuple[float, float, float]:
            width, height, depth = (
                float(self.rng.uniform(low, high)) for low, high in ranges
            )
            return (width, height, depth)

        return draw

    def _emit(
        self,
        category: POICategory,
        locations: list[Triangle],
        dimensions: Callable[[], tuple[float, float, float]],
        scale: Callable[[], float] | None = None,
    ) -> list[Placement]:
        placements = [
            Placement(
                category=category,
                center=triangle_center(triangle),
                dimensions=dimensions(),
                scale=scale() if scale is not None else 1.0,
            )
            for triangle in locations
        ]

        if self.spawner is not None:
            for placement in placements:
                self.spawner.spawn(placement)

        logger.debug("category_placed", category=category.value, count=len(placements))
        return placements
