"""Rejection-sampling placement of points of interest on terrain triangles."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Sequence

import numpy as np
import structlog

from ..terrain.mesh import Triangle

logger = structlog.get_logger()

# criteria(normal_y, avg_height) -> whether a triangle may host the POI
PlacementCriteria = Callable[[float, float], bool]


class TriangleSource(Protocol):
    """Anything exposing terrain triangles, e.g. ``Terrain``."""

    @property
    def triangles(self) -> Sequence[Triangle]: ...


class POICategory(str, Enum):
    """Kinds of structures placed on the terrain."""

    TOWN = "town"
    DUNGEON = "dungeon"
    FISHING = "fishing"
    FOREST = "forest"


@dataclass(frozen=True)
class CategoryRule:
    """Placement rule for one POI category."""

    category: POICategory
    criteria: PlacementCriteria
    min_distance_squared: float
    target_count: int


def _town_criteria(normal_y: float, avg_height: float) -> bool:
    return normal_y > 0.8 and 50 < avg_height < 300


def _dungeon_criteria(normal_y: float, avg_height: float) -> bool:
    return normal_y > 0.5 and (avg_height < 40 or avg_height > 350)


def _fishing_criteria(normal_y: float, avg_height: float) -> bool:
    return normal_y > 0.7 and -2 <= avg_height <= 2


def _forest_criteria(normal_y: float, avg_height: float) -> bool:
    return normal_y > 0.7 and 20 < avg_height < 200


CATEGORY_RULES: dict[POICategory, CategoryRule] = {
    POICategory.TOWN: CategoryRule(POICategory.TOWN, _town_criteria, 400, 30),
    POICategory.DUNGEON: CategoryRule(POICategory.DUNGEON, _dungeon_criteria, 625, 15),
    POICategory.FISHING: CategoryRule(POICategory.FISHING, _fishing_criteria, 100, 50),
    POICategory.FOREST: CategoryRule(POICategory.FOREST, _forest_criteria, 225, 20),
}


class POIPlacer:
    """Greedy rejection sampler over a shrinking candidate pool.

    Every drawn candidate leaves the pool whether accepted or not, so a call
    makes at most one draw per initial candidate and may return fewer
    locations than requested.
    """

    def __init__(self, terrain: TriangleSource, rng: np.random.Generator | None = None):
        self.terrain = terrain
        self.rng = rng if rng is not None else np.random.default_rng()
        # Accept/reject iterations made by the most recent find_locations call
        self.last_draws = 0

    def candidates(self, criteria: PlacementCriteria) -> list[Triangle]:
        """Triangles, in terrain order, whose (|normal.y|, avg height) pass."""
        return [
            triangle
            for triangle in self.terrain.triangles
            if criteria(abs(triangle.normal.y), triangle.avg_height)
        ]

    def find_locations(
        self,
        count: int,
        criteria: PlacementCriteria,
        min_distance_squared: float,
    ) -> list[Triangle]:
        """Pick up to ``count`` mutually separated triangles.

        Args:
            count: Maximum number of locations.
            criteria: Filter on (|normal.y|, average vertex height).
            min_distance_squared: Minimum squared planar distance between the
                centers of any two accepted triangles.

        Returns:
            Accepted triangles in acceptance order.
        """
        candidates = self.candidates(criteria)
        pool_size = len(candidates)
        selected: list[Triangle] = []
        centers: list[tuple[float, float]] = []
        draws = 0

        while len(selected) < count and candidates:
            index = int(self.rng.integers(len(candidates)))
            candidate = candidates.pop(index)
            draws += 1

            center_x, center_z = candidate.planar_center
            too_close = False
            for existing_x, existing_z in centers:
                dx = center_x - existing_x
                dz = center_z - existing_z
                if dx * dx + dz * dz < min_distance_squared:
                    too_close = True
                    break

            if not too_close:
                selected.append(candidate)
                centers.append((center_x, center_z))

        self.last_draws = draws
        logger.debug(
            "locations_found",
            requested=count,
            candidates=pool_size,
            draws=draws,
            selected=len(selected),
        )
        return selected

    def find_for_category(
        self, category: POICategory, count: int | None = None
    ) -> list[Triangle]:
        """Apply a category's rule, defaulting to its target count."""
        rule = CATEGORY_RULES[category]
        return self.find_locations(
            rule.target_count if count is None else count,
            rule.criteria,
            rule.min_distance_squared,
        )


class TownPlacer(POIPlacer):
    def find_town_locations(self, count: int) -> list[Triangle]:
        return self.find_for_category(POICategory.TOWN, count)


class DungeonPlacer(POIPlacer):
    def find_dungeon_locations(self, count: int) -> list[Triangle]:
        return self.find_for_category(POICategory.DUNGEON, count)


class FishingPlacer(POIPlacer):
    def find_fishing_locations(self, count: int) -> list[Triangle]:
        return self.find_for_category(POICategory.FISHING, count)


class ForestPlacer(POIPlacer):
    def find_forest_locations(self, count: int) -> list[Triangle]:
        return self.find_for_category(POICategory.FOREST, count)
