"""World generation orchestration and spatial queries."""

import math
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
import structlog
from numpy.typing import NDArray

from ..config import MAX_SEED, WorldConfig
from ..types import Vector3
from .biomes import Biome, classify_triangle_height
from .mesh import Terrain

logger = structlog.get_logger()


@dataclass(frozen=True)
class TriangleInfo:
    """Ground information for the face under a query point."""

    indices: tuple[int, int, int]
    vertices: tuple[Vector3, Vector3, Vector3]
    normal: Vector3
    min_y: float
    max_y: float
    avg_y: float
    biome: Biome


class WorldGenerator:
    """Owns a world's configuration and terrain.

    Args:
        config: Field overrides or a complete WorldConfig. Absent fields are
            randomized.
        rng: Random source for config defaults and regeneration seeds. When
            omitted it is seeded from an explicit ``seed`` override if one is
            given, so the same overrides always yield the same world; otherwise
            it is unseeded.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | WorldConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        if isinstance(config, WorldConfig):
            resolved = config
            self._rng = rng if rng is not None else np.random.default_rng()
        else:
            overrides = dict(config or {})
            if rng is None:
                rng = np.random.default_rng(_rng_seed(overrides.get("seed")))
            self._rng = rng
            resolved = WorldConfig.with_defaults(overrides, rng)

        self.config = resolved
        self._terrain = Terrain(self.config)

    @property
    def terrain(self) -> Terrain:
        return self._terrain

    def get_triangle_at(self, x: float, z: float) -> TriangleInfo | None:
        """Find the mesh face under world point (x, z).

        Faces are scanned in mesh order and the first one containing the
        point wins. Points on an edge or vertex count as inside.

        Returns:
            TriangleInfo for the face, or None if the point is outside the grid
            or no face contains it.
        """
        if not (math.isfinite(x) and math.isfinite(z)):
            return None
        terrain = self._terrain
        grid_x, grid_z = terrain.grid_index(x, z)
        if not terrain.in_bounds(grid_x, grid_z):
            return None

        face_vertices = terrain.vertices[terrain.faces]
        inside = points_in_triangles(x, z, face_vertices)
        if not inside.any():
            return None

        face_index = int(np.argmax(inside))
        face = terrain.faces[face_index]
        corners = face_vertices[face_index]
        heights = corners[:, 1]
        avg_y = float(heights.sum() / 3)

        return TriangleInfo(
            indices=tuple(int(i) for i in face),
            vertices=tuple(Vector3(*v) for v in corners.tolist()),
            normal=Vector3(*terrain.normals[face_index].tolist()),
            min_y=float(heights.min()),
            max_y=float(heights.max()),
            avg_y=avg_y,
            biome=classify_triangle_height(avg_y),
        )

    def get_height_at(self, x: float, z: float) -> float:
        return self._terrain.get_height_at(x, z)

    def regenerate(self) -> Terrain:
        """Rebuild the terrain with a fresh seed and otherwise unchanged config.

        The new seed always differs from the current one.
        """
        old_seed = self.config.seed
        new_seed = int(self._rng.integers(0, MAX_SEED))
        while new_seed == old_seed:
            new_seed = int(self._rng.integers(0, MAX_SEED))
        self.config = self.config.with_seed(new_seed)
        self._terrain = Terrain(self.config)

        logger.info("world_regenerated", old_seed=old_seed, new_seed=self.config.seed)
        return self._terrain


def edge_sign(
    px: float | NDArray[np.float64],
    pz: float | NDArray[np.float64],
    ax: float | NDArray[np.float64],
    az: float | NDArray[np.float64],
    bx: float | NDArray[np.float64],
    bz: float | NDArray[np.float64],
):
    """Signed area test of point p against edge a->b in the XZ plane."""
    return (px - bx) * (az - bz) - (ax - bx) * (pz - bz)


def points_in_triangles(
    x: float, z: float, triangles: NDArray[np.float64]
) -> NDArray[np.bool_]:
    """Edge-sign containment of (x, z) in each triangle.

    Args:
        x: Query X.
        z: Query Z.
        triangles: Array of shape (..., 3, 3) of (x, y, z) corners.

    Returns:
        Boolean array of shape (...); True where the point is inside or on
        the boundary.
    """
    v1x, v1z = triangles[..., 0, 0], triangles[..., 0, 2]
    v2x, v2z = triangles[..., 1, 0], triangles[..., 1, 2]
    v3x, v3z = triangles[..., 2, 0], triangles[..., 2, 2]

    d1 = edge_sign(x, z, v1x, v1z, v2x, v2z)
    d2 = edge_sign(x, z, v2x, v2z, v3x, v3z)
    d3 = edge_sign(x, z, v3x, v3z, v1x, v1z)

    has_neg = (d1 < 0) | (d2 < 0) | (d3 < 0)
    has_pos = (d1 > 0) | (d2 > 0) | (d3 > 0)
    return ~(has_neg & has_pos)


def _rng_seed(seed: Any) -> int | None:
    # default_rng needs a non-negative integer; invalid seeds are rejected
    # later by config validation.
    if isinstance(seed, (int, float)) and not isinstance(seed, bool) and seed >= 0:
        return int(seed * 1000)
    return None
