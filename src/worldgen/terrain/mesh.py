"""Terrain mesh assembly: vertex/face arenas and immutable triangle views."""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog
from numpy.typing import NDArray

from ..config import WorldConfig
from ..types import Vector3
from .biomes import (
    Biome,
    biome_color,
    classify_triangle_height,
    classify_vertex_height,
    hex_to_rgb,
)
from .shaping import WATER_LEVEL, HeightShaper, make_shaper

logger = structlog.get_logger()


@dataclass(frozen=True)
class Triangle:
    """One mesh face with its normal and biome.

    Triangles are value copies of mesh data; mutating consumers must build
    their own copies.
    """

    v0: Vector3
    v1: Vector3
    v2: Vector3
    normal: Vector3
    biome: Biome

    @classmethod
    def from_vertices(cls, v0: Vector3, v1: Vector3, v2: Vector3) -> "Triangle":
        """Build a triangle, deriving its normal from winding and its biome."""
        normal = (v1 - v0).cross(v2 - v0).normalize()
        avg_height = (v0.y + v1.y + v2.y) / 3
        return cls(v0, v1, v2, normal, classify_triangle_height(avg_height))

    @property
    def vertices(self) -> tuple[Vector3, Vector3, Vector3]:
        return (self.v0, self.v1, self.v2)

    @property
    def color(self) -> str:
        return biome_color(self.biome)

    @property
    def avg_height(self) -> float:
        return (self.v0.y + self.v1.y + self.v2.y) / 3

    @property
    def center(self) -> Vector3:
        """Centroid of the three vertices."""
        return Vector3(
            (self.v0.x + self.v1.x + self.v2.x) / 3,
            self.avg_height,
            (self.v0.z + self.v1.z + self.v2.z) / 3,
        )

    @property
    def planar_center(self) -> tuple[float, float]:
        """Centroid in the XZ plane."""
        return (
            (self.v0.x + self.v1.x + self.v2.x) / 3,
            (self.v0.z + self.v1.z + self.v2.z) / 3,
        )

    def vertex_array(self) -> list[float]:
        return [c for v in self.vertices for c in v.to_tuple()]

    def normal_array(self) -> list[float]:
        return list(self.normal.to_tuple()) * 3

    def color_array(self) -> list[float]:
        return list(hex_to_rgb(self.color)) * 3


class Terrain:
    """Triangulated height-field for one world.

    The grid has ``grid_resolution`` cells per side, so
    ``(grid_resolution + 1) ** 2`` vertices and two faces per cell. Vertex
    (ix, iz) sits at world ((ix - res/2) * scale, height, (iz - res/2) * scale).
    """

    def __init__(self, config: WorldConfig):
        self.config = config
        self.grid_resolution = config.grid_resolution
        self.base_world_scale = config.base_world_scale

        self.shaper: HeightShaper = make_shaper(config)
        self.height_map = self.shaper.sample_grid(self.grid_resolution)
        self.height_map.flags.writeable = False

        self._generate_geometry()

        logger.info(
            "terrain_generated",
            seed=config.seed,
            variant=config.variant.value,
            resolution=self.grid_resolution,
            triangles=len(self.triangles),
            min_height=float(self.height_map.min()),
            max_height=float(self.height_map.max()),
        )

    def _generate_geometry(self) -> None:
        res = self.grid_resolution
        vertex_count = res + 1

        # Vertices, row-major in z: index = iz * vertex_count + ix
        iz, ix = np.meshgrid(
            np.arange(vertex_count), np.arange(vertex_count), indexing="ij"
        )
        world_x = (ix - res / 2) * self.base_world_scale
        world_z = (iz - res / 2) * self.base_world_scale
        vertices = np.stack(
            [world_x.ravel(), self.height_map.ravel(), world_z.ravel()], axis=1
        ).astype(np.float64)

        # Two faces per cell: (TL, BL, TR) and (TR, BL, BR)
        cz, cx = np.meshgrid(np.arange(res), np.arange(res), indexing="ij")
        top_left = cz * vertex_count + cx
        top_right = top_left + 1
        bottom_left = top_left + vertex_count
        bottom_right = bottom_left + 1
        faces = np.stack(
            [
                np.stack([top_left, bottom_left, top_right], axis=-1),
                np.stack([top_right, bottom_left, bottom_right], axis=-1),
            ],
            axis=2,
        ).reshape(-1, 3)

        edge1 = vertices[faces[:, 1]] - vertices[faces[:, 0]]
        edge2 = vertices[faces[:, 2]] - vertices[faces[:, 0]]
        normals = np.cross(edge1, edge2)
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        normals = np.divide(
            normals, lengths, out=np.zeros_like(normals), where=lengths > 0
        )

        for array in (vertices, faces, normals):
            array.flags.writeable = False
        self.vertices: NDArray[np.float64] = vertices
        self.faces: NDArray[np.int64] = faces
        self.normals: NDArray[np.float64] = normals

        self.colors: list[str] = [
            biome_color(classify_vertex_height(h, self.config.base_world_height))
            for h in vertices[:, 1].tolist()
        ]

        points = [Vector3(*v) for v in vertices.tolist()]
        self.triangles: list[Triangle] = []
        for (a, b, c), n in zip(faces.tolist(), normals.tolist()):
            v0, v1, v2 = points[a], points[b], points[c]
            avg_height = (v0.y + v1.y + v2.y) / 3
            self.triangles.append(
                Triangle(v0, v1, v2, Vector3(*n), classify_triangle_height(avg_height))
            )

    def grid_index(self, x: float, z: float) -> tuple[int, int]:
        """Grid cell (ix, iz) containing world point (x, z), unchecked."""
        half = self.grid_resolution / 2
        return (
            math.floor(x / self.base_world_scale + half),
            math.floor(z / self.base_world_scale + half),
        )

    def in_bounds(self, grid_x: int, grid_z: int) -> bool:
        return 0 <= grid_x < self.grid_resolution and 0 <= grid_z < self.grid_resolution

    def get_height_at(self, x: float, z: float) -> float:
        """Height of the grid vertex at the floored grid index.

        Returns WATER_LEVEL outside the grid, including non-finite points.
        """
        if not (math.isfinite(x) and math.isfinite(z)):
            return WATER_LEVEL
        grid_x, grid_z = self.grid_index(x, z)
        if not self.in_bounds(grid_x, grid_z):
            return WATER_LEVEL
        return float(self.height_map[grid_z, grid_x])

    def find_nearby_triangles(self, x: float, z: float) -> list[Triangle]:
        """Triangles of the 3x3 block of cells around a world point."""
        nearby: list[Triangle] = []
        if not (math.isfinite(x) and math.isfinite(z)):
            return nearby
        grid_x, grid_z = self.grid_index(x, z)

        for dz in (-1, 0, 1):
            for dx in (-1, 0, 1):
                check_x = grid_x + dx
                check_z = grid_z + dz
                if not self.in_bounds(check_x, check_z):
                    continue
                base = (check_z * self.grid_resolution + check_x) * 2
                nearby.append(self.triangles[base])
                nearby.append(self.triangles[base + 1])

        return nearby

    def mesh_arrays(self) -> tuple[NDArray[np.float32], NDArray[np.uint32]]:
        """Flat vertex positions and face indices for physics/render upload."""
        return (
            self.vertices.astype(np.float32).ravel(),
            self.faces.astype(np.uint32).ravel(),
        )

    def flat_shaded_arrays(
        self,
    ) -> tuple[NDArray[np.float32], NDArray[np.float32], NDArray[np.float32]]:
        """Non-indexed positions, normals and RGB colors, three vertices per face.

        Every vertex of a face carries that face's normal and biome color, so
        the mesh renders with hard per-triangle shading.
        """
        positions: list[float] = []
        normals: list[float] = []
        colors: list[float] = []
        for triangle in self.triangles:
            positions.extend(triangle.vertex_array())
            normals.extend(triangle.normal_array())
            colors.extend(triangle.color_array())
        return (
            np.array(positions, dtype=np.float32),
            np.array(normals, dtype=np.float32),
            np.array(colors, dtype=np.float32),
        )

    def debug_info(self) -> dict[str, Any]:
        """Summary of the mesh plus every generation parameter."""
        heights = self.vertices[:, 1]
        return {
            "size": self.grid_resolution,
            "base_world_scale": self.base_world_scale,
            "vertex_count": len(self.vertices),
            "face_count": len(self.faces),
            "max_height": float(heights.max()),
            "min_height": float(heights.min()),
            **self.config.model_dump(mode="json"),
        }

    def biome_counts(self) -> dict[Biome, int]:
        """Number of triangles per biome."""
        counts = {biome: 0 for biome in Biome}
        for triangle in self.triangles:
            counts[triangle.biome] += 1
        return counts
