"""Shared test fixtures for world generation tests."""

from types import SimpleNamespace
from typing import Callable

import pytest

from worldgen.config import TerrainVariant, WorldConfig
from worldgen.terrain.mesh import Terrain, Triangle
from worldgen.types import Vector3


def _flat_triangle(x: float, z: float, height: float, size: float = 1.0) -> Triangle:
    """Upward-facing triangle with its right-angle corner at (x, height, z).

    Its planar center is (x + size / 3, z + size / 3).
    """
    return Triangle.from_vertices(
        Vector3(x, height, z),
        Vector3(x, height, z + size),
        Vector3(x + size, height, z),
    )


def _triangle_grid(
    columns: int, rows: int, height: float, spacing: float = 1.0
) -> SimpleNamespace:
    """Terrain stand-in holding a regular grid of flat triangles."""
    return SimpleNamespace(
        triangles=[
            _flat_triangle(cx * spacing, cz * spacing, height)
            for cz in range(rows)
            for cx in range(columns)
        ]
    )


@pytest.fixture
def flat_triangle() -> Callable[..., Triangle]:
    """Factory for flat upward-facing triangles."""
    return _flat_triangle


@pytest.fixture
def triangle_grid() -> Callable[..., SimpleNamespace]:
    """Factory for terrain stand-ins made of flat triangles."""
    return _triangle_grid


@pytest.fixture
def island_config() -> WorldConfig:
    """Fully specified 8x8 island config."""
    return WorldConfig(
        seed=42,
        grid_resolution=8,
        base_world_height=400.0,
        base_world_scale=128.0,
        landmass_size=0.85,
        transition_sharpness=0.9,
        terrain_breakup_scale=3.0,
        terrain_breakup_intensity=0.2,
        variant=TerrainVariant.ISLAND,
    )


@pytest.fixture
def tiled_config(island_config: WorldConfig) -> WorldConfig:
    """Same shape parameters as island_config with the tiled variant."""
    return island_config.model_copy(update={"variant": TerrainVariant.TILED})


@pytest.fixture
def island_terrain(island_config: WorldConfig) -> Terrain:
    return Terrain(island_config)
