"""Tests for WorldGenerator and triangle lookup."""

import math

import numpy as np
import pytest
from structlog.testing import capture_logs

from worldgen.config import MAX_SEED, TerrainVariant, WorldConfig
from worldgen.exceptions import ConfigurationError
from worldgen.terrain.biomes import classify_triangle_height
from worldgen.terrain.generator import (
    TriangleInfo,
    WorldGenerator,
    points_in_triangles,
)
from worldgen.terrain.mesh import Terrain

# Right triangle with corners (0, 0), (0, 1), (1, 0) in the XZ plane
UNIT_TRIANGLE = np.array([[0, 0, 0], [0, 0, 1], [1, 0, 0]], dtype=np.float64)


def _contains(x: float, z: float, corners: np.ndarray = UNIT_TRIANGLE) -> bool:
    return bool(points_in_triangles(x, z, corners))


class TestPointsInTriangles:
    """Tests for edge-sign containment."""

    def test_interior_point(self) -> None:
        assert _contains(0.2, 0.2)

    def test_vertices_are_inside(self) -> None:
        """Each corner counts as contained."""
        for x, _, z in UNIT_TRIANGLE:
            assert _contains(x, z)

    def test_edges_are_inside(self) -> None:
        """Points on an edge count as contained."""
        assert _contains(0.5, 0.5)
        assert _contains(0.0, 0.5)
        assert _contains(0.5, 0.0)

    def test_outside_points(self) -> None:
        assert not _contains(0.6, 0.6)
        assert not _contains(-0.1, 0.5)
        assert not _contains(0.5, -0.1)

    def test_winding_independent(self) -> None:
        """Reversing vertex order does not change the result."""
        reversed_corners = UNIT_TRIANGLE[::-1]
        assert _contains(0.2, 0.2, reversed_corners)
        assert not _contains(0.9, 0.9, reversed_corners)

    def test_vectorized(self) -> None:
        """Many triangles are tested at once."""
        triangles = np.array(
            [
                [[0, 0, 0], [0, 0, 1], [1, 0, 0]],
                [[1, 0, 0], [0, 0, 1], [1, 0, 1]],
                [[5, 0, 5], [5, 0, 6], [6, 0, 5]],
            ],
            dtype=np.float64,
        )
        result = points_in_triangles(0.75, 0.75, triangles)
        np.testing.assert_array_equal(result, [False, True, False])


class TestWorldGeneratorConstruction:
    """Tests for config resolution."""

    def test_accepts_world_config(self, island_config: WorldConfig) -> None:
        generator = WorldGenerator(island_config)
        assert generator.config is island_config
        assert len(generator.terrain.triangles) == 128

    def test_overrides_fill_defaults(self) -> None:
        """Missing fields are randomized, given ones kept."""
        generator = WorldGenerator(
            {"seed": 5, "grid_resolution": 4}, rng=np.random.default_rng(0)
        )
        assert generator.config.seed == 5
        assert generator.config.grid_resolution == 4
        assert 0.8 <= generator.config.landmass_size < 0.9

    def test_same_overrides_same_world(self) -> None:
        """A seed override reproduces the whole world."""
        a = WorldGenerator({"seed": 1000, "grid_resolution": 8})
        b = WorldGenerator({"seed": 1000, "grid_resolution": 8})
        assert a.config == b.config
        assert len(a.terrain.triangles) == 128
        np.testing.assert_array_equal(a.terrain.vertices, b.terrain.vertices)

    def test_invalid_override_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            WorldGenerator({"grid_resolution": 0})

    def test_negative_seed_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            WorldGenerator({"seed": -1, "grid_resolution": 4})

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            WorldGenerator({"grid_resolution": 4, "mountains": True})


class TestGetTriangleAt:
    """Tests for face lookup under a world point."""

    @pytest.fixture
    def generator(self, island_config: WorldConfig) -> WorldGenerator:
        return WorldGenerator(island_config)

    @staticmethod
    def cell_origin(cx: int, cz: int) -> tuple[float, float]:
        """World position of a cell's top-left vertex in the 8x8 fixture grid."""
        return (cx - 4) * 128.0, (cz - 4) * 128.0

    def test_upper_triangle_of_cell(self, generator: WorldGenerator) -> None:
        """Points near the top-left corner fall in the cell's first face."""
        x, z = self.cell_origin(2, 3)
        info = generator.get_triangle_at(x + 10, z + 10)
        assert info is not None
        face = (3 * 8 + 2) * 2
        assert info.indices == tuple(int(i) for i in generator.terrain.faces[face])

    def test_lower_triangle_of_cell(self, generator: WorldGenerator) -> None:
        """Points near the bottom-right corner fall in the second face."""
        x, z = self.cell_origin(2, 3)
        info = generator.get_triangle_at(x + 100, z + 100)
        assert info is not None
        face = (3 * 8 + 2) * 2 + 1
        assert info.indices == tuple(int(i) for i in generator.terrain.faces[face])

    def test_diagonal_goes_to_first_face(self, generator: WorldGenerator) -> None:
        """A point on the shared diagonal resolves to the earlier face."""
        x, z = self.cell_origin(5, 1)
        info = generator.get_triangle_at(x + 64, z + 64)
        assert info is not None
        face = (1 * 8 + 5) * 2
        assert info.indices == tuple(int(i) for i in generator.terrain.faces[face])

    def test_shared_vertex_goes_to_first_face(self, generator: WorldGenerator) -> None:
        """Vertex (1, 1) is first reached by the second face of cell (0, 0)."""
        x, z = self.cell_origin(1, 1)
        info = generator.get_triangle_at(x, z)
        assert info is not None
        assert info.indices == (1, 9, 10)

    def test_grid_corner(self, generator: WorldGenerator) -> None:
        info = generator.get_triangle_at(-512.0, -512.0)
        assert info is not None
        assert info.indices == (0, 9, 1)

    def test_outside_grid(self, generator: WorldGenerator) -> None:
        assert generator.get_triangle_at(-600.0, 0.0) is None
        assert generator.get_triangle_at(0.0, 10_000.0) is None

    @pytest.mark.parametrize(
        "x,z",
        [
            (math.inf, 0.0),
            (-math.inf, 0.0),
            (math.nan, 0.0),
            (0.0, -math.inf),
            (math.nan, math.nan),
        ],
    )
    def test_non_finite_points(
        self, generator: WorldGenerator, x: float, z: float
    ) -> None:
        """Infinite and NaN coordinates are misses, not errors."""
        assert generator.get_triangle_at(x, z) is None
        assert generator.get_height_at(x, z) == 0.0

    def test_info_contents(self, generator: WorldGenerator) -> None:
        """Heights, normal and biome describe the found face."""
        info = generator.get_triangle_at(30.0, -70.0)
        assert isinstance(info, TriangleInfo)

        terrain = generator.terrain
        ys = [terrain.vertices[i, 1] for i in info.indices]
        assert [v.y for v in info.vertices] == ys
        assert info.min_y == min(ys)
        assert info.max_y == max(ys)
        assert info.avg_y == pytest.approx(sum(ys) / 3)
        assert info.min_y <= info.avg_y <= info.max_y
        assert info.biome == classify_triangle_height(info.avg_y)
        assert info.normal.length() == pytest.approx(1.0)
        assert info.normal.y > 0

    def test_height_query_delegates(self, generator: WorldGenerator) -> None:
        assert generator.get_height_at(30.0, -70.0) == generator.terrain.get_height_at(
            30.0, -70.0
        )


class TestRegenerate:
    """Tests for rebuilding with a fresh seed."""

    def test_new_seed_from_rng(self, island_config: WorldConfig) -> None:
        """The next seed is drawn from the generator's random source."""
        draws = np.random.default_rng(7)
        expected = int(draws.integers(0, MAX_SEED))
        while expected == island_config.seed:
            expected = int(draws.integers(0, MAX_SEED))
        generator = WorldGenerator(island_config, rng=np.random.default_rng(7))
        old_terrain = generator.terrain

        terrain = generator.regenerate()

        assert generator.config.seed == expected
        assert generator.config.seed != island_config.seed
        assert 0 <= generator.config.seed < MAX_SEED
        assert generator.terrain is terrain
        np.testing.assert_array_equal(
            terrain.vertices, Terrain(island_config.with_seed(expected)).vertices
        )

        # The highest old vertex sits inside the grid, away from the water edge
        peak = int(np.argmax(old_terrain.vertices[:, 1]))
        x, old_height, z = old_terrain.vertices[peak]
        assert old_height > 0
        assert terrain.get_height_at(x, z) != old_terrain.get_height_at(x, z)

    def test_repeated_draw_is_skipped(self, island_config: WorldConfig) -> None:
        """A draw equal to the current seed is discarded."""

        class ScriptedRng:
            def __init__(self, values: list[int]) -> None:
                self.values = values

            def integers(self, low: int, high: int) -> int:
                return self.values.pop(0)

        generator = WorldGenerator(island_config, rng=ScriptedRng([42, 42, 17]))
        generator.regenerate()
        assert generator.config.seed == 17

    def test_seed_override_regenerates_new_seed(self) -> None:
        """A seeded generator whose first draw repeats its seed still moves on."""
        generator = WorldGenerator({"seed": 404, "grid_resolution": 1})
        generator.regenerate()
        assert generator.config.seed != 404

    def test_other_fields_unchanged(self, island_config: WorldConfig) -> None:
        generator = WorldGenerator(island_config, rng=np.random.default_rng(3))
        generator.regenerate()
        assert generator.config.model_dump(exclude={"seed"}) == island_config.model_dump(
            exclude={"seed"}
        )
        assert generator.config.variant == TerrainVariant.ISLAND

    def test_regenerated_mesh_is_valid(self, island_config: WorldConfig) -> None:
        """Face indices stay within the new vertex buffer."""
        generator = WorldGenerator(island_config, rng=np.random.default_rng(11))
        terrain = generator.regenerate()
        assert terrain.faces.shape == (128, 3)
        assert terrain.faces.max() < len(terrain.vertices)
        assert terrain.faces.min() >= 0

    def test_logs_seed_change(self, island_config: WorldConfig) -> None:
        generator = WorldGenerator(island_config, rng=np.random.default_rng(5))
        with capture_logs() as logs:
            generator.regenerate()
        events = [entry for entry in logs if entry["event"] == "world_regenerated"]
        assert events[0]["old_seed"] == 42
        assert events[0]["new_seed"] == generator.config.seed
