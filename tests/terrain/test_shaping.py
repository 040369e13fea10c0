"""Tests for landmass shaping and height synthesis."""

import numpy as np
import pytest

from worldgen.config import WorldConfig
from worldgen.terrain.shaping import (
    DETAIL_FREQUENCY,
    DETAIL_GAIN,
    DETAIL_OCTAVES,
    DETAIL_PERSISTENCE,
    DETAIL_SCALE,
    HeightShaper,
    IslandShaper,
    TiledShaper,
    make_shaper,
)


class TestMakeShaper:
    """Tests for variant selection."""

    def test_island_variant(self, island_config: WorldConfig) -> None:
        """Island config selects IslandShaper."""
        assert isinstance(make_shaper(island_config), IslandShaper)

    def test_tiled_variant(self, tiled_config: WorldConfig) -> None:
        """Tiled config selects TiledShaper."""
        assert isinstance(make_shaper(tiled_config), TiledShaper)

    def test_noise_seeds_are_offset(self, tiled_config: WorldConfig) -> None:
        """Base, detail and blob noise use seed, seed + 1 and seed + 2."""
        shaper = make_shaper(tiled_config)
        assert shaper.base_noise.seed == 42
        assert shaper.detail_noise.seed == 43
        assert shaper.blob_noise.seed == 44

    def test_base_shaper_is_abstract(self, island_config: WorldConfig) -> None:
        """HeightShaper itself has no landmass mask."""
        with pytest.raises(NotImplementedError):
            HeightShaper(island_config).generate_height(0.5, 0.5)


class TestCalculateFinalHeight:
    """Tests for mask and noise combination."""

    def test_non_positive_mask_gives_zero(self, island_config: WorldConfig) -> None:
        """A mask far below zero survives edge noise and flattens the height."""
        shaper = IslandShaper(island_config)
        nx = np.linspace(-0.9, 0.9, 7)
        nz = np.linspace(0.8, -0.6, 7)
        heights = shaper.calculate_final_height(nx, nz, np.full(7, -1.0))
        np.testing.assert_array_equal(heights, np.zeros(7))

    def test_zero_at_noise_origin(self, island_config: WorldConfig) -> None:
        """Every noise layer vanishes at the origin, so height is zero there."""
        shaper = IslandShaper(island_config)
        assert float(shaper.calculate_final_height(0.0, 0.0, 1.0)) == 0.0

    def test_detail_applied_twice(self, island_config: WorldConfig) -> None:
        """Detail and falloff are applied in two passes."""
        shaper = IslandShaper(island_config)
        nx, nz, raw_mask = 0.31, -0.27, 0.6

        edge = shaper.detail_noise.fractal_noise(nx * 3.0, nz * 3.0, 3, 0.5) * 0.2
        t = min(max((raw_mask + edge) / 0.9, 0.0), 1.0)
        mask = t * t * (3 - 2 * t)
        base = shaper.base_noise.fractal_noise(nx, nz, 6, 0.5) * 400.0
        valley = shaper.detail_noise.fractal_noise(nx * 2, nz * 2, 4, 0.5)
        detail = shaper.detail_noise.fractal_noise(
            nx * DETAIL_FREQUENCY, nz * DETAIL_FREQUENCY, DETAIL_OCTAVES, DETAIL_PERSISTENCE
        ) * (400.0 * DETAIL_SCALE * DETAIL_GAIN)

        height_percent = base * (1 - valley * 0.5)
        falloff = mask**0.8
        height_percent = ((height_percent + detail) * falloff + detail) * falloff
        expected = height_percent / 100 * 400.0

        assert float(shaper.calculate_final_height(nx, nz, raw_mask)) == pytest.approx(
            expected
        )

    def test_detail_contribution_scales_with_world_height(
        self, island_config: WorldConfig
    ) -> None:
        """Doubling base_world_height doubles the detail contribution."""
        taller = island_config.model_copy(update={"base_world_height": 800.0})
        low = IslandShaper(island_config).detail_noise_contribution(0.3, 0.6)
        high = IslandShaper(taller).detail_noise_contribution(0.3, 0.6)
        assert float(high) == pytest.approx(2 * float(low))


class TestIslandShaper:
    """Tests for the radial island mask."""

    def test_center_is_flat(self, island_config: WorldConfig) -> None:
        """Grid center maps to the noise origin."""
        assert float(IslandShaper(island_config).generate_height(0.5, 0.5)) == 0.0

    def test_corners_are_water(self, island_config: WorldConfig) -> None:
        """Grid corners lie outside the landmass radius."""
        shaper = IslandShaper(island_config)
        corners = shaper.generate_height(
            np.array([0.0, 1.0, 0.0, 1.0]), np.array([0.0, 0.0, 1.0, 1.0])
        )
        np.testing.assert_array_equal(corners, np.zeros(4))

    def test_deterministic(self, island_config: WorldConfig) -> None:
        """Same config gives identical grids."""
        np.testing.assert_array_equal(
            IslandShaper(island_config).sample_grid(16),
            IslandShaper(island_config).sample_grid(16),
        )

    def test_different_seed_changes_heights(self, island_config: WorldConfig) -> None:
        """A new seed reshapes the island."""
        other = island_config.with_seed(43)
        assert not np.array_equal(
            IslandShaper(island_config).sample_grid(16),
            IslandShaper(other).sample_grid(16),
        )


class TestSampleGrid:
    """Tests for vertex grid sampling."""

    def test_shape(self, island_config: WorldConfig) -> None:
        """A resolution-N grid has N + 1 samples per side."""
        assert IslandShaper(island_config).sample_grid(8).shape == (9, 9)

    def test_heights_non_negative(self, island_config: WorldConfig) -> None:
        """Heights below water are flattened to zero."""
        grid = IslandShaper(island_config).sample_grid(32)
        assert grid.min() >= 0.0

    def test_tiled_heights_non_negative(self, tiled_config: WorldConfig) -> None:
        """Tiled grids obey the same floor."""
        grid = TiledShaper(tiled_config).sample_grid(32)
        assert grid.min() >= 0.0

    def test_matches_generate_height(self, island_config: WorldConfig) -> None:
        """Grid entry [iz, ix] samples generate_height(ix / res, iz / res)."""
        shaper = IslandShaper(island_config)
        grid = shaper.sample_grid(8)
        expected = max(0.0, float(shaper.generate_height(3 / 8, 5 / 8)))
        assert grid[5, 3] == pytest.approx(expected)

    def test_island_has_land(self, island_config: WorldConfig) -> None:
        """A default-sized island rises above water somewhere."""
        grid = IslandShaper(island_config).sample_grid(32)
        assert grid.max() > 0.0
