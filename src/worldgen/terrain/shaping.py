"""Height shaping: landmass masks combined with layered noise."""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..config import TerrainVariant, WorldConfig
from .noise import NoiseGenerator, smoothstep

# Heights at or below this are flattened to it
WATER_LEVEL = 0.0

EDGE_OCTAVES = 3
EDGE_PERSISTENCE = 0.5
BASE_OCTAVES = 6
BASE_PERSISTENCE = 0.5
VALLEY_FREQUENCY = 2
VALLEY_OCTAVES = 4
VALLEY_PERSISTENCE = 0.5
VALLEY_DEPTH = 0.5
DETAIL_FREQUENCY = 2
DETAIL_OCTAVES = 5
DETAIL_PERSISTENCE = 0.7
DETAIL_SCALE = 0.075
DETAIL_GAIN = 5
MASK_POWER = 0.8

BLOB_SCALE = 0.5
BLOB_OCTAVES = 1
BLOB_PERSISTENCE = 0.5
BLOB_THRESHOLD = 0.05


class HeightShaper:
    """Shared height synthesis for all landmass variants.

    Subclasses provide ``generate_height`` which builds a landmass mask and
    passes it to ``calculate_final_height``.
    """

    def __init__(self, config: WorldConfig):
        self.config = config
        self.base_world_height = config.base_world_height
        self.terrain_breakup_scale = config.terrain_breakup_scale
        self.terrain_breakup_intensity = config.terrain_breakup_intensity
        self.transition_sharpness = config.transition_sharpness

        self.base_noise = NoiseGenerator(config.seed)
        self.detail_noise = NoiseGenerator(config.seed + 1)

    def generate_height(self, x: ArrayLike, z: ArrayLike) -> NDArray[np.float64]:
        """Height at grid-normalized coordinates (x, z) in [0, 1]."""
        raise NotImplementedError("generate_height must be implemented by subclasses")

    def detail_noise_contribution(
        self, nx: ArrayLike, nz: ArrayLike
    ) -> NDArray[np.float64]:
        nx = np.asarray(nx, dtype=np.float64)
        nz = np.asarray(nz, dtype=np.float64)
        return np.asarray(
            self.detail_noise.fractal_noise(
                nx * DETAIL_FREQUENCY,
                nz * DETAIL_FREQUENCY,
                DETAIL_OCTAVES,
                DETAIL_PERSISTENCE,
            )
        ) * (self.base_world_height * DETAIL_SCALE * DETAIL_GAIN)

    def calculate_final_height(
        self, nx: ArrayLike, nz: ArrayLike, mask: ArrayLike
    ) -> NDArray[np.float64]:
        """Combine a landmass mask with base, valley and detail noise.

        Detail is added and the mask falloff applied twice. That double pass
        is part of the height calibration and must not be collapsed.

        Args:
            nx: Shaper-space X coordinate(s).
            nz: Shaper-space Z coordinate(s).
            mask: Raw landmass mask value(s).

        Returns:
            Height(s) in world units; 0 where the mask vanishes.
        """
        nx = np.asarray(nx, dtype=np.float64)
        nz = np.asarray(nz, dtype=np.float64)

        edge_noise = (
            np.asarray(
                self.detail_noise.fractal_noise(
                    nx * self.terrain_breakup_scale,
                    nz * self.terrain_breakup_scale,
                    EDGE_OCTAVES,
                    EDGE_PERSISTENCE,
                )
            )
            * self.terrain_breakup_intensity
        )
        mask = smoothstep(0.0, self.transition_sharpness, np.asarray(mask) + edge_noise)

        height_percent = (
            np.asarray(
                self.base_noise.fractal_noise(nx, nz, BASE_OCTAVES, BASE_PERSISTENCE)
            )
            * self.base_world_height
        )

        # Valleys reduce heights by up to VALLEY_DEPTH
        valley_noise = np.asarray(
            self.detail_noise.fractal_noise(
                nx * VALLEY_FREQUENCY,
                nz * VALLEY_FREQUENCY,
                VALLEY_OCTAVES,
                VALLEY_PERSISTENCE,
            )
        )
        height_percent = height_percent * (1 - valley_noise * VALLEY_DEPTH)

        falloff = mask**MASK_POWER
        for _ in range(2):
            height_percent = height_percent + self.detail_noise_contribution(nx, nz)
            height_percent = height_percent * falloff

        height = (height_percent / 100) * self.base_world_height
        return np.where(mask <= 0, 0.0, height)

    def sample_grid(self, resolution: int) -> NDArray[np.float64]:
        """Sample heights at every vertex of a resolution x resolution grid.

        Args:
            resolution: Number of cells per side.

        Returns:
            Array of shape (resolution + 1, resolution + 1) indexed [z, x],
            with heights at or below WATER_LEVEL flattened to WATER_LEVEL.
        """
        coords = np.arange(resolution + 1, dtype=np.float64) / resolution
        xx, zz = np.meshgrid(coords, coords)
        heights = np.asarray(self.generate_height(xx, zz), dtype=np.float64)
        return np.where(heights <= WATER_LEVEL, WATER_LEVEL, heights)


class IslandShaper(HeightShaper):
    """Single roughly circular landmass centered on the grid."""

    def __init__(self, config: WorldConfig):
        super().__init__(config)
        self.landmass_size = config.landmass_size

    def generate_height(self, x: ArrayLike, z: ArrayLike) -> NDArray[np.float64]:
        # Remap [0, 1] grid space to [-1, 1]
        nx = np.asarray(x, dtype=np.float64) * 2 - 1
        nz = np.asarray(z, dtype=np.float64) * 2 - 1

        dist = np.sqrt(nx * nx + nz * nz)
        mask = 1 - dist / self.landmass_size

        return self.calculate_final_height(nx, nz, mask)


class TiledShaper(HeightShaper):
    """Scattered blob islands from thresholded low-frequency noise."""

    def __init__(self, config: WorldConfig):
        super().__init__(config)
        self.blob_noise = NoiseGenerator(config.seed + 2)

    def generate_height(self, x: ArrayLike, z: ArrayLike) -> NDArray[np.float64]:
        nx = np.asarray(x, dtype=np.float64)
        nz = np.asarray(z, dtype=np.float64)

        blob_value = np.asarray(
            self.blob_noise.fractal_noise(
                nx * BLOB_SCALE, nz * BLOB_SCALE, BLOB_OCTAVES, BLOB_PERSISTENCE
            )
        )
        mask = (blob_value - BLOB_THRESHOLD) * 2

        return self.calculate_final_height(nx, nz, mask)


def make_shaper(config: WorldConfig) -> HeightShaper:
    """Select the shaper variant named by ``config.variant``."""
    if config.variant == TerrainVariant.TILED:
        return TiledShaper(config)
    return IslandShaper(config)
