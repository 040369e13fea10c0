"""Seeded 2D gradient noise and fractal composition.

All functions accept Python scalars or numpy arrays. Array evaluation is
element-wise identical to scalar evaluation, so a whole vertex grid can be
sampled in one call.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Added to every squared octave sample before weighting
HEIGHT_BIAS = 0.1
# Frequency multiplier between octaves
LACUNARITY = 2.1


class NoiseGenerator:
    """Perlin-style gradient noise driven by a seed-derived permutation table."""

    def __init__(self, seed: float):
        self.seed = seed
        self._table = _build_permutation_table(seed)

    @property
    def permutation_table(self) -> NDArray[np.int64]:
        """The 512-entry lookup table (256 entries, duplicated)."""
        table = self._table.view()
        table.flags.writeable = False
        return table

    def noise_2d(self, x: ArrayLike, z: ArrayLike) -> float | NDArray[np.float64]:
        """Sample gradient noise at (x, z).

        Args:
            x: X coordinate(s).
            z: Z coordinate(s).

        Returns:
            Noise value(s), roughly in [-1, 1]. A float for scalar input.
        """
        x = np.asarray(x, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)

        floor_x = np.floor(x)
        floor_z = np.floor(z)
        grid_x = floor_x.astype(np.int64) & 255
        grid_z = floor_z.astype(np.int64) & 255
        x = x - floor_x
        z = z - floor_z

        smooth_x = _fade(x)
        smooth_z = _fade(z)

        p = self._table
        point_a = p[grid_x] + grid_z
        point_b = p[grid_x + 1] + grid_z

        result = _lerp(
            _lerp(_grad(p[point_a], x, z), _grad(p[point_b], x - 1, z), smooth_x),
            _lerp(
                _grad(p[point_a + 1], x, z - 1),
                _grad(p[point_b + 1], x - 1, z - 1),
                smooth_x,
            ),
            smooth_z,
        )
        return _unwrap(result)

    def fractal_noise(
        self,
        x: ArrayLike,
        z: ArrayLike,
        octaves: int = 6,
        persistence: float = 0.5,
    ) -> float | NDArray[np.float64]:
        """Sum squared noise octaves at increasing frequency.

        Each octave contributes ``amplitude * noise^2 * (1 + HEIGHT_BIAS)``
        while the normalizer sums raw amplitudes, so the result is not bounded
        to [0, 1]. Height calibration depends on this distribution.

        Args:
            x: X coordinate(s).
            z: Z coordinate(s).
            octaves: Number of noise layers to sum.
            persistence: Amplitude multiplier between octaves.

        Returns:
            Fractal noise value(s). A float for scalar input.
        """
        x = np.asarray(x, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)

        value = np.zeros(np.broadcast(x, z).shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        max_value = 0.0

        for _ in range(octaves):
            noise_value = np.asarray(self.noise_2d(x * frequency, z * frequency))
            value += amplitude * (noise_value * noise_value) * (1 + HEIGHT_BIAS)
            max_value += amplitude
            amplitude *= persistence
            frequency *= LACUNARITY

        return _unwrap(value / max_value)


def _build_permutation_table(seed: float) -> NDArray[np.int64]:
    """Shuffle 0..255 with the seed-derived swap rule and duplicate to 512.

    For i from 255 down to 1, entry i swaps with entry floor((seed * i) mod 256).
    This is not a uniform shuffle; output must match it exactly.
    """
    permutation = list(range(256))
    for i in range(255, 0, -1):
        j = math.floor((seed * i) % 256)
        permutation[i], permutation[j] = permutation[j], permutation[i]

    return np.array([permutation[i & 255] for i in range(512)], dtype=np.int64)


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: NDArray[np.float64], b: NDArray[np.float64], t: NDArray[np.float64]):
    return a + t * (b - a)


def _grad(
    hash_value: NDArray[np.int64],
    x: NDArray[np.float64],
    z: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Gradient contribution selected by the low 4 bits of the hash."""
    h = hash_value & 15
    gradient_x = np.where(h < 8, x, z)
    gradient_z = np.where(h < 4, z, np.where((h == 12) | (h == 14), x, z))
    return np.where((h & 1) == 0, gradient_x, -gradient_x) + np.where(
        (h & 2) == 0, gradient_z, -gradient_z
    )


def _unwrap(result: NDArray[np.float64]) -> float | NDArray[np.float64]:
    if result.ndim == 0:
        return float(result)
    return result


def smoothstep(edge0: float, edge1: float, x: ArrayLike) -> NDArray[np.float64]:
    """Smooth Hermite interpolation between 0 and 1.

    Args:
        edge0: Lower edge of transition.
        edge1: Upper edge of transition.
        x: Input values.

    Returns:
        Smoothly interpolated values in [0, 1].
    """
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)
