"""World generation configuration: pydantic model, randomized defaults, TOML loading."""

import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import numpy as np
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    ValidationError,
)

from .exceptions import ConfigurationError

# Seeds are drawn as integers in [0, MAX_SEED)
MAX_SEED = 10000

DEFAULT_GRID_RESOLUTION = 128
DEFAULT_BASE_WORLD_HEIGHT = 400.0
DEFAULT_BASE_WORLD_SCALE = 128.0

# Half-open ranges [low, high) for randomized shape parameters
LANDMASS_SIZE_RANGE = (0.8, 0.9)
TRANSITION_SHARPNESS_RANGE = (0.7, 1.1)
TERRAIN_BREAKUP_SCALE_RANGE = (1.0, 5.0)
TERRAIN_BREAKUP_INTENSITY_RANGE = (0.2, 0.8)
ISLAND_PROBABILITY = 0.5


class TerrainVariant(str, Enum):
    """Landmass mask strategy."""

    ISLAND = "island"
    TILED = "tiled"


class WorldConfig(BaseModel):
    """Complete world generation configuration.

    Use ``WorldConfig.with_defaults`` to build one from a partial set of
    overrides; absent fields are randomized.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    seed: NonNegativeInt | NonNegativeFloat = Field(
        description="Seed for height-field noise"
    )
    grid_resolution: int = Field(
        default=DEFAULT_GRID_RESOLUTION, gt=0, description="Grid cells per side"
    )
    base_world_height: float = Field(
        default=DEFAULT_BASE_WORLD_HEIGHT, gt=0, description="Height calibration"
    )
    base_world_scale: float = Field(
        default=DEFAULT_BASE_WORLD_SCALE, gt=0, description="World units per grid cell"
    )
    landmass_size: float = Field(gt=0, description="Island radius in normalized space")
    transition_sharpness: float = Field(
        gt=0, description="Upper edge of the mask smoothstep"
    )
    terrain_breakup_scale: float = Field(description="Frequency of coastline noise")
    terrain_breakup_intensity: float = Field(description="Strength of coastline noise")
    variant: TerrainVariant = Field(description="Landmass mask strategy")

    @classmethod
    def with_defaults(
        cls,
        overrides: Mapping[str, Any] | None = None,
        rng: np.random.Generator | None = None,
    ) -> "WorldConfig":
        """Build a config, randomizing every field not present in ``overrides``.

        All random values are drawn in a fixed order whether or not they are
        overridden, so overriding one field never shifts the others.

        Args:
            overrides: Field values to use instead of defaults. ``None`` values
                count as absent.
            rng: Random source for defaults. A fresh unseeded generator if None.

        Returns:
            Validated WorldConfig.

        Raises:
            ConfigurationError: If a field is unknown or has an invalid value.
        """
        if rng is None:
            rng = np.random.default_rng()

        defaults: dict[str, Any] = {
            "seed": int(rng.integers(0, MAX_SEED)),
            "grid_resolution": DEFAULT_GRID_RESOLUTION,
            "base_world_height": DEFAULT_BASE_WORLD_HEIGHT,
            "base_world_scale": DEFAULT_BASE_WORLD_SCALE,
            "landmass_size": float(rng.uniform(*LANDMASS_SIZE_RANGE)),
            "transition_sharpness": float(rng.uniform(*TRANSITION_SHARPNESS_RANGE)),
            "terrain_breakup_scale": float(rng.uniform(*TERRAIN_BREAKUP_SCALE_RANGE)),
            "terrain_breakup_intensity": float(
                rng.uniform(*TERRAIN_BREAKUP_INTENSITY_RANGE)
            ),
            "variant": (
                TerrainVariant.ISLAND
                if rng.random() < ISLAND_PROBABILITY
                else TerrainVariant.TILED
            ),
        }
        values = {k: v for k, v in (overrides or {}).items() if v is not None}
        return _validate({**defaults, **values})

    def with_seed(self, seed: int | float) -> "WorldConfig":
        """Return a copy with a different seed and everything else unchanged."""
        return _validate({**self.model_dump(), "seed": seed})


def _validate(data: Mapping[str, Any]) -> WorldConfig:
    try:
        return WorldConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid world config: {e}") from e


def load_config(config_path: Path) -> dict[str, Any]:
    """Load world config overrides from a TOML file.

    Reads the ``[world]`` table. Keys are checked against ``WorldConfig``
    fields; values are validated when passed to ``WorldConfig.with_defaults``.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Mapping of field overrides.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the TOML is malformed or has unknown keys.
    """
    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config {config_path}: {e}") from e

    world = data.get("world", {})
    unknown = sorted(set(world) - set(WorldConfig.model_fields))
    if unknown:
        raise ConfigurationError(
            f"Unknown world config keys in {config_path}: {', '.join(unknown)}"
        )
    return dict(world)


def find_config(name: str) -> Path:
    """Resolve a world preset name or a config file path.

    A name containing "/" or ending in ".toml" is taken as a path. Anything
    else is looked up in the bundled ``configs/`` directory, first as
    ``{name}.toml`` and then verbatim.

    Raises:
        FileNotFoundError: If no matching file exists.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {name}")
        return path

    configs_dir = _configs_dir()
    for candidate in (configs_dir / f"{name}.toml", configs_dir / name):
        if candidate.exists():
            return candidate

    raise FileNotFoundError(
        f"World preset '{name}' not found in {configs_dir}; "
        f"available: {', '.join(list_configs()) or 'none'}"
    )


def list_configs() -> list[str]:
    """Names of the bundled world presets, sorted."""
    configs_dir = _configs_dir()
    if not configs_dir.exists():
        return []
    return sorted(p.stem for p in configs_dir.glob("*.toml"))


def _configs_dir() -> Path:
    return Path(__file__).parent.parent.parent / "configs"
