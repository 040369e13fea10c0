"""Command-line interface for world generation."""

import argparse
import logging
import sys
import time

import structlog


def main() -> None:
    """CLI entry point for world generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural terrain mesh and place points of interest"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path or name of a world TOML config file",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Noise seed (random if omitted)"
    )
    parser.add_argument(
        "--resolution", type=int, default=None, help="Grid cells per side (default: 128)"
    )
    parser.add_argument(
        "--variant",
        choices=["island", "tiled"],
        default=None,
        help="Landmass strategy (random if omitted)",
    )
    parser.add_argument(
        "--forests", action="store_true", help="Also place forest POIs"
    )
    parser.add_argument(
        "--poi-seed",
        type=int,
        default=None,
        help="Seed for POI sampling (random if omitted)",
    )
    parser.add_argument(
        "--validate", action="store_true", help="Validate mesh and placements"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args()

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if args.verbose else logging.INFO
        ),
    )

    # Import here to avoid slow startup for --help
    import numpy as np

    from .config import find_config, load_config
    from .exceptions import ConfigurationError
    from .poi import CATEGORY_RULES, POIManager
    from .terrain import WorldGenerator, validate_placements, validate_terrain

    overrides = {}
    try:
        if args.config:
            overrides.update(load_config(find_config(args.config)))
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)

    for key, value in (
        ("seed", args.seed),
        ("grid_resolution", args.resolution),
        ("variant", args.variant),
    ):
        if value is not None:
            overrides[key] = value

    start_time = time.time()
    try:
        generator = WorldGenerator(overrides)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    terrain = generator.terrain

    manager = POIManager(
        terrain,
        rng=np.random.default_rng(args.poi_seed),
        include_forests=args.forests,
    )
    placements = manager.generate_all_pois()
    gen_time = time.time() - start_time

    config = generator.config
    print()
    print(
        f"Generated {config.variant.value} world with seed {config.seed} "
        f"({config.grid_resolution}x{config.grid_resolution}) in {gen_time:.1f}s"
    )

    total = len(terrain.triangles)
    print(f"Biomes ({total:,} triangles):")
    for biome, count in terrain.biome_counts().items():
        if count:
            print(f"  {biome.value}: {count:,} ({count / total * 100:.1f}%)")

    print("Points of interest:")
    for category, found in placements.items():
        target = CATEGORY_RULES[category].target_count
        print(f"  {category.value}: {len(found)}/{target}")

    if args.validate:
        results = [validate_terrain(terrain)]
        for category, found in placements.items():
            centers = [(p.center.x, p.center.z) for p in found]
            results.append(
                validate_placements(centers, CATEGORY_RULES[category].min_distance_squared)
            )
        if not all(result.passed for result in results):
            for result in results:
                for error in result.errors:
                    print(f"  invalid: {error}", file=sys.stderr)
            sys.exit(1)
        print("Validation passed")


if __name__ == "__main__":
    main()
