"""Post-generation checks on terrain meshes and POI placements."""

from typing import Sequence

import numpy as np
import structlog

from .mesh import Terrain

logger = structlog.get_logger()


class ValidationResult:
    """Result of terrain validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_terrain(terrain: Terrain) -> ValidationResult:
    """Check mesh structure and height invariants.

    Args:
        terrain: Generated terrain.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    _check_face_indices(terrain, result)
    _check_face_count(terrain, result)
    _check_normals(terrain, result)
    _check_heights(terrain, result)
    _check_land(terrain, result)

    _log_result("terrain_validated", result)
    return result


def validate_placements(
    centers: Sequence[tuple[float, float]],
    min_distance_squared: float,
) -> ValidationResult:
    """Check that every pair of planar centers respects the spacing minimum."""
    result = ValidationResult()

    violations = 0
    for i, (ax, az) in enumerate(centers):
        for bx, bz in centers[i + 1 :]:
            dx = ax - bx
            dz = az - bz
            if dx * dx + dz * dz < min_distance_squared:
                violations += 1

    if violations:
        result.add_error(
            f"{violations} placement pairs closer than sqrt({min_distance_squared})"
        )

    _log_result("placements_validated", result)
    return result


def _check_face_indices(terrain: Terrain, result: ValidationResult) -> None:
    vertex_count = len(terrain.vertices)
    out_of_range = np.sum((terrain.faces < 0) | (terrain.faces >= vertex_count))
    if out_of_range:
        result.add_error(f"{out_of_range} face indices outside the vertex buffer")


def _check_face_count(terrain: Terrain, result: ValidationResult) -> None:
    expected = 2 * terrain.grid_resolution**2
    if len(terrain.faces) != expected or len(terrain.triangles) != expected:
        result.add_error(
            f"Expected {expected} faces, found {len(terrain.faces)} faces "
            f"and {len(terrain.triangles)} triangles"
        )


def _check_normals(terrain: Terrain, result: ValidationResult) -> None:
    lengths = np.linalg.norm(terrain.normals, axis=1)
    bad = np.sum(np.abs(lengths - 1.0) > 1e-6)
    if bad:
        result.add_error(f"{bad} face normals are not unit length")

    downward = np.sum(terrain.normals[:, 1] < 0)
    if downward:
        result.add_warning(f"{downward} face normals point downward")


def _check_heights(terrain: Terrain, result: ValidationResult) -> None:
    negative = np.sum(terrain.vertices[:, 1] < 0)
    if negative:
        result.add_error(f"{negative} vertices below water level")


def _check_land(terrain: Terrain, result: ValidationResult) -> None:
    if not np.any(terrain.vertices[:, 1] > 0):
        result.add_warning("No land above water level")


def _log_result(event: str, result: ValidationResult) -> None:
    if result.passed:
        logger.info(event, passed=True, warnings=len(result.warnings))
    else:
        logger.warning(event, passed=False, errors=result.errors)
    for warning in result.warnings:
        logger.warning("validation_warning", message=warning)
