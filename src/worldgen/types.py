"""Core value types for world generation."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    """Immutable 3D vector. +Y is up; terrain lies in the XZ plane."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalize(self) -> "Vector3":
        """Return a unit-length copy. The zero vector is returned unchanged."""
        length = self.length()
        if length == 0:
            return self
        return Vector3(self.x / length, self.y / length, self.z / length)

    def horizontal_distance_squared(self, other: "Vector3") -> float:
        """Squared distance in the XZ plane, ignoring height."""
        dx = self.x - other.x
        dz = self.z - other.z
        return dx * dx + dz * dz

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"
