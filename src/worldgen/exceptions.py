"""Custom exceptions for world generation."""


class WorldGenError(Exception):
    """Base exception for world generation errors."""

    pass


class ConfigurationError(WorldGenError, ValueError):
    """Raised when a world configuration is invalid."""

    pass
