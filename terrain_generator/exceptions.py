# terrain_generator/exceptions.py

"""Exception types raised by the terrain generator."""


class TerrainError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(TerrainError):
    """The configuration file is unreadable or violates an invariant."""


class NoiseFieldError(TerrainError):
    """The noise field could not be constructed from its parameters."""


class CacheError(TerrainError):
    """A cache record could not be written, or is missing, corrupt or stale."""
