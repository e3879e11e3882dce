# terrain_generator/__init__.py

"""Seeded terrain generation, biome rasterization and a paired on-disk cache."""

from .cache import TerrainCache
from .color_maps import Biome, BiomeClassifier, rasterize
from .config import AppConfig, load_config
from .exceptions import CacheError, ConfigError, NoiseFieldError, TerrainError
from .generator import TerrainGenerator, generate_terrain
from .noise import NoiseField
from .pipeline import Terrain, load_or_generate

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "Biome",
    "BiomeClassifier",
    "CacheError",
    "ConfigError",
    "NoiseField",
    "NoiseFieldError",
    "Terrain",
    "TerrainCache",
    "TerrainError",
    "TerrainGenerator",
    "generate_terrain",
    "load_config",
    "load_or_generate",
    "rasterize",
]
