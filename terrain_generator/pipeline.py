# terrain_generator/pipeline.py

"""
Load-or-generate orchestration shared by the viewer and the offline baker.

A usable cache record short-circuits generation. Any cache problem, whether
reading or writing, is logged as a warning and never stops the run.
"""

import logging
from dataclasses import dataclass

import numpy as np

from . import color_maps
from .cache import TerrainCache
from .config import AppConfig
from .exceptions import CacheError
from .generator import TerrainGenerator


@dataclass(frozen=True)
class Terrain:
    grid: np.ndarray
    raster: np.ndarray
    from_cache: bool = False


def build_terrain(config: AppConfig, logger: logging.Logger = None, progress: bool = False) -> Terrain:
    """Generates the scalar grid and rasterizes it. Raises NoiseFieldError on a bad seed."""
    logger = logger or logging.getLogger(__name__)
    grid = TerrainGenerator(config, logger=logger).generate(progress=progress)
    raster = color_maps.rasterize(grid, config)
    logger.info(f"Rasterized terrain to {raster.shape[1]}x{raster.shape[0]} pixels.")
    return Terrain(grid=grid, raster=raster)


def load_or_generate(config: AppConfig, cache: TerrainCache = None, logger: logging.Logger = None,
                     regenerate: bool = False, progress: bool = False) -> Terrain:
    """
    Returns the terrain for a configuration, from the cache when possible.

    Args:
        config (AppConfig): The run configuration.
        cache (TerrainCache, optional): None disables caching entirely.
        logger (logging.Logger, optional): Logger for progress and warnings.
        regenerate (bool): Ignore any existing record and overwrite it.
        progress (bool): Show a progress bar while generating.
    """
    logger = logger or logging.getLogger(__name__)
    if cache is None:
        return build_terrain(config, logger=logger, progress=progress)

    fingerprint = config.generation_fingerprint()

    if regenerate:
        logger.info("Regeneration requested. Clearing terrain cache.")
        try:
            cache.clear()
        except CacheError as e:
            logger.warning(f"Failed to clear terrain cache: {e}")
    elif cache.exists():
        logger.info("Loading terrain from cache...")
        try:
            raster, grid = cache.load(expected_fingerprint=fingerprint)
            return Terrain(grid=grid, raster=raster, from_cache=True)
        except CacheError as e:
            logger.warning(f"Failed to load cache: {e}. Generating new terrain...")
    else:
        logger.info("No cache found. Generating terrain...")

    terrain = build_terrain(config, logger=logger, progress=progress)

    try:
        cache.store(terrain.raster, terrain.grid, fingerprint=fingerprint)
    except CacheError as e:
        logger.warning(f"Failed to save terrain cache: {e}")

    return terrain
