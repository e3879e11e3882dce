# bake_world.py

"""
================================================================================
OFFLINE TERRAIN BAKER SCRIPT
================================================================================
This script is a command-line tool for generating the terrain and writing it
to the terrain cache without opening a window ("baking"). The viewer then
starts instantly by loading the cached record instead of generating it.

Usage:
    python bake_world.py --config path/to/your/config.json [--force]
================================================================================
"""
import argparse
import logging
import sys
import time

from terrain_generator import color_maps
from terrain_generator.cache import TerrainCache
from terrain_generator.config import BIOME_ORDER, load_config
from terrain_generator.exceptions import CacheError, TerrainError
from terrain_generator.pipeline import build_terrain


def bake(config_path: str, force: bool, logger: logging.Logger) -> int:
    """
    Generates the terrain for a configuration and stores it in its cache.
    Returns a process exit code.
    """
    start_time = time.perf_counter()

    try:
        config = load_config(config_path)
    except TerrainError as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return 1

    cache = TerrainCache.from_config(config.cache, logger=logger)
    fingerprint = config.generation_fingerprint()

    if cache.exists() and not force:
        try:
            cache.load(expected_fingerprint=fingerprint)
            logger.info("A matching terrain cache already exists. Use --force to rebuild it.")
            return 0
        except CacheError as e:
            logger.warning(f"Existing cache is unusable ({e}). Rebuilding...")

    try:
        terrain = build_terrain(config, logger=logger, progress=True)
    except TerrainError as e:
        logger.critical(f"Terrain generation failed: {e}")
        return 1

    try:
        generation_id = cache.store(terrain.raster, terrain.grid, fingerprint=fingerprint)
    except CacheError as e:
        logger.critical(f"Failed to save terrain cache: {e}")
        return 1

    logger.info("--- Biome Coverage ---")
    # Only the rasterized cells count, so oversampled rows and columns are skipped.
    visible = color_maps.visible_cells(terrain.grid, config)
    coverage = color_maps.biome_histogram(visible, config.terrain.thresholds)
    for name in BIOME_ORDER:
        logger.info(f"  - {name}: {coverage[name] * 100:.2f}%")

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Generation id {generation_id}. Total time: {end_time - start_time:.2f} seconds.")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Offline terrain baker: generate once, load instantly.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the terrain to be baked."
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Rebuild the cache even if a matching record already exists."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    return bake(args.config, args.force, logger)


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
