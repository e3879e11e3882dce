# terrain_generator/cache.py

"""
================================================================================
TERRAIN CACHE
================================================================================
Persists a generated terrain so later runs can skip generation.

A cache record is two files that are only valid together:
    - terrain_cache.png: the RGBA raster as a lossless PNG.
    - terrain_cache.npz: the float64 scalar grid plus a JSON metadata blob.
      The .npy header inside carries the grid's rows, columns and dtype, so
      no outside configuration is needed to decode it.

Both files carry the same generation_id (a PNG text chunk and a metadata
field). Each file is written to a temporary name in the cache directory and
moved into place with os.replace, so a reader sees either a whole file or
no file. A record whose two halves disagree on generation_id, for example
after a crash between the two renames, is treated as a miss.

Data Contract:
---------------
- store(raster, grid) writes a record, or raises CacheError.
- load() returns (raster, grid) exactly as stored, or raises CacheError.
  It never returns half a record.
================================================================================
"""

import json
import logging
import os
import tempfile
import uuid
import zipfile
import zlib
from datetime import datetime, timezone

import numpy as np
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from .config import CacheConfig
from .exceptions import CacheError

CACHE_FORMAT_VERSION = 1
GENERATION_ID_KEY = "generation_id"

# Errors the image and archive decoders raise for missing, truncated or
# malformed files.
_DECODE_ERRORS = (
    OSError, SyntaxError, ValueError, KeyError, EOFError,
    zipfile.BadZipFile, zlib.error, Image.DecompressionBombError,
)


class TerrainCache:
    """Stores and restores a (raster, grid) pair as one logical unit."""

    def __init__(self, directory: str, image_filename: str = "terrain_cache.png",
                 data_filename: str = "terrain_cache.npz", logger: logging.Logger = None):
        self.directory = directory
        self.image_path = os.path.join(directory, image_filename)
        self.data_path = os.path.join(directory, data_filename)
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, cache_config: CacheConfig, logger: logging.Logger = None) -> "TerrainCache":
        return cls(
            cache_config.directory,
            image_filename=cache_config.image_filename,
            data_filename=cache_config.data_filename,
            logger=logger,
        )

    def exists(self) -> bool:
        """True only if both halves of the record are present."""
        return os.path.isfile(self.image_path) and os.path.isfile(self.data_path)

    def store(self, raster: np.ndarray, grid: np.ndarray, fingerprint: str = None) -> str:
        """
        Writes the raster and grid as a new cache record.

        Args:
            raster (np.ndarray): (height, width, 4) uint8 RGBA pixels.
            grid (np.ndarray): (rows, cols) scalar grid.
            fingerprint (str, optional): Digest of the settings that produced
                the record, checked again by load().

        Returns:
            str: The generation_id shared by both files.

        Raises:
            CacheError: If the inputs are malformed or either file cannot be written.
        """
        raster = np.ascontiguousarray(raster)
        grid = np.ascontiguousarray(grid, dtype=np.float64)
        if raster.ndim != 3 or raster.shape[2] != 4 or raster.dtype != np.uint8:
            raise CacheError(f"Raster must be a (height, width, 4) uint8 array, got {raster.shape} {raster.dtype}")
        if grid.ndim != 2:
            raise CacheError(f"Grid must be two-dimensional, got shape {grid.shape}")

        generation_id = uuid.uuid4().hex
        height, width = raster.shape[:2]
        metadata = {
            "version": CACHE_FORMAT_VERSION,
            GENERATION_ID_KEY: generation_id,
            "fingerprint": fingerprint,
            "raster_size": [width, height],
            "grid_shape": list(grid.shape),
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }

        png_info = PngInfo()
        png_info.add_text(GENERATION_ID_KEY, generation_id)

        temp_paths = []
        try:
            os.makedirs(self.directory or ".", exist_ok=True)

            image_fd, temp_image_path = tempfile.mkstemp(dir=self.directory or ".", suffix=".png.tmp")
            temp_paths.append(temp_image_path)
            with os.fdopen(image_fd, 'wb') as f:
                Image.fromarray(raster).save(f, format='PNG', pnginfo=png_info)

            data_fd, temp_data_path = tempfile.mkstemp(dir=self.directory or ".", suffix=".npz.tmp")
            temp_paths.append(temp_data_path)
            with os.fdopen(data_fd, 'wb') as f:
                np.savez_compressed(
                    f,
                    grid=grid,
                    metadata=np.frombuffer(json.dumps(metadata).encode('utf-8'), dtype=np.uint8),
                )

            os.replace(temp_data_path, self.data_path)
            os.replace(temp_image_path, self.image_path)
        except (OSError, ValueError) as exc:
            raise CacheError(f"Failed to write terrain cache to '{self.directory}': {exc}") from exc
        finally:
            for path in temp_paths:
                if os.path.exists(path):
                    try:
                        os.remove(path)
                    except OSError as exc:
                        self.logger.debug(f"Could not remove temporary cache file '{path}': {exc}")

        image_kb = os.path.getsize(self.image_path) / 1024
        data_kb = os.path.getsize(self.data_path) / 1024
        self.logger.info(
            f"Terrain cached to '{self.image_path}' ({image_kb:.1f} KB) "
            f"and '{self.data_path}' ({data_kb:.1f} KB)"
        )
        return generation_id

    def load(self, expected_fingerprint: str = None) -> tuple:
        """
        Loads a complete cache record.

        Args:
            expected_fingerprint (str, optional): If given, a record produced
                from different settings is rejected.

        Returns:
            tuple: (raster, grid). The grid is read-only.

        Raises:
            CacheError: If either half is missing, truncated, undecodable,
                from a different generation run, inconsistent in size, or stale.
        """
        if not self.exists():
            missing = [p for p in (self.image_path, self.data_path) if not os.path.isfile(p)]
            raise CacheError(f"Terrain cache incomplete, missing: {', '.join(missing)}")

        raster, image_generation_id = self._read_image()
        grid, metadata = self._read_data()

        if metadata.get("version") != CACHE_FORMAT_VERSION:
            raise CacheError(f"Unsupported cache format version {metadata.get('version')!r}")
        if image_generation_id is None or image_generation_id != metadata.get(GENERATION_ID_KEY):
            raise CacheError(
                f"Cache halves belong to different generation runs "
                f"(image {image_generation_id!r}, data {metadata.get(GENERATION_ID_KEY)!r})"
            )
        if expected_fingerprint is not None and metadata.get("fingerprint") != expected_fingerprint:
            raise CacheError("Terrain cache was generated with different settings")

        height, width = raster.shape[:2]
        if [width, height] != metadata.get("raster_size"):
            raise CacheError(f"Cached image is {width}x{height}, expected {metadata.get('raster_size')}")
        if grid.ndim != 2 or list(grid.shape) != metadata.get("grid_shape"):
            raise CacheError(f"Cached grid has shape {grid.shape}, expected {metadata.get('grid_shape')}")

        grid.flags.writeable = False
        self.logger.info(f"Terrain loaded from cache: {width}x{height} raster, {grid.shape[0]}x{grid.shape[1]} grid")
        return raster, grid

    def clear(self):
        """
        Removes both halves of the record if present.

        Raises:
            CacheError: If an existing file cannot be removed.
        """
        for path in (self.image_path, self.data_path):
            try:
                os.remove(path)
                self.logger.info(f"Removed cache file '{path}'")
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise CacheError(f"Failed to remove cache file '{path}': {exc}") from exc

    def _read_image(self) -> tuple:
        try:
            with Image.open(self.image_path) as image:
                image.load()
                if image.format != 'PNG':
                    raise CacheError(f"Cached image '{self.image_path}' is {image.format}, not PNG")
                generation_id = image.info.get(GENERATION_ID_KEY)
                if image.mode != 'RGBA':
                    image = image.convert('RGBA')
                raster = np.array(image, dtype=np.uint8)
        except _DECODE_ERRORS as exc:
            raise CacheError(f"Failed to read cached image '{self.image_path}': {exc}") from exc
        return raster, generation_id

    def _read_data(self) -> tuple:
        try:
            data = np.load(self.data_path, allow_pickle=False)
            if not hasattr(data, 'files'):
                raise CacheError(f"Cached terrain data '{self.data_path}' is not an .npz archive")
            with data:
                grid = np.array(data['grid'], dtype=np.float64)
                metadata = json.loads(data['metadata'].tobytes().decode('utf-8'))
        except _DECODE_ERRORS as exc:
            raise CacheError(f"Failed to read cached terrain data '{self.data_path}': {exc}") from exc
        if not isinstance(metadata, dict):
            raise CacheError(f"Cached terrain data '{self.data_path}' has malformed metadata")
        return grid, metadata
