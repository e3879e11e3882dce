# terrain_generator/color_maps.py

"""
================================================================================
BIOME CLASSIFICATION & COLOR MAPPING
================================================================================
This module converts the normalized scalar grid into biome IDs and then into
an RGBA pixel raster at display resolution.

It is designed to be a pure, stateless utility with no dependencies on Pygame,
allowing it to be used by both the real-time viewer and the offline baker
script.
================================================================================
"""
import math
from bisect import bisect_right
from enum import IntEnum

import numpy as np

from .config import AppConfig


class Biome(IntEnum):
    """The six terrain bands, in ascending order of elevation."""
    DEEP_WATER = 0
    SHALLOW_WATER = 1
    BEACH = 2
    GRASS = 3
    FOREST = 4
    DRY_LAND = 5


class BiomeClassifier:
    """
    Maps a normalized value to a Biome using an ordered table of
    (upper cutoff, biome) pairs. The last biome has no upper cutoff.

    A value equal to a cutoff belongs to the band above it.
    """
    def __init__(self, thresholds):
        thresholds = tuple(float(t) for t in thresholds)
        if len(thresholds) != len(Biome) - 1:
            raise ValueError(f"Expected {len(Biome) - 1} thresholds, got {len(thresholds)}")
        if any(lower >= upper for lower, upper in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Thresholds must be strictly ascending, got {thresholds}")

        self.thresholds = thresholds
        self.table = tuple(zip(thresholds + (math.inf,), Biome))
        self._cutoffs = np.array(thresholds, dtype=np.float64)

    def classify(self, value: float) -> Biome:
        """Returns the band for a single value."""
        return self.table[bisect_right(self.thresholds, value)][1]

    def classify_grid(self, values: np.ndarray) -> np.ndarray:
        """Classifies a whole array at once. Agrees element-wise with classify()."""
        return np.searchsorted(self._cutoffs, values, side='right').astype(np.uint8)


# --- Color Lookup Table (LUT) Generation ---
def create_biome_color_lut(colors) -> np.ndarray:
    """Creates a LUT where the index is the Biome ID and the value is the RGBA color."""
    lut = np.array(colors, dtype=np.uint8)
    if lut.shape != (len(Biome), 4):
        raise ValueError(f"Expected {len(Biome)} RGBA colors, got array of shape {lut.shape}")
    return lut


def get_terrain_color_array(biome_map: np.ndarray, biome_lut: np.ndarray) -> np.ndarray:
    """
    Converts a pre-calculated integer biome map into an RGBA color array
    of the same (rows, cols) layout using a pre-computed lookup table.
    """
    return biome_lut[biome_map]


def visible_cells(grid: np.ndarray, config: AppConfig) -> np.ndarray:
    """The top-left block of cells that can land inside the window."""
    scale = config.terrain.scale
    visible_rows = -(-config.window.height // scale)
    visible_cols = -(-config.window.width // scale)
    return grid[:visible_rows, :visible_cols]


def rasterize(grid: np.ndarray, config: AppConfig) -> np.ndarray:
    """
    Expands the logical grid into a (height, width, 4) RGBA raster at window
    resolution. Every cell becomes a scale x scale block of its biome color.

    Cells that fall outside the window are generated but never drawn. Pixels
    that no cell covers stay transparent black.
    """
    width, height = config.window.width, config.window.height
    scale = config.terrain.scale

    visible = visible_cells(grid, config)

    classifier = BiomeClassifier(config.terrain.thresholds)
    biome_lut = create_biome_color_lut(config.terrain.colors)
    cell_colors = get_terrain_color_array(classifier.classify_grid(visible), biome_lut)

    if scale > 1:
        cell_colors = np.repeat(np.repeat(cell_colors, scale, axis=0), scale, axis=1)

    raster = np.zeros((height, width, 4), dtype=np.uint8)
    covered_rows = min(height, cell_colors.shape[0])
    covered_cols = min(width, cell_colors.shape[1])
    raster[:covered_rows, :covered_cols] = cell_colors[:covered_rows, :covered_cols]
    return raster


def biome_histogram(grid: np.ndarray, thresholds) -> dict:
    """Returns the fraction of grid cells that fall into each biome."""
    counts = np.bincount(BiomeClassifier(thresholds).classify_grid(grid).ravel(), minlength=len(Biome))
    total = max(int(counts.sum()), 1)
    return {biome.name.lower(): counts[biome] / total for biome in Biome}
