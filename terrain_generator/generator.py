# terrain_generator/generator.py

"""
================================================================================
CORE TERRAIN GENERATOR
================================================================================
This module contains the TerrainGenerator class, responsible for turning a
configuration into the logical terrain grid (the "scalar grid").

Data Contract:
---------------
- Inputs (on initialization):
    - config (AppConfig): A validated configuration.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - A read-only float64 NumPy array of shape (grid_rows, grid_cols) with
      values normalized to [0, 1].
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same configuration, the output is bit-identical.
  Rows are independent of each other, so the band size used while
  generating never changes the result.
================================================================================
"""

import logging
import time

import numpy as np
from tqdm import tqdm

from .config import AppConfig
from .noise import NoiseField

# Number of grid rows evaluated per call into the noise kernel.
DEFAULT_ROWS_PER_BAND = 64


def grid_shape(config: AppConfig) -> tuple:
    """(rows, columns) of the logical grid, using truncating integer division."""
    return config.grid_shape


class TerrainGenerator:
    """
    Generates the scalar grid for a terrain run.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: AppConfig, logger: logging.Logger = None):
        """
        Initializes the terrain generator.

        Args:
            config (AppConfig): The validated run configuration.
            logger (logging.Logger, optional): The logger instance for all output.

        Raises:
            NoiseFieldError: If the noise field cannot be built from the
                configured seed and smoothness. Generation is not attempted.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.config = config

        terrain = config.terrain
        self.rows, self.cols = grid_shape(config)
        self.noise_field = NoiseField(
            seed=terrain.noise.seed,
            smoothness=terrain.smoothness,
            octaves=terrain.noise.octaves,
            persistence=terrain.noise.persistence,
            lacunarity=terrain.noise.lacunarity,
        )

        self.logger.info(f"TerrainGenerator initialized with seed: {terrain.noise.seed}")
        self.logger.info(
            f"Grid dimensions: {self.rows}x{self.cols} cells "
            f"(window {config.window.width}x{config.window.height}, "
            f"scale {terrain.scale}, resolution {terrain.resolution}, "
            f"smoothness {terrain.smoothness:g})"
        )

    def generate_rows(self, start_row: int, stop_row: int) -> np.ndarray:
        """Generates grid rows [start_row, stop_row) as normalized values."""
        y_coords = np.arange(start_row, stop_row, dtype=np.float64)
        x_coords = np.arange(self.cols, dtype=np.float64)
        wx_grid, wy_grid = np.meshgrid(x_coords, y_coords)

        raw_noise = self.noise_field.evaluate_grid(wx_grid, wy_grid)
        # Map [-1, 1] onto [0, 1].
        return (raw_noise + 1) / 2

    def generate(self, rows_per_band: int = DEFAULT_ROWS_PER_BAND, progress: bool = False) -> np.ndarray:
        """
        Generates the full scalar grid.

        Args:
            rows_per_band (int): Rows evaluated per noise-kernel call.
            progress (bool): Show a tqdm progress bar over the bands.

        Returns:
            np.ndarray: A read-only (rows, cols) float64 array in [0, 1].
        """
        if rows_per_band < 1:
            raise ValueError(f"rows_per_band must be at least 1, got {rows_per_band}")

        start_time = time.perf_counter()
        grid = np.empty((self.rows, self.cols), dtype=np.float64)

        band_starts = range(0, self.rows, rows_per_band)
        for start_row in tqdm(band_starts, desc="Generating terrain", unit="band", disable=not progress):
            stop_row = min(start_row + rows_per_band, self.rows)
            grid[start_row:stop_row] = self.generate_rows(start_row, stop_row)

        grid.flags.writeable = False

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Generated {self.rows}x{self.cols} terrain grid in {elapsed:.2f} seconds.")
        self.logger.debug(f"Grid value range: [{grid.min():.4f}, {grid.max():.4f}]")
        return grid


def generate_terrain(config: AppConfig, logger: logging.Logger = None, progress: bool = False) -> np.ndarray:
    """Convenience wrapper: builds a TerrainGenerator and returns its grid."""
    return TerrainGenerator(config, logger=logger).generate(progress=progress)
