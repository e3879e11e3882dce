# terrain_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides seeded 2D Perlin noise. The heavy lifting is done by a
stateless, Numba-compiled kernel; NoiseField binds it to a seed and a
smoothness so callers only deal with world coordinates.

Data Contract:
---------------
- Inputs:
    - seed: A non-negative integer selecting the noise pattern.
    - smoothness: Sample coordinates are divided by this value before
      evaluation. Larger values give larger, smoother features.
    - x, y: Scalars or NumPy arrays of coordinates.
- Outputs:
    - Noise values in the closed range [-1, 1].
- Side Effects: None.
- Invariants: For a fixed (seed, smoothness, octaves, persistence,
  lacunarity) the value at a coordinate never changes, and the field is
  continuous across integer lattice boundaries.
================================================================================
"""

import numpy as np
from numba import njit

from .exceptions import NoiseFieldError

# Pre-defined gradient vectors for performance.
_GRADIENT_VECTORS = np.array([[0, 1], [0, -1], [1, 0], [-1, 0]])

PERMUTATION_SIZE = 256

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 4]
    # Use explicit indexing for Numba compatibility
    return g[0] * x + g[1] * y

@njit
def perlin_noise_2d(p, x, y, octaves=1, persistence=0.5, lacunarity=2.0):
    """
    Generate 2D Perlin noise using a pre-computed permutation table.

    The octave sum is divided by the total amplitude, so the result stays in
    [-1, 1] for any number of octaves. With a single octave this is plain
    Perlin noise.
    """
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))

    max_amplitude = 0.0
    amplitude = 1.0
    for _ in range(octaves):
        max_amplitude += amplitude
        amplitude *= persistence

    for i in range(rows):
        for j in range(cols):
            noise_val = 0.0
            amplitude = 1.0
            frequency = 1.0

            for _ in range(octaves):
                x_sample = x[i, j] * frequency
                y_sample = y[i, j] * frequency

                xi = int(np.floor(x_sample))
                yi = int(np.floor(y_sample))

                xf = x_sample - xi
                yf = y_sample - yi

                u = _fade(xf)
                v = _fade(yf)

                px0 = xi % 256
                px1 = (px0 + 1) % 256
                py0 = yi % 256
                py1 = (py0 + 1) % 256

                idx00 = p[p[px0] + py0]
                idx01 = p[p[px0] + py1]
                idx10 = p[p[px1] + py0]
                idx11 = p[p[px1] + py1]

                g00 = _gradient(idx00, xf, yf)
                g01 = _gradient(idx01, xf, yf - 1)
                g10 = _gradient(idx10, xf - 1, yf)
                g11 = _gradient(idx11, xf - 1, yf - 1)

                x1 = _lerp(g00, g10, u)
                x2 = _lerp(g01, g11, u)
                octave_noise = _lerp(x1, x2, v)

                noise_val += octave_noise * amplitude
                amplitude *= persistence
                frequency *= lacunarity

            total_noise[i, j] = noise_val / max_amplitude

    return total_noise


def create_permutation_table(seed: int) -> np.ndarray:
    """
    Builds the doubled permutation table for a seed.

    Raises:
        NoiseFieldError: If the seed is not a non-negative integer.
    """
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise NoiseFieldError(f"Noise seed must be an integer, got {seed!r}")
    try:
        rng = np.random.default_rng(seed)
    except ValueError as exc:
        raise NoiseFieldError(f"Invalid noise seed {seed}: {exc}") from exc

    p = np.arange(PERMUTATION_SIZE, dtype=np.int64)
    rng.shuffle(p)
    # Doubling the table lets p[p[i] + j] index without wrapping.
    return np.stack([p, p]).flatten()


class NoiseField:
    """A deterministic 2D scalar noise function bound to one seed and smoothness."""

    def __init__(self, seed: int, smoothness: float, octaves: int = 1,
                 persistence: float = 0.5, lacunarity: float = 2.0):
        if not smoothness > 0:
            raise NoiseFieldError(f"Noise smoothness must be positive, got {smoothness!r}")
        if octaves < 1:
            raise NoiseFieldError(f"Noise octaves must be at least 1, got {octaves!r}")

        self.seed = seed
        self.smoothness = float(smoothness)
        self.octaves = int(octaves)
        self.persistence = float(persistence)
        self.lacunarity = float(lacunarity)
        self._p = create_permutation_table(seed)

    @property
    def permutation_table(self) -> np.ndarray:
        return self._p

    def evaluate(self, x: float, y: float) -> float:
        """Returns the noise value at a single coordinate, in [-1, 1]."""
        xs = np.array([[x]], dtype=np.float64)
        ys = np.array([[y]], dtype=np.float64)
        return float(self.evaluate_grid(xs, ys)[0, 0])

    def evaluate_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Evaluates the field over 2D coordinate arrays of identical shape.
        The returned array has the same shape as the inputs.
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.shape != ys.shape or xs.ndim != 2:
            raise ValueError(f"Coordinate arrays must be 2D and equal in shape, got {xs.shape} and {ys.shape}")

        return perlin_noise_2d(
            self._p,
            xs / self.smoothness,
            ys / self.smoothness,
            self.octaves,
            self.persistence,
            self.lacunarity,
        )
