# terrain_generator/config.py

"""
================================================================================
CONFIGURATION
================================================================================
This module holds the internal default constants for a terrain run and the
immutable configuration objects built from them.

A user configuration file only needs to contain the values it wants to
change; every missing key falls back to the defaults below.

Data Contract:
---------------
- Inputs:
    - A JSON file (see load_config) or an already-parsed dictionary.
- Outputs:
    - An AppConfig instance. All of its sections are frozen dataclasses.
- Side Effects: load_config reads one file from disk.
- Invariants: A returned AppConfig has passed validate_config: biome
  thresholds are strictly ascending in [0, 1], zoom_min > 0 and the
  generated grid is never empty.
================================================================================
"""

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# --- Window ---
DEFAULT_WINDOW_WIDTH = 1280
DEFAULT_WINDOW_HEIGHT = 720
DEFAULT_WINDOW_TITLE = "Terrain Generator"

# --- Terrain Sampling ---
# Pixels per logical terrain cell. A scale of 4 draws every cell as a 4x4 block.
DEFAULT_TERRAIN_SCALE = 1
# Oversampling multiplier for the logical grid relative to the window.
DEFAULT_TERRAIN_RESOLUTION = 1

# --- Noise Generation ---
DEFAULT_SEED = 492
# Sample coordinates are divided by this value. Larger means larger features.
DEFAULT_BASE_SMOOTHNESS = 140.0
# A single octave reproduces plain Perlin noise.
DEFAULT_NOISE_OCTAVES = 1
DEFAULT_NOISE_PERSISTENCE = 0.5
DEFAULT_NOISE_LACUNARITY = 2.0

# --- Biome Levels (Normalized 0.0 to 1.0) ---
# Upper cutoff of each band. Anything at or above "forest" is dry land.
BIOME_ORDER = ("deep_water", "shallow_water", "beach", "grass", "forest", "dry_land")
BIOME_THRESHOLDS = {
    "deep_water": 0.35,
    "shallow_water": 0.42,
    "beach": 0.45,
    "grass": 0.65,
    "forest": 0.75,
}

# --- Biome Colors (RGBA) ---
BIOME_COLORS = {
    "deep_water": (10, 40, 120, 255),
    "shallow_water": (30, 100, 200, 255),
    "beach": (238, 214, 175, 255),
    "grass": (86, 160, 60, 255),
    "forest": (34, 100, 34, 255),
    "dry_land": (160, 130, 90, 255),
}

# --- Camera ---
# None centers the camera on the generated raster.
DEFAULT_CAMERA_INITIAL_X = None
DEFAULT_CAMERA_INITIAL_Y = None
DEFAULT_CAMERA_INITIAL_ZOOM = 1.0
DEFAULT_ZOOM_MIN = 0.25
DEFAULT_ZOOM_MAX = 8.0
# Fractional zoom change per unit of scroll-wheel movement.
DEFAULT_ZOOM_FACTOR = 0.1
# Screen pixels per frame for keyboard panning at zoom 1.0.
DEFAULT_PAN_SPEED = 8.0

# --- Display ---
DEFAULT_CLOCK_TICK_RATE = 60
DEFAULT_BACKGROUND_COLOR = (10, 10, 20)

# --- Cache ---
DEFAULT_CACHE_DIRECTORY = "."
DEFAULT_CACHE_IMAGE_FILENAME = "terrain_cache.png"
DEFAULT_CACHE_DATA_FILENAME = "terrain_cache.npz"


@dataclass(frozen=True)
class WindowConfig:
    width: int = DEFAULT_WINDOW_WIDTH
    height: int = DEFAULT_WINDOW_HEIGHT
    title: str = DEFAULT_WINDOW_TITLE


@dataclass(frozen=True)
class NoiseConfig:
    seed: int = DEFAULT_SEED
    base_smoothness: float = DEFAULT_BASE_SMOOTHNESS
    octaves: int = DEFAULT_NOISE_OCTAVES
    persistence: float = DEFAULT_NOISE_PERSISTENCE
    lacunarity: float = DEFAULT_NOISE_LACUNARITY


@dataclass(frozen=True)
class TerrainConfig:
    scale: int = DEFAULT_TERRAIN_SCALE
    resolution: int = DEFAULT_TERRAIN_RESOLUTION
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    # Five ascending cutoffs, one per band except the last.
    thresholds: tuple = tuple(BIOME_THRESHOLDS[name] for name in BIOME_ORDER[:-1])
    # Six RGBA tuples in BIOME_ORDER.
    colors: tuple = tuple(BIOME_COLORS[name] for name in BIOME_ORDER)

    @property
    def smoothness(self) -> float:
        """The effective noise smoothness for this resolution."""
        return self.noise.base_smoothness * self.resolution


@dataclass(frozen=True)
class CameraConfig:
    # The middle of the default window. from_dict centers on the configured one.
    initial_x: float = DEFAULT_WINDOW_WIDTH / 2
    initial_y: float = DEFAULT_WINDOW_HEIGHT / 2
    initial_zoom: float = DEFAULT_CAMERA_INITIAL_ZOOM
    zoom_min: float = DEFAULT_ZOOM_MIN
    zoom_max: float = DEFAULT_ZOOM_MAX
    zoom_factor: float = DEFAULT_ZOOM_FACTOR
    pan_speed: float = DEFAULT_PAN_SPEED


@dataclass(frozen=True)
class DisplayConfig:
    clock_tick_rate: int = DEFAULT_CLOCK_TICK_RATE
    background_color: tuple = DEFAULT_BACKGROUND_COLOR


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool = True
    directory: str = DEFAULT_CACHE_DIRECTORY
    image_filename: str = DEFAULT_CACHE_IMAGE_FILENAME
    data_filename: str = DEFAULT_CACHE_DATA_FILENAME


@dataclass(frozen=True)
class AppConfig:
    """Complete, validated configuration for one run."""

    window: WindowConfig = field(default_factory=WindowConfig)
    terrain: TerrainConfig = field(default_factory=TerrainConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    @property
    def grid_shape(self) -> tuple:
        """(rows, columns) of the logical terrain grid. Truncating division."""
        rows = (self.window.height * self.terrain.resolution) // self.terrain.scale
        cols = (self.window.width * self.terrain.resolution) // self.terrain.scale
        return rows, cols

    @classmethod
    def from_dict(cls, user_config: dict) -> "AppConfig":
        """
        Consolidates a user configuration dictionary over the internal defaults.
        The result is validated before it is returned.
        """
        if not isinstance(user_config, dict):
            raise ConfigError(f"Configuration root must be a JSON object, got {type(user_config).__name__}")

        window_cfg = _section(user_config, 'window')
        terrain_cfg = _section(user_config, 'terrain')
        noise_cfg = _section(terrain_cfg, 'noise', parent='terrain')
        biomes_cfg = _section(terrain_cfg, 'biomes', parent='terrain')
        colors_cfg = _section(terrain_cfg, 'colors', parent='terrain')
        camera_cfg = _section(user_config, 'camera')
        display_cfg = _section(user_config, 'display')
        cache_cfg = _section(user_config, 'cache')

        window = WindowConfig(
            width=window_cfg.get('width', DEFAULT_WINDOW_WIDTH),
            height=window_cfg.get('height', DEFAULT_WINDOW_HEIGHT),
            title=window_cfg.get('title', DEFAULT_WINDOW_TITLE),
        )

        noise = NoiseConfig(
            seed=noise_cfg.get('seed', DEFAULT_SEED),
            base_smoothness=noise_cfg.get('base_smoothness', DEFAULT_BASE_SMOOTHNESS),
            octaves=noise_cfg.get('octaves', DEFAULT_NOISE_OCTAVES),
            persistence=noise_cfg.get('persistence', DEFAULT_NOISE_PERSISTENCE),
            lacunarity=noise_cfg.get('lacunarity', DEFAULT_NOISE_LACUNARITY),
        )

        terrain = TerrainConfig(
            scale=terrain_cfg.get('scale', DEFAULT_TERRAIN_SCALE),
            resolution=terrain_cfg.get('resolution', DEFAULT_TERRAIN_RESOLUTION),
            noise=noise,
            thresholds=tuple(
                biomes_cfg.get(name, BIOME_THRESHOLDS[name]) for name in BIOME_ORDER[:-1]
            ),
            colors=tuple(
                _parse_color(name, colors_cfg.get(name, BIOME_COLORS[name]))
                for name in BIOME_ORDER
            ),
        )

        # The default camera looks at the middle of the raster.
        initial_x = camera_cfg.get('initial_x', DEFAULT_CAMERA_INITIAL_X)
        initial_y = camera_cfg.get('initial_y', DEFAULT_CAMERA_INITIAL_Y)
        camera = CameraConfig(
            initial_x=window.width / 2 if initial_x is None else initial_x,
            initial_y=window.height / 2 if initial_y is None else initial_y,
            initial_zoom=camera_cfg.get('initial_zoom', DEFAULT_CAMERA_INITIAL_ZOOM),
            zoom_min=camera_cfg.get('zoom_min', DEFAULT_ZOOM_MIN),
            zoom_max=camera_cfg.get('zoom_max', DEFAULT_ZOOM_MAX),
            zoom_factor=camera_cfg.get('zoom_factor', DEFAULT_ZOOM_FACTOR),
            pan_speed=camera_cfg.get('pan_speed', DEFAULT_PAN_SPEED),
        )

        display = DisplayConfig(
            clock_tick_rate=display_cfg.get('clock_tick_rate', DEFAULT_CLOCK_TICK_RATE),
            background_color=_as_tuple(
                'display.background_color', display_cfg.get('background_color', DEFAULT_BACKGROUND_COLOR)
            ),
        )

        cache = CacheConfig(
            enabled=cache_cfg.get('enabled', True),
            directory=cache_cfg.get('directory', DEFAULT_CACHE_DIRECTORY),
            image_filename=cache_cfg.get('image_filename', DEFAULT_CACHE_IMAGE_FILENAME),
            data_filename=cache_cfg.get('data_filename', DEFAULT_CACHE_DATA_FILENAME),
        )

        config = cls(window=window, terrain=terrain, camera=camera, display=display, cache=cache)
        validate_config(config)
        return config

    def generation_fingerprint(self) -> str:
        """
        Returns a SHA-256 digest of every setting that influences the scalar
        grid or the raster. Camera, display and cache settings are excluded.
        """
        payload = {
            'window': [self.window.width, self.window.height],
            'terrain': asdict(self.terrain),
        }
        encoded = json.dumps(payload, sort_keys=True).encode('utf-8')
        return hashlib.sha256(encoded).hexdigest()


def _section(config: dict, key: str, parent: str = None) -> dict:
    """Returns a nested config object, or {} when it is absent."""
    value = config.get(key, {})
    if not isinstance(value, dict):
        name = f"{parent}.{key}" if parent else key
        raise ConfigError(f"{name} must be a JSON object, got {type(value).__name__}")
    return value


def _as_tuple(name: str, value) -> tuple:
    try:
        return tuple(value)
    except TypeError as exc:
        raise ConfigError(f"{name} must be a list, got {value!r}") from exc


def _parse_color(name: str, value) -> tuple:
    """Accepts [r, g, b, a] sequences or {"r":..,"g":..,"b":..,"a":..} objects."""
    if isinstance(value, dict):
        try:
            value = (value['r'], value['g'], value['b'], value.get('a', 255))
        except KeyError as exc:
            raise ConfigError(f"Color '{name}' is missing channel {exc}") from exc
    color = _as_tuple(f"terrain.colors.{name}", value)
    if len(color) == 3:
        color = color + (255,)
    return color


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: AppConfig) -> None:
    """
    Checks every invariant the core relies on.

    Raises:
        ConfigError: With a message naming the offending setting.
    """
    window, terrain, camera = config.window, config.terrain, config.camera

    for name in ('width', 'height'):
        value = getattr(window, name)
        if not _is_int(value) or value <= 0:
            raise ConfigError(f"window.{name} must be a positive integer, got {value!r}")

    for name in ('scale', 'resolution'):
        value = getattr(terrain, name)
        if not _is_int(value) or value < 1:
            raise ConfigError(f"terrain.{name} must be an integer >= 1, got {value!r}")

    rows, cols = config.grid_shape
    if rows < 1 or cols < 1:
        raise ConfigError(
            f"Terrain grid would be empty ({rows}x{cols}); "
            f"terrain.scale {terrain.scale} is larger than the window"
        )

    noise = terrain.noise
    if not _is_int(noise.seed):
        raise ConfigError(f"terrain.noise.seed must be an integer, got {noise.seed!r}")
    if not _is_number(noise.base_smoothness) or noise.base_smoothness <= 0:
        raise ConfigError(
            f"terrain.noise.base_smoothness must be positive, got {noise.base_smoothness!r}"
        )
    if not _is_int(noise.octaves) or noise.octaves < 1:
        raise ConfigError(f"terrain.noise.octaves must be an integer >= 1, got {noise.octaves!r}")

    thresholds = terrain.thresholds
    if len(thresholds) != len(BIOME_ORDER) - 1:
        raise ConfigError(f"Expected {len(BIOME_ORDER) - 1} biome thresholds, got {len(thresholds)}")
    for name, value in zip(BIOME_ORDER, thresholds):
        if not _is_number(value) or not 0.0 <= value <= 1.0:
            raise ConfigError(f"terrain.biomes.{name} must be a number in [0, 1], got {value!r}")
    for i in range(1, len(thresholds)):
        if not thresholds[i - 1] < thresholds[i]:
            raise ConfigError(
                f"Biome thresholds must be strictly ascending: "
                f"{BIOME_ORDER[i - 1]}={thresholds[i - 1]} is not below "
                f"{BIOME_ORDER[i]}={thresholds[i]}, "
                f"which would make the '{BIOME_ORDER[i]}' band unreachable"
            )

    if len(terrain.colors) != len(BIOME_ORDER):
        raise ConfigError(f"Expected {len(BIOME_ORDER)} biome colors, got {len(terrain.colors)}")
    for name, color in zip(BIOME_ORDER, terrain.colors):
        if len(color) != 4 or not all(_is_int(c) and 0 <= c <= 255 for c in color):
            raise ConfigError(f"terrain.colors.{name} must be 4 integers in [0, 255], got {color!r}")

    for name in ('initial_x', 'initial_y', 'zoom_factor', 'pan_speed'):
        value = getattr(camera, name)
        if not _is_number(value):
            raise ConfigError(f"camera.{name} must be a number, got {value!r}")
    if not _is_number(camera.zoom_min) or camera.zoom_min <= 0:
        raise ConfigError(f"camera.zoom_min must be greater than 0, got {camera.zoom_min!r}")
    if not _is_number(camera.zoom_max) or camera.zoom_max < camera.zoom_min:
        raise ConfigError(
            f"camera.zoom_max ({camera.zoom_max!r}) must not be below zoom_min ({camera.zoom_min})"
        )
    if not _is_number(camera.initial_zoom) or not camera.zoom_min <= camera.initial_zoom <= camera.zoom_max:
        raise ConfigError(
            f"camera.initial_zoom ({camera.initial_zoom!r}) must lie within "
            f"[{camera.zoom_min}, {camera.zoom_max}]"
        )

    if not _is_int(config.display.clock_tick_rate) or config.display.clock_tick_rate <= 0:
        raise ConfigError(
            f"display.clock_tick_rate must be a positive integer, got {config.display.clock_tick_rate!r}"
        )
    background = config.display.background_color
    if len(background) not in (3, 4) or not all(_is_int(c) and 0 <= c <= 255 for c in background):
        raise ConfigError(
            f"display.background_color must be 3 or 4 integers in [0, 255], got {background!r}"
        )


def load_config(config_path: str) -> AppConfig:
    """
    Loads and validates a configuration file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or fails validation.
    """
    logger.info(f"Loading configuration from {config_path}")
    try:
        with open(config_path, 'r') as f:
            user_config = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found at {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Error decoding JSON from {config_path}: {exc}") from exc

    if not isinstance(user_config, dict):
        raise ConfigError(f"Configuration root in {config_path} must be a JSON object")

    config = AppConfig.from_dict(user_config)
    logger.info(f"Configuration loaded from {config_path}")
    return config
