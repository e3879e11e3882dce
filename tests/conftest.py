"""Shared fixtures for the terrain generator tests."""

import copy
import logging
import os

# pygame surfaces and the viewer window are created without a real display.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from terrain_generator.cache import TerrainCache
from terrain_generator.config import AppConfig

SMALL_CONFIG = {
    "window": {"width": 64, "height": 48, "title": "test"},
    "terrain": {
        "scale": 1,
        "resolution": 1,
        "noise": {"seed": 492, "base_smoothness": 16},
        "biomes": {
            "deep_water": 0.35,
            "shallow_water": 0.42,
            "beach": 0.45,
            "grass": 0.65,
            "forest": 0.75,
        },
    },
    "camera": {
        "initial_x": 0.0,
        "initial_y": 0.0,
        "initial_zoom": 1.0,
        "zoom_min": 0.5,
        "zoom_max": 4.0,
        "zoom_factor": 0.1,
        "pan_speed": 10.0,
    },
}


def _merge(base: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@pytest.fixture
def config_dict():
    """A deep copy of the small test configuration."""
    return copy.deepcopy(SMALL_CONFIG)


@pytest.fixture
def make_config():
    """Builds an AppConfig from the small test configuration plus nested overrides."""
    def _make(overrides: dict = None) -> AppConfig:
        return AppConfig.from_dict(_merge(SMALL_CONFIG, overrides or {}))
    return _make


@pytest.fixture
def small_config(make_config):
    return make_config()


@pytest.fixture
def logger():
    return logging.getLogger("terrain-tests")


@pytest.fixture
def cache(tmp_path, logger):
    return TerrainCache(str(tmp_path / "cache"), logger=logger)
