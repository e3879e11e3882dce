"""Tests for the load-or-generate fallback policy."""

import logging
import os

import numpy as np
import pytest

from terrain_generator.cache import TerrainCache
from terrain_generator.exceptions import CacheError, NoiseFieldError
from terrain_generator.pipeline import build_terrain, load_or_generate


def test_build_terrain(small_config):
    terrain = build_terrain(small_config)

    assert terrain.grid.shape == (48, 64)
    assert terrain.raster.shape == (48, 64, 4)
    assert not terrain.from_cache


def test_generates_then_loads_from_cache(small_config, cache):
    first = load_or_generate(small_config, cache=cache)
    assert not first.from_cache
    assert cache.exists()

    second = load_or_generate(small_config, cache=cache)
    assert second.from_cache
    np.testing.assert_array_equal(second.grid, first.grid)
    np.testing.assert_array_equal(second.raster, first.raster)


def test_without_cache(small_config):
    terrain = load_or_generate(small_config, cache=None)
    assert not terrain.from_cache


def test_regenerate_ignores_existing_record(small_config, cache):
    load_or_generate(small_config, cache=cache)

    terrain = load_or_generate(small_config, cache=cache, regenerate=True)

    assert not terrain.from_cache
    assert cache.exists()


def test_corrupt_cache_falls_back_to_generation(small_config, cache, caplog):
    expected = load_or_generate(small_config, cache=cache)
    with open(cache.data_path, "wb") as f:
        f.write(b"corrupt")

    with caplog.at_level(logging.WARNING):
        terrain = load_or_generate(small_config, cache=cache)

    assert not terrain.from_cache
    np.testing.assert_array_equal(terrain.grid, expected.grid)
    assert any("Failed to load cache" in r.message for r in caplog.records)
    # The fresh record replaced the corrupt one.
    assert load_or_generate(small_config, cache=cache).from_cache


def test_changed_settings_invalidate_cache(make_config, cache):
    load_or_generate(make_config(), cache=cache)

    reseeded = make_config({"terrain": {"noise": {"seed": 77}}})
    terrain = load_or_generate(reseeded, cache=cache)

    assert not terrain.from_cache


def test_store_failure_is_only_a_warning(small_config, tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    cache = TerrainCache(str(blocker / "cache"))

    with caplog.at_level(logging.WARNING):
        terrain = load_or_generate(small_config, cache=cache)

    assert terrain.raster.shape == (48, 64, 4)
    assert any("Failed to save terrain cache" in r.message for r in caplog.records)


def test_noise_failure_propagates(make_config, cache):
    config = make_config({"terrain": {"noise": {"seed": -1}}})

    with pytest.raises(NoiseFieldError):
        load_or_generate(config, cache=cache)
    assert not cache.exists()


def test_cache_error_is_not_raised_to_caller(small_config, cache, monkeypatch):
    def broken_load(*args, **kwargs):
        raise CacheError("boom")

    load_or_generate(small_config, cache=cache)
    monkeypatch.setattr(cache, "load", broken_load)

    terrain = load_or_generate(small_config, cache=cache)
    assert not terrain.from_cache


def test_clear_failure_is_only_a_warning(small_config, cache, caplog):
    # A directory where the cached image belongs cannot be removed with os.remove.
    os.makedirs(cache.image_path)

    with caplog.at_level(logging.WARNING):
        terrain = load_or_generate(small_config, cache=cache, regenerate=True)

    assert terrain.grid.shape == (48, 64)
    assert not terrain.from_cache
    assert any("Failed to clear terrain cache" in r.message for r in caplog.records)
