"""Tests for configuration loading and validation."""

import json

import pytest

from terrain_generator.config import (
    BIOME_COLORS,
    BIOME_ORDER,
    AppConfig,
    CameraConfig,
    load_config,
)
from terrain_generator.exceptions import ConfigError


class TestDefaults:
    def test_empty_dict_uses_defaults(self):
        config = AppConfig.from_dict({})

        assert config.window.width == 1280
        assert config.window.height == 720
        assert config.terrain.noise.seed == 492
        assert config.terrain.thresholds == (0.35, 0.42, 0.45, 0.65, 0.75)
        assert config.terrain.colors == tuple(BIOME_COLORS[name] for name in BIOME_ORDER)

    def test_camera_defaults_to_window_center(self):
        config = AppConfig.from_dict({"window": {"width": 200, "height": 100}})

        assert config.camera.initial_x == 100
        assert config.camera.initial_y == 50

    def test_camera_dataclass_default_matches_loaded_default(self):
        assert CameraConfig() == AppConfig.from_dict({}).camera
        assert AppConfig().camera == AppConfig.from_dict({}).camera

    def test_config_is_immutable(self, small_config):
        with pytest.raises(AttributeError):
            small_config.window.width = 10


class TestGridShape:
    def test_scale_one(self, make_config):
        assert make_config().grid_shape == (48, 64)

    def test_truncating_division(self, make_config):
        config = make_config({"window": {"width": 65, "height": 49}, "terrain": {"scale": 2}})
        assert config.grid_shape == (24, 32)

    def test_resolution_oversamples(self, make_config):
        config = make_config({"terrain": {"scale": 4, "resolution": 3}})
        assert config.grid_shape == ((48 * 3) // 4, (64 * 3) // 4)

    def test_smoothness_scales_with_resolution(self, make_config):
        config = make_config({"terrain": {"resolution": 3}})
        assert config.terrain.smoothness == 16 * 3


class TestValidation:
    @pytest.mark.parametrize("biomes", [
        {"shallow_water": 0.30},
        {"grass": 0.45},
        {"forest": 0.10},
    ])
    def test_rejects_non_ascending_thresholds(self, make_config, biomes):
        with pytest.raises(ConfigError, match="strictly ascending"):
            make_config({"terrain": {"biomes": biomes}})

    def test_rejects_threshold_out_of_range(self, make_config):
        with pytest.raises(ConfigError, match=r"\[0, 1\]"):
            make_config({"terrain": {"biomes": {"forest": 1.5}}})

    @pytest.mark.parametrize("zoom_min", [0, -1.0])
    def test_rejects_non_positive_zoom_min(self, make_config, zoom_min):
        with pytest.raises(ConfigError, match="zoom_min"):
            make_config({"camera": {"zoom_min": zoom_min}})

    def test_rejects_zoom_max_below_min(self, make_config):
        with pytest.raises(ConfigError, match="zoom_max"):
            make_config({"camera": {"zoom_min": 2.0, "zoom_max": 1.0, "initial_zoom": 2.0}})

    def test_rejects_initial_zoom_outside_range(self, make_config):
        with pytest.raises(ConfigError, match="initial_zoom"):
            make_config({"camera": {"initial_zoom": 10.0}})

    def test_rejects_empty_grid(self, make_config):
        with pytest.raises(ConfigError, match="empty"):
            make_config({"terrain": {"scale": 100}})

    @pytest.mark.parametrize("overrides", [
        {"window": {"width": 0}},
        {"window": {"height": 10.5}},
        {"terrain": {"scale": 0}},
        {"terrain": {"resolution": True}},
        {"terrain": {"noise": {"seed": "abc"}}},
        {"terrain": {"noise": {"base_smoothness": 0}}},
        {"terrain": {"noise": {"octaves": 0}}},
        {"display": {"clock_tick_rate": 0}},
    ])
    def test_rejects_bad_numbers(self, make_config, overrides):
        with pytest.raises(ConfigError):
            make_config(overrides)

    def test_rejects_bad_color(self, make_config):
        with pytest.raises(ConfigError, match="colors.beach"):
            make_config({"terrain": {"colors": {"beach": [300, 0, 0, 255]}}})

    def test_accepts_color_objects_and_rgb(self, make_config):
        config = make_config({"terrain": {"colors": {
            "beach": {"r": 1, "g": 2, "b": 3, "a": 4},
            "grass": [5, 6, 7],
        }}})

        assert config.terrain.colors[BIOME_ORDER.index("beach")] == (1, 2, 3, 4)
        assert config.terrain.colors[BIOME_ORDER.index("grass")] == (5, 6, 7, 255)

    def test_color_object_missing_channel(self, make_config):
        with pytest.raises(ConfigError, match="missing channel"):
            make_config({"terrain": {"colors": {"beach": {"r": 1, "g": 2}}}})

    @pytest.mark.parametrize("user_config, section", [
        ({"window": None}, "window"),
        ({"terrain": None}, "terrain"),
        ({"terrain": {"noise": 5}}, "terrain.noise"),
        ({"terrain": {"biomes": [0.1, 0.2, 0.3, 0.4, 0.5]}}, "terrain.biomes"),
        ({"terrain": {"colors": "blue"}}, "terrain.colors"),
        ({"camera": []}, "camera"),
        ({"display": "fast"}, "display"),
        ({"cache": True}, "cache"),
    ])
    def test_rejects_non_object_sections(self, user_config, section):
        with pytest.raises(ConfigError, match=f"{section} must be a JSON object"):
            AppConfig.from_dict(user_config)

    def test_rejects_non_object_root(self):
        with pytest.raises(ConfigError, match="root must be a JSON object"):
            AppConfig.from_dict([1, 2, 3])

    @pytest.mark.parametrize("background", [5, [10, 10], [10, 10, 300], ["a", "b", "c"]])
    def test_rejects_bad_background_color(self, make_config, background):
        with pytest.raises(ConfigError, match="display.background_color"):
            make_config({"display": {"background_color": background}})

    def test_accepts_rgba_background_color(self, make_config):
        config = make_config({"display": {"background_color": [1, 2, 3, 4]}})
        assert config.display.background_color == (1, 2, 3, 4)

    def test_rejects_non_list_color(self, make_config):
        with pytest.raises(ConfigError, match="terrain.colors.beach"):
            make_config({"terrain": {"colors": {"beach": 7}}})


class TestFingerprint:
    def test_same_settings_same_fingerprint(self, make_config):
        assert make_config().generation_fingerprint() == make_config().generation_fingerprint()

    def test_camera_does_not_change_fingerprint(self, make_config):
        moved = make_config({"camera": {"initial_x": 42.0}})
        assert moved.generation_fingerprint() == make_config().generation_fingerprint()

    @pytest.mark.parametrize("overrides", [
        {"terrain": {"noise": {"seed": 7}}},
        {"terrain": {"scale": 2}},
        {"terrain": {"biomes": {"beach": 0.5}}},
        {"terrain": {"colors": {"grass": [0, 0, 0, 255]}}},
        {"window": {"width": 32}},
    ])
    def test_generation_settings_change_fingerprint(self, make_config, overrides):
        assert make_config(overrides).generation_fingerprint() != make_config().generation_fingerprint()


class TestLoadConfig:
    def test_loads_json_file(self, tmp_path, config_dict):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(config_dict))

        config = load_config(str(path))

        assert config.window.width == 64
        assert config.terrain.noise.base_smoothness == 16

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="decoding"):
            load_config(str(path))

    def test_root_must_be_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigError, match="JSON object"):
            load_config(str(path))
