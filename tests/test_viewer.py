"""Tests for the interactive viewer, run against pygame's dummy video driver."""

import json

import pygame
import pytest

import viewer
from terrain_generator.runtime.camera import FrameInput


@pytest.fixture
def config_file(tmp_path, config_dict):
    config_dict["cache"] = {"directory": str(tmp_path / "cache")}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_dict))
    return path


@pytest.fixture
def app(config_file):
    application = viewer.ViewerApp(config_path=str(config_file))
    yield application
    pygame.quit()


def test_startup_generates_then_reuses_cache(config_file, app):
    assert not app.terrain.from_cache
    assert app.screen.get_size() == (64, 48)
    assert app.terrain_surface.get_size() == (64, 48)

    second = viewer.ViewerApp(config_path=str(config_file))
    assert second.terrain.from_cache


def test_regenerate_flag(config_file, app):
    again = viewer.ViewerApp(config_path=str(config_file), regenerate=True)
    assert not again.terrain.from_cache


def test_update_applies_one_frame(app, monkeypatch):
    frame = FrameInput(scroll_delta=1.0, pan_right=True)
    monkeypatch.setattr(app.input_collector, "poll", lambda: (frame, False))

    app.update()

    assert app.is_running
    assert app.camera.zoom == pytest.approx(1.1)
    assert app.camera.x == pytest.approx(10.0 / 1.1)


def test_quit_stops_loop(app, monkeypatch):
    monkeypatch.setattr(app.input_collector, "poll", lambda: (FrameInput(), True))

    app.run()

    assert not app.is_running


def test_draw_shows_terrain(app):
    app.draw()

    # The initial camera centers world (0, 0), so the raster's top-left pixel
    # lands in the middle of the window.
    expected = tuple(int(c) for c in app.terrain.raster[0, 0, :3])
    assert tuple(app.screen.get_at((32, 24)))[:3] == expected
    assert "Zoom: 1.00" in pygame.display.get_caption()[0]


def test_bad_config_returns_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert viewer.main(["--config", str(tmp_path / "missing.json")]) == 1


def test_bad_background_color_returns_error(tmp_path, monkeypatch, config_dict):
    monkeypatch.chdir(tmp_path)
    config_dict["display"] = {"background_color": 5}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_dict))

    assert viewer.main(["--config", str(path)]) == 1
