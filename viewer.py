# FOLDER: /

# viewer.py

"""
================================================================================
TERRAIN VIEWER
================================================================================
Opens a window on the generated terrain. The terrain is loaded from the cache
when a matching record exists and generated (then cached) otherwise.

Controls:
    Mouse wheel         zoom
    Left drag           pan
    Arrow keys / WASD   pan
    R                   reset the camera
    Esc                 quit

Usage:
    python viewer.py --config config.json [--regenerate]
================================================================================
"""

import argparse
import json
import logging
import logging.config
import os
import sys

import pygame

from terrain_generator.cache import TerrainCache
from terrain_generator.config import load_config
from terrain_generator.exceptions import TerrainError
from terrain_generator.pipeline import load_or_generate
from terrain_generator.runtime.camera import Camera
from terrain_generator.runtime.input import InputCollector
from terrain_generator.runtime.renderer import WorldRenderer, raster_to_surface

LOG_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logging_config.json')
LOG_DIR = 'logs'


def setup_logging():
    """Initializes the logging system from the JSON logging config."""
    if not os.path.exists(LOG_DIR):
        os.makedirs(LOG_DIR)

    with open(LOG_CONFIG_PATH, 'rt') as f:
        log_config = json.load(f)

    # Tell the logger where to create its file, overriding the JSON path.
    log_config['handlers']['file']['filename'] = os.path.join(LOG_DIR, 'viewer.log')
    logging.config.dictConfig(log_config)


class ViewerApp:
    """The main application class for the terrain viewer."""

    def __init__(self, config_path: str, regenerate: bool = False):
        self.logger = logging.getLogger(__name__)
        self.logger.info("Application starting.")

        self.config = load_config(config_path)

        cache = None
        if self.config.cache.enabled:
            cache = TerrainCache.from_config(self.config.cache, logger=self.logger)
        else:
            self.logger.info("Terrain cache is DISABLED.")

        # Terrain is ready before the window opens, so a slow first
        # generation only delays the first frame.
        self.terrain = load_or_generate(self.config, cache=cache, logger=self.logger, regenerate=regenerate)

        self._setup_pygame()

        self.camera = Camera(self.config.camera, self.screen_width, self.screen_height)
        self.renderer = WorldRenderer(background_color=self.config.display.background_color)
        self.input_collector = InputCollector()
        self.terrain_surface = raster_to_surface(self.terrain.raster).convert_alpha()

        self.is_running = True

    def _setup_pygame(self):
        """Initializes Pygame and the display window."""
        self.logger.info("Initializing Pygame...")
        pygame.init()

        window = self.config.window
        self.screen_width = window.width
        self.screen_height = window.height
        self.screen = pygame.display.set_mode((self.screen_width, self.screen_height))
        pygame.display.set_caption(window.title)

        self.clock = pygame.time.Clock()
        self.tick_rate = self.config.display.clock_tick_rate
        self.logger.info(f"Display initialized in windowed mode ({self.screen_width}x{self.screen_height}).")

    def run(self):
        """The main application loop."""
        while self.is_running:
            self.update()
            self.draw()
            self.clock.tick(self.tick_rate)

        self.logger.info("Exiting viewer.")
        pygame.quit()

    def update(self):
        """Samples input once and advances the camera by one frame."""
        frame, quit_requested = self.input_collector.poll()
        if quit_requested:
            self.is_running = False
            return

        was_zoom = self.camera.zoom
        self.camera.update(frame)
        if frame.reset:
            self.logger.debug("Camera reset to its initial view.")
        if self.camera.zoom != was_zoom:
            self.logger.debug(f"Zoom changed to {self.camera.zoom:.3f}")

    def draw(self):
        """Handles all rendering for the application."""
        self.renderer.draw(self.screen, self.terrain_surface, self.camera.forward_transform())
        pygame.display.set_caption(f"{self.config.window.title} | Zoom: {self.camera.zoom:.2f}")
        pygame.display.flip()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Interactive viewer for the generated terrain.")
    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to the JSON configuration file."
    )
    parser.add_argument(
        "--regenerate",
        action="store_true",
        help="Ignore the terrain cache and generate (and re-cache) the terrain."
    )
    args = parser.parse_args(argv)

    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        app = ViewerApp(config_path=args.config, regenerate=args.regenerate)
    except TerrainError as e:
        logger.critical(f"Failed to start viewer: {e}")
        return 1

    app.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
