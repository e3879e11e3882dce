# terrain_generator/runtime/renderer.py

"""
Draws the terrain raster onto the display through the camera's forward
transform. Only the part of the raster that is visible on screen is scaled
and blitted each frame.
"""

import math

import numpy as np
import pygame


def raster_to_surface(raster: np.ndarray) -> pygame.Surface:
    """Wraps a (height, width, 4) RGBA raster in a pygame Surface."""
    height, width = raster.shape[:2]
    return pygame.image.frombuffer(np.ascontiguousarray(raster).tobytes(), (width, height), 'RGBA')


def visible_world_rect(matrix: np.ndarray, screen_size: tuple, world_size: tuple) -> pygame.Rect:
    """
    Returns the integer rectangle of world pixels that the screen shows,
    clipped to the world. The rectangle is empty when nothing is visible.
    """
    zoom = matrix[0, 0]
    offset_x, offset_y = matrix[0, 2], matrix[1, 2]
    screen_width, screen_height = screen_size
    world_width, world_height = world_size

    left = max(0, math.floor((0 - offset_x) / zoom))
    top = max(0, math.floor((0 - offset_y) / zoom))
    right = min(world_width, math.ceil((screen_width - offset_x) / zoom))
    bottom = min(world_height, math.ceil((screen_height - offset_y) / zoom))

    return pygame.Rect(left, top, max(0, right - left), max(0, bottom - top))


class WorldRenderer:
    """Renders the terrain surface with a world-to-screen affine matrix."""

    def __init__(self, background_color: tuple = (10, 10, 20)):
        self.background_color = background_color

    def draw(self, screen: pygame.Surface, terrain_surface: pygame.Surface, matrix: np.ndarray):
        """
        Draws the terrain onto the screen.

        Args:
            screen (pygame.Surface): The display surface to draw on.
            terrain_surface (pygame.Surface): The full terrain raster.
            matrix (np.ndarray): The camera's 3x3 forward transform. Only
                uniform scale plus translation is supported.
        """
        screen.fill(self.background_color)

        rect = visible_world_rect(matrix, screen.get_size(), terrain_surface.get_size())
        if rect.width == 0 or rect.height == 0:
            return

        zoom = matrix[0, 0]
        scaled_size = (max(1, math.ceil(rect.width * zoom)), max(1, math.ceil(rect.height * zoom)))
        screen_pos = (
            round(rect.left * zoom + matrix[0, 2]),
            round(rect.top * zoom + matrix[1, 2]),
        )

        visible_part = terrain_surface.subsurface(rect)
        if scaled_size == rect.size:
            screen.blit(visible_part, screen_pos)
        else:
            screen.blit(pygame.transform.scale(visible_part, scaled_size), screen_pos)
