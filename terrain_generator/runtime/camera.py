# terrain_generator/runtime/camera.py

"""
================================================================================
CAMERA
================================================================================
Viewport state and the world <-> screen transforms.

The camera's state is an immutable CameraState. One frame of input is a
FrameInput, and step() computes the next state from the previous one. The
Camera class owns the current state for the frame loop and exposes the
transforms the renderer needs.

Data Contract:
---------------
- World space is raster pixel space: (0, 0) is the raster's top-left corner.
- forward_transform() maps world to screen as
      translate(-x, -y), then scale(zoom), then translate(W/2, H/2).
- screen_to_world() is the exact algebraic inverse of world_to_screen().
- Invariants: zoom_min <= zoom <= zoom_max after every update, and zoom is
  always strictly positive.
================================================================================
"""

from dataclasses import dataclass, replace
from enum import Enum

import numpy as np

from ..config import CameraConfig


class CameraMode(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class FrameInput:
    """Everything the camera reads from one frame of input."""
    scroll_delta: float = 0.0
    cursor: tuple = (0, 0)
    drag_started: bool = False
    drag_released: bool = False
    pan_left: bool = False
    pan_right: bool = False
    pan_up: bool = False
    pan_down: bool = False
    reset: bool = False


@dataclass(frozen=True)
class CameraState:
    x: float
    y: float
    zoom: float
    mode: CameraMode = CameraMode.IDLE
    last_cursor: tuple = (0, 0)

    @classmethod
    def initial(cls, settings: CameraConfig) -> "CameraState":
        return cls(x=settings.initial_x, y=settings.initial_y, zoom=settings.initial_zoom)


def clamp_zoom(zoom: float, settings: CameraConfig) -> float:
    return min(max(zoom, settings.zoom_min), settings.zoom_max)


def step(state: CameraState, frame: FrameInput, settings: CameraConfig) -> CameraState:
    """
    Applies one frame of input and returns the next camera state.

    Order matters: zoom is applied first, so the drag and keyboard pans of
    the same frame already use the new zoom.
    """
    x, y, zoom = state.x, state.y, state.zoom
    mode, last_cursor = state.mode, state.last_cursor

    # 1. Scroll-wheel zoom.
    if frame.scroll_delta:
        zoom = clamp_zoom(zoom * (1.0 + frame.scroll_delta * settings.zoom_factor), settings)

    # 2. Click and drag to pan.
    if frame.drag_started:
        mode = CameraMode.DRAGGING
        last_cursor = frame.cursor
    if frame.drag_released:
        mode = CameraMode.IDLE

    if mode is CameraMode.DRAGGING:
        delta_x = frame.cursor[0] - last_cursor[0]
        delta_y = frame.cursor[1] - last_cursor[1]
        # Move opposite to the drag, in world units.
        x -= delta_x / zoom
        y -= delta_y / zoom
        last_cursor = frame.cursor

    # 3. Keyboard panning. Speed is constant in screen space.
    pan_speed = settings.pan_speed / zoom
    if frame.pan_left:
        x -= pan_speed
    if frame.pan_right:
        x += pan_speed
    if frame.pan_up:
        y -= pan_speed
    if frame.pan_down:
        y += pan_speed

    # 4. Reset to the configured view.
    if frame.reset:
        x, y, zoom = settings.initial_x, settings.initial_y, settings.initial_zoom

    return replace(state, x=x, y=y, zoom=zoom, mode=mode, last_cursor=last_cursor)


class Camera:
    """A camera for the viewer to handle pan and zoom."""

    def __init__(self, settings: CameraConfig, screen_width: int, screen_height: int):
        self.settings = settings
        self.screen_width = screen_width
        self.screen_height = screen_height
        self.state = CameraState.initial(settings)

    @property
    def x(self) -> float:
        return self.state.x

    @property
    def y(self) -> float:
        return self.state.y

    @property
    def zoom(self) -> float:
        return self.state.zoom

    @property
    def is_dragging(self) -> bool:
        return self.state.mode is CameraMode.DRAGGING

    def update(self, frame: FrameInput):
        """Advances the camera by one frame of input."""
        self.state = step(self.state, frame, self.settings)

    def reset(self):
        self.state = CameraState.initial(self.settings)

    def forward_transform(self) -> np.ndarray:
        """Returns the 3x3 affine matrix that maps world to screen coordinates."""
        to_origin = np.array([[1.0, 0.0, -self.x], [0.0, 1.0, -self.y], [0.0, 0.0, 1.0]])
        scale = np.array([[self.zoom, 0.0, 0.0], [0.0, self.zoom, 0.0], [0.0, 0.0, 1.0]])
        to_screen_center = np.array([
            [1.0, 0.0, self.screen_width / 2],
            [0.0, 1.0, self.screen_height / 2],
            [0.0, 0.0, 1.0],
        ])
        return to_screen_center @ scale @ to_origin

    def world_to_screen(self, world_x: float, world_y: float) -> tuple:
        screen_x = (world_x - self.x) * self.zoom + self.screen_width / 2
        screen_y = (world_y - self.y) * self.zoom + self.screen_height / 2
        return screen_x, screen_y

    def screen_to_world(self, screen_x: float, screen_y: float) -> tuple:
        world_x = (screen_x - self.screen_width / 2) / self.zoom + self.x
        world_y = (screen_y - self.screen_height / 2) / self.zoom + self.y
        return world_x, world_y
