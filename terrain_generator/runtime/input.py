# terrain_generator/runtime/input.py

"""
Turns one frame of pygame events and keyboard state into a FrameInput.
"""

import pygame

from .camera import FrameInput

LEFT_MOUSE_BUTTON = 1

PAN_LEFT_KEYS = (pygame.K_LEFT, pygame.K_a)
PAN_RIGHT_KEYS = (pygame.K_RIGHT, pygame.K_d)
PAN_UP_KEYS = (pygame.K_UP, pygame.K_w)
PAN_DOWN_KEYS = (pygame.K_DOWN, pygame.K_s)
RESET_KEY = pygame.K_r


def build_frame_input(events, pressed_keys, cursor) -> FrameInput:
    """
    Args:
        events: The pygame events received this frame.
        pressed_keys: Held-key state indexable by key constant, such as the
            result of pygame.key.get_pressed().
        cursor: The mouse position this frame.
    """
    scroll_delta = 0.0
    drag_started = False
    drag_released = False
    reset = False

    for event in events:
        if event.type == pygame.MOUSEWHEEL:
            scroll_delta += event.y
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == LEFT_MOUSE_BUTTON:
            drag_started = True
        elif event.type == pygame.MOUSEBUTTONUP and event.button == LEFT_MOUSE_BUTTON:
            drag_released = True
        elif event.type == pygame.KEYDOWN and event.key == RESET_KEY:
            reset = True

    return FrameInput(
        scroll_delta=scroll_delta,
        cursor=tuple(cursor),
        drag_started=drag_started,
        drag_released=drag_released,
        pan_left=any(pressed_keys[key] for key in PAN_LEFT_KEYS),
        pan_right=any(pressed_keys[key] for key in PAN_RIGHT_KEYS),
        pan_up=any(pressed_keys[key] for key in PAN_UP_KEYS),
        pan_down=any(pressed_keys[key] for key in PAN_DOWN_KEYS),
        reset=reset,
    )


def is_quit_event(event) -> bool:
    return event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE)


class InputCollector:
    """Samples the live pygame input state once per frame."""

    def poll(self) -> tuple:
        """Returns (FrameInput, quit_requested)."""
        events = pygame.event.get()
        quit_requested = any(is_quit_event(event) for event in events)
        frame = build_frame_input(events, pygame.key.get_pressed(), pygame.mouse.get_pos())
        return frame, quit_requested
