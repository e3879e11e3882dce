# terrain_generator/runtime/__init__.py

# The runtime pieces used by the interactive viewer. Only the camera is
# free of Pygame; the renderer and input collector import it on demand.

from .camera import Camera, CameraMode, CameraState, FrameInput, step

__all__ = ["Camera", "CameraMode", "CameraState", "FrameInput", "step"]
