"""Camera module for view and ray generation.

Components:
    base: Camera interface and look-at helper
    orthogonal: Parallel projection camera
    perspective: Pinhole perspective camera
    tracer: ImageTracer, maps image pixels to camera rays

Screen coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .base import Camera, look_at
from .orthogonal import OrthogonalCamera
from .perspective import PerspectiveCamera
from .tracer import ImageTracer

__all__ = [
    "Camera",
    "look_at",
    "OrthogonalCamera",
    "PerspectiveCamera",
    "ImageTracer",
]
