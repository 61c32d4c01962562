"""Camera interface and placement helpers.

Cameras are defined in their own frame: the observer looks along +x, +z is
up and +y points to the left of the image. Screen coordinates (u, v) are
both in [0, 1]:
    u = 0: left edge of image, u = 1: right edge
    v = 0: bottom edge of image, v = 1: top edge

The camera's transformation moves that frame into the world.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from raykernel.core.geometry import Point, Vec
from raykernel.core.ray import Ray
from raykernel.core.transformations import Transformation


class Camera(ABC):
    """Base class of all cameras.

    Attributes:
        aspect_ratio: Width divided by height of the screen.
        transformation: Placement of the camera in the world.
    """

    def __init__(
        self,
        aspect_ratio: float = 1.0,
        transformation: Transformation | None = None,
    ) -> None:
        if aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")
        self.aspect_ratio = aspect_ratio
        self.transformation = (
            transformation if transformation is not None else Transformation()
        )

    @abstractmethod
    def fire_ray(self, u: float, v: float) -> Ray:
        """Return the world-space ray through screen point (u, v)."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(aspect_ratio={self.aspect_ratio}, "
            f"transformation={self.transformation!r})"
        )


def look_at(
    lookfrom: Point,
    lookat: Point,
    vup: Vec = Vec(0.0, 0.0, 1.0),
) -> Transformation:
    """Build a camera placement from a position, a target and an up vector.

    The returned transformation maps the camera frame (+x forward, +z up)
    so that the camera sits at ``lookfrom`` and looks toward ``lookat``.

    Args:
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Approximate up direction; only its component orthogonal to the
            view direction is used.

    Raises:
        ValueError: If the two points coincide or ``vup`` is parallel to the
            view direction.
    """
    forward = np.array([lookat.x - lookfrom.x, lookat.y - lookfrom.y, lookat.z - lookfrom.z])
    forward_norm = np.linalg.norm(forward)
    if forward_norm == 0.0:
        raise ValueError(f"lookfrom and lookat coincide: {lookfrom}")
    forward = forward / forward_norm

    up = np.array([vup.x, vup.y, vup.z])
    up = up - np.dot(up, forward) * forward
    up_norm = np.linalg.norm(up)
    if up_norm < 1e-8:
        raise ValueError(f"Up vector {vup} is parallel to the view direction")
    up = up / up_norm

    # +y is the left of the image
    left = np.cross(up, forward)

    rotation = np.column_stack([forward, left, up])
    origin = np.array([lookfrom.x, lookfrom.y, lookfrom.z])

    m = np.identity(4)
    m[:3, :3] = rotation
    m[:3, 3] = origin
    invm = np.identity(4)
    invm[:3, :3] = rotation.T
    invm[:3, 3] = -rotation.T @ origin
    return Transformation(m, invm)
