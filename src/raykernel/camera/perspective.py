"""Perspective (pinhole) camera.

All rays start from the pinhole at (-distance, 0, 0) in camera space and
go through the screen, which spans y in [-aspect_ratio, aspect_ratio] and
z in [-1, 1] on the plane x = 0. The screen distance therefore sets the
field of view: the horizontal half-angle is atan(aspect_ratio / distance).

Example:
    >>> from raykernel.core.geometry import Vec
    >>> from raykernel.core.transformations import translation
    >>> camera = PerspectiveCamera(
    ...     distance=1.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     transformation=translation(Vec(-1.0, 0.0, 1.0)),
    ... )
    >>> ray = camera.fire_ray(0.5, 0.5)  # Ray through image center
"""

from __future__ import annotations

import math

from raykernel.camera.base import Camera
from raykernel.core.geometry import Point, Vec
from raykernel.core.ray import Ray
from raykernel.core.transformations import Transformation


class PerspectiveCamera(Camera):
    """A pinhole camera.

    Attributes:
        distance: Distance between the pinhole and the screen.
        aspect_ratio: Width divided by height of the screen.
        transformation: Placement of the camera in the world.
    """

    def __init__(
        self,
        distance: float = 1.0,
        aspect_ratio: float = 1.0,
        transformation: Transformation | None = None,
    ) -> None:
        if distance <= 0.0:
            raise ValueError(f"Screen distance must be positive, got {distance}")
        super().__init__(aspect_ratio, transformation)
        self.distance = distance

    @classmethod
    def from_fov(
        cls,
        hfov: float,
        aspect_ratio: float = 1.0,
        transformation: Transformation | None = None,
    ) -> PerspectiveCamera:
        """Build a camera from its horizontal field of view in degrees.

        Raises:
            ValueError: If the field of view is not in (0, 180).
        """
        if not 0.0 < hfov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {hfov}")
        distance = aspect_ratio / math.tan(math.radians(hfov) / 2.0)
        return cls(distance, aspect_ratio, transformation)

    def aperture_deg(self) -> float:
        """Return the horizontal field of view in degrees."""
        return 2.0 * math.degrees(math.atan(self.aspect_ratio / self.distance))

    def fire_ray(self, u: float, v: float) -> Ray:
        origin = Point(-self.distance, 0.0, 0.0)
        direction = Vec(self.distance, (1.0 - 2.0 * u) * self.aspect_ratio, 2.0 * v - 1.0)
        ray = Ray(origin=origin, dir=direction, t_min=1.0)
        return ray.transform(self.transformation)

    def __repr__(self) -> str:
        return (
            f"PerspectiveCamera(distance={self.distance}, "
            f"aspect_ratio={self.aspect_ratio}, "
            f"transformation={self.transformation!r})"
        )
