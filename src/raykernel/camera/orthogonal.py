"""Orthogonal (parallel projection) camera."""

from __future__ import annotations

from raykernel.camera.base import Camera
from raykernel.core.geometry import Point, Vec
from raykernel.core.ray import Ray

_FORWARD = Vec(1.0, 0.0, 0.0)


class OrthogonalCamera(Camera):
    """A camera whose rays are all parallel to its +x axis.

    Rays start on the screen plane x = -1, at
    (y, z) = ((1 - 2u) * aspect_ratio, 2v - 1), and have t_min = 1.
    """

    def fire_ray(self, u: float, v: float) -> Ray:
        origin = Point(-1.0, (1.0 - 2.0 * u) * self.aspect_ratio, 2.0 * v - 1.0)
        ray = Ray(origin=origin, dir=_FORWARD, t_min=1.0)
        return ray.transform(self.transformation)
