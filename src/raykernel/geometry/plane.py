"""Infinite plane primitive (z = 0 in object space).

Surface coordinates are the fractional parts of x and y, so textures tile
the plane with unit period.
"""

from __future__ import annotations

import math

from raykernel.core.geometry import Normal, Point, Vec2d, are_close
from raykernel.core.ray import Ray
from raykernel.geometry.base import BoundingBox, HitRecord, Shape


class Plane(Shape):
    """The xy plane, placed by its transformation."""

    bounding_box = BoundingBox(
        Point(-math.inf, -math.inf, 0.0), Point(math.inf, math.inf, 0.0)
    )

    @staticmethod
    def _hit_t(inv_ray: Ray) -> float | None:
        # Parallel rays never cross the plane
        if are_close(inv_ray.dir.z, 0.0):
            return None
        t = -inv_ray.origin.z / inv_ray.dir.z
        if inv_ray.t_min < t < inv_ray.t_max:
            return t
        return None

    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        inv_ray = self.to_object_space(ray)
        t = self._hit_t(inv_ray)
        if t is None:
            return None

        hit_point = inv_ray.at(t)
        normal = Normal(0.0, 0.0, 1.0 if inv_ray.dir.z < 0.0 else -1.0)
        return HitRecord(
            world_point=self.transformation.transform_point(hit_point),
            normal=self.transformation.transform_normal(normal),
            surface_point=Vec2d(
                hit_point.x - math.floor(hit_point.x),
                hit_point.y - math.floor(hit_point.y),
            ),
            t=t,
            ray=ray,
            shape=self,
        )

    def quick_ray_intersection(self, ray: Ray) -> bool:
        return self._hit_t(self.to_object_space(ray)) is not None
