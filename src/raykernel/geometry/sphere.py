"""Sphere primitive.

The canonical sphere is centered at the origin with unit radius; position
and size come from the shape's transformation. The ray-sphere equation
|O + tD|^2 = 1 is solved with the cancellation-free quadratic formula.

Surface coordinates use the spherical projection:
    u = atan2(y, x) / 2pi   (wrapped into [0, 1))
    v = acos(z) / pi

Example:
    >>> from raykernel.core.geometry import Point, Vec
    >>> from raykernel.core.ray import Ray
    >>> sphere = Sphere()
    >>> hit = sphere.ray_intersection(Ray(Point(0, 0, 2), Vec(0, 0, -1)))
    >>> hit.t
    1.0
"""

from __future__ import annotations

import math

from raykernel.core.geometry import Normal, Point, Vec, Vec2d
from raykernel.core.ray import Ray
from raykernel.geometry.base import (
    BoundingBox,
    HitRecord,
    Shape,
    first_root_in_range,
    fix_boundary,
    solve_quadratic,
    wrapped_azimuth,
)


def _sphere_normal(point: Point, ray_dir: Vec) -> Normal:
    """Outward normal, flipped when the ray comes from inside."""
    normal = Normal(point.x, point.y, point.z)
    return normal if point.to_vec().dot(ray_dir) < 0.0 else normal.neg()


def _sphere_uv(point: Point) -> Vec2d:
    u = wrapped_azimuth(point.x, point.y)
    v = math.acos(fix_boundary(point.z, -1.0, 1.0)) / math.pi
    return Vec2d(u, v)


class Sphere(Shape):
    """A unit sphere centered at the origin, placed by its transformation."""

    bounding_box = BoundingBox(Point(-1.0, -1.0, -1.0), Point(1.0, 1.0, 1.0))

    def _roots(self, inv_ray: Ray) -> tuple[float, float] | None:
        origin = inv_ray.origin.to_vec()
        a = inv_ray.dir.squared_norm()
        half_b = origin.dot(inv_ray.dir)
        c = origin.squared_norm() - 1.0
        return solve_quadratic(a, half_b, c)

    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        inv_ray = self.to_object_space(ray)
        roots = self._roots(inv_ray)
        if roots is None:
            return None
        t = first_root_in_range(roots[0], roots[1], inv_ray)
        if t is None:
            return None

        hit_point = inv_ray.at(t)
        return HitRecord(
            world_point=self.transformation.transform_point(hit_point),
            normal=self.transformation.transform_normal(
                _sphere_normal(hit_point, inv_ray.dir)
            ),
            surface_point=_sphere_uv(hit_point),
            t=t,
            ray=ray,
            shape=self,
        )

    def quick_ray_intersection(self, ray: Ray) -> bool:
        inv_ray = self.to_object_space(ray)
        roots = self._roots(inv_ray)
        if roots is None:
            return False
        return first_root_in_range(roots[0], roots[1], inv_ray) is not None
