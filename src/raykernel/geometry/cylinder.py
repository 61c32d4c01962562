"""Cylindrical shell and solid cylinder primitives.

Both live in the same canonical frame: radius 1 around the z axis, height
range z in [0, 1]. The shell is the open lateral surface only; the cylinder
adds the two flat caps.

Example:
    >>> from raykernel.core.geometry import Point
    >>> # A cylinder of radius 0.5 from (0, 0, 0) to (0, 0, 2)
    >>> cyl = Cylinder.from_endpoints(0.5, Point(0, 0, 0), Point(0, 0, 2))
"""

from __future__ import annotations

import math

from raykernel.core.geometry import Normal, Point, Vec, Vec2d, are_close
from raykernel.core.ray import Ray
from raykernel.core.transformations import (
    Transformation,
    rotation_xyz,
    rotation_y,
    rotation_z,
    scaling,
    translation,
)
from raykernel.geometry.base import (
    BoundingBox,
    HitRecord,
    Shape,
    first_root_in_range,
    fix_boundary,
    one_dim_intersections,
    solve_quadratic,
    wrapped_azimuth,
)
from raykernel.materials.material import Material

_EMPTY = (math.inf, -math.inf)


def shell_intersections(ray: Ray) -> tuple[float, float]:
    """Return the parameter interval inside the infinite unit cylinder.

    Only x and y matter. A ray parallel to the axis is either inside for
    every t (origin within radius 1) or never; a tangent ray never enters.
    """
    ox, oy = ray.origin.x, ray.origin.y
    dx, dy = ray.dir.x, ray.dir.y
    c = ox * ox + oy * oy - 1.0
    if are_close(dx, 0.0) and are_close(dy, 0.0):
        return (-math.inf, math.inf) if c <= 0.0 else _EMPTY

    roots = solve_quadratic(dx * dx + dy * dy, ox * dx + oy * dy, c)
    return roots if roots is not None else _EMPTY


def _lateral_normal(point: Point, ray_dir: Vec) -> Normal:
    normal = Normal(point.x, point.y, 0.0)
    return normal if point.x * ray_dir.x + point.y * ray_dir.y < 0.0 else normal.neg()


def _endpoints_transformation(radius: float, p_min: Point, p_max: Point) -> Transformation:
    if are_close(radius, 0.0):
        raise ValueError(f"Cylinder radius must be non-zero, got {radius}")
    if p_min.is_close(p_max):
        raise ValueError(f"Cylinder endpoints must differ, got {p_min} and {p_max}")

    axis = p_max - p_min
    height = axis.norm()
    rotation = Transformation()

    # Tilt the z axis by the colatitude, then turn it by the longitude
    colat_cos = axis.z / height
    if not are_close(colat_cos, 1.0):
        colat_sin = math.sqrt(max(0.0, 1.0 - colat_cos * colat_cos))
        rotation = rotation_y(colat_cos, colat_sin) * rotation

        if not are_close(colat_sin, 0.0):
            long_cos = axis.x / (height * colat_sin)
            if not are_close(long_cos, 1.0):
                long_sin = axis.y / (height * colat_sin)
                rotation = rotation_z(long_cos, long_sin) * rotation

    return (
        translation(p_min.to_vec())
        * rotation
        * scaling(Vec(radius, radius, height))
    )


def _dimensions_transformation(
    radius: float,
    height: float,
    offset: Vec,
    x_angle: float,
    y_angle: float,
    z_angle: float,
) -> Transformation:
    if are_close(radius, 0.0):
        raise ValueError(f"Cylinder radius must be non-zero, got {radius}")
    if are_close(height, 0.0):
        raise ValueError(f"Cylinder height must be non-zero, got {height}")
    return (
        translation(offset)
        * rotation_xyz(x_angle, y_angle, z_angle)
        * scaling(Vec(radius, radius, height))
    )


# =============================================================================
# Cylindrical Shell
# =============================================================================


class CylinderShell(Shape):
    """The open lateral surface of the unit cylinder."""

    bounding_box = BoundingBox(Point(-1.0, -1.0, 0.0), Point(1.0, 1.0, 1.0))

    @classmethod
    def from_endpoints(
        cls,
        radius: float,
        p_min: Point,
        p_max: Point,
        material: Material | None = None,
    ) -> CylinderShell:
        """Build a cylinder of ``radius`` whose axis goes from ``p_min`` to ``p_max``.

        Raises:
            ValueError: If the radius is zero or the endpoints coincide.
        """
        return cls(_endpoints_transformation(radius, p_min, p_max), material)

    @classmethod
    def from_dimensions(
        cls,
        radius: float,
        height: float,
        offset: Vec = Vec(),
        x_angle: float = 0.0,
        y_angle: float = 0.0,
        z_angle: float = 0.0,
        material: Material | None = None,
    ) -> CylinderShell:
        """Build a z-aligned cylinder, rotate it (degrees) and translate it by ``offset``.

        Raises:
            ValueError: If the radius or the height is zero.
        """
        return cls(
            _dimensions_transformation(radius, height, offset, x_angle, y_angle, z_angle),
            material,
        )

    def _first_hit(self, inv_ray: Ray) -> float | None:
        t_shell0, t_shell1 = shell_intersections(inv_ray)
        if t_shell0 >= inv_ray.t_max or t_shell1 <= inv_ray.t_min:
            return None

        t_z0, t_z1 = one_dim_intersections(inv_ray.origin.z, inv_ray.dir.z)
        if t_shell0 > t_z1 or t_shell1 < t_z0:
            return None

        if t_shell0 >= t_z0 and t_shell0 > inv_ray.t_min:
            return t_shell0
        if t_shell1 <= t_z1 and t_shell1 < inv_ray.t_max:
            return t_shell1
        return None

    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        inv_ray = self.to_object_space(ray)
        t = self._first_hit(inv_ray)
        if t is None:
            return None

        hit_point = inv_ray.at(t)
        return HitRecord(
            world_point=self.transformation.transform_point(hit_point),
            normal=self.transformation.transform_normal(
                _lateral_normal(hit_point, inv_ray.dir)
            ),
            surface_point=Vec2d(
                wrapped_azimuth(hit_point.x, hit_point.y), fix_boundary(hit_point.z)
            ),
            t=t,
            ray=ray,
            shape=self,
        )

    def quick_ray_intersection(self, ray: Ray) -> bool:
        return self._first_hit(self.to_object_space(ray)) is not None


# =============================================================================
# Cylinder
# =============================================================================


class Cylinder(CylinderShell):
    """The unit cylinder with both caps.

    Cap hits (z = 0 or z = 1 in object space) get the axial normal and a
    polar surface coordinate: v grows with the distance from the axis on
    the bottom cap (v in [0, 1/4]) and shrinks on the top cap (v in
    [3/4, 1]); the lateral surface maps onto v in [1/4, 3/4].
    """

    def _first_hit(self, inv_ray: Ray) -> float | None:
        t_shell0, t_shell1 = shell_intersections(inv_ray)
        t_z0, t_z1 = one_dim_intersections(inv_ray.origin.z, inv_ray.dir.z)
        t0, t1 = max(t_shell0, t_z0), min(t_shell1, t_z1)
        if t0 > t1:
            return None
        return first_root_in_range(t0, t1, inv_ray)

    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        inv_ray = self.to_object_space(ray)
        t = self._first_hit(inv_ray)
        if t is None:
            return None

        hit_point = inv_ray.at(t)
        on_bottom = are_close(hit_point.z, 0.0)
        on_top = are_close(hit_point.z, 1.0)

        if on_bottom or on_top:
            normal = Normal(0.0, 0.0, 1.0 if inv_ray.dir.z < 0.0 else -1.0)
        else:
            normal = _lateral_normal(hit_point, inv_ray.dir)

        u = wrapped_azimuth(hit_point.x, hit_point.y)
        quarter_rho = 0.25 * math.sqrt(hit_point.x**2 + hit_point.y**2)
        if on_bottom:
            v = quarter_rho
        elif on_top:
            v = 1.0 - quarter_rho
        else:
            v = 0.25 + 0.5 * hit_point.z

        return HitRecord(
            world_point=self.transformation.transform_point(hit_point),
            normal=self.transformation.transform_normal(normal),
            surface_point=Vec2d(u, v),
            t=t,
            ray=ray,
            shape=self,
        )
