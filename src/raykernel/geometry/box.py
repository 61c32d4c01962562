"""Axis-aligned box primitive (the unit cube [0, 1]^3 in object space).

Intersections use the slab method: for each axis the ray is clipped against
the two bounding planes, and the three parameter intervals are intersected.

Surface coordinates unfold the cube onto a cross-shaped layout inside
[0, 1]^2, three faces wide and four tall:

    +-----+-----+-----+
    |     | z=1 |     |
    +-----+-----+-----+
    | y=0 | x=0 | y=1 |
    +-----+-----+-----+
    |     | z=0 |     |
    +-----+-----+-----+
    |     | x=1 |     |
    +-----+-----+-----+
"""

from __future__ import annotations

from raykernel.core.geometry import Normal, Point, Vec, Vec2d, are_close
from raykernel.core.ray import Ray
from raykernel.core.transformations import (
    Transformation,
    rotation_xyz,
    scaling,
    translation,
)
from raykernel.geometry.base import (
    BOUNDARY_TOLERANCE,
    UNIT_CUBE,
    HitRecord,
    Shape,
    first_root_in_range,
    fix_boundary,
    one_dim_intersections,
)
from raykernel.materials.material import Material


def box_intersections(ray: Ray) -> tuple[float, float]:
    """Return the (entry, exit) parameters of an object-space ray.

    The interval is empty (entry > exit) if the ray misses the cube.
    """
    tx0, tx1 = one_dim_intersections(ray.origin.x, ray.dir.x)
    ty0, ty1 = one_dim_intersections(ray.origin.y, ray.dir.y)
    tz0, tz1 = one_dim_intersections(ray.origin.z, ray.dir.z)
    return max(tx0, ty0, tz0), min(tx1, ty1, tz1)


def _on_face(coord: float) -> bool:
    return are_close(coord, 0.0, BOUNDARY_TOLERANCE) or are_close(
        coord, 1.0, BOUNDARY_TOLERANCE
    )


def box_normal(point: Point, ray_dir: Vec) -> Normal:
    """Normal of the face containing ``point``, oriented against ``ray_dir``."""
    if _on_face(point.x):
        return Normal(1.0 if ray_dir.x < 0.0 else -1.0, 0.0, 0.0)
    if _on_face(point.y):
        return Normal(0.0, 1.0 if ray_dir.y < 0.0 else -1.0, 0.0)
    return Normal(0.0, 0.0, 1.0 if ray_dir.z < 0.0 else -1.0)


def box_uv(point: Point) -> Vec2d:
    """Surface coordinate of ``point`` in the unfolded-cube layout."""
    x, y, z = point.x, point.y, point.z
    if are_close(x, 0.0, BOUNDARY_TOLERANCE):
        u, v = (1.0 + y) / 3.0, (2.0 + z) / 4.0
    elif are_close(x, 1.0, BOUNDARY_TOLERANCE):
        u, v = (1.0 + y) / 3.0, (1.0 - z) / 4.0
    elif are_close(y, 0.0, BOUNDARY_TOLERANCE):
        u, v = (1.0 - x) / 3.0, (2.0 + z) / 4.0
    elif are_close(y, 1.0, BOUNDARY_TOLERANCE):
        u, v = (2.0 + x) / 3.0, (2.0 + z) / 4.0
    elif are_close(z, 0.0, BOUNDARY_TOLERANCE):
        u, v = (1.0 + y) / 3.0, (2.0 - x) / 4.0
    else:
        u, v = (1.0 + y) / 3.0, (3.0 + x) / 4.0
    return Vec2d(fix_boundary(u), fix_boundary(v))


class AxisAlignedBox(Shape):
    """The unit cube, placed by its transformation."""

    bounding_box = UNIT_CUBE

    @classmethod
    def from_corners(
        cls,
        p_min: Point,
        p_max: Point,
        x_angle: float = 0.0,
        y_angle: float = 0.0,
        z_angle: float = 0.0,
        material: Material | None = None,
    ) -> AxisAlignedBox:
        """Build a box from two opposite corners and optional rotations.

        The cube is scaled to span ``p_max - p_min``, rotated about x, y and
        z (degrees) around ``p_min``, and translated to ``p_min``.

        Raises:
            ValueError: If the corners share a coordinate (flat box).
        """
        transformation: Transformation = (
            translation(p_min.to_vec())
            * rotation_xyz(x_angle, y_angle, z_angle)
            * scaling(p_max - p_min)
        )
        return cls(transformation, material)

    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        inv_ray = self.to_object_space(ray)
        t0, t1 = box_intersections(inv_ray)
        if t0 > t1:
            return None
        t = first_root_in_range(t0, t1, inv_ray)
        if t is None:
            return None

        hit_point = inv_ray.at(t)
        return HitRecord(
            world_point=self.transformation.transform_point(hit_point),
            normal=self.transformation.transform_normal(
                box_normal(hit_point, inv_ray.dir)
            ),
            surface_point=box_uv(hit_point),
            t=t,
            ray=ray,
            shape=self,
        )

    def quick_ray_intersection(self, ray: Ray) -> bool:
        inv_ray = self.to_object_space(ray)
        t0, t1 = box_intersections(inv_ray)
        if t0 > t1:
            return False
        return first_root_in_range(t0, t1, inv_ray) is not None
