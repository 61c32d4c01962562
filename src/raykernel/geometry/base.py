"""Shape interface, hit records and shared intersection helpers.

Every shape is defined in a canonical object space (unit sphere, z=0 plane,
unit cube, unit cylinder) and placed in the world by a Transformation. An
intersection test maps the incoming ray into object space with the inverse
transformation, solves in closed form there, and maps the hit back.

Intersection routines never raise: geometric degeneracies (parallel rays,
tangent rays, zero-length directions) are reported as "no hit", i.e. None.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import product

from raykernel.core.geometry import EPSILON, Normal, Point, Vec2d, are_close
from raykernel.core.ray import Ray
from raykernel.core.transformations import Transformation
from raykernel.materials.material import Material

# Tolerance used to decide which face, cap or boundary a hit lies on
BOUNDARY_TOLERANCE = 1e-4


# =============================================================================
# Hit Record
# =============================================================================


@dataclass(frozen=True, slots=True)
class HitRecord:
    """Record of a ray-shape intersection.

    Attributes:
        world_point: The hit point in world space.
        normal: The surface normal in world space, oriented against the
            incoming ray. Not normalized.
        surface_point: The (u, v) surface coordinate of the hit.
        t: The ray parameter at the hit.
        ray: The (world space) ray that produced the hit.
        shape: The shape that was hit.
    """

    world_point: Point
    normal: Normal
    surface_point: Vec2d
    t: float
    ray: Ray
    shape: Shape | None = None

    def is_close(self, other: HitRecord | None, epsilon: float = EPSILON) -> bool:
        """Compare every geometric field within ``epsilon``.

        The shape is not compared.
        """
        if other is None:
            return False
        return (
            self.world_point.is_close(other.world_point, epsilon)
            and self.normal.is_close(other.normal, epsilon)
            and self.surface_point.is_close(other.surface_point, epsilon)
            and are_close(self.t, other.t, epsilon)
            and self.ray.is_close(other.ray, epsilon)
        )


# =============================================================================
# Bounding Box
# =============================================================================


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """An axis-aligned box given by its two extreme corners."""

    p_min: Point
    p_max: Point

    def is_finite(self) -> bool:
        return all(
            math.isfinite(c)
            for c in (
                self.p_min.x,
                self.p_min.y,
                self.p_min.z,
                self.p_max.x,
                self.p_max.y,
                self.p_max.z,
            )
        )

    def corners(self) -> list[Point]:
        """Return the eight corners of the box."""
        return [
            Point(x, y, z)
            for x, y, z in product(
                (self.p_min.x, self.p_max.x),
                (self.p_min.y, self.p_max.y),
                (self.p_min.z, self.p_max.z),
            )
        ]

    def transform(self, transformation: Transformation) -> BoundingBox:
        """Return the axis-aligned box enclosing the transformed corners."""
        points = [transformation.transform_point(p) for p in self.corners()]
        return BoundingBox(
            Point(
                min(p.x for p in points),
                min(p.y for p in points),
                min(p.z for p in points),
            ),
            Point(
                max(p.x for p in points),
                max(p.y for p in points),
                max(p.z for p in points),
            ),
        )

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox(
            Point(
                min(self.p_min.x, other.p_min.x),
                min(self.p_min.y, other.p_min.y),
                min(self.p_min.z, other.p_min.z),
            ),
            Point(
                max(self.p_max.x, other.p_max.x),
                max(self.p_max.y, other.p_max.y),
                max(self.p_max.z, other.p_max.z),
            ),
        )


UNIT_CUBE = BoundingBox(Point(0.0, 0.0, 0.0), Point(1.0, 1.0, 1.0))


# =============================================================================
# Shape
# =============================================================================


class Shape(ABC):
    """Base class of all geometric primitives.

    Attributes:
        transformation: Placement of the canonical shape in the world.
        material: Surface material.
        bounding_box: Object-space bounding box of the canonical shape.
    """

    bounding_box: BoundingBox = UNIT_CUBE

    def __init__(
        self,
        transformation: Transformation | None = None,
        material: Material | None = None,
    ) -> None:
        self.transformation = (
            transformation if transformation is not None else Transformation()
        )
        self.material = material if material is not None else Material()

    @property
    def transformation(self) -> Transformation:
        return self._transformation

    @transformation.setter
    def transformation(self, value: Transformation) -> None:
        self._transformation = value
        self._inverse = value.inverse()

    @property
    def inverse_transformation(self) -> Transformation:
        """Cached inverse of the placement, maps world rays to object space."""
        return self._inverse

    def to_object_space(self, ray: Ray) -> Ray:
        return ray.transform(self._inverse)

    @abstractmethod
    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        """Return the nearest hit of ``ray`` in its valid range, or None."""

    @abstractmethod
    def quick_ray_intersection(self, ray: Ray) -> bool:
        """Return True if ``ray`` hits the shape anywhere in its valid range."""

    def world_bounding_box(self) -> BoundingBox | None:
        """Return the world-space bounding box, or None if unbounded."""
        if not self.bounding_box.is_finite():
            return None
        return self.bounding_box.transform(self.transformation)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(transformation={self.transformation!r}, "
            f"material={self.material!r})"
        )


# =============================================================================
# Shared helpers
# =============================================================================


def solve_quadratic(a: float, half_b: float, c: float) -> tuple[float, float] | None:
    """Solve a*t^2 + 2*half_b*t + c = 0.

    Uses the cancellation-free formulation from Ray Tracing Gems (chapter 7):
    q = -(half_b + sign(half_b) * sqrt(disc)), t0 = q / a, t1 = c / q.

    Returns:
        The two roots in increasing order, or None if the equation has no
        distinct real roots (negative or zero discriminant, or a == 0).
    """
    if a == 0.0:
        return None
    discriminant = half_b * half_b - a * c
    if discriminant <= 0.0:
        return None

    sqrt_d = math.sqrt(discriminant)
    sign = -1.0 if half_b < 0.0 else 1.0
    q = -(half_b + sign * sqrt_d)
    if abs(q) < 1e-12:
        t0 = (-half_b - sqrt_d) / a
        t1 = (-half_b + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1


def first_root_in_range(t0: float, t1: float, ray: Ray) -> float | None:
    """Pick the smaller root inside (t_min, t_max), falling back to the larger."""
    if ray.t_min < t0 < ray.t_max:
        return t0
    if ray.t_min < t1 < ray.t_max:
        return t1
    return None


def one_dim_intersections(origin: float, direction: float) -> tuple[float, float]:
    """Return the parameter interval in which origin + t*direction is in [0, 1].

    When ``direction`` is (almost) zero the interval is everything if the
    origin already lies in [0, 1], and empty (+inf, -inf) otherwise.
    """
    if are_close(direction, 0.0):
        if 0.0 <= origin <= 1.0:
            return -math.inf, math.inf
        return math.inf, -math.inf
    if direction > 0.0:
        return -origin / direction, (1.0 - origin) / direction
    return (1.0 - origin) / direction, -origin / direction


def fix_boundary(
    coord: float,
    lower: float = 0.0,
    upper: float = 1.0,
    tolerance: float = BOUNDARY_TOLERANCE,
) -> float:
    """Snap ``coord`` onto [lower, upper] if it lies just outside."""
    if lower - tolerance < coord < lower:
        return lower
    if upper < coord < upper + tolerance:
        return upper
    return coord


def wrapped_azimuth(x: float, y: float) -> float:
    """Return atan2(y, x) / 2pi wrapped into [0, 1)."""
    u = math.atan2(y, x) / (2.0 * math.pi)
    return u + 1.0 if u < 0.0 else u
