"""Points, vectors, normals and surface coordinates.

The three 3D types are kept distinct because a transformation acts on each
of them differently: points pick up the translation, vectors do not, and
normals are mapped through the inverse transpose of the linear part.

All types are immutable and compare approximately through ``is_close``.

Example:
    >>> from raykernel.core.geometry import Point, Vec
    >>> p = Point(1.0, 2.0, 3.0) + Vec(0.0, 0.0, 1.0)
    >>> p.is_close(Point(1.0, 2.0, 4.0))
    True
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Default tolerance for approximate comparisons
EPSILON = 1e-5


def are_close(a: float, b: float, epsilon: float = EPSILON) -> bool:
    """Return True if two floats differ by less than ``epsilon``."""
    return abs(a - b) < epsilon


# =============================================================================
# Vector
# =============================================================================


@dataclass(frozen=True, slots=True)
class Vec:
    """A free vector in 3D space.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def add(self, other: Vec) -> Vec:
        """Return the component-wise sum of two vectors."""
        return Vec(self.x + other.x, self.y + other.y, self.z + other.z)

    def sub(self, other: Vec) -> Vec:
        """Return the component-wise difference of two vectors."""
        return Vec(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, factor: float) -> Vec:
        """Return the vector multiplied by a scalar."""
        return Vec(self.x * factor, self.y * factor, self.z * factor)

    def neg(self) -> Vec:
        """Return the opposite vector."""
        return Vec(-self.x, -self.y, -self.z)

    def dot(self, other: Vec | Normal) -> float:
        """Compute the scalar product with a vector or a normal."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec | Normal) -> Vec:
        """Compute the cross product with a vector or a normal."""
        return Vec(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def squared_norm(self) -> float:
        """Return the squared Euclidean length."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def norm(self) -> float:
        """Return the Euclidean length."""
        return math.sqrt(self.squared_norm())

    def normalize(self) -> Vec:
        """Return a unit vector parallel to this one.

        Raises:
            ValueError: If the vector has zero length.
        """
        length = self.norm()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self.scale(1.0 / length)

    def is_close(self, other: Vec, epsilon: float = EPSILON) -> bool:
        """Check component-wise approximate equality."""
        return (
            are_close(self.x, other.x, epsilon)
            and are_close(self.y, other.y, epsilon)
            and are_close(self.z, other.z, epsilon)
        )

    def to_normal(self) -> Normal:
        """Reinterpret the vector as a normal."""
        return Normal(self.x, self.y, self.z)

    def __add__(self, other: Vec) -> Vec:
        return self.add(other)

    def __sub__(self, other: Vec) -> Vec:
        return self.sub(other)

    def __mul__(self, factor: float) -> Vec:
        return self.scale(factor)

    __rmul__ = __mul__

    def __neg__(self) -> Vec:
        return self.neg()


# =============================================================================
# Point
# =============================================================================


@dataclass(frozen=True, slots=True)
class Point:
    """A position in 3D space.

    Adding a vector to a point yields a point; the difference of two points
    is a vector.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def add(self, vec: Vec) -> Point:
        """Return the point displaced by ``vec``."""
        return Point(self.x + vec.x, self.y + vec.y, self.z + vec.z)

    def sub(self, other: Point | Vec) -> Vec | Point:
        """Subtract a point (giving a vector) or a vector (giving a point)."""
        if isinstance(other, Point):
            return Vec(self.x - other.x, self.y - other.y, self.z - other.z)
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, factor: float) -> Point:
        """Return the point with all coordinates multiplied by ``factor``."""
        return Point(self.x * factor, self.y * factor, self.z * factor)

    def to_vec(self) -> Vec:
        """Return the position vector of the point."""
        return Vec(self.x, self.y, self.z)

    def is_close(self, other: Point, epsilon: float = EPSILON) -> bool:
        """Check component-wise approximate equality."""
        return (
            are_close(self.x, other.x, epsilon)
            and are_close(self.y, other.y, epsilon)
            and are_close(self.z, other.z, epsilon)
        )

    def __add__(self, vec: Vec) -> Point:
        return self.add(vec)

    def __sub__(self, other: Point | Vec) -> Vec | Point:
        return self.sub(other)

    def __mul__(self, factor: float) -> Point:
        return self.scale(factor)


# =============================================================================
# Normal
# =============================================================================


@dataclass(frozen=True, slots=True)
class Normal:
    """A surface normal.

    Normals are not required to be unit length: a normal returned by a
    transformed shape carries the scale of the inverse transpose.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 1.0

    def neg(self) -> Normal:
        return Normal(-self.x, -self.y, -self.z)

    def scale(self, factor: float) -> Normal:
        return Normal(self.x * factor, self.y * factor, self.z * factor)

    def dot(self, other: Vec | Normal) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def squared_norm(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def norm(self) -> float:
        return math.sqrt(self.squared_norm())

    def normalize(self) -> Normal:
        """Return a unit normal with the same orientation.

        Raises:
            ValueError: If the normal has zero length.
        """
        length = self.norm()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length normal")
        return self.scale(1.0 / length)

    def to_vec(self) -> Vec:
        return Vec(self.x, self.y, self.z)

    def is_close(self, other: Normal, epsilon: float = EPSILON) -> bool:
        """Check component-wise approximate equality."""
        return (
            are_close(self.x, other.x, epsilon)
            and are_close(self.y, other.y, epsilon)
            and are_close(self.z, other.z, epsilon)
        )

    def __neg__(self) -> Normal:
        return self.neg()

    def __mul__(self, factor: float) -> Normal:
        return self.scale(factor)

    __rmul__ = __mul__


# =============================================================================
# Surface coordinates
# =============================================================================


@dataclass(frozen=True, slots=True)
class Vec2d:
    """A (u, v) coordinate on the surface of a shape, both in [0, 1]."""

    u: float = 0.0
    v: float = 0.0

    def is_close(self, other: Vec2d, epsilon: float = EPSILON) -> bool:
        return are_close(self.u, other.u, epsilon) and are_close(
            self.v, other.v, epsilon
        )


VEC_X = Vec(1.0, 0.0, 0.0)
VEC_Y = Vec(0.0, 1.0, 0.0)
VEC_Z = Vec(0.0, 0.0, 1.0)


# =============================================================================
# Orthonormal basis
# =============================================================================


def create_onb_from_z(normal: Vec | Normal) -> tuple[Vec, Vec, Vec]:
    """Build an orthonormal basis whose third axis is ``normal``.

    Uses the branchless construction of Duff et al. (2017), which needs no
    trigonometry and has no singularity at the poles. The input is
    normalized first if it is not already unit length.

    Args:
        normal: The direction of the third basis vector.

    Returns:
        Tuple (e1, e2, e3) of mutually perpendicular unit vectors, with
        e3 parallel to ``normal``.

    Example:
        >>> e1, e2, e3 = create_onb_from_z(Normal(0.0, 0.0, 1.0))
        >>> e1.is_close(Vec(1.0, 0.0, 0.0))
        True
    """
    n = Vec(normal.x, normal.y, normal.z)
    if not are_close(n.squared_norm(), 1.0, 1e-4):
        n = n.normalize()

    sign = 1.0 if n.z > 0.0 else -1.0
    a = -1.0 / (sign + n.z)
    b = n.x * n.y * a

    e1 = Vec(1.0 + sign * n.x * n.x * a, sign * b, -sign * n.x)
    e2 = Vec(b, sign + n.y * n.y * a, -n.y)
    return e1, e2, n
