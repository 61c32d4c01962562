"""Affine transformations with an explicitly stored inverse.

A Transformation pairs a 4x4 homogeneous matrix with its inverse, so that
inverting is free and the inverse transpose needed for normals is always at
hand. Composition multiplies the matrices and the inverses in reverse order.

Matrices are stored as NumPy arrays; the rows are also cached as plain
Python lists because applying a transformation to a single point is much
faster that way than through NumPy.

Example:
    >>> from raykernel.core.geometry import Point, Vec
    >>> from raykernel.core.transformations import rotation_z, translation
    >>> t = translation(Vec(1.0, 0.0, 0.0)) * rotation_z(90.0)
    >>> (t * Point(1.0, 0.0, 0.0)).is_close(Point(1.0, 1.0, 0.0))
    True
"""

from __future__ import annotations

import math
from typing import overload

import numpy as np
import numpy.typing as npt

from raykernel.core.geometry import EPSILON, Normal, Point, Vec, are_close
from raykernel.core.ray import Ray


IDENTITY_MATRIX = np.identity(4, dtype=np.float64)


class Transformation:
    """An invertible affine transformation.

    Attributes:
        m: The 4x4 transformation matrix.
        invm: The 4x4 inverse matrix.

    The constructor rejects a pair whose product is not the identity; use
    ``from_matrix`` to have the inverse computed.
    """

    __slots__ = ("m", "invm", "_rows", "_inv_rows")

    def __init__(
        self,
        m: npt.ArrayLike = IDENTITY_MATRIX,
        invm: npt.ArrayLike = IDENTITY_MATRIX,
    ) -> None:
        self.m = np.array(m, dtype=np.float64)
        self.invm = np.array(invm, dtype=np.float64)
        if self.m.shape != (4, 4) or self.invm.shape != (4, 4):
            raise ValueError(
                f"Transformation matrices must be 4x4, got {self.m.shape} "
                f"and {self.invm.shape}"
            )
        if not self.is_consistent():
            raise ValueError(
                f"Inverse matrix does not match: {self.invm.tolist()} is not the "
                f"inverse of {self.m.tolist()}"
            )
        self._rows: list[list[float]] = self.m.tolist()
        self._inv_rows: list[list[float]] = self.invm.tolist()

    @classmethod
    def from_matrix(cls, m: npt.ArrayLike) -> Transformation:
        """Build a transformation computing the inverse numerically.

        Args:
            m: A 4x4 invertible matrix.

        Returns:
            The transformation with its inverse filled in.

        Raises:
            ValueError: If the matrix is singular.
        """
        matrix = np.array(m, dtype=np.float64)
        try:
            inverse = np.linalg.inv(matrix)
        except np.linalg.LinAlgError as exc:
            raise ValueError(f"Matrix is not invertible: {matrix.tolist()}") from exc
        return cls(matrix, inverse)

    def is_consistent(self, epsilon: float = EPSILON) -> bool:
        """Check that m times invm is the identity within ``epsilon``."""
        product = self.m @ self.invm
        return bool(np.all(np.abs(product - IDENTITY_MATRIX) < epsilon))

    def is_close(self, other: Transformation, epsilon: float = EPSILON) -> bool:
        """Check that both matrices and inverses agree within ``epsilon``."""
        return bool(
            np.all(np.abs(self.m - other.m) < epsilon)
            and np.all(np.abs(self.invm - other.invm) < epsilon)
        )

    def inverse(self) -> Transformation:
        """Return the inverse transformation (swaps matrix and inverse)."""
        return Transformation(self.invm, self.m)

    def compose(self, other: Transformation) -> Transformation:
        """Return the transformation applying ``other`` first, then self."""
        return Transformation(self.m @ other.m, other.invm @ self.invm)

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    def transform_point(self, p: Point) -> Point:
        """Apply the full affine matrix, dividing by the homogeneous weight."""
        r0, r1, r2, r3 = self._rows
        x = p.x * r0[0] + p.y * r0[1] + p.z * r0[2] + r0[3]
        y = p.x * r1[0] + p.y * r1[1] + p.z * r1[2] + r1[3]
        z = p.x * r2[0] + p.y * r2[1] + p.z * r2[2] + r2[3]
        w = p.x * r3[0] + p.y * r3[1] + p.z * r3[2] + r3[3]
        if w == 1.0:
            return Point(x, y, z)
        return Point(x / w, y / w, z / w)

    def transform_vec(self, v: Vec) -> Vec:
        """Apply the linear part only."""
        r0, r1, r2, _ = self._rows
        return Vec(
            v.x * r0[0] + v.y * r0[1] + v.z * r0[2],
            v.x * r1[0] + v.y * r1[1] + v.z * r1[2],
            v.x * r2[0] + v.y * r2[1] + v.z * r2[2],
        )

    def transform_normal(self, n: Normal) -> Normal:
        """Apply the transpose of the inverse linear part."""
        i0, i1, i2, _ = self._inv_rows
        return Normal(
            n.x * i0[0] + n.y * i1[0] + n.z * i2[0],
            n.x * i0[1] + n.y * i1[1] + n.z * i2[1],
            n.x * i0[2] + n.y * i1[2] + n.z * i2[2],
        )

    def transform_ray(self, ray: Ray) -> Ray:
        """Transform origin and direction, keeping the interval and depth."""
        return ray.transform(self)

    @overload
    def __mul__(self, other: Transformation) -> Transformation: ...

    @overload
    def __mul__(self, other: Point) -> Point: ...

    @overload
    def __mul__(self, other: Vec) -> Vec: ...

    @overload
    def __mul__(self, other: Normal) -> Normal: ...

    @overload
    def __mul__(self, other: Ray) -> Ray: ...

    def __mul__(self, other):
        if isinstance(other, Transformation):
            return self.compose(other)
        if isinstance(other, Point):
            return self.transform_point(other)
        if isinstance(other, Vec):
            return self.transform_vec(other)
        if isinstance(other, Normal):
            return self.transform_normal(other)
        if isinstance(other, Ray):
            return other.transform(self)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Transformation(m={self.m.tolist()})"


# =============================================================================
# Constructors
# =============================================================================


def translation(vec: Vec) -> Transformation:
    """Return a translation by ``vec``."""
    m = np.identity(4)
    m[:3, 3] = (vec.x, vec.y, vec.z)
    invm = np.identity(4)
    invm[:3, 3] = (-vec.x, -vec.y, -vec.z)
    return Transformation(m, invm)


def scaling(vec: Vec) -> Transformation:
    """Return a scaling along the three axes.

    Negative factors are allowed (they produce reflections).

    Raises:
        ValueError: If any factor is zero.
    """
    if vec.x == 0.0 or vec.y == 0.0 or vec.z == 0.0:
        raise ValueError(f"Scaling factors must be non-zero, got {vec}")
    m = np.diag([vec.x, vec.y, vec.z, 1.0])
    invm = np.diag([1.0 / vec.x, 1.0 / vec.y, 1.0 / vec.z, 1.0])
    return Transformation(m, invm)


def _cos_sin(angle_or_cos: float, sin: float | None) -> tuple[float, float]:
    if sin is None:
        theta = math.radians(angle_or_cos)
        return math.cos(theta), math.sin(theta)
    if not are_close(angle_or_cos * angle_or_cos + sin * sin, 1.0):
        raise ValueError(
            f"cos^2 + sin^2 must be 1, got cos={angle_or_cos}, sin={sin}"
        )
    return angle_or_cos, sin


def _rotation(linear: list[list[float]]) -> Transformation:
    m = np.identity(4)
    m[:3, :3] = linear
    # Rotations are orthogonal: the inverse is the transpose
    invm = m.T.copy()
    return Transformation(m, invm)


def rotation_x(angle_or_cos: float, sin: float | None = None) -> Transformation:
    """Return a counter-clockwise rotation around the x axis.

    Args:
        angle_or_cos: The angle in degrees, or its cosine if ``sin`` is given.
        sin: Optional sine of the angle. Passing the cosine/sine pair avoids
            a round trip through ``acos`` when they come from a direction.

    Raises:
        ValueError: If a cosine/sine pair does not lie on the unit circle.
    """
    c, s = _cos_sin(angle_or_cos, sin)
    return _rotation([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rotation_y(angle_or_cos: float, sin: float | None = None) -> Transformation:
    """Return a counter-clockwise rotation around the y axis.

    See ``rotation_x`` for the meaning of the arguments.
    """
    c, s = _cos_sin(angle_or_cos, sin)
    return _rotation([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_z(angle_or_cos: float, sin: float | None = None) -> Transformation:
    """Return a counter-clockwise rotation around the z axis.

    See ``rotation_x`` for the meaning of the arguments.
    """
    c, s = _cos_sin(angle_or_cos, sin)
    return _rotation([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def rotation_xyz(
    x_angle: float = 0.0, y_angle: float = 0.0, z_angle: float = 0.0
) -> Transformation:
    """Return the rotation about x, then y, then z, all angles in degrees.

    Angles that are whole multiples of 360 are skipped.
    """
    rotation = Transformation()
    if x_angle % 360 != 0:
        rotation = rotation_x(x_angle) * rotation
    if y_angle % 360 != 0:
        rotation = rotation_y(y_angle) * rotation
    if z_angle % 360 != 0:
        rotation = rotation_z(z_angle) * rotation
    return rotation
