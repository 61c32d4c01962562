"""Ray data structure.

A ray is a half-line with a validity interval [t_min, t_max) on its
parameter and a bounce depth used to bound recursion in the path tracer.

Example:
    >>> from raykernel.core.geometry import Point, Vec
    >>> ray = Ray(origin=Point(0.0, 0.0, 0.0), dir=Vec(0.0, 0.0, -1.0))
    >>> ray.at(5.0)  # Point 5 units along the ray
    Point(x=0.0, y=0.0, z=-5.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from raykernel.core.geometry import EPSILON, Point, Vec

if TYPE_CHECKING:
    from raykernel.core.transformations import Transformation

# Default lower bound of the ray parameter, keeps secondary rays from
# hitting the surface they start on
DEFAULT_T_MIN = 1e-5


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray with an origin point and a direction vector.

    Attributes:
        origin: The starting point of the ray.
        dir: The direction of the ray. Not required to be normalized: the
            parameter t is measured in units of ``dir``.
        t_min: Lower bound of the valid parameter range.
        t_max: Upper bound of the valid parameter range.
        depth: Number of bounces that generated this ray.
    """

    origin: Point = Point()
    dir: Vec = Vec(1.0, 0.0, 0.0)
    t_min: float = DEFAULT_T_MIN
    t_max: float = math.inf
    depth: int = 0

    def at(self, t: float) -> Point:
        """Compute the point along the ray at parameter t.

        Args:
            t: The parameter value. Positive values are in front of the origin.

        Returns:
            The point origin + t * dir.
        """
        return self.origin + self.dir * t

    def is_close(self, other: Ray, epsilon: float = EPSILON) -> bool:
        """Check that origin and direction agree within ``epsilon``."""
        return self.origin.is_close(other.origin, epsilon) and self.dir.is_close(
            other.dir, epsilon
        )

    def transform(self, transformation: Transformation) -> Ray:
        """Return the ray mapped through ``transformation``.

        The parameter interval and the depth are preserved.
        """
        return Ray(
            origin=transformation.transform_point(self.origin),
            dir=transformation.transform_vec(self.dir),
            t_min=self.t_min,
            t_max=self.t_max,
            depth=self.depth,
        )
