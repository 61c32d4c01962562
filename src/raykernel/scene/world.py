"""World: the collection of shapes a scene is made of.

Queries are answered by a linear scan over all shapes, in insertion order.

Example:
    >>> from raykernel.core.geometry import Point, Vec
    >>> from raykernel.core.ray import Ray
    >>> from raykernel.core.transformations import translation
    >>> from raykernel.geometry.sphere import Sphere
    >>> world = World()
    >>> world.add_shape(Sphere(translation(Vec(2, 0, 0))))
    >>> world.ray_intersection(Ray(Point(0, 0, 0), Vec(1, 0, 0))).t
    1.0
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from raykernel.core.geometry import Point
from raykernel.core.ray import Ray
from raykernel.geometry.base import BoundingBox, HitRecord, Shape

# Fraction of the segment length left out at the observer end of a
# visibility ray
VISIBILITY_T_MIN = 1e-2


class World:
    """An insertion-ordered list of shapes.

    Attributes:
        shapes: The shapes in the scene.
    """

    def __init__(self, shapes: Iterable[Shape] = ()) -> None:
        self.shapes: list[Shape] = list(shapes)

    def add_shape(self, shape: Shape) -> None:
        """Append a shape to the world."""
        self.shapes.append(shape)

    def __len__(self) -> int:
        return len(self.shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.shapes)

    def ray_intersection(self, ray: Ray) -> HitRecord | None:
        """Return the hit with the smallest t over all shapes, or None."""
        closest: HitRecord | None = None
        for shape in self.shapes:
            hit = shape.ray_intersection(ray)
            if hit is not None and (closest is None or hit.t < closest.t):
                closest = hit
        return closest

    def quick_ray_intersection(self, ray: Ray) -> bool:
        """Return True as soon as any shape intersects ``ray``."""
        return any(shape.quick_ray_intersection(ray) for shape in self.shapes)

    def is_point_visible(self, point: Point, observer_pos: Point) -> bool:
        """Check that no shape lies on the segment from ``observer_pos`` to ``point``.

        The shadow ray spans the segment with t in (epsilon, 1), where
        epsilon is a small fraction of the segment length, so that surfaces
        touching either endpoint do not count as occluders.
        """
        direction = point - observer_pos
        distance = direction.norm()
        if distance == 0.0:
            return True
        ray = Ray(
            origin=observer_pos,
            dir=direction,
            t_min=VISIBILITY_T_MIN / distance,
            t_max=1.0,
        )
        return not self.quick_ray_intersection(ray)

    def bounding_box(self) -> BoundingBox | None:
        """Return the box enclosing every bounded shape, or None if there is none."""
        result: BoundingBox | None = None
        for shape in self.shapes:
            box = shape.world_bounding_box()
            if box is None:
                continue
            result = box if result is None else result.union(box)
        return result

    def __repr__(self) -> str:
        return f"World(shapes={len(self.shapes)})"
