"""Geometry module for shape primitives.

Components:
    base: Shape interface, HitRecord, BoundingBox and shared helpers
    sphere: Unit sphere
    plane: The z = 0 plane
    box: Axis-aligned unit cube
    cylinder: Open cylinder shell and solid capped cylinder
    hits: The same intersection routines as Taichi functions

Every shape is defined in its own object space and placed in the world by
a Transformation; rays are mapped into object space before intersecting.
"""

from .base import BoundingBox, HitRecord, Shape
from .box import AxisAlignedBox
from .cylinder import Cylinder, CylinderShell
from .plane import Plane
from .sphere import Sphere

__all__ = [
    "Shape",
    "HitRecord",
    "BoundingBox",
    "Sphere",
    "Plane",
    "AxisAlignedBox",
    "CylinderShell",
    "Cylinder",
]
