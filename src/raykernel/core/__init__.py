"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    geometry: Vec, Point, Normal, Vec2d and orthonormal bases
    transformations: Invertible affine transformations
    ray: Ray data structure
    color: RGB radiance values
    pcg: Permuted congruential random number generator
    integrator: Renderers (on/off, flat, path tracing)
    vector: Taichi vector helpers used inside kernels
    kernel_tracer: The rendering kernel over the pixels of an image
"""

from .color import BLACK, WHITE, Color
from .geometry import (
    EPSILON,
    VEC_X,
    VEC_Y,
    VEC_Z,
    Normal,
    Point,
    Vec,
    Vec2d,
    are_close,
    create_onb_from_z,
)
from .pcg import PCG
from .ray import Ray
from .transformations import (
    Transformation,
    rotation_x,
    rotation_xyz,
    rotation_y,
    rotation_z,
    scaling,
    translation,
)

# Note: integrator is NOT imported here to avoid circular imports, it depends
# on raykernel.scene. Import it directly:
#   from raykernel.core.integrator import PathTracer

__all__ = [
    "EPSILON",
    "are_close",
    "Vec",
    "Point",
    "Normal",
    "Vec2d",
    "VEC_X",
    "VEC_Y",
    "VEC_Z",
    "create_onb_from_z",
    "Transformation",
    "translation",
    "scaling",
    "rotation_x",
    "rotation_y",
    "rotation_z",
    "rotation_xyz",
    "Ray",
    "Color",
    "BLACK",
    "WHITE",
    "PCG",
]
