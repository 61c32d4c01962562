"""Taichi vector algebra used inside the rendering kernels.

The object-level classes of ``core.geometry`` describe scenes; once a scene
is compiled for rendering, points, directions and normals become plain
``taichi.math`` vectors and the 4x4 matrices of each ``Transformation``
become ``mat4`` values. The helpers here apply those matrices with the same
conventions as ``Transformation``:

    points: full affine matrix, divided by the homogeneous weight
    directions: linear part only
    normals: transpose of the inverse linear part

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.core.vector import transform_point, vec3
    >>> # Inside a kernel:
    >>> # world_point = transform_point(to_world, vec3(0.0, 0.0, 1.0))
"""

import taichi as ti
import taichi.math as tm

# Type aliases for kernel-side vectors and matrices
vec2 = tm.vec2
vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4

# Tolerance of approximate comparisons, the same as ``core.geometry.EPSILON``
KERNEL_EPSILON = 1e-5


@ti.func
def is_near(a: ti.f32, b: ti.f32, epsilon: ti.f32) -> ti.i32:
    """Return 1 if ``a`` and ``b`` differ by less than ``epsilon``."""
    return ti.select(ti.abs(a - b) < epsilon, 1, 0)


@ti.func
def transform_point(m: mat4, p: vec3) -> vec3:
    """Apply the affine matrix ``m`` to the point ``p``."""
    h = m @ vec4(p.x, p.y, p.z, 1.0)
    return vec3(h.x, h.y, h.z) / h.w


@ti.func
def transform_direction(m: mat4, d: vec3) -> vec3:
    """Apply the linear part of ``m`` to the direction ``d``."""
    return vec3(
        m[0, 0] * d.x + m[0, 1] * d.y + m[0, 2] * d.z,
        m[1, 0] * d.x + m[1, 1] * d.y + m[1, 2] * d.z,
        m[2, 0] * d.x + m[2, 1] * d.y + m[2, 2] * d.z,
    )


@ti.func
def transform_normal(inverse: mat4, n: vec3) -> vec3:
    """Map the normal ``n`` with the transpose of ``inverse``'s linear part.

    ``inverse`` is the matrix taking world space to object space, so the
    result is the world-space normal of an object-space normal.
    """
    return vec3(
        inverse[0, 0] * n.x + inverse[1, 0] * n.y + inverse[2, 0] * n.z,
        inverse[0, 1] * n.x + inverse[1, 1] * n.y + inverse[2, 1] * n.z,
        inverse[0, 2] * n.x + inverse[1, 2] * n.y + inverse[2, 2] * n.z,
    )


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis whose third axis is ``normal``.

    Branchless construction of Duff et al. (2017), matching
    ``core.geometry.create_onb_from_z``.

    Returns:
        Tuple (e1, e2, e3) of mutually perpendicular unit vectors.
    """
    n = tm.normalize(normal)
    sign = ti.select(n.z > 0.0, 1.0, -1.0)
    a = -1.0 / (sign + n.z)
    b = n.x * n.y * a

    e1 = vec3(1.0 + sign * n.x * n.x * a, sign * b, -sign * n.x)
    e2 = vec3(b, sign + n.y * n.y * a, -n.y)
    return e1, e2, n
