"""Kernel-side ray intersection with the unit shapes.

Each ``hit_*`` function intersects a ray already moved to object space
with one canonical shape and returns a ShapeHit in object space:

    hit_sphere: unit sphere centered at the origin
    hit_plane: the xy plane
    hit_box: the unit cube [0, 1]^3
    hit_cylinder_shell: lateral surface of the unit cylinder, z in [0, 1]
    hit_cylinder: the unit cylinder with both caps

The algorithms, tolerances and surface coordinates are those of the
Python shapes in this package, written as Taichi functions so that the
rendering kernel can dispatch on the shape kind without leaving Taichi.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.geometry.hits import hit_sphere
    >>> # Inside a kernel:
    >>> # rec = hit_sphere(origin, direction, 1e-5, tm.inf)
"""

import taichi as ti
import taichi.math as tm

from raykernel.core.vector import KERNEL_EPSILON, is_near, vec2, vec3

# Tolerance for snapping coordinates onto face boundaries, the same as
# ``geometry.base.BOUNDARY_TOLERANCE``
BOUNDARY_TOLERANCE = 1e-4


@ti.dataclass
class ShapeHit:
    """Object-space result of intersecting a ray with one shape.

    Attributes:
        hit: 1 if the ray hit the shape, 0 otherwise.
        t: Ray parameter of the hit. Only valid if hit == 1.
        normal: Object-space normal, oriented against the ray.
        uv: Surface coordinate in [0, 1]^2.
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3
    uv: vec2


@ti.func
def _miss() -> ShapeHit:
    return ShapeHit(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0), uv=vec2(0.0, 0.0))


# =============================================================================
# Shared helpers
# =============================================================================


@ti.func
def solve_quadratic(a: ti.f32, half_b: ti.f32, c: ti.f32):
    """Solve a*t^2 + 2*half_b*t + c = 0 with the cancellation-free formula.

    Returns:
        Tuple (valid, t0, t1) with t0 <= t1; valid is 0 for a zero ``a``
        or a non-positive discriminant.
    """
    valid = 0
    t0 = 0.0
    t1 = 0.0
    discriminant = half_b * half_b - a * c

    if a != 0.0 and discriminant > 0.0:
        valid = 1
        sqrt_d = ti.sqrt(discriminant)
        sign = ti.select(half_b < 0.0, -1.0, 1.0)
        q = -(half_b + sign * sqrt_d)
        if ti.abs(q) < 1e-12:
            t0 = (-half_b - sqrt_d) / a
            t1 = (-half_b + sqrt_d) / a
        else:
            t0 = q / a
            t1 = c / q

        if t0 > t1:
            temp = t0
            t0 = t1
            t1 = temp

    return valid, t0, t1


@ti.func
def first_root_in_range(t0: ti.f32, t1: ti.f32, t_min: ti.f32, t_max: ti.f32):
    """Pick the smaller root inside (t_min, t_max), falling back to the larger.

    Returns:
        Tuple (found, t).
    """
    found = 0
    t = 0.0
    if t_min < t0 and t0 < t_max:
        found = 1
        t = t0
    elif t_min < t1 and t1 < t_max:
        found = 1
        t = t1
    return found, t


@ti.func
def one_dim_intersections(origin: ti.f32, direction: ti.f32):
    """Return the parameter interval in which origin + t*direction is in [0, 1]."""
    t0 = -tm.inf
    t1 = tm.inf
    if is_near(direction, 0.0, KERNEL_EPSILON):
        if origin < 0.0 or origin > 1.0:
            t0 = tm.inf
            t1 = -tm.inf
    elif direction > 0.0:
        t0 = -origin / direction
        t1 = (1.0 - origin) / direction
    else:
        t0 = (1.0 - origin) / direction
        t1 = -origin / direction
    return t0, t1


@ti.func
def fix_boundary(coord: ti.f32, lower: ti.f32, upper: ti.f32) -> ti.f32:
    """Snap ``coord`` onto [lower, upper] if it lies just outside."""
    result = coord
    if lower - BOUNDARY_TOLERANCE < coord and coord < lower:
        result = lower
    elif upper < coord and coord < upper + BOUNDARY_TOLERANCE:
        result = upper
    return result


@ti.func
def wrapped_azimuth(x: ti.f32, y: ti.f32) -> ti.f32:
    """Return atan2(y, x) / 2pi wrapped into [0, 1)."""
    u = ti.atan2(y, x) / (2.0 * tm.pi)
    return ti.select(u < 0.0, u + 1.0, u)


@ti.func
def _oriented_axis_normal(axis: ti.i32, direction: ti.f32) -> vec3:
    # Unit normal along ``axis``, pointing against the ray
    sign = ti.select(direction < 0.0, 1.0, -1.0)
    return vec3(
        ti.select(axis == 0, sign, 0.0),
        ti.select(axis == 1, sign, 0.0),
        ti.select(axis == 2, sign, 0.0),
    )


# =============================================================================
# Sphere and plane
# =============================================================================


@ti.func
def hit_sphere(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> ShapeHit:
    """Intersect the unit sphere centered at the origin."""
    result = _miss()
    valid, t0, t1 = solve_quadratic(
        tm.dot(direction, direction),
        tm.dot(origin, direction),
        tm.dot(origin, origin) - 1.0,
    )
    if valid == 1:
        found, t = first_root_in_range(t0, t1, t_min, t_max)
        if found == 1:
            p = origin + t * direction
            normal = p
            if tm.dot(p, direction) >= 0.0:
                normal = -p
            uv = vec2(
                wrapped_azimuth(p.x, p.y),
                ti.acos(fix_boundary(p.z, -1.0, 1.0)) / tm.pi,
            )
            result = ShapeHit(hit=1, t=t, normal=normal, uv=uv)
    return result


@ti.func
def hit_plane(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> ShapeHit:
    """Intersect the xy plane; parallel rays never hit it."""
    result = _miss()
    if not is_near(direction.z, 0.0, KERNEL_EPSILON):
        t = -origin.z / direction.z
        if t_min < t and t < t_max:
            p = origin + t * direction
            uv = vec2(p.x - ti.floor(p.x), p.y - ti.floor(p.y))
            result = ShapeHit(hit=1, t=t, normal=_oriented_axis_normal(2, direction.z), uv=uv)
    return result


# =============================================================================
# Box
# =============================================================================


@ti.func
def _on_face(coord: ti.f32) -> ti.i32:
    return is_near(coord, 0.0, BOUNDARY_TOLERANCE) or is_near(coord, 1.0, BOUNDARY_TOLERANCE)


@ti.func
def box_uv(p: vec3) -> vec2:
    """Surface coordinate of a point of the unit cube, unfolded as a cross."""
    u = 0.0
    v = 0.0
    if is_near(p.x, 0.0, BOUNDARY_TOLERANCE):
        u = (1.0 + p.y) / 3.0
        v = (2.0 + p.z) / 4.0
    elif is_near(p.x, 1.0, BOUNDARY_TOLERANCE):
        u = (1.0 + p.y) / 3.0
        v = (1.0 - p.z) / 4.0
    elif is_near(p.y, 0.0, BOUNDARY_TOLERANCE):
        u = (1.0 - p.x) / 3.0
        v = (2.0 + p.z) / 4.0
    elif is_near(p.y, 1.0, BOUNDARY_TOLERANCE):
        u = (2.0 + p.x) / 3.0
        v = (2.0 + p.z) / 4.0
    elif is_near(p.z, 0.0, BOUNDARY_TOLERANCE):
        u = (1.0 + p.y) / 3.0
        v = (2.0 - p.x) / 4.0
    else:
        u = (1.0 + p.y) / 3.0
        v = (3.0 + p.x) / 4.0
    return vec2(fix_boundary(u, 0.0, 1.0), fix_boundary(v, 0.0, 1.0))


@ti.func
def hit_box(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> ShapeHit:
    """Intersect the unit cube with the slab method."""
    result = _miss()
    tx0, tx1 = one_dim_intersections(origin.x, direction.x)
    ty0, ty1 = one_dim_intersections(origin.y, direction.y)
    tz0, tz1 = one_dim_intersections(origin.z, direction.z)
    t_enter = ti.max(tx0, ti.max(ty0, tz0))
    t_exit = ti.min(tx1, ti.min(ty1, tz1))

    if t_enter <= t_exit:
        found, t = first_root_in_range(t_enter, t_exit, t_min, t_max)
        if found == 1:
            p = origin + t * direction
            normal = vec3(0.0, 0.0, 0.0)
            if _on_face(p.x):
                normal = _oriented_axis_normal(0, direction.x)
            elif _on_face(p.y):
                normal = _oriented_axis_normal(1, direction.y)
            else:
                normal = _oriented_axis_normal(2, direction.z)
            result = ShapeHit(hit=1, t=t, normal=normal, uv=box_uv(p))
    return result


# =============================================================================
# Cylinders
# =============================================================================


@ti.func
def shell_intersections(origin: vec3, direction: vec3):
    """Return the parameter interval inside the infinite unit cylinder.

    The interval is empty (+inf, -inf) if the ray never enters it.
    """
    t0 = tm.inf
    t1 = -tm.inf
    c = origin.x * origin.x + origin.y * origin.y - 1.0
    if is_near(direction.x, 0.0, KERNEL_EPSILON) and is_near(direction.y, 0.0, KERNEL_EPSILON):
        if c <= 0.0:
            t0 = -tm.inf
            t1 = tm.inf
    else:
        valid, r0, r1 = solve_quadratic(
            direction.x * direction.x + direction.y * direction.y,
            origin.x * direction.x + origin.y * direction.y,
            c,
        )
        if valid == 1:
            t0 = r0
            t1 = r1
    return t0, t1


@ti.func
def _lateral_normal(p: vec3, direction: vec3) -> vec3:
    normal = vec3(p.x, p.y, 0.0)
    if p.x * direction.x + p.y * direction.y >= 0.0:
        normal = -normal
    return normal


@ti.func
def hit_cylinder_shell(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> ShapeHit:
    """Intersect the open lateral surface of the unit cylinder."""
    result = _miss()
    s0, s1 = shell_intersections(origin, direction)
    if s0 < t_max and s1 > t_min:
        z0, z1 = one_dim_intersections(origin.z, direction.z)
        if s0 <= z1 and s1 >= z0:
            found = 0
            t = 0.0
            if s0 >= z0 and s0 > t_min:
                found = 1
                t = s0
            elif s1 <= z1 and s1 < t_max:
                found = 1
                t = s1

            if found == 1:
                p = origin + t * direction
                uv = vec2(wrapped_azimuth(p.x, p.y), fix_boundary(p.z, 0.0, 1.0))
                result = ShapeHit(hit=1, t=t, normal=_lateral_normal(p, direction), uv=uv)
    return result


@ti.func
def hit_cylinder(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> ShapeHit:
    """Intersect the unit cylinder with its caps.

    v grows with the distance from the axis on the bottom cap (v in
    [0, 1/4]), shrinks on the top cap (v in [3/4, 1]) and spans [1/4, 3/4]
    on the side.
    """
    result = _miss()
    s0, s1 = shell_intersections(origin, direction)
    z0, z1 = one_dim_intersections(origin.z, direction.z)
    t_enter = ti.max(s0, z0)
    t_exit = ti.min(s1, z1)

    if t_enter <= t_exit:
        found, t = first_root_in_range(t_enter, t_exit, t_min, t_max)
        if found == 1:
            p = origin + t * direction
            on_bottom = is_near(p.z, 0.0, KERNEL_EPSILON)
            on_top = is_near(p.z, 1.0, KERNEL_EPSILON)

            normal = vec3(0.0, 0.0, 0.0)
            if on_bottom or on_top:
                normal = _oriented_axis_normal(2, direction.z)
            else:
                normal = _lateral_normal(p, direction)

            quarter_rho = 0.25 * ti.sqrt(p.x * p.x + p.y * p.y)
            v = 0.25 + 0.5 * p.z
            if on_bottom:
                v = quarter_rho
            elif on_top:
                v = 1.0 - quarter_rho

            uv = vec2(wrapped_azimuth(p.x, p.y), v)
            result = ShapeHit(hit=1, t=t, normal=normal, uv=uv)
    return result
