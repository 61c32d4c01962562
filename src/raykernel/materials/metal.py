"""Specular (perfect mirror) BRDF.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the unit surface normal.
Scattering is deterministic: the random generator is not consumed.

Example:
    >>> from raykernel.core.color import Color
    >>> from raykernel.materials.pigment import UniformPigment
    >>> mirror = SpecularBRDF(UniformPigment(Color(0.6, 0.2, 0.3)))
"""

import math

import taichi as ti
import taichi.math as tm

from raykernel.core.color import BLACK, Color
from raykernel.core.geometry import Normal, Point, Vec, Vec2d
from raykernel.core.pcg import PCG
from raykernel.core.ray import Ray
from raykernel.materials.brdf import BRDF, SCATTER_T_MIN
from raykernel.materials.pigment import Pigment

# Default angular tolerance of a mirror: a tenth of a degree
DEFAULT_THRESHOLD_ANGLE_RAD = math.pi / 1800.0


def reflect(direction: Vec, normal: Normal) -> Vec:
    """Reflect ``direction`` about ``normal``, both taken as unit vectors."""
    d = direction.normalize()
    n = normal.normalize()
    return d - n.to_vec() * (2.0 * n.dot(d))


class SpecularBRDF(BRDF):
    """A perfect mirror tinted by its pigment.

    Attributes:
        pigment: The reflective color.
        threshold_angle_rad: Maximum angular mismatch, in radians, for two
            directions to count as mirror-symmetric in ``eval``.
    """

    def __init__(
        self,
        pigment: Pigment | None = None,
        threshold_angle_rad: float = DEFAULT_THRESHOLD_ANGLE_RAD,
    ) -> None:
        if threshold_angle_rad < 0.0:
            raise ValueError(
                f"Threshold angle must be non-negative, got {threshold_angle_rad}"
            )
        super().__init__(pigment)
        self.threshold_angle_rad = threshold_angle_rad

    def eval(self, normal: Normal, in_dir: Vec, out_dir: Vec, uv: Vec2d) -> Color:
        """Return the pigment color for mirror-symmetric directions, black otherwise.

        ``out_dir`` is compared with ``in_dir`` mirrored about the normal,
        2(n . d)n - d, and the pair counts as symmetric when the angle
        between the two is below ``threshold_angle_rad``.
        """
        n = normal.normalize().to_vec()
        d = in_dir.normalize()
        mirrored = n * (2.0 * n.dot(d)) - d
        cos_angle = mirrored.dot(out_dir.normalize())
        angle = math.acos(max(-1.0, min(1.0, cos_angle)))

        if angle < self.threshold_angle_rad:
            return self.pigment.get_color(uv)
        return BLACK

    def scatter_ray(
        self,
        pcg: PCG,
        incoming_dir: Vec,
        interaction_point: Point,
        normal: Normal,
        depth: int,
    ) -> Ray:
        return Ray(
            origin=interaction_point,
            dir=reflect(incoming_dir, normal),
            t_min=SCATTER_T_MIN,
            depth=depth,
        )

    def __repr__(self) -> str:
        return (
            f"SpecularBRDF(pigment={self.pigment!r}, "
            f"threshold_angle_rad={self.threshold_angle_rad})"
        )


@ti.func
def scatter_specular(incoming: tm.vec3, normal: tm.vec3) -> tm.vec3:
    """Kernel-side ``SpecularBRDF.scatter_ray`` direction."""
    d = tm.normalize(incoming)
    n = tm.normalize(normal)
    return d - 2.0 * tm.dot(n, d) * n
