"""Lambertian (ideal diffuse) BRDF.

The Lambertian BRDF scatters incident light uniformly in all directions:
    f_r(wi, wo) = pigment * reflectance / pi

Scattered rays are importance sampled from the cosine-weighted hemisphere,
whose density is:
    pdf(wi) = cos(theta) / pi

so that BRDF * cos(theta) / pdf reduces to the pigment color and the path
tracer only has to multiply by it.

Example:
    >>> from raykernel.core.color import Color
    >>> from raykernel.materials.pigment import UniformPigment
    >>> brdf = DiffuseBRDF(UniformPigment(Color(0.5, 0.5, 0.5)))
"""

import math

import taichi as ti
import taichi.math as tm

from raykernel.core.color import Color
from raykernel.core.geometry import Normal, Point, Vec, Vec2d, create_onb_from_z
from raykernel.core.pcg import PCG
from raykernel.core.ray import Ray
from raykernel.core.vector import build_onb_from_normal
from raykernel.materials.brdf import BRDF, SCATTER_T_MIN
from raykernel.materials.pigment import Pigment


class DiffuseBRDF(BRDF):
    """Ideal diffuse reflection.

    Attributes:
        pigment: The diffuse color.
        reflectance: Fraction of the incident light that is reflected, in [0, 1].
    """

    def __init__(self, pigment: Pigment | None = None, reflectance: float = 1.0) -> None:
        """Create a diffuse BRDF.

        Args:
            pigment: Surface color (white by default).
            reflectance: Reflected fraction of the incident light.

        Raises:
            ValueError: If reflectance is outside [0, 1].
        """
        if not 0.0 <= reflectance <= 1.0:
            raise ValueError(
                f"Reflectance {reflectance} is outside [0, 1]. "
                "Values above 1 violate energy conservation."
            )
        super().__init__(pigment)
        self.reflectance = reflectance

    def eval(self, normal: Normal, in_dir: Vec, out_dir: Vec, uv: Vec2d) -> Color:
        """Return pigment * reflectance / pi, independent of the directions."""
        return self.pigment.get_color(uv) * (self.reflectance / math.pi)

    def scatter_ray(
        self,
        pcg: PCG,
        incoming_dir: Vec,
        interaction_point: Point,
        normal: Normal,
        depth: int,
    ) -> Ray:
        """Draw a cosine-weighted direction in the hemisphere around ``normal``.

        With xi1, xi2 uniform in [0, 1): cos(theta) = sqrt(xi1),
        sin(theta) = sqrt(1 - xi1), phi = 2 pi xi2.
        """
        e1, e2, e3 = create_onb_from_z(normal)
        cos_theta_sq = pcg.random_float()
        cos_theta = math.sqrt(cos_theta_sq)
        sin_theta = math.sqrt(1.0 - cos_theta_sq)
        phi = 2.0 * math.pi * pcg.random_float()

        direction = (
            e1 * (math.cos(phi) * cos_theta)
            + e2 * (math.sin(phi) * cos_theta)
            + e3 * sin_theta
        )
        return Ray(
            origin=interaction_point,
            dir=direction,
            t_min=SCATTER_T_MIN,
            depth=depth,
        )

    def __repr__(self) -> str:
        return f"DiffuseBRDF(pigment={self.pigment!r}, reflectance={self.reflectance})"


@ti.func
def scatter_diffuse(normal: tm.vec3, xi1: ti.f32, xi2: ti.f32) -> tm.vec3:
    """Kernel-side ``DiffuseBRDF.scatter_ray`` direction.

    Args:
        normal: Surface normal at the interaction point.
        xi1: First uniform draw, sets the angle from the surface.
        xi2: Second uniform draw, sets the azimuth.
    """
    e1, e2, e3 = build_onb_from_normal(normal)
    cos_theta = ti.sqrt(xi1)
    sin_theta = ti.sqrt(1.0 - xi1)
    phi = 2.0 * tm.pi * xi2
    return e1 * (ti.cos(phi) * cos_theta) + e2 * (ti.sin(phi) * cos_theta) + e3 * sin_theta
