"""BRDF interface shared by all reflectance models."""

from __future__ import annotations

from abc import ABC, abstractmethod

from raykernel.core.color import Color
from raykernel.core.geometry import Normal, Point, Vec, Vec2d
from raykernel.core.pcg import PCG
from raykernel.core.ray import Ray
from raykernel.materials.pigment import Pigment, UniformPigment

# Lower bound of the parameter of scattered rays, keeps them from hitting
# the surface they leave
SCATTER_T_MIN = 1e-3


class BRDF(ABC):
    """Bidirectional reflectance distribution function.

    Attributes:
        pigment: Base color of the surface.
    """

    def __init__(self, pigment: Pigment | None = None) -> None:
        self.pigment = pigment if pigment is not None else UniformPigment()

    @abstractmethod
    def eval(self, normal: Normal, in_dir: Vec, out_dir: Vec, uv: Vec2d) -> Color:
        """Return the reflected radiance density for a pair of directions.

        Args:
            normal: Surface normal at the interaction point.
            in_dir: Direction of the incoming light.
            out_dir: Direction of the outgoing light.
            uv: Surface coordinate of the interaction point.
        """

    @abstractmethod
    def scatter_ray(
        self,
        pcg: PCG,
        incoming_dir: Vec,
        interaction_point: Point,
        normal: Normal,
        depth: int,
    ) -> Ray:
        """Sample an outgoing ray according to the BRDF.

        Args:
            pcg: Random generator used for sampling.
            incoming_dir: Direction of the ray that hit the surface.
            interaction_point: World-space hit point, origin of the new ray.
            normal: Surface normal, oriented against ``incoming_dir``.
            depth: Depth of the new ray.
        """
