"""Material: a BRDF plus an emitted-radiance pigment."""

from dataclasses import dataclass, field
from enum import IntEnum

import taichi as ti

from raykernel.core.color import BLACK
from raykernel.materials.brdf import BRDF
from raykernel.materials.lambertian import DiffuseBRDF
from raykernel.materials.pigment import Pigment, UniformPigment


@dataclass
class Material:
    """Surface properties of a shape.

    The default is a non-emitting, fully diffuse white surface.

    Attributes:
        brdf: How the surface reflects light.
        emitted_radiance: Light emitted by the surface, as a function of the
            surface coordinate.
    """

    brdf: BRDF = field(default_factory=DiffuseBRDF)
    emitted_radiance: Pigment = field(default_factory=lambda: UniformPigment(BLACK))


# =============================================================================
# Kernel-side materials
# =============================================================================


class BrdfKind(IntEnum):
    """Tag of the BRDF of a MaterialRecord."""

    DIFFUSE = 0
    SPECULAR = 1


@ti.dataclass
class MaterialRecord:
    """A material flattened for the rendering kernel.

    Pigments are referenced by their index in the compiled pigment field.

    Attributes:
        brdf_kind: A BrdfKind value.
        brdf_pigment: Index of the BRDF pigment.
        emitted_pigment: Index of the emitted-radiance pigment.
    """

    brdf_kind: ti.i32
    brdf_pigment: ti.i32
    emitted_pigment: ti.i32
