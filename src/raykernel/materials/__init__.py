"""Materials module for surface appearance.

Components:
    pigment: Surface color as a function of (u, v)
    brdf: BRDF interface
    lambertian: Ideal diffuse BRDF
    metal: Ideal mirror BRDF
    material: BRDF plus emitted radiance
"""

from .brdf import BRDF
from .lambertian import DiffuseBRDF
from .material import Material
from .metal import SpecularBRDF
from .pigment import CheckeredPigment, ImagePigment, Pigment, UniformPigment

__all__ = [
    "Pigment",
    "UniformPigment",
    "CheckeredPigment",
    "ImagePigment",
    "BRDF",
    "DiffuseBRDF",
    "SpecularBRDF",
    "Material",
]
