"""Demo scene configuration.

This module provides a factory for the built-in demonstration scene, used by
the ``raykernel demo`` command to exercise every part of the kernel:

- A huge emissive sphere acting as the sky (the only light source)
- A checkered ground plane at z = 0
- A diffuse blue sphere resting on the ground
- A mirror-like specular sphere beside it
- A tilted wooden block and an open pipe standing on the ground

The camera orbits the origin as ``angle_deg`` grows, so consecutive angles
can be rendered as frames of an animation.

Example:
    >>> from raykernel.scene.demo import DemoSceneParams, create_demo_scene
    >>> scene = create_demo_scene(DemoSceneParams(angle_deg=30.0))
    >>> len(scene.world)
    6
"""

import math
from dataclasses import dataclass

from raykernel.camera.base import Camera
from raykernel.camera.orthogonal import OrthogonalCamera
from raykernel.camera.perspective import PerspectiveCamera
from raykernel.core.color import BLACK, Color
from raykernel.core.geometry import VEC_Z, Point, Vec
from raykernel.core.transformations import (
    Transformation,
    rotation_y,
    rotation_z,
    scaling,
    translation,
)
from raykernel.geometry.box import AxisAlignedBox
from raykernel.geometry.cylinder import CylinderShell
from raykernel.geometry.plane import Plane
from raykernel.geometry.sphere import Sphere
from raykernel.materials.lambertian import DiffuseBRDF
from raykernel.materials.material import Material
from raykernel.materials.metal import SpecularBRDF
from raykernel.materials.pigment import CheckeredPigment, UniformPigment
from raykernel.scene.manager import Scene

# =============================================================================
# Demo Scene Parameters
# =============================================================================


@dataclass
class DemoSceneParams:
    """Parameters for configuring the demo scene.

    Attributes:
        angle_deg: Orbit angle of the camera, in degrees.
        aspect_ratio: Width / height of the rendered image.
        orthogonal: Use an orthogonal camera instead of a perspective one.
        sky_color: Radiance emitted by the sky sphere.

    Example:
        >>> params = DemoSceneParams(angle_deg=90.0, aspect_ratio=16 / 9)
        >>> params.orthogonal
        False
    """

    angle_deg: float = 0.0
    aspect_ratio: float = 640 / 480
    orthogonal: bool = False
    sky_color: tuple[float, float, float] = (1.0, 0.9, 0.5)


# =============================================================================
# Demo Scene Constants
# =============================================================================

SKY_RADIUS = 200.0

GROUND_COLOR_1 = Color(0.3, 0.5, 0.1)
GROUND_COLOR_2 = Color(0.1, 0.2, 0.5)
GROUND_CHECKER_STEPS = 10

DIFFUSE_SPHERE_COLOR = Color(0.3, 0.4, 0.8)
MIRROR_SPHERE_COLOR = Color(0.6, 0.2, 0.3)
MIRROR_SPHERE_POSITION = Vec(1.0, 2.5, 0.0)

BLOCK_COLOR = Color(0.82, 0.64, 0.1)
BLOCK_MIN = Point(1.5, -2.5, 0.0)
BLOCK_MAX = Point(2.5, -1.5, 0.6)
BLOCK_ANGLE_DEG = 20.0

PIPE_COLOR = Color(0.62, 0.1, 0.3)
PIPE_RADIUS = 0.3
PIPE_HEIGHT = 1.2
PIPE_POSITION = Vec(2.5, 0.8, 0.0)


# =============================================================================
# Demo Scene Factory
# =============================================================================


def demo_camera_transformation(angle_deg: float) -> Transformation:
    """Return the camera placement for a given orbit angle.

    The camera starts 1.4 units behind and above the origin, then drifts
    forward, tilts, and turns around the z axis as the angle grows.
    """
    return (
        rotation_z(30.0 - 0.25 * angle_deg)
        * rotation_y(0.015 * angle_deg)
        * translation(Vec(-1.4 + 0.75 * math.pi / 60.0 * 0.14 * angle_deg, 0.0, 1.4))
    )


def create_demo_scene(params: DemoSceneParams | None = None) -> Scene:
    """Create the demo scene with its camera.

    Args:
        params: Optional DemoSceneParams. If None, uses DemoSceneParams().

    Returns:
        A Scene holding the six demo shapes and the configured camera.
    """
    if params is None:
        params = DemoSceneParams()

    scene = Scene()

    sky_material = Material(
        brdf=DiffuseBRDF(UniformPigment(BLACK)),
        emitted_radiance=UniformPigment(Color(*params.sky_color)),
    )
    sky_transformation = translation(Vec(0.0, 0.0, 0.4)) * scaling(
        Vec(SKY_RADIUS, SKY_RADIUS, SKY_RADIUS)
    )
    scene.add_shape(Sphere(transformation=sky_transformation, material=sky_material))

    ground_material = Material(
        brdf=DiffuseBRDF(
            CheckeredPigment(GROUND_COLOR_1, GROUND_COLOR_2, GROUND_CHECKER_STEPS)
        )
    )
    scene.add_shape(Plane(material=ground_material))

    scene.add_shape(
        Sphere(
            transformation=translation(VEC_Z),
            material=Material(brdf=DiffuseBRDF(UniformPigment(DIFFUSE_SPHERE_COLOR))),
        )
    )

    scene.add_shape(
        Sphere(
            transformation=translation(MIRROR_SPHERE_POSITION),
            material=Material(brdf=SpecularBRDF(UniformPigment(MIRROR_SPHERE_COLOR))),
        )
    )

    scene.add_shape(
        AxisAlignedBox.from_corners(
            BLOCK_MIN,
            BLOCK_MAX,
            z_angle=BLOCK_ANGLE_DEG,
            material=Material(brdf=DiffuseBRDF(UniformPigment(BLOCK_COLOR))),
        )
    )

    scene.add_shape(
        CylinderShell.from_dimensions(
            PIPE_RADIUS,
            PIPE_HEIGHT,
            PIPE_POSITION,
            material=Material(brdf=DiffuseBRDF(UniformPigment(PIPE_COLOR))),
        )
    )

    transformation = demo_camera_transformation(params.angle_deg)
    camera: Camera
    if params.orthogonal:
        camera = OrthogonalCamera(params.aspect_ratio, transformation)
    else:
        camera = PerspectiveCamera(1.0, params.aspect_ratio, transformation)
    scene.camera = camera

    return scene
