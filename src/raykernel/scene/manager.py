"""Scene: a populated world together with the camera that observes it.

Scene builders (the demo factory, or any external scene description)
produce a Scene; the renderer side only needs ``scene.world`` and
``scene.get_camera()``. A scene without a camera falls back to a
perspective camera with unit screen distance and unit aspect ratio, and the
fallback is logged as a warning.

Example:
    >>> from raykernel.geometry.sphere import Sphere
    >>> scene = Scene()
    >>> scene.add_shape(Sphere())
    >>> camera = scene.get_camera()  # logs a warning, no camera was set
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from raykernel.camera.base import Camera
from raykernel.camera.perspective import PerspectiveCamera
from raykernel.geometry.base import Shape
from raykernel.scene.world import World

logger = logging.getLogger(__name__)


def default_camera() -> PerspectiveCamera:
    """Return the camera used when a scene does not define one."""
    return PerspectiveCamera(distance=1.0, aspect_ratio=1.0)


@dataclass
class Scene:
    """A world plus an optional camera.

    Attributes:
        world: The shapes of the scene.
        camera: The observer, or None to use the default camera.
    """

    world: World = field(default_factory=World)
    camera: Camera | None = None

    def add_shape(self, shape: Shape) -> None:
        self.world.add_shape(shape)

    def get_camera(self) -> Camera:
        """Return the scene camera, or the default one with a warning."""
        if self.camera is None:
            logger.warning(
                "No camera defined in the scene, using a perspective camera "
                "with distance 1 and aspect ratio 1"
            )
            return default_camera()
        return self.camera
