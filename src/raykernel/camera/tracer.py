"""Image tracer: fires camera rays through every pixel of an image.

The tracer maps pixel (col, row) of the image to the screen coordinate

    u = (col + u_pixel) / width
    v = 1 - (row + v_pixel) / height

where (u_pixel, v_pixel) in [0, 1]^2 is the position inside the pixel
(0.5, 0.5 is the center). With ``samples_per_side`` n > 0 each pixel is
split into an n x n grid, one jittered ray is fired through each cell, and
the pixel gets the average of the n^2 colors (stratified sampling).

Rendering is row by row and can report progress through a callback or be
consumed as a generator.

Example:
    >>> from raykernel.camera.perspective import PerspectiveCamera
    >>> from raykernel.image.hdr import HdrImage
    >>> image = HdrImage(640, 480)
    >>> tracer = ImageTracer(image, PerspectiveCamera(aspect_ratio=640 / 480))
    >>> tracer.fire_all_rays(renderer, callback=lambda done, total: None)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator

from raykernel.camera.base import Camera
from raykernel.core.color import BLACK, Color
from raykernel.core.pcg import PCG
from raykernel.core.ray import Ray
from raykernel.image.hdr import HdrImage

logger = logging.getLogger(__name__)

# Maps a ray to the radiance it carries back (any renderer)
RayFunction = Callable[[Ray], Color]

# Callback receives (completed_rows, total_rows)
ProgressCallback = Callable[[int, int], None]


class ImageTracer:
    """Fill an HdrImage by asking a renderer for the color of camera rays.

    Attributes:
        image: The pixel buffer being written.
        camera: The camera generating the rays.
        samples_per_side: Sub-pixel grid size for anti-aliasing (0 disables it).
        pcg: Random generator used to jitter sub-pixel samples.
    """

    def __init__(
        self,
        image: HdrImage,
        camera: Camera,
        samples_per_side: int = 0,
        pcg: PCG | None = None,
    ) -> None:
        """Initialize the tracer.

        Raises:
            ValueError: If samples_per_side is negative.
        """
        if samples_per_side < 0:
            raise ValueError(
                f"samples_per_side must be non-negative, got {samples_per_side}"
            )
        self.image = image
        self.camera = camera
        self.samples_per_side = samples_per_side
        self.pcg = pcg if pcg is not None else PCG()

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def fire_ray(
        self,
        col: int,
        row: int,
        u_pixel: float = 0.5,
        v_pixel: float = 0.5,
    ) -> Ray:
        """Return the camera ray through a point of pixel (col, row).

        Args:
            col: Pixel column, 0 is the left edge.
            row: Pixel row, 0 is the top edge.
            u_pixel: Horizontal position inside the pixel, in [0, 1].
            v_pixel: Vertical position inside the pixel, in [0, 1].
        """
        u = (col + u_pixel) / self.image.width
        v = 1.0 - (row + v_pixel) / self.image.height
        return self.camera.fire_ray(u, v)

    def pixel_color(self, col: int, row: int, func: RayFunction) -> Color:
        """Compute the (possibly supersampled) color of one pixel."""
        n = self.samples_per_side
        if n == 0:
            return func(self.fire_ray(col, row))

        cum_color = BLACK
        for inter_row in range(n):
            for inter_col in range(n):
                u_pixel = (inter_col + self.pcg.random_float()) / n
                v_pixel = (inter_row + self.pcg.random_float()) / n
                cum_color = cum_color + func(self.fire_ray(col, row, u_pixel, v_pixel))
        return cum_color * (1.0 / (n * n))

    def render_rows(self, func: RayFunction) -> Generator[tuple[int, int], None, None]:
        """Render the image row by row, yielding progress after each row.

        Yields:
            Tuple of (completed_rows, total_rows).

        Example:
            >>> for done, total in tracer.render_rows(renderer):
            ...     print(f"Progress: {done}/{total} rows")
        """
        total_rows = self.image.height
        for row in range(total_rows):
            for col in range(self.image.width):
                self.image.set_pixel(col, row, self.pixel_color(col, row, func))
            logger.debug("Traced row %d/%d", row + 1, total_rows)
            yield (row + 1, total_rows)

    def fire_all_rays(
        self,
        func: RayFunction,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Compute the color of every pixel and store it in the image.

        Every pixel is written exactly once.

        Args:
            func: Maps a ray to a color, typically a renderer.
            callback: Optional function called after each row with
                (completed_rows, total_rows).
        """
        for done, total in self.render_rows(func):
            if callback is not None:
                callback(done, total)

    def __repr__(self) -> str:
        return (
            f"ImageTracer(width={self.width}, height={self.height}, "
            f"samples_per_side={self.samples_per_side})"
        )
