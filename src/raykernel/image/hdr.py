"""High dynamic range pixel buffer.

HdrImage stores linear RGB radiance as a float32 NumPy array of shape
(height, width, 3), row 0 at the top. Per-pixel access goes through
get_pixel/set_pixel with (col, row) coordinates; whole-image tone mapping
steps (average luminosity, normalization, clamping) run as Taichi kernels
directly on the NumPy buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.core.color import Color
    >>> image = HdrImage(2, 1)
    >>> image.set_pixel(0, 0, Color(5.0, 10.0, 15.0))
    >>> image.set_pixel(1, 0, Color(500.0, 1000.0, 1500.0))
    >>> round(image.average_luminosity(delta=0.0))
    100
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from raykernel.core.color import Color

# Added to every luminosity before taking its logarithm, keeps black
# pixels from sending the average to zero
DEFAULT_LUMINOSITY_DELTA = 1e-10


# =============================================================================
# Taichi Kernels
# =============================================================================


@ti.kernel
def _sum_log10_luminosity(
    pixels: ti.types.ndarray(dtype=ti.f32, ndim=3), delta: ti.f32
) -> ti.f32:
    """Sum log10(delta + (max + min) / 2) over all pixels."""
    total = 0.0
    for row, col in ti.ndrange(pixels.shape[0], pixels.shape[1]):
        r = pixels[row, col, 0]
        g = pixels[row, col, 1]
        b = pixels[row, col, 2]
        lum = (ti.max(r, ti.max(g, b)) + ti.min(r, ti.min(g, b))) * 0.5
        total += ti.log(delta + lum) / ti.log(10.0)
    return total


@ti.kernel
def _scale_pixels(pixels: ti.types.ndarray(dtype=ti.f32, ndim=3), factor: ti.f32):
    """Multiply every channel by ``factor`` in place."""
    for row, col, channel in ti.ndrange(pixels.shape[0], pixels.shape[1], 3):
        pixels[row, col, channel] *= factor


@ti.kernel
def _clamp_pixels(pixels: ti.types.ndarray(dtype=ti.f32, ndim=3)):
    """Map every channel x to x / (1 + x) in place."""
    for row, col, channel in ti.ndrange(pixels.shape[0], pixels.shape[1], 3):
        x = pixels[row, col, channel]
        pixels[row, col, channel] = x / (1.0 + x)


# =============================================================================
# HdrImage
# =============================================================================


class HdrImage:
    """A width x height grid of linear RGB colors.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        pixels: Float32 array of shape (height, width, 3).
    """

    def __init__(self, width: int, height: int) -> None:
        """Create a black image.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {width}x{height}"
            )
        self.width = width
        self.height = height
        self.pixels: npt.NDArray[np.float32] = np.zeros(
            (height, width, 3), dtype=np.float32
        )

    @classmethod
    def from_array(cls, array: npt.ArrayLike) -> "HdrImage":
        """Wrap a copy of an (height, width, 3) array.

        Raises:
            ValueError: If the array does not have three channels.
        """
        data = np.ascontiguousarray(array, dtype=np.float32)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (H, W, 3), got {data.shape}")
        image = cls(data.shape[1], data.shape[0])
        image.pixels[...] = data
        return image

    def valid_coordinates(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def pixel_offset(self, col: int, row: int) -> int:
        """Return the index of (col, row) in row-major order."""
        return row * self.width + col

    def _check_coordinates(self, col: int, row: int) -> None:
        if not self.valid_coordinates(col, row):
            raise ValueError(
                f"Pixel ({col}, {row}) is outside a {self.width}x{self.height} image"
            )

    def get_pixel(self, col: int, row: int) -> Color:
        self._check_coordinates(col, row)
        r, g, b = self.pixels[row, col].tolist()
        return Color(r, g, b)

    def set_pixel(self, col: int, row: int, color: Color) -> None:
        self._check_coordinates(col, row)
        self.pixels[row, col] = (color.r, color.g, color.b)

    # -------------------------------------------------------------------------
    # Tone mapping
    # -------------------------------------------------------------------------

    def average_luminosity(self, delta: float = DEFAULT_LUMINOSITY_DELTA) -> float:
        """Return the logarithmic mean of the pixel luminosities.

        Args:
            delta: Added to each luminosity before the logarithm.

        Returns:
            10 ** mean(log10(delta + luminosity)).
        """
        total = _sum_log10_luminosity(self.pixels, delta)
        return float(10.0 ** (total / (self.width * self.height)))

    def normalize(self, factor: float, luminosity: float | None = None) -> None:
        """Scale all pixels by ``factor / luminosity`` in place.

        Args:
            factor: Target exposure; 0.2 to 0.5 gives well-exposed images.
            luminosity: Reference luminosity. Defaults to the average
                luminosity of the image.
        """
        if luminosity is None:
            luminosity = self.average_luminosity()
        _scale_pixels(self.pixels, factor / luminosity)

    def clamp(self) -> None:
        """Compress all channels into [0, 1) with x / (1 + x), in place."""
        _clamp_pixels(self.pixels)

    def copy(self) -> "HdrImage":
        return HdrImage.from_array(self.pixels)

    def __repr__(self) -> str:
        return f"HdrImage(width={self.width}, height={self.height})"
