"""PNG export of rendered images.

The image is expected to be tone mapped already (every channel in [0, 1]);
each channel c is stored as round(255 * c ** (1 / gamma)).

Example:
    >>> from raykernel.preview.display import tone_map
    >>> from raykernel.preview.export import save_png
    >>>
    >>> tone_map(image, factor=0.2)
    >>> save_png(image, "output.png", gamma=2.2)
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raykernel.image.hdr import HdrImage

logger = logging.getLogger(__name__)


def image_to_uint8(image: HdrImage, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
    """Convert a tone-mapped image to an 8-bit (H, W, 3) array.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    pixels = np.clip(image.pixels.astype(np.float64), 0.0, 1.0)
    encoded = np.round(255.0 * np.power(pixels, 1.0 / gamma))
    return encoded.astype(np.uint8)


def save_png(image: HdrImage, path: str | Path, gamma: float = 1.0) -> Path:
    """Save ``image`` as an 8-bit RGB PNG file.

    A ".png" suffix is appended (with a warning) when missing.

    Args:
        image: Tone-mapped image.
        path: Output file path.
        gamma: Display gamma used to encode the channels.

    Returns:
        The path actually written.
    """
    path = Path(path)
    if path.suffix != ".png":
        path = path.with_name(path.name + ".png")
        logger.warning("PNG file automatically renamed to %s", path)

    pil_image = PILImage.fromarray(image_to_uint8(image, gamma))
    pil_image.save(path)
    return path
