"""Tone mapping pipeline and Matplotlib preview for rendered images.

Rendered images hold unbounded linear radiance. Before they can be shown or
stored as 8-bit files they go through:

    1. Normalization: scale by factor / average luminosity
    2. Clamping: x / (1 + x) on every channel
    3. Gamma correction: x ** (1 / gamma)

Example:
    >>> from raykernel.image.pfm import read_pfm_file
    >>> from raykernel.preview.display import show_preview
    >>>
    >>> image = read_pfm_file("output.pfm")
    >>> show_preview(image, factor=0.2, gamma=2.2)
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

from raykernel.image.hdr import HdrImage

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "luminosity"]

# Default exposure target for luminosity tone mapping
DEFAULT_FACTOR = 0.2


def tone_map(
    image: HdrImage,
    factor: float = DEFAULT_FACTOR,
    luminosity: float | None = None,
) -> HdrImage:
    """Normalize and clamp ``image`` in place.

    Args:
        image: Image holding linear radiance.
        factor: Exposure target, 0.2 to 0.5 gives well-exposed images.
        luminosity: Reference luminosity; defaults to the image average.

    Returns:
        The same image, now with every channel in [0, 1).

    Raises:
        ValueError: If factor is not positive.
    """
    if factor <= 0.0:
        raise ValueError(f"Tone mapping factor must be positive, got {factor}")
    image.normalize(factor, luminosity)
    image.clamp()
    return image


def apply_gamma(
    pixels: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        pixels: Image array of shape (H, W, 3) in [0, 1] range.
        gamma: Display gamma; 1.0 leaves the values unchanged.

    Returns:
        Gamma corrected array.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return pixels

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    pixels = np.clip(pixels, 0.0, 1.0)
    return np.power(pixels, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: HdrImage,
    tone_map_method: ToneMapMethod = "luminosity",
    factor: float = DEFAULT_FACTOR,
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Run the display pipeline on a copy of ``image``.

    Args:
        image: Image holding linear radiance. It is not modified.
        tone_map_method: "luminosity" to normalize and clamp, "none" to
            only clip to [0, 1].
        factor: Exposure target for luminosity tone mapping.
        gamma: Display gamma.

    Returns:
        Array of shape (H, W, 3) ready for display, in [0, 1] range.
    """
    work = image.copy()
    if tone_map_method == "luminosity":
        tone_map(work, factor)
    elif tone_map_method != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map_method}")

    result = apply_gamma(work.pixels, gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)


def show_preview(
    image: HdrImage,
    *,
    tone_map_method: ToneMapMethod = "luminosity",
    factor: float = DEFAULT_FACTOR,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a tone-mapped copy of ``image`` as a Matplotlib figure.

    Args:
        image: The rendered image.
        tone_map_method: See process_image_for_display.
        factor: Exposure target for luminosity tone mapping.
        gamma: Display gamma.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(
        image, tone_map_method=tone_map_method, factor=factor, gamma=gamma
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"{image.width}x{image.height}")

    plt.tight_layout()
    plt.show(block=block)
