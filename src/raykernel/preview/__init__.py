"""Preview module for output and visualization.

Components:
    display: Tone mapping pipeline and Matplotlib preview
    export: PNG export utilities

Example:
    >>> from raykernel.preview import save_png, tone_map
    >>> tone_map(image, factor=0.2)
    >>> save_png(image, "output.png", gamma=2.2)
"""

from .display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_preview,
    tone_map,
)
from .export import image_to_uint8, save_png

__all__ = [
    # Display functions
    "show_preview",
    # Tone mapping
    "tone_map",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "image_to_uint8",
]
