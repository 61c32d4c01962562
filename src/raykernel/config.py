"""Validated settings for rendering and image conversion.

The command line fills these dataclasses; every field is checked once in
``__post_init__`` so the rendering code can trust its inputs.

Example:
    >>> settings = RenderSettings(width=320, height=240, samples_per_pixel=4)
    >>> settings.samples_per_side
    2
    >>> RenderSettings(samples_per_pixel=3)
    Traceback (most recent call last):
        ...
    raykernel.config.InvalidSettingsError: samples_per_pixel must be a perfect square, got 3
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

# Type alias for the rendering algorithms
Algorithm = Literal["path", "flat", "on-off"]

ALGORITHMS: tuple[str, ...] = ("path", "flat", "on-off")


class InvalidSettingsError(ValueError):
    """Raised when a settings field is out of its valid range."""


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise InvalidSettingsError(f"{name} must be positive, got {value}")


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise InvalidSettingsError(f"{name} must be non-negative, got {value}")


@dataclass
class RenderSettings:
    """Settings of the ``demo`` command.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        algorithm: Renderer to use ("path", "flat" or "on-off").
        angle_deg: Orbit angle of the demo camera, in degrees.
        pfm_output: Path of the HDR output.
        png_output: Path of the tone-mapped output.
        init_state: Initial state of the random generator.
        init_seq: Sequence identifier of the random generator.
        num_rays: Scattered rays per bounce (path tracer).
        max_depth: Maximum ray depth (path tracer).
        russian_roulette_limit: Depth where Russian roulette starts.
        samples_per_pixel: Rays per pixel for anti-aliasing, 0 or a
            perfect square.
        orthogonal: Use an orthogonal camera.
        factor: Tone mapping exposure target of the PNG.
        gamma: Display gamma of the PNG.
    """

    width: int = 640
    height: int = 480
    algorithm: Algorithm = "path"
    angle_deg: float = 0.0
    pfm_output: str = "output.pfm"
    png_output: str = "output.png"
    init_state: int = 45
    init_seq: int = 54
    num_rays: int = 10
    max_depth: int = 2
    russian_roulette_limit: int = 5
    samples_per_pixel: int = 0
    orthogonal: bool = False
    factor: float = 1.0
    gamma: float = 1.0

    def __post_init__(self) -> None:
        _require_positive("width", self.width)
        _require_positive("height", self.height)
        if self.algorithm not in ALGORITHMS:
            raise InvalidSettingsError(
                f"Unknown algorithm {self.algorithm!r}, expected one of {ALGORITHMS}"
            )
        _require_non_negative("init_state", self.init_state)
        _require_non_negative("init_seq", self.init_seq)
        _require_positive("num_rays", self.num_rays)
        _require_non_negative("max_depth", self.max_depth)
        _require_non_negative("russian_roulette_limit", self.russian_roulette_limit)
        _require_non_negative("samples_per_pixel", self.samples_per_pixel)
        if math.isqrt(self.samples_per_pixel) ** 2 != self.samples_per_pixel:
            raise InvalidSettingsError(
                f"samples_per_pixel must be a perfect square, got {self.samples_per_pixel}"
            )
        _require_positive("factor", self.factor)
        _require_positive("gamma", self.gamma)

    @property
    def samples_per_side(self) -> int:
        return math.isqrt(self.samples_per_pixel)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass
class ToneMapSettings:
    """Settings of the ``pfm2png`` command.

    Attributes:
        factor: Exposure target, 0.2 to 0.5 gives well-exposed images.
        gamma: Display gamma.
    """

    factor: float = 0.2
    gamma: float = 1.0

    def __post_init__(self) -> None:
        _require_positive("factor", self.factor)
        _require_positive("gamma", self.gamma)
