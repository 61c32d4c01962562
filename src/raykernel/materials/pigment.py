"""Pigments: functions from a surface coordinate to a color.

A pigment only describes the base color of a surface; how that color
interacts with light is up to the BRDF that owns it.

Example:
    >>> from raykernel.core.color import Color
    >>> from raykernel.core.geometry import Vec2d
    >>> checks = CheckeredPigment(Color(1, 1, 1), Color(0, 0, 0), num_of_steps=2)
    >>> checks.get_color(Vec2d(0.75, 0.25))
    Color(r=0, g=0, b=0)
"""

import math
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raykernel.core.color import BLACK, WHITE, Color
from raykernel.core.geometry import Vec2d

if TYPE_CHECKING:
    from raykernel.image.hdr import HdrImage


class Pigment(ABC):
    """Base class of all pigments."""

    @abstractmethod
    def get_color(self, uv: Vec2d) -> Color:
        """Return the color at surface coordinate ``uv``."""


class UniformPigment(Pigment):
    """A pigment with the same color everywhere."""

    def __init__(self, color: Color = WHITE) -> None:
        self.color = color

    def get_color(self, uv: Vec2d) -> Color:
        return self.color

    def __repr__(self) -> str:
        return f"UniformPigment(color={self.color!r})"


class CheckeredPigment(Pigment):
    """A checkerboard over [0, 1)^2 alternating two colors.

    Attributes:
        color1: Color of the cell containing the origin.
        color2: The other color.
        num_of_steps: Number of cells along each side.
    """

    def __init__(
        self,
        color1: Color = WHITE,
        color2: Color = BLACK,
        num_of_steps: int = 10,
    ) -> None:
        if num_of_steps <= 0:
            raise ValueError(
                f"Checkered pigment needs a positive number of steps, got {num_of_steps}"
            )
        self.color1 = color1
        self.color2 = color2
        self.num_of_steps = num_of_steps

    def get_color(self, uv: Vec2d) -> Color:
        int_u = math.floor(uv.u * self.num_of_steps)
        int_v = math.floor(uv.v * self.num_of_steps)
        return self.color1 if (int_u % 2) == (int_v % 2) else self.color2

    def __repr__(self) -> str:
        return (
            f"CheckeredPigment(color1={self.color1!r}, color2={self.color2!r}, "
            f"num_of_steps={self.num_of_steps})"
        )


class ImagePigment(Pigment):
    """A pigment sampling the nearest pixel of an HDR image.

    u runs left to right across the image columns and v top to bottom
    across the rows; coordinates on the far edges are clamped to the last
    column or row.
    """

    def __init__(self, image: "HdrImage") -> None:
        self.image = image

    def get_color(self, uv: Vec2d) -> Color:
        col = min(int(uv.u * self.image.width), self.image.width - 1)
        row = min(int(uv.v * self.image.height), self.image.height - 1)
        return self.image.get_pixel(max(col, 0), max(row, 0))

    def __repr__(self) -> str:
        return f"ImagePigment(image={self.image!r})"


# =============================================================================
# Kernel-side pigments
# =============================================================================


class PigmentKind(IntEnum):
    """Tag of a PigmentRecord, one per pigment class."""

    UNIFORM = 0
    CHECKERED = 1
    IMAGE = 2


@ti.dataclass
class PigmentRecord:
    """A pigment flattened for the rendering kernel.

    Attributes:
        kind: A PigmentKind value.
        color1: The uniform color, or the first checker color.
        color2: The second checker color.
        num_of_steps: Checker cells along each side.
        texel_offset: Index of the first texel of an image pigment in the
            shared texel field.
        width: Columns of an image pigment.
        height: Rows of an image pigment.
    """

    kind: ti.i32
    color1: tm.vec3
    color2: tm.vec3
    num_of_steps: ti.i32
    texel_offset: ti.i32
    width: ti.i32
    height: ti.i32


@ti.func
def pigment_color(pigment: PigmentRecord, texels: ti.template(), uv: tm.vec2) -> tm.vec3:
    """Return the color of ``pigment`` at ``uv``.

    Args:
        pigment: The pigment record.
        texels: Field holding the pixels of every image pigment, row-major.
        uv: Surface coordinate.
    """
    color = pigment.color1
    if pigment.kind == int(PigmentKind.CHECKERED):
        int_u = ti.cast(ti.floor(uv.x * pigment.num_of_steps), ti.i32)
        int_v = ti.cast(ti.floor(uv.y * pigment.num_of_steps), ti.i32)
        if int_u % 2 != int_v % 2:
            color = pigment.color2
    elif pigment.kind == int(PigmentKind.IMAGE):
        col = ti.max(ti.min(ti.cast(uv.x * pigment.width, ti.i32), pigment.width - 1), 0)
        row = ti.max(ti.min(ti.cast(uv.y * pigment.height, ti.i32), pigment.height - 1), 0)
        color = texels[pigment.texel_offset + row * pigment.width + col]
    return color
