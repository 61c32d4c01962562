"""Portable Float Map (PFM) reader and writer.

Layout of a color PFM file:

    PF\\n
    <width> <height>\\n
    <endianness>\\n
    <width * height * 3 float32 values>

A negative endianness value means little endian, a positive one big
endian. Pixel rows are stored bottom to top.

Example:
    >>> import io
    >>> from raykernel.image.hdr import HdrImage
    >>> buffer = io.BytesIO()
    >>> write_pfm(HdrImage(3, 2), buffer)
    >>> buffer.seek(0)
    0
    >>> read_pfm(buffer).width
    3
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Literal

import numpy as np

from raykernel.image.hdr import HdrImage

logger = logging.getLogger(__name__)

Endianness = Literal["little", "big"]

PFM_MAGIC = b"PF"


class InvalidPfmFileFormat(ValueError):
    """Raised when a byte stream is not a valid color PFM image."""


def _read_line(stream: BinaryIO) -> bytes:
    """Read one header line without its terminating newline."""
    line = stream.readline()
    return line[:-1] if line.endswith(b"\n") else line


def parse_img_size(line: bytes) -> tuple[int, int]:
    """Parse the "<width> <height>" header line.

    Raises:
        InvalidPfmFileFormat: If the line is empty, does not hold exactly two
            integers, or either of them is not positive.
    """
    if not line:
        raise InvalidPfmFileFormat("image dimensions are not indicated")
    parts = line.split(b" ")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidPfmFileFormat(f"invalid number of dimensions: {line!r}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise InvalidPfmFileFormat(
            f"invalid width and/or height (not an integer): {line!r}"
        ) from exc
    if width <= 0 or height <= 0:
        raise InvalidPfmFileFormat(
            f"invalid width and/or height (non positive): {width}x{height}"
        )
    return width, height


def parse_endianness(line: bytes) -> Endianness:
    """Parse the endianness header line.

    Raises:
        InvalidPfmFileFormat: If the line is empty, not a number, or zero.
    """
    if not line:
        raise InvalidPfmFileFormat("endianness is not indicated")
    try:
        value = float(line)
    except ValueError as exc:
        raise InvalidPfmFileFormat(
            f"invalid endianness (not a floating point): {line!r}"
        ) from exc
    if value == 0.0:
        raise InvalidPfmFileFormat("endianness cannot be zero")
    return "little" if value < 0.0 else "big"


def _dtype(endianness: Endianness) -> np.dtype:
    return np.dtype("<f4" if endianness == "little" else ">f4")


def read_pfm(stream: BinaryIO) -> HdrImage:
    """Decode a PFM image from a binary stream.

    Raises:
        InvalidPfmFileFormat: If the header is malformed or the payload does
            not contain exactly width * height pixels.
    """
    magic = _read_line(stream)
    if magic != PFM_MAGIC:
        raise InvalidPfmFileFormat(f"invalid magic in PFM file: {magic!r}")

    width, height = parse_img_size(_read_line(stream))
    endianness = parse_endianness(_read_line(stream))

    payload = stream.read()
    expected = width * height * 3 * 4
    if len(payload) != expected:
        raise InvalidPfmFileFormat(
            f"expected {width * height} pixels ({expected} bytes), "
            f"got {len(payload)} bytes"
        )

    data = np.frombuffer(payload, dtype=_dtype(endianness)).reshape(height, width, 3)
    # Bottom-to-top on disk, top-to-bottom in memory
    return HdrImage.from_array(np.flipud(data))


def write_pfm(
    image: HdrImage,
    stream: BinaryIO,
    endianness: Endianness = "little",
) -> None:
    """Encode ``image`` as PFM into a binary stream."""
    marker = "-1.0" if endianness == "little" else "1.0"
    header = f"PF\n{image.width} {image.height}\n{marker}\n".encode("ascii")
    stream.write(header)
    stream.write(np.flipud(image.pixels).astype(_dtype(endianness)).tobytes())


def read_pfm_file(path: str | Path) -> HdrImage:
    with open(path, "rb") as stream:
        return read_pfm(stream)


def write_pfm_file(
    image: HdrImage,
    path: str | Path,
    endianness: Endianness = "little",
) -> Path:
    """Write ``image`` to ``path``, appending ".pfm" if the suffix is missing.

    Returns:
        The path actually written.
    """
    path = Path(path)
    if path.suffix != ".pfm":
        path = path.with_name(path.name + ".pfm")
        logger.warning("PFM file automatically renamed to %s", path)
    with open(path, "wb") as stream:
        write_pfm(image, stream, endianness)
    return path
