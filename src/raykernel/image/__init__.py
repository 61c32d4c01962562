"""HDR image buffer and Portable Float Map I/O."""

from .hdr import HdrImage
from .pfm import InvalidPfmFileFormat, read_pfm, read_pfm_file, write_pfm, write_pfm_file

__all__ = [
    "HdrImage",
    "InvalidPfmFileFormat",
    "read_pfm",
    "write_pfm",
    "read_pfm_file",
    "write_pfm_file",
]
