"""Unit tests for the PFM reader and writer.

Tests cover:
- Encoding and decoding the reference little and big endian files
- Header parsing errors
- File helpers and the automatic ".pfm" suffix
"""

import io
import logging

import pytest

from raykernel.image.hdr import HdrImage
from raykernel.image.pfm import (
    InvalidPfmFileFormat,
    parse_endianness,
    parse_img_size,
    read_pfm,
    read_pfm_file,
    write_pfm,
    write_pfm_file,
)

# 3x2 image, rows stored bottom to top
_PAYLOAD_LE = (
    "0000c842 00004843 00009643"
    "0000c843 0000fa43 00001644"
    "00002f44 00004844 00006144"
    "00002041 0000a041 0000f041"
    "00002042 00004842 00007042"
    "00008c42 0000a042 0000b442"
)
_PAYLOAD_BE = (
    "42c80000 43480000 43960000"
    "43c80000 43fa0000 44160000"
    "442f0000 44480000 44610000"
    "41200000 41a00000 41f00000"
    "42200000 42480000 42700000"
    "428c0000 42a00000 42b40000"
)

LE_REFERENCE_BYTES = b"PF\n3 2\n-1.0\n" + bytes.fromhex(_PAYLOAD_LE)
BE_REFERENCE_BYTES = b"PF\n3 2\n1.0\n" + bytes.fromhex(_PAYLOAD_BE)


def _assert_same_image(actual, expected):
    assert actual.width == expected.width
    assert actual.height == expected.height
    for row in range(expected.height):
        for col in range(expected.width):
            assert actual.get_pixel(col, row).is_close(expected.get_pixel(col, row))


class TestPfmEncoding:
    """Tests for read_pfm and write_pfm on the reference images."""

    def test_reference_sizes(self):
        """Test the sizes of the reference byte strings."""
        assert len(LE_REFERENCE_BYTES) == 84
        assert len(BE_REFERENCE_BYTES) == 83

    def test_write_little_endian(self, reference_image):
        """Test little endian encoding."""
        buffer = io.BytesIO()

        write_pfm(reference_image, buffer)

        assert buffer.getvalue() == LE_REFERENCE_BYTES

    def test_write_big_endian(self, reference_image):
        """Test big endian encoding."""
        buffer = io.BytesIO()

        write_pfm(reference_image, buffer, endianness="big")

        assert buffer.getvalue() == BE_REFERENCE_BYTES

    @pytest.mark.parametrize("data", [LE_REFERENCE_BYTES, BE_REFERENCE_BYTES])
    def test_read(self, data, reference_image):
        """Test decoding both byte orders."""
        image = read_pfm(io.BytesIO(data))

        _assert_same_image(image, reference_image)

    def test_bad_magic(self):
        """Test that a non-PFM stream is rejected."""
        with pytest.raises(InvalidPfmFileFormat):
            read_pfm(io.BytesIO(b"PX\n3 2\n-1.0\nstop"))

    def test_truncated_payload(self):
        """Test that a payload shorter than the header promises is rejected."""
        with pytest.raises(InvalidPfmFileFormat):
            read_pfm(io.BytesIO(LE_REFERENCE_BYTES[:-4]))

    def test_extra_payload(self):
        """Test that trailing bytes after the pixels are rejected."""
        with pytest.raises(InvalidPfmFileFormat):
            read_pfm(io.BytesIO(LE_REFERENCE_BYTES + b"\x00\x00\x00\x00"))

    def test_error_is_value_error(self):
        """Test that format errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            read_pfm(io.BytesIO(b""))


class TestPfmHeader:
    """Tests for the header line parsers."""

    def test_parse_img_size(self):
        """Test a valid size line."""
        assert parse_img_size(b"3 2") == (3, 2)

    @pytest.mark.parametrize("line", [b"", b"2. 3", b"4 0", b"-2 4", b"5 5 1", b"a b"])
    def test_parse_img_size_errors(self, line):
        """Test malformed size lines."""
        with pytest.raises(InvalidPfmFileFormat):
            parse_img_size(line)

    def test_parse_endianness(self):
        """Test the sign convention of the endianness line."""
        assert parse_endianness(b"1.0") == "big"
        assert parse_endianness(b"-1.0") == "little"
        assert parse_endianness(b"07.2") == "big"
        assert parse_endianness(b"-81") == "little"

    @pytest.mark.parametrize("line", [b"", b"0.00", b"2<F"])
    def test_parse_endianness_errors(self, line):
        """Test malformed endianness lines."""
        with pytest.raises(InvalidPfmFileFormat):
            parse_endianness(line)


class TestPfmFiles:
    """Tests for the file helpers."""

    def test_file_round_trip(self, tmp_path, reference_image):
        """Test writing and reading back a file."""
        path = write_pfm_file(reference_image, tmp_path / "image.pfm")

        assert path == tmp_path / "image.pfm"
        assert path.read_bytes() == LE_REFERENCE_BYTES
        _assert_same_image(read_pfm_file(path), reference_image)

    def test_suffix_is_appended(self, tmp_path, caplog):
        """Test that a missing ".pfm" suffix is added with a warning."""
        with caplog.at_level(logging.WARNING, logger="raykernel"):
            path = write_pfm_file(HdrImage(1, 1), tmp_path / "image")

        assert path == tmp_path / "image.pfm"
        assert path.exists()
        assert "automatically renamed" in caplog.text

    def test_missing_file(self, tmp_path):
        """Test that reading a missing file raises."""
        with pytest.raises(FileNotFoundError):
            read_pfm_file(tmp_path / "missing.pfm")
