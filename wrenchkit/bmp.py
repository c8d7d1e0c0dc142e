"""Indexed-colour BMP headers, a writer and a small reader."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import ClassVar

_FILE_HEADER = struct.Struct("<2sIII")
_INFO_HEADER = struct.Struct("<IiihhIIiiII")
_COLOUR_ENTRY = struct.Struct("<BBBB")

_MAGIC = b"BM"
_PALETTE_ENTRIES = 256


def validate_bmp(data: bytes) -> bool:
    """Return True if ``data`` starts with the BMP magic bytes."""
    return bytes(data[:2]) == _MAGIC


def row_size(bits_per_pixel: int, width: int) -> int:
    """Size in bytes of one pixel row, padded to a multiple of four."""
    return ((bits_per_pixel * width + 31) // 32) * 4


@dataclass
class BmpFileHeader:
    """The 14-byte BMP file header."""

    magic: bytes = _MAGIC
    file_size: int = 0
    reserved: int = 0
    pixel_data: int = 0

    SIZE: ClassVar[int] = _FILE_HEADER.size

    def pack(self) -> bytes:
        return _FILE_HEADER.pack(self.magic, self.file_size, self.reserved, self.pixel_data)

    @classmethod
    def unpack(cls, data: bytes) -> BmpFileHeader:
        if len(data) < _FILE_HEADER.size:
            raise ValueError("Truncated BMP file header.")
        return cls(*_FILE_HEADER.unpack_from(data))


@dataclass
class BmpInfoHeader:
    """The 40-byte BITMAPINFOHEADER."""

    info_header_size: int = 40
    width: int = 0
    height: int = 0
    num_colour_planes: int = 1
    bits_per_pixel: int = 8
    compression_method: int = 0
    pixel_data_size: int = 0
    horizontal_resolution: int = 0
    vertical_resolution: int = 0
    num_colours: int = _PALETTE_ENTRIES
    num_important_colours: int = 0

    SIZE: ClassVar[int] = _INFO_HEADER.size

    def pack(self) -> bytes:
        return _INFO_HEADER.pack(
            self.info_header_size,
            self.width,
            self.height,
            self.num_colour_planes,
            self.bits_per_pixel,
            self.compression_method,
            self.pixel_data_size,
            self.horizontal_resolution,
            self.vertical_resolution,
            self.num_colours,
            self.num_important_colours,
        )

    @classmethod
    def unpack(cls, data: bytes) -> BmpInfoHeader:
        if len(data) < _INFO_HEADER.size:
            raise ValueError("Truncated BMP info header.")
        return cls(*_INFO_HEADER.unpack_from(data))


def build_indexed_bmp(
    width: int,
    height: int,
    palette: Iterable[Sequence[int]],
    pixels: bytes,
    reserved: int,
) -> bytes:
    """Build an 8-bit indexed BMP file.

    ``palette`` holds up to 256 entries whose first three items are r, g, b.
    ``pixels`` holds ``width * height`` indices in top-down row order.
    """
    pixel_offset = BmpFileHeader.SIZE + BmpInfoHeader.SIZE + _COLOUR_ENTRY.size * _PALETTE_ENTRIES
    header = BmpFileHeader(
        file_size=pixel_offset + width * height,
        reserved=reserved,
        pixel_data=pixel_offset,
    )
    info = BmpInfoHeader(width=width, height=height, pixel_data_size=width * height)

    out = bytearray(header.pack())
    out += info.pack()

    entries = list(palette)[:_PALETTE_ENTRIES]
    entries += [(0, 0, 0)] * (_PALETTE_ENTRIES - len(entries))
    for entry in entries:
        r, g, b = entry[:3]
        out += _COLOUR_ENTRY.pack(b, g, r, 0)

    pixels = bytes(pixels)
    if len(pixels) < width * height:
        raise ValueError("Not enough pixel data for the given size.")
    padding = bytes(row_size(8, width) - width)
    for y in reversed(range(height)):
        out += pixels[y * width:(y + 1) * width]
        out += padding
    return bytes(out)


def _parse_indexed_bmp(
    data: bytes,
) -> tuple[BmpFileHeader, BmpInfoHeader, list[tuple[int, int, int]], int]:
    """Read the headers and colour table of an 8-bit BMP.

    Returns the headers, the palette as (r, g, b) tuples and the offset just
    past the colour table.
    """
    file_header = BmpFileHeader.unpack(data)
    if not validate_bmp(file_header.magic):
        raise ValueError("Invalid BMP header.")
    info = BmpInfoHeader.unpack(data[BmpFileHeader.SIZE:])
    if info.bits_per_pixel != 8:
        raise ValueError("The BMP file must use indexed colour (with at most 256 colours).")
    if info.num_colours > _PALETTE_ENTRIES:
        raise ValueError("The BMP colour palette must contain at most 256 colours.")

    # Some BMP files have a larger info header.
    start = BmpFileHeader.SIZE + info.info_header_size
    end = start + _COLOUR_ENTRY.size * info.num_colours
    if len(data) < end:
        raise ValueError("Truncated BMP colour table.")
    palette = [(r, g, b) for b, g, r, _ in _COLOUR_ENTRY.iter_unpack(data[start:end])]
    return file_header, info, palette, end


def _read_rows(data: bytes, start: int, width: int, height: int) -> bytes:
    """Read bottom-up 8-bit rows starting at ``start``, returned top-down."""
    stride = row_size(8, width)
    rows = []
    for y in range(height):
        offset = start + y * stride
        row = bytes(data[offset:offset + width])
        if len(row) < width:
            raise ValueError("Truncated BMP pixel data.")
        rows.append(row)
    rows.reverse()
    return b"".join(rows)