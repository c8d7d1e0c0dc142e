"""Conversion between indexed 2FIP textures and BMP files."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .bmp import _parse_indexed_bmp, _read_rows, build_indexed_bmp

_FIP_HEADER = struct.Struct("<4s4sII16s1024s")
_MAGIC = b"2FIP"
_PALETTE_ENTRIES = 256


def validate_fip(data: bytes) -> bool:
    """Return True if ``data`` starts with the 2FIP magic bytes."""
    return bytes(data[:4]) == _MAGIC


def decode_palette_index(index: int) -> int:
    """Swap bits 3 and 4 of a palette index (e.g. 0b00010000 -> 0b00001000)."""
    return index ^ 0b00011000 if ((index & 16) >> 1) != (index & 8) else index


_DECODE_TABLE = bytes(decode_palette_index(i) for i in range(256))


def _default_palette() -> list[tuple[int, int, int, int]]:
    return [(0, 0, 0, 0)] * _PALETTE_ENTRIES


@dataclass
class FipHeader:
    """Header of a 2FIP texture, including its 256 entry RGBA palette."""

    width: int = 0
    height: int = 0
    palette: list[tuple[int, int, int, int]] = field(default_factory=_default_palette)
    magic: bytes = _MAGIC
    unknown1: bytes = bytes(4)
    unknown2: bytes = bytes(16)

    SIZE: ClassVar[int] = _FIP_HEADER.size
    PALETTE_OFFSET: ClassVar[int] = 0x20

    def pack(self) -> bytes:
        if len(self.palette) != _PALETTE_ENTRIES:
            raise ValueError("A 2FIP palette must have exactly 256 entries.")
        palette = b"".join(bytes(entry) for entry in self.palette)
        return _FIP_HEADER.pack(
            self.magic, self.unknown1, self.width, self.height, self.unknown2, palette
        )

    @classmethod
    def unpack(cls, data: bytes) -> FipHeader:
        if len(data) < _FIP_HEADER.size:
            raise ValueError("Truncated 2FIP header.")
        magic, unknown1, width, height, unknown2, palette = _FIP_HEADER.unpack_from(data)
        entries = [tuple(entry) for entry in struct.iter_unpack("4B", palette)]
        return cls(
            width=width,
            height=height,
            palette=entries,
            magic=magic,
            unknown1=unknown1,
            unknown2=unknown2,
        )


def fip_to_bmp(src: bytes) -> bytes:
    """Convert a 2FIP texture to an 8-bit indexed BMP file."""
    header = FipHeader.unpack(src)
    if not validate_fip(header.magic):
        raise ValueError("Tried to read invalid FIP segment.")
    count = header.width * header.height
    pixels = bytes(src[FipHeader.SIZE:FipHeader.SIZE + count])
    if len(pixels) < count:
        raise ValueError("Truncated 2FIP pixel data.")
    return build_indexed_bmp(
        header.width,
        header.height,
        header.palette,
        pixels.translate(_DECODE_TABLE),
        1337,
    )


def bmp_to_fip(src: bytes) -> bytes:
    """Convert an 8-bit indexed BMP file to a 2FIP texture."""
    file_header, info, palette, _ = _parse_indexed_bmp(src)
    width, height = abs(info.width), abs(info.height)
    entries = [(r, g, b, 0x80) for r, g, b in palette]
    # Unused palette entries are black.
    entries += [(0, 0, 0, 0x80)] * (_PALETTE_ENTRIES - len(entries))
    header = FipHeader(width=width, height=height, palette=entries)
    pixels = _read_rows(src, file_header.pixel_data, width, height)
    return header.pack() + pixels.translate(_DECODE_TABLE)