"""Paletted textures and readers for the game's texture layouts."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .bmp import _parse_indexed_bmp, _read_rows, build_indexed_bmp
from .fip import FipHeader, decode_palette_index, validate_fip

_PALETTE_ENTRIES = 256
_PALETTE_BYTES = _PALETTE_ENTRIES * 4


@dataclass(frozen=True)
class Colour:
    """An RGBA palette entry. Alpha is in the PS2 range 0..0x80."""

    r: int
    g: int
    b: int
    a: int


def _black_palette() -> list[Colour]:
    return [Colour(0, 0, 0, 0)] * _PALETTE_ENTRIES


@dataclass
class Texture:
    """An 8-bit indexed texture with a 256 entry palette."""

    size: tuple[int, int] = (0, 0)
    pixels: bytearray = field(default_factory=bytearray)
    palette: list[Colour] = field(default_factory=_black_palette)
    name: str = ""


def _read(src: bytes, offset: int, count: int) -> bytes:
    data = bytes(src[offset:offset + count])
    if offset < 0 or len(data) < count:
        raise ValueError("Unexpected end of stream.")
    return data


def _read_palette(src: bytes, offset: int) -> list[Colour]:
    raw = [Colour(*entry) for entry in struct.iter_unpack("4B", _read(src, offset, _PALETTE_BYTES))]
    return [raw[decode_palette_index(i)] for i in range(_PALETTE_ENTRIES)]


def remap_pixel_index_rac4(i: int, width: int) -> int:
    """Map a swizzled pixel position in an R&C4 texture to its linear index."""
    s = i // (width * 2)
    r = s * 2 if s % 2 == 0 else (s - 1) * 2 + 1
    q = (i % (width * 2)) // 32

    m = i % 4
    n = (i // 4) % 4
    o = i % 2
    p = (i // 16) % 2

    if (s // 2) % 2 == 1:
        p = 1 - p

    m = (m + p) % 4 if o == 0 else ((m - p) + 4) % 4

    x = n + (m + q * 4) * 4
    y = r + o * 2
    return (x % width) + y * width


def create_texture_from_streams(
    size: tuple[int, int],
    pixel_src: bytes,
    pixel_offset: int,
    palette_src: bytes,
    palette_offset: int,
) -> Texture:
    """Read linear pixel data and a swizzled palette into a texture."""
    width, height = size
    pixels = bytearray(_read(pixel_src, pixel_offset, width * height))
    palette = _read_palette(palette_src, palette_offset)
    return Texture(size=(width, height), pixels=pixels, palette=palette)


def create_texture_from_streams_rac4(
    size: tuple[int, int],
    pixel_src: bytes,
    pixel_offset: int,
    palette_src: bytes,
    palette_offset: int,
) -> Texture:
    """Read R&C4 swizzled pixel data and a swizzled palette into a texture."""
    width, height = size
    count = width * height
    raw = _read(pixel_src, pixel_offset, count)
    if width >= 32 and height >= 4:
        pixels = bytearray(count)
        for i, value in enumerate(raw):
            pixels[min(remap_pixel_index_rac4(i, width), count - 1)] = value
    else:
        pixels = bytearray(raw)
    palette = _read_palette(palette_src, palette_offset)
    return Texture(size=(width, height), pixels=pixels, palette=palette)


def create_fip_texture(backing: bytes, offset: int) -> Texture | None:
    """Read the 2FIP texture at ``offset``, or return None if there is none."""
    if not validate_fip(backing[offset:offset + 4]):
        return None
    header = FipHeader.unpack(_read(backing, offset, FipHeader.SIZE))
    return create_texture_from_streams(
        (header.width, header.height),
        backing,
        offset + FipHeader.SIZE,
        backing,
        offset + FipHeader.PALETTE_OFFSET,
    )


def read_pif_list(backing: bytes, offset: int) -> list[Texture]:
    """Read a count, a table of offsets and the 2FIP textures they point to.

    The count and table sit at the start of ``backing``; the texture offsets
    are relative to ``offset``. Entries that are not 2FIP textures are skipped.
    """
    (count,) = struct.unpack("<I", _read(backing, 0, 4))
    offsets = struct.unpack(f"<{count}I", _read(backing, 4, count * 4))
    textures = []
    for texture_offset in offsets:
        texture = create_fip_texture(backing, offset + texture_offset)
        if texture is not None:
            textures.append(texture)
    return textures


def texture_to_bmp(texture: Texture) -> bytes:
    """Encode a texture as an 8-bit indexed BMP file."""
    width, height = texture.size
    palette = [(c.r, c.g, c.b) for c in texture.palette]
    return build_indexed_bmp(width, height, palette, bytes(texture.pixels), 0x3713)


def bmp_to_texture(texture: Texture, data: bytes) -> None:
    """Replace the palette and pixels of ``texture`` with those of a BMP file.

    The BMP must have the same dimensions as the texture.
    """
    _, info, palette, pixels_start = _parse_indexed_bmp(data)
    size = (abs(info.width), abs(info.height))
    if tuple(texture.size) != size:
        raise ValueError("Texture size mismatch.")
    colours = [Colour(r, g, b, 0x80) for r, g, b in palette]
    # Unused palette entries are black.
    colours += [Colour(0, 0, 0, 0x80)] * (_PALETTE_ENTRIES - len(colours))
    texture.pixels = bytearray(_read_rows(data, pixels_start, *size))
    texture.palette = colours