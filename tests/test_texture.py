import dataclasses
import struct

import pytest

from wrenchkit.bmp import BmpFileHeader, BmpInfoHeader
from wrenchkit.fip import FipHeader, decode_palette_index
from wrenchkit.texture import (
    Colour,
    Texture,
    bmp_to_texture,
    create_fip_texture,
    create_texture_from_streams,
    create_texture_from_streams_rac4,
    read_pif_list,
    remap_pixel_index_rac4,
    texture_to_bmp,
)


def _raw_palette():
    return [(i, (i * 5) % 256, 255 - i, i % 0x81) for i in range(256)]


def _palette_bytes():
    return b"".join(bytes(entry) for entry in _raw_palette())


def _make_fip(width, height, pixels):
    return FipHeader(width=width, height=height, palette=_raw_palette()).pack() + bytes(pixels)


def test_remap_rac4_is_a_permutation():
    width, height = 32, 4
    mapped = [remap_pixel_index_rac4(i, width) for i in range(width * height)]
    assert sorted(mapped) == list(range(width * height))


def test_create_texture_from_streams_reads_pixels_and_palette():
    pixels = bytes(range(16))
    tex = create_texture_from_streams((4, 4), pixels, 0, _palette_bytes(), 0)
    assert tex.size == (4, 4)
    assert bytes(tex.pixels) == pixels
    raw = _raw_palette()
    for i in range(256):
        assert tex.palette[i] == Colour(*raw[decode_palette_index(i)])


def test_create_texture_from_streams_uses_offsets():
    pixel_src = b"\xff" * 3 + bytes(range(4))
    palette_src = b"\x00" * 5 + _palette_bytes()
    tex = create_texture_from_streams((2, 2), pixel_src, 3, palette_src, 5)
    assert bytes(tex.pixels) == bytes(range(4))
    assert tex.palette[0] == Colour(*_raw_palette()[0])


def test_create_texture_from_streams_short_data_raises():
    with pytest.raises(ValueError):
        create_texture_from_streams((4, 4), bytes(3), 0, _palette_bytes(), 0)
    with pytest.raises(ValueError):
        create_texture_from_streams((1, 1), bytes(1), 0, bytes(10), 0)


def test_create_texture_rac4_unswizzles():
    width, height = 32, 4
    src = bytes(range(width * height))
    tex = create_texture_from_streams_rac4((width, height), src, 0, _palette_bytes(), 0)
    assert sorted(tex.pixels) == list(src)
    for i in range(width * height):
        assert tex.pixels[remap_pixel_index_rac4(i, width)] == src[i]


def test_create_texture_rac4_small_is_linear():
    src = bytes(range(16))
    tex = create_texture_from_streams_rac4((4, 4), src, 0, _palette_bytes(), 0)
    plain = create_texture_from_streams((4, 4), src, 0, _palette_bytes(), 0)
    assert tex == plain


def test_create_fip_texture():
    pixels = bytes(range(8))
    data = b"\x00" * 16 + _make_fip(4, 2, pixels)
    tex = create_fip_texture(data, 16)
    assert tex is not None
    assert tex.size == (4, 2)
    assert bytes(tex.pixels) == pixels
    assert tex.palette[8] == Colour(*_raw_palette()[16])


def test_create_fip_texture_without_magic_returns_none():
    assert create_fip_texture(b"\x00" * 64, 0) is None
    assert create_fip_texture(b"", 10) is None


def test_read_pif_list_skips_non_fip_entries():
    fip = _make_fip(2, 2, bytes([1, 2, 3, 4]))
    junk_offset = 16 + len(fip)
    data = struct.pack("<III", 2, 16, junk_offset) + b"\x00" * 4 + fip + b"\x00" * 8
    textures = read_pif_list(data, 0)
    assert len(textures) == 1
    assert bytes(textures[0].pixels) == bytes([1, 2, 3, 4])


def _texture(width, height):
    palette = [Colour(i, 255 - i, (i * 3) % 256, 0x80) for i in range(256)]
    pixels = bytearray((i * 11) % 256 for i in range(width * height))
    return Texture(size=(width, height), pixels=pixels, palette=palette, name="t")


def test_texture_to_bmp_header():
    bmp = texture_to_bmp(_texture(4, 2))
    assert BmpFileHeader.unpack(bmp).reserved == 0x3713
    info = BmpInfoHeader.unpack(bmp[BmpFileHeader.SIZE:])
    assert (info.width, info.height) == (4, 2)


@pytest.mark.parametrize("size", [(4, 2), (3, 5), (8, 8)])
def test_texture_bmp_round_trip(size):
    original = _texture(*size)
    target = Texture(size=size)
    bmp_to_texture(target, texture_to_bmp(original))
    assert target.pixels == original.pixels
    assert target.palette == original.palette


def test_bmp_to_texture_size_mismatch():
    bmp = texture_to_bmp(_texture(4, 2))
    with pytest.raises(ValueError, match="size mismatch"):
        bmp_to_texture(Texture(size=(2, 4)), bmp)


def test_bmp_to_texture_fills_unused_palette():
    bmp = bytearray(texture_to_bmp(_texture(4, 4)))
    info = BmpInfoHeader.unpack(bmp[BmpFileHeader.SIZE:])
    packed = dataclasses.replace(info, num_colours=1).pack()
    bmp[BmpFileHeader.SIZE:BmpFileHeader.SIZE + len(packed)] = packed
    target = Texture(size=(4, 4))
    bmp_to_texture(target, bytes(bmp))
    assert target.palette[0] == _texture(4, 4).palette[0]
    assert target.palette[1:] == [Colour(0, 0, 0, 0x80)] * 255