import dataclasses

import pytest

from wrenchkit.bmp import BmpFileHeader, BmpInfoHeader, build_indexed_bmp
from wrenchkit.fip import (
    FipHeader,
    bmp_to_fip,
    decode_palette_index,
    fip_to_bmp,
    validate_fip,
)


def _palette():
    return [(i, (i * 7) % 256, 255 - i, 0x80) for i in range(256)]


def _make_fip(width, height, pixels):
    return FipHeader(width=width, height=height, palette=_palette()).pack() + bytes(pixels)


def test_decode_palette_index_swaps_middle_bits():
    assert decode_palette_index(0b00010000) == 0b00001000
    assert decode_palette_index(0b00001000) == 0b00010000


def test_decode_palette_index_is_an_involution():
    for i in range(256):
        assert decode_palette_index(decode_palette_index(i)) == i


def test_decode_palette_index_keeps_equal_bits():
    for i in range(256):
        if bool(i & 16) == bool(i & 8):
            assert decode_palette_index(i) == i


def test_validate_fip():
    assert validate_fip(b"2FIPxxxx") is True
    assert validate_fip(b"BMxx") is False


def test_fip_header_round_trip():
    header = FipHeader(width=16, height=8, palette=_palette(), unknown1=b"abcd")
    assert FipHeader.unpack(header.pack()) == header


def test_fip_header_palette_offset():
    header = FipHeader(width=1, height=1, palette=_palette())
    data = header.pack()
    offset = FipHeader.PALETTE_OFFSET
    assert data[offset + 4:offset + 8] == bytes(_palette()[1])


def test_fip_to_bmp_header_and_palette():
    pixels = list(range(32))
    bmp = fip_to_bmp(_make_fip(8, 4, pixels))
    header = BmpFileHeader.unpack(bmp)
    assert header.reserved == 1337
    info = BmpInfoHeader.unpack(bmp[BmpFileHeader.SIZE:])
    assert (info.width, info.height) == (8, 4)
    start = BmpFileHeader.SIZE + BmpInfoHeader.SIZE
    r, g, b, _ = _palette()[3]
    assert bmp[start + 12:start + 16] == bytes([b, g, r, 0])


def test_fip_to_bmp_decodes_pixels():
    pixels = list(range(32))
    bmp = fip_to_bmp(_make_fip(8, 4, pixels))
    offset = BmpFileHeader.unpack(bmp).pixel_data
    # The first file row is the bottom image row.
    assert list(bmp[offset:offset + 8]) == [decode_palette_index(p) for p in pixels[24:32]]


def test_fip_bmp_round_trip():
    pixels = [(i * 13) % 256 for i in range(64)]
    src = _make_fip(8, 8, pixels)
    result = bmp_to_fip(fip_to_bmp(src))
    header = FipHeader.unpack(result)
    assert (header.width, header.height) == (8, 8)
    assert [entry[:3] for entry in header.palette] == [entry[:3] for entry in _palette()]
    assert all(entry[3] == 0x80 for entry in header.palette)
    assert list(result[FipHeader.SIZE:]) == pixels


def test_fip_to_bmp_rejects_bad_magic():
    data = bytearray(_make_fip(2, 2, bytes(4)))
    data[0:4] = b"XXXX"
    with pytest.raises(ValueError):
        fip_to_bmp(bytes(data))


def test_fip_to_bmp_rejects_truncated_pixels():
    with pytest.raises(ValueError):
        fip_to_bmp(_make_fip(4, 4, bytes(3)))


def _bmp_with_info(**changes):
    bmp = bytearray(build_indexed_bmp(4, 4, [(1, 2, 3)] * 256, bytes(16), 0))
    info = BmpInfoHeader.unpack(bmp[BmpFileHeader.SIZE:])
    packed = dataclasses.replace(info, **changes).pack()
    bmp[BmpFileHeader.SIZE:BmpFileHeader.SIZE + len(packed)] = packed
    return bytes(bmp)


def test_bmp_to_fip_rejects_non_indexed():
    with pytest.raises(ValueError, match="indexed colour"):
        bmp_to_fip(_bmp_with_info(bits_per_pixel=24))


def test_bmp_to_fip_rejects_large_palette():
    with pytest.raises(ValueError, match="at most 256"):
        bmp_to_fip(_bmp_with_info(num_colours=300))


def test_bmp_to_fip_rejects_bad_magic():
    bmp = bytearray(build_indexed_bmp(4, 4, [(1, 2, 3)] * 256, bytes(16), 0))
    bmp[0:2] = b"XX"
    with pytest.raises(ValueError, match="Invalid BMP header"):
        bmp_to_fip(bytes(bmp))


def test_bmp_to_fip_fills_unused_palette_with_black():
    header = FipHeader.unpack(bmp_to_fip(_bmp_with_info(num_colours=2)))
    assert header.palette[0] == (1, 2, 3, 0x80)
    assert header.palette[2:] == [(0, 0, 0, 0x80)] * 254