"""Find a texture on disc from an indexed BMP, even if its palette differs."""

from __future__ import annotations

import sys
from collections.abc import Iterator, Sequence
from pathlib import Path

from .bmp import BmpFileHeader, BmpInfoHeader, _read_rows, validate_bmp
from .command_line import _add_option, _get, make_parser, parse_command_line_args
from .fip import FipHeader, validate_fip

_STEP = 0x800
_HASHED_BYTES = 256

_DESCRIPTION = (
    "Scan a game data segment for a given indexed BMP file, even if said file "
    "has a different palette. For example, you could dump a texture using an "
    "emulator, convert it to an indexed BMP (with 256 colours) using an image "
    "editor, and then feed it into this program to find where it is stored on disc."
)


def hash_pixel_data(pixels: bytes) -> list[int]:
    """Return the positions where a pixel differs from the one before it.

    This does not depend on which palette indices are used.
    """
    return [i for i in range(1, len(pixels)) if pixels[i] != pixels[i - 1]]


def read_bmp_pixels(data: bytes) -> bytes:
    """Return the pixel indices of a BMP file in top-down row order."""
    file_header = BmpFileHeader.unpack(data)
    if not validate_bmp(file_header.magic):
        raise ValueError("Input texture must be a valid indexed BMP file.")
    info = BmpInfoHeader.unpack(data[BmpFileHeader.SIZE:])
    return _read_rows(data, file_header.pixel_data, abs(info.width), abs(info.height))


def find_matching_textures(iso: bytes, target_hash: list[int]) -> Iterator[int]:
    """Yield offsets of 2FIP textures whose pixel hash equals ``target_hash``."""
    for i in range(0, len(iso), _STEP):
        magic = iso[i:i + 0x14]
        if validate_fip(magic):
            fip_offset = 0
        elif validate_fip(magic[0x10:]):
            fip_offset = 0x10
        else:
            continue
        test_offset = i + fip_offset
        start = test_offset + FipHeader.SIZE
        if hash_pixel_data(iso[start:start + _HASHED_BYTES]) == target_hash:
            yield test_offset


def main(argv: Sequence[str] | None = None) -> int:
    parser = make_parser("texturefinder", _DESCRIPTION)
    _add_option(parser, "iso", "i", "The data segment to scan.", positional=True)
    _add_option(parser, "target", "t", "The texture to scan for.", positional=True)
    args = parse_command_line_args(parser, argv)
    iso_path = _get(args, "iso")
    target_path = _get(args, "target")

    iso = Path(iso_path).read_bytes()
    try:
        pixels = read_bmp_pixels(Path(target_path).read_bytes())
    except ValueError:
        print("Error: Input texture must be a valid indexed BMP file.", file=sys.stderr)
        return 1
    target_hash = hash_pixel_data(pixels[:_HASHED_BYTES])
    for offset in find_matching_textures(iso, target_hash):
        print(f"Possible matching texture found at 0x{offset:x}")
    return 0


if __name__ == "__main__":
    sys.exit(main())