"""Match the contents of a table of contents with loose files."""

from __future__ import annotations

import struct
import sys
from collections.abc import Iterator, Sequence
from os import PathLike
from pathlib import Path

from .command_line import _add_option, _get, make_parser, parse_command_line_args, parse_number
from .toc import SECTOR_SIZE, TOC_MAX_SIZE, TableOfContents, read_toc, sector_bytes


def _regular_files(directory: str | PathLike) -> list[Path]:
    return sorted(path for path in Path(directory).iterdir() if path.is_file())


def match_tables(
    toc: TableOfContents, directory: str | PathLike
) -> Iterator[tuple[int, int, Path]]:
    """Yield (table index, offset in ToC, file) for loose files equal to a table.

    A loose file starts with its size and four more bytes, then the table data.
    """
    for path in _regular_files(directory):
        content = path.read_bytes()
        if len(content) < 4:
            continue
        (size,) = struct.unpack_from("<I", content, 0)
        if size > 0xFFFF or size < 8:
            continue
        body = content[8:size]
        for index, table in enumerate(toc.tables):
            if body == table.data:
                yield index, table.offset_in_toc, path


def match_levels(
    toc: TableOfContents, toc_bytes: bytes, toc_base: int, directory: str | PathLike
) -> Iterator[tuple[str, int, int, Path]]:
    """Yield (part, offset in ToC, level index, file) for matching level headers.

    The base offset stored in each header sector is ignored, since it is zero
    in the loose files.
    """
    toc_stream = bytearray(toc_bytes)
    for path in _regular_files(directory):
        with open(path, "rb") as file:
            sector = file.read(SECTOR_SIZE)
        if len(sector) < SECTOR_SIZE:
            continue

        def compare(part: int) -> bool:
            rel = sector_bytes(part) - toc_base
            if rel < 0:
                return False
            if len(toc_stream) < rel + SECTOR_SIZE:
                toc_stream.extend(bytes(rel + SECTOR_SIZE - len(toc_stream)))
            toc_stream[rel + 4:rel + 8] = bytes(4)
            return toc_stream[rel:rel + SECTOR_SIZE] == sector

        for index, level in enumerate(toc.levels):
            parts = (
                ("main", level.main_part, True),
                ("audio", level.audio_part, level.audio_part != 0),
                ("scene", level.scene_part, level.scene_part != 0),
            )
            for name, part, present in parts:
                if present and compare(part):
                    yield name, sector_bytes(part) - toc_base, index, path


def main(argv: Sequence[str] | None = None) -> int:
    parser = make_parser("matchtoc", "Match the contents of a table of contents with loose files.")
    _add_option(parser, "src", "s", "The input file.", positional=True)
    _add_option(
        parser, "dir", "d", "The directory of files to correlate ToC entries with.", positional=True
    )
    _add_option(
        parser,
        "offset",
        "o",
        "The offset in the input file where the table of contents begins.",
        positional=True,
    )
    args = parse_command_line_args(parser, argv)
    src_path = _get(args, "src")
    match_dir = _get(args, "dir")
    toc_base = parse_number(_get(args, "offset", "0x1f4800"))

    iso = Path(src_path).read_bytes()
    toc_bytes = iso[toc_base:toc_base + TOC_MAX_SIZE]
    try:
        toc = read_toc(iso, toc_base)
    except ValueError as err:
        print(err, file=sys.stderr)
        return 1

    for index, offset, path in match_tables(toc, match_dir):
        print(f"Matched table {index} at toc+0x{offset:04x} with file {path}")
    for part, offset, index, path in match_levels(toc, toc_bytes, toc_base, match_dir):
        print(f"Matched {part} part at toc+0x{offset:04x} of level {index} with file {path}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())