"""Print the game's table of contents."""

from __future__ import annotations

import struct
import sys
from collections.abc import Sequence
from pathlib import Path

from .command_line import _add_option, _get, make_parser, parse_command_line_args, parse_number
from .toc import TableOfContents, TocTableHeader, read_toc, sector_bytes

_NA = " N/A         N/A        |"


def _sector_at(src: bytes, offset: int) -> int:
    if offset < 0 or offset + 4 > len(src):
        raise ValueError("Unexpected end of stream.")
    return sector_bytes(struct.unpack_from("<I", src, offset)[0])


def format_toc(toc: TableOfContents, src: bytes) -> list[str]:
    """Render the tables and the level table as text lines."""
    lines = [
        "+-[Non-level Sections]--+-------------+-------------+",
        "| Index | Offset in ToC | Size in ToC | Data Offset |",
        "| ----- | ------------- | ----------- | ----------- |",
    ]
    for i, table in enumerate(toc.tables):
        table_size = TocTableHeader.SIZE + len(table.data)
        base_offset = sector_bytes(table.header.base_offset)
        lines.append(
            f"| {i:02d}    | {table.offset_in_toc:08x}      | {table_size:08x}    | {base_offset:08x}    |"
        )
    lines.append("+-------+---------------+-------------+-------------+")

    lines += [
        "+-[Level Table]------------------+------------------------+------------------------+",
        "|       | LEVELn.WAD             | AUDIOn.WAD             | SCENEn.WAD             |",
        "|       | ----------             | ----------             | ----------             |",
        "| Index | Offset      Size       | Offset      Size       | Offset      Size       |",
        "| ----- | ------      ----       | ------      ----       | ------      ----       |",
    ]
    for i, level in enumerate(toc.levels):
        main_base = _sector_at(src, sector_bytes(level.main_part) + 4)
        line = f"| {i:02d}    | {main_base:010x}  {sector_bytes(level.main_part_size):010x} |"
        for part, size in (
            (level.audio_part, level.audio_part_size),
            (level.scene_part, level.scene_part_size),
        ):
            if part != 0:
                base = _sector_at(src, sector_bytes(part) + 4)
                line += f" {base:010x}  {sector_bytes(size):010x} |"
            else:
                line += _NA
        lines.append(line)
    lines.append(
        "+-------+------------------------+------------------------+------------------------+"
    )
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    parser = make_parser("toc", "Read the game's table of contents.")
    _add_option(parser, "src", "s", "The input file.", positional=True)
    _add_option(
        parser,
        "offset",
        "o",
        "The offset in the input file where the table of contents begins.",
        positional=True,
    )
    args = parse_command_line_args(parser, argv)
    src_path = _get(args, "src")
    offset = parse_number(_get(args, "offset", "0x1f4800"))

    src = Path(src_path).read_bytes()
    try:
        lines = format_toc(read_toc(src, offset), src)
    except ValueError as err:
        print(err, file=sys.stderr)
        return 1
    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    sys.exit(main())