"""Inspect, unpack and scan for racpak (*.WAD) archives."""

from __future__ import annotations

import struct
import sys
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from .command_line import _add_option, _get, make_parser, parse_command_line_args, parse_number
from .fip import validate_fip
from .racpak import SECTOR_SIZE, Racpak

_MAX_ENTRIES = 4096


def _validate_wad(magic: bytes) -> bool:
    return bytes(magic[:3]) == b"WAD"


def list_archive(archive: Racpak) -> list[str]:
    """Return a table of each entry's index, offset and size (hexadecimal)."""
    lines = ["Index\tOffset\tSize"]
    for index, entry in enumerate(archive.entries()):
        lines.append(f"{index}\t{entry.offset:x}\t{entry.size:x}")
    return lines


def extract_archive(dest_dir: str | PathLike, archive: Racpak) -> list[Path]:
    """Write each entry of ``archive`` into ``dest_dir``; return the written files."""
    num_entries = archive.num_entries()
    if num_entries > _MAX_ENTRIES:
        print(
            f"Error: More than {_MAX_ENTRIES} entries in {dest_dir}!? "
            "It's probably not a valid racpack.",
            file=sys.stderr,
        )
        return []
    written = []
    for index in range(num_entries):
        try:
            entry = archive.entry(index)
            data = archive.open(entry)
        except ValueError:
            print(f"Error: Failed to extract item {index} for {dest_dir}", file=sys.stderr)
            continue
        directory = Path(dest_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{index}_{entry.offset:x}"
        path.write_bytes(data)
        written.append(path)
    return written


def scan_for_archives(src_path: str | PathLike) -> list[int]:
    """Scan a disc image for racpak archives where no table of contents exists.

    Prints what it finds and returns the offsets of possible archives.
    """
    src = Path(src_path).read_bytes()

    segments = {
        i
        for i in range(0, len(src), SECTOR_SIZE)
        if _validate_wad(src[i:i + 4]) or validate_fip(src[i:i + 4])
    }
    print(f"Found {len(segments)} segments.")

    def u32(offset: int) -> int | None:
        if offset + 4 > len(src):
            return None
        return struct.unpack_from("<I", src, offset)[0]

    found = []
    for i in range(0, len(src), SECTOR_SIZE):
        first = u32(i)
        if first is None:
            continue
        num_entries = first // 2 - 1
        if num_entries <= 0 or num_entries > _MAX_ENTRIES:
            continue
        # Only check the first 32 elements of an archive.
        for j in range(1, 33):
            sector = u32(i + j * 2)
            if sector is None:
                break
            if sector == 0:
                continue
            if i + sector * SECTOR_SIZE in segments:
                print(f"Possible racpak archive at 0x{i:x}")
                found.append(i)
                break
    return found


def main(argv: Sequence[str] | None = None) -> int:
    parser = make_parser("pakrac", "Read a game archive file.")
    _add_option(
        parser,
        "command",
        "c",
        "The operation to perform. Available commands are: ls, extract, extractdir, scan.",
        positional=True,
    )
    _add_option(parser, "src", "s", "The input file or directory.", positional=True)
    _add_option(
        parser, "dest", "d", "The output file or directory (if applicable).", positional=True
    )
    _add_option(
        parser,
        "offset",
        "o",
        "The offset of the racpak within the source file. Only applicable in extract mode.",
    )
    args = parse_command_line_args(parser, argv)
    command = _get(args, "command")
    src_path = _get(args, "src")
    dest_path = _get(args, "dest")
    src_offset = parse_number(_get(args, "offset", "0"))

    try:
        if command == "ls":
            src = Path(src_path).read_bytes()
            print("\n".join(list_archive(Racpak(src, 0, len(src)))))
        elif command == "extract":
            if dest_path == "":
                print("Must specify destination.", file=sys.stderr)
                return 0
            src = Path(src_path).read_bytes()
            extract_archive(dest_path, Racpak(src, src_offset, len(src)))
        elif command == "extractdir":
            if dest_path == "":
                print("Must specify destination.", file=sys.stderr)
                return 0
            for path in sorted(Path(src_path).iterdir()):
                if not path.is_file():
                    continue
                src = path.read_bytes()
                extract_archive(Path(dest_path) / path.name, Racpak(src, 0, len(src)))
        elif command == "scan":
            scan_for_archives(src_path)
        else:
            print("Invalid command.", file=sys.stderr)
            return 1
    except ValueError as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())