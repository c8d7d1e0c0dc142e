"""Read the sector table (table of contents) of a game disc image."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

SECTOR_SIZE = 0x800

TOC_MAX_SIZE = 0x100000
TOC_MAX_INDEX_SIZE = 0x10000
TOC_MAX_LEVELS = 0x100

TOC_MAIN_PART_MAGIC = (0x60, 0x68, 0xC68)
TOC_AUDIO_PART_MAGIC = (0x1018, 0x1818, 0x1000, 0x2A0)
TOC_SCENE_PART_MAGIC = (0x137C, 0x2420, 0x26F0)

_TABLE_HEADER = struct.Struct("<II")
_LEVEL_ENTRY = struct.Struct("<6I")


def sector_bytes(sectors: int) -> int:
    """Convert a size or offset in sectors to bytes."""
    return sectors * SECTOR_SIZE


def _read(iso: bytes, offset: int, count: int) -> bytes:
    data = bytes(iso[offset:offset + count])
    if offset < 0 or len(data) < count:
        raise ValueError("Unexpected end of stream.")
    return data


def _u32(iso: bytes, offset: int) -> int:
    return struct.unpack("<I", _read(iso, offset, 4))[0]


@dataclass
class TocTableHeader:
    """Size in bytes (including this header) and base offset in sectors."""

    size: int
    base_offset: int

    SIZE = _TABLE_HEADER.size


@dataclass
class TocTable:
    """A non-level table in the table of contents."""

    index: int
    offset_in_toc: int
    header: TocTableHeader
    data: bytes


@dataclass
class TocLevel:
    """Locations, in sectors, of the parts of one level."""

    level_table_index: int
    main_part: int = 0
    main_part_size: int = 0
    main_part_size_offset: int = 0
    audio_part: int = 0
    audio_part_size: int = 0
    scene_part: int = 0
    scene_part_size: int = 0


@dataclass
class TableOfContents:
    tables: list[TocTable] = field(default_factory=list)
    levels: list[TocLevel] = field(default_factory=list)


def read_toc(iso: bytes, toc_base: int) -> TableOfContents:
    """Read the tables and the level table starting at ``toc_base``."""
    toc = TableOfContents()

    level_table_offset = toc_get_level_table_offset(iso, toc_base)
    if level_table_offset == 0:
        # The level table was not found; still try to read the other tables.
        level_table_offset = 0xFFFF

    pos = toc_base
    while pos + 4 * 6 < toc_base + level_table_offset:
        size, base = _TABLE_HEADER.unpack(_read(iso, pos, _TABLE_HEADER.size))
        header = TocTableHeader(size, base)
        offset_in_toc = pos - toc_base
        pos += _TABLE_HEADER.size
        if size < _TABLE_HEADER.size or size > 0xFFFF:
            break
        data = _read(iso, pos, size - _TABLE_HEADER.size)
        pos += len(data)
        toc.tables.append(TocTable(len(toc.tables), offset_in_toc, header, data))

    table_start = toc_base + level_table_offset
    raw = _read(iso, table_start, _LEVEL_ENTRY.size * TOC_MAX_LEVELS)
    for i, entry in enumerate(_LEVEL_ENTRY.iter_unpack(raw)):
        level = TocLevel(level_table_index=i)
        has_main_part = False
        # The games order the fields differently, so inspect what each points to.
        for j in range(3):
            header, size = entry[j * 2], entry[j * 2 + 1]
            if sector_bytes(header) > len(iso):
                break
            magic = _u32(iso, sector_bytes(header))
            if magic in TOC_MAIN_PART_MAGIC:
                level.main_part = header
                level.main_part_size = size
                level.main_part_size_offset = table_start + i * 4 * 6 + j * 8 + 4
                has_main_part = True
            if magic in TOC_AUDIO_PART_MAGIC:
                level.audio_part = header
                level.audio_part_size = size
            if magic in TOC_SCENE_PART_MAGIC:
                level.scene_part = header
                level.scene_part_size = size
        if has_main_part:
            toc.levels.append(level)
    return toc


def toc_get_level_table_offset(iso: bytes, toc_base: int) -> int:
    """Find the level table relative to ``toc_base``, or return 0."""
    buffer = bytes(iso[toc_base:toc_base + TOC_MAX_SIZE])
    buffer += bytes(TOC_MAX_SIZE - len(buffer))
    known = TOC_MAIN_PART_MAGIC + TOC_AUDIO_PART_MAGIC + TOC_SCENE_PART_MAGIC

    for i in range(0, TOC_MAX_INDEX_SIZE - _LEVEL_ENTRY.size, 4):
        # Check two consecutive entries to avoid a false positive in Deadlocked.
        first = _LEVEL_ENTRY.unpack_from(buffer, i)
        second = _LEVEL_ENTRY.unpack_from(buffer, i + _LEVEL_ENTRY.size)
        headers = first[0::2] + second[0::2]
        parts = 0
        for header in headers:
            if header == 0:
                break
            magic_offset = sector_bytes(header) - toc_base
            if magic_offset < 0 or magic_offset > TOC_MAX_SIZE - 4:
                break
            if struct.unpack_from("<I", buffer, magic_offset)[0] in known:
                parts += 1
        if parts == 6:
            return i
    return 0