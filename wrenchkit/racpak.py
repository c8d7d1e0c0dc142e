"""Racpak (*.WAD) archives: a table of sector offsets and sizes."""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass

SECTOR_SIZE = 0x800


@dataclass(frozen=True)
class RacpakEntry:
    """Offset and size in bytes of an archive member."""

    offset: int
    size: int


class Racpak:
    """A racpak archive found within ``backing`` at ``offset``."""

    def __init__(self, backing: bytes, offset: int, size: int) -> None:
        self._backing = memoryview(bytes(backing))[offset:offset + size]
        self._base = offset

    def _u32(self, offset: int) -> int:
        if offset < 0 or offset + 4 > len(self._backing):
            raise ValueError("Unexpected end of stream.")
        return struct.unpack_from("<I", self._backing, offset)[0]

    def num_entries(self) -> int:
        value = self._u32(0)
        if value < 8:
            value = self._u32(4)
        return value // 8 - 1

    def base(self) -> int:
        return self._base

    def entry(self, index: int) -> RacpakEntry:
        position = (index + 1) * 8
        return RacpakEntry(self._u32(position) * SECTOR_SIZE, self._u32(position + 4) * SECTOR_SIZE)

    def entries(self) -> Iterator[RacpakEntry]:
        for index in range(self.num_entries()):
            yield self.entry(index)

    def open(self, entry: RacpakEntry) -> bytes:
        """Return the bytes of an archive member."""
        data = bytes(self._backing[entry.offset:entry.offset + entry.size])
        if len(data) < entry.size:
            raise ValueError("Archive entry runs past the end of the archive.")
        return data

    def is_compressed(self, entry: RacpakEntry) -> bool:
        return bytes(self._backing[entry.offset:entry.offset + 3]) == b"WAD"