"""Print the memory map from a PS2 EE memory dump (R&C2, R&C3, Deadlocked)."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass
from enum import Enum

EE_MEMORY_SIZE = 32 * 1024 * 1024
KERNEL_BASE = 0x0
CODE_SEGMENT_BASE = 0x100000

_RAC2_LABELS = (
    "OS", "Code", "", "", "", "", "", "Tfrag Geometry", "Occlusion", "Sky",
    "Collision", "Shared VRAM", "Particle VRAM", "Effects VRAM", "Mobies",
    "Ties", "Shrubs", "Ratchet Seqs", "", "Help Messages", "Tie Instances",
    "Shrub Instances", "Moby Instances", "Moby Pvars", "Misc Instances",
    "", "", "", "", "", "", "HUD", "GUI", "", "",
)
_RAC3_LABELS = _RAC2_LABELS[:31] + ("",) + _RAC2_LABELS[31:]
_DL_LABELS = (
    ("OS", "Code") + ("",) * 8
    + ("Tfrag Geometry", "Occlusion", "Sky", "Collision", "Shared VRAM",
       "Particle VRAM", "Effects VRAM", "Mobies")
    + ("",) * 14
    + ("Help Messages", "Tie Instances", "", "Moby Instances")
    + ("",) * 12
    + ("HUD", "", "", "", "")
)


class Game(Enum):
    """Supported games with their detection pattern and segment labels."""

    RAC1 = (b"IOPRP243.IMG", ("",) * 40)
    RAC2 = (b"IOPRP255.IMG", _RAC2_LABELS)
    RAC3 = (b"Ratchet and Clank: Up Your Arsenal", _RAC3_LABELS)
    DL = (b"Ratchet: Deadlocked", _DL_LABELS)

    @property
    def pattern(self) -> bytes:
        return self.value[0]

    @property
    def labels(self) -> tuple[str, ...]:
        return self.value[1]

    @property
    def segment_count(self) -> int:
        return len(self.value[1])


@dataclass(frozen=True)
class Segment:
    """One memory map entry: where it is stored, its label, start and size."""

    address: int
    label: str
    value: int
    size: int | None


def detect_game(memory: bytes) -> Game | None:
    """Identify the game from strings in memory. Deadlocked is checked first."""
    data = bytes(memory)
    for game in reversed(list(Game)):
        end = EE_MEMORY_SIZE - 0x1000 - 1 + len(game.pattern)
        if data.find(game.pattern, CODE_SEGMENT_BASE, end) != -1:
            return game
    return None


def find_memory_map(memory: bytes, game: Game) -> list[Segment]:
    """Locate the segment address table and return its entries."""
    data = bytes(memory)
    count = game.segment_count
    limit = EE_MEMORY_SIZE // 4 - count
    key = struct.pack("<II", KERNEL_BASE, CODE_SEGMENT_BASE)

    pos = data.find(key, CODE_SEGMENT_BASE)
    while pos != -1 and pos // 4 < limit:
        if pos % 4 == 0 and pos + (count + 1) * 4 <= len(data):
            ptr = struct.unpack_from(f"<{count + 1}I", data, pos)
            # The addresses must be in ascending order.
            if all(ptr[j] <= ptr[j + 1] and ptr[j] <= EE_MEMORY_SIZE for j in range(5)):
                segments = []
                for j in range(count):
                    if ptr[j] == 0 or ptr[j + 1] < ptr[j]:
                        size = None
                    elif j == count - 1:
                        size = EE_MEMORY_SIZE - ptr[j]
                    else:
                        size = ptr[j + 1] - ptr[j]
                    segments.append(Segment(pos + j * 4, game.labels[j], ptr[j], size))
                return segments
        pos = data.find(key, pos + 1)
    raise LookupError("Failed to find memory map.")


def format_segment(segment: Segment) -> str:
    line = f"{segment.address:08x} {segment.label:<16}{segment.value:8x}"
    if segment.size is None:
        return line + "     ??? k"
    return line + f"{segment.size // 1024:8d} k"


_MESSAGES = {
    Game.RAC2: "--- Detected R&C2.",
    Game.RAC3: "--- Detected R&C3.",
    Game.DL: "--- Detected DL. Segment sizes may be inaccurate.",
}


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("usage: memmap path/to/eeMemory.bin", file=sys.stderr)
        print("Supports R&C2, R&C3 and Deadlocked.", file=sys.stderr)
        return 1
    try:
        with open(args[0], "rb") as file:
            memory = file.read(EE_MEMORY_SIZE)
    except OSError:
        print("Failed to open file.", file=sys.stderr)
        return 1
    if len(memory) != EE_MEMORY_SIZE:
        print("Failed to read data from file.", file=sys.stderr)
        return 1

    game = detect_game(memory)
    if game is None:
        print("Cannot detect game!", file=sys.stderr)
        return 1
    if game is Game.RAC1:
        print("--- Detected R&C1. Game not supported!")
        return 1
    print(_MESSAGES[game])
    try:
        segments = find_memory_map(memory, game)
    except LookupError as err:
        print(err, file=sys.stderr)
        return 1
    for segment in segments:
        print(format_segment(segment))
    return 0


if __name__ == "__main__":
    sys.exit(main())