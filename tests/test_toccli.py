import struct

import pytest

from wrenchkit.toc import read_toc, sector_bytes
from wrenchkit.toccli import format_toc, main

SECTOR = 0x800


def _put(iso, offset, *values):
    struct.pack_into(f"<{len(values)}I", iso, offset, *values)


def build_iso():
    iso = bytearray(0x10000)
    _put(iso, 0x00, 0x20, 5)
    iso[0x08:0x20] = bytes(range(1, 25))
    _put(iso, 0x20, 0x20, 7)
    iso[0x28:0x40] = bytes(range(101, 125))
    _put(iso, 0x40, 0x10, 3, 0x11, 4, 0x12, 5)
    _put(iso, 0x58, 0x13, 6, 0x14, 7, 0x15, 8)
    for sector, magic, base in (
        (0x10, 0x60, 0x100),
        (0x11, 0x1018, 0x200),
        (0x12, 0x137C, 0x300),
        (0x13, 0x68, 0x400),
        (0x14, 0x2420, 0x500),
        (0x15, 0x26F0, 0x600),
    ):
        _put(iso, sector * SECTOR, magic, base)
    return bytes(iso)


def test_format_toc_tables():
    iso = build_iso()
    lines = format_toc(read_toc(iso, 0), iso)
    table_lines = [line for line in lines if line.startswith("| 0")][:2]
    assert table_lines[0].startswith("| 00    | 00000000 ")
    assert f"{sector_bytes(5):08x}" in table_lines[0]
    assert f"{sector_bytes(7):08x}" in table_lines[1]


def test_format_toc_levels():
    iso = build_iso()
    lines = format_toc(read_toc(iso, 0), iso)
    level_lines = [line for line in lines if line.startswith("| 0")][2:]
    assert len(level_lines) == 2
    assert "N/A" not in level_lines[0]
    assert level_lines[1].count("N/A") == 2
    assert f"{sector_bytes(0x100):010x}  {sector_bytes(3):010x}" in level_lines[0]
    assert lines[-1].startswith("+-------+")


def test_main_prints_table(tmp_path, capsys):
    path = tmp_path / "game.iso"
    path.write_bytes(build_iso())
    assert main([str(path), "0"]) == 0
    out = capsys.readouterr().out
    assert "LEVELn.WAD" in out
    assert "[Non-level Sections]" in out


def test_main_requires_src(capsys):
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 1
    assert "Argument --src required" in capsys.readouterr().out