# wrenchkit

Command-line tools and a small Python library for inspecting and converting
data from the Ratchet & Clank PS2 games: 2FIP textures, indexed BMP files,
the disc's table of contents, racpak (`*.WAD`) archives, terrain collision
meshes and memory maps taken from EE memory dumps.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Command-line tools

Offsets can be written in decimal or as hexadecimal with a `0x` prefix.
Every tool except `wrench-memmap` accepts `-h/--help` and `-v/--version`,
and its arguments can be given either by position or by their named options.

### Converting 2FIP textures

```
wrench-fip export texture.fip texture.bmp
wrench-fip import texture.bmp texture.fip
```

`export` turns a 2FIP texture into an indexed 256-colour BMP file and `import`
goes the other way. Use `-o/--offset` when the data does not start at the
beginning of the input file.

### Reading the table of contents

```
wrench-toc game.iso
wrench-toc game.iso 0x1f4800
```

Prints the non-level tables and the level table (the `LEVELn.WAD`,
`AUDIOn.WAD` and `SCENEn.WAD` parts of each level). The offset defaults to
`0x1f4800`.

### Matching table-of-contents entries with loose files

```
wrench-matchtoc game.iso extracted_files/ 0x1f4800
```

Reports which regular files in a directory hold the same data as a table, or
the same header sector as a level part, in the table of contents. The base
offset stored in each header sector is ignored during the comparison.

### Working with racpak archives

```
wrench-pakrac ls ARCHIVE.WAD
wrench-pakrac extract ARCHIVE.WAD out_dir
wrench-pakrac extractdir archives/ out_dir
wrench-pakrac scan game.iso
```

- `ls` lists each entry's index, offset and size (offset and size in
  hexadecimal).
- `extract` writes every entry to `out_dir`, named `<index>_<offset in hex>`;
  `-o/--offset` gives where the archive starts within the input file.
- `extractdir` extracts every file in a directory as an archive into its own
  sub-directory of the destination.
- `scan` searches a whole disc image for sector-aligned archives whose
  entries point at WAD segments or 2FIP textures.

Archives claiming more than 4096 entries are rejected.

### Finding a texture on disc

```
wrench-texturefinder game.iso texture.bmp
```

Takes an indexed BMP (for example one dumped from an emulator and converted to
256 colours) and looks for uncompressed 2FIP textures on the disc whose first
256 pixels change value at the same positions, so a match is found even if
the palettes differ.

### Printing a memory map

```
wrench-memmap eeMemory.bin
```

Detects which game a 32 MiB EE memory dump belongs to and prints its table of
memory segments with their labels, addresses and sizes in KiB. R&C2, R&C3 and
Deadlocked are supported.

## Library use

The modules work on `bytes` held in memory:

```python
from pathlib import Path

from wrenchkit.fip import fip_to_bmp, validate_fip
from wrenchkit.toc import read_toc
from wrenchkit.racpak import Racpak

fip = Path("texture.fip").read_bytes()
if validate_fip(fip):
    Path("texture.bmp").write_bytes(fip_to_bmp(fip))

iso = Path("game.iso").read_bytes()
toc = read_toc(iso, 0x1f4800)
for level in toc.levels:
    print(level.level_table_index, level.main_part, level.main_part_size)

archive_bytes = Path("ARCHIVE.WAD").read_bytes()
archive = Racpak(archive_bytes, 0, len(archive_bytes))
for entry in archive.entries():
    data = archive.open(entry)
```

Modules:

- `wrenchkit.bmp` — `BmpFileHeader`, `BmpInfoHeader`, `validate_bmp`,
  `row_size` and `build_indexed_bmp`.
- `wrenchkit.fip` — `FipHeader`, `validate_fip`, `decode_palette_index`,
  `fip_to_bmp` and `bmp_to_fip`.
- `wrenchkit.texture` — `Texture` and `Colour`;
  `create_texture_from_streams`, `create_texture_from_streams_rac4` (the
  swizzled pixel layout of R&C4 textures), `create_fip_texture`,
  `read_pif_list`, `texture_to_bmp` and `bmp_to_texture`.
- `wrenchkit.model_utils` — `PlyVertex` and `read_ply_model` for simple ASCII
  `.ply` files whose vertices hold `x y z nx ny nz s t`.
- `wrenchkit.toc` — `read_toc`, `toc_get_level_table_offset`,
  `sector_bytes` and the `TableOfContents`, `TocTable`, `TocTableHeader` and
  `TocLevel` records.
- `wrenchkit.racpak` — `Racpak` and `RacpakEntry`.
- `wrenchkit.tcol` — the `Tcol` terrain collision reader with `triangles()`
  and `colors()`, plus `unpack_vertex` and `get_collision_color`.
- `wrenchkit.memmap` — `Game`, `Segment`, `detect_game`, `find_memory_map`
  and `format_segment`.
- `wrenchkit.config` — `Config` and `GameIso` for reading and writing the
  TOML settings file (`wrench_settings.ini` by default), and `load_icon`,
  which turns a 32×32 text icon (`#` for a lit pixel) into RGBA bytes.
- `wrenchkit.command_line` — `parse_number`, `make_parser`,
  `parse_command_line_args` and `run_cli_converter`, shared by the tools.

## What the package does not do

- It does not decompress or compress WAD segments. `Racpak.is_compressed`
  only reports whether an entry starts with the `WAD` magic, and extracted
  entries are written exactly as stored.
- It does not read whole levels (mobies, models, tfrags, worlds) or write
  changes back to a disc image; `Tcol` reads a collision mesh from bytes you
  supply.
- It has no graphical editor and no project files. `Config` only reads and
  writes the settings file, and `load_icon` returns pixel data without
  displaying it.