"""Editor settings stored in a TOML file, and the editor's text icons."""

from __future__ import annotations

import sys
import tomllib
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

import tomli_w

SETTINGS_FILE_PATH = "wrench_settings.ini"

ICON_SIZE = 32
_MD5_HEX_LENGTH = 32


@dataclass
class GameIso:
    """A game disc image known to the editor."""

    path: str = ""
    game_db_entry: str = ""
    md5: str = ""


@dataclass
class DebugSettings:
    stream_tracing: bool = False


def _find_or(table: Any, key: str, default: Any, *types: type) -> Any:
    """Return ``table[key]`` if it exists and has one of ``types``, else ``default``."""
    if not isinstance(table, dict):
        return default
    value = table.get(key, default)
    if isinstance(value, bool) and bool not in types:
        return default
    if not isinstance(value, types):
        return default
    return value


def _required_str(table: dict, key: str) -> str:
    value = table.get(key)
    if not isinstance(value, str):
        raise KeyError(f"key '{key}' not found or not a string")
    return value


@dataclass
class Config:
    """Editor settings."""

    emulator_path: str = ""
    game_isos: list[GameIso] = field(default_factory=list)
    compression_threads: int = 8
    gui_scale: float = 1.0
    vsync: bool = True
    debug: DebugSettings = field(default_factory=DebugSettings)
    request_open_settings_dialog: bool = False

    def read(self, path: str | PathLike = SETTINGS_FILE_PATH) -> None:
        """Load settings from ``path``.

        If the file does not exist the defaults are kept and the settings
        dialog is requested. Errors in the file are reported on stderr.
        """
        self.compression_threads = 8
        self.gui_scale = 1.0
        self.vsync = True
        self.debug.stream_tracing = False

        settings_path = Path(path)
        if not settings_path.exists():
            self.request_open_settings_dialog = True
            return

        try:
            with open(settings_path, "rb") as file:
                settings = tomllib.load(file)
        except tomllib.TOMLDecodeError as err:
            print(f"Failed to parse settings: {err}", file=sys.stderr)
            return

        general = _find_or(settings, "general", {}, dict)
        self.emulator_path = _find_or(general, "emulator_path", self.emulator_path, str)
        self.compression_threads = _find_or(general, "compression_threads", 8, int)

        gui = _find_or(settings, "gui", {}, dict)
        self.gui_scale = float(_find_or(gui, "scale", 1.0, float, int))
        self.vsync = _find_or(gui, "vsync", True, bool)

        debug = _find_or(settings, "debug", {}, dict)
        self.debug.stream_tracing = _find_or(debug, "stream_tracing", False, bool)

        game_paths = _find_or(settings, "game_paths", [], list)
        try:
            for entry in game_paths:
                if not isinstance(entry, dict):
                    raise KeyError("game_paths entry is not a table")
                game = GameIso(
                    path=_required_str(entry, "path"),
                    game_db_entry=_required_str(entry, "game"),
                    md5=_required_str(entry, "md5"),
                )
                # Earlier versions wrote corrupted MD5 hashes that were too short.
                if len(game.md5) == _MD5_HEX_LENGTH:
                    self.game_isos.append(game)
        except KeyError as err:
            print(f"Failed to load settings: {err}", file=sys.stderr)

    def write(self, path: str | PathLike = SETTINGS_FILE_PATH) -> None:
        """Save the settings to ``path``."""
        document = {
            "general": {
                "emulator_path": self.emulator_path,
                "compression_threads": self.compression_threads,
            },
            "gui": {
                "scale": float(self.gui_scale),
                "vsync": self.vsync,
            },
            "debug": {
                "stream_tracing": self.debug.stream_tracing,
            },
            "game_paths": [
                {"path": game.path, "game": game.game_db_entry, "md5": game.md5}
                for game in self.game_isos
            ],
        }
        with open(path, "wb") as file:
            tomli_w.dump(document, file)


def load_icon(path: str | PathLike) -> bytes:
    """Read a 32x32 text icon and return it as RGBA pixel data.

    Each line is a row; a '#' is an opaque white pixel and anything else,
    including missing characters and rows, is transparent black.
    """
    with open(path, encoding="utf-8", newline="") as file:
        lines = file.read().split("\n")
    out = bytearray()
    for y in range(ICON_SIZE):
        line = lines[y][:ICON_SIZE] if y < len(lines) else ""
        line = line.ljust(ICON_SIZE)
        for char in line:
            out += b"\xff\xff\xff\xff" if char == "#" else bytes(4)
    return bytes(out)