"""Command line helpers shared by the tools."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

VERSION = "0.1.0"

_POSITIONAL_PREFIX = "_positional_"


def parse_number(text: str) -> int:
    """Parse a decimal number or a hexadecimal one with a 0x prefix."""
    value = text.strip()
    try:
        if value.lower().startswith("0x"):
            return int(value[2:], 16)
        return int(value, 10)
    except ValueError as err:
        raise ValueError(f"Invalid number: {text!r}") from err


def make_parser(prog: str, description: str) -> argparse.ArgumentParser:
    """Create a parser that understands -h/--help and -v/--version."""
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"wrench {VERSION}",
        help="Print version information.",
    )
    return parser


def _dest(name: str) -> str:
    return name.replace("-", "_")


def _add_option(
    parser: argparse.ArgumentParser,
    name: str,
    short: str,
    help_text: str,
    *,
    positional: bool = False,
) -> None:
    """Add ``-short/--name``; if ``positional`` it may also be given by position."""
    dest = _dest(name)
    parser.add_argument(f"-{short}", f"--{name}", dest=dest, default=None, help=help_text)
    if positional:
        parser.add_argument(
            _POSITIONAL_PREFIX + dest,
            nargs="?",
            default=None,
            metavar=name,
            help=argparse.SUPPRESS,
        )


def parse_command_line_args(
    parser: argparse.ArgumentParser, argv: Sequence[str] | None = None
) -> argparse.Namespace:
    """Parse arguments, folding positional values into their named options.

    Exits if --help or --version is given.
    """
    args = parser.parse_args(argv)
    for key in [k for k in vars(args) if k.startswith(_POSITIONAL_PREFIX)]:
        value = getattr(args, key)
        delattr(args, key)
        name = key[len(_POSITIONAL_PREFIX):]
        if getattr(args, name, None) is None and value is not None:
            setattr(args, name, value)
    return args


def _get(args: argparse.Namespace, name: str, default: str | None = None) -> str:
    """Return an argument's value, its default, or exit if it is required."""
    value = getattr(args, _dest(name), None)
    if value is not None:
        return value
    if default is None:
        print(f"Argument --{name} required but not provided.")
        raise SystemExit(1)
    return default


def run_cli_converter(
    argv: Sequence[str] | None,
    help_text: str,
    commands: Mapping[str, Callable[[bytes], bytes]],
) -> int:
    """Run a tool that converts one file into another with a named command."""
    names = sorted(commands)
    description = "The operation to perform. Possible values are:"
    description += "".join(f" {name}," for name in names)
    description = description[:-1] + "."

    parser = make_parser("wrench", help_text)
    _add_option(parser, "command", "c", description, positional=True)
    _add_option(parser, "src", "s", "The input file.", positional=True)
    _add_option(parser, "dest", "d", "The output file.", positional=True)
    _add_option(parser, "offset", "o", "The offset in the input file where the header begins.")

    args = parse_command_line_args(parser, argv)
    command = _get(args, "command")
    src_path = _get(args, "src")
    dest_path = _get(args, "dest")
    offset = parse_number(_get(args, "offset", "0"))

    src = Path(src_path).read_bytes()
    with open(dest_path, "wb") as dest:
        operation = commands.get(command)
        if operation is None:
            print("Invalid command.", file=sys.stderr)
            return 1
        try:
            result = operation(src[offset:])
        except ValueError as err:
            print(err, file=sys.stderr)
            return 1
        dest.write(result)
    return 0