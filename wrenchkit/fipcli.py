"""Convert 2FIP textures to BMP files and back."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from .command_line import run_cli_converter
from .fip import bmp_to_fip, fip_to_bmp


def main(argv: Sequence[str] | None = None) -> int:
    return run_cli_converter(
        argv,
        "Converts indexed colour textures in the FIP format to BMP files.",
        {"export": fip_to_bmp, "import": bmp_to_fip},
    )


if __name__ == "__main__":
    sys.exit(main())