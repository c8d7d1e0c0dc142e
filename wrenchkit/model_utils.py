"""A minimal reader for ASCII .PLY models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from os import PathLike

_VERTEX_ELEMENT = "element vertex "
_LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass
class PlyVertex:
    """A vertex with position, normal and texture coordinates."""

    x: float
    y: float
    z: float
    nx: float
    ny: float
    nz: float
    s: float
    t: float


def _parse_vertex(line: str) -> PlyVertex:
    fields = line.split()
    if len(fields) < 8:
        raise ValueError("Failed to read vertices from .PLY file.")
    try:
        return PlyVertex(*(float(value) for value in fields[:8]))
    except ValueError as err:
        raise ValueError("Failed to read vertices from .PLY file.") from err


def read_ply_model(path: str | PathLike) -> list[PlyVertex]:
    """Read the vertices of an ASCII .PLY file.

    Each vertex line must hold x y z nx ny nz s t; lines after the declared
    vertex count (such as faces) are ignored.
    """
    vertices: list[PlyVertex] = []
    vertex_count = 0
    reading_vertices = False
    with open(path, encoding="utf-8") as file:
        for line in file:
            line = line.rstrip("\r\n")
            if line.startswith(_VERTEX_ELEMENT):
                match = _LEADING_INT.match(line[len(_VERTEX_ELEMENT):])
                if match is None:
                    raise ValueError("Failed to read vertex count from .PLY file.")
                vertex_count = int(match.group())

            if line.startswith("end_header"):
                reading_vertices = True
            elif reading_vertices and vertex_count > 0:
                vertices.append(_parse_vertex(line))
                vertex_count -= 1
    return vertices