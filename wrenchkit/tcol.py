"""Terrain collision meshes stored as a z/y/x grid of small cells."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

Vec3 = tuple[float, float, float]


@dataclass
class TcolFace:
    v0: int = 0
    v1: int = 0
    v2: int = 0
    v3: int = 0
    collision_id: int = 0
    is_quad: bool = False


@dataclass
class TcolData:
    """Vertices (relative to the cell position) and faces of one cell."""

    vertices: list[Vec3] = field(default_factory=list)
    faces: list[TcolFace] = field(default_factory=list)


@dataclass
class TcolList(Generic[T]):
    coordinate_value: int = 0
    list: list = field(default_factory=list)


def _sign_extend(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value & (1 << (bits - 1)) else value


def unpack_vertex(vertex: int) -> Vec3:
    """Decode a packed 10/10/12-bit signed vertex."""
    x = _sign_extend(vertex, 10)
    y = _sign_extend(vertex >> 10, 10)
    z = _sign_extend(vertex >> 20, 12)
    return (x / 16.0, y / 16.0, z / 64.0)


def get_collision_color(collision_id: int) -> Vec3:
    """Pick a display colour for a collision type."""
    return (
        ((collision_id & 0x3) << 6) / 255.0,
        ((collision_id & 0xC) << 4) / 255.0,
        (collision_id & 0xF0) / 255.0,
    )


class Tcol:
    """A terrain collision mesh read from ``backing`` at ``base_offset``."""

    def __init__(self, backing: bytes, base_offset: int) -> None:
        self._data = bytes(backing)
        self._base = base_offset
        self._triangles: list[float] = []
        self._colors: list[float] = []
        self.data: TcolList = self._parse()
        self._build()

    def _unpack(self, fmt: str, offset: int) -> tuple:
        position = self._base + offset
        size = struct.calcsize(fmt)
        if offset < 0 or position + size > len(self._data):
            raise ValueError("Unexpected end of stream.")
        return struct.unpack_from(fmt, self._data, position)

    def _parse(self) -> TcolList:
        (co,) = self._unpack("<I", 0)
        coord_z, z_size = self._unpack("<hH", co)
        zlist = TcolList(coord_z * 4, [TcolList() for _ in range(z_size)])

        for z in range(z_size):
            (y_rel,) = self._unpack("<H", co + 4 + z * 2)
            ylist_offset = co + y_rel * 4
            if ylist_offset == co:
                continue
            coord_y, y_size = self._unpack("<hH", ylist_offset)
            ylist = zlist.list[z]
            ylist.coordinate_value = coord_y * 4
            ylist.list = [TcolList() for _ in range(y_size)]

            for y in range(y_size):
                (x_rel,) = self._unpack("<I", ylist_offset + 4 + y * 4)
                xlist_offset = co + x_rel
                if xlist_offset == co:
                    continue
                coord_x, x_size = self._unpack("<hH", xlist_offset)
                xlist = ylist.list[y]
                xlist.coordinate_value = coord_x * 4
                xlist.list = [TcolData() for _ in range(x_size)]

                for x in range(x_size):
                    (entry,) = self._unpack("<I", xlist_offset + 4 + x * 4)
                    data_offset = co + (entry >> 8)
                    if data_offset != co:
                        xlist.list[x] = self._read_cell(data_offset)
        return zlist

    def _read_cell(self, offset: int) -> TcolData:
        face_count, vertex_count, quad_count = self._unpack("<HBB", offset)
        pos = offset + 4
        vertices = [unpack_vertex(v) for v in self._unpack(f"<{vertex_count}I", pos)]
        pos += vertex_count * 4
        faces = []
        for _ in range(face_count):
            v0, v1, v2, collision_id = self._unpack("<4B", pos)
            faces.append(TcolFace(v0, v1, v2, 0, collision_id))
            pos += 4
        for face, v3 in zip(faces, self._unpack(f"<{quad_count}B", pos)):
            face.v3 = v3
            face.is_quad = True
        return TcolData(vertices, faces)

    def _build(self) -> None:
        oz = self.data.coordinate_value + 2
        for ystrip in self.data.list:
            oy = ystrip.coordinate_value + 2
            for xstrip in ystrip.list:
                ox = xstrip.coordinate_value + 2
                for cell in xstrip.list:
                    for face in cell.faces:
                        self._push_face((ox, oy, oz), face, cell)
                    ox += 4
                oy += 4
            oz += 4

    def _push_face(self, offset: Vec3, face: TcolFace, cell: TcolData) -> None:
        def at(index: int) -> Vec3:
            vx, vy, vz = cell.vertices[index]
            return (vx + offset[0], vy + offset[1], vz + offset[2])

        corners = [at(face.v0), at(face.v1), at(face.v2)]
        if face.is_quad:
            corners += [corners[0], corners[2], at(face.v3)]
        color = get_collision_color(face.collision_id)
        for corner in corners:
            self._triangles.extend(corner)
            self._colors.extend(color)

    def triangles(self) -> list[float]:
        return list(self._triangles)

    def colors(self) -> list[float]:
        return list(self._colors)