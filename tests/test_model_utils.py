import pytest

from wrenchkit.model_utils import PlyVertex, read_ply_model

HEADER = """ply
format ascii 1.0
element vertex {count}
property float x
property float y
property float z
property float nx
property float ny
property float nz
property float s
property float t
element face 1
property list uchar uint vertex_indices
end_header
"""


def _write(tmp_path, text):
    path = tmp_path / "model.ply"
    path.write_text(text)
    return path


def test_reads_vertices(tmp_path):
    body = "1 2 3 0 0 1 0.5 0.25\n4 5 6 0 1 0 1 0\n3 0 1 1\n"
    path = _write(tmp_path, HEADER.format(count=2) + body)
    assert read_ply_model(path) == [
        PlyVertex(1, 2, 3, 0, 0, 1, 0.5, 0.25),
        PlyVertex(4, 5, 6, 0, 1, 0, 1, 0),
    ]


def test_stops_after_declared_count(tmp_path):
    body = "1 1 1 1 1 1 1 1\n2 2 2 2 2 2 2 2\n"
    path = _write(tmp_path, HEADER.format(count=1) + body)
    vertices = read_ply_model(path)
    assert len(vertices) == 1
    assert vertices[0].x == 1


def test_accepts_crlf_and_trailing_spaces(tmp_path):
    body = "1 2 3 4 5 6 7 8 \r\n"
    path = tmp_path / "crlf.ply"
    path.write_bytes((HEADER.format(count=1) + body).replace("\n", "\r\n").encode())
    assert read_ply_model(path) == [PlyVertex(1, 2, 3, 4, 5, 6, 7, 8)]


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        read_ply_model(tmp_path / "missing.ply")


def test_bad_vertex_count_raises(tmp_path):
    path = _write(tmp_path, HEADER.format(count="abc"))
    with pytest.raises(ValueError, match="vertex count"):
        read_ply_model(path)


def test_bad_vertex_raises(tmp_path):
    path = _write(tmp_path, HEADER.format(count=1) + "1 2 x 0 0 1 0 0\n")
    with pytest.raises(ValueError, match="vertices"):
        read_ply_model(path)


def test_short_vertex_raises(tmp_path):
    path = _write(tmp_path, HEADER.format(count=1) + "1 2 3\n")
    with pytest.raises(ValueError, match="vertices"):
        read_ply_model(path)