import struct

import pytest

from scanpath.stl import (
    Facet,
    StlFormatError,
    facet_normal,
    parse_binary_stl,
    read_binary_stl,
    unit,
    write_binary_stl,
)
from scanpath.vector3 import Vector3, dot_product


def _facet(offset=0.0, normal=None):
    v1 = Vector3(0.0 + offset, 0.0, 0.0)
    v2 = Vector3(1.0 + offset, 0.0, 0.0)
    v3 = Vector3(0.0 + offset, 1.0, 0.0)
    return Facet(normal or Vector3(0.0, 0.0, 1.0), v1, v2, v3)


def test_write_read_round_trip(tmp_path):
    facets = [_facet(0.0), _facet(2.5), _facet(-4.0)]
    path = tmp_path / "mesh.stl"
    write_binary_stl(path, facets, b"made up part")
    assert read_binary_stl(path) == facets


def test_file_size_follows_format(tmp_path):
    path = tmp_path / "mesh.stl"
    write_binary_stl(path, [_facet(), _facet(1.0)], "hdr")
    data = path.read_bytes()
    assert len(data) == 84 + 2 * 50
    assert data[:3] == b"hdr"
    assert struct.unpack("<I", data[80:84])[0] == 2


def test_empty_mesh(tmp_path):
    path = tmp_path / "empty.stl"
    write_binary_stl(path, [])
    assert read_binary_stl(path) == []


def test_blank_normal_is_recomputed(tmp_path):
    blank = _facet(normal=Vector3())
    path = tmp_path / "blank.stl"
    write_binary_stl(path, [blank])
    (facet,) = read_binary_stl(path)
    assert facet.normal.length() == pytest.approx(1.0)
    assert dot_product(facet.normal, facet.v2 - facet.v1) == pytest.approx(0.0)
    assert dot_product(facet.normal, facet.v3 - facet.v1) == pytest.approx(0.0)


def test_facet_normal_is_unit_and_orthogonal():
    v1, v2, v3 = Vector3(1, 2, 3), Vector3(4, -1, 0), Vector3(-2, 5, 7)
    n = facet_normal(v1, v2, v3)
    assert n.length() == pytest.approx(1.0)
    assert dot_product(n, v2 - v1) == pytest.approx(0.0, abs=1e-12)


def test_unit_leaves_tiny_vector_unchanged():
    tiny = Vector3(1e-12, 0.0, 0.0)
    assert unit(tiny) == tiny


def test_unit_normalizes():
    assert unit(Vector3(0.0, 0.0, 5.0)) == Vector3(0.0, 0.0, 1.0)


def test_parse_rejects_short_data():
    with pytest.raises(StlFormatError):
        parse_binary_stl(b"\0" * 40)


def test_parse_rejects_partial_record():
    with pytest.raises(StlFormatError):
        parse_binary_stl(b"\0" * 84 + b"\0" * 30)


def test_header_too_long(tmp_path):
    with pytest.raises(ValueError):
        write_binary_stl(tmp_path / "x.stl", [], b"a" * 81)


def test_facet_vertices():
    f = _facet()
    assert f.vertices == (f.v1, f.v2, f.v3)