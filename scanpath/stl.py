"""Reading and writing binary STL meshes."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Iterable, Union

from scanpath.vector3 import Vector3, cross_product

HEADER_SIZE = 80
_COUNT = struct.Struct("<I")
_RECORD = struct.Struct("<12fH")
_EPS = 1.0e-9


class StlFormatError(ValueError):
    """Raised when binary STL data is malformed."""


@dataclass(frozen=True)
class Facet:
    """One triangle with its normal."""

    normal: Vector3
    v1: Vector3
    v2: Vector3
    v3: Vector3

    @property
    def vertices(self) -> tuple[Vector3, Vector3, Vector3]:
        return (self.v1, self.v2, self.v3)


def unit(vector: Vector3) -> Vector3:
    """Normalize ``vector``; vectors shorter than 1e-9 are returned unchanged."""
    length = math.sqrt(vector.x ** 2 + vector.y ** 2 + vector.z ** 2)
    if length > _EPS:
        return vector / length
    return vector


def facet_normal(v1: Vector3, v2: Vector3, v3: Vector3) -> Vector3:
    """Unit normal of the triangle (v1, v2, v3) by the right-hand rule."""
    return unit(cross_product(v2 - v1, v3 - v1))


def parse_binary_stl(data: bytes) -> list[Facet]:
    """Parse binary STL bytes; blank normals are recomputed from the vertices."""
    if len(data) < HEADER_SIZE + _COUNT.size:
        raise StlFormatError("data is shorter than the STL header")
    body = memoryview(data)[HEADER_SIZE + _COUNT.size:]
    if len(body) % _RECORD.size:
        raise StlFormatError("trailing bytes do not form a whole facet record")

    facets = []
    for record in _RECORD.iter_unpack(body):
        normal = Vector3(*record[0:3])
        v1 = Vector3(*record[3:6])
        v2 = Vector3(*record[6:9])
        v3 = Vector3(*record[9:12])
        if all(abs(c) < _EPS for c in normal):
            normal = facet_normal(v1, v2, v3)
        facets.append(Facet(normal, v1, v2, v3))
    return facets


def read_binary_stl(path: Union[str, PathLike]) -> list[Facet]:
    """Read the facets of a binary STL file."""
    return parse_binary_stl(Path(path).read_bytes())


def write_binary_stl(
    path: Union[str, PathLike],
    facets: Iterable[Facet],
    header: Union[bytes, str] = b"",
) -> None:
    """Write ``facets`` as a binary STL file with the given header text."""
    if isinstance(header, str):
        header = header.encode("ascii")
    if len(header) > HEADER_SIZE:
        raise ValueError(f"STL header is limited to {HEADER_SIZE} bytes")
    facets = list(facets)
    chunks = [header.ljust(HEADER_SIZE, b"\0"), _COUNT.pack(len(facets))]
    for facet in facets:
        values = [c for v in (facet.normal, facet.v1, facet.v2, facet.v3) for c in v]
        chunks.append(_RECORD.pack(*values, 0))
    Path(path).write_bytes(b"".join(chunks))