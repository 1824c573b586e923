"""Raw matrix files: an ``IMG_INFO`` header followed by row-major pixel data."""

from __future__ import annotations

import struct
from os import PathLike
from pathlib import Path
from typing import Union

import numpy as np

MAGIC = b"IMG_INFO"
_HEADER = struct.Struct("<8sii4s")

# (numpy dtype, channels, type code)
_FORMATS = (
    (np.dtype("<f4"), 1, b"FL4B"),
    (np.dtype("<i4"), 1, b"SI4B"),
    (np.dtype("u1"), 1, b"UI1B"),
    (np.dtype("<u2"), 1, b"UI2B"),
    (np.dtype("<f8"), 1, b"FL8B"),
    (np.dtype("<f8"), 3, b"F38B"),
    (np.dtype("<f4"), 3, b"F34B"),
    (np.dtype("<f8"), 4, b"F48B"),
    (np.dtype("<f4"), 4, b"F44B"),
)
_BY_KEY = {(dt.kind, dt.itemsize, ch): (dt, code) for dt, ch, code in _FORMATS}
_BY_CODE = {code: (dt, ch) for dt, ch, code in _FORMATS}


class RawMatError(ValueError):
    """Raised when a matrix cannot be stored in, or read from, the raw format."""


def _layout(matrix: np.ndarray) -> tuple[int, int, int]:
    if matrix.ndim == 2:
        rows, cols = matrix.shape
        return rows, cols, 1
    if matrix.ndim == 3 and matrix.shape[2] in (3, 4):
        rows, cols, channels = matrix.shape
        return rows, cols, channels
    raise RawMatError(f"unsupported matrix shape {matrix.shape}")


def write_mat_raw(path: Union[str, PathLike], mode: str, matrix: np.ndarray) -> None:
    """Write ``matrix`` to ``path``; ``mode`` is ``'w'`` to replace or ``'a'`` to append."""
    if mode not in ("w", "a"):
        raise ValueError("mode must be 'w' or 'a'")
    array = np.asarray(matrix)
    rows, cols, channels = _layout(array)
    key = (array.dtype.kind, array.dtype.itemsize, channels)
    if key not in _BY_KEY:
        raise RawMatError(f"unsupported element type {array.dtype} with {channels} channel(s)")
    dtype, code = _BY_KEY[key]
    payload = np.ascontiguousarray(array, dtype=dtype).tobytes()
    with open(path, mode + "b") as handle:
        handle.write(_HEADER.pack(MAGIC, rows, cols, code))
        handle.write(payload)


def read_mat_raw(path: Union[str, PathLike]) -> np.ndarray:
    """Read the first matrix stored in a raw file."""
    data = Path(path).read_bytes()
    if len(data) < _HEADER.size:
        raise RawMatError("file is shorter than the raw matrix header")
    _, rows, cols, code = _HEADER.unpack_from(data)
    if code not in _BY_CODE:
        raise RawMatError(f"unknown element type code {code!r}")
    if rows < 0 or cols < 0:
        raise RawMatError("negative matrix dimensions")
    dtype, channels = _BY_CODE[code]
    count = rows * cols * channels
    size = count * dtype.itemsize
    body = data[_HEADER.size:_HEADER.size + size]
    if len(body) < size:
        raise RawMatError("file ends before the matrix data is complete")
    values = np.frombuffer(body, dtype=dtype, count=count).astype(dtype.newbyteorder("="))
    shape = (rows, cols) if channels == 1 else (rows, cols, channels)
    return values.reshape(shape)