import numpy as np
import pytest

from scanpath.rawmat import RawMatError, read_mat_raw, write_mat_raw


@pytest.mark.parametrize(
    "dtype, shape",
    [
        (np.float32, (2, 3)),
        (np.int32, (3, 2)),
        (np.uint8, (4, 4)),
        (np.uint16, (1, 5)),
        (np.float64, (2, 2)),
        (np.float64, (2, 3, 3)),
        (np.float32, (3, 2, 3)),
        (np.float64, (2, 2, 4)),
        (np.float32, (1, 2, 4)),
    ],
)
def test_round_trip(tmp_path, dtype, shape):
    matrix = (np.arange(int(np.prod(shape))) % 200).astype(dtype).reshape(shape)
    path = tmp_path / "m.raw"
    write_mat_raw(path, "w", matrix)
    result = read_mat_raw(path)
    assert result.dtype == np.dtype(dtype)
    assert result.shape == shape
    np.testing.assert_array_equal(result, matrix)


def test_header_layout(tmp_path):
    path = tmp_path / "m.raw"
    write_mat_raw(path, "w", np.zeros((2, 3), dtype=np.float64))
    data = path.read_bytes()
    assert data[:8] == b"IMG_INFO"
    assert int.from_bytes(data[8:12], "little") == 2
    assert int.from_bytes(data[12:16], "little") == 3
    assert data[16:20] == b"FL8B"
    assert len(data) == 20 + 2 * 3 * 8


def test_append_keeps_first_matrix(tmp_path):
    path = tmp_path / "m.raw"
    first = np.ones((2, 2), dtype=np.uint8)
    second = np.full((3, 3), 7, dtype=np.uint8)
    write_mat_raw(path, "w", first)
    write_mat_raw(path, "a", second)
    np.testing.assert_array_equal(read_mat_raw(path), first)
    assert path.stat().st_size == (20 + 4) + (20 + 9)


def test_write_mode_replaces(tmp_path):
    path = tmp_path / "m.raw"
    write_mat_raw(path, "w", np.ones((5, 5), dtype=np.uint8))
    second = np.zeros((1, 1), dtype=np.uint8)
    write_mat_raw(path, "w", second)
    np.testing.assert_array_equal(read_mat_raw(path), second)


def test_unsupported_dtype(tmp_path):
    with pytest.raises(RawMatError):
        write_mat_raw(tmp_path / "m.raw", "w", np.zeros((2, 2), dtype=np.int8))


def test_unsupported_shape(tmp_path):
    with pytest.raises(RawMatError):
        write_mat_raw(tmp_path / "m.raw", "w", np.zeros(4, dtype=np.float32))


def test_bad_mode(tmp_path):
    with pytest.raises(ValueError):
        write_mat_raw(tmp_path / "m.raw", "x", np.zeros((2, 2), dtype=np.float32))


def test_unknown_type_code(tmp_path):
    path = tmp_path / "m.raw"
    path.write_bytes(b"IMG_INFO" + (1).to_bytes(4, "little") * 2 + b"XXXX" + b"\0" * 8)
    with pytest.raises(RawMatError):
        read_mat_raw(path)


def test_truncated_data(tmp_path):
    path = tmp_path / "m.raw"
    write_mat_raw(path, "w", np.zeros((4, 4), dtype=np.float64))
    path.write_bytes(path.read_bytes()[:-1])
    with pytest.raises(RawMatError):
        read_mat_raw(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_mat_raw(tmp_path / "absent.raw")