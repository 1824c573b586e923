import math

import numpy as np
import pytest

from scanpath.analysis import analyse_scan, normal_scan_image, profiles_in_roi
from scanpath.density import profile_densities
from scanpath.trajfile import PointTraj
from scanpath.vector3 import Vector3


def _pose(rpy):
    return PointTraj(Vector3(0, 0, 0), rpy)


def test_normal_scan_image_facing_sensor_is_zero():
    image = normal_scan_image([_pose(Vector3(0, 90, 0))], [Vector3(0, 1, 0)] * 2, 2)
    assert image.shape == (1, 2)
    assert np.allclose(image, 0.0)


def test_normal_scan_image_missing_normal_is_one():
    image = normal_scan_image([_pose(Vector3(0, 90, 0))], [Vector3(0, 0, 0), Vector3(0, 1, 0)], 2)
    assert image[0, 0] == pytest.approx(1.0)


def test_normal_scan_image_folds_orientation():
    normals = [Vector3(0, 0.5, 0.5), Vector3(0, 0.2, 0.9)] * 2
    image = normal_scan_image([_pose(Vector3(0, 60, 0)), _pose(Vector3(3, 120, 5))], normals, 2)
    assert np.allclose(image[0], image[1])
    assert image[0, 0] == pytest.approx(math.cos(math.radians(30)) - 0.5)


def test_normal_scan_image_short_map_raises():
    with pytest.raises(ValueError):
        normal_scan_image([_pose(Vector3(0, 90, 0))] * 2, [Vector3(0, 1, 0)] * 3, 2)


def test_profiles_in_roi():
    cloud = [
        Vector3(0.5, 0.5, 0.5), Vector3(9, 9, 9), Vector3(9, 9, 9), Vector3(9, 9, 9),
        Vector3(9, 9, 9), Vector3(9, 9, 9), Vector3(9, 9, 9), Vector3(9, 9, 9),
    ]
    roi = (Vector3(0, 0, 0), Vector3(1, 1, 1))
    assert profiles_in_roi(2, cloud, 4, roi, 4) == [0]


def test_profiles_in_roi_zero_resolution():
    cloud = [Vector3(0.5, 0.5, 0.5)] * 4
    assert profiles_in_roi(2, cloud, 0, (Vector3(0, 0, 0), Vector3(1, 1, 1)), 2) == []


@pytest.fixture
def scan():
    trajectory = [_pose(Vector3(0, 90, 0)), _pose(Vector3(0, 90, 0))]
    pointcloud = [Vector3(1, 0, 0), Vector3(2, 0, 0), Vector3(0, 0, 0), Vector3(3, 0, 0)]
    normal_map = [Vector3(0, 2, 0), Vector3(0, 0, 3), Vector3(0, 0, 0), Vector3(0, 1, 0)]
    scan_image = [Vector3(0, 0, 10), Vector3(0, 0, 20), Vector3(0, 0, -5), Vector3(0, 0, 0)]
    image = np.array([[0.2, 0.9], [0.4, 0.6]])
    return trajectory, pointcloud, normal_map, scan_image, image


def test_analyse_scan_means(scan):
    trajectory, pointcloud, normal_map, scan_image, image = scan
    result = analyse_scan(trajectory, pointcloud, normal_map, scan_image, image, 2, 1.5)
    assert result.mean_measurements[0] == pytest.approx(15.0)
    assert result.mean_measurements[1] == 0.0
    assert result.mean_scan_normals[0] == pytest.approx(0.2)
    assert result.mean_scan_normals[1] == pytest.approx(0.5)
    assert result.mean_pointcloud[1] == Vector3(3, 0, 0)
    for normal in result.mean_normals:
        assert normal.length() == pytest.approx(1.0)


def test_analyse_scan_densities(scan):
    trajectory, pointcloud, normal_map, scan_image, image = scan
    result = analyse_scan(trajectory, pointcloud, normal_map, scan_image, image, 2, 1.5)
    raw = [profile_densities(pointcloud, pointcloud[i:i + 2], 1.5) for i in (0, 2)]
    assert result.density_map[1][0] == 0
    nonzero = [v for row in raw for v in row if v]
    span = max(nonzero) - min(nonzero)
    assert result.density_map[0][0] * span == pytest.approx(raw[0][0])
    assert result.density_raw.shape == (2, 2)
    assert np.allclose(result.density_raw, np.array(result.density_map))
    assert len(result.mean_density_profiles) == 2