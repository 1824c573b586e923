"""Per-profile statistics of a previous scan."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from scanpath.density import in_box, normalize_density_map, profile_densities
from scanpath.orientation import fix_rpy_orientation
from scanpath.trajfile import PointTraj
from scanpath.vector3 import Vector3

_SCAN_NORMAL_LIMIT = 0.8


@dataclass
class ScanAnalysis:
    """Statistics of every profile of a scan, in trajectory order."""

    mean_scan_normals: list[float]
    mean_normals: list[Vector3]
    mean_measurements: list[float]
    mean_pointcloud: list[Vector3]
    density_map: list[list[float]]
    mean_density_profiles: list[float]
    density_raw: np.ndarray


def normal_scan_image(
    trajectory: Sequence[PointTraj],
    normal_map: Sequence[Vector3],
    points_per_profile: int,
) -> np.ndarray:
    """Difference between the sensor's normal and the surface normals, one row per profile.

    Points without a surface normal get the value 1.
    """
    image = np.zeros((len(trajectory), points_per_profile))
    for row, pose in enumerate(trajectory):
        start = points_per_profile * row
        normals = normal_map[start:start + points_per_profile]
        if len(normals) < points_per_profile:
            raise ValueError(f"normal map has too few normals for profile {row}")
        rpy = fix_rpy_orientation(pose.orientation)
        angle = abs(90 - rpy.y)
        sensor_y = math.cos(angle / 180 * math.pi)
        for col, normal in enumerate(normals):
            if normal == Vector3(0.0, 0.0, 0.0):
                image[row, col] = 1.0 - normal.y
            else:
                image[row, col] = sensor_y - normal.y
    return image


def profiles_in_roi(
    trajectory_length: int,
    pointcloud: Sequence[Vector3],
    resolution: float,
    roi: tuple[Vector3, Vector3],
    points_per_profile: int,
) -> list[int]:
    """Indices of the profiles with more than a tenth of their points inside ``roi``."""
    min_pos, max_pos = roi
    threshold = resolution / 10
    ids = []
    for profile in range(trajectory_length):
        start = points_per_profile * profile
        points = pointcloud[start:start + points_per_profile][: int(resolution)]
        inside = sum(1 for point in points if in_box(point, min_pos, max_pos))
        if inside > threshold:
            ids.append(profile)
    return ids


def analyse_scan(
    trajectory: Sequence[PointTraj],
    pointcloud: Sequence[Vector3],
    normal_map: Sequence[Vector3],
    scan_image: Sequence[Vector3],
    normal_scan_image: np.ndarray,
    points_per_profile: int,
    radius: float = 3.0,
) -> ScanAnalysis:
    """Compute mean normals, measurements, points and densities of every profile."""
    scan_normals = np.asarray(normal_scan_image, dtype=float)
    cloud = np.array([(p.x, p.y, p.z) for p in pointcloud], dtype=float).reshape(-1, 3)

    mean_scan_normals: list[float] = []
    mean_normals: list[Vector3] = []
    mean_measurements: list[float] = []
    mean_pointcloud: list[Vector3] = []
    densities: list[list[float]] = []

    for profile in range(len(trajectory)):
        kept = [v for v in scan_normals[profile] if v <= _SCAN_NORMAL_LIMIT]
        mean_scan_normals.append(float(sum(kept)) / max(len(kept), 1))

        start = points_per_profile * profile
        stop = start + points_per_profile
        points = list(pointcloud[start:stop])
        normals = normal_map[start:stop]
        measurements = scan_image[start:stop]

        normal_sum = Vector3()
        point_sum = Vector3()
        with_normal = 0
        for point, normal in zip(points, normals):
            if normal.length() > 0:
                normal_sum += normal
                point_sum += point
                with_normal += 1
        depths = [m.z for m in measurements if m.z > 0]

        with_normal = max(with_normal, 1)
        mean_normals.append((normal_sum / with_normal).normalized())
        mean_pointcloud.append(point_sum / with_normal)
        mean_measurements.append(sum(depths) / max(len(depths), 1))

        densities.append(profile_densities(cloud, points, radius))

    density_map, mean_density_profiles = normalize_density_map(densities)

    density_raw = np.zeros((len(trajectory), points_per_profile))
    for row, values in enumerate(density_map):
        count = min(len(values), points_per_profile)
        density_raw[row, :count] = values[:count]

    return ScanAnalysis(
        mean_scan_normals=mean_scan_normals,
        mean_normals=mean_normals,
        mean_measurements=mean_measurements,
        mean_pointcloud=mean_pointcloud,
        density_map=density_map,
        mean_density_profiles=mean_density_profiles,
        density_raw=density_raw,
    )