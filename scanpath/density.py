"""Point-density estimation over scanned point clouds."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Union

import numpy as np

from scanpath.vector3 import Vector3

Cloud = Union[Sequence[Vector3], np.ndarray]


def _as_array(points: Cloud) -> np.ndarray:
    if isinstance(points, np.ndarray):
        return points.reshape(-1, 3).astype(float, copy=False)
    if len(points) == 0:
        return np.zeros((0, 3))
    return np.array([(p.x, p.y, p.z) for p in points], dtype=float)


def _neighbors(cloud: np.ndarray, center: Vector3, radius: float) -> np.ndarray:
    nonzero = np.any(cloud != 0.0, axis=1)
    offsets = cloud - np.array([center.x, center.y, center.z])
    squared = np.einsum("ij,ij->i", offsets, offsets)
    return np.flatnonzero(nonzero & (squared <= radius * radius))


def find_neighbors_in_radius(point_cloud: Cloud, center: Vector3, radius: float) -> list[int]:
    """Indices of the non-zero points within ``radius`` of ``center``, in ascending order."""
    return [int(i) for i in _neighbors(_as_array(point_cloud), center, radius)]


def find_min_max_excluding_zero(values: Iterable[Iterable[float]]) -> tuple[float, float]:
    """Smallest and largest non-zero value; ``(0.0, 0.0)`` when every value is zero."""
    nonzero = [v for row in values for v in row if v != 0]
    if not nonzero:
        return 0.0, 0.0
    return min(nonzero), max(nonzero)


def profile_densities(pointcloud: Cloud, profile: Sequence[Vector3], radius: float) -> list[float]:
    """Number of cloud neighbours of each profile point; zero points get density 0."""
    cloud = _as_array(pointcloud)
    densities = []
    for point in profile:
        if point == Vector3(0.0, 0.0, 0.0):
            densities.append(0.0)
        else:
            densities.append(float(len(_neighbors(cloud, point, radius))))
    return densities


def _divide(value: float, divisor: float) -> float:
    if divisor == 0:
        return math.copysign(math.inf, value)
    return value / divisor


def normalize_density_map(
    density_map: Sequence[Sequence[float]],
) -> tuple[list[list[float]], list[float]]:
    """Scale non-zero densities by the span of the non-zero values.

    Returns the scaled map and the mean of the non-zero scaled values of each
    profile (0 for a profile without any).
    """
    low, high = find_min_max_excluding_zero(density_map)
    span = high - low
    scaled_map: list[list[float]] = []
    means: list[float] = []
    for row in density_map:
        scaled = [0.0 if v == 0 else _divide(v, span) for v in row]
        kept = [v for v, original in zip(scaled, row) if original != 0]
        means.append(sum(kept) / max(len(kept), 1))
        scaled_map.append(scaled)
    return scaled_map, means


def group_runs(ids: Sequence[int], min_size: int) -> list[list[int]]:
    """Split sorted ids into runs of consecutive values, keeping runs of at least ``min_size``."""
    runs: list[list[int]] = []
    if not ids:
        return runs
    current = [ids[0]]
    for previous, following in zip(ids, ids[1:]):
        if following - previous < 2:
            current.append(following)
        else:
            if len(current) >= min_size:
                runs.append(current)
            current = [following]
    if len(current) >= min_size:
        runs.append(current)
    return runs


def in_box(point: Vector3, min_pos: Vector3, max_pos: Vector3) -> bool:
    """Whether ``point`` lies inside the axis-aligned box, boundaries included."""
    return (
        min_pos.x <= point.x <= max_pos.x
        and min_pos.y <= point.y <= max_pos.y
        and min_pos.z <= point.z <= max_pos.z
    )