import math

import numpy as np
import pytest

from scanpath.density import (
    find_min_max_excluding_zero,
    find_neighbors_in_radius,
    group_runs,
    in_box,
    normalize_density_map,
    profile_densities,
)
from scanpath.vector3 import Vector3


CLOUD = [
    Vector3(0, 0, 0),
    Vector3(1, 0, 0),
    Vector3(0, 2, 0),
    Vector3(5, 5, 5),
]


def test_neighbors_exclude_zero_points_and_include_boundary():
    assert find_neighbors_in_radius(CLOUD, Vector3(0, 0, 0), 2) == [1, 2]


def test_neighbors_accept_numpy_array():
    array = np.array([p.to_tuple() for p in CLOUD])
    assert find_neighbors_in_radius(array, Vector3(5, 5, 5), 0.5) == [3]


def test_neighbors_are_within_radius():
    center = Vector3(0.5, 0.5, 0)
    for index in find_neighbors_in_radius(CLOUD, center, 1.8):
        assert (CLOUD[index] - center).length() <= 1.8


def test_min_max_excluding_zero():
    assert find_min_max_excluding_zero([[0, 3, 1], [5, 0]]) == (1, 5)


@pytest.mark.parametrize("values", [[[0, 0], [0]], [], [[]]])
def test_min_max_all_zero(values):
    assert find_min_max_excluding_zero(values) == (0.0, 0.0)


def test_profile_densities_zero_point_has_no_density():
    densities = profile_densities(CLOUD, [Vector3(0, 0, 0), Vector3(1, 0, 0)], 2.0)
    assert densities[0] == 0.0
    assert densities[1] == float(len(find_neighbors_in_radius(CLOUD, Vector3(1, 0, 0), 2.0)))


def test_profile_densities_count_the_point_itself():
    assert profile_densities(CLOUD, [Vector3(5, 5, 5)], 0.1) == [1.0]


def test_normalize_density_map_invariants():
    original = [[2.0, 4.0], [0.0, 6.0], [0.0, 0.0]]
    scaled, means = normalize_density_map(original)
    low, high = find_min_max_excluding_zero(original)
    span = high - low
    for row_in, row_out in zip(original, scaled):
        for value_in, value_out in zip(row_in, row_out):
            if value_in == 0:
                assert value_out == 0
            else:
                assert value_out * span == pytest.approx(value_in)
    assert means[2] == 0
    assert means[1] == pytest.approx(scaled[1][1])
    assert len(means) == len(original)


def test_normalize_density_map_zero_span_gives_infinity():
    scaled, means = normalize_density_map([[3.0, 0.0]])
    assert math.isinf(scaled[0][0])
    assert scaled[0][1] == 0
    assert math.isinf(means[0])


def test_group_runs_keeps_long_runs():
    ids = [1, 2, 3, 4, 5, 8, 9, 20, 21, 22, 23, 24, 25]
    assert group_runs(ids, 5) == [[1, 2, 3, 4, 5], [20, 21, 22, 23, 24, 25]]


def test_group_runs_drops_short_runs():
    assert group_runs([1, 2, 3, 4, 10], 5) == []


def test_group_runs_empty():
    assert group_runs([], 5) == []


def test_in_box_inclusive():
    low, high = Vector3(0, 0, 0), Vector3(1, 1, 1)
    assert in_box(Vector3(1, 0, 0.5), low, high)
    assert in_box(low, low, high)
    assert not in_box(Vector3(1.01, 0.5, 0.5), low, high)
    assert not in_box(Vector3(0.5, -0.1, 0.5), low, high)