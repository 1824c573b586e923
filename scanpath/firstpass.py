"""Sensor poses for the first refinement pass over a scanned trajectory."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from scanpath.analysis import ScanAnalysis
from scanpath.density import group_runs
from scanpath.orientation import fix_rpy_orientation
from scanpath.trajfile import PointTraj
from scanpath.vector3 import Vector3, dot_product

logger = logging.getLogger(__name__)

NORMAL_SENSOR = Vector3(0.0, 1.0, 0.0)
SCAN_DIR = Vector3(0.0, 0.0, 1.0)

_SIDE_OFFSET = Vector3(10.0, 0.0, 0.0)
_NORMAL_GAP = 0.5
_MIN_AREA = 5
_WINDOW = 10
_STEEP_ANGLE = 50.0
_STEEP_RELIEF = 10.0
_SIMILAR_ORIENTATION = 5.0


def low_density_areas(
    analysis: ScanAnalysis, normal_sensor: Vector3 = NORMAL_SENSOR
) -> list[list[int]]:
    """Runs of at least five consecutive profiles whose mean normal is far from the sensor's."""
    ids = [
        index
        for index, (density, normal) in enumerate(
            zip(analysis.mean_density_profiles, analysis.mean_normals)
        )
        if density != 0 and (normal_sensor - normal).length() > _NORMAL_GAP
    ]
    return group_runs(ids, _MIN_AREA)


def _surface_angle(normal: Vector3, normal_sensor: Vector3, scan_dir: Vector3) -> float:
    """Signed angle in degrees between the sensor normal and a surface normal."""
    unit_normal = normal.normalized()
    cosine = max(-1.0, min(1.0, dot_product(normal_sensor, unit_normal)))
    angle = math.degrees(math.acos(cosine))
    if dot_product(scan_dir, unit_normal) < 0:
        angle = -angle
    return angle


def _pose_for_angle(
    position: Vector3,
    orientation: Vector3,
    angle: float,
    desf_wd: float,
    working_distance: float,
) -> tuple[Vector3, Vector3]:
    inc_x = working_distance * math.sin(math.radians(angle))
    chord = 2 * working_distance * math.sin(math.radians(angle / 2))
    inc_y = math.sqrt(max(chord * chord - inc_x * inc_x, 0.0))
    new_position = Vector3(
        position.x + _SIDE_OFFSET.x,
        position.y + desf_wd - inc_y,
        position.z + inc_x,
    )
    new_orientation = Vector3(orientation.x, 90 + angle, orientation.z)
    return new_position, new_orientation


def tilted_pose(
    position: Vector3,
    orientation: Vector3,
    mean_normal: Vector3,
    mean_measurement: float,
    working_distance: float,
    normal_sensor: Vector3 = NORMAL_SENSOR,
    scan_dir: Vector3 = SCAN_DIR,
) -> tuple[Vector3, Vector3]:
    """Pose that faces ``mean_normal`` at the working distance.

    Returns the new position and the orientation with its pitch replaced.
    """
    angle = _surface_angle(mean_normal, normal_sensor, scan_dir)
    desf_wd = working_distance - mean_measurement
    return _pose_for_angle(position, orientation, angle, desf_wd, working_distance)


def _window_normal(normals: Sequence[Vector3], id_ini: int, id_end: int) -> Vector3:
    start = max(id_ini - _WINDOW, 0)
    stop = min(id_ini + _WINDOW, id_end)
    if stop <= start:
        return Vector3()
    return sum(normals[start:stop], Vector3()) / (stop - start)


def _node_ids(areas: Sequence[Sequence[int]], length: int) -> list[int]:
    nodes = [0]
    for area in areas:
        nodes.extend((area[0], area[-1]))
    nodes.append(length - 1)
    return nodes


def first_iteration_poses(
    trajectory: Sequence[PointTraj],
    analysis: ScanAnalysis,
    roi_ids: Optional[Sequence[int]],
    working_distance: float,
) -> tuple[list[Vector3], list[Vector3]]:
    """Key poses of the first pass; ``roi_ids`` lists profiles inside the region of interest.

    Pass ``None`` for ``roi_ids`` when no region of interest is set.
    """
    if not trajectory:
        raise ValueError("the trajectory is empty")
    areas = low_density_areas(analysis, NORMAL_SENSOR)
    logger.info("low density areas: %d", len(areas))
    nodes = _node_ids(areas, len(trajectory))

    positions: list[Vector3] = []
    orientations: list[Vector3] = []

    def window_pose(id_ini: int, id_end: int) -> None:
        mean_normal = _window_normal(analysis.mean_normals, id_ini, id_end)
        pose = trajectory[id_ini]
        position, orientation = tilted_pose(
            pose.position,
            pose.orientation,
            mean_normal,
            analysis.mean_measurements[id_ini],
            working_distance,
        )
        positions.append(position)
        orientations.append(orientation)

    for id_ini, id_end in zip(nodes, nodes[1:]):
        if roi_ids is None:
            window_pose(id_ini, id_end)
            continue
        for roi_id in roi_ids:
            if id_ini < roi_id < id_end:
                pose = trajectory[roi_id]
                angle = _surface_angle(analysis.mean_normals[roi_id], NORMAL_SENSOR, SCAN_DIR)
                if angle > _STEEP_ANGLE:
                    angle -= _STEEP_RELIEF
                if angle < -_STEEP_ANGLE:
                    angle += _STEEP_RELIEF
                desf_wd = working_distance - analysis.mean_measurements[roi_id]
                position, orientation = _pose_for_angle(
                    pose.position,
                    fix_rpy_orientation(pose.orientation),
                    angle,
                    desf_wd,
                    working_distance,
                )
                positions.append(position)
                orientations.append(orientation)
            else:
                window_pose(id_ini, id_end)
                break

    last = trajectory[-1]
    desf_wd = working_distance - analysis.mean_measurements[len(trajectory) - 1]
    positions.append(last.position + _SIDE_OFFSET + desf_wd * NORMAL_SENSOR)
    orientations.append(last.orientation)
    return positions, orientations


def thin_first_iteration(
    positions: Sequence[Vector3], orientations: Sequence[Vector3]
) -> tuple[list[Vector3], list[Vector3]]:
    """Drop the inner poses of the first run of similar orientations, keeping its middle."""
    if len(positions) != len(orientations):
        raise ValueError("positions and orientations differ in length")
    positions = list(positions)
    orientations = list(orientations)

    start = end = 0
    found_start = found_end = False
    for index, (current, following) in enumerate(zip(orientations, orientations[1:])):
        if (current - following).length() < _SIMILAR_ORIENTATION:
            if not found_start:
                start = index
            found_start = True
        elif found_start and not found_end:
            end = index
            found_end = True

    middle = (start + end) // 2
    for index in range(end - 1, start, -1):
        if index == middle:
            continue
        del positions[index]
        del orientations[index]
    return positions, orientations