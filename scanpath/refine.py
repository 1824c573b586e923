"""Later refinement passes: intermediate poses and forward-motion clean-up."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from scanpath.analysis import ScanAnalysis
from scanpath.density import group_runs
from scanpath.orientation import (
    fix_rpy_orientation,
    unit_vector_from_rpy,
    update_pos_from_dif_angle,
)
from scanpath.trajfile import PointTraj
from scanpath.vector3 import Vector3, dot_product

NORMAL_SENSOR = Vector3(0.0, 1.0, 0.0)
SCAN_DIR = Vector3(0.0, 0.0, 1.0)

_FAR_POSES = 50.0
_FAR_SCAN = 40.0
_NEAR_MID_SCAN = 15.0
_MIN_ADVANCE_MID = 10.0
_MAX_TILT = 60.0
_BAD_AREA_TILT = 50.0
_BAD_NORMAL_DIFF = 0.3
_MIN_AREA = 5
_MIN_ADVANCE = 5.0
_CLOSE_POSITION = 20.0
_CLOSE_ORIENTATION = 7.0
_MAX_PASSES = 1000


def _find_ids(
    trajectory: Sequence[PointTraj], pos_ini: Vector3, pos_end: Vector3
) -> tuple[int, int]:
    id_ini = id_end = 0
    for index, pose in enumerate(trajectory):
        if pose.position == pos_ini:
            id_ini = index
        elif pose.position == pos_end:
            id_end = index
            break
    return id_ini, id_end


def _last_index(trajectory: Sequence[PointTraj], position: Vector3) -> int:
    found = 0
    for index, pose in enumerate(trajectory):
        if pose.position == position:
            found = index
    return found


def _max_alpha(distance: float, working_distance: float) -> float:
    """Tilt in degrees that moves the beam by ``distance``; capped at 90."""
    return math.degrees(math.asin(min(distance / working_distance, 1.0)))


def _is_stalled(advance: float, minimum: float) -> bool:
    return advance < 0 or abs(advance) < minimum


def refined_poses(
    simple: Sequence[PointTraj],
    trajectory: Sequence[PointTraj],
    analysis: ScanAnalysis,
    roi_flags: Optional[Sequence[int]],
    working_distance: float,
) -> tuple[list[Vector3], list[Vector3], list[int]]:
    """Key poses with intermediate poses added where the scan left gaps.

    Returns positions, orientations and, for each pose, 1 if it looks at the
    region of interest and 0 otherwise.
    """
    if not simple:
        raise ValueError("the simple trajectory is empty")
    count = len(trajectory)
    flags = [int(f) for f in roi_flags] if roi_flags is not None else [0] * count
    cloud = analysis.mean_pointcloud

    positions: list[Vector3] = []
    orientations: list[Vector3] = []
    pose_flags: list[int] = []
    inserted = False

    for current, following in zip(simple, simple[1:]):
        pos_ini, rpy_ini = current.position, current.orientation
        pos_end, rpy_end = following.position, following.orientation
        positions.append(pos_ini)
        orientations.append(rpy_ini)

        id_ini, id_end = _find_ids(trajectory, pos_ini, pos_end)
        pose_flags.append(flags[id_ini])
        if id_end < id_ini:
            id_end = count - 1
        scan_ini = cloud[id_ini]
        dif_scan = cloud[id_end] - scan_ini
        if (pos_end - pos_ini).length() <= _FAR_POSES and dif_scan.length() <= _FAR_SCAN:
            continue

        id_ini, id_end = _find_ids(trajectory, pos_ini, pos_end)
        if id_end == 0:
            id_end = count - 1
        id_mid = id_ini + int((id_end - id_ini) / 2)
        if (cloud[id_mid] - scan_ini).length() < _NEAR_MID_SCAN:
            continue

        pos_mid = trajectory[id_mid].position
        rpy_mid = fix_rpy_orientation(trajectory[id_mid].orientation)
        rpy_aux = fix_rpy_orientation(rpy_end + (rpy_ini - rpy_end) / 2)

        if id_mid - 2 < 0:
            id_mid = 2
        if id_mid + 2 > count - 1:
            id_mid = count - 3
        mean_normal = sum(
            (analysis.mean_normals[j] for j in range(id_mid - 2, id_mid + 2)), Vector3()
        ) / 4
        desf_wd = working_distance - analysis.mean_measurements[id_mid]

        def corrected(reference: Vector3, max_angle: float) -> tuple[Vector3, Vector3]:
            position, orientation = update_pos_from_dif_angle(
                pos_mid, rpy_mid, reference, SCAN_DIR, NORMAL_SENSOR,
                mean_normal, max_angle, working_distance, desf_wd,
            )
            return position, fix_rpy_orientation(orientation)

        new_pos, new_rpy = corrected(rpy_aux, _MAX_TILT)
        if _is_stalled(dot_product(new_pos - pos_ini, SCAN_DIR), _MIN_ADVANCE_MID):
            reach = abs(dot_product(pos_mid - pos_ini, SCAN_DIR)) * 0.1
            new_pos, new_rpy = corrected(rpy_mid, abs(_max_alpha(reach, working_distance)))
        if _is_stalled(dot_product(pos_end - new_pos, SCAN_DIR), _MIN_ADVANCE_MID):
            reach = abs(dot_product(pos_end - pos_mid, SCAN_DIR)) * 0.1
            new_pos, new_rpy = corrected(rpy_mid, abs(_max_alpha(reach, working_distance)))

        positions.append(new_pos)
        orientations.append(new_rpy)
        pose_flags.append(flags[id_mid])
        inserted = True

    positions.append(simple[-1].position)
    orientations.append(simple[-1].orientation)
    pose_flags.append(0)

    bad = [i for i, v in enumerate(analysis.mean_scan_normals) if abs(v) > _BAD_NORMAL_DIFF]
    areas = group_runs(bad, _MIN_AREA) if bad and not inserted else []
    for area in areas:
        id_ini, id_end = area[0], area[-1]
        area_start = cloud[id_ini]
        for j in range(len(positions) - 1):
            seen = cloud[_last_index(trajectory, positions[j])]
            if dot_product(seen - area_start, SCAN_DIR) > 0:
                id_mid = id_ini + (id_end - id_ini) // 2
                pose = trajectory[id_mid]
                rpy_aux = fix_rpy_orientation(pose.orientation)
                new_pos, new_rpy = update_pos_from_dif_angle(
                    pose.position, rpy_aux, rpy_aux, SCAN_DIR, NORMAL_SENSOR,
                    analysis.mean_normals[id_mid], _BAD_AREA_TILT, working_distance,
                )
                positions.insert(j, new_pos)
                orientations.insert(j, new_rpy)
                pose_flags.insert(j, flags[id_mid])
                break

    return positions, orientations, pose_flags


def _leading_position(rpy: Vector3, analysis: ScanAnalysis, working_distance: float) -> Vector3:
    """Pose position aimed at the first scanned point with orientation ``rpy``."""
    direction = unit_vector_from_rpy(rpy.x, rpy.y, rpy.z)
    par_z = abs(direction.x)
    if dot_product(rpy, NORMAL_SENSOR) < 90:
        par_z = -par_z
    parallel = Vector3(abs(direction.y), abs(direction.z), par_z)
    return analysis.mean_pointcloud[0] + working_distance * parallel


def _turns_too_far(advance: float, rpy_ini: Vector3, rpy_end: Vector3, wd: float) -> bool:
    ratio = abs(advance) / wd
    if ratio > 1:
        return False
    turn = abs(dot_product(rpy_end - rpy_ini, NORMAL_SENSOR))
    return turn > math.degrees(math.asin(ratio))


def _forward_without_roi(
    positions: list[Vector3],
    orientations: list[Vector3],
    analysis: ScanAnalysis,
    working_distance: float,
) -> None:
    for _ in range(_MAX_PASSES):
        changes = 0
        i = 0
        while i < len(positions) - 2:
            pos_ini, pos_end = positions[i], positions[i + 1]
            rpy_ini, rpy_end = orientations[i], orientations[i + 1]
            advance = dot_product(pos_end - pos_ini, SCAN_DIR)
            if _is_stalled(advance, _MIN_ADVANCE) or _turns_too_far(
                advance, rpy_ini, rpy_end, working_distance
            ):
                rpy_mid = fix_rpy_orientation((rpy_ini + rpy_end) / 2)
                positions[i] = (pos_ini + pos_end) / 2
                orientations[i] = rpy_mid
                if i + 1 >= len(positions) - 1:
                    i += 1
                    continue
                del positions[i + 1]
                del orientations[i + 1]
                if i == 0:
                    positions.insert(0, _leading_position(rpy_mid, analysis, working_distance))
                    orientations.insert(0, rpy_mid)
                changes += 1
            i += 1
        if not changes:
            return


def _forward_with_roi(
    positions: list[Vector3],
    orientations: list[Vector3],
    flags: list[int],
    analysis: ScanAnalysis,
    working_distance: float,
) -> None:
    def remove(index: int) -> None:
        del positions[index]
        del orientations[index]
        del flags[index]

    def prepend(rpy_mid: Vector3) -> None:
        positions.insert(0, _leading_position(rpy_mid, analysis, working_distance))
        orientations.insert(0, rpy_mid)
        flags.insert(0, 0)

    for _ in range(_MAX_PASSES):
        changes = 0
        i = 0
        while i < len(positions) - 2:
            pos_ini, pos_end = positions[i], positions[i + 1]
            rpy_ini, rpy_end = orientations[i], orientations[i + 1]
            if _is_stalled(dot_product(pos_end - pos_ini, SCAN_DIR), _MIN_ADVANCE):
                rpy_mid = fix_rpy_orientation((rpy_ini + rpy_end) / 2)
                if flags[i + 1] == 1 and flags[i] == 0:
                    remove(i)
                    if i == 0:
                        prepend(rpy_mid)
                elif flags[i + 1] == 0 and flags[i] == 1:
                    remove(i + 1)
                else:
                    positions[i] = (pos_ini + pos_end) / 2
                    orientations[i] = rpy_mid
                    if i + 1 >= len(positions) - 1:
                        i += 1
                        continue
                    remove(i + 1)
                    if i == 0:
                        prepend(rpy_mid)
                changes += 1
            i += 1
        if not changes:
            return


def enforce_forward_motion(
    positions: Sequence[Vector3],
    orientations: Sequence[Vector3],
    roi_flags: Optional[Sequence[int]],
    analysis: ScanAnalysis,
    working_distance: float,
) -> tuple[list[Vector3], list[Vector3], Optional[list[int]]]:
    """Merge poses until the sensor keeps advancing along the scan direction.

    Without region-of-interest flags (``None``) pose pairs that turn faster than
    they advance are merged as well. Returns the poses and the updated flags.
    """
    positions = list(positions)
    orientations = list(orientations)
    if len(positions) != len(orientations):
        raise ValueError("positions and orientations differ in length")
    if roi_flags is None:
        _forward_without_roi(positions, orientations, analysis, working_distance)
        return positions, orientations, None
    flags = [int(f) for f in roi_flags]
    if len(flags) != len(positions):
        raise ValueError("there must be one region-of-interest flag per pose")
    _forward_with_roi(positions, orientations, flags, analysis, working_distance)
    return positions, orientations, flags


def merge_close_poses(
    positions: Sequence[Vector3], orientations: Sequence[Vector3]
) -> tuple[list[Vector3], list[Vector3]]:
    """Drop poses that are both near the next pose and oriented like it."""
    positions = list(positions)
    orientations = list(orientations)
    if len(positions) != len(orientations):
        raise ValueError("positions and orientations differ in length")
    changes = 1
    while changes:
        changes = 0
        i = 0
        while i < len(positions) - 1:
            if (
                (positions[i] - positions[i + 1]).length() < _CLOSE_POSITION
                and (orientations[i] - orientations[i + 1]).length() < _CLOSE_ORIENTATION
            ):
                del positions[i]
                del orientations[i]
                changes += 1
            i += 1
    return positions, orientations