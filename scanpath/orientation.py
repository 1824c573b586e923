"""Roll-pitch-yaw helpers and pose correction for the trajectory generator."""

from __future__ import annotations

import math

import numpy as np

from scanpath.vector3 import Vector3, dot_product


def deg2rad(degrees: float) -> float:
    return degrees * math.pi / 180.0


def rpy_to_rotation_matrix(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Rotation matrix ``R_yaw @ R_pitch @ R_roll`` for angles in degrees."""
    r, p, y = deg2rad(roll), deg2rad(pitch), deg2rad(yaw)
    r_roll = np.array(
        [[1.0, 0.0, 0.0], [0.0, math.cos(r), -math.sin(r)], [0.0, math.sin(r), math.cos(r)]]
    )
    r_pitch = np.array(
        [[math.cos(p), 0.0, math.sin(p)], [0.0, 1.0, 0.0], [-math.sin(p), 0.0, math.cos(p)]]
    )
    r_yaw = np.array(
        [[math.cos(y), -math.sin(y), 0.0], [math.sin(y), math.cos(y), 0.0], [0.0, 0.0, 1.0]]
    )
    return r_yaw @ r_pitch @ r_roll


def unit_vector_from_rpy(roll: float, pitch: float, yaw: float) -> Vector3:
    """First column of the RPY rotation matrix."""
    column = rpy_to_rotation_matrix(roll, pitch, yaw)[:, 0]
    return Vector3(*(float(c) for c in column))


def perpendicular_vector_from_rpy(roll: float, pitch: float, yaw: float) -> Vector3:
    """Third column of the RPY rotation matrix."""
    column = rpy_to_rotation_matrix(roll, pitch, yaw)[:, 2]
    return Vector3(*(float(c) for c in column))


def calculate_displacement(angle_deg: float, distance: float) -> tuple[float, float]:
    """Displacements along and across the beam after tilting by ``angle_deg``."""
    angle = angle_deg / 180.0 * math.pi
    return distance * math.sin(angle), distance * (1 - math.cos(angle))


def fix_rpy_orientation(rpy: Vector3) -> Vector3:
    """Fold a roll-pitch-yaw triple so only the pitch (y) component remains."""
    x, y, z = rpy.x, rpy.y, rpy.z
    if z != 0:
        y = 180 - rpy.y
        z = 0.0
    if x != 0:
        x = 0.0
    return Vector3(x, y, z)


def update_pos_from_dif_angle(
    pos_ini: Vector3,
    rpy_ini: Vector3,
    rpy_aux: Vector3,
    scan_dir: Vector3,
    normal_sensor: Vector3,
    surface_normal: Vector3,
    max_angle: float,
    working_distance: float,
    desf_wd: float = 0.0,
) -> tuple[Vector3, Vector3]:
    """Tilt a pose towards a surface normal, limited to ``max_angle`` degrees.

    Returns the updated position and orientation.
    """
    unit_normal = surface_normal.normalized()
    cosine = max(-1.0, min(1.0, dot_product(normal_sensor, unit_normal)))
    angle_degrees = math.degrees(math.acos(cosine))
    if dot_product(scan_dir, unit_normal) < 0:
        angle_degrees = -angle_degrees

    dif_angle = -(rpy_aux.y - (90 + angle_degrees))
    dif_angle = max(-max_angle, min(max_angle, dif_angle))

    increment_x, increment_y = calculate_displacement(dif_angle, working_distance)

    rpy_updated = fix_rpy_orientation(rpy_ini + Vector3(0.0, dif_angle, 0.0))

    direction = unit_vector_from_rpy(rpy_updated.x, rpy_updated.y, rpy_updated.z)
    par_x, par_y, par_z = abs(direction.y), abs(direction.z), abs(direction.x)

    alignment = dot_product(rpy_updated, normal_sensor)
    if alignment < 90:
        par_z = -par_z
    parallel = Vector3(par_x, par_y, par_z)

    perp_y, perp_z = abs(par_z), abs(par_y)
    if alignment > 90:
        if dif_angle > 0:
            perp_y = -perp_y
        else:
            perp_z = -perp_z
    elif alignment < 90 and dif_angle < 0:
        perp_y = -perp_y
        perp_z = -perp_z
    perpendicular = Vector3(0.0, perp_y, perp_z)

    pos_updated = (
        pos_ini
        + abs(increment_x) * perpendicular
        + abs(increment_y) * parallel
        + desf_wd * parallel
    )
    return pos_updated, rpy_updated