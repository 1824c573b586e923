"""Trajectory XML documents and plain-text point files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Sequence, Union
from xml.sax.saxutils import escape

from scanpath.vector3 import Vector3

PathArg = Union[str, PathLike]
_INDENT = "    "


@dataclass(frozen=True)
class PointTraj:
    """One trajectory pose: a position and a roll-pitch-yaw orientation."""

    position: Vector3
    orientation: Vector3


@dataclass
class TrajectoryDocument:
    """The contents of a trajectory XML file."""

    points: list[PointTraj] = field(default_factory=list)
    fps: float = 0.0
    velocity: float = 0.0
    fov: float = 0.0
    resolution: int = 0
    uncertainty: float = 0.0


def _to_float(token: str) -> float:
    try:
        return float(token.strip())
    except ValueError:
        return 0.0


def _to_int(token: str) -> int:
    try:
        return int(token.strip())
    except ValueError:
        return 0


def parse_numbers(text: str) -> list[float]:
    """Parse numbers separated by single spaces or commas; empty fields read as 0."""
    cleaned = text.replace("[", "").replace("]", "").replace(",", " ")
    return [_to_float(token) for token in cleaned.split(" ")]


def parse_numbers_compact(text: str) -> list[float]:
    """Parse numbers separated by single spaces, dropping commas first."""
    cleaned = text.replace("[", "").replace("]", "").replace(",", "")
    return [_to_float(token) for token in cleaned.split(" ")]


def _number(value: float) -> str:
    return f"{value:g}"


def _triple(vector: Vector3) -> str:
    return f"{_number(vector.x)}, {_number(vector.y)}, {_number(vector.z)}"


def _text_element(tag: str, text: str, depth: int) -> str:
    return f"{_INDENT * depth}<{tag}>{escape(text)}</{tag}>"


def _list_element(tag: str, item_tag: str, vectors: Sequence[Vector3]) -> list[str]:
    if not vectors:
        return [f"{_INDENT}<{tag}/>"]
    lines = [f"{_INDENT}<{tag}>"]
    lines.extend(_text_element(item_tag, _triple(v), 2) for v in vectors)
    lines.append(f"{_INDENT}</{tag}>")
    return lines


def save_trajectory(
    directory: PathArg,
    file_name: str,
    positions: Sequence[Vector3],
    orientations: Sequence[Vector3],
    fps: float,
    velocity: float,
    fov: float,
    resolution: int,
    uncertainty: float,
    complete: bool = True,
) -> Path:
    """Write a trajectory file into ``directory`` and return its path.

    A complete file holds every pose and the scan parameters; otherwise only a
    ``Step`` element from the first to the last position is written.
    """
    folder = Path(directory)
    if not folder.exists():
        folder.mkdir()
    target = folder / file_name

    if complete:
        lines = ['<?xml version="1.0" encoding="UTF-8"?>', "<TRAJECTORY>"]
        lines += _list_element("POSITION", "XYZ", positions)
        lines += _list_element("RPYdata", "RPY", orientations)
        lines += [
            _text_element("FPS", _number(fps), 1),
            _text_element("Velocity", _number(velocity), 1),
            _text_element("FOV", _number(fov), 1),
            _text_element("Resolution", str(int(resolution)), 1),
            _text_element("Uncertainty", _number(uncertainty), 1),
            "</TRAJECTORY>",
        ]
    else:
        if not positions:
            raise ValueError("a step needs at least one position")
        lines = [
            "<Step>",
            _text_element("From", f"[{_triple(positions[0])}]", 1),
            _text_element("To", f"[{_triple(positions[-1])}]", 1),
            _text_element("Line", "[0,0,0,0]", 1),
            "</Step>",
        ]
    target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return target


def _vector_from(text: str | None) -> Vector3:
    values = parse_numbers_compact(text or "")
    if len(values) < 3:
        raise ValueError(f"expected three numbers, got {text!r}")
    return Vector3(values[0], values[1], values[2])


def _leading_children(element: ET.Element, tag: str) -> list[ET.Element]:
    items = []
    for child in element:
        if child.tag != tag:
            break
        items.append(child)
    return items


def load_trajectory(path: PathArg) -> TrajectoryDocument:
    """Read a trajectory XML file written by :func:`save_trajectory`."""
    root = ET.parse(Path(path)).getroot()
    document = TrajectoryDocument()
    positions: list[Vector3] = []
    orientations: list[Vector3] = []
    for child in root:
        text = child.text or ""
        if child.tag == "POSITION":
            positions.extend(_vector_from(e.text) for e in _leading_children(child, "XYZ"))
        elif child.tag == "RPYdata":
            orientations.extend(_vector_from(e.text) for e in _leading_children(child, "RPY"))
        elif child.tag == "FPS":
            document.fps = _to_float(text)
        elif child.tag == "Velocity":
            document.velocity = _to_float(text)
        elif child.tag == "FOV":
            document.fov = _to_float(text)
        elif child.tag == "Resolution":
            document.resolution = _to_int(text)
        elif child.tag == "Uncertainty":
            document.uncertainty = _to_float(text)
    if len(orientations) < len(positions):
        raise ValueError("the trajectory has fewer orientations than positions")
    document.points = [PointTraj(p, o) for p, o in zip(positions, orientations)]
    return document


def read_point_file(path: PathArg) -> list[Vector3]:
    """Read one point per line from a text file; blank lines are skipped."""
    points = []
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            if not line.strip():
                continue
            values = parse_numbers(line)
            if len(values) < 3:
                raise ValueError(f"expected three numbers, got {line!r}")
            points.append(Vector3(values[0], values[1], values[2]))
    return points