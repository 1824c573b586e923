"""Three-component double precision vector."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Iterator


@dataclass(frozen=True)
class Vector3:
    """An immutable 3D vector with arithmetic operators."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: object) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: object) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, other: object) -> Vector3:
        """Scale by a number, or multiply component-wise by another vector."""
        if isinstance(other, Vector3):
            return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)
        if isinstance(other, Real):
            factor = float(other)
            return Vector3(self.x * factor, self.y * factor, self.z * factor)
        return NotImplemented

    def __rmul__(self, other: object) -> Vector3:
        if isinstance(other, Real):
            return self * other
        return NotImplemented

    def __truediv__(self, divisor: object) -> Vector3:
        if not isinstance(divisor, Real):
            return NotImplemented
        d = float(divisor)
        return Vector3(self.x / d, self.y / d, self.z / d)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalized(self) -> Vector3:
        """Unit vector in the same direction; the zero vector stays zero."""
        n = self.length()
        if n == 0.0:
            return Vector3()
        return Vector3(self.x / n, self.y / n, self.z / n)

    def abs(self) -> Vector3:
        return Vector3(math.fabs(self.x), math.fabs(self.y), math.fabs(self.z))

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


def dot_product(v1: Vector3, v2: Vector3) -> float:
    return v1.x * v2.x + v1.y * v2.y + v1.z * v2.z


def cross_product(v1: Vector3, v2: Vector3) -> Vector3:
    return Vector3(
        v1.y * v2.z - v1.z * v2.y,
        v1.z * v2.x - v1.x * v2.z,
        v1.x * v2.y - v1.y * v2.x,
    )