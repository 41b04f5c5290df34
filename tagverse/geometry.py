"""
Vector math for the tag arena.

Positions live in 3D space, but agents move on the horizontal x/z plane:
strategies carry ``y`` through unchanged and compute directions from the
x/z components only. Distances (tag checks, thresholds) use all three
axes.

All helpers are pure. Degenerate inputs (zero-length vectors) resolve to a
policy default instead of raising: ``direction_to`` returns the zero vector
and ``escape_direction`` picks a random heading.
"""

from __future__ import annotations

import math
import random
from typing import Optional

from pydantic import BaseModel, ConfigDict

EPSILON = 1e-9


class Vector3(BaseModel):
    """Immutable 3D vector."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(x=0.0, y=0.0, z=0.0)

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def sub(self, other: "Vector3") -> "Vector3":
        return Vector3(x=self.x - other.x, y=self.y - other.y, z=self.z - other.z)

    def scale(self, factor: float) -> "Vector3":
        return Vector3(x=self.x * factor, y=self.y * factor, z=self.z * factor)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Unit vector in the same direction; the zero vector stays zero."""

        magnitude = self.length()
        if magnitude < EPSILON:
            return Vector3.zero()
        return self.scale(1.0 / magnitude)

    def distance_to(self, other: "Vector3") -> float:
        return self.sub(other).length()

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


def distance(a: Vector3, b: Vector3) -> float:
    """Euclidean distance across all three axes."""

    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def planar_distance(a: Vector3, b: Vector3) -> float:
    """Distance on the x/z movement plane."""

    dx = a.x - b.x
    dz = a.z - b.z
    return math.sqrt(dx * dx + dz * dz)


def direction_to(origin: Vector3, target: Vector3) -> Vector3:
    """Planar unit vector from ``origin`` toward ``target``.

    Returns the zero vector when both points share the same x/z location.
    """

    dx = target.x - origin.x
    dz = target.z - origin.z
    length = math.sqrt(dx * dx + dz * dz)
    if length == 0:
        return Vector3.zero()
    return Vector3(x=dx / length, y=0.0, z=dz / length)


def escape_direction(
    origin: Vector3, threat: Vector3, rng: Optional[random.Random] = None
) -> Vector3:
    """Planar unit vector pointing away from ``threat``.

    When the two points coincide there is no "away", so a uniformly random
    heading is chosen. The result is always a unit vector.
    """

    dx = origin.x - threat.x
    dz = origin.z - threat.z
    length = math.sqrt(dx * dx + dz * dz)
    if length == 0:
        angle = (rng or random).random() * math.pi * 2
        return Vector3(x=math.cos(angle), y=0.0, z=math.sin(angle))
    return Vector3(x=dx / length, y=0.0, z=dz / length)


def step_along(origin: Vector3, direction: Vector3, amount: float) -> Vector3:
    """Move ``origin`` along a planar direction, keeping its height."""

    return Vector3(
        x=origin.x + direction.x * amount,
        y=origin.y,
        z=origin.z + direction.z * amount,
    )


def random_point_in_range(
    center: Vector3, radius: float, rng: Optional[random.Random] = None
) -> Vector3:
    """Uniform-angle random point within ``radius`` of ``center`` on the x/z plane."""

    source = rng or random
    angle = source.random() * math.pi * 2
    reach = source.random() * radius
    return Vector3(
        x=center.x + math.cos(angle) * reach,
        y=center.y,
        z=center.z + math.sin(angle) * reach,
    )


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
