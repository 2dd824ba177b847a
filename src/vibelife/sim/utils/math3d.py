from __future__ import annotations

import math
from dataclasses import dataclass

from pygame.math import Vector2, Vector3


@dataclass(slots=True)
class Position:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_vector(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)

    def distance(self, other: "Position") -> float:
        return self.as_vector().distance_to(other.as_vector())

    def translated(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Position":
        return Position(self.x + dx, self.y + dy, self.z + dz)


def distance(a: Position, b: Position) -> float:
    return a.distance(b)


def _ground_offset(angle: float, length: float) -> Vector2:
    # x/z plane; the returned vector's y component maps onto world z.
    return Vector2(math.cos(angle) * length, math.sin(angle) * length)


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _clamp_unit(value: float) -> float:
    return _clamp_value(float(value), 0.0, 1.0)
