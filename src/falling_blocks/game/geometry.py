from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Offset:
    """Signed integer pair used for grid coordinates and piece-relative cells."""

    x: int
    y: int

    def __add__(self, other: "Offset") -> "Offset":
        return Offset(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Offset") -> "Offset":
        return Offset(self.x - other.x, self.y - other.y)


def add(a: Offset, b: Offset) -> Offset:
    return a + b


def subtract(a: Offset, b: Offset) -> Offset:
    return a - b


ORIGIN = Offset(0, 0)
DOWN = Offset(0, 1)
LEFT = Offset(-1, 0)
RIGHT = Offset(1, 0)
