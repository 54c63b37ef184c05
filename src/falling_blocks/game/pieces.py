from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Protocol, Tuple

from .geometry import Offset


class PieceKind(IntEnum):
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


class RandomSource(Protocol):
    """Uniform integer source; ``random.Random`` satisfies it."""

    def randrange(self, stop: int) -> int:  # pragma: no cover - protocol
        ...


Cells = Tuple[Offset, ...]


def _cells(*pairs: Tuple[int, int]) -> Cells:
    return tuple(Offset(x, y) for x, y in pairs)


# Pivot-relative offsets, y grows downward. Every shape has exactly 4 cells.
SHAPES: Dict[PieceKind, Cells] = {
    PieceKind.I: _cells((0, -2), (0, -1), (0, 0), (0, 1)),
    PieceKind.J: _cells((0, -1), (0, 0), (0, 1), (-1, 1)),
    PieceKind.L: _cells((0, -1), (0, 0), (0, 1), (1, 0)),
    PieceKind.O: _cells((0, -1), (1, -1), (1, 0), (0, 0)),
    PieceKind.S: _cells((-1, 0), (0, 0), (0, -1), (1, -1)),
    PieceKind.T: _cells((-1, 0), (0, 0), (1, 0), (0, -1)),
    PieceKind.Z: _cells((-1, -1), (0, -1), (0, 0), (1, 0)),
}

PIECE_ORDER: Tuple[PieceKind, ...] = tuple(PieceKind)


def rotate(cells: Iterable[Offset]) -> Cells:
    """Quarter turn about the pivot: (x, y) -> (y, -x)."""
    return tuple(Offset(c.y, -c.x) for c in cells)


@dataclass(frozen=True)
class Piece:
    kind: PieceKind
    cells: Cells

    @classmethod
    def spawn(cls, kind: PieceKind) -> "Piece":
        return cls(kind=kind, cells=SHAPES[kind])

    @classmethod
    def next(cls, rng: RandomSource) -> "Piece":
        index = rng.randrange(len(PIECE_ORDER))
        return cls.spawn(PIECE_ORDER[index])

    def rotated(self) -> "Piece":
        return Piece(self.kind, rotate(self.cells))

    def cells_at(self, anchor: Offset) -> List[Offset]:
        return [anchor + c for c in self.cells]
