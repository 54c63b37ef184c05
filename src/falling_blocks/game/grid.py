from __future__ import annotations

from enum import IntEnum
from typing import Iterable, List, Optional

import numpy as np

from .exceptions import ConfigurationError, InvariantViolation
from .geometry import Offset
from .rules import ScoringRules


class Cell(IntEnum):
    EMPTY = 0
    FILLED = 1


class Grid:
    """Fixed rows x cols board of EMPTY/FILLED cells plus score bookkeeping.

    Row 0 is the top. Cells above the board (negative y) are never stored;
    collision tests treat them as free so pieces can spawn partially hidden.
    The backing array stays private: readers get a copy or a read-only view.
    """

    def __init__(self, rows: int, cols: int, rules: Optional[ScoringRules] = None) -> None:
        if rows <= 0 or cols <= 0:
            raise ConfigurationError(f"grid must have positive dimensions, got {rows}x{cols}")
        self.rows = int(rows)
        self.cols = int(cols)
        self.rules = rules or ScoringRules()
        self._cells = np.zeros((self.rows, self.cols), dtype=np.int8)
        self.score = 0
        self.lines = 0
        self.level = 0
        self.combo = 0

    def reset(self) -> None:
        self._cells.fill(Cell.EMPTY)
        self.score = 0
        self.lines = 0
        self.level = 0
        self.combo = 0

    @property
    def cells(self) -> np.ndarray:
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def clone_state(self) -> np.ndarray:
        return self._cells.copy()

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.cols and 0 <= y < self.rows

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.is_inside(x, y):
            raise IndexError(f"cell ({x}, {y}) outside {self.rows}x{self.cols} grid")

    def cell(self, x: int, y: int) -> Cell:
        self._check_bounds(x, y)
        return Cell(int(self._cells[y, x]))

    def fill(self, x: int, y: int) -> None:
        self._check_bounds(x, y)
        self._cells[y, x] = Cell.FILLED

    def check_collision(self, position: Offset, cells: Iterable[Offset]) -> bool:
        for offset in cells:
            x = position.x + offset.x
            y = position.y + offset.y
            if x < 0 or x >= self.cols or y >= self.rows:
                return True
            # Negative y is above the visible top and never collides
            if y >= 0 and self._cells[y, x] == Cell.FILLED:
                return True
        return False

    def full_rows(self) -> List[int]:
        return [int(r) for r in np.where(np.all(self._cells != Cell.EMPTY, axis=1))[0]]

    def lock_and_clear(self, position: Offset, cells: Iterable[Offset]) -> int:
        """Stamp the piece, drop full rows and update score/lines/level/combo.

        Returns the number of rows cleared.
        """
        for offset in cells:
            self.fill(position.x + offset.x, position.y + offset.y)
        cleared = self._clear_full_rows()
        self.score += self.rules.score_for_lines(cleared)
        self.lines += cleared
        self.level = self.rules.level_for_lines(self.lines)
        self.combo = self.combo + 1 if cleared else 0
        return cleared

    def _clear_full_rows(self) -> int:
        full = self.full_rows()
        if not full:
            return 0
        num = len(full)
        # np.delete keeps the surviving rows in their original order
        kept = np.delete(self._cells, full, axis=0)
        new_rows = np.zeros((num, self.cols), dtype=np.int8)
        self._cells = np.vstack((new_rows, kept))
        if self._cells.shape != (self.rows, self.cols):
            raise InvariantViolation(f"grid reshaped to {self._cells.shape} after clearing")
        return num

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self._cells != Cell.EMPTY, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return self.rows - int(non_empty_rows[0])

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.cols):
            seen_block = False
            for cell in self._cells[:, x]:
                if cell != Cell.EMPTY:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes
