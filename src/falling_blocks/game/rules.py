from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvariantViolation


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 250, 500, 1000)
    lines_per_level: int = 10

    def score_for_lines(self, lines: int) -> int:
        if lines == 0:
            return 0
        if 1 <= lines <= 4:
            return self.line_clear_scores[lines - 1]
        # A 4-cell piece spans at most 4 rows
        raise InvariantViolation(f"cleared {lines} rows in a single lock")

    def level_for_lines(self, lines: int) -> int:
        return lines // self.lines_per_level
