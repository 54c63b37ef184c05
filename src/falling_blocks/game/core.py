from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, List, Optional

import numpy as np

from .exceptions import ConfigurationError
from .geometry import DOWN, LEFT, ORIGIN, RIGHT, Offset
from .grid import Grid
from .pieces import Piece, PieceKind, RandomSource
from .rules import ScoringRules


logger = logging.getLogger(__name__)


class KeyCode(IntEnum):
    SPACE = 32
    LEFT = 37
    UP = 38
    RIGHT = 39
    DOWN = 40


# Positions tried after a blocked rotation, in order: one row up, then left/centre/right.
KICKS = (Offset(-1, -1), Offset(0, -1), Offset(1, -1))


@dataclass
class GameConfig:
    rows: int = 20
    cols: int = 10
    cell_size_px: int = 20
    random_seed: Optional[int] = None
    base_fall_delay_ms: float = 650.0
    fall_delay_step_ms: float = 50.0
    move_cooldown_ms: float = 250.0
    rotate_cooldown_ms: float = 400.0

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ConfigurationError(f"board must have positive dimensions, got {self.rows}x{self.cols}")
        if self.cell_size_px <= 0:
            raise ConfigurationError(f"cell size must be positive, got {self.cell_size_px}")


@dataclass
class Pacing:
    """Countdown timers in milliseconds, decayed only by ``Game.update``."""

    fall_delay_ms: float = 0.0
    cooldown_ms: float = 0.0

    def arm(self, cooldown_ms: float) -> None:
        # Watermark: input can extend the grace period but never shorten it
        self.cooldown_ms = max(self.cooldown_ms, cooldown_ms)


class Game:
    """Falling-block engine: one grid, an active piece, a lookahead and pacing timers.

    The host calls ``update`` once per frame with the elapsed milliseconds and
    forwards key presses to ``on_key``. Renderers read ``grid``, ``piece``,
    ``position`` and ``next_piece`` between calls and must not mutate them.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng: RandomSource = rng if rng is not None else random.Random(self.config.random_seed)
        self.grid = Grid(self.config.rows, self.config.cols, self.rules)
        self.pacing = Pacing()
        self.game_over = False
        self.piece: Piece
        self.next_piece: Piece
        self.position = ORIGIN
        self._key_actions: Dict[int, Callable[[], object]] = {
            KeyCode.UP: self.drop,
            KeyCode.DOWN: self.move_down,
            KeyCode.LEFT: self.move_left,
            KeyCode.RIGHT: self.move_right,
            KeyCode.SPACE: self.rotate,
        }
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng = random.Random(seed)
        self.grid.reset()
        self.game_over = False
        self.pacing = Pacing(fall_delay_ms=self.fall_interval_ms(), cooldown_ms=0.0)
        self.piece = Piece.next(self.rng)
        self.next_piece = Piece.next(self.rng)
        self.position = self.spawn_position()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def score(self) -> int:
        return self.grid.score

    @property
    def level(self) -> int:
        return self.grid.level

    def spawn_position(self) -> Offset:
        return Offset(self.grid.cols // 2, 0)

    def fall_interval_ms(self) -> float:
        # Not clamped: at high levels this reaches zero or below, i.e. one row per frame
        return self.config.base_fall_delay_ms - self.grid.level * self.config.fall_delay_step_ms

    def active_cells(self) -> List[Offset]:
        return self.piece.cells_at(self.position)

    def landing_position(self) -> Offset:
        position = self.position
        while not self.grid.check_collision(position + DOWN, self.piece.cells):
            position = position + DOWN
        return position

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if not self.game_over:
            for cell in self.active_cells():
                if self.grid.is_inside(cell.x, cell.y):
                    # Use negative to indicate falling piece overlay
                    state[cell.y, cell.x] = -int(self.piece.kind)
        return state

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------
    def update(self, delta_ms: float) -> None:
        if self.game_over:
            return
        self.pacing.fall_delay_ms -= delta_ms
        self.pacing.cooldown_ms -= delta_ms
        if self.pacing.fall_delay_ms >= 0:
            return

        below = self.position + DOWN
        if not self.grid.check_collision(below, self.piece.cells):
            self.position = below
        elif self.pacing.cooldown_ms > 0:
            # Lock delay: the resting piece stays live until the cooldown runs out
            self.pacing.fall_delay_ms = self.pacing.cooldown_ms
            return
        else:
            self._lock_piece()
        # At most one row per call, however far the delay overshot
        self.pacing.fall_delay_ms = self.fall_interval_ms()

    def _lock_piece(self) -> None:
        if any(cell.y < 0 for cell in self.active_cells()):
            logger.debug("lock out: %s at %s above the top row", self.piece.kind.name, self.position)
            self.game_over = True
            return
        cleared = self.grid.lock_and_clear(self.position, self.piece.cells)
        logger.debug(
            "locked %s at %s, cleared=%d score=%d level=%d",
            self.piece.kind.name, self.position, cleared, self.grid.score, self.grid.level,
        )
        self._spawn_next()

    def _spawn_next(self) -> None:
        self.piece = self.next_piece
        self.next_piece = Piece.next(self.rng)
        self.position = self.spawn_position()
        if self.grid.check_collision(self.position, self.piece.cells):
            logger.debug("block out: %s cannot spawn at %s", self.piece.kind.name, self.position)
            self.game_over = True

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def _shift(self, step: Offset) -> bool:
        if self.game_over:
            return False
        self.pacing.arm(self.config.move_cooldown_ms)
        candidate = self.position + step
        if self.grid.check_collision(candidate, self.piece.cells):
            return False
        self.position = candidate
        return True

    def move_left(self) -> bool:
        return self._shift(LEFT)

    def move_right(self) -> bool:
        return self._shift(RIGHT)

    def move_down(self) -> bool:
        if self.game_over:
            return False
        candidate = self.position + DOWN
        if self.grid.check_collision(candidate, self.piece.cells):
            return False
        self.position = candidate
        return True

    def drop(self) -> int:
        """Hard drop; returns the number of rows travelled."""
        rows = 0
        while self.move_down():
            rows += 1
        return rows

    def rotate(self) -> bool:
        if self.game_over or self.piece.kind == PieceKind.O:
            return False
        self.pacing.arm(self.config.rotate_cooldown_ms)
        rotated = self.piece.rotated()
        for kick in (ORIGIN,) + KICKS:
            candidate = self.position + kick
            if not self.grid.check_collision(candidate, rotated.cells):
                self.position = candidate
                self.piece = rotated
                return True
        return False

    def on_key(self, code: int) -> bool:
        action = self._key_actions.get(code)
        if action is None:
            return False
        action()
        return True
