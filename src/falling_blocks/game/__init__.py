"""Game module for Falling Blocks.

Exports the core game engine and supporting classes:
- Offset: Integer vector for cells and piece offsets
- Grid: Board representation, collision tests and row clearing
- Piece: Tetromino shape with its rotation transform
- PieceKind: Enum of available piece kinds
- ScoringRules: Line-clear score table and level progression
- Game: Frame-driven engine with lock delay and wall kicks
"""

from .geometry import Offset
from .grid import Cell, Grid
from .pieces import Piece, PieceKind, RandomSource
from .rules import ScoringRules
from .core import Game, GameConfig, KeyCode, Pacing
from .exceptions import ConfigurationError, InvariantViolation

__all__ = [
    "Offset",
    "Cell",
    "Grid",
    "Piece",
    "PieceKind",
    "RandomSource",
    "ScoringRules",
    "Game",
    "GameConfig",
    "KeyCode",
    "Pacing",
    "ConfigurationError",
    "InvariantViolation",
]
