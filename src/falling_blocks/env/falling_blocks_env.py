from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import Game, GameConfig, PieceKind


class FallingBlocksEnv(gym.Env):
    """
    Real-time falling-block environment driven one frame per step.

    Actions (6 total):
      0: No-op (let gravity act)
      1: Move Left
      2: Move Right
      3: Rotate
      4: Soft Drop
      5: Hard Drop

    Every step applies the action, then advances the engine clock by
    ``frame_ms`` so gravity and lock delay behave as in interactive play.
    Reward is the score gained during the step.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 60}

    ACT_NOOP = 0
    ACT_LEFT = 1
    ACT_RIGHT = 2
    ACT_ROTATE = 3
    ACT_SOFT_DROP = 4
    ACT_HARD_DROP = 5

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        frame_ms: float = 1000.0 / 60.0,
        max_episode_steps: int = 10_000,
    ) -> None:
        super().__init__()
        self.game = Game(config)
        self.render_mode = render_mode
        self.frame_ms = float(frame_ms)
        self.max_episode_steps = int(max_episode_steps)

        rows, cols = self.game.grid.rows, self.game.grid.cols
        n_kinds = len(PieceKind)
        # Board cells: 0 empty, 1 filled, -kind for the falling piece
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_kinds, high=1, shape=(rows, cols), dtype=np.int8),
                "piece": spaces.Discrete(n_kinds + 1),
                "next_piece": spaces.Discrete(n_kinds + 1),
            }
        )
        self.action_space = spaces.Discrete(6)
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "board": self.game.get_state().astype(np.int8),
            "piece": int(self.game.piece.kind),
            "next_piece": int(self.game.next_piece.kind),
        }

    def _get_info(self) -> Dict[str, Any]:
        grid = self.game.grid
        return {
            "score": grid.score,
            "lines": grid.lines,
            "level": grid.level,
            "combo": grid.combo,
            "holes": grid.count_holes(),
            "max_height": grid.get_max_height(),
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        action = int(action)
        score_before = self.game.grid.score

        if action == self.ACT_LEFT:
            self.game.move_left()
        elif action == self.ACT_RIGHT:
            self.game.move_right()
        elif action == self.ACT_ROTATE:
            self.game.rotate()
        elif action == self.ACT_SOFT_DROP:
            self.game.move_down()
        elif action == self.ACT_HARD_DROP:
            self.game.drop()
        elif action != self.ACT_NOOP:
            raise ValueError(f"unknown action {action}")

        self.game.update(self.frame_ms)
        self._steps += 1

        reward = float(self.game.grid.score - score_before)
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            board = self.game.get_state()
            cell = 12
            h, w = board.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(board[y, x])
                    if v > 0:
                        color = (128, 128, 128)
                    elif v < 0:
                        color = (255, 127, 80)
                    else:
                        color = (255, 248, 220)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
