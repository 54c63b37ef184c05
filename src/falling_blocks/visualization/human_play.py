from __future__ import annotations

import argparse
from typing import Dict, Optional

import pygame

from falling_blocks.game import Game, GameConfig, KeyCode
from .renderer import Renderer


PYGAME_TO_KEYCODE: Dict[int, KeyCode] = {
    pygame.K_UP: KeyCode.UP,
    pygame.K_DOWN: KeyCode.DOWN,
    pygame.K_LEFT: KeyCode.LEFT,
    pygame.K_RIGHT: KeyCode.RIGHT,
    pygame.K_SPACE: KeyCode.SPACE,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Falling Blocks with the keyboard")
    p.add_argument("--rows", type=int, default=20)
    p.add_argument("--cols", type=int, default=10)
    p.add_argument("--cell-size", type=int, default=20)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--fps", type=int, default=60)
    return p


def run(config: Optional[GameConfig] = None, fps: int = 60) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = Game(config)
        renderer = Renderer(cell_size=game.config.cell_size_px)
        screen = pygame.display.set_mode(renderer.window_size(game))
        pygame.display.set_caption("Falling Blocks")

        paused = False
        running = True
        while running:
            delta_ms = clock.tick(fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r and game.game_over:
                        game.reset()
                    elif event.key == pygame.K_p:
                        paused = not paused
                    elif not paused:
                        code = PYGAME_TO_KEYCODE.get(event.key)
                        if code is not None:
                            game.on_key(code)

            if not paused:
                game.update(delta_ms)

            renderer.draw(screen, game)
        print(f"Final score: {game.grid.score}  lines: {game.grid.lines}  level: {game.grid.level}")
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    config = GameConfig(rows=args.rows, cols=args.cols, cell_size_px=args.cell_size, random_seed=args.seed)
    run(config, fps=args.fps)


if __name__ == "__main__":  # pragma: no cover
    main()
