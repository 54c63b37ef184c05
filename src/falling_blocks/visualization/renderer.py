from __future__ import annotations

from typing import Iterable, Optional, Tuple

import pygame

from falling_blocks.game import Cell, Game, Offset, PieceKind


EMPTY_COLOR = (255, 248, 220)   # cornsilk
FILLED_COLOR = (128, 128, 128)  # grey
BORDER_COLOR = (0, 0, 0)
TEXT_COLOR = (20, 20, 26)
PANEL_COLOR = (235, 230, 210)


def _color_for_kind(kind: PieceKind) -> Tuple[int, int, int]:
    palette = {
        PieceKind.I: (0, 240, 240),
        PieceKind.J: (0, 0, 240),
        PieceKind.L: (240, 160, 0),
        PieceKind.O: (240, 240, 0),
        PieceKind.S: (0, 240, 0),
        PieceKind.T: (160, 0, 240),
        PieceKind.Z: (240, 0, 0),
    }
    return palette.get(kind, (255, 127, 80))


class Renderer:
    """Paints a ``Game`` onto a pygame surface. Reads engine state only."""

    def __init__(self, cell_size: int = 20, panel_width: int = 120, status_height: int = 24) -> None:
        self.cell_size = cell_size
        self.panel_width = panel_width
        self.status_height = status_height
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, game: Game) -> Tuple[int, int]:
        return (
            game.grid.cols * self.cell_size + self.panel_width,
            game.grid.rows * self.cell_size + self.status_height,
        )

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size, self.cell_size)

    def _draw_cells(self, screen: pygame.Surface, cells: Iterable[Offset], color, width: int = 0) -> None:
        for c in cells:
            # Cells above the top row are not painted
            if c.y < 0:
                continue
            rect = self._cell_rect(c.x, c.y)
            pygame.draw.rect(screen, color, rect, width)
            if width == 0:
                pygame.draw.rect(screen, BORDER_COLOR, rect, 1)

    def _draw_board(self, screen: pygame.Surface, game: Game) -> None:
        cells = game.grid.cells
        for y in range(game.grid.rows):
            for x in range(game.grid.cols):
                filled = cells[y, x] == Cell.FILLED
                rect = self._cell_rect(x, y)
                pygame.draw.rect(screen, FILLED_COLOR if filled else EMPTY_COLOR, rect)
                if filled:
                    pygame.draw.rect(screen, BORDER_COLOR, rect, 1)

    def _draw_next(self, screen: pygame.Surface, game: Game) -> None:
        x0 = game.grid.cols * self.cell_size
        pygame.draw.rect(screen, PANEL_COLOR, pygame.Rect(x0, 0, self.panel_width, game.grid.rows * self.cell_size))
        screen.blit(self._font.render("Next", True, TEXT_COLOR), (x0 + 10, 8))
        # Centre the lookahead piece's pivot inside the panel
        pivot = Offset(x0 + self.panel_width // 2, 4 * self.cell_size)
        color = _color_for_kind(game.next_piece.kind)
        for c in game.next_piece.cells:
            rect = pygame.Rect(pivot.x + c.x * self.cell_size, pivot.y + c.y * self.cell_size,
                               self.cell_size, self.cell_size)
            pygame.draw.rect(screen, color, rect)
            pygame.draw.rect(screen, BORDER_COLOR, rect, 1)

    def _draw_status(self, screen: pygame.Surface, game: Game) -> None:
        grid = game.grid
        text = f"Score {grid.score}   Lines {grid.lines}   Level {grid.level}   Combo {grid.combo}"
        if game.game_over:
            text += "   GAME OVER (R to restart)"
        y = grid.rows * self.cell_size + 4
        screen.blit(self._font.render(text, True, TEXT_COLOR), (4, y))

    def draw(self, screen: pygame.Surface, game: Game) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 20)
        screen.fill((255, 255, 255))
        self._draw_board(screen, game)

        if not game.game_over:
            color = _color_for_kind(game.piece.kind)
            ghost = game.piece.cells_at(game.landing_position())
            self._draw_cells(screen, ghost, color, width=2)
            self._draw_cells(screen, game.active_cells(), color)

        # Border
        pygame.draw.rect(
            screen,
            BORDER_COLOR,
            pygame.Rect(0, 0, game.grid.cols * self.cell_size, game.grid.rows * self.cell_size),
            1,
        )
        self._draw_next(screen, game)
        self._draw_status(screen, game)
        pygame.display.flip()
