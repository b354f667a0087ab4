from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from blockfall.game import GameSnapshot, SessionState, TetrominoType, shape_for
from .palette import BACKGROUND, DIM_TEXT, FIELD, GRID_LINE, TEXT, color_for_value


class Renderer:
    """Draws a GameSnapshot. Never touches the engine itself."""

    def __init__(self, cell_size: int = 30, margin: int = 20, panel_cells: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells

    def window_size(self, snapshot: GameSnapshot) -> Tuple[int, int]:
        rows, cols = snapshot.board.shape
        width = self.margin * 3 + (cols + self.panel_cells) * self.cell_size
        height = self.margin * 2 + rows * self.cell_size
        return width, height

    def _cell_rect(self, x: int, y: int, inset: int = 1) -> pygame.Rect:
        return pygame.Rect(
            self.margin + x * self.cell_size + inset,
            self.margin + y * self.cell_size + inset,
            self.cell_size - 2 * inset,
            self.cell_size - 2 * inset,
        )

    def _draw_field(self, surface: pygame.Surface, board: np.ndarray) -> None:
        rows, cols = board.shape
        field = pygame.Rect(self.margin, self.margin, cols * self.cell_size, rows * self.cell_size)
        pygame.draw.rect(surface, FIELD, field)
        for x in range(cols + 1):
            px = self.margin + x * self.cell_size
            pygame.draw.line(surface, GRID_LINE, (px, field.top), (px, field.bottom))
        for y in range(rows + 1):
            py = self.margin + y * self.cell_size
            pygame.draw.line(surface, GRID_LINE, (field.left, py), (field.right, py))
        for y in range(rows):
            for x in range(cols):
                v = int(board[y, x])
                if v:
                    pygame.draw.rect(surface, color_for_value(v), self._cell_rect(x, y))

    def _draw_mask(self, surface: pygame.Surface, snapshot: GameSnapshot, top: int, width: int = 0) -> None:
        piece = snapshot.active
        assert piece is not None
        rows, cols = snapshot.board.shape
        color = color_for_value(int(piece.kind))
        for dy, dx in zip(*np.nonzero(piece.mask)):
            x = piece.x + int(dx)
            y = top + int(dy) - snapshot.hidden_rows
            if 0 <= x < cols and 0 <= y < rows:
                pygame.draw.rect(surface, color, self._cell_rect(x, y, inset=1 if width == 0 else 3), width)

    def _draw_mini(self, surface: pygame.Surface, kind: TetrominoType, left: int, top: int, size: int, dim: bool = False) -> None:
        color = color_for_value(int(kind))
        if dim:
            color = tuple(c // 2 for c in color)
        for dy, dx in zip(*np.nonzero(shape_for(kind, 0))):
            pygame.draw.rect(surface, color, (left + int(dx) * size, top + int(dy) * size, size - 1, size - 1))

    def _draw_panel(self, surface: pygame.Surface, snapshot: GameSnapshot, font: Optional[pygame.font.Font]) -> None:
        cols = snapshot.board.shape[1]
        left = self.margin * 2 + cols * self.cell_size
        top = self.margin
        mini = max(6, int(self.cell_size * 0.45))
        if font is not None:
            for i, line in enumerate((f"Score: {snapshot.score}", f"Lines: {snapshot.lines}", f"Level: {snapshot.level}")):
                surface.blit(font.render(line, True, DIM_TEXT), (left, top + i * 20))
            surface.blit(font.render("Next", True, TEXT), (left, top + 72))
            surface.blit(font.render("Hold", True, TEXT), (left + mini * 5, top + 72))
        for i, kind in enumerate(snapshot.next_queue):
            self._draw_mini(surface, kind, left, top + 96 + i * (mini * 4 + 8), mini)
        if snapshot.hold is not None:
            self._draw_mini(surface, snapshot.hold, left + mini * 5, top + 96, mini, dim=not snapshot.can_hold)

    def _draw_banner(self, surface: pygame.Surface, snapshot: GameSnapshot, font: Optional[pygame.font.Font], text: str) -> None:
        rows, cols = snapshot.board.shape
        field = pygame.Rect(self.margin, self.margin, cols * self.cell_size, rows * self.cell_size)
        shade = pygame.Surface(field.size, pygame.SRCALPHA)
        shade.fill((0, 0, 0, 150))
        surface.blit(shade, field.topleft)
        if font is not None:
            label = font.render(text, True, TEXT)
            surface.blit(label, label.get_rect(center=field.center))

    def draw(self, surface: pygame.Surface, snapshot: GameSnapshot, font: Optional[pygame.font.Font] = None) -> None:
        surface.fill(BACKGROUND)
        self._draw_field(surface, snapshot.board)
        if snapshot.active is not None and snapshot.ghost_y is not None:
            self._draw_mask(surface, snapshot, snapshot.ghost_y, width=1)
            self._draw_mask(surface, snapshot, snapshot.active.y)
        self._draw_panel(surface, snapshot, font)
        if snapshot.state is SessionState.PAUSED:
            self._draw_banner(surface, snapshot, font, "PAUSED")
        elif snapshot.state is SessionState.GAME_OVER:
            self._draw_banner(surface, snapshot, font, "GAME OVER - R to restart")
