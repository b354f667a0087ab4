from __future__ import annotations

from typing import Optional

import numpy as np

from .pieces import Piece


class GameGrid:
    """Discrete 2D grid of locked cells.

    The grid uses 0 for empty cells and the tetromino value (1..7) for filled
    cells. The top `hidden_rows` rows are a spawn buffer: they are never shown
    but take part in every collision check. Row 0 is the top of the buffer.
    """

    def __init__(self, width: int, visible_rows: int, hidden_rows: int = 0) -> None:
        self.width = int(width)
        self.visible_rows = int(visible_rows)
        self.hidden_rows = int(hidden_rows)
        self.height = self.visible_rows + self.hidden_rows
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def collides(self, piece: Piece, dx: int = 0, dy: int = 0, rotation: Optional[int] = None) -> bool:
        """True if `piece` offset by (dx, dy) at `rotation` overlaps a wall, the floor or a block.

        Cells above row 0 only collide with the side walls.
        """
        for x, y in piece.cells_at(piece.x + dx, piece.y + dy, rotation):
            if x < 0 or x >= self.width or y >= self.height:
                return True
            if y >= 0 and self.grid[y, x] != 0:
                return True
        return False

    def lock(self, piece: Piece) -> None:
        value = int(piece.kind)
        for x, y in piece.cells():
            # Cells outside the grid can only come from a spawn above the buffer.
            if self.is_inside(x, y):
                self.grid[y, x] = value

    def clear_lines(self) -> int:
        full_rows = np.where(np.all(self.grid != 0, axis=1))[0]
        if full_rows.size == 0:
            return 0
        num = int(full_rows.size)
        # Remove full rows and add empty rows at the top
        remaining = np.delete(self.grid, full_rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, remaining))
        assert self.grid.shape == (self.height, self.width)
        return num

    def landing_y(self, piece: Piece) -> int:
        """Row the piece would rest on after falling straight down."""
        dy = 0
        while not self.collides(piece, 0, dy + 1):
            dy += 1
        return piece.y + dy

    def visible(self) -> np.ndarray:
        return self.grid[self.hidden_rows :]

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self.grid[:, x]
            seen_block = False
            for cell in column:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
