# The board: a grid of cells holding the colors of locked pieces.
# The top HIDE_ROWS rows are the spawn zone and are never drawn.

from typing import NamedTuple, Optional

from tetris.pos import Pos
from tetris.shape import ShapeColor

# Constants
WIDTH = 10
HEIGHT = 24
HIDE_ROWS = 4
VISIBLE_ROWS = HEIGHT - HIDE_ROWS


class FillResult(NamedTuple):
    """Outcome of locking a piece onto the board."""
    is_game_over: bool
    lines_cleared: int


def out_bounds(pos: Pos) -> bool:
    """Whether the position is outside the board, hidden rows included."""
    return pos.x < 0 or pos.y < 0 or pos.x >= WIDTH or pos.y >= HEIGHT


class Board:
    """Which cells are full, and the color of the shape that filled them."""

    WIDTH = WIDTH
    HEIGHT = HEIGHT
    HIDE_ROWS = HIDE_ROWS
    VISIBLE_ROWS = VISIBLE_ROWS

    def __init__(self):
        # None represents an empty cell
        self.grid: list[list[Optional[ShapeColor]]] = [[None] * WIDTH for _ in range(HEIGHT)]

    def visible_grid(self) -> list[list[Optional[ShapeColor]]]:
        """Rows below the hidden spawn zone."""
        return self.grid[HIDE_ROWS:]

    def is_pos_free(self, pos: Pos) -> bool:
        """Returns if this position on the board is free and in-bounds."""
        return not out_bounds(pos) and self.grid[pos.y][pos.x] is None

    def touches(self, pos: Pos) -> bool:
        """A piece block at pos would overlap a wall, the floor or a locked cell."""
        return not self.is_pos_free(pos)

    def fill_pos(self, pos: Pos, color: ShapeColor):
        """Fill a single in-bounds cell. Out-of-bounds writes are programming errors."""
        assert not out_bounds(pos), f"Cannot fill out-of-bounds position {pos}"
        self.grid[pos.y][pos.x] = color

    def lock_piece(self, piece) -> FillResult:
        """
        Attach a piece to the board permanently, clearing any full rows.

        Locking a piece entirely inside the hidden rows is a game over:
        at least one block has to come to rest below the spawn zone.
        """
        is_game_over = True

        for block in piece.blocks():
            if block.y > HIDE_ROWS:
                is_game_over = False
            self.fill_pos(block, piece.shape.color)

        return FillResult(is_game_over, self.clear_full_rows())

    def clear_full_rows(self) -> int:
        """Clears full rows top to bottom and returns how many were cleared."""
        lines_cleared = 0
        for y in range(HEIGHT):
            if all(cell is not None for cell in self.grid[y]):
                self.clear_row(y)
                lines_cleared += 1
        return lines_cleared

    def clear_row(self, y: int):
        """Removes row y; every row above moves down one and row 0 becomes empty."""
        for yy in range(y, 0, -1):
            self.grid[yy] = list(self.grid[yy - 1])
        self.grid[0] = [None] * WIDTH
