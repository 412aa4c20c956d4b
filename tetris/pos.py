# 2D integer positions on (or off) the board.
# Bounds checks are the board's job, so positions may be negative.

from dataclasses import dataclass


@dataclass(frozen=True)
class Pos:
    """A 2D integer position or vector. y grows downwards."""
    x: int
    y: int

    def left(self) -> "Pos":
        return Pos(self.x - 1, self.y)

    def right(self) -> "Pos":
        return Pos(self.x + 1, self.y)

    def up(self) -> "Pos":
        return Pos(self.x, self.y - 1)

    def down(self) -> "Pos":
        return Pos(self.x, self.y + 1)

    def __add__(self, other: "Pos") -> "Pos":
        if not isinstance(other, Pos):
            return NotImplemented
        return Pos(self.x + other.x, self.y + other.y)


ORIGIN = Pos(0, 0)
