# The falling piece: a shape, its rotation and its board position.
# Moves are unchecked; the game reverts them on collision.

from tetris import board
from tetris.pos import Pos
from tetris.shape import Rotation, Shape

INITIAL_POS = Pos(board.WIDTH // 2 - 2, 0)


class Piece:
    def __init__(self, shape: Shape):
        self.shape = shape
        self.rot = Rotation()
        self.pos = INITIAL_POS

    def __repr__(self):
        return f"Piece({self.shape.color.value}, rot={self.rot.value}, pos=({self.pos.x}, {self.pos.y}))"

    def rotate_clockwise(self):
        self.rot = self.rot.clockwise()

    def rotate_anticlockwise(self):
        self.rot = self.rot.anticlockwise()

    def left(self):
        self.pos = self.pos.left()

    def right(self):
        self.pos = self.pos.right()

    def up(self):
        self.pos = self.pos.up()

    def down(self):
        self.pos = self.pos.down()

    def blocks(self) -> list[Pos]:
        """Absolute board positions of the piece's blocks."""
        return [block + self.pos for block in self.shape.blocks(self.rot)]
