# Tetromino shapes, rotations and the 7-bag randomizer.
#
# Each shape has four rotations. A rotation is a 16-bit mask describing a
# 4x4 grid in row-major order: bit (y * 4 + x) is set when the cell at
# column x, row y is filled.

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from tetris.pos import Pos
from tetris.xorshift import XorShiftRng, U8_MAX

# Constants
WIDTH = 4
HEIGHT = 4
NUM_ROTATIONS = 4
NUM_SHAPES = 7


@dataclass(frozen=True)
class Rotation:
    """One of the four orientations of a shape. Defaults to 0."""
    value: int = 0

    def clockwise(self) -> "Rotation":
        return Rotation((self.value + 1) % NUM_ROTATIONS)

    def anticlockwise(self) -> "Rotation":
        # Python's % is a true modulo, so 0 wraps to 3
        return Rotation((self.value - 1) % NUM_ROTATIONS)


class ShapeColor(Enum):
    O = "O"
    I = "I"
    J = "J"
    L = "L"
    S = "S"
    T = "T"
    Z = "Z"


@lru_cache(maxsize=None)
def _mask_blocks(mask: int) -> tuple:
    # Low bit to high bit, so block order is stable
    return tuple(Pos(i % WIDTH, i // WIDTH) for i in range(WIDTH * HEIGHT) if mask >> i & 1)


@dataclass(frozen=True)
class Shape:
    """Immutable tetromino definition: four rotation masks and a color."""
    rotations: tuple
    color: ShapeColor

    def blocks(self, rot: Rotation) -> list[Pos]:
        """Positions of the filled cells for a rotation, relative to the 4x4 box."""
        return list(_mask_blocks(self.rotations[rot.value]))


# Standard layouts
O_SHAPE = Shape((0x0660, 0x0660, 0x0660, 0x0660), ShapeColor.O)
I_SHAPE = Shape((0x00F0, 0x4444, 0x0F00, 0x2222), ShapeColor.I)
J_SHAPE = Shape((0x0710, 0x2260, 0x4700, 0x3220), ShapeColor.J)
L_SHAPE = Shape((0x0740, 0x6220, 0x1700, 0x2230), ShapeColor.L)
S_SHAPE = Shape((0x0360, 0x0462, 0x0036, 0x0462), ShapeColor.S)
T_SHAPE = Shape((0x0720, 0x2620, 0x2700, 0x2320), ShapeColor.T)
Z_SHAPE = Shape((0x0630, 0x0132, 0x0063, 0x0264), ShapeColor.Z)

# Canonical bag order, the shuffle starts from this sequence
SHAPES = (O_SHAPE, I_SHAPE, J_SHAPE, L_SHAPE, S_SHAPE, T_SHAPE, Z_SHAPE)

# Unlockable mode: mostly S/Z, with a lone I as the decoy
EVIL_SHAPES = (S_SHAPE, Z_SHAPE, S_SHAPE, Z_SHAPE, S_SHAPE, Z_SHAPE, I_SHAPE)


def shape_table(evil: bool = False) -> tuple:
    """Returns the shape table selected by the boot-time evil flag."""
    return EVIL_SHAPES if evil else SHAPES


class Bag:
    """
    Endless stream of shapes.
    Every run of 7 consecutive pops taken from the start of a bag is a
    permutation of the shape table.
    """

    def __init__(self, rng: XorShiftRng, table: tuple = SHAPES):
        if len(table) != NUM_SHAPES:
            raise ValueError(f"Shape table must have {NUM_SHAPES} shapes, got {len(table)}")
        self._table = tuple(table)
        self._rng = rng
        self.shapes = self._random_sequence()
        self.index = 0

    def __repr__(self):
        colors = [shape.color.value for shape in self.shapes]
        return f"Bag(shapes={colors}, index={self.index}, rng=<rng>)"

    def peek(self) -> Shape:
        return self.shapes[self.index]

    def pop(self) -> Shape:
        shape = self.shapes[self.index]
        self.index += 1
        if self.index >= NUM_SHAPES:
            self.shapes = self._random_sequence()
            self.index = 0
        return shape

    def _random_sequence(self) -> list:
        """
        Fisher-Yates from the end of the canonical sequence.
        The counter is kept within a byte so every host asks the rng for the
        same u8 ranges, and therefore consumes the same draws.
        """
        sequence = list(self._table)
        i = len(sequence) & U8_MAX
        while i >= 2:
            # Elements with index >= i are locked in place
            i = (i - 1) & U8_MAX
            j = self._rng.gen_range_u8(0, i + 1)
            sequence[i], sequence[j] = sequence[j], sequence[i]
        return sequence
