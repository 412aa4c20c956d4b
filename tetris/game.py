# Self-contained, non-networked, non-GUI
# Deterministic logic for a single game of Tetris.
#
# The game only moves forward through two entry points:
# apply_action() for player input and apply_step() for one frame of time.
# Given the same seed and the same (tick, action) log, every host reaches
# the same score, which is what lets the server validate a submission by
# replaying it.

import logging
from enum import Enum

from tetris.board import Board
from tetris.errors import MalformedMessage, ReplayLimitExceeded
from tetris.piece import Piece
from tetris.shape import Bag, Shape, shape_table
from tetris.xorshift import XorShiftRng

logger = logging.getLogger(__name__)

# Gravity is fixed-point: hundredths of a cell per frame
UNITS_PER_CELL = 100
INITIAL_GRAVITY = 4
INCREASE_PER_LEVEL = 2
LINES_PER_LEVEL = 10
SOFT_DROP = UNITS_PER_CELL
HARD_DROP = UNITS_PER_CELL * 20

# Scoring: lines * lines * POINTS_PER_LINE
POINTS_PER_LINE = 100

# Upper bound on replayed frames, roughly 46 hours at 30 steps per second
MAX_REPLAY_TICKS = 5_000_000


class Action(Enum):
    """Player inputs. The values are the tags used on the wire."""
    MOVE_LEFT = "MoveLeft"
    MOVE_RIGHT = "MoveRight"
    ROTATE = "Rotate"
    START_SOFT_DROP = "StartSoftDrop"
    START_HARD_DROP = "StartHardDrop"
    STOP_DROP = "StopDrop"


class DropMode(Enum):
    NORMAL = "Normal"
    SOFT = "Soft"
    HARD = "Hard"


class Game:
    """Manages the state of one Tetris board."""

    def __init__(self, seed, evil: bool = False):
        self.bag = Bag(XorShiftRng.from_seed(seed), shape_table(evil))
        self.piece = Piece(self.bag.pop())
        self.board = Board()
        self.drop_tick = 0
        self.lock_delay = False
        self.drop_mode = DropMode.NORMAL
        self.lines_cleared = 0
        self.score = 0
        self.tick = 0

    def next_shape(self) -> Shape:
        return self.bag.peek()

    #  Public API (called by the play state and by replays)

    def apply_action(self, action: Action):
        if action == Action.MOVE_LEFT:
            self.try_move_left()
        elif action == Action.MOVE_RIGHT:
            self.try_move_right()
        elif action == Action.ROTATE:
            self.try_rotate()
        elif action == Action.START_SOFT_DROP:
            self.drop_mode = DropMode.SOFT
        elif action == Action.START_HARD_DROP:
            self.drop_mode = DropMode.HARD
        elif action == Action.STOP_DROP:
            self.drop_mode = DropMode.NORMAL
        else:
            raise ValueError(f"Unknown action: {action!r}")

    def apply_step(self) -> bool:
        """
        Advance one frame. Returns True on game over.

        1. Increments the tick.
        2. Drops the piece once per whole cell of accumulated gravity.
        3. Accumulates this frame's gravity for the next step.
        """
        self.tick += 1

        while self.drop_tick >= UNITS_PER_CELL:
            self.drop_tick -= UNITS_PER_CELL
            if self._drop_piece():
                return True

        self.drop_tick += self.gravity()
        return False

    def normal_gravity(self) -> int:
        level = self.lines_cleared // LINES_PER_LEVEL
        return min(INITIAL_GRAVITY + INCREASE_PER_LEVEL * level, SOFT_DROP)

    def gravity(self) -> int:
        """Effective gravity for the current drop mode, in units per frame."""
        if self.drop_mode == DropMode.SOFT:
            return SOFT_DROP
        if self.drop_mode == DropMode.HARD:
            return HARD_DROP
        return self.normal_gravity()

    def level(self) -> int:
        return self.lines_cleared // LINES_PER_LEVEL

    #  Piece control

    def try_rotate(self) -> bool:
        """Rotate clockwise, with a naive kick one cell right, then left."""
        self.piece.rotate_clockwise()
        self.reset_lock_delay()

        successful = not self.collides() or self._try_wall_kick()

        if not successful:
            self.piece.rotate_anticlockwise()

        return successful

    def try_move_left(self) -> bool:
        self.piece.left()
        self.reset_lock_delay()

        collides = self.collides()
        if collides:
            self.piece.right()

        return not collides

    def try_move_right(self) -> bool:
        self.piece.right()
        self.reset_lock_delay()

        collides = self.collides()
        if collides:
            self.piece.left()

        return not collides

    def reset_lock_delay(self):
        """A move while the piece is resting postpones the next drop."""
        if self.lock_delay:
            self.drop_tick = 0

    def collides(self) -> bool:
        """Checks if the piece overlaps the walls, the floor or locked cells."""
        return any(self.board.touches(block) for block in self.piece.blocks())

    def _try_wall_kick(self) -> bool:
        # Not SRS: one cell right, then one cell left
        return self.try_move_right() or self.try_move_left()

    def _drop_piece(self) -> bool:
        """
        Move the piece down one cell.
        A piece that cannot fall gets one extra drop of grace (the lock
        delay) before it locks. Returns True on game over.
        """
        self.piece.down()

        if self.collides():
            self.piece.up()
            if self.lock_delay:
                return self._lock_piece()
            self.lock_delay = True
        elif self.lock_delay:
            self.lock_delay = False

        return False

    def _lock_piece(self) -> bool:
        """Stamps the current piece onto the board and spawns the next one."""
        old_piece = self.piece
        self.piece = Piece(self.bag.pop())

        is_game_over, lines_cleared = self.board.lock_piece(old_piece)

        self.drop_mode = DropMode.NORMAL
        self.drop_tick = 0
        self.lock_delay = False
        self.lines_cleared += lines_cleared
        self.score += lines_cleared * lines_cleared * POINTS_PER_LINE

        # The new piece has nowhere to go
        if self.collides():
            is_game_over = True

        return is_game_over


class History:
    """
    The seed and every (tick, action) applied to a game.
    Enough to rebuild the game exactly.
    """

    def __init__(self, seed, actions=None, evil: bool = False):
        self.seed = list(seed)
        self.actions: list[tuple[int, Action]] = list(actions or [])
        self.evil = evil

    def __repr__(self):
        return f"History(seed={self.seed}, actions=<{len(self.actions)} actions>, evil={self.evil})"

    def __eq__(self, other):
        if not isinstance(other, History):
            return NotImplemented
        return (self.seed, self.actions, self.evil) == (other.seed, other.actions, other.evil)

    def push(self, tick: int, action: Action):
        self.actions.append((tick, action))

    def replay(self, max_ticks: int = MAX_REPLAY_TICKS) -> int:
        """
        Re-simulate the game and return its final score.

        1. Rebuilds a fresh game from the seed.
        2. Steps until each action's tick, then applies the action.
        3. Keeps stepping after the last action until a game over.

        Raises ReplayLimitExceeded if no game over happens within max_ticks.
        """
        game = Game(self.seed, evil=self.evil)

        def step() -> bool:
            if game.tick >= max_ticks:
                raise ReplayLimitExceeded(max_ticks)
            return game.apply_step()

        for action_tick, action in self.actions:
            while game.tick < action_tick:
                if step():
                    return game.score
            game.apply_action(action)

        # After the actions stop, the game continues until a game over
        while not step():
            pass
        logger.debug(f"Replay ended at tick {game.tick} with score {game.score}")
        return game.score

    def to_dict(self) -> dict:
        """JSON-serializable form: {"seed": [...], "actions": [[tick, tag], ...]}."""
        data = {
            "seed": list(self.seed),
            "actions": [[tick, action.value] for tick, action in self.actions],
        }
        if self.evil:
            data["evil"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "History":
        """Parse the wire form. Raises MalformedMessage on bad structure."""
        if not isinstance(data, dict):
            raise MalformedMessage("history must be an object")

        seed = data.get("seed")
        if not isinstance(seed, list):
            raise MalformedMessage("history.seed must be a list of 4 integers")
        try:
            XorShiftRng.from_seed(seed)
        except ValueError as e:
            raise MalformedMessage(f"history.seed is invalid: {e}") from e

        raw_actions = data.get("actions")
        if not isinstance(raw_actions, list):
            raise MalformedMessage("history.actions must be a list")

        actions = []
        last_tick = 0
        for entry in raw_actions:
            if not isinstance(entry, list) or len(entry) != 2:
                raise MalformedMessage(f"action entry must be [tick, tag], got {entry!r}")
            tick, tag = entry
            if not isinstance(tick, int) or isinstance(tick, bool) or not (0 <= tick <= 0xFFFFFFFF):
                raise MalformedMessage(f"action tick must be a u32, got {tick!r}")
            if tick < last_tick:
                raise MalformedMessage(f"action ticks must not decrease ({tick} after {last_tick})")
            try:
                action = Action(tag)
            except ValueError as e:
                raise MalformedMessage(f"unknown action tag {tag!r}") from e
            actions.append((tick, action))
            last_tick = tick

        evil = data.get("evil", False)
        if not isinstance(evil, bool):
            raise MalformedMessage("history.evil must be a boolean")

        return cls(seed, actions, evil=evil)
