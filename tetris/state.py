# The state of the whole application.
#
# Each variant is its own class: Title, GameWithHistory (playing),
# Paused and GameOver. Transitions return the next variant, and every
# variant has update(), which only moves time forward while playing.

import logging
from typing import Optional, Union

from tetris.config import AppConfig
from tetris.game import Action, Game, History
from tetris.game_over import GameOver
from tetris.xorshift import random_seed

logger = logging.getLogger(__name__)


class Title:
    """The title screen."""

    def __init__(self, config: AppConfig = AppConfig()):
        self.config = config

    def start_game(self) -> "GameWithHistory":
        return play(self.config)

    def update(self):
        return self


class GameWithHistory:
    """
    A game in progress, recording every action for later validation.
    Hosts call the input methods, then update() once per step.
    """

    def __init__(self, config: AppConfig = AppConfig(), seed: Optional[list] = None):
        if seed is None:
            seed = random_seed()
        self.config = config
        self.game = Game(seed, evil=config.evil_mode)
        self.history = History(seed, evil=config.evil_mode)

    def update(self):
        """Advance one tick. Returns self, or a GameOver state."""
        if self.game.apply_step():
            logger.info(f"Game over: score {self.game.score}, lines {self.game.lines_cleared}, "
                        f"ticks {self.game.tick}")
            return GameOver(self.game.score, self.history, self.config)
        return self

    def move_left(self):
        self._apply_action(Action.MOVE_LEFT)

    def move_right(self):
        self._apply_action(Action.MOVE_RIGHT)

    def rotate(self):
        self._apply_action(Action.ROTATE)

    def start_soft_drop(self):
        self._apply_action(Action.START_SOFT_DROP)

    def start_hard_drop(self):
        self._apply_action(Action.START_HARD_DROP)

    def stop_drop(self):
        self._apply_action(Action.STOP_DROP)

    def pause(self) -> "Paused":
        return Paused(self)

    def _apply_action(self, action: Action):
        self.history.push(self.game.tick, action)
        self.game.apply_action(action)


class Paused:
    """A paused game. Time does not advance."""

    def __init__(self, play_state: GameWithHistory):
        self.play_state = play_state
        self.config = play_state.config

    def unpause(self) -> GameWithHistory:
        return self.play_state

    def update(self):
        return self


State = Union[Title, GameWithHistory, Paused, GameOver]


def title(config: AppConfig = AppConfig()) -> Title:
    return Title(config)


def play(config: AppConfig = AppConfig()) -> GameWithHistory:
    return GameWithHistory(config)


def update(state: State) -> State:
    """Move the given state forward one tick."""
    return state.update()
