# Scores and the score submission message.
# A submission carries the game history so the server can replay it.

import logging
from dataclasses import dataclass

from tetris.errors import (
    MalformedMessage,
    NameEmpty,
    NameNotAlphanumeric,
    NameTooLong,
    UnexpectedScore,
)
from tetris.game import History, MAX_REPLAY_TICKS
from tetris.message_types import SCORE_ENDPOINT, validate_score, validate_score_message

logger = logging.getLogger(__name__)

# Measured in UTF-8 bytes, so only ASCII names get all three characters
MAX_NAME_LENGTH = 3

__all__ = ["Score", "ScoreMessage", "SCORE_ENDPOINT", "sort_scores"]


@dataclass
class Score:
    """A score on a scoreboard."""
    value: int
    name: str

    def to_dict(self) -> dict:
        return {"value": self.value, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Score":
        is_valid, error = validate_score(data)
        if not is_valid:
            raise MalformedMessage(error)
        return cls(data['value'], data['name'])


def sort_scores(scores: list) -> list:
    """Descending by value. The sort is stable, so earlier entries win ties."""
    return sorted(scores, key=lambda score: score.value, reverse=True)


def name_length(name: str) -> int:
    return len(name.encode('utf-8'))


def validate_name(name: str):
    """Raises a ScoreValidationError if the name is not 1-3 bytes of alphanumeric characters."""
    if not name:
        raise NameEmpty()
    if name_length(name) > MAX_NAME_LENGTH:
        raise NameTooLong(name_length(name))
    if not all(ch.isalnum() for ch in name):
        raise NameNotAlphanumeric(name)


class ScoreMessage:
    """A message for posting a score, with the history used to verify it."""

    def __init__(self, score: Score, history: History):
        self.score = score
        self.history = history

    def __repr__(self):
        return f"ScoreMessage(score={self.score!r}, history={self.history!r})"

    def validated_score(self, max_ticks: int = MAX_REPLAY_TICKS) -> Score:
        """
        Returns the score, but only if it is valid.

        1. The name must be 1 to 3 alphanumeric characters.
        2. Replaying the history must give exactly the claimed value.

        Raises a ScoreValidationError subclass otherwise.
        """
        validate_name(self.score.name)
        return self._verify_score(max_ticks)

    def _verify_score(self, max_ticks: int) -> Score:
        expected = self.history.replay(max_ticks)
        if expected != self.score.value:
            logger.warning(f"Score {self.score.value} from '{self.score.name}' does not match replay ({expected})")
            raise UnexpectedScore(expected, self.score.value)
        return self.score

    def to_dict(self) -> dict:
        return {"score": self.score.to_dict(), "history": self.history.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "ScoreMessage":
        """Parse a decoded JSON body. Raises MalformedMessage on bad structure."""
        is_valid, error = validate_score_message(data)
        if not is_valid:
            raise MalformedMessage(error)
        return cls(Score.from_dict(data['score']), History.from_dict(data['history']))
