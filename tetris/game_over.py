# Game over state: shows the scoreboard and lets the player enter
# a name for a new high score.

import bisect
import logging

from tetris.config import AppConfig
from tetris.game import History
from tetris.score import MAX_NAME_LENGTH, Score, ScoreMessage, name_length

logger = logging.getLogger(__name__)


class HighScores:
    """Where the user's score would land on the server's scoreboard."""

    def __init__(self, higher_scores: list, lower_scores: list, has_hiscore: bool):
        # Scores strictly higher than the user's score
        self.higher_scores = higher_scores
        # Scores lower than or equal to the user's, minus the one it would displace
        self.lower_scores = lower_scores
        self.has_hiscore = has_hiscore

    def __repr__(self):
        return (f"HighScores(higher_scores={self.higher_scores!r}, "
                f"lower_scores={self.lower_scores!r}, has_hiscore={self.has_hiscore})")

    @classmethod
    def from_scores(cls, hiscores: list, user_score: Score) -> "HighScores":
        """
        Split a descending scoreboard around the user's score.

        The lowest of the remaining scores is displaced. Equal scores
        count as lower, so they are listed after the user.
        """
        # bisect needs ascending keys, so search on negated values
        keys = [-score.value for score in hiscores]
        index = bisect.bisect_left(keys, -user_score.value)

        higher_scores = list(hiscores[:index])
        lower_scores = list(hiscores[index:])
        displaced = lower_scores.pop() if lower_scores else None

        has_hiscore = not higher_scores or displaced is not None
        return cls(higher_scores, lower_scores, has_hiscore)


class GameOver:
    """Game over screen state. Holds the user's score and the game history."""

    def __init__(self, score: int, history: History, config: AppConfig = AppConfig()):
        self.config = config
        self.score = Score(score, "")
        self.history = history
        # None when the scoreboard could not be retrieved
        self.hiscores = self._fetch_hiscores()

    def _fetch_hiscores(self) -> HighScores | None:
        client = self.config.score_client
        if client is None:
            return None
        try:
            scores = client.get_hiscores()
        except Exception as e:
            logger.warning(f"Failed to retrieve hiscores: {e}")
            return None
        return HighScores.from_scores(scores, self.score)

    def update(self):
        return self

    def posting_hiscore(self) -> bool:
        return self.hiscores is not None and self.hiscores.has_hiscore

    def backspace(self):
        """Delete a character from the entered name."""
        self.score.name = self.score.name[:-1]

    def push_name(self, text: str):
        """
        Append typed characters. Non-alphanumeric input is ignored.
        Characters that would take the name past the byte limit are dropped.
        """
        if text and all(ch.isalnum() for ch in text):
            for ch in text:
                if name_length(self.score.name + ch) > MAX_NAME_LENGTH:
                    break
                self.score.name += ch

    def submit(self):
        """
        Post the high score if there is one, then start a new game.
        Stays on this screen while a high score still has no name.
        """
        from tetris.state import play

        if self.posting_hiscore() and not self.score.name:
            return self

        if self.posting_hiscore():
            message = ScoreMessage(Score(self.score.value, self.score.name), self.history)
            self.config.score_client.post_hiscore(message)
        return play(self.config)

    def exit(self):
        """Leave without posting and start a new game."""
        from tetris.state import play
        return play(self.config)
