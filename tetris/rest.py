# HTTP client for the score server.
# Fetching scores may fail and the caller decides what to show;
# posting never raises, a lost submission is only logged.

import json
import logging
import urllib.error
import urllib.request
from urllib.parse import urljoin

from tetris import config
from tetris.errors import ScoreValidationError
from tetris.message_types import SCORE_ENDPOINT
from tetris.score import Score, ScoreMessage

logger = logging.getLogger(__name__)


def _decode_scores(body: bytes) -> list[Score]:
    data = json.loads(body.decode('utf-8'))
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of scores, got {type(data).__name__}")
    return [Score.from_dict(item) for item in data]


class ScoreClient:
    def __init__(self, base_url: str = config.SCORE_SERVER_URL, timeout: float = config.HTTP_TIMEOUT_SECONDS):
        self.base_url = base_url
        self.timeout = timeout

    def __repr__(self):
        return f"ScoreClient({self.base_url!r})"

    def scores_endpoint(self) -> str:
        return urljoin(self.base_url, SCORE_ENDPOINT)

    def get_hiscores(self) -> list[Score]:
        """
        Fetch the server's scoreboard, sorted descending.
        Raises on network, HTTP or decoding errors.
        """
        with urllib.request.urlopen(self.scores_endpoint(), timeout=self.timeout) as response:
            body = response.read()
        try:
            return _decode_scores(body)
        except ScoreValidationError as e:
            raise ValueError(f"Invalid scoreboard from server: {e}") from e

    def post_hiscore(self, message: ScoreMessage) -> list[Score] | None:
        """
        Submit a score with its history.
        Returns the updated scoreboard, or None if the submission failed.
        """
        body = json.dumps(message.to_dict()).encode('utf-8')
        request = urllib.request.Request(
            self.scores_endpoint(),
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST"
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                response_body = response.read()
            scores = _decode_scores(response_body)
            logger.info(f"Posted hiscore {message.score.value} for '{message.score.name}'")
            return scores
        except urllib.error.HTTPError as e:
            # Rejected by the server, the body explains why
            try:
                detail = e.read().decode('utf-8', errors='replace')
            except OSError:
                detail = ""
            logger.error(f"Server rejected hiscore ({e.code}): {detail}")
        except (urllib.error.URLError, OSError) as e:
            logger.error(f"Failed to post hiscore: {e}")
        except (ValueError, ScoreValidationError) as e:
            logger.error(f"Failed to decode hiscore response: {e}")
        return None
