# Hiscores storage
# The top scores live in a single JSON file. Writers hold an exclusive
# lock on a sibling .lock file for the whole read-modify-write cycle,
# so several server processes can share one file.

import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

from tetris import config
from tetris.errors import ScoreValidationError
from tetris.score import Score, sort_scores

logger = logging.getLogger(__name__)


def default_hiscores_path() -> str:
    """<home>/.tetris/hiscores.json, creating the directory if needed."""
    conf_dir = os.path.expanduser(config.TETRIS_CONF_DIR)
    os.makedirs(conf_dir, exist_ok=True)
    return os.path.join(conf_dir, config.HISCORES_FILE)


def init_hiscores() -> list[Score]:
    return [Score(0, config.DEFAULT_HISCORE_NAME) for _ in range(config.MAX_HISCORES)]


class HiscoreStore:
    """Top-10 scoreboard backed by a JSON file."""

    def __init__(self, path: str):
        self.path = path
        self.storage_dir = os.path.dirname(os.path.abspath(path))
        os.makedirs(self.storage_dir, exist_ok=True)
        self.lock_path = os.path.join(self.storage_dir, config.HISCORES_LOCK_FILE)

        # Threads of this process also serialize on a plain lock
        self.thread_lock = threading.Lock()

    @contextmanager
    def _file_lock(self, exclusive: bool):
        with open(self.lock_path, 'a') as lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            try:
                yield
            finally:
                fcntl.flock(lock_file, fcntl.LOCK_UN)

    def _read_file(self, keep_corrupt: bool = False) -> list[Score]:
        """
        Load the scoreboard. A missing or corrupt file gives the default board.
        OS errors (permissions, I/O) propagate so the stored board is never replaced.
        With keep_corrupt, a corrupt file is moved to <path>.corrupt before it is rewritten.
        """
        if not os.path.exists(self.path):
            logger.info(f"No hiscores at {self.path}, starting from the default board")
            return init_hiscores()
        with open(self.path, 'rb') as f:
            content = f.read()
        try:
            data = json.loads(content.decode('utf-8'))
            if not isinstance(data, list):
                raise ValueError("hiscores file must contain a list")
            return [Score.from_dict(item) for item in data]
        except (ValueError, ScoreValidationError) as e:
            logger.error(f"Hiscores file {self.path} is invalid: {e}")
            if keep_corrupt:
                backup_path = self.path + ".corrupt"
                os.replace(self.path, backup_path)
                logger.warning(f"Moved invalid hiscores file to {backup_path}")
            return init_hiscores()

    def _write_file(self, hiscores: list[Score]):
        """Save the scoreboard atomically (write to temp file, then rename)."""
        temp_fd, temp_path = tempfile.mkstemp(dir=self.storage_dir, suffix='.tmp')
        try:
            with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
                json.dump([score.to_dict() for score in hiscores], f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except Exception as e:
            logger.error(f"Error saving {self.path}: {e}")
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def load(self) -> list[Score]:
        with self.thread_lock, self._file_lock(exclusive=False):
            return self._read_file()

    def add_hiscore(self, score: Score) -> list[Score]:
        """
        Insert an already validated score.

        1. Loads the current board.
        2. Appends the score and sorts descending (ties keep the older entry first).
        3. Truncates to the maximum board size.
        4. Rewrites the file.

        Returns the new board.
        """
        with self.thread_lock, self._file_lock(exclusive=True):
            hiscores = self._read_file(keep_corrupt=True)
            hiscores.append(score)
            hiscores = sort_scores(hiscores)[:config.MAX_HISCORES]
            self._write_file(hiscores)

        logger.info(f"Stored hiscore {score.value} for '{score.name}'")
        return hiscores
