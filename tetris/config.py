# Shared configuration for the game client, the score server and the GUI.
# Boot-time settings are read once into an AppConfig and passed around;
# nothing here changes during a game.

import argparse
import os
from dataclasses import dataclass
from typing import Optional

# Score server
SCORE_SERVER_HOST = "0.0.0.0"
SCORE_SERVER_PORT = 8000
SCORE_SERVER_URL = os.environ.get("TETRIS_SERVER_URL", "http://tetris.ael.red")
HTTP_TIMEOUT_SECONDS = 5

# Hiscores storage (server side)
TETRIS_CONF_DIR = os.path.join("~", ".tetris")
HISCORES_FILE = "hiscores.json"
HISCORES_LOCK_FILE = "hiscores.lock"
MAX_HISCORES = 10
DEFAULT_HISCORE_NAME = "AEL"

# Host timing: ~30 simulation steps per second, rendered faster
STEP_MS = 33
FPS = 60

# First positional arguments that unlock the evil shape table
EVIL_MODE_ARGS = ("evil", "for-filipe")


@dataclass(frozen=True)
class AppConfig:
    """Immutable boot-time settings threaded through every state."""
    evil_mode: bool = False
    # A tetris.rest.ScoreClient, or None to play offline
    score_client: Optional[object] = None


def parse_args(argv: Optional[list] = None) -> AppConfig:
    """Builds the AppConfig from the command line (sys.argv[1:] by default)."""
    from tetris.rest import ScoreClient

    parser = argparse.ArgumentParser(description="Tetris")
    parser.add_argument(
        'mode',
        nargs='?',
        default=None,
        help=f"Game mode; {' or '.join(EVIL_MODE_ARGS)} swaps in the evil shape table"
    )
    parser.add_argument('--server', type=str, default=SCORE_SERVER_URL, help='Base URL of the score server')
    parser.add_argument('--offline', action='store_true', help='Do not fetch or post high scores')
    args = parser.parse_args(argv)

    evil_mode = args.mode in EVIL_MODE_ARGS
    score_client = None if args.offline else ScoreClient(args.server)
    return AppConfig(evil_mode=evil_mode, score_client=score_client)
