# Standalone Score Server.
#
# HTTP server for the high-score board.
#   GET  /scores  -> the top scores, sorted descending
#   POST /scores  -> validate a ScoreMessage by replaying its history,
#                    store it and return the new board
# All bodies are JSON. Uses a thread per request.

import argparse
import json
import logging
import os
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

# Add project root to path
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from tetris import config
from tetris.errors import ScoreValidationError
from tetris.message_types import (
    REASON_INTERNAL_ERROR,
    REASON_INVALID_JSON,
    REASON_METHOD_NOT_ALLOWED,
    REASON_NOT_FOUND,
    SCORE_ENDPOINT,
    error_response,
)
from tetris.score import ScoreMessage
from tetris_server.hiscore_store import HiscoreStore, default_hiscores_path

logger = logging.getLogger(__name__)

# Bodies are a seed plus an action log; anything much larger is not a real game
MAX_BODY_SIZE = 4 * 1024 * 1024

# Request Processing Logic


def process_request(store: HiscoreStore, method: str, path: str, body: bytes = b"") -> tuple[int, object]:
    """
    Main logic to handle a request.
    Returns (http_status, json_payload).
    """
    if path.split('?', 1)[0].rstrip('/') != SCORE_ENDPOINT:
        return 404, error_response(REASON_NOT_FOUND, f"No such endpoint: {path}")

    try:
        if method == "GET":
            return 200, [score.to_dict() for score in store.load()]

        if method != "POST":
            return 405, error_response(REASON_METHOD_NOT_ALLOWED, f"Method {method} not allowed")

        # 1. Decode from bytes to string and parse JSON
        try:
            request_data = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to decode/parse JSON: {e}")
            return 400, error_response(REASON_INVALID_JSON, str(e))

        # 2. Validate: structure, name rules, then replay
        try:
            message = ScoreMessage.from_dict(request_data)
            score = message.validated_score()
        except ScoreValidationError as e:
            logger.warning(f"Rejected score submission ({e.reason}): {e}")
            return 400, error_response(e.reason, str(e))

        # 3. Store
        hiscores = store.add_hiscore(score)
        return 200, [item.to_dict() for item in hiscores]

    except Exception as e:
        logger.error(f"Unexpected error in process_request: {e}", exc_info=True)
        return 500, error_response(REASON_INTERNAL_ERROR)


# Request Handler


class ScoreRequestHandler(BaseHTTPRequestHandler):
    """Runs in a separate thread for each request."""

    server_version = "TetrisScoreServer/1.0"

    def do_GET(self):
        self._handle("GET")

    def do_POST(self):
        self._handle("POST")

    def _handle(self, method: str):
        body = b""
        if method == "POST":
            length = int(self.headers.get('Content-Length') or 0)
            if not (0 <= length <= MAX_BODY_SIZE):
                self._send_json(413, error_response(REASON_INVALID_JSON, f"Body too large ({length} bytes)"))
                return
            body = self.rfile.read(length)

        status, payload = process_request(self.server.store, method, self.path, body)
        self._send_json(status, payload)

    def _send_json(self, status: int, payload):
        response_bytes = json.dumps(payload).encode('utf-8')
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(response_bytes)))
        self.end_headers()
        self.wfile.write(response_bytes)

    def log_message(self, format, *args):
        logger.info(f"{self.address_string()} - {format % args}")


class ScoreServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple, store: HiscoreStore):
        super().__init__(address, ScoreRequestHandler)
        self.store = store


# Main Server Loop


def main():
    """Starts the score server."""
    logging.basicConfig(level=logging.INFO, format='[SCORE_SERVER] %(asctime)s - %(message)s')

    parser = argparse.ArgumentParser(description="Tetris Score Server")
    parser.add_argument('--host', type=str, default=config.SCORE_SERVER_HOST, help='Address to bind')
    parser.add_argument('--port', type=int, default=config.SCORE_SERVER_PORT, help='Port to listen on')
    parser.add_argument('--hiscores', type=str, default=None, help='Path of the hiscores JSON file')
    args = parser.parse_args()

    store = HiscoreStore(args.hiscores or default_hiscores_path())

    try:
        server = ScoreServer((args.host, args.port), store)
    except OSError as e:
        logger.critical(f"Failed to bind {args.host}:{args.port}: {e}")
        sys.exit(1)

    logger.info(f"Score Server listening on {args.host}:{args.port} (hiscores: {store.path})")
    logger.info("Press Ctrl+C to stop.")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down score server.")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
