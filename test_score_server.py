#!/usr/bin/env python3
"""
Tests for the score server:
- Hiscore file storage
- Request processing without a socket
- A real server on an ephemeral port, driven by ScoreClient
"""

import json
import os
import sys
import threading

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from tetris import config
from tetris.game import History
from tetris.rest import ScoreClient
from tetris.score import Score, ScoreMessage
from tetris_server.hiscore_store import HiscoreStore, init_hiscores
from tetris_server.score_server import ScoreServer, process_request

SHORT_GAME = os.path.join(PROJECT_ROOT, "resources", "games", "short.json")


def short_game_body(**score) -> bytes:
    with open(SHORT_GAME, 'r', encoding='utf-8') as f:
        data = json.load(f)
    data["score"].update(score)
    return json.dumps(data).encode('utf-8')


@pytest.fixture
def store(tmp_path):
    return HiscoreStore(str(tmp_path / "hiscores.json"))


@pytest.fixture
def server(store):
    score_server = ScoreServer(("127.0.0.1", 0), store)
    thread = threading.Thread(target=score_server.serve_forever, daemon=True)
    thread.start()
    yield score_server
    score_server.shutdown()
    score_server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def client(server):
    host, port = server.server_address[:2]
    return ScoreClient(f"http://{host}:{port}", timeout=10)


# --- Storage ---

def test_missing_file_gives_default_board(store):
    hiscores = store.load()
    assert hiscores == init_hiscores()
    assert len(hiscores) == config.MAX_HISCORES
    assert all(score == Score(0, config.DEFAULT_HISCORE_NAME) for score in hiscores)


def test_corrupt_file_gives_default_board(store):
    with open(store.path, 'w', encoding='utf-8') as f:
        f.write("{not json")
    assert store.load() == init_hiscores()


def test_corrupt_file_is_kept_aside_when_a_score_is_added(store):
    with open(store.path, 'w', encoding='utf-8') as f:
        f.write("{not json")

    hiscores = store.add_hiscore(Score(500, "BOB"))

    assert hiscores[0] == Score(500, "BOB")
    with open(store.path + ".corrupt", 'r', encoding='utf-8') as f:
        assert f.read() == "{not json"


def test_unreadable_file_is_an_error_not_a_fresh_board(store):
    # A directory in place of the file makes every open() fail
    os.mkdir(store.path)
    with pytest.raises(OSError):
        store.load()
    with pytest.raises(OSError):
        store.add_hiscore(Score(500, "BOB"))
    assert os.path.isdir(store.path)


def test_unreadable_file_gives_server_error(store):
    os.mkdir(store.path)
    status, payload = process_request(store, "GET", "/scores")
    assert status == 500
    assert payload["reason"] == "internal_server_error"

    status, payload = process_request(store, "POST", "/scores", short_game_body())
    assert status == 500
    assert os.path.isdir(store.path)


def test_add_hiscore_sorts_and_truncates(store):
    store.add_hiscore(Score(500, "BOB"))
    hiscores = store.add_hiscore(Score(900, "ANN"))

    assert hiscores[:2] == [Score(900, "ANN"), Score(500, "BOB")]
    assert len(hiscores) == config.MAX_HISCORES
    # The file is the source of truth for the next request
    assert store.load() == hiscores


def test_equal_score_goes_after_the_existing_entry(store):
    store.add_hiscore(Score(500, "BOB"))
    hiscores = store.add_hiscore(Score(500, "CAT"))
    assert hiscores[:2] == [Score(500, "BOB"), Score(500, "CAT")]


def test_full_board_drops_the_lowest(store):
    for value in range(1, 12):
        store.add_hiscore(Score(value * 10, "X"))
    values = [score.value for score in store.load()]
    assert values == [110, 100, 90, 80, 70, 60, 50, 40, 30, 20]


# --- Request processing ---

def test_get_scores(store):
    status, payload = process_request(store, "GET", "/scores")
    assert status == 200
    assert payload == [{"value": 0, "name": "AEL"}] * config.MAX_HISCORES


def test_unknown_path(store):
    status, payload = process_request(store, "GET", "/nope")
    assert status == 404
    assert payload["status"] == "error"
    assert payload["reason"] == "not_found"


def test_method_not_allowed(store):
    status, payload = process_request(store, "DELETE", "/scores")
    assert status == 405
    assert payload["reason"] == "method_not_allowed"


def test_invalid_json(store):
    status, payload = process_request(store, "POST", "/scores", b"{oops")
    assert status == 400
    assert payload["reason"] == "invalid_json_format"


def test_valid_score_is_stored(store):
    status, payload = process_request(store, "POST", "/scores", short_game_body())
    assert status == 200
    assert payload[0] == {"value": 1700, "name": "AEL"}
    assert store.load()[0] == Score(1700, "AEL")


@pytest.mark.parametrize("score, reason", [
    ({"name": ""}, "name_empty"),
    ({"name": "ABCD"}, "name_too_long"),
    ({"name": "A_B"}, "name_not_alphanumeric"),
    ({"value": 1600}, "unexpected_score"),
    ({"value": "lots"}, "malformed_message"),
])
def test_invalid_score_is_rejected(store, score, reason):
    status, payload = process_request(store, "POST", "/scores", short_game_body(**score))
    assert status == 400
    assert payload["status"] == "error"
    assert payload["reason"] == reason
    assert store.load() == init_hiscores()


# --- End to end ---

def test_client_fetches_default_board(client):
    assert client.get_hiscores() == init_hiscores()


def test_client_posts_a_valid_score(client):
    with open(SHORT_GAME, 'r', encoding='utf-8') as f:
        message = ScoreMessage.from_dict(json.load(f))

    hiscores = client.post_hiscore(message)

    assert hiscores[0] == Score(1700, "AEL")
    assert client.get_hiscores() == hiscores


def test_client_gets_none_for_a_rejected_score(client):
    message = ScoreMessage(Score(1700, "AEL"), History([1, 2, 3, 4]))
    assert client.post_hiscore(message) is None
    assert client.get_hiscores() == init_hiscores()


def test_client_gets_none_when_server_is_down():
    client = ScoreClient("http://127.0.0.1:9", timeout=1)
    message = ScoreMessage(Score(10, "AEL"), History([1, 2, 3, 4]))
    assert client.post_hiscore(message) is None
    with pytest.raises(OSError):
        client.get_hiscores()
