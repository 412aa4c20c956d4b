#!/usr/bin/env python3
"""
Tests for the pygame host's input mapping and step timing.
No window is opened.
"""

import os
import sys

import pygame
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from tetris.config import AppConfig
from tetris.game import Action, DropMode, History
from tetris.game_over import GameOver
from tetris.state import GameWithHistory, Paused, Title
from tetris_gui.tetris_gui import StepTimer, handle_event, is_quit_event

OFFLINE = AppConfig()


def key_down(key, unicode=""):
    return pygame.event.Event(pygame.KEYDOWN, key=key, unicode=unicode)


def key_up(key):
    return pygame.event.Event(pygame.KEYUP, key=key)


@pytest.fixture
def playing():
    return GameWithHistory(OFFLINE, seed=[2, 15, 31, 71])


def test_enter_starts_a_game():
    state = handle_event(Title(OFFLINE), key_down(pygame.K_RETURN))
    assert isinstance(state, GameWithHistory)


def test_escape_quits_from_title_only(playing):
    assert is_quit_event(Title(OFFLINE), key_down(pygame.K_ESCAPE))
    assert is_quit_event(Title(OFFLINE), key_down(pygame.K_q))
    assert not is_quit_event(playing, key_down(pygame.K_ESCAPE))
    assert is_quit_event(playing, pygame.event.Event(pygame.QUIT))


@pytest.mark.parametrize("key, action", [
    (pygame.K_LEFT, Action.MOVE_LEFT),
    (pygame.K_RIGHT, Action.MOVE_RIGHT),
    (pygame.K_UP, Action.ROTATE),
    (pygame.K_DOWN, Action.START_SOFT_DROP),
    (pygame.K_SPACE, Action.START_HARD_DROP),
])
def test_game_keys_are_recorded(playing, key, action):
    assert handle_event(playing, key_down(key)) is playing
    assert playing.history.actions == [(0, action)]


def test_releasing_a_drop_key_stops_the_drop(playing):
    handle_event(playing, key_down(pygame.K_DOWN))
    handle_event(playing, key_up(pygame.K_DOWN))
    assert playing.game.drop_mode == DropMode.NORMAL
    assert playing.history.actions[-1] == (0, Action.STOP_DROP)


def test_tapping_space_still_locks_the_piece(playing):
    first_piece = playing.game.piece
    handle_event(playing, key_down(pygame.K_SPACE))
    playing = playing.update()
    handle_event(playing, key_up(pygame.K_SPACE))

    for _ in range(5):
        playing = playing.update()
        if playing.game.piece is not first_piece:
            break

    assert playing.game.piece is not first_piece
    assert playing.history.actions == [(0, Action.START_HARD_DROP)]


def test_releasing_other_keys_is_not_recorded(playing):
    handle_event(playing, key_up(pygame.K_LEFT))
    assert playing.history.actions == []


def test_pause_and_resume(playing):
    paused = handle_event(playing, key_down(pygame.K_p))
    assert isinstance(paused, Paused)
    assert handle_event(paused, key_down(pygame.K_a)) is playing

    paused = handle_event(playing, pygame.event.Event(pygame.WINDOWFOCUSLOST))
    assert isinstance(paused, Paused)
    assert handle_event(paused, pygame.event.Event(pygame.WINDOWFOCUSGAINED)) is playing


def test_name_entry_keys():
    screen = GameOver(0, History([1, 2, 3, 4]), OFFLINE)
    screen.hiscores = None
    handle_event(screen, key_down(pygame.K_a, "a"))
    handle_event(screen, key_down(pygame.K_b, "b"))
    assert screen.score.name == "AB"
    handle_event(screen, key_down(pygame.K_BACKSPACE, "\b"))
    assert screen.score.name == "A"
    assert isinstance(handle_event(screen, key_down(pygame.K_RETURN, "\r")), GameWithHistory)


def test_step_timer_carries_leftover_time():
    timer = StepTimer(step_ms=33)
    assert timer.steps(100) == 3
    assert timer.accumulated_ms == 1
    assert timer.steps(32) == 1
    assert timer.steps(10) == 0
    assert timer.accumulated_ms == 10
