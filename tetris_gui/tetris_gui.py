#!/usr/bin/env python3
"""
Tetris pygame client.
- Polls input and turns it into game actions
- Steps the game at a fixed cadence, independent of the render rate
- Draws whichever state is active

Run with 'evil' (or 'for-filipe') as the first argument for the evil shape table.
"""

import logging
import os
import sys

import pygame

# Add project root to path
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from tetris import config
from tetris.config import AppConfig, parse_args
from tetris.game_over import GameOver
from tetris.score import MAX_NAME_LENGTH, name_length
from tetris.state import GameWithHistory, Paused, State, Title, title
from tetris_gui.base_gui import (
    BASE_CONFIG,
    draw_background,
    draw_board,
    draw_centered_text,
    draw_piece,
    draw_shape_preview,
    draw_text,
    load_fonts,
)

logger = logging.getLogger(__name__)

# Releasing Down ends a soft drop. A hard drop runs until the piece locks.
DROP_KEYS = (pygame.K_DOWN,)


# --- Input Handling ---

def handle_key_in_game(play: GameWithHistory, key) -> State:
    """Maps a key press to a game action."""
    if key == pygame.K_UP:
        play.rotate()
    elif key == pygame.K_LEFT:
        play.move_left()
    elif key == pygame.K_RIGHT:
        play.move_right()
    elif key == pygame.K_DOWN:
        play.start_soft_drop()
    elif key == pygame.K_SPACE:
        play.start_hard_drop()
    elif key in (pygame.K_RETURN, pygame.K_p):
        return play.pause()
    return play


def handle_key_in_game_over(game_over: GameOver, event) -> State:
    if event.key == pygame.K_RETURN:
        return game_over.submit()
    if event.key == pygame.K_ESCAPE:
        return game_over.exit()
    if event.key == pygame.K_BACKSPACE:
        game_over.backspace()
    elif event.unicode:
        game_over.push_name(event.unicode.upper())
    return game_over


def handle_event(state: State, event) -> State:
    """
    Applies one pygame event to the state and returns the next state.
    Actions are applied as they are polled, before the frame's steps.
    """
    if isinstance(state, Title):
        if event.type == pygame.KEYDOWN and event.key == pygame.K_RETURN:
            return state.start_game()

    elif isinstance(state, GameWithHistory):
        if event.type == pygame.KEYDOWN:
            return handle_key_in_game(state, event.key)
        if event.type == pygame.KEYUP and event.key in DROP_KEYS:
            state.stop_drop()
        elif event.type == pygame.WINDOWFOCUSLOST:
            return state.pause()

    elif isinstance(state, Paused):
        if event.type in (pygame.KEYDOWN, pygame.WINDOWFOCUSGAINED):
            return state.unpause()

    elif isinstance(state, GameOver):
        if event.type == pygame.KEYDOWN:
            return handle_key_in_game_over(state, event)

    return state


def is_quit_event(state: State, event) -> bool:
    if event.type == pygame.QUIT:
        return True
    return (isinstance(state, Title) and event.type == pygame.KEYDOWN
            and event.key in (pygame.K_ESCAPE, pygame.K_q))


class StepTimer:
    """
    Turns elapsed render time into whole simulation steps.
    Leftover milliseconds carry over to the next frame.
    """

    def __init__(self, step_ms: int = config.STEP_MS):
        self.step_ms = step_ms
        self.accumulated_ms = 0

    def steps(self, elapsed_ms: int) -> int:
        self.accumulated_ms += elapsed_ms
        count = self.accumulated_ms // self.step_ms
        self.accumulated_ms -= count * self.step_ms
        return count


# --- Main GUI Class ---

class TetrisGUI:
    def __init__(self, app_config: AppConfig):
        self.app_config = app_config
        self.state: State = title(app_config)
        self.running = True
        self.fonts = {}
        self.screen = None
        self.clock = None
        self.timer = StepTimer()

    def run(self):
        self._init_pygame()
        self.fonts = load_fonts()
        self._main_loop()
        self._cleanup()

    def _init_pygame(self):
        pygame.init()
        pygame.font.init()
        self.screen = pygame.display.set_mode((BASE_CONFIG["SCREEN"]["WIDTH"], BASE_CONFIG["SCREEN"]["HEIGHT"]))
        caption = "Tetris (evil)" if self.app_config.evil_mode else "Tetris"
        pygame.display.set_caption(caption)
        self.clock = pygame.time.Clock()

    def _main_loop(self):
        while self.running:
            elapsed_ms = self.clock.tick(config.FPS)

            # 1. Input
            for event in pygame.event.get():
                if is_quit_event(self.state, event):
                    self.running = False
                    break
                previous = type(self.state).__name__
                self.state = handle_event(self.state, event)
                if type(self.state).__name__ != previous:
                    logger.info(f"State: {previous} -> {type(self.state).__name__}")

            # 2. Physics, a whole number of steps per frame
            for _ in range(self.timer.steps(elapsed_ms)):
                self.state = self.state.update()

            # 3. Render
            self._draw()
            pygame.display.flip()

    def _draw(self):
        state = self.state
        if isinstance(state, Title):
            self._draw_title_screen()
        elif isinstance(state, GameWithHistory):
            self._draw_game(state)
        elif isinstance(state, Paused):
            self._draw_game(state.play_state)
            draw_centered_text(self.screen, "PAUSED", 300, self.fonts["TITLE"], BASE_CONFIG["COLORS"]["TEXT"])
        elif isinstance(state, GameOver):
            self._draw_game_over(state)

    def _draw_title_screen(self):
        colors = BASE_CONFIG["COLORS"]
        draw_background(self.screen)
        draw_centered_text(self.screen, "TETRIS", 220, self.fonts["TITLE"], colors["TEXT"])
        draw_centered_text(self.screen, "Press Enter", 320, self.fonts["MEDIUM"], colors["TEXT"])
        if self.app_config.evil_mode:
            draw_centered_text(self.screen, "Evil mode", 380, self.fonts["SMALL"], colors["ERROR"])

    def _draw_game(self, play: GameWithHistory):
        colors = BASE_CONFIG["COLORS"]
        panel_x = BASE_CONFIG["SIZES"]["PANEL_X"]
        game = play.game

        self.screen.fill(colors["BACKGROUND"])
        draw_board(self.screen, game.board)
        draw_piece(self.screen, game.piece)

        draw_text(self.screen, "Next", panel_x, 50, self.fonts["SMALL"], colors["TEXT"])
        draw_shape_preview(self.screen, game.next_shape(), panel_x, 70)
        draw_text(self.screen, "Score", panel_x, 180, self.fonts["SMALL"], colors["TEXT"])
        draw_text(self.screen, str(game.score), panel_x, 205, self.fonts["MEDIUM"], colors["HIGHLIGHT"])
        draw_text(self.screen, "Lines", panel_x, 250, self.fonts["SMALL"], colors["TEXT"])
        draw_text(self.screen, str(game.lines_cleared), panel_x, 275, self.fonts["MEDIUM"], colors["HIGHLIGHT"])
        draw_text(self.screen, "Level", panel_x, 320, self.fonts["SMALL"], colors["TEXT"])
        draw_text(self.screen, str(game.level()), panel_x, 345, self.fonts["MEDIUM"], colors["HIGHLIGHT"])

    def _draw_game_over(self, game_over: GameOver):
        colors = BASE_CONFIG["COLORS"]
        self.screen.fill(colors["BACKGROUND"])
        draw_centered_text(self.screen, "GAME OVER", 40, self.fonts["TITLE"], colors["TEXT"])
        draw_centered_text(self.screen, f"Score: {game_over.score.value}", 100, self.fonts["MEDIUM"], colors["TEXT"])

        hiscores = game_over.hiscores
        if hiscores is None:
            draw_centered_text(self.screen, "Could not load high scores", 160, self.fonts["SMALL"], colors["ERROR"])
            draw_centered_text(self.screen, "Enter to play again", 620, self.fonts["SMALL"], colors["TEXT"])
            return

        # Scoreboard with the user's entry in place
        y_offset = 160
        rows = [(score, False) for score in hiscores.higher_scores]
        if hiscores.has_hiscore:
            rows.append((game_over.score, True))
        rows.extend((score, False) for score in hiscores.lower_scores)
        for rank, (score, is_user) in enumerate(rows, start=1):
            color = colors["HIGHLIGHT"] if is_user else colors["TEXT"]
            name = score.name + ("_" if is_user and name_length(score.name) < MAX_NAME_LENGTH else "")
            draw_text(self.screen, f"{rank:>2}.", 140, y_offset, self.fonts["SMALL"], color)
            draw_text(self.screen, name, 200, y_offset, self.fonts["SMALL"], color)
            draw_text(self.screen, str(score.value), 320, y_offset, self.fonts["SMALL"], color)
            y_offset += 35
            pygame.draw.line(self.screen, (100, 100, 100), (130, y_offset - 10),
                             (BASE_CONFIG["SCREEN"]["WIDTH"] - 130, y_offset - 10), 1)

        if game_over.posting_hiscore():
            prompt = "New high score! Type your name, Enter to submit"
        else:
            prompt = "Enter to play again"
        draw_centered_text(self.screen, prompt, 620, self.fonts["TINY"], colors["TEXT"])

    def _cleanup(self):
        logger.info("Shutting down...")
        self.running = False
        pygame.quit()


def main():
    logging.basicConfig(level=logging.INFO, format='[TETRIS_GUI] %(asctime)s - %(levelname)s: %(message)s')
    app_config = parse_args()
    logger.info(f"Starting Tetris (evil mode: {app_config.evil_mode}, scores: {app_config.score_client})")
    TetrisGUI(app_config).run()


if __name__ == "__main__":
    main()
