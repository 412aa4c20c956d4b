# tetris_gui/base_gui.py
# Layout, colors and drawing helpers shared by the Tetris screens.

import logging
import random

import pygame

from tetris import board
from tetris.shape import SHAPES, Rotation, ShapeColor

logger = logging.getLogger(__name__)

# --- Base Configuration ---
BASE_CONFIG = {
    "SCREEN": {"WIDTH": 560, "HEIGHT": 700},
    "SIZES": {"BLOCK_SIZE": 30, "SMALL_BLOCK_SIZE": 20, "BOARD_X": 40, "BOARD_Y": 50, "PANEL_X": 370},
    "COLORS": {
        "BACKGROUND": (20, 20, 30),
        "BOARD": (10, 10, 20),
        "BORDER": (255, 255, 255),
        "GRID": (35, 35, 50),
        "TEXT": (255, 255, 255),
        "HIGHLIGHT": (254, 251, 52),
        "ERROR": (200, 50, 50),
        "SHAPE_COLORS": {
            ShapeColor.O: (255, 255, 0),
            ShapeColor.I: (0, 255, 255),
            ShapeColor.J: (0, 0, 255),
            ShapeColor.L: (255, 165, 0),
            ShapeColor.S: (0, 255, 0),
            ShapeColor.T: (255, 0, 255),
            ShapeColor.Z: (255, 0, 0),
        }
    },
    "FONTS": {
        # None selects pygame's bundled font
        "DEFAULT_FONT": None,
        "SIZES": {
            "TINY": 18, "SMALL": 24, "MEDIUM": 30, "LARGE": 36, "TITLE": 56,
        },
    },
    "BACKGROUND_ANIMATION": {
        "NUM_PIECES": 20, "MIN_SIZE": 10, "MAX_SIZE": 50,
        "MIN_SPEED": 0.5, "MAX_SPEED": 4.0, "ALPHA": 50
    }
}


def load_fonts() -> dict:
    """Loads the configured font at every size, falling back to pygame's default font."""
    fonts = {}
    font_path = BASE_CONFIG["FONTS"]["DEFAULT_FONT"]
    sizes = BASE_CONFIG["FONTS"]["SIZES"]
    try:
        for name, size in sizes.items():
            fonts[name.upper()] = pygame.font.Font(font_path, size)
    except (pygame.error, FileNotFoundError, OSError):
        for name, size in sizes.items():
            fonts[name.upper()] = pygame.font.Font(None, size)
    fonts["DEFAULT"] = fonts["SMALL"]
    return fonts


# --- Drawing Functions ---

def draw_text(surface, text, x, y, font, color):
    try:
        text_surface = font.render(text, True, color)
        surface.blit(text_surface, (x, y))
    except pygame.error as e:
        logger.error(f"Error rendering text: {e}")


def draw_centered_text(surface, text, y, font, color):
    width = font.size(text)[0]
    draw_text(surface, text, (BASE_CONFIG["SCREEN"]["WIDTH"] - width) // 2, y, font, color)


def draw_block(surface, x, y, size, color):
    """One cell at pixel position (x, y), with a darker outline."""
    rect = pygame.Rect(x, y, size, size)
    pygame.draw.rect(surface, color, rect)
    pygame.draw.rect(surface, tuple(c // 2 for c in color), rect, 1)


def board_cell_to_pixels(pos_x: int, pos_y: int) -> tuple[int, int]:
    """Top-left pixel of a board cell. Hidden rows map above the board."""
    sizes = BASE_CONFIG["SIZES"]
    return (sizes["BOARD_X"] + pos_x * sizes["BLOCK_SIZE"],
            sizes["BOARD_Y"] + (pos_y - board.HIDE_ROWS) * sizes["BLOCK_SIZE"])


def draw_board(surface, game_board):
    """Draws the visible rows of locked cells, plus border and grid."""
    sizes = BASE_CONFIG["SIZES"]
    colors = BASE_CONFIG["COLORS"]
    block = sizes["BLOCK_SIZE"]
    rect = pygame.Rect(sizes["BOARD_X"], sizes["BOARD_Y"], board.WIDTH * block, board.VISIBLE_ROWS * block)

    pygame.draw.rect(surface, colors["BOARD"], rect)
    for row_index, row in enumerate(game_board.visible_grid()):
        for col_index, cell in enumerate(row):
            x, y = board_cell_to_pixels(col_index, row_index + board.HIDE_ROWS)
            if cell is None:
                pygame.draw.rect(surface, colors["GRID"], pygame.Rect(x, y, block, block), 1)
            else:
                draw_block(surface, x, y, block, colors["SHAPE_COLORS"][cell])
    pygame.draw.rect(surface, colors["BORDER"], rect.inflate(4, 4), 2)


def draw_piece(surface, piece):
    """Draws the falling piece, skipping blocks still in the hidden rows."""
    block = BASE_CONFIG["SIZES"]["BLOCK_SIZE"]
    color = BASE_CONFIG["COLORS"]["SHAPE_COLORS"][piece.shape.color]
    for pos in piece.blocks():
        if pos.y < board.HIDE_ROWS:
            continue
        x, y = board_cell_to_pixels(pos.x, pos.y)
        draw_block(surface, x, y, block, color)


def draw_shape_preview(surface, shape, x, y):
    """Draws a shape in its spawn rotation, in small blocks."""
    size = BASE_CONFIG["SIZES"]["SMALL_BLOCK_SIZE"]
    color = BASE_CONFIG["COLORS"]["SHAPE_COLORS"][shape.color]
    for pos in shape.blocks(Rotation()):
        draw_block(surface, x + pos.x * size, y + pos.y * size, size, color)


# --- Background Animation ---
g_background_pieces = []


def draw_background(surface):
    surface.fill(BASE_CONFIG["COLORS"]["BACKGROUND"])
    if not g_background_pieces:
        for _ in range(BASE_CONFIG["BACKGROUND_ANIMATION"]["NUM_PIECES"]):
            g_background_pieces.append(FallingPiece(BASE_CONFIG["SCREEN"]["WIDTH"], BASE_CONFIG["SCREEN"]["HEIGHT"]))
    for piece in g_background_pieces:
        piece.update()
        piece.draw(surface)


class FallingPiece:
    """Decorative shape drifting down the title screen. Not part of any game."""

    def __init__(self, w, h):
        self.w, self.h = w, h
        self.config = BASE_CONFIG["BACKGROUND_ANIMATION"]
        self.reset()
        self.y = random.uniform(-200, self.h)

    def reset(self):
        self.block_size = random.randint(self.config["MIN_SIZE"], self.config["MAX_SIZE"])
        self.shape = random.choice(SHAPES)
        self.color = BASE_CONFIG["COLORS"]["SHAPE_COLORS"][self.shape.color]
        self.speed = random.uniform(self.config["MIN_SPEED"], self.config["MAX_SPEED"])
        self.rotation = Rotation(random.randint(0, 3))
        self.x = random.randint(0, self.w)
        self.y = random.uniform(-200, -50)

    def update(self):
        self.y += self.speed
        if self.y > self.h + 100:
            self.reset()

    def draw(self, surface):
        for pos in self.shape.blocks(self.rotation):
            rect = pygame.Rect(self.x + pos.x * self.block_size, self.y + pos.y * self.block_size,
                               self.block_size, self.block_size)
            block_surf = pygame.Surface(rect.size, pygame.SRCALPHA)
            block_surf.fill(self.color + (self.config["ALPHA"],))
            pygame.draw.rect(block_surf, self.color + (self.config["ALPHA"] + 50,), block_surf.get_rect(), 1)
            surface.blit(block_surf, rect.topleft)
