"""
Grid dimensions, level tables, timing windows for hops/countdown/scoring,
leaderboard limits, window colors, asset paths, and logging configuration.
"""

import os

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Grid
GRID_WIDTH, GRID_HEIGHT = 12, 16
START_ZONE_ROWS = 2                # bottom rows hazards never reach
SPAWN_CELL = (6, 14)

# Player
START_LIVES = 3
HOP_DURATION_MS = 100
HOP_HEIGHT = 0.7                   # peak of the hop arc, in tiles
INVINCIBILITY_MS = 2500            # after a respawn
BLINK_INTERVAL_MS = 150

# Level System Settings
TOTAL_LEVELS = 12
COLLECTIBLES_PER_LEVEL = [6, 7, 7, 8, 8, 8, 9, 9, 9, 9, 10, 10]
BASE_SPEED_MS = 900
SPEED_DECREASE_MS = 40             # per level
COLLECTIBLE_PLACEMENT_ATTEMPTS = 300
SCATTER_PLACEMENT_ATTEMPTS = 50
SNAKE_TURN_PROBABILITY = 0.15

# Time-based scoring
MAX_LEVEL_SCORE = 10
GRACE_PERIOD_MS = 10000            # potential award stays at max
SCORE_DECAY_MS = 20000             # then decays linearly to the floor
MIN_LEVEL_SCORE = 1
MAX_TOTAL_SCORE = TOTAL_LEVELS * MAX_LEVEL_SCORE

# Sequencing
COUNTDOWN_FROM = 3
COUNTDOWN_STEP_MS = 800
COUNTDOWN_GO_MS = 400
LEVEL_COMPLETE_DELAY_MS = 300      # lets the score popup render
LEVEL_TRANSITION_MS = 1000         # "SECTOR n" banner before the countdown
DAMAGE_FLASH_MS = 300
SCORE_POPUP_MS = 1000

# Leaderboard
LEADERBOARD_FILE = os.environ.get(
    "MAGMA_LEADERBOARD_FILE", os.path.join(ROOT_DIR, "leaderboard.json")
)
LEADERBOARD_PORT = int(os.environ.get("PORT", "3001"))
LEADERBOARD_TOP_N = 10
LEADERBOARD_RETAIN = 100
MAX_NAME_LENGTH = 20
MAX_SUBMITTED_SCORE = 120
CHARACTERS = ["chicken", "banana", "skier", "turtle"]
DEFAULT_CHARACTER = "chicken"

# Window
TILE_PX = 36
HUD_HEIGHT = 72
WIDTH = GRID_WIDTH * TILE_PX + 240
HEIGHT = GRID_HEIGHT * TILE_PX + HUD_HEIGHT + 24
FPS = 60
HUD_PADDING = 12
FONT_NAME = "freesansbold.ttf"

# Font Size Constants
FONT_SIZE_SMALL = 14
FONT_SIZE_MEDIUM = 16
FONT_SIZE_LARGE = 28

# Colors
BG_COLOR = (10, 10, 26)
TEXT_COLOR = (235, 235, 235)
TILE_DEFAULT = (42, 42, 58)
TILE_SAFE_ISLAND = (0, 255, 136)
TILE_LAVA = (255, 51, 17)
TILE_COLLECTIBLE = (0, 204, 255)
TILE_COUNTDOWN = (0, 255, 255)
CHARACTER_COLORS = {
    "chicken": ((255, 221, 51), (255, 102, 34)),
    "banana": ((255, 225, 53), (139, 69, 19)),
    "skier": ((34, 85, 204), (255, 68, 68)),
    "turtle": ((45, 134, 89), (139, 69, 19)),
}

# Log file settings
LOG_FILE = os.path.join(ROOT_DIR, "log.md")
ASSETS_DIR = os.path.join(ROOT_DIR, "assets")
MUSIC_PATH = os.path.join(ASSETS_DIR, "music.ogg")
HOP_SFX_PATH = os.path.join(ASSETS_DIR, "hop.wav")
HIT_SFX_PATH = os.path.join(ASSETS_DIR, "hit.wav")
COLLECT_SFX_PATH = os.path.join(ASSETS_DIR, "collect.wav")
COUNTDOWN_SFX_PATH = os.path.join(ASSETS_DIR, "countdown.wav")
GO_SFX_PATH = os.path.join(ASSETS_DIR, "go.wav")
LEVEL_UP_SFX_PATH = os.path.join(ASSETS_DIR, "level_up.wav")
WIN_SFX_PATH = os.path.join(ASSETS_DIR, "win.wav")
GAME_OVER_SFX_PATH = os.path.join(ASSETS_DIR, "game_over.wav")
