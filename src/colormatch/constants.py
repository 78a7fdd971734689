# ============================================================================
# GRID MATCH SCORING
# ============================================================================
GRID_BASE_SCORE = 1000
GRID_SCORE_FLOOR = 100
UNIFORM_MOVE_PENALTY = 20
ISOLATED_MOVE_PENALTY = 15

# Exact-isolated variant tuning keyed by grid size.
TARGET_RATIO_BY_SIZE = {3: 0.6, 4: 0.7, 5: 0.8}
MAX_MOVES_BY_SIZE = {3: 15, 4: 20, 5: 25}
GRID_SIZES = (3, 4, 5)

# ============================================================================
# MEMORY MATCH SCORING & TIMING
# ============================================================================
MATCH_POINTS_PER_CELL = 10      # award = points * grid_size
MISMATCH_PENALTY = 5
MEMORY_SCORE_FLOOR = 0
LEVEL_UP_BONUS = 50

REVEAL_TICK_INTERVAL = 0.05     # seconds between reveal progress updates
TAP_RESOLVE_DELAY = 0.3         # flip first, score after this delay
MISMATCH_FLIP_BACK_DELAY = 1.0
ROUND_ADVANCE_DELAY = 0.5
LEVEL_TRANSITION_DELAY = 1.0

# Progressive levels beyond the explicit table.
LEVEL_CAP_GRID_SIZE = 5
LEVEL_CAP_REQUIRED_MATCHES = 3
LEVEL_MIN_TIME_LIMIT = 10
LEVEL_MIN_REVEAL_TIME = 0.5

# ============================================================================
# RECORDS
# ============================================================================
LEADERBOARD_SIZE = 10
DEFAULT_PLAYER_NAME = "Player"
SAVE_PATH_ENV = "COLORMATCH_SAVE_PATH"

# ============================================================================
# WINDOW & LAYOUT
# ============================================================================
WINDOW_WIDTH = 800
WINDOW_HEIGHT = 600
BOTTOM_MARGIN = 20
HUD_HEIGHT = 110
BOARD_MAX_WIDTH_PCT = 0.75
BOARD_MAX_HEIGHT_PCT = 0.90
TILE_GAP = 8
MIN_TILE_SIZE = 20
