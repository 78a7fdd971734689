from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of unreferenced systems connected.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT & COMMANDS
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"                  # payload: x, y, button
EVENT_GAME_START_REQUEST = "game_start_request"    # payload: game=GameKind, mode=GridMode|Difficulty
EVENT_GAME_RESET_REQUEST = "game_reset_request"    # payload: None
EVENT_GAME_END_REQUEST = "game_end_request"        # payload: None
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_TAP = "tile_tap"                        # payload: tile_entity=int
EVENT_HINT_REQUEST = "hint_request"                # payload: None
EVENT_SCORE_SUBMIT_REQUEST = "score_submit_request"  # payload: player_name=str


# ============================================================================
# GRID MATCH
# ============================================================================
EVENT_GRID_RESET = "grid_reset"                    # payload: mode_key=str, target=CellColor, target_count=int|None, max_moves=int|None
EVENT_GRID_CHANGED = "grid_changed"                # payload: positions=[(r,c),...], moves=int, score=int
EVENT_GRID_HINT = "grid_hint"                      # payload: position=(r,c)|None
EVENT_GRID_WON = "grid_won"                        # payload: mode_key=str, score=int, elapsed=int, moves=int
EVENT_GRID_OUT_OF_MOVES = "grid_out_of_moves"      # payload: mode_key=str, moves=int
EVENT_ELAPSED_CHANGED = "elapsed_changed"          # payload: elapsed=int


# ============================================================================
# MEMORY MATCH
# ============================================================================
EVENT_ROUND_STARTED = "round_started"              # payload: round_number=int, level=int, target_color=(r,g,b), required_matches=int
EVENT_REVEAL_PROGRESS = "reveal_progress"          # payload: progress=float
EVENT_REVEAL_COMPLETE = "reveal_complete"          # payload: round_number=int
EVENT_TILE_FLIPPED = "tile_flipped"                # payload: tile_entity=int, revealed=bool
EVENT_TILE_MATCHED = "tile_matched"                # payload: tile_entity=int, matches_found=int, required_matches=int, score=int
EVENT_TILE_MISMATCHED = "tile_mismatched"          # payload: tile_entity=int, score=int
EVENT_ROUND_COMPLETE = "round_complete"            # payload: round_number=int
EVENT_LEVEL_UP = "level_up"                        # payload: level=int, config=ModeConfig, score=int
EVENT_TIME_CHANGED = "time_changed"                # payload: time_remaining=int
EVENT_NEW_HIGH_SCORE = "new_high_score"            # payload: mode_key=str, score=int
EVENT_TIME_UP = "time_up"                          # payload: mode_key=str, score=int


# ============================================================================
# RECORDS & PERSISTENCE
# ============================================================================
EVENT_SCORE_SUBMITTED = "score_submitted"              # payload: mode_key=str, entry=LeaderboardEntry
EVENT_HIGH_SCORE_RECORDED = "high_score_recorded"      # payload: mode_key=str, entry=LeaderboardEntry, rank=int
EVENT_BEST_RECORD_CHANGED = "best_record_changed"      # payload: mode_key=str, best_score=int, best_time=int
EVENT_PERSISTENCE_FAILED = "persistence_failed"        # payload: operation=str, key=str, error=Exception
EVENT_REMOTE_SYNC_FAILED = "remote_sync_failed"        # payload: entry=LeaderboardEntry, error=Exception


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: previous_mode=AppMode|None, new_mode=AppMode
