import random

import pytest

from colormatch.components.cell_color import PLAYABLE_COLORS, CellColor
from colormatch.components.game_mode import GameKind, GridMode, GridVariant
from colormatch.components.game_state import AppMode
from colormatch.components.grid_session import GridPhase
from colormatch.events.bus import (
    EVENT_BEST_RECORD_CHANGED,
    EVENT_ELAPSED_CHANGED,
    EVENT_GAME_START_REQUEST,
    EVENT_GRID_CHANGED,
    EVENT_GRID_HINT,
    EVENT_GRID_OUT_OF_MOVES,
    EVENT_GRID_RESET,
    EVENT_GRID_WON,
    EVENT_HIGH_SCORE_RECORDED,
    EVENT_SCORE_SUBMITTED,
    EVENT_TILE_CLICK,
)
from colormatch.systems.grid_match_system import GridMatchSystem
from colormatch.systems.leaderboard_system import LeaderboardSystem
from colormatch.utils import grid_rules
from colormatch.utils.game_state import get_game_state
from tests.helpers import EventRecorder, tick

R, G, B, Y, N = CellColor.RED, CellColor.GREEN, CellColor.BLUE, CellColor.YELLOW, CellColor.NEUTRAL


@pytest.fixture
def grid(world, bus, timers):
    return GridMatchSystem(world, bus, timers)


def _set_cells(system, rows):
    system.board.cells = [list(row) for row in rows]


@pytest.mark.parametrize("size", [3, 4, 5])
@pytest.mark.parametrize("variant", list(GridVariant))
def test_reset_yields_neutral_unwon_grid(grid, size, variant):
    grid.reset(GridMode(size, variant))

    assert grid.board.count(N) == size * size
    assert not grid.is_won()
    assert not grid.check_win()
    assert grid.session.phase is GridPhase.ACTIVE
    assert grid.session.moves == 0
    assert grid.session.score == 1000
    assert grid.session.target.is_playable


def test_reset_uses_injected_random_for_target(world, bus, timers, rng):
    rng.choices = [B]
    system = GridMatchSystem(world, bus, timers)
    system.reset(GridMode(3, GridVariant.EXACT_ISOLATED))

    assert system.session.target is B
    assert system.session.target_count == 5
    assert system.session.moves_remaining == 15


def test_tap_corner_on_fresh_grid(grid):
    grid.reset(GridMode(3))

    touched = grid.apply_move(0, 0)

    assert sorted(touched) == [(0, 0), (0, 1), (1, 0)]
    assert grid.board.cells == [
        [R, R, N],
        [R, N, N],
        [N, N, N],
    ]
    assert not grid.is_won()
    assert grid.session.moves == 1
    assert grid.session.score == 980


def test_move_off_board_changes_nothing(grid):
    grid.reset(GridMode(3))

    assert grid.apply_move(3, 3) == []
    assert grid.session.moves == 0
    assert grid.board.count(N) == 9


def test_uniform_win_freezes_round(grid, bus, timers):
    recorder = EventRecorder(bus, EVENT_GRID_WON, EVENT_GRID_CHANGED)
    grid.reset(GridMode(3))
    _set_cells(grid, [
        [R, Y, R],
        [Y, Y, Y],
        [R, Y, R],
    ])
    tick(bus, 2.0, steps=2)

    grid.apply_move(1, 1)

    assert grid.is_won()
    assert grid.board.count(R) == 9
    won = recorder.named(EVENT_GRID_WON)
    assert won == [{"mode_key": "grid_Easy", "score": 980, "elapsed": 2, "moves": 1}]

    assert grid.apply_move(0, 0) == []
    assert grid.session.moves == 1
    assert grid.hint() is None
    tick(bus, 3.0)
    assert grid.session.elapsed == 2


def test_isolated_win_requires_no_adjacent_targets(grid, rng):
    rng.choices = [R]
    grid.reset(GridMode(3, GridVariant.EXACT_ISOLATED))
    _set_cells(grid, [
        [Y, Y, G],
        [B, R, G],
        [R, G, R],
    ])

    grid.apply_move(0, 0)

    assert grid.board.cells == [
        [R, R, G],
        [Y, R, G],
        [R, G, R],
    ]
    assert grid.board.count(R) == 5
    assert not grid.is_won()

    _set_cells(grid, [
        [Y, B, R],
        [B, R, G],
        [R, G, R],
    ])
    grid.apply_move(0, 0)

    assert grid.board.cells == [
        [R, Y, R],
        [Y, R, G],
        [R, G, R],
    ]
    assert grid.is_won()
    assert grid.session.score == 1000 - 2 * 15


def test_move_budget_exhaustion(grid, bus):
    recorder = EventRecorder(bus, EVENT_GRID_OUT_OF_MOVES)
    grid.reset(GridMode(3, GridVariant.EXACT_ISOLATED))

    for _ in range(15):
        grid.apply_move(0, 0)

    assert grid.session.moves_remaining == 0
    assert grid.session.out_of_moves
    assert grid.apply_move(1, 1) == []
    assert grid.session.moves == 15
    assert len(recorder.named(EVENT_GRID_OUT_OF_MOVES)) == 1
    assert grid.session.score == 1000 - 15 * 15


def test_uniform_variant_has_no_budget_and_floors_score(grid):
    grid.reset(GridMode(5))

    for _ in range(60):
        grid.apply_move(2, 2)

    assert grid.session.moves == 60
    assert grid.session.moves_remaining is None
    assert grid.session.score == 100
    assert not grid.is_won()


def test_uniform_hint_and_clear_on_move(grid):
    grid.reset(GridMode(3))
    assert grid.hint() == (0, 0)

    grid.apply_move(0, 0)
    assert grid.session.hint is None
    assert grid.hint() == (0, 2)
    assert grid.board.count(R) == 3


def test_randomized_hint_draws_from_candidates_with_injected_random(world, bus, timers):
    system = GridMatchSystem(world, bus, timers, rng=random.Random(7), randomize_hint=True)
    system.reset(GridMode(3))
    system.apply_move(0, 0)
    candidates = grid_rules.uniform_hint_candidates(system.board, system.session.target)

    replay = random.Random(7)
    replay.choice(PLAYABLE_COLORS)
    expected = replay.choice(candidates)

    assert system.hint() == expected
    assert expected != (0, 0)


def test_isolated_hint_ranks_by_target_neighbors(grid, rng):
    rng.choices = [R]
    grid.reset(GridMode(3, GridVariant.EXACT_ISOLATED))
    _set_cells(grid, [
        [N, R, N],
        [R, N, R],
        [N, R, N],
    ])

    assert grid.hint() == (1, 1)
    assert grid.snapshot().hint == (1, 1)


def test_elapsed_counts_whole_seconds(grid, bus):
    grid.reset(GridMode(3))

    tick(bus, 2.5, steps=5)

    assert grid.session.elapsed == 2


def test_reset_restarts_stopwatch_and_counters(grid, bus):
    recorder = EventRecorder(bus, EVENT_GRID_RESET)
    grid.reset(GridMode(4))
    grid.apply_move(1, 1)
    tick(bus, 3.0)

    grid.reset()

    assert grid.session.moves == 0
    assert grid.session.elapsed == 0
    assert grid.board.count(N) == 16
    assert len(recorder.named(EVENT_GRID_RESET)) == 2


def test_start_request_switches_app_mode_and_routes_clicks(world, bus, grid):
    bus.emit(EVENT_GAME_START_REQUEST, game=GameKind.GRID, mode=GridMode(4))

    assert get_game_state(world).mode == AppMode.GRID
    bus.emit(EVENT_TILE_CLICK, row=0, col=0)

    assert grid.session.moves == 1
    assert grid.board.color_at(0, 0) is R


def test_malformed_click_payload_is_ignored(world, bus, grid):
    bus.emit(EVENT_GAME_START_REQUEST, game=GameKind.GRID, mode=GridMode(3))

    bus.emit(EVENT_TILE_CLICK, row="x", col=0)
    bus.emit(EVENT_TILE_CLICK, row=[1], col=0)

    assert grid.session.moves == 0
    assert grid.board.count(N) == 9


def test_clicks_ignored_outside_grid_mode(bus, grid):
    grid.reset(GridMode(3))

    bus.emit(EVENT_TILE_CLICK, row=0, col=0)

    assert grid.session.moves == 0


def test_won_round_updates_best_records_and_leaderboard(world, bus, grid, store):
    leaderboard = LeaderboardSystem(world, bus, store, clock=lambda: 1.0)
    recorder = EventRecorder(bus, EVENT_BEST_RECORD_CHANGED, EVENT_HIGH_SCORE_RECORDED)
    grid.reset(GridMode(3))
    _set_cells(grid, [
        [R, Y, R],
        [Y, Y, Y],
        [R, Y, R],
    ])
    tick(bus, 4.0)
    grid.apply_move(1, 1)

    assert leaderboard.best_score("grid_Easy") == 980
    assert leaderboard.best_time("grid_Easy") == 4
    assert len(recorder.named(EVENT_BEST_RECORD_CHANGED)) == 1

    assert grid.submit_score("  ")
    entries = leaderboard.records("grid_Easy")
    assert [(e.player_name, e.score, e.time) for e in entries] == [("Player", 980, 4)]
    assert recorder.named(EVENT_HIGH_SCORE_RECORDED)[0]["rank"] == 1


def test_submit_score_rejected_before_win(grid, bus):
    recorder = EventRecorder(bus, EVENT_SCORE_SUBMITTED)
    grid.reset(GridMode(3))

    assert not grid.submit_score("Ann")
    assert recorder.events == []


def test_snapshot_reflects_session(grid):
    grid.reset(GridMode(3, GridVariant.EXACT_ISOLATED))
    grid.apply_move(1, 1)

    snapshot = grid.snapshot()

    assert snapshot.moves == 1
    assert snapshot.moves_remaining == 14
    assert snapshot.target_count == 5
    assert snapshot.cells[1][1] is R
    assert not snapshot.won


def test_discard_cancels_stopwatch_and_removes_session(world, bus, timers, grid):
    grid.reset(GridMode(3))
    assert timers.pending_count == 1
    recorder = EventRecorder(bus, EVENT_ELAPSED_CHANGED, EVENT_GRID_CHANGED, EVENT_GRID_HINT)

    grid.discard()
    tick(bus, 5.0, steps=10)

    assert timers.pending_count == 0
    assert grid.session is None
    assert recorder.events == []
