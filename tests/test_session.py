from __future__ import annotations

import random

import numpy as np
import pytest

from blockfall.game import (
    Action,
    GameConfig,
    GameSession,
    HeldInput,
    SessionState,
    TetrominoType,
)
from conftest import place

I, O, T = TetrominoType.I, TetrominoType.O, TetrominoType.T


def test_new_session_starts_playing(session: GameSession):
    snap = session.snapshot()
    assert snap.state is SessionState.PLAYING
    assert (snap.score, snap.lines, snap.level) == (0, 0, 1)
    assert snap.active is not None
    assert (snap.active.x, snap.active.y, snap.active.rotation) == (3, 0, 0)
    assert snap.hold is None and snap.can_hold
    assert len(session.queue) == 6
    assert len(snap.next_queue) == 5
    assert not snap.board.any()


def test_first_piece_and_queue_form_one_bag(session: GameSession):
    assert {session.active.kind, *session.queue.peek(6)} == set(TetrominoType)


def test_try_move_respects_walls(session: GameSession):
    place(session, O, x=3, y=5)
    assert session.try_move(-1, 0)
    assert session.active.x == 2
    place(session, O, x=-1, y=5)
    assert not session.try_move(-1, 0)
    assert (session.active.x, session.active.y) == (-1, 5)


def test_rotate_in_open_space(session: GameSession):
    place(session, T, x=3, y=5)
    assert session.rotate(1)
    assert (session.active.rotation, session.active.x, session.active.y) == (1, 3, 5)
    place(session, T, x=3, y=5)
    assert session.rotate(-1)
    assert session.active.rotation == 3


def test_rotate_uses_first_fitting_offset(session: GameSession):
    # Vertical I against the left wall only fits horizontally two columns right.
    place(session, I, rotation=1, x=-2, y=5)
    assert session.rotate(1)
    assert (session.active.rotation, session.active.x, session.active.y) == (0, 0, 5)


def test_rotate_falls_back_to_upward_offset(session: GameSession):
    session.grid.grid[20, 3] = int(O)
    session.grid.grid[21, :] = int(O)
    session.grid.grid[21, 4] = 0
    place(session, T, rotation=1, x=3, y=19)
    assert not session.grid.collides(session.active)
    assert session.rotate(1)
    assert (session.active.rotation, session.active.x, session.active.y) == (2, 3, 18)


def test_rejected_rotation_leaves_piece_unchanged(session: GameSession):
    session.grid.grid[14:22, 1:] = int(O)
    piece = place(session, I, rotation=1, x=-2, y=18)
    assert not session.grid.collides(piece)
    assert not session.rotate(1)
    assert not session.rotate(-1)
    assert session.active == piece


def test_rotate_rejects_bad_direction(session: GameSession):
    with pytest.raises(ValueError):
        session.rotate(2)


def test_hard_drop_scores_two_per_row_and_locks(session: GameSession):
    place(session, O, x=3, y=15)
    assert session.hard_drop() == 5
    assert session.stats.score == 10
    assert session.grid.grid[20, 4] == int(O)
    assert session.grid.grid[21, 5] == int(O)
    assert int(np.count_nonzero(session.grid.grid)) == 4
    assert (session.active.x, session.active.y) == (3, 0)


def test_soft_drop_moves_or_locks(session: GameSession):
    place(session, O, x=3, y=0)
    assert session.soft_drop()
    assert session.active.y == 1
    assert session.stats.score == 1

    place(session, O, x=3, y=20)
    assert not session.soft_drop()
    assert session.grid.grid[21, 4] == int(O)
    assert session.stats.score == 1
    assert session.active.y == 0


def fill_bottom_two_rows_except_middle(game: GameSession) -> None:
    game.grid.grid[20:22, :] = int(I)
    game.grid.grid[20:22, 4:6] = 0


def test_double_clear_at_level_one_scores_300(session: GameSession):
    fill_bottom_two_rows_except_middle(session)
    session.grid.grid[19, 0] = int(T)
    place(session, O, x=3, y=20)
    session.hard_drop()
    assert session.stats.score == 300
    assert session.stats.lines == 2
    assert session.grid.grid[21, 0] == int(T)
    assert int(np.count_nonzero(session.grid.grid)) == 1


def test_double_clear_at_level_two_scores_600(session: GameSession):
    session.stats.lines = 10
    session.stats.level = 2
    fill_bottom_two_rows_except_middle(session)
    place(session, O, x=3, y=20)
    session.hard_drop()
    assert session.stats.score == 600
    assert session.stats.lines == 12


def test_level_up_speeds_up_gravity(session: GameSession):
    session.stats.lines = 9
    session.grid.grid[21, :] = int(I)
    session.grid.grid[21, 4:6] = 0
    place(session, O, x=3, y=20)
    session.hard_drop()
    assert session.stats.score == 100
    assert session.stats.level == 2
    assert session.gravity_interval_ms == 740
    assert session.snapshot().gravity_interval_ms == 740


def test_hold_with_empty_slot_then_second_hold_is_noop(session: GameSession):
    first = session.active.kind
    upcoming = session.queue.peek(1)[0]
    assert session.hold()
    assert session.hold_kind == first
    assert session.active.kind == upcoming
    assert not session.can_hold
    assert len(session.queue) == 6

    before = (session.active, session.hold_kind, session.queue.peek(6))
    assert not session.hold()
    assert (session.active, session.hold_kind, session.queue.peek(6)) == before


def test_hold_swaps_after_next_lock(session: GameSession):
    first = session.active.kind
    session.hold()
    session.hard_drop()
    assert session.can_hold
    current = session.active.kind
    assert session.hold()
    assert session.active.kind == first
    assert session.hold_kind == current
    assert (session.active.x, session.active.y, session.active.rotation) == (3, 0, 0)
    assert not session.can_hold


def test_hold_respawns_at_spawn_with_rotation_reset(session: GameSession):
    session.hold()
    session.hard_drop()
    place(session, T, rotation=2, x=0, y=10)
    session.hold()
    assert session.hold_kind == T
    assert (session.active.x, session.active.y, session.active.rotation) == (3, 0, 0)


def test_blocked_spawn_ends_game_without_touching_board(session: GameSession):
    session.grid.grid[0:2, 3:7] = int(T)
    before = session.grid.clone_state()
    assert session.hold()
    assert session.state is SessionState.GAME_OVER
    assert session.active is None
    assert np.array_equal(session.grid.grid, before)
    snap = session.snapshot()
    assert snap.active is None and snap.ghost_y is None


def test_lock_then_blocked_spawn_ends_game(session: GameSession):
    session.grid.grid[1, 3:7] = int(T)
    place(session, O, x=3, y=5)
    session.hard_drop()
    assert session.state is SessionState.GAME_OVER
    assert session.grid.grid[21, 4] == int(O)
    assert int(np.count_nonzero(session.grid.grid)) == 8


def test_game_over_suspends_everything_but_reset(session: GameSession):
    session.grid.grid[0:2, 3:7] = int(T)
    session.hold()
    board = session.grid.clone_state()
    score = session.stats.score
    for action in (Action.MOVE_LEFT, Action.ROTATE_CW, Action.HARD_DROP, Action.SOFT_DROP, Action.HOLD, Action.TOGGLE_PAUSE):
        session.advance(16, [action], HeldInput(left=True, soft_drop=True))
    assert session.state is SessionState.GAME_OVER
    assert np.array_equal(session.grid.grid, board)
    assert session.stats.score == score
    assert not session.try_move(0, 1)
    assert session.hard_drop() == 0

    snap = session.advance(16, [Action.RESET])
    assert snap.state is SessionState.PLAYING
    assert not snap.board.any()
    assert snap.active is not None


def test_pause_freezes_gravity_and_input(session: GameSession):
    start = session.active
    assert session.advance(16, [Action.TOGGLE_PAUSE]).state is SessionState.PAUSED
    for _ in range(200):
        session.advance(30, [Action.HARD_DROP], HeldInput(left=True, soft_drop=True))
    assert session.active == start
    assert session.stats.score == 0
    assert not session.try_move(1, 0)
    assert session.advance(16, [Action.TOGGLE_PAUSE]).state is SessionState.PLAYING


def test_reset_twice_gives_same_initial_state(session: GameSession):
    session.hard_drop()
    session.hold()
    session.reset()
    a = session.snapshot()
    session.reset()
    b = session.snapshot()
    for snap in (a, b):
        assert not snap.board.any()
        assert (snap.score, snap.lines, snap.level) == (0, 0, 1)
        assert snap.state is SessionState.PLAYING
        assert snap.hold is None and snap.can_hold
        assert snap.gravity_interval_ms == 800
    assert (a.active.x, a.active.y) == (b.active.x, b.active.y)


def test_seeded_sessions_are_reproducible():
    a = GameSession(GameConfig(random_seed=3))
    b = GameSession(GameConfig(random_seed=3))
    assert a.active.kind == b.active.kind
    assert a.queue.peek(6) == b.queue.peek(6)
    a.reset(seed=11)
    b.reset(seed=11)
    assert a.active.kind == b.active.kind
    assert a.queue.peek(6) == b.queue.peek(6)


def test_gravity_drops_one_row_per_interval(session: GameSession):
    place(session, O, x=3, y=0)
    for _ in range(49):
        session.advance(16)
    assert session.active.y == 0
    session.advance(16)
    assert session.active.y == 1


def test_long_frames_are_clamped(session: GameSession):
    place(session, O, x=3, y=0)
    session.advance(5000)
    assert session.active.y == 0
    assert session.gravity.elapsed_ms == 33


def test_soft_drop_held_speeds_gravity_and_scores(session: GameSession):
    place(session, O, x=3, y=0)
    for _ in range(4):
        session.advance(16, held=HeldInput(soft_drop=True))
    assert session.active.y == 1
    assert session.stats.score == 1


def test_gravity_locks_landed_piece(session: GameSession):
    place(session, O, x=3, y=20)
    for _ in range(50):
        session.advance(16)
    assert session.grid.grid[20, 4] == int(O)
    assert session.active.y == 0
    assert int(np.count_nonzero(session.grid.grid)) == 4


def test_das_and_arr_through_advance(free_session: GameSession):
    game = free_session
    place(game, O, x=3, y=0)
    game.advance(10, held=HeldInput(left=True))
    assert game.active.x == 2
    game.advance(150, held=HeldInput(left=True))
    assert game.active.x == -1
    game.advance(100, held=HeldInput(left=True))
    assert game.active.x == -1
    game.advance(16)
    game.advance(16, held=HeldInput(right=True))
    assert game.active.x == 0
    game.advance(16, held=HeldInput(left=True, right=True))
    assert game.active.x == 0


def test_one_shot_moves(session: GameSession):
    place(session, O, x=3, y=0)
    session.advance(0, [Action.MOVE_LEFT, Action.MOVE_LEFT, Action.MOVE_RIGHT])
    assert session.active.x == 2


def test_negative_delta_rejected(session: GameSession):
    with pytest.raises(ValueError):
        session.advance(-1)


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        GameConfig(width=3)
    with pytest.raises(ValueError):
        GameConfig(spawn_x=7)
    with pytest.raises(ValueError):
        GameConfig(preview_length=7, queue_length=6)


def test_snapshot_is_read_only(session: GameSession):
    snap = session.snapshot()
    assert snap.board.shape == (20, 10)
    with pytest.raises(ValueError):
        snap.board[0, 0] = 1
    with pytest.raises(ValueError):
        snap.active.mask[0, 0] = 1


def test_get_state_marks_active_piece_negative(session: GameSession):
    place(session, O, x=3, y=10)
    state = session.get_state()
    assert state.shape == (20, 10)
    assert state[8, 4] == -int(O)
    assert state[9, 5] == -int(O)
    assert int(np.count_nonzero(state)) == 4


def test_random_play_keeps_active_piece_legal():
    game = GameSession(GameConfig(random_seed=0))
    rng = random.Random(0)
    one_shots = list(Action)
    one_shots.remove(Action.RESET)
    one_shots.remove(Action.TOGGLE_PAUSE)
    last_score = 0
    for _ in range(3000):
        actions = [rng.choice(one_shots)] if rng.random() < 0.3 else []
        held = HeldInput(left=rng.random() < 0.3, right=rng.random() < 0.3, soft_drop=rng.random() < 0.2)
        snap = game.advance(rng.choice((8, 16, 33)), actions, held)
        assert snap.score >= last_score
        last_score = snap.score
        assert snap.level == 1 + snap.lines // 10
        if game.active is not None:
            assert not game.grid.collides(game.active)
            assert 0 <= game.active.rotation < game.active.rotation_count
        if snap.state is SessionState.GAME_OVER:
            game.reset()
            last_score = 0
