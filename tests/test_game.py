"""Tests for blockbreaker.core.game – state transitions and the play loop."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from blockbreaker.core.bricks import FieldInvariantError
from blockbreaker.core.config import GameConfig
from blockbreaker.core.game import GameState, GameStateMachine
from blockbreaker.core.intents import FrameInput, Intent
from blockbreaker.core.physics import PhysicsEngine, TickKind
from blockbreaker.core.progress import ProgressStore
from blockbreaker.core.stages import StageCatalog


def _start(machine: GameStateMachine, stage: int = 1) -> None:
    """Select ``stage`` from the title screen and unpause."""
    machine.session.selected_stage_index = stage - 1
    machine.apply(Intent.CONFIRM)
    machine.apply(Intent.CONFIRM)
    assert machine.state is GameState.PLAYING
    assert machine.session.started


def _aim_at(machine: GameStateMachine, column: int, row: int) -> None:
    brick = machine.field.brick(column, row)
    layout = machine.field.layout
    machine.ball.x = brick.x + layout.brick_width / 2
    machine.ball.y = brick.y + layout.brick_height / 2
    machine.ball.dy = -abs(machine.ball.dy)


def _clear_all_but_last(machine: GameStateMachine) -> tuple[int, int]:
    bricks = list(machine.field.bricks())
    for brick in bricks[:-1]:
        machine.field.mark_destroyed(brick.column, brick.row)
    last = bricks[-1]
    return last.column, last.row


def _drop_ball(machine: GameStateMachine) -> None:
    """Put the ball just above the bottom edge, away from the paddle."""
    machine.ball.x = 50
    machine.ball.y = machine.bounds.height - machine.ball.radius - 1
    machine.ball.dx = 0
    machine.ball.dy = 2


# ===========================================================================
# Construction
# ===========================================================================

class TestInitialState:
    def test_starts_at_stage_select(self, machine: GameStateMachine):
        assert machine.state is GameState.STAGE_SELECT
        assert machine.session.lives == 3
        assert machine.session.score == 0

    def test_field_ready_for_stage_one(self, machine: GameStateMachine):
        assert machine.field.matches(2, 5)

    def test_mismatched_stage_counts_rejected(self, catalog: StageCatalog, tmp_path: Path):
        store = ProgressStore(max_stage=3, file_path=tmp_path / "p.json")
        with pytest.raises(ValueError):
            GameStateMachine(catalog, store)

    def test_tick_does_nothing_outside_play(self, machine: GameStateMachine):
        assert machine.tick() is None


# ===========================================================================
# Stage select navigation
# ===========================================================================

class TestNavigation:
    def _press(self, machine: GameStateMachine, *intents: Intent) -> int:
        for intent in intents:
            machine.apply(intent)
        return machine.session.selected_stage_index

    def test_right_and_left(self, machine: GameStateMachine):
        assert self._press(machine, Intent.NAV_RIGHT, Intent.NAV_RIGHT) == 2
        assert self._press(machine, Intent.NAV_LEFT) == 1

    def test_right_stops_at_row_end(self, machine: GameStateMachine):
        assert self._press(machine, *[Intent.NAV_RIGHT] * 7) == 4

    def test_left_stops_at_row_start(self, machine: GameStateMachine):
        machine.session.selected_stage_index = 5
        assert self._press(machine, Intent.NAV_LEFT) == 5

    def test_down_and_up(self, machine: GameStateMachine):
        assert self._press(machine, Intent.NAV_DOWN) == 5
        assert self._press(machine, Intent.NAV_DOWN) == 10
        assert self._press(machine, Intent.NAV_DOWN) == 10
        assert self._press(machine, Intent.NAV_UP, Intent.NAV_UP) == 0
        assert self._press(machine, Intent.NAV_UP) == 0

    def test_last_tile(self, machine: GameStateMachine):
        machine.session.selected_stage_index = 14
        assert self._press(machine, Intent.NAV_RIGHT) == 14


# ===========================================================================
# Starting a stage
# ===========================================================================

class TestStartStage:
    def test_confirm_enters_paused_play(self, machine: GameStateMachine):
        machine.session.selected_stage_index = 3
        machine.apply(Intent.CONFIRM)
        assert machine.state is GameState.PLAYING
        assert machine.session.started is False
        assert machine.session.current_stage == 4
        assert machine.field.matches(3, 8)
        assert machine.paddle.width == 100

    def test_stage_settings_applied(self, machine: GameStateMachine):
        machine.session.selected_stage_index = 14
        machine.apply(Intent.CONFIRM)
        assert machine.field.matches(9, 14)
        assert machine.field.alive_count() == 126
        assert machine.paddle.width == 70
        assert abs(machine.ball.dx) == 5.5
        assert machine.ball.dy == -5.5
        assert machine.paddle.x == (1000 - 70) / 2

    def test_lives_reset_score_kept(self, machine: GameStateMachine):
        machine.session.lives = 1
        machine.session.award(40)
        machine.apply(Intent.CONFIRM)
        assert machine.session.lives == 3
        assert machine.session.score == 40

    def test_confirm_toggles_pause(self, machine: GameStateMachine):
        machine.apply(Intent.CONFIRM)
        machine.apply(Intent.CONFIRM)
        assert machine.session.started
        machine.apply(Intent.CONFIRM)
        assert not machine.session.started

    def test_cancel_only_while_paused(self, machine: GameStateMachine):
        _start(machine)
        machine.apply(Intent.CANCEL)
        assert machine.state is GameState.PLAYING
        machine.apply(Intent.CONFIRM)
        machine.apply(Intent.CANCEL)
        assert machine.state is GameState.STAGE_SELECT

    def test_paused_tick_is_frozen(self, machine: GameStateMachine):
        machine.apply(Intent.CONFIRM)
        before = (machine.ball.x, machine.ball.y)
        assert machine.tick() is None
        assert (machine.ball.x, machine.ball.y) == before


# ===========================================================================
# Play loop
# ===========================================================================

class TestPlay:
    def test_ball_moves_each_tick(self, machine: GameStateMachine):
        _start(machine)
        x, y = machine.ball.x, machine.ball.y
        result = machine.tick()
        assert result is not None and result.kind is TickKind.CONTINUE
        assert machine.ball.x == x + machine.ball.dx
        assert machine.ball.y == y + machine.ball.dy

    def test_paddle_follows_held_keys(self, machine: GameStateMachine):
        _start(machine)
        x = machine.paddle.x
        machine.tick(move_right=True)
        assert machine.paddle.x == x + 7
        machine.tick(move_left=True)
        assert machine.paddle.x == x

    def test_score_counts_unique_bricks(self, machine: GameStateMachine):
        _start(machine)
        bricks = list(machine.field.bricks())
        for k, brick in enumerate(bricks[:-1], start=1):
            _aim_at(machine, brick.column, brick.row)
            machine.tick()
            assert machine.session.score == k * 10
        # the same brick again scores nothing
        _aim_at(machine, bricks[0].column, bricks[0].row)
        machine.tick()
        assert machine.session.score == (len(bricks) - 1) * 10

    def test_step_applies_intents_then_ticks(self, machine: GameStateMachine):
        machine.apply(Intent.CONFIRM)
        x = machine.paddle.x
        result = machine.step(FrameInput(intents=(Intent.CONFIRM,), move_right=True))
        assert machine.session.started
        assert result is not None
        assert machine.paddle.x == x + 7

    def test_snapshot_is_a_copy(self, machine: GameStateMachine):
        _start(machine)
        snap = machine.snapshot()
        snap.ball.x = -100
        snap.bricks[0].alive = False
        assert machine.ball.x != -100
        assert machine.field.brick(0, 0).alive
        assert snap.state is GameState.PLAYING
        assert len(snap.bricks) == 10
        assert snap.brick_width == 180


# ===========================================================================
# Losing lives
# ===========================================================================

class TestLifeLost:
    def test_life_lost_with_lives_left(self, machine: GameStateMachine):
        _start(machine)
        _drop_ball(machine)
        result = machine.tick()
        assert result is not None and result.kind is TickKind.BALL_LOST
        assert machine.state is GameState.LIFE_LOST
        assert machine.session.lives == 2
        assert (machine.ball.x, machine.ball.y) == (500, 550)
        assert machine.ball.dy == -1.5
        assert machine.paddle.x == (1000 - 120) / 2

    def test_confirm_resumes_running(self, machine: GameStateMachine):
        _start(machine)
        _drop_ball(machine)
        machine.tick()
        machine.apply(Intent.CONFIRM)
        assert machine.state is GameState.PLAYING
        assert machine.session.started

    def test_cancel_returns_to_select_keeping_score(self, machine: GameStateMachine):
        _start(machine)
        machine.session.award(30)
        _drop_ball(machine)
        machine.tick()
        machine.apply(Intent.CANCEL)
        assert machine.state is GameState.STAGE_SELECT
        assert machine.session.score == 30

    def test_last_life_is_game_over(self, machine: GameStateMachine):
        _start(machine)
        machine.session.lives = 1
        _drop_ball(machine)
        machine.tick()
        assert machine.state is GameState.GAME_OVER
        assert machine.session.lives == 0

    def test_lives_run_out_after_three_drops(self, machine: GameStateMachine):
        _start(machine)
        seen = []
        for _ in range(3):
            _drop_ball(machine)
            machine.tick()
            seen.append(machine.state)
            machine.apply(Intent.CONFIRM)
        assert seen == [GameState.LIFE_LOST, GameState.LIFE_LOST, GameState.GAME_OVER]
        assert machine.session.lives == 0

    def test_game_over_confirm_resets_score(self, machine: GameStateMachine):
        _start(machine)
        machine.session.award(70)
        machine.session.lives = 1
        _drop_ball(machine)
        machine.tick()
        machine.apply(Intent.CONFIRM)
        assert machine.state is GameState.STAGE_SELECT
        assert machine.session.score == 0

    def test_game_over_cancel_keeps_score(self, machine: GameStateMachine):
        _start(machine)
        machine.session.award(70)
        machine.session.lives = 1
        _drop_ball(machine)
        machine.tick()
        machine.apply(Intent.CANCEL)
        assert machine.state is GameState.STAGE_SELECT
        assert machine.session.score == 70


# ===========================================================================
# Clearing stages
# ===========================================================================

class TestStageClear:
    def test_clearing_stage_one(self, machine: GameStateMachine, store: ProgressStore):
        _start(machine)
        _aim_at(machine, *_clear_all_but_last(machine))
        result = machine.tick()
        assert result is not None and result.kind is TickKind.STAGE_CLEARED
        assert machine.state is GameState.STAGE_CLEAR
        assert machine.session.score == 10

        machine.apply(Intent.CONFIRM)
        assert store.is_cleared(1)
        reopened = ProgressStore(max_stage=15, file_path=store.file_path)
        assert reopened.cleared_stages[0] is True

    def test_confirm_advances_to_next_stage(self, machine: GameStateMachine):
        _start(machine)
        machine.session.lives = 2
        _aim_at(machine, *_clear_all_but_last(machine))
        machine.tick()
        machine.apply(Intent.CONFIRM)
        assert machine.state is GameState.PLAYING
        assert machine.session.started is False
        assert machine.session.current_stage == 2
        assert machine.session.selected_stage_index == 1
        assert machine.field.matches(2, 7)
        assert machine.session.score == 10
        assert machine.session.lives == 2

    def test_cancel_gives_no_credit(self, machine: GameStateMachine, store: ProgressStore):
        _start(machine)
        _aim_at(machine, *_clear_all_but_last(machine))
        machine.tick()
        machine.apply(Intent.CANCEL)
        assert machine.state is GameState.STAGE_SELECT
        assert not store.is_cleared(1)
        assert machine.session.score == 10

    def test_final_stage_completes_game(self, machine: GameStateMachine, store: ProgressStore):
        _start(machine, stage=15)
        _aim_at(machine, *_clear_all_but_last(machine))
        machine.tick()
        assert machine.state is GameState.STAGE_CLEAR
        machine.apply(Intent.CONFIRM)
        assert machine.state is GameState.GAME_COMPLETE
        assert store.cleared_stages == (True,) * 15
        assert machine.snapshot().all_stages_cleared

    def test_game_complete_confirm(self, machine: GameStateMachine, store: ProgressStore):
        _start(machine, stage=15)
        _aim_at(machine, *_clear_all_but_last(machine))
        machine.tick()
        machine.apply(Intent.CONFIRM)
        machine.apply(Intent.CONFIRM)
        assert machine.state is GameState.STAGE_SELECT
        assert store.cleared_count() == 15
        assert machine.session.score == 10


# ===========================================================================
# Resets
# ===========================================================================

class TestResets:
    def test_reset_progress(self, machine: GameStateMachine, store: ProgressStore):
        store.mark_all_cleared()
        machine.apply(Intent.RESET_PROGRESS)
        assert machine.cleared_stages == (False,) * 15

    def test_reset_score(self, machine: GameStateMachine):
        machine.session.award(50)
        machine.apply(Intent.RESET_SCORE)
        assert machine.session.score == 0


# ===========================================================================
# Field invariant
# ===========================================================================

class TestFieldInvariant:
    def test_release_rebuilds_field(self, machine: GameStateMachine, caplog: pytest.LogCaptureFixture):
        _start(machine)
        machine.field.initialize(1, 1)
        with caplog.at_level(logging.ERROR):
            machine.tick()
        assert machine.field.matches(2, 5)
        assert "rebuilding" in caplog.text

    def test_debug_fails_fast(self, catalog: StageCatalog, store: ProgressStore, tmp_path: Path):
        config = GameConfig(debug=True, progress_file=tmp_path / "p.json")
        machine = GameStateMachine(catalog, store, config, PhysicsEngine(config))
        _start(machine)
        machine.field.initialize(1, 1)
        with pytest.raises(FieldInvariantError):
            machine.tick()
