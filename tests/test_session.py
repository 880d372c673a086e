"""Tests for blockbreaker.core.session – score and lives bookkeeping."""

from __future__ import annotations

import pytest

from blockbreaker.core.session import GameSession


class TestDefaults:
    def test_fresh_session(self):
        s = GameSession()
        assert s.current_stage == 1
        assert s.lives == 3
        assert s.score == 0
        assert s.selected_stage_index == 0
        assert s.started is False

    def test_selected_stage_is_one_based(self):
        assert GameSession(selected_stage_index=4).selected_stage == 5


class TestScore:
    def test_award_accumulates(self):
        s = GameSession()
        s.award(10)
        s.award(10)
        assert s.score == 20

    def test_negative_award_rejected(self):
        s = GameSession(score=30)
        with pytest.raises(ValueError):
            s.award(-10)
        assert s.score == 30

    def test_reset_score(self):
        s = GameSession(score=90)
        s.reset_score()
        assert s.score == 0


class TestLives:
    def test_lose_life_returns_remaining(self):
        s = GameSession(lives=3)
        assert s.lose_life() == 2
        assert s.lives == 2

    def test_never_negative(self):
        s = GameSession(lives=1)
        assert s.lose_life() == 0
        assert s.lose_life() == 0
        assert s.lives == 0
