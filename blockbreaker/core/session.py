from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GameSession:
    """Score, lives and stage selection for one sitting at the game.

    Score only goes down through :meth:`reset_score`, which the state machine
    calls when a game-over is acknowledged or the player asks for it.
    """

    current_stage: int = 1
    lives: int = 3
    score: int = 0
    selected_stage_index: int = 0
    started: bool = False

    def award(self, points: int) -> None:
        if points < 0:
            raise ValueError("points must be non-negative")
        self.score += points

    def lose_life(self) -> int:
        """Take one life, never going below zero, and return what is left."""
        self.lives = max(0, self.lives - 1)
        return self.lives

    def reset_score(self) -> None:
        self.score = 0

    @property
    def selected_stage(self) -> int:
        """1-based stage number under the stage-select cursor."""
        return self.selected_stage_index + 1
