from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from typing import Optional

from blockbreaker.core.bricks import Brick, BrickField
from blockbreaker.core.config import GameConfig


@dataclass
class Ball:
    x: float
    y: float
    dx: float
    dy: float
    radius: float


@dataclass
class Paddle:
    x: float
    width: float
    height: float
    y_offset: float

    def spans(self, x: float) -> bool:
        """True when ``x`` lies strictly between the paddle's edges."""
        return self.x < x < self.x + self.width


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float


class TickKind(enum.Enum):
    CONTINUE = "continue"
    BRICK_BROKEN = "brick_broken"
    STAGE_CLEARED = "stage_cleared"
    BALL_LOST = "ball_lost"


@dataclass(frozen=True)
class TickResult:
    kind: TickKind
    score_delta: int = 0

    @property
    def ends_play(self) -> bool:
        return self.kind in (TickKind.STAGE_CLEARED, TickKind.BALL_LOST)


class PhysicsEngine:
    """Advances the ball one frame at a time and resolves its collisions.

    Collision checks use the position the ball would reach this tick, and the
    ball only moves once every check has run. At most one brick breaks per
    tick so a ball grazing two bricks scores once.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self._config = config or GameConfig()
        self._rng = rng or random.Random()

    @property
    def config(self) -> GameConfig:
        return self._config

    def bounds(self) -> Bounds:
        return Bounds(width=self._config.canvas_width, height=self._config.canvas_height)

    def spawn_ball(self, speed: float) -> Ball:
        """New ball at the spawn point, heading up and randomly left or right."""
        x, y = self._config.ball_spawn
        direction = 1 if self._rng.random() > 0.5 else -1
        return Ball(x=x, y=y, dx=speed * direction, dy=-speed, radius=self._config.ball_radius)

    def spawn_paddle(self, width: float) -> Paddle:
        return Paddle(
            x=(self._config.canvas_width - width) / 2,
            width=width,
            height=self._config.paddle_height,
            y_offset=self._config.paddle_y_offset,
        )

    def tick(self, ball: Ball, paddle: Paddle, field: BrickField, bounds: Bounds) -> TickResult:
        score = 0
        hit = self._first_brick_hit(ball, field)
        if hit is not None:
            ball.dy = -ball.dy
            field.mark_destroyed(hit.column, hit.row)
            score = self._config.score_per_brick

        if field.all_cleared():
            return TickResult(TickKind.STAGE_CLEARED, score)

        next_x = ball.x + ball.dx
        next_y = ball.y + ball.dy

        if next_x > bounds.width - ball.radius or next_x < ball.radius:
            ball.dx = -ball.dx

        if next_y < ball.radius:
            ball.dy = -ball.dy
        elif next_y > bounds.height - ball.radius:
            if paddle.spans(ball.x):
                ball.dy = -ball.dy
            else:
                return TickResult(TickKind.BALL_LOST, score)
        elif self._in_paddle_band(next_y, paddle, ball, bounds) and paddle.spans(ball.x):
            ball.dy = -ball.dy

        ball.x += ball.dx
        ball.y += ball.dy
        return TickResult(TickKind.BRICK_BROKEN if hit is not None else TickKind.CONTINUE, score)

    def move_paddle(self, paddle: Paddle, left: bool, right: bool, bounds: Bounds) -> None:
        step = self._config.paddle_step
        limit = bounds.width - paddle.width
        if right and paddle.x < limit:
            paddle.x = min(paddle.x + step, limit)
        elif left and paddle.x > 0:
            paddle.x = max(paddle.x - step, 0)

    @staticmethod
    def _first_brick_hit(ball: Ball, field: BrickField) -> Optional[Brick]:
        width = field.layout.brick_width
        height = field.layout.brick_height
        for brick in field.alive_bricks():
            if brick.x < ball.x < brick.x + width and brick.y < ball.y < brick.y + height:
                return brick
        return None

    @staticmethod
    def _in_paddle_band(next_y: float, paddle: Paddle, ball: Ball, bounds: Bounds) -> bool:
        top = bounds.height - paddle.height - paddle.y_offset - ball.radius
        bottom = bounds.height - paddle.y_offset
        return top < next_y < bottom
