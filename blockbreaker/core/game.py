from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from blockbreaker.core.bricks import Brick, BrickField, FieldInvariantError
from blockbreaker.core.config import GameConfig
from blockbreaker.core.intents import FrameInput, Intent
from blockbreaker.core.physics import Ball, Bounds, Paddle, PhysicsEngine, TickKind, TickResult
from blockbreaker.core.progress import ProgressStore
from blockbreaker.core.session import GameSession
from blockbreaker.core.stages import Stage, StageCatalog

logger = logging.getLogger(__name__)


class GameState(enum.Enum):
    STAGE_SELECT = "stage_select"
    PLAYING = "playing"
    LIFE_LOST = "life_lost"
    STAGE_CLEAR = "stage_clear"
    GAME_OVER = "game_over"
    GAME_COMPLETE = "game_complete"


# States that wait for the player to acknowledge a result.
RESULT_STATES = frozenset(
    {GameState.LIFE_LOST, GameState.STAGE_CLEAR, GameState.GAME_OVER, GameState.GAME_COMPLETE}
)


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of everything a renderer may display for one frame."""

    state: GameState
    started: bool
    score: int
    lives: int
    current_stage: int
    selected_stage_index: int
    stage: Stage
    ball: Ball
    paddle: Paddle
    bricks: Tuple[Brick, ...]
    brick_width: int
    brick_height: int
    cleared_stages: Tuple[bool, ...]
    max_stage: int
    bounds: Bounds

    @property
    def has_next_stage(self) -> bool:
        return self.current_stage < self.max_stage

    @property
    def all_stages_cleared(self) -> bool:
        return all(self.cleared_stages)


class GameStateMachine:
    """Owns the session, ball, paddle and bricks, and moves between game states.

    Input arrives as :class:`Intent` values through :meth:`apply` (or batched
    per frame through :meth:`step`); :meth:`tick` advances play by one frame.
    Nothing outside this class mutates game state; renderers read
    :meth:`snapshot`.
    """

    def __init__(
        self,
        catalog: StageCatalog,
        progress_store: ProgressStore,
        config: Optional[GameConfig] = None,
        physics: Optional[PhysicsEngine] = None,
    ) -> None:
        self._config = config or GameConfig()
        if catalog.max_stage != progress_store.max_stage:
            raise ValueError(
                f"catalog has {catalog.max_stage} stages but progress tracks {progress_store.max_stage}"
            )
        self._catalog = catalog
        self._progress = progress_store
        self._physics = physics or PhysicsEngine(self._config)
        self._bounds = self._physics.bounds()

        self._state = GameState.STAGE_SELECT
        self._session = GameSession(lives=self._config.initial_lives)
        self._stage = catalog.get(1)
        self._field = BrickField(self._config)
        self._field.initialize(self._stage.rows, self._stage.columns)
        self._ball = self._physics.spawn_ball(self._stage.ball_speed)
        self._paddle = self._physics.spawn_paddle(self._stage.paddle_width)

        self._handlers: Dict[GameState, Callable[[Intent], None]] = {
            GameState.STAGE_SELECT: self._on_stage_select,
            GameState.PLAYING: self._on_playing,
            GameState.LIFE_LOST: self._on_life_lost,
            GameState.STAGE_CLEAR: self._on_stage_clear,
            GameState.GAME_OVER: self._on_game_over,
            GameState.GAME_COMPLETE: self._on_game_complete,
        }

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def field(self) -> BrickField:
        return self._field

    @property
    def ball(self) -> Ball:
        return self._ball

    @property
    def paddle(self) -> Paddle:
        return self._paddle

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def max_stage(self) -> int:
        return self._catalog.max_stage

    @property
    def cleared_stages(self) -> Tuple[bool, ...]:
        return self._progress.cleared_stages

    def step(self, frame: FrameInput) -> Optional[TickResult]:
        """Apply one frame of input in arrival order, then advance play."""
        for intent in frame.intents:
            self.apply(intent)
        return self.tick(move_left=frame.move_left, move_right=frame.move_right)

    def apply(self, intent: Intent) -> None:
        if intent is Intent.RESET_PROGRESS:
            self._progress.reset()
            logger.info("Stage progress reset")
            return
        if intent is Intent.RESET_SCORE:
            self._session.reset_score()
            logger.info("Score reset")
            return
        self._handlers[self._state](intent)

    def tick(self, move_left: bool = False, move_right: bool = False) -> Optional[TickResult]:
        """Advance the ball one frame. Returns None when play is not running."""
        if self._state is not GameState.PLAYING or not self._session.started:
            return None
        self._ensure_field_matches_stage()

        result = self._physics.tick(self._ball, self._paddle, self._field, self._bounds)
        if result.score_delta:
            self._session.award(result.score_delta)

        if result.kind is TickKind.BALL_LOST:
            self._lose_life()
        elif result.kind is TickKind.STAGE_CLEARED:
            self._state = GameState.STAGE_CLEAR
            logger.info("Stage %d cleared with score %d", self._session.current_stage, self._session.score)
        else:
            self._physics.move_paddle(self._paddle, move_left, move_right, self._bounds)
        return result

    def snapshot(self) -> GameSnapshot:
        session = self._session
        return GameSnapshot(
            state=self._state,
            started=session.started,
            score=session.score,
            lives=session.lives,
            current_stage=session.current_stage,
            selected_stage_index=session.selected_stage_index,
            stage=self._stage,
            ball=replace(self._ball),
            paddle=replace(self._paddle),
            bricks=tuple(replace(brick) for brick in self._field.bricks()),
            brick_width=self._field.layout.brick_width,
            brick_height=self._field.layout.brick_height,
            cleared_stages=self._progress.cleared_stages,
            max_stage=self.max_stage,
            bounds=self._bounds,
        )

    # -- per-state intent handlers ------------------------------------------

    def _on_stage_select(self, intent: Intent) -> None:
        if intent is Intent.CONFIRM:
            self._start_stage(self._session.selected_stage)
            return

        per_row = self._config.stages_per_row
        index = self._session.selected_stage_index
        row, col = divmod(index, per_row)
        last_row = math.ceil(self.max_stage / per_row) - 1

        if intent is Intent.NAV_RIGHT:
            if col < per_row - 1 and index < self.max_stage - 1:
                index += 1
        elif intent is Intent.NAV_LEFT:
            if col > 0:
                index -= 1
        elif intent is Intent.NAV_DOWN:
            if row < last_row and index + per_row < self.max_stage:
                index += per_row
        elif intent is Intent.NAV_UP:
            if row > 0:
                index -= per_row
        self._session.selected_stage_index = index

    def _on_playing(self, intent: Intent) -> None:
        if intent is Intent.CONFIRM:
            self._session.started = not self._session.started
        elif intent is Intent.CANCEL and not self._session.started:
            self._state = GameState.STAGE_SELECT

    def _on_life_lost(self, intent: Intent) -> None:
        if intent is Intent.CONFIRM:
            self._state = GameState.PLAYING
            self._session.started = True
        elif intent is Intent.CANCEL:
            self._state = GameState.STAGE_SELECT

    def _on_stage_clear(self, intent: Intent) -> None:
        if intent is Intent.CANCEL:
            self._state = GameState.STAGE_SELECT
            return
        if intent is not Intent.CONFIRM:
            return

        finished = self._session.current_stage
        self._progress.mark_cleared(finished)
        if finished < self.max_stage:
            self._load_stage(finished + 1)
            self._session.selected_stage_index = finished
            self._state = GameState.PLAYING
            logger.info("Advancing to stage %d", finished + 1)
        else:
            self._progress.mark_all_cleared()
            self._state = GameState.GAME_COMPLETE
            logger.info("All %d stages complete with score %d", self.max_stage, self._session.score)

    def _on_game_over(self, intent: Intent) -> None:
        if intent is Intent.CONFIRM:
            self._session.reset_score()
            self._state = GameState.STAGE_SELECT
        elif intent is Intent.CANCEL:
            self._state = GameState.STAGE_SELECT

    def _on_game_complete(self, intent: Intent) -> None:
        if intent is Intent.CONFIRM:
            self._progress.mark_all_cleared()
            self._state = GameState.STAGE_SELECT
        elif intent is Intent.CANCEL:
            self._state = GameState.STAGE_SELECT

    # -- helpers -------------------------------------------------------------

    def _start_stage(self, number: int) -> None:
        self._load_stage(number)
        self._session.lives = self._config.initial_lives
        self._state = GameState.PLAYING
        logger.info(
            "Starting stage %d: %dx%d bricks, paddle width %d",
            number,
            self._stage.rows,
            self._stage.columns,
            self._stage.paddle_width,
        )

    def _load_stage(self, number: int) -> None:
        """Swap in a fully built stage; the old one stays until everything is ready."""
        stage = self._catalog.get(number)
        field = BrickField(self._config)
        field.initialize(stage.rows, stage.columns)
        ball = self._physics.spawn_ball(stage.ball_speed)
        paddle = self._physics.spawn_paddle(stage.paddle_width)

        self._stage = stage
        self._field = field
        self._ball = ball
        self._paddle = paddle
        self._session.current_stage = number
        self._session.started = False

    def _lose_life(self) -> None:
        remaining = self._session.lose_life()
        if remaining == 0:
            self._state = GameState.GAME_OVER
            self._session.started = False
            logger.info("Game over on stage %d with score %d", self._session.current_stage, self._session.score)
            return
        self._ball = self._physics.spawn_ball(self._stage.ball_speed)
        self._paddle = self._physics.spawn_paddle(self._stage.paddle_width)
        self._state = GameState.LIFE_LOST
        logger.info("Life lost, %d remaining", remaining)

    def _ensure_field_matches_stage(self) -> None:
        if self._field.matches(self._stage.rows, self._stage.columns):
            return
        message = (
            f"brick grid is {self._field.rows}x{self._field.columns} "
            f"but stage {self._stage.number} needs {self._stage.rows}x{self._stage.columns}"
        )
        if self._config.debug:
            raise FieldInvariantError(message)
        logger.error("%s; rebuilding the field", message)
        self._field.initialize(self._stage.rows, self._stage.columns)
