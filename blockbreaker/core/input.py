from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

from blockbreaker.core.game import RESULT_STATES, GameState
from blockbreaker.core.intents import FrameInput, Intent

logger = logging.getLogger(__name__)

LEFT_KEYS = frozenset({"ArrowLeft", "Left"})
RIGHT_KEYS = frozenset({"ArrowRight", "Right"})
UP_KEYS = frozenset({"ArrowUp", "Up"})
DOWN_KEYS = frozenset({"ArrowDown", "Down"})
CONFIRM_KEYS = frozenset({" ", "Space", "Spacebar"})
CANCEL_KEYS = frozenset({"Escape"})
RESET_KEYS = frozenset({"r", "R"})
YES_KEYS = frozenset({"y", "Y", "Enter"})
NO_KEYS = frozenset({"n", "N", "Escape"})


class ConfirmationKind(enum.Enum):
    RESET_PROGRESS = "reset_progress"
    RESET_SCORE = "reset_score"


@dataclass(frozen=True)
class ConfirmationRequest:
    """A yes/no question the player must answer before a reset happens."""

    kind: ConfirmationKind
    title: str
    message: str


def _reset_progress_request() -> ConfirmationRequest:
    return ConfirmationRequest(
        ConfirmationKind.RESET_PROGRESS,
        "Reset progress",
        "Clear the cleared-stage marks for every stage?",
    )


def _reset_score_request(follow_up: bool) -> ConfirmationRequest:
    message = "Reset the score as well?" if follow_up else "Reset the score to zero?"
    return ConfirmationRequest(ConfirmationKind.RESET_SCORE, "Reset score", message)


class InputRouter:
    """Turns raw key identifiers into intents for the current game state.

    Paddle movement is kept as held flags (last key event wins); every other
    intent is queued and handed over once per frame by :meth:`drain`. Reset
    requests go through a confirmation step answered with :meth:`respond`
    or the yes/no keys.
    """

    def __init__(self, state_source: Callable[[], GameState]) -> None:
        self._state_source = state_source
        self._queue: Deque[Intent] = deque()
        self._move_left = False
        self._move_right = False
        self._pending: Optional[ConfirmationRequest] = None

    @property
    def pending_confirmation(self) -> Optional[ConfirmationRequest]:
        return self._pending

    @property
    def move_left(self) -> bool:
        return self._move_left

    @property
    def move_right(self) -> bool:
        return self._move_right

    def key_down(self, key: str) -> bool:
        """Handle a key press; returns True when the key meant something."""
        if self._pending is not None:
            return self._answer_key(key)

        state = self._state_source()
        if state is GameState.STAGE_SELECT:
            return self._stage_select_key(key)
        if state is GameState.PLAYING:
            return self._playing_key(key)
        if state in RESULT_STATES:
            return self._result_key(key)
        return False

    def key_up(self, key: str) -> bool:
        if key in LEFT_KEYS:
            self._move_left = False
            return True
        if key in RIGHT_KEYS:
            self._move_right = False
            return True
        return False

    def release_all(self) -> None:
        """Drop held movement keys, e.g. when the window loses focus."""
        self._move_left = False
        self._move_right = False

    def request_confirmation(self, request: ConfirmationRequest) -> None:
        self._pending = request
        logger.debug("Confirmation requested: %s", request.kind.value)

    def respond(self, confirmed: bool) -> None:
        """Answer the pending confirmation. Ignored when nothing is pending."""
        request = self._pending
        if request is None:
            return
        self._pending = None
        if not confirmed:
            logger.debug("Confirmation declined: %s", request.kind.value)
            return
        if request.kind is ConfirmationKind.RESET_PROGRESS:
            self._queue.append(Intent.RESET_PROGRESS)
            self.request_confirmation(_reset_score_request(follow_up=True))
        elif request.kind is ConfirmationKind.RESET_SCORE:
            self._queue.append(Intent.RESET_SCORE)

    def drain(self) -> FrameInput:
        """Hand over this frame's queued intents along with the held movement flags."""
        intents = tuple(self._queue)
        self._queue.clear()
        return FrameInput(intents=intents, move_left=self._move_left, move_right=self._move_right)

    def _answer_key(self, key: str) -> bool:
        if key in YES_KEYS:
            self.respond(True)
            return True
        if key in NO_KEYS:
            self.respond(False)
            return True
        return False

    def _stage_select_key(self, key: str) -> bool:
        if key in RIGHT_KEYS:
            self._queue.append(Intent.NAV_RIGHT)
        elif key in LEFT_KEYS:
            self._queue.append(Intent.NAV_LEFT)
        elif key in DOWN_KEYS:
            self._queue.append(Intent.NAV_DOWN)
        elif key in UP_KEYS:
            self._queue.append(Intent.NAV_UP)
        elif key in CONFIRM_KEYS:
            self._queue.append(Intent.CONFIRM)
        elif key in RESET_KEYS:
            self.request_confirmation(_reset_progress_request())
        else:
            return False
        return True

    def _playing_key(self, key: str) -> bool:
        if key in RIGHT_KEYS:
            self._move_right = True
        elif key in LEFT_KEYS:
            self._move_left = True
        elif key in CONFIRM_KEYS:
            self._queue.append(Intent.CONFIRM)
        elif key in CANCEL_KEYS:
            self._queue.append(Intent.CANCEL)
        else:
            return False
        return True

    def _result_key(self, key: str) -> bool:
        if key in CONFIRM_KEYS:
            self._queue.append(Intent.CONFIRM)
        elif key in CANCEL_KEYS:
            self._queue.append(Intent.CANCEL)
        elif key in RESET_KEYS:
            self.request_confirmation(_reset_score_request(follow_up=False))
        else:
            return False
        return True
