from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Tuple


class Intent(enum.Enum):
    """Player actions, decoupled from the keys that produce them."""

    NAV_LEFT = "nav_left"
    NAV_RIGHT = "nav_right"
    NAV_UP = "nav_up"
    NAV_DOWN = "nav_down"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    RESET_PROGRESS = "reset_progress"
    RESET_SCORE = "reset_score"


@dataclass(frozen=True)
class FrameInput:
    """Everything the input side hands the game for one frame."""

    intents: Tuple[Intent, ...] = field(default_factory=tuple)
    move_left: bool = False
    move_right: bool = False
