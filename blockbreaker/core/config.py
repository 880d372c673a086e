from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

STORAGE_KEY = "blockbreaker_progress"


def _default_progress_file() -> Path:
    return Path.home() / ".blockbreaker" / "progress.json"


@dataclass(frozen=True)
class GameConfig:
    """Playfield geometry and tuning shared by the core and the renderer."""

    canvas_width: int = 1000
    canvas_height: int = 620

    paddle_height: int = 10
    paddle_y_offset: int = 50
    paddle_step: int = 7

    ball_radius: int = 10

    brick_height: int = 20
    brick_padding: int = 10
    brick_offset_top: int = 50
    brick_offset_left: int = 30
    brick_margin: int = 60

    score_per_brick: int = 10
    initial_lives: int = 3
    max_stage: int = 15
    stages_per_row: int = 5

    frame_interval_ms: int = 16
    debug: bool = False
    progress_file: Path = field(default_factory=_default_progress_file)

    @property
    def ball_spawn(self) -> tuple[float, float]:
        """Where the ball sits at stage start and after a lost life."""
        return (
            self.canvas_width / 2,
            self.canvas_height - self.paddle_y_offset - self.ball_radius - 10,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Build a config honouring BLOCKBREAKER_DEBUG and BLOCKBREAKER_PROGRESS_FILE."""
        env = os.environ if environ is None else environ
        config = cls()
        if env.get("BLOCKBREAKER_DEBUG") == "1":
            config = replace(config, debug=True)
        progress_file = env.get("BLOCKBREAKER_PROGRESS_FILE")
        if progress_file:
            config = replace(config, progress_file=Path(progress_file).expanduser())
        logger.debug("Using config: debug=%s progress_file=%s", config.debug, config.progress_file)
        return config
