from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class Stage:
    number: int
    rows: int
    columns: int
    brick_colors: Tuple[str, ...]
    ball_speed: float
    paddle_width: int

    @property
    def brick_count(self) -> int:
        return self.rows * self.columns

    def color_for_row(self, row: int) -> str:
        """Bricks cycle through the stage palette one row at a time."""
        if not self.brick_colors:
            return DEFAULT_STAGE.brick_colors[0]
        return self.brick_colors[row % len(self.brick_colors)]


DEFAULT_STAGE = Stage(
    number=0,
    rows=3,
    columns=5,
    brick_colors=("#CCCCCC",),
    ball_speed=2.0,
    paddle_width=100,
)


def difficulty_label(number: int) -> str:
    """Difficulty shown on the stage-select tile for a 1-based stage number."""
    if number <= 3:
        return "Easy"
    if number <= 6:
        return "Normal"
    if number <= 10:
        return "Hard"
    return "Extreme"


class StageCatalog:
    """Per-stage parameters loaded from ``data/stages.yaml``.

    Entries that are missing or malformed are never fatal: they are logged and
    :meth:`get` answers with :data:`DEFAULT_STAGE` for that number instead.
    """

    def __init__(self, max_stage: int = 15, path: Optional[Path] = None) -> None:
        self._max_stage = max_stage
        self._path = path or Path(__file__).resolve().parent.parent / "data" / "stages.yaml"
        self._stages = self._load_stages()

    @property
    def max_stage(self) -> int:
        return self._max_stage

    def all(self) -> List[Stage]:
        return [self.get(number) for number in range(1, self._max_stage + 1)]

    def has(self, number: int) -> bool:
        return number in self._stages

    def get(self, number: int) -> Stage:
        stage = self._stages.get(number)
        if stage is None:
            logger.warning("No configuration for stage %s; using default stage settings", number)
            return replace(DEFAULT_STAGE, number=number)
        return stage

    def _load_stages(self) -> Dict[int, Stage]:
        if not self._path.exists():
            logger.warning("Stage file not found: %s", self._path)
            return {}
        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Could not read stages from %s: %s", self._path, e)
            return {}

        entries = raw.get("stages") if isinstance(raw, dict) else None
        if not isinstance(entries, list):
            logger.warning("%s: expected a 'stages' list", self._path.name)
            return {}

        stages: Dict[int, Stage] = {}
        for index, entry in enumerate(entries, start=1):
            try:
                stage = _parse_stage(entry, index)
            except ValueError as e:
                logger.warning("%s: skipping entry %d: %s", self._path.name, index, e)
                continue
            if not 1 <= stage.number <= self._max_stage:
                logger.warning(
                    "%s: stage %d is outside 1..%d, ignored",
                    self._path.name,
                    stage.number,
                    self._max_stage,
                )
                continue
            if stage.number in stages:
                logger.warning("%s: duplicate stage %d, keeping the first", self._path.name, stage.number)
                continue
            stages[stage.number] = stage
        return stages


def _parse_stage(entry: Any, index: int) -> Stage:
    if not isinstance(entry, dict):
        raise ValueError("expected a mapping")

    number = entry.get("number", index)
    rows = entry.get("rows")
    columns = entry.get("columns")
    ball_speed = entry.get("ball_speed")
    paddle_width = entry.get("paddle_width")
    colors = entry.get("brick_colors")

    for name, value in (("number", number), ("rows", rows), ("columns", columns), ("paddle_width", paddle_width)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"missing or invalid '{name}'")
    if isinstance(ball_speed, bool) or not isinstance(ball_speed, (int, float)) or ball_speed <= 0:
        raise ValueError("missing or invalid 'ball_speed'")
    if not isinstance(colors, list) or not colors:
        raise ValueError("'brick_colors' must be a non-empty list")
    for color in colors:
        if not isinstance(color, str) or not _HEX_COLOR.match(color.strip()):
            raise ValueError(f"invalid brick color {color!r}")

    return Stage(
        number=number,
        rows=rows,
        columns=columns,
        brick_colors=tuple(color.strip().upper() for color in colors),
        ball_speed=float(ball_speed),
        paddle_width=paddle_width,
    )
