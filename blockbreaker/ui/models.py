"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from blockbreaker.core.bricks import BrickLayout
from blockbreaker.core.config import GameConfig
from blockbreaker.core.stages import Stage, difficulty_label


@dataclass
class StageTile:
    """UI state for one tile on the stage-select grid."""

    stage: Stage
    cleared: bool
    selected: bool
    difficulty: str
    brick_width: int

    @property
    def number(self) -> int:
        return self.stage.number


@dataclass(frozen=True)
class TileGeometry:
    """Placement of the stage-select grid on the canvas."""

    tile_size: int = 100
    spacing: int = 20
    start_y: int = 160

    def origin(self, canvas_width: int, per_row: int) -> tuple[int, int]:
        total = self.tile_size * per_row + self.spacing * (per_row - 1)
        return (canvas_width - total) // 2, self.start_y

    def tile_rect(self, index: int, canvas_width: int, per_row: int) -> tuple[int, int, int, int]:
        start_x, start_y = self.origin(canvas_width, per_row)
        row, col = divmod(index, per_row)
        x = start_x + col * (self.tile_size + self.spacing)
        y = start_y + row * (self.tile_size + self.spacing)
        return x, y, self.tile_size, self.tile_size


def build_stage_tiles(
    stages: Sequence[Stage],
    cleared: Sequence[bool],
    selected_index: int,
    config: GameConfig,
) -> List[StageTile]:
    tiles = []
    for index, stage in enumerate(stages):
        tiles.append(
            StageTile(
                stage=stage,
                cleared=index < len(cleared) and cleared[index],
                selected=index == selected_index,
                difficulty=difficulty_label(stage.number),
                brick_width=BrickLayout.for_columns(stage.columns, config).brick_width,
            )
        )
    return tiles
