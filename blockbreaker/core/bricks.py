from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from blockbreaker.core.config import GameConfig


class FieldInvariantError(RuntimeError):
    """The brick grid no longer matches the active stage."""


@dataclass
class Brick:
    column: int
    row: int
    x: float
    y: float
    alive: bool = True


@dataclass(frozen=True)
class BrickLayout:
    """Maps grid cells to canvas positions for a given column count."""

    brick_width: int
    brick_height: int
    padding: int
    offset_left: int
    offset_top: int

    @classmethod
    def for_columns(cls, columns: int, config: GameConfig) -> "BrickLayout":
        available = config.canvas_width - config.brick_margin
        width = (available - config.brick_padding * (columns - 1)) // columns
        return cls(
            brick_width=width,
            brick_height=config.brick_height,
            padding=config.brick_padding,
            offset_left=config.brick_offset_left,
            offset_top=config.brick_offset_top,
        )

    def position(self, column: int, row: int) -> tuple[int, int]:
        x = column * (self.brick_width + self.padding) + self.offset_left
        y = row * (self.brick_height + self.padding) + self.offset_top
        return x, y


class BrickField:
    """Column-major grid of bricks for the active stage."""

    def __init__(self, config: Optional[GameConfig] = None) -> None:
        self._config = config or GameConfig()
        self._grid: List[List[Brick]] = []
        self._rows = 0
        self._columns = 0
        self._layout = BrickLayout.for_columns(1, self._config)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def layout(self) -> BrickLayout:
        return self._layout

    def initialize(self, rows: int, columns: int) -> List[List[Brick]]:
        """Replace the grid with ``rows`` x ``columns`` alive bricks."""
        if rows <= 0 or columns <= 0:
            raise ValueError(f"brick grid must be at least 1x1, got {rows}x{columns}")
        layout = BrickLayout.for_columns(columns, self._config)
        grid = []
        for column in range(columns):
            cells = []
            for row in range(rows):
                x, y = layout.position(column, row)
                cells.append(Brick(column=column, row=row, x=x, y=y))
            grid.append(cells)
        self._grid = grid
        self._rows = rows
        self._columns = columns
        self._layout = layout
        return grid

    def brick(self, column: int, row: int) -> Brick:
        return self._grid[column][row]

    def bricks(self) -> Iterator[Brick]:
        for cells in self._grid:
            yield from cells

    def alive_bricks(self) -> Iterator[Brick]:
        return (brick for brick in self.bricks() if brick.alive)

    def alive_count(self) -> int:
        return sum(1 for _ in self.alive_bricks())

    def all_cleared(self) -> bool:
        return not any(brick.alive for brick in self.bricks())

    def mark_destroyed(self, column: int, row: int) -> None:
        self._grid[column][row].alive = False

    def matches(self, rows: int, columns: int) -> bool:
        """True when the grid really is ``rows`` x ``columns``."""
        if self._rows != rows or self._columns != columns or len(self._grid) != columns:
            return False
        return all(len(cells) == rows for cells in self._grid)
