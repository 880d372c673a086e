"""Game canvas: paints a GameSnapshot with QPainter."""

from __future__ import annotations

import math
import time
from typing import List, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QLinearGradient, QPainter, QPen, QRadialGradient
from PySide6.QtWidgets import QSizePolicy, QWidget

from blockbreaker.core.config import GameConfig
from blockbreaker.core.game import GameSnapshot, GameState
from blockbreaker.ui.colors import GameColors, darken_hex, lighten_hex
from blockbreaker.ui.models import StageTile, TileGeometry


class GameCanvas(QWidget):
    """Fixed-size logical playfield scaled to fit the widget.

    The canvas only reads what it is given; it never touches game state.
    """

    def __init__(self, config: GameConfig, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._config = config
        self._snapshot: Optional[GameSnapshot] = None
        self._tiles: List[StageTile] = []
        self._geometry = TileGeometry()
        self.setMinimumSize(config.canvas_width // 2, config.canvas_height // 2)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

    def set_snapshot(self, snapshot: GameSnapshot, tiles: List[StageTile]) -> None:
        self._snapshot = snapshot
        self._tiles = tiles
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), QColor("#000000"))

        snap = self._snapshot
        if snap is None:
            painter.end()
            return

        width = self._config.canvas_width
        height = self._config.canvas_height
        scale = min(self.width() / width, self.height() / height)
        painter.translate((self.width() - width * scale) / 2, (self.height() - height * scale) / 2)
        painter.scale(scale, scale)
        painter.setClipRect(QRectF(0, 0, width, height))

        if snap.state is GameState.STAGE_SELECT:
            self._draw_stage_select(painter, snap)
        else:
            self._draw_background(painter)
            if snap.state is not GameState.GAME_COMPLETE:
                self._draw_bricks(painter, snap)
                self._draw_paddle(painter, snap)
                self._draw_ball(painter, snap)
                self._draw_hud(painter, snap)
            self._draw_state_message(painter, snap)
        painter.end()

    # -- playfield ------------------------------------------------------------

    def _draw_background(self, painter: QPainter) -> None:
        width = self._config.canvas_width
        height = self._config.canvas_height
        gradient = QLinearGradient(0, 0, 0, height)
        gradient.setColorAt(0, QColor(GameColors.BACKGROUND))
        gradient.setColorAt(1, QColor(GameColors.ACCENT))
        painter.fillRect(QRectF(0, 0, width, height), gradient)

        painter.setPen(QPen(QColor(255, 255, 255, 13), 1))
        for y in range(0, height, 20):
            painter.drawLine(0, y, width, y)
        for x in range(0, width, 20):
            painter.drawLine(x, 0, x, height)

        painter.setPen(QPen(QColor(GameColors.HIGHLIGHT), 4))
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(QRectF(2, 2, width - 4, height - 4))

    def _draw_bricks(self, painter: QPainter, snap: GameSnapshot) -> None:
        for brick in snap.bricks:
            if not brick.alive:
                continue
            base = snap.stage.color_for_row(brick.row)
            rect = QRectF(brick.x, brick.y, snap.brick_width, snap.brick_height)
            gradient = QLinearGradient(rect.topLeft(), rect.bottomLeft())
            gradient.setColorAt(0, QColor(lighten_hex(base, 20)))
            gradient.setColorAt(1, QColor(darken_hex(base, 20)))
            painter.setPen(QPen(QColor(darken_hex(base, 30)), 1))
            painter.setBrush(gradient)
            painter.drawRoundedRect(rect, 3, 3)

    def _draw_paddle(self, painter: QPainter, snap: GameSnapshot) -> None:
        paddle = snap.paddle
        top = snap.bounds.height - paddle.height - paddle.y_offset
        rect = QRectF(paddle.x, top, paddle.width, paddle.height)
        gradient = QLinearGradient(rect.topLeft(), rect.bottomLeft())
        gradient.setColorAt(0, QColor(GameColors.HIGHLIGHT))
        gradient.setColorAt(1, QColor(GameColors.PRIMARY))
        painter.setPen(Qt.NoPen)
        painter.setBrush(gradient)
        painter.drawRoundedRect(rect, 5, 5)

    def _draw_ball(self, painter: QPainter, snap: GameSnapshot) -> None:
        ball = snap.ball
        gradient = QRadialGradient(
            QPointF(ball.x - ball.radius / 3, ball.y - ball.radius / 3), ball.radius
        )
        gradient.setColorAt(0, QColor("#ffffff"))
        gradient.setColorAt(0.3, QColor(GameColors.HIGHLIGHT))
        gradient.setColorAt(1, QColor(GameColors.SECONDARY))
        painter.setPen(Qt.NoPen)
        painter.setBrush(gradient)
        painter.drawEllipse(QPointF(ball.x, ball.y), ball.radius, ball.radius)

    def _draw_hud(self, painter: QPainter, snap: GameSnapshot) -> None:
        self._text(painter, QRectF(12, 10, 300, 28), f"Score: {snap.score}", 14, Qt.AlignLeft)
        self._text(
            painter,
            QRectF(snap.bounds.width / 2 - 150, 10, 300, 28),
            f"Stage {snap.current_stage}",
            14,
            Qt.AlignHCenter,
        )
        self._text(
            painter,
            QRectF(snap.bounds.width - 312, 10, 300, 28),
            f"Lives: {snap.lives}",
            14,
            Qt.AlignRight,
        )

    def _draw_state_message(self, painter: QPainter, snap: GameSnapshot) -> None:
        if snap.state is GameState.PLAYING:
            if not snap.started:
                self._message_box(painter, "Press SPACE to start", "ESC: back to stage select")
            return
        if snap.state is GameState.LIFE_LOST:
            self._message_box(painter, f"Life lost! {snap.lives} left", "SPACE: continue   ESC: stage select")
        elif snap.state is GameState.STAGE_CLEAR:
            hint = "SPACE: next stage" if snap.has_next_stage else "SPACE: finish"
            self._message_box(painter, f"Stage {snap.current_stage} clear!  Score {snap.score}", hint + "   ESC: stage select")
        elif snap.state is GameState.GAME_OVER:
            self._message_box(painter, f"Game over  Score {snap.score}", "SPACE: back to title   ESC: keep score")
        elif snap.state is GameState.GAME_COMPLETE:
            headline = "All stages cleared!" if snap.all_stages_cleared else "Game complete!"
            self._message_box(painter, f"{headline}  Score {snap.score}", "SPACE: back to stage select")

    def _message_box(self, painter: QPainter, headline: str, hint: str) -> None:
        width = self._config.canvas_width
        height = self._config.canvas_height
        box = QRectF(width / 2 - 260, height / 2 - 60, 520, 120)
        painter.setPen(QPen(QColor(GameColors.HIGHLIGHT), 2))
        painter.setBrush(QColor(0, 0, 0, 180))
        painter.drawRoundedRect(box, 10, 10)
        self._text(painter, QRectF(box.x(), box.y() + 18, box.width(), 40), headline, 20, Qt.AlignHCenter, bold=True)
        self._text(painter, QRectF(box.x(), box.y() + 68, box.width(), 30), hint, 12, Qt.AlignHCenter)

    # -- stage select -----------------------------------------------------------

    def _draw_stage_select(self, painter: QPainter, snap: GameSnapshot) -> None:
        self._draw_background(painter)
        width = self._config.canvas_width
        per_row = self._config.stages_per_row

        self._text(painter, QRectF(0, 40, width, 50), "BLOCK BREAKER", 32, Qt.AlignHCenter, bold=True)
        self._text(painter, QRectF(0, 100, width, 30), "Select a stage", 16, Qt.AlignHCenter)

        pulse = math.sin(time.monotonic() * 5) * 0.2 + 0.8
        for index, tile in enumerate(self._tiles):
            x, y, w, h = self._geometry.tile_rect(index, width, per_row)
            rect = QRectF(x, y, w, h)
            if tile.selected:
                fill = GameColors.TILE_SELECTED
            elif tile.cleared:
                fill = GameColors.TILE_CLEARED
            else:
                fill = GameColors.TILE_OPEN[index % len(GameColors.TILE_OPEN)]
            painter.setPen(QPen(QColor(GameColors.LIGHT), 2))
            painter.setBrush(QColor(fill))
            painter.drawRoundedRect(rect, 10, 10)

            self._text(painter, QRectF(x, y + 8, w, 36), str(tile.number), 24, Qt.AlignHCenter, bold=True)
            self._text(painter, QRectF(x, y + 46, w, 18), f"{tile.stage.rows}x{tile.stage.columns}", 10, Qt.AlignHCenter)
            self._text(painter, QRectF(x, y + 64, w, 18), tile.difficulty, 10, Qt.AlignHCenter)
            if tile.cleared:
                self._text(painter, QRectF(x + w - 28, y + 4, 24, 24), "✓", 14, Qt.AlignHCenter, bold=True)

            if tile.selected:
                glow = QColor(GameColors.HIGHLIGHT)
                glow.setAlphaF(max(0.0, min(1.0, pulse)))
                painter.setPen(QPen(glow, 3))
                painter.setBrush(Qt.NoBrush)
                painter.drawRoundedRect(rect.adjusted(-5, -5, 5, 5), 12, 12)

        cleared = sum(1 for c in snap.cleared_stages if c)
        bottom = self._config.canvas_height
        self._text(painter, QRectF(0, bottom - 110, width, 24), f"Cleared: {cleared} / {snap.max_stage}", 14, Qt.AlignHCenter)
        self._text(painter, QRectF(0, bottom - 80, width, 24), "Arrows: select   SPACE: start", 12, Qt.AlignHCenter)
        self._text(painter, QRectF(0, bottom - 56, width, 24), "R: reset progress", 12, Qt.AlignHCenter)
        self._text(painter, QRectF(12, 10, 300, 28), f"Score: {snap.score}", 14, Qt.AlignLeft)

    @staticmethod
    def _text(
        painter: QPainter,
        rect: QRectF,
        text: str,
        point_size: int,
        align: Qt.AlignmentFlag,
        bold: bool = False,
    ) -> None:
        font = QFont(painter.font())
        font.setPointSize(point_size)
        font.setBold(bold)
        painter.setFont(font)
        painter.setPen(QColor(GameColors.LIGHT))
        painter.drawText(rect, align | Qt.AlignVCenter, text)
