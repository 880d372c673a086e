"""In-window yes/no overlay for reset confirmations."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QEvent, Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from blockbreaker.core.input import ConfirmationRequest
from blockbreaker.ui.colors import GameColors


def _card_container(object_name: str = "confirmContainer") -> QFrame:
    container = QFrame()
    container.setObjectName(object_name)
    container.setMinimumWidth(400)
    container.setMaximumWidth(480)
    container.setStyleSheet(
        f"""
        QFrame#{object_name} {{
            background: {GameColors.ACCENT};
            border: 1px solid {GameColors.HIGHLIGHT};
            border-radius: 20px;
        }}
        """
    )
    shadow = QGraphicsDropShadowEffect(container)
    shadow.setBlurRadius(20)
    shadow.setOffset(0, 6)
    shadow.setColor(QColor(0, 0, 0, 120))
    container.setGraphicsEffect(shadow)
    return container


def _overlay_background(parent: QWidget, on_click: Callable[[], None]) -> QWidget:
    overlay_bg = QWidget(parent)
    overlay_bg.setStyleSheet("background: rgba(0, 0, 0, 0.5);")
    overlay_bg.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
    overlay_bg.setMinimumSize(1, 1)
    overlay_bg.mousePressEvent = lambda e: on_click()
    return overlay_bg


def _button_style(background: str, color: str) -> str:
    return f"""
        QPushButton {{
            background: {background};
            color: {color};
            padding: 10px 16px;
            border: 1px solid {GameColors.HIGHLIGHT};
            border-radius: 12px;
            font-weight: 600;
            font-size: 13px;
        }}
        QPushButton:hover {{ background: {GameColors.HIGHLIGHT}; color: {GameColors.LIGHT}; }}
    """


class ConfirmOverlay(QWidget):
    """Asks a yes/no question over the canvas without blocking the frame loop."""

    closed = Signal(bool)  # True if the player said yes

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._request: Optional[ConfirmationRequest] = None

        main_layout = QGridLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)
        main_layout.setRowStretch(0, 1)
        main_layout.setColumnStretch(0, 1)

        overlay_bg = _overlay_background(self, lambda: self._finish(False))
        main_layout.addWidget(overlay_bg, 0, 0)

        container = _card_container()
        content = QVBoxLayout(container)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(18)

        self._title = QLabel("")
        self._title.setStyleSheet(f"color: {GameColors.HIGHLIGHT}; font-size: 18px; font-weight: 800;")
        content.addWidget(self._title, 0)

        self._message = QLabel("")
        self._message.setStyleSheet(f"color: {GameColors.LIGHT}; font-size: 14px; font-weight: 500;")
        self._message.setWordWrap(True)
        content.addWidget(self._message, 0)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(10)

        no_btn = QPushButton("No (N)")
        no_btn.setStyleSheet(_button_style(GameColors.BACKGROUND, GameColors.LIGHT))
        no_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        no_btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        no_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        no_btn.clicked.connect(lambda: self._finish(False))
        btn_row.addWidget(no_btn, 1)

        yes_btn = QPushButton("Yes (Y)")
        yes_btn.setStyleSheet(_button_style(GameColors.SECONDARY, GameColors.LIGHT))
        yes_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        yes_btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        yes_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        yes_btn.clicked.connect(lambda: self._finish(True))
        btn_row.addWidget(yes_btn, 1)

        content.addLayout(btn_row)
        main_layout.addWidget(container, 0, 0, 1, 1, Qt.AlignCenter)
        self.hide()

    @property
    def request(self) -> Optional[ConfirmationRequest]:
        return self._request

    def ask(self, request: ConfirmationRequest) -> None:
        self._request = request
        self._title.setText(request.title)
        self._message.setText(request.message)
        self._update_geometry()
        self.raise_()
        self.show()

    def dismiss(self) -> None:
        """Hide without answering, e.g. when the question was answered by key."""
        self._request = None
        self.hide()

    def _finish(self, confirmed: bool) -> None:
        self._request = None
        self.hide()
        self.closed.emit(confirmed)

    def _update_geometry(self) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(parent.rect())

    def eventFilter(self, obj: QWidget, event: QEvent) -> bool:
        if obj is self.parentWidget() and event.type() == QEvent.Type.Resize:
            self._update_geometry()
        return super().eventFilter(obj, event)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self._update_geometry()
        parent = self.parentWidget()
        if parent is not None:
            parent.installEventFilter(self)

    def hideEvent(self, event) -> None:
        parent = self.parentWidget()
        if parent is not None:
            parent.removeEventFilter(self)
        super().hideEvent(event)
