from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtCore import QEvent, Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeyEvent
from PySide6.QtWidgets import QMainWindow, QVBoxLayout, QWidget

from blockbreaker.core.config import GameConfig
from blockbreaker.core.game import GameState, GameStateMachine
from blockbreaker.core.input import InputRouter
from blockbreaker.core.progress import ProgressStore
from blockbreaker.core.stages import Stage, StageCatalog
from blockbreaker.ui.confirm_overlay import ConfirmOverlay
from blockbreaker.ui.game_canvas import GameCanvas
from blockbreaker.ui.models import build_stage_tiles

logger = logging.getLogger(__name__)

_NAMED_KEYS = {
    Qt.Key.Key_Left: "ArrowLeft",
    Qt.Key.Key_Right: "ArrowRight",
    Qt.Key.Key_Up: "ArrowUp",
    Qt.Key.Key_Down: "ArrowDown",
    Qt.Key.Key_Space: " ",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Return: "Enter",
    Qt.Key.Key_Enter: "Enter",
}

_REPEATABLE_KEYS = {"ArrowLeft", "ArrowRight", "ArrowUp", "ArrowDown"}


def key_identifier(event: QKeyEvent) -> Optional[str]:
    """Translate a Qt key event to the textual key names the input router uses."""
    named = _NAMED_KEYS.get(Qt.Key(event.key()))
    if named is not None:
        return named
    text = event.text()
    if len(text) == 1 and text.isprintable():
        return text
    return None


class MainWindow(QMainWindow):
    """Hosts the game canvas and runs the frame loop.

    A QTimer drives one frame per tick: queued input is drained into the
    state machine, the machine advances, and the canvas repaints from a fresh
    snapshot.
    """

    def __init__(
        self,
        config: GameConfig,
        catalog: StageCatalog,
        progress_store: ProgressStore,
    ) -> None:
        super().__init__()
        self._config = config
        self._progress_store = progress_store
        self._machine = GameStateMachine(catalog, progress_store, config)
        self._router = InputRouter(lambda: self._machine.state)
        self._stages: List[Stage] = catalog.all()
        self._last_state: GameState = self._machine.state

        self.setWindowTitle("Block Breaker")

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        self._canvas = GameCanvas(config)
        layout.addWidget(self._canvas)
        self.setCentralWidget(central)

        self._confirm_overlay = ConfirmOverlay(central)
        self._confirm_overlay.closed.connect(self._router.respond)

        self._frame_timer = QTimer(self)
        self._frame_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._frame_timer.setInterval(config.frame_interval_ms)
        self._frame_timer.timeout.connect(self._on_frame)

        self.resize(config.canvas_width, config.canvas_height)
        self._canvas.setFocus()
        self._render()
        self._frame_timer.start()

    @property
    def machine(self) -> GameStateMachine:
        return self._machine

    def _on_frame(self) -> None:
        self._machine.step(self._router.drain())
        if self._machine.state is not self._last_state:
            logger.debug("State %s -> %s", self._last_state.value, self._machine.state.value)
            self._last_state = self._machine.state
        self._sync_confirmation()
        self._render()

    def _render(self) -> None:
        snapshot = self._machine.snapshot()
        tiles = []
        if snapshot.state is GameState.STAGE_SELECT:
            tiles = build_stage_tiles(
                self._stages,
                snapshot.cleared_stages,
                snapshot.selected_stage_index,
                self._config,
            )
        self._canvas.set_snapshot(snapshot, tiles)

    def _sync_confirmation(self) -> None:
        pending = self._router.pending_confirmation
        overlay = self._confirm_overlay
        if pending is None:
            if overlay.isVisible():
                overlay.dismiss()
        elif overlay.request is not pending:
            overlay.ask(pending)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = key_identifier(event)
        if key is None or (event.isAutoRepeat() and key not in _REPEATABLE_KEYS):
            super().keyPressEvent(event)
            return
        if not self._router.key_down(key):
            super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        key = key_identifier(event)
        if key is None or event.isAutoRepeat():
            super().keyReleaseEvent(event)
            return
        if not self._router.key_up(key):
            super().keyReleaseEvent(event)

    def changeEvent(self, event: QEvent) -> None:
        if event.type() == QEvent.Type.ActivationChange and not self.isActiveWindow():
            self._router.release_all()
        super().changeEvent(event)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the frame loop, let go of held keys and persist progress."""
        self._frame_timer.stop()
        self._router.release_all()
        self._progress_store.flush()
        super().closeEvent(event)
