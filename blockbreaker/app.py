"""Application entry point and setup for Block Breaker."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from blockbreaker.core.config import GameConfig
from blockbreaker.core.progress import ProgressStore
from blockbreaker.core.stages import StageCatalog
from blockbreaker.ui.main_window import MainWindow


def configure_logging(debug: bool = False) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load stages and progress, then open the game window."""
    config = GameConfig.from_env()
    configure_logging(config.debug)
    app = QApplication(sys.argv)
    app.setApplicationName("Block Breaker")
    app.setApplicationDisplayName("Block Breaker")

    catalog = StageCatalog(max_stage=config.max_stage)
    progress_store = ProgressStore(max_stage=config.max_stage, file_path=config.progress_file)
    logging.info(f"Loaded {progress_store.cleared_count()} cleared stages from {progress_store.file_path}")

    window = MainWindow(config=config, catalog=catalog, progress_store=progress_store)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.move(geometry.center() - window.rect().center())
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
