from __future__ import annotations

import logging
import sys

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory
from sqlalchemy.exc import SQLAlchemyError

from quicktask.bootstrap import build_app
from quicktask.config import load_settings
from quicktask.infra.logging import setup_logging
from quicktask.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> None:
    app = QApplication(sys.argv)
    try:
        settings = load_settings()
    except RuntimeError as exc:
        QMessageBox.critical(None, "Configuration error", str(exc))
        return

    setup_logging(settings)
    try:
        context = build_app(settings)
    except SQLAlchemyError as exc:
        logger.exception("Database is not reachable")
        QMessageBox.critical(None, "DB error", str(exc))
        return

    app.setStyle(QStyleFactory.create("Fusion"))
    app.setFont(QFont("Segoe UI", 10))

    window = MainWindow(context)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
