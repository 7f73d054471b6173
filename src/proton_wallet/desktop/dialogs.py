"""Blocking error dialog and application exit control."""

from __future__ import annotations

from PySide6.QtWidgets import QApplication, QMessageBox


class QtErrorDialog:
    def show_error(self, title: str, message: str) -> None:
        QMessageBox.critical(None, title, message)


class QtApplication:
    """Exit control for the running ``QApplication``."""

    def __init__(self, app: QApplication) -> None:
        self._app = app

    def exit(self, code: int) -> None:
        self._app.exit(code)
