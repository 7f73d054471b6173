"""Auto-skip desktop tests when PySide6 is not installed.

CI installs only the ``[dev]`` extras (no Qt). Tests decorated with
``@pytest.mark.desktop`` are skipped so the Qt-free parts of this directory
still run.
"""

from __future__ import annotations

import importlib.util
import os

import pytest

_HAS_PYSIDE6 = importlib.util.find_spec("PySide6") is not None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Skip items carrying the *desktop* marker when PySide6 is absent."""
    if _HAS_PYSIDE6:
        return
    skip = pytest.mark.skip(reason="PySide6 not installed")
    for item in items:
        if item.get_closest_marker("desktop"):
            item.add_marker(skip)


@pytest.fixture
def qapp():
    """A headless QCoreApplication shared across the session."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtCore import QCoreApplication

    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def spin(qapp):
    """Run the Qt event loop for *ms* milliseconds."""
    from PySide6.QtCore import QEventLoop, QTimer

    def _spin(ms: int = 50) -> None:
        loop = QEventLoop()
        QTimer.singleShot(ms, loop.quit)
        loop.exec()

    return _spin
