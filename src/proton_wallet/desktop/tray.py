"""System tray icon with "Show App" / "Quit"."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

if TYPE_CHECKING:
    from collections.abc import Callable

    from PySide6.QtGui import QIcon

TRAY_TOOLTIP = "Proton Wallet"


class QtTray:
    def __init__(self, icon: QIcon | None = None) -> None:
        self._icon = icon
        self._tray: QSystemTrayIcon | None = None
        self._menu: QMenu | None = None

    @staticmethod
    def is_available() -> bool:
        return QSystemTrayIcon.isSystemTrayAvailable()

    @property
    def installed(self) -> bool:
        return self._tray is not None

    def install(self, *, on_show: Callable[[], None], on_quit: Callable[[], None]) -> None:
        if self._tray is not None:
            return
        icon = self._icon
        if icon is None:
            icon = QApplication.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)

        menu = QMenu()
        menu.addAction("Show App").triggered.connect(on_show)
        menu.addAction("Quit").triggered.connect(on_quit)

        tray = QSystemTrayIcon(icon)
        tray.setToolTip(TRAY_TOOLTIP)
        tray.setContextMenu(menu)
        tray.activated.connect(
            lambda reason: on_show() if reason == QSystemTrayIcon.ActivationReason.Trigger else None
        )
        tray.show()
        self._tray, self._menu = tray, menu

    def remove(self) -> None:
        if self._tray is None:
            return
        self._tray.hide()
        self._tray.deleteLater()
        self._tray = None
        self._menu = None
