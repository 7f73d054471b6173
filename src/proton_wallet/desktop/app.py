"""Desktop entry point: QApplication lifecycle for the supervisor process.

Launch flow:
  1. Load launcher settings and create the profile directories
  2. Configure logging to ``<profile>/logs/supervisor.log``
  3. Wire the Qt adapters into a ProcessSupervisor
  4. ``supervisor.run()`` (exits at once if another instance owns the profile)
  5. Hand control to the Qt event loop
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from proton_wallet.config.settings import AppSettings
from proton_wallet.config.store import AddressBookStore, ConfigStore
from proton_wallet.lifecycle.supervisor import ProcessSupervisor
from proton_wallet.logging_setup import configure_logging
from proton_wallet.metrics.collector import ShellMetrics

logger = logging.getLogger(__name__)


def system_prefers_dark() -> dict[str, Any]:
    """First-run config overrides taken from the OS colour scheme."""
    from PySide6.QtCore import Qt
    from PySide6.QtGui import QGuiApplication

    scheme = QGuiApplication.styleHints().colorScheme()
    return {"darkMode": scheme == Qt.ColorScheme.Dark}


def main() -> None:
    """Launch the py-proton desktop application."""
    try:
        from PySide6.QtWidgets import QApplication

        from proton_wallet.desktop.dialogs import QtApplication, QtErrorDialog
        from proton_wallet.desktop.instance import QtInstanceLock
        from proton_wallet.desktop.process import QtProcessLauncher
        from proton_wallet.desktop.scheduler import QtScheduler
        from proton_wallet.desktop.tray import QtTray
    except ImportError:
        print(  # noqa: T201
            "Desktop dependencies not installed. Install with: pip install py-proton[desktop]"
        )
        sys.exit(1)

    settings = AppSettings()
    for directory in settings.ensure_directories():
        print(f"Creating {directory}", file=sys.stderr)  # noqa: T201
    configure_logging(settings.log_dir, "supervisor", settings.log_level)

    app = QApplication(sys.argv)
    app.setApplicationName("py-proton")
    app.setOrganizationName("py-proton")
    app.setQuitOnLastWindowClosed(False)

    is_darwin = sys.platform == "darwin"
    tray = QtTray() if not is_darwin and QtTray.is_available() else None

    supervisor = ProcessSupervisor(
        config_store=ConfigStore(settings.profile_dir, first_run_overrides=system_prefers_dark),
        address_book=AddressBookStore(settings.profile_dir),
        launcher=QtProcessLauncher(app),
        scheduler=QtScheduler(app),
        instance_lock=QtInstanceLock(settings.profile_dir),
        error_dialog=QtErrorDialog(),
        app=QtApplication(app),
        tray=tray,
        supports_close_to_tray=is_darwin or tray is not None,
        keeps_running_without_windows=is_darwin,
        metrics=ShellMetrics(),
    )
    app.aboutToQuit.connect(supervisor.before_quit)

    if not supervisor.run():
        sys.exit(0)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
