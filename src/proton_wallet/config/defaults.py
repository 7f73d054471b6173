"""Compiled-in defaults for the user config (``config.json``).

Every key here is guaranteed to exist in the runtime config, even when the
persisted file was written by an older version that did not know the key.
"""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "darkMode": False,
    "selectedFiat": "usd",
    "closeToTray": False,
    "minimizeToTray": False,
    "notifications": True,
    "walletFile": "",
    "useLocalDaemon": False,
    "daemonHost": "blocksum.org",
    "daemonPort": 11898,
    "daemonLogPath": "",
    "autoLockEnabled": True,
    "autoLockInterval": 30,
    "scanCoinbaseTransactions": False,
    "logLevel": "DEBUG",
}

CONFIG_FILE = "config.json"
ADDRESS_BOOK_FILE = "addressBook.json"
LOG_DIR = "logs"


def default_config() -> dict[str, Any]:
    """Return a fresh copy of the compiled-in defaults."""
    return dict(DEFAULT_CONFIG)
