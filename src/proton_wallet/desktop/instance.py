"""Single-instance lock over a per-profile ``QLocalServer``.

A second launch connects to the primary's server, writes an activation
request and exits; the primary surfaces its window.
"""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING

from PySide6.QtNetwork import QLocalServer, QLocalSocket

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_MS = 500
ACTIVATE_REQUEST = b"activate\n"


def server_name(profile_dir: Path) -> str:
    digest = hashlib.sha256(str(profile_dir.resolve()).encode()).hexdigest()[:16]
    return f"proton-wallet-{digest}"


class QtInstanceLock:
    def __init__(self, profile_dir: Path) -> None:
        self.name = server_name(profile_dir)
        self._server: QLocalServer | None = None
        self._callbacks: list[Callable[[], None]] = []

    def acquire(self) -> bool:
        probe = QLocalSocket()
        probe.connectToServer(self.name)
        if probe.waitForConnected(CONNECT_TIMEOUT_MS):
            probe.disconnectFromServer()
            return False

        # Nobody answered: clear a stale socket left by a crashed instance.
        QLocalServer.removeServer(self.name)
        server = QLocalServer()
        if not server.listen(self.name):
            logger.warning("Instance lock %s unavailable: %s", self.name, server.errorString())
            return False
        server.newConnection.connect(self._accept)
        self._server = server
        return True

    def notify_primary(self) -> None:
        socket = QLocalSocket()
        socket.connectToServer(self.name)
        if not socket.waitForConnected(CONNECT_TIMEOUT_MS):
            logger.debug("Primary instance did not answer")
            return
        socket.write(ACTIVATE_REQUEST)
        socket.flush()
        socket.waitForBytesWritten(CONNECT_TIMEOUT_MS)
        socket.disconnectFromServer()

    def on_activated(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def release(self) -> None:
        if self._server is not None:
            self._server.close()
            self._server = None

    def _accept(self) -> None:
        if self._server is None:
            return
        while self._server.hasPendingConnections():
            socket = self._server.nextPendingConnection()
            socket.readyRead.connect(lambda s=socket: self._read(s))
            socket.disconnected.connect(socket.deleteLater)
            if socket.bytesAvailable():
                self._read(socket)

    def _read(self, socket: QLocalSocket) -> None:
        data = socket.readAll().data()
        if ACTIVATE_REQUEST.strip() in data:
            logger.debug("Second instance asked to surface the window")
            for callback in list(self._callbacks):
                callback()
