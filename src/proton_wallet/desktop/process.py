"""Child processes as ``QProcess`` instances speaking JSON lines."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QProcess

from proton_wallet.errors.definitions import ErrProcessNotStarted
from proton_wallet.errors.proton_errors import ProcessError
from proton_wallet.lifecycle.ports import ProcessRole
from proton_wallet.relay.codec import LineBuffer, encode_message

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.relay.messages import RelayMessage

logger = logging.getLogger(__name__)

CHILD_MODULES: dict[ProcessRole, str] = {
    ProcessRole.ENGINE: "proton_wallet.engine",
    ProcessRole.UI: "proton_wallet.ui",
}


class QtProcessHandle(QObject):
    """``python -m <module>`` child with stdout decoded into relay messages.

    The child's stderr is forwarded to ours so its log output stays visible.
    """

    def __init__(
        self,
        role: ProcessRole,
        *,
        on_message: Callable[[RelayMessage], None],
        on_exit: Callable[[int], None],
        program: str | None = None,
        arguments: list[str] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.role = role
        self._on_message = on_message
        self._on_exit = on_exit
        self._buffer = LineBuffer()
        self._exited = False

        self._process = QProcess(self)
        self._process.setProgram(program or sys.executable)
        self._process.setArguments(arguments if arguments is not None else ["-m", CHILD_MODULES[role]])
        self._process.setProcessChannelMode(QProcess.ProcessChannelMode.ForwardedErrorChannel)
        self._process.readyReadStandardOutput.connect(self._read_stdout)
        self._process.finished.connect(self._finished)
        self._process.errorOccurred.connect(self._error)

    @property
    def is_running(self) -> bool:
        return self._process.state() == QProcess.ProcessState.Running

    def start(self) -> None:
        logger.info("Starting %s process", self.role)
        self._process.start()

    def send(self, message: RelayMessage) -> None:
        if not self.is_running:
            raise ErrProcessNotStarted
        written = self._process.write(encode_message(message))
        if written < 0:
            raise ProcessError(f"write to {self.role} process failed")

    def kill(self) -> None:
        if self._process.state() != QProcess.ProcessState.NotRunning:
            logger.info("Killing %s process", self.role)
            self._process.kill()

    def _read_stdout(self) -> None:
        chunk = self._process.readAllStandardOutput().data()
        for message in self._buffer.feed(chunk):
            self._on_message(message)

    def _finished(self, exit_code: int, _status: QProcess.ExitStatus) -> None:
        self._report_exit(exit_code)

    def _error(self, error: QProcess.ProcessError) -> None:
        logger.error("%s process error: %s", self.role, error)
        if error == QProcess.ProcessError.FailedToStart:
            self._report_exit(-1)

    def _report_exit(self, code: int) -> None:
        if self._exited:
            return
        self._exited = True
        self._on_exit(code)


class QtProcessLauncher:
    """Creates :class:`QtProcessHandle` children for the supervisor."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def create(
        self,
        role: ProcessRole,
        *,
        on_message: Callable[[RelayMessage], None],
        on_exit: Callable[[int], None],
    ) -> QtProcessHandle:
        return QtProcessHandle(role, on_message=on_message, on_exit=on_exit, parent=self._parent)
