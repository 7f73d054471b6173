"""Interfaces the supervisor drives.

The desktop build implements these with PySide6 (``proton_wallet.desktop``);
tests use in-memory fakes.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.relay.messages import RelayMessage


class ProcessRole(enum.StrEnum):
    """The two supervised child processes."""

    ENGINE = "engine"
    UI = "ui"


class Endpoint(Protocol):
    """Anything the relayer can write messages to."""

    @property
    def is_running(self) -> bool: ...

    def send(self, message: RelayMessage) -> None:
        """Write one message. Raises ``ProcessError`` if the process is gone."""


class ProcessHandle(Endpoint, Protocol):
    """A started child process."""

    role: ProcessRole

    def start(self) -> None: ...

    def kill(self) -> None: ...


class ProcessLauncher(Protocol):
    def create(
        self,
        role: ProcessRole,
        *,
        on_message: Callable[[RelayMessage], None],
        on_exit: Callable[[int], None],
    ) -> ProcessHandle:
        """Build (but do not start) the child process for *role*."""


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Event-loop primitives of the supervising process."""

    def call_soon(self, callback: Callable[[], None]) -> None: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class Tray(Protocol):
    """System tray icon with a two-entry context menu."""

    def install(self, *, on_show: Callable[[], None], on_quit: Callable[[], None]) -> None: ...

    def remove(self) -> None: ...


class InstanceLock(Protocol):
    """Cross-process single-instance guard."""

    def acquire(self) -> bool:
        """Return ``True`` if this process is now the primary instance."""

    def notify_primary(self) -> None:
        """Ask the primary instance to surface its window."""

    def on_activated(self, callback: Callable[[], None]) -> None:
        """Register the callback run when a second instance calls ``notify_primary``."""

    def release(self) -> None: ...


class ErrorDialog(Protocol):
    def show_error(self, title: str, message: str) -> None:
        """Show a blocking error message."""


class Application(Protocol):
    """Process-level exit control of the supervising process."""

    def exit(self, code: int) -> None: ...
