"""Shared test fixtures for py-proton test suite.

The supervisor only talks to ports, so most lifecycle tests run against the
in-memory fakes defined here instead of Qt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from proton_wallet.config.store import AddressBookStore, ConfigStore
from proton_wallet.errors.definitions import ErrProcessNotStarted
from proton_wallet.lifecycle.supervisor import ProcessSupervisor
from proton_wallet.metrics.collector import ShellMetrics
from proton_wallet.relay.messages import MessageType, RelayMessage

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from proton_wallet.lifecycle.ports import ProcessRole


# ---------------------------------------------------------------------------
# Port fakes
# ---------------------------------------------------------------------------


class FakeTimer:
    def __init__(self, scheduler: FakeScheduler, delay: float, callback: Callable[[], None]) -> None:
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manually pumped event loop."""

    def __init__(self) -> None:
        self.soon: list[Callable[[], None]] = []
        self.timers: list[FakeTimer] = []

    def call_soon(self, callback: Callable[[], None]) -> None:
        self.soon.append(callback)

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self, delay, callback)
        self.timers.append(timer)
        return timer

    def run_soon(self) -> None:
        """Run deferred callbacks until none are left."""
        while self.soon:
            callbacks, self.soon = self.soon, []
            for callback in callbacks:
                callback()

    def fire_timers(self) -> None:
        for timer in list(self.timers):
            if not timer.cancelled:
                timer.cancelled = True
                timer.callback()

    @property
    def active_timers(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]


class FakeHandle:
    """Child process stand-in recording what was written to it."""

    def __init__(
        self,
        role: ProcessRole,
        on_message: Callable[[RelayMessage], None],
        on_exit: Callable[[int], None],
    ) -> None:
        self.role = role
        self.on_message = on_message
        self.on_exit = on_exit
        self.started = False
        self.killed = False
        self.running = False
        self.sent: list[RelayMessage] = []

    @property
    def is_running(self) -> bool:
        return self.running

    def start(self) -> None:
        self.started = True
        self.running = True

    def send(self, message: RelayMessage) -> None:
        if not self.running:
            raise ErrProcessNotStarted
        self.sent.append(message)

    def kill(self) -> None:
        self.killed = True
        self.running = False

    # Test helpers

    def emit(self, message_type: MessageType, data: Any = None) -> None:
        self.on_message(RelayMessage(message_type, data))

    def exit(self, code: int = 0) -> None:
        self.running = False
        self.on_exit(code)

    def sent_types(self) -> list[MessageType]:
        return [m.type for m in self.sent]


class FakeLauncher:
    def __init__(self) -> None:
        self.handles: dict[ProcessRole, FakeHandle] = {}

    def create(
        self,
        role: ProcessRole,
        *,
        on_message: Callable[[RelayMessage], None],
        on_exit: Callable[[int], None],
    ) -> FakeHandle:
        handle = FakeHandle(role, on_message, on_exit)
        self.handles[role] = handle
        return handle


class FakeTray:
    def __init__(self) -> None:
        self.on_show: Callable[[], None] | None = None
        self.on_quit: Callable[[], None] | None = None
        self.installed = False
        self.removed = False

    def install(self, *, on_show: Callable[[], None], on_quit: Callable[[], None]) -> None:
        self.on_show, self.on_quit = on_show, on_quit
        self.installed = True

    def remove(self) -> None:
        self.removed = True


class FakeLock:
    def __init__(self, *, held_elsewhere: bool = False) -> None:
        self.held_elsewhere = held_elsewhere
        self.notified = False
        self.released = False
        self.callbacks: list[Callable[[], None]] = []

    def acquire(self) -> bool:
        return not self.held_elsewhere

    def notify_primary(self) -> None:
        self.notified = True

    def on_activated(self, callback: Callable[[], None]) -> None:
        self.callbacks.append(callback)

    def release(self) -> None:
        self.released = True

    def activate(self) -> None:
        for callback in self.callbacks:
            callback()


class FakeDialog:
    def __init__(self) -> None:
        self.shown: list[tuple[str, str]] = []

    def show_error(self, title: str, message: str) -> None:
        self.shown.append((title, message))


class FakeApp:
    def __init__(self) -> None:
        self.exit_codes: list[int] = []

    def exit(self, code: int) -> None:
        self.exit_codes.append(code)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profile_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "profile"
    directory.mkdir()
    return directory


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def tray() -> FakeTray:
    return FakeTray()


@pytest.fixture
def lock() -> FakeLock:
    return FakeLock()


@pytest.fixture
def dialog() -> FakeDialog:
    return FakeDialog()


@pytest.fixture
def fake_app() -> FakeApp:
    return FakeApp()


@pytest.fixture
def metrics() -> ShellMetrics:
    return ShellMetrics()


@pytest.fixture
def make_supervisor(profile_dir, launcher, scheduler, lock, dialog, fake_app, tray, metrics):
    """Build a ProcessSupervisor wired to the fakes; keyword overrides pass through."""

    def _make(**overrides: Any) -> ProcessSupervisor:
        kwargs: dict[str, Any] = {
            "config_store": ConfigStore(profile_dir),
            "address_book": AddressBookStore(profile_dir),
            "launcher": launcher,
            "scheduler": scheduler,
            "instance_lock": lock,
            "error_dialog": dialog,
            "app": fake_app,
            "tray": tray,
            "metrics": metrics,
        }
        kwargs.update(overrides)
        return ProcessSupervisor(**kwargs)

    return _make
