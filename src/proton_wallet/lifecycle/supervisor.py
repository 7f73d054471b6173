"""ProcessSupervisor: lifecycle owner of the engine and UI processes.

Startup flow:
  1. Take the single-instance lock (or surface the running instance and exit)
  2. Create and start the engine and UI processes
  3. Load ``config.json`` and ``addressBook.json``
  4. Each child's ``loaded`` message and the config load mark the readiness gate
  5. On the gate's ready transition: build the relayer, push ``config`` to both

Shutdown flow:
  quit → ``stopRequest`` to the engine + 10 s forced-exit timer →
  ``backendStopped`` (timer cancelled) or timer expiry → exit 0
"""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING, Any

from proton_wallet.errors.proton_errors import ProcessError
from proton_wallet.lifecycle.ports import ProcessRole
from proton_wallet.lifecycle.readiness import ReadinessGate
from proton_wallet.lifecycle.shutdown import FORCED_EXIT_TIMEOUT, ShutdownRace, StopOutcome
from proton_wallet.lifecycle.state_machine import (
    SupervisorEvent,
    SupervisorState,
    SupervisorStateMachine,
)
from proton_wallet.relay.messages import (
    MessageType,
    RelayMessage,
    Route,
    route_from_engine,
    route_from_ui,
)
from proton_wallet.relay.relayer import MessageRelayer

if TYPE_CHECKING:
    from types import TracebackType

    from proton_wallet.config.store import AddressBookStore, ConfigStore
    from proton_wallet.lifecycle.ports import (
        Application,
        ErrorDialog,
        InstanceLock,
        ProcessHandle,
        ProcessLauncher,
        Scheduler,
        Tray,
    )
    from proton_wallet.metrics.collector import ShellMetrics

logger = logging.getLogger(__name__)

UNCAUGHT_ERROR_TITLE = "Uncaught Error"
UNCAUGHT_ERROR_MESSAGE = (
    "An unexpected error has occurred. Please report this error, "
    "and what you were doing to cause it."
)


class ProcessSupervisor:
    """Owns both child processes, the readiness gate, the relayer and the tray.

    Args:
        config_store: Owner of ``config.json``.
        address_book: Owner of ``addressBook.json``.
        launcher: Creates the child process handles.
        scheduler: Event-loop primitives (deferred calls, timers).
        instance_lock: Single-instance guard.
        error_dialog: Blocking dialog for uncaught errors.
        app: Process exit control.
        tray: Tray icon, or ``None`` where the platform has none.
        supports_close_to_tray: Whether closing the window may hide it instead.
        keeps_running_without_windows: macOS convention; closing the last
            window does not quit.
        metrics: Optional Prometheus metrics.
    """

    def __init__(
        self,
        *,
        config_store: ConfigStore,
        address_book: AddressBookStore,
        launcher: ProcessLauncher,
        scheduler: Scheduler,
        instance_lock: InstanceLock,
        error_dialog: ErrorDialog,
        app: Application,
        tray: Tray | None = None,
        supports_close_to_tray: bool = True,
        keeps_running_without_windows: bool = False,
        metrics: ShellMetrics | None = None,
        shutdown_timeout: float = FORCED_EXIT_TIMEOUT,
    ) -> None:
        self._config_store = config_store
        self._address_book = address_book
        self._launcher = launcher
        self._scheduler = scheduler
        self._instance_lock = instance_lock
        self._error_dialog = error_dialog
        self._app = app
        self._tray = tray
        self._supports_close_to_tray = supports_close_to_tray
        self._keeps_running_without_windows = keeps_running_without_windows
        self._metrics = metrics
        self._shutdown_timeout = shutdown_timeout

        self._machine = SupervisorStateMachine()
        self._gate = ReadinessGate()
        self._gate.on_ready(self._on_ready)
        self._handles: dict[ProcessRole, ProcessHandle] = {}
        self._relayer: MessageRelayer | None = None
        self._race: ShutdownRace | None = None
        self._quit_started_at: float | None = None
        self._close_to_tray = False
        self._force_quit = False
        self._previous_excepthook: Any = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SupervisorState:
        return self._machine.state

    @property
    def gate(self) -> ReadinessGate:
        return self._gate

    @property
    def relayer(self) -> MessageRelayer | None:
        return self._relayer

    @property
    def close_to_tray(self) -> bool:
        return self._close_to_tray

    @property
    def force_quit(self) -> bool:
        return self._force_quit

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def run(self) -> bool:
        """Start everything. Returns ``False`` if another instance is running."""
        if not self._instance_lock.acquire():
            logger.debug("There's an instance of the application already locked, terminating...")
            self._instance_lock.notify_primary()
            self._app.exit(0)
            return False
        self._instance_lock.on_activated(self.show_and_focus_main_window)
        self.install_exception_hook()

        for role in ProcessRole:
            self._handles[role] = self._launcher.create(
                role,
                on_message=lambda message, role=role: self._on_child_message(role, message),
                on_exit=lambda code, role=role: self._on_child_exit(role, code),
            )
        for handle in self._handles.values():
            handle.start()
        self._transition(SupervisorEvent.PROCESSES_CREATED)

        config = self._config_store.load()
        self._address_book.load()
        self._close_to_tray = bool(config.get("closeToTray", False))
        self._gate.mark_config_ready()

        if self._tray is not None:
            self._tray.install(on_show=self.show_and_focus_main_window, on_quit=self.quit)
        return True

    def _on_ready(self) -> None:
        if self.state is not SupervisorState.WAITING_READY:
            logger.info("Readiness completed while %s; not starting the relay", self.state)
            return
        self._transition(SupervisorEvent.READY)
        self._relayer = MessageRelayer(
            self._handles[ProcessRole.ENGINE],
            self._handles[ProcessRole.UI],
            defer=self._scheduler.call_soon,
            on_supervisor_message=self._on_supervisor_message,
            metrics=self._metrics,
        )
        config = self._config_store.config
        logger.info("Both processes ready, sending config")
        self._relayer.send_to_engine(MessageType.CONFIG, {"config": config})
        self._relayer.send_to_ui(
            MessageType.CONFIG,
            {"config": config, "configPath": str(self._config_store.directory)},
        )

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    def _on_child_message(self, role: ProcessRole, message: RelayMessage) -> None:
        if message.type is MessageType.LOADED:
            if role is ProcessRole.ENGINE:
                self._gate.mark_backend_ready()
            else:
                self._gate.mark_frontend_ready()
            return

        if self._relayer is not None:
            if role is ProcessRole.ENGINE:
                self._relayer.forward_from_engine(message)
            else:
                self._relayer.forward_from_ui(message)
            return

        # Not ready yet: supervisor-bound messages are handled, the rest dropped.
        router = route_from_engine if role is ProcessRole.ENGINE else route_from_ui
        if router(message.type) is Route.SUPERVISOR:
            self._on_supervisor_message(message)
        else:
            logger.debug("Dropping %s from %s before ready", message.type, role)

    def _on_supervisor_message(self, message: RelayMessage) -> None:
        handler = {
            MessageType.BACKEND_STOPPED: self._on_backend_stopped,
            MessageType.FRONT_READY: self._on_front_ready,
            MessageType.CLOSE_TO_TRAY_TOGGLE: self._on_close_to_tray_toggle,
            MessageType.CONFIG_UPDATE: self._on_config_update,
            MessageType.WINDOW_CLOSE_REQUESTED: self._on_window_close_requested,
            MessageType.WINDOW_CLOSED: self._on_window_closed,
        }.get(message.type)
        if handler is None:
            logger.debug("Ignoring supervisor message %s", message.type)
            return
        handler(message.data)

    def _on_backend_stopped(self, _data: Any) -> None:
        if self._race is None:
            logger.info("Engine stopped without a quit request")
            self._begin_stopping(SupervisorEvent.QUIT_REQUESTED, send_stop=False)
        if self._race is not None:
            self._race.acknowledge()

    def _on_front_ready(self, _data: Any) -> None:
        self.show_and_focus_main_window()

    def _on_close_to_tray_toggle(self, data: Any) -> None:
        self.set_close_to_tray(bool(data))

    def _on_config_update(self, data: Any) -> None:
        if not isinstance(data, dict) or "key" not in data:
            logger.debug("Ignoring malformed config update %r", data)
            return
        key, value = data["key"], data.get("value")
        self._config_store.set(key, value)
        if key == "closeToTray":
            self._close_to_tray = bool(value)
        if self._relayer is not None:
            self._relayer.send_to_engine(MessageType.CONFIG, {"config": self._config_store.config})

    def _on_window_close_requested(self, _data: Any) -> None:
        self.handle_window_close()

    def _on_window_closed(self, _data: Any) -> None:
        self.handle_all_windows_closed()

    def _on_child_exit(self, role: ProcessRole, code: int) -> None:
        if self.state is SupervisorState.TERMINATED:
            return
        logger.warning("%s process exited with code %s", role, code)
        if role is ProcessRole.ENGINE:
            self._on_backend_stopped(None)
        else:
            # Without the UI process the window cannot come back.
            self.quit()

    # ------------------------------------------------------------------
    # Window behaviour
    # ------------------------------------------------------------------

    def set_close_to_tray(self, enabled: bool) -> None:
        """Update the live flag and persist it."""
        logger.debug("Close to tray set to %s", enabled)
        self._close_to_tray = enabled
        self._config_store.set("closeToTray", enabled)

    def show_and_focus_main_window(self) -> None:
        self._send_to_ui(MessageType.SHOW_WINDOW)
        self._send_to_ui(MessageType.FOCUS_WINDOW)

    def handle_window_close(self) -> bool:
        """Decide what closing the primary window does. Returns ``True`` if it was hidden."""
        if self._supports_close_to_tray and not self._force_quit and self._close_to_tray:
            self._send_to_ui(MessageType.HIDE_WINDOW)
            return True
        self._send_to_ui(MessageType.CLOSE_WINDOW)
        return False

    def handle_all_windows_closed(self) -> None:
        if self._keeps_running_without_windows:
            return
        if self._machine.can(SupervisorEvent.ALL_WINDOWS_CLOSED):
            self._begin_stopping(SupervisorEvent.ALL_WINDOWS_CLOSED)
        elif self.state is SupervisorState.WAITING_READY:
            self._begin_stopping(SupervisorEvent.QUIT_REQUESTED)

    def _send_to_ui(self, message_type: MessageType, data: Any = None) -> None:
        if self._relayer is not None:
            self._relayer.send_to_ui(message_type, data)
            return
        self._send_direct(ProcessRole.UI, RelayMessage(message_type, data))

    def _send_direct(self, role: ProcessRole, message: RelayMessage) -> None:
        handle = self._handles.get(role)
        if handle is None or not handle.is_running:
            logger.debug("Dropping %s: %s process not running", message.type, role)
            return
        try:
            handle.send(message)
        except ProcessError:
            logger.debug("Dropping %s: write to %s failed", message.type, role)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def before_quit(self) -> None:
        self._force_quit = True

    def quit(self) -> None:
        """Tray "Quit": ask the engine to stop and arm the forced-exit timer."""
        if self.state in (SupervisorState.STOPPING, SupervisorState.TERMINATED):
            return
        if self.state is SupervisorState.STARTING:
            self._app.exit(0)
            return
        self._begin_stopping(SupervisorEvent.QUIT_REQUESTED)

    def _begin_stopping(self, event: SupervisorEvent, *, send_stop: bool = True) -> None:
        if self._race is not None:
            return
        self.before_quit()
        self._transition(event)
        self._quit_started_at = time.monotonic()
        self._race = ShutdownRace(
            self._scheduler,
            on_resolved=self._on_stop_resolved,
            timeout=self._shutdown_timeout,
        )
        if send_stop:
            if self._relayer is not None:
                self._relayer.send_to_engine(MessageType.STOP_REQUEST)
            else:
                self._send_direct(ProcessRole.ENGINE, RelayMessage(MessageType.STOP_REQUEST))
            self._race.arm()

    def _on_stop_resolved(self, outcome: StopOutcome) -> None:
        if outcome is StopOutcome.ACKNOWLEDGED:
            self._transition(SupervisorEvent.STOP_ACKNOWLEDGED)
            doomed = [ProcessRole.UI]
        else:
            self._transition(SupervisorEvent.STOP_TIMED_OUT)
            if self._metrics:
                self._metrics.forced_exit()
            doomed = [ProcessRole.ENGINE, ProcessRole.UI]

        if self._metrics and self._quit_started_at is not None:
            self._metrics.observe_shutdown(time.monotonic() - self._quit_started_at)
        if self._relayer is not None:
            self._relayer.close()
        for role in doomed:
            handle = self._handles.get(role)
            if handle is not None and handle.is_running:
                handle.kill()
        if self._tray is not None:
            self._tray.remove()
        self._instance_lock.release()
        self.uninstall_exception_hook()
        self._app.exit(0)

    # ------------------------------------------------------------------
    # Uncaught exceptions
    # ------------------------------------------------------------------

    def install_exception_hook(self) -> None:
        if self._previous_excepthook is None:
            self._previous_excepthook = sys.excepthook
            sys.excepthook = self.handle_uncaught_exception

    def uninstall_exception_hook(self) -> None:
        if self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
            self._previous_excepthook = None

    def handle_uncaught_exception(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_tb: TracebackType | None,
    ) -> None:
        """Log, show a blocking generic dialog and exit with status 1."""
        logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))
        self._error_dialog.show_error(UNCAUGHT_ERROR_TITLE, UNCAUGHT_ERROR_MESSAGE)
        self._app.exit(1)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _transition(self, event: SupervisorEvent) -> None:
        state = self._machine.transition(event)
        if self._metrics:
            self._metrics.set_state(state.name, [s.name for s in SupervisorState])
