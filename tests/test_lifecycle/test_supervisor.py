"""Scenario tests for ProcessSupervisor against in-memory port fakes."""

from __future__ import annotations

import json
import sys

import pytest

from proton_wallet.config.defaults import DEFAULT_CONFIG
from proton_wallet.lifecycle.ports import ProcessRole
from proton_wallet.lifecycle.state_machine import SupervisorState
from proton_wallet.lifecycle.supervisor import UNCAUGHT_ERROR_TITLE
from proton_wallet.relay.messages import MessageType, RelayMessage
from proton_wallet.ui.host import UIHost
from proton_wallet.ui.render import LogRenderer


@pytest.fixture(autouse=True)
def _restore_excepthook(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)


@pytest.fixture
def supervisor(make_supervisor):
    return make_supervisor()


@pytest.fixture
def engine(launcher):
    return lambda: launcher.handles[ProcessRole.ENGINE]


@pytest.fixture
def ui(launcher):
    return lambda: launcher.handles[ProcessRole.UI]


@pytest.fixture
def running(supervisor, launcher, scheduler):
    """A supervisor past the readiness gate with the initial sends flushed."""
    supervisor.run()
    launcher.handles[ProcessRole.ENGINE].emit(MessageType.LOADED)
    launcher.handles[ProcessRole.UI].emit(MessageType.LOADED)
    scheduler.run_soon()
    for handle in launcher.handles.values():
        handle.sent.clear()
    return supervisor


def _config_file(profile_dir) -> dict:
    return json.loads((profile_dir / "config.json").read_text())


class _UIPipe:
    """UIHost channel whose output arrives at the supervisor as UI process output."""

    def __init__(self, handle) -> None:
        self._handle = handle

    def start(self) -> None:
        pass

    async def receive(self) -> RelayMessage | None:
        return None

    def send(self, message_type: MessageType, data=None) -> bool:
        self._handle.emit(message_type, data)
        return True


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class TestStartup:
    def test_second_instance_exits(self, supervisor, lock, launcher, fake_app) -> None:
        lock.held_elsewhere = True
        assert supervisor.run() is False
        assert lock.notified
        assert fake_app.exit_codes == [0]
        assert launcher.handles == {}

    def test_run_starts_both_processes(self, supervisor, launcher, tray, profile_dir) -> None:
        assert supervisor.run() is True
        assert set(launcher.handles) == {ProcessRole.ENGINE, ProcessRole.UI}
        assert all(handle.started for handle in launcher.handles.values())
        assert supervisor.state is SupervisorState.WAITING_READY
        assert supervisor.gate.config_ready
        assert _config_file(profile_dir) == DEFAULT_CONFIG
        assert (profile_dir / "addressBook.json").exists()
        assert tray.installed

    def test_exception_hook_installed(self, supervisor) -> None:
        supervisor.run()
        assert sys.excepthook == supervisor.handle_uncaught_exception

    def test_close_to_tray_loaded_from_config(self, supervisor, profile_dir) -> None:
        (profile_dir / "config.json").write_text('{"closeToTray": true}')
        supervisor.run()
        assert supervisor.close_to_tray is True

    @pytest.mark.parametrize("first", [ProcessRole.ENGINE, ProcessRole.UI])
    def test_ready_sends_config_to_both(
        self, supervisor, launcher, scheduler, profile_dir, first
    ) -> None:
        supervisor.run()
        second = ProcessRole.UI if first is ProcessRole.ENGINE else ProcessRole.ENGINE
        launcher.handles[first].emit(MessageType.LOADED)
        assert supervisor.relayer is None
        launcher.handles[second].emit(MessageType.LOADED)
        assert supervisor.state is SupervisorState.RUNNING
        assert supervisor.relayer is not None

        scheduler.run_soon()
        engine = launcher.handles[ProcessRole.ENGINE]
        ui = launcher.handles[ProcessRole.UI]
        assert engine.sent == [RelayMessage(MessageType.CONFIG, {"config": DEFAULT_CONFIG})]
        assert ui.sent == [
            RelayMessage(
                MessageType.CONFIG,
                {"config": DEFAULT_CONFIG, "configPath": str(profile_dir)},
            )
        ]

    def test_duplicate_loaded_sends_config_once(self, supervisor, launcher, scheduler) -> None:
        supervisor.run()
        for _ in range(3):
            launcher.handles[ProcessRole.ENGINE].emit(MessageType.LOADED)
            launcher.handles[ProcessRole.UI].emit(MessageType.LOADED)
        scheduler.run_soon()
        assert launcher.handles[ProcessRole.ENGINE].sent_types() == [MessageType.CONFIG]

    def test_engine_state_before_ready_dropped(self, supervisor, launcher, scheduler) -> None:
        supervisor.run()
        launcher.handles[ProcessRole.ENGINE].emit(MessageType.BALANCE, [1, 2])
        scheduler.run_soon()
        assert launcher.handles[ProcessRole.UI].sent == []

    def test_state_metric(self, running, metrics) -> None:
        value = metrics.registry.get_sample_value("proton_supervisor_state", {"state": "RUNNING"})
        assert value == 1.0


# ---------------------------------------------------------------------------
# Relay and control messages
# ---------------------------------------------------------------------------


class TestMessages:
    def test_engine_state_relayed_to_ui(self, running, engine, ui, scheduler) -> None:
        engine().emit(MessageType.SYNC_STATUS, [1000, 1000, 1010])
        engine().emit(MessageType.BALANCE, [150, 25])
        scheduler.run_soon()
        assert ui().sent == [
            RelayMessage(MessageType.SYNC_STATUS, [1000, 1000, 1010]),
            RelayMessage(MessageType.BALANCE, [150, 25]),
        ]

    def test_ui_request_relayed_to_engine(self, running, engine, ui, scheduler) -> None:
        ui().emit(MessageType.SAVE_WALLET_AS, {"notify": True, "savePath": "/w"})
        scheduler.run_soon()
        assert engine().sent == [
            RelayMessage(MessageType.SAVE_WALLET_AS, {"notify": True, "savePath": "/w"})
        ]

    def test_front_ready_shows_and_focuses(self, running, ui, scheduler) -> None:
        ui().emit(MessageType.FRONT_READY)
        scheduler.run_soon()
        assert ui().sent_types() == [MessageType.SHOW_WINDOW, MessageType.FOCUS_WINDOW]

    def test_close_to_tray_toggle_persists(self, running, ui, profile_dir) -> None:
        ui().emit(MessageType.CLOSE_TO_TRAY_TOGGLE, True)
        assert running.close_to_tray is True
        assert _config_file(profile_dir)["closeToTray"] is True

    def test_config_update_persists_and_reaches_engine(
        self, running, engine, ui, scheduler, profile_dir
    ) -> None:
        ui().emit(MessageType.CONFIG_UPDATE, {"key": "selectedFiat", "value": "eur"})
        scheduler.run_soon()
        assert _config_file(profile_dir)["selectedFiat"] == "eur"
        [message] = engine().sent
        assert message.type is MessageType.CONFIG
        assert message.data["config"]["selectedFiat"] == "eur"

    def test_malformed_config_update_ignored(self, running, engine, ui, scheduler, profile_dir) -> None:
        ui().emit(MessageType.CONFIG_UPDATE, "selectedFiat=eur")
        scheduler.run_soon()
        assert engine().sent == []
        assert _config_file(profile_dir)["selectedFiat"] == "usd"

    def test_second_instance_surfaces_window(self, running, lock, ui, scheduler) -> None:
        lock.activate()
        scheduler.run_soon()
        assert ui().sent_types() == [MessageType.SHOW_WINDOW, MessageType.FOCUS_WINDOW]

    def test_tray_show(self, running, tray, ui, scheduler) -> None:
        tray.on_show()
        scheduler.run_soon()
        assert ui().sent_types() == [MessageType.SHOW_WINDOW, MessageType.FOCUS_WINDOW]


# ---------------------------------------------------------------------------
# Window close behaviour
# ---------------------------------------------------------------------------


class TestWindowClose:
    def test_hidden_when_close_to_tray(self, running, ui, scheduler) -> None:
        running.set_close_to_tray(True)
        ui().emit(MessageType.WINDOW_CLOSE_REQUESTED)
        scheduler.run_soon()
        assert ui().sent_types() == [MessageType.HIDE_WINDOW]
        assert running.state is SupervisorState.RUNNING

    def test_closed_when_close_to_tray_off(self, running, ui, scheduler) -> None:
        assert running.handle_window_close() is False
        scheduler.run_soon()
        assert ui().sent_types() == [MessageType.CLOSE_WINDOW]

    def test_closed_after_before_quit(self, running, ui, scheduler) -> None:
        running.set_close_to_tray(True)
        running.before_quit()
        assert running.handle_window_close() is False

    def test_closed_without_platform_support(self, make_supervisor, launcher, scheduler) -> None:
        supervisor = make_supervisor(supports_close_to_tray=False)
        supervisor.run()
        supervisor.set_close_to_tray(True)
        assert supervisor.handle_window_close() is False

    def test_last_window_closed_quits(self, running, engine, ui, scheduler) -> None:
        ui().emit(MessageType.WINDOW_CLOSED)
        scheduler.run_soon()
        assert running.state is SupervisorState.STOPPING
        assert engine().sent_types() == [MessageType.STOP_REQUEST]

    def test_resident_platform_keeps_running(self, make_supervisor, launcher, scheduler) -> None:
        supervisor = make_supervisor(keeps_running_without_windows=True)
        supervisor.run()
        launcher.handles[ProcessRole.ENGINE].emit(MessageType.LOADED)
        launcher.handles[ProcessRole.UI].emit(MessageType.LOADED)
        launcher.handles[ProcessRole.UI].emit(MessageType.WINDOW_CLOSED)
        assert supervisor.state is SupervisorState.RUNNING

    def test_resident_platform_reopens_closed_window(
        self, make_supervisor, launcher, scheduler, lock
    ) -> None:
        supervisor = make_supervisor(keeps_running_without_windows=True, tray=None)
        supervisor.run()
        engine, ui = launcher.handles[ProcessRole.ENGINE], launcher.handles[ProcessRole.UI]
        renderer = LogRenderer()
        host = UIHost(_UIPipe(ui), renderer)

        def deliver() -> None:
            scheduler.run_soon()
            while ui.sent:
                pending, ui.sent = ui.sent, []
                for message in pending:
                    host.handle(message)
                scheduler.run_soon()

        engine.emit(MessageType.LOADED)
        ui.emit(MessageType.LOADED)
        deliver()
        assert renderer.visible

        supervisor.handle_window_close()
        deliver()
        assert host.window_closed
        assert renderer.closed
        assert supervisor.state is SupervisorState.RUNNING
        assert ui.is_running
        assert MessageType.STOP_REQUEST not in engine.sent_types()

        lock.activate()
        deliver()
        assert not host.window_closed
        assert renderer.visible
        assert not renderer.closed


# ---------------------------------------------------------------------------
# Shutdown
# ---------------------------------------------------------------------------


class TestShutdown:
    def test_quit_sends_stop_and_arms_timer(self, running, engine, tray, scheduler) -> None:
        tray.on_quit()
        scheduler.run_soon()
        assert running.state is SupervisorState.STOPPING
        assert running.force_quit
        assert engine().sent_types() == [MessageType.STOP_REQUEST]
        [timer] = scheduler.active_timers
        assert timer.delay == 10.0

    def test_acknowledged_stop(self, running, engine, ui, tray, lock, fake_app, scheduler) -> None:
        running.quit()
        scheduler.run_soon()
        engine().emit(MessageType.BACKEND_STOPPED)
        assert running.state is SupervisorState.TERMINATED
        assert scheduler.active_timers == []
        assert ui().killed
        assert not engine().killed
        assert tray.removed
        assert lock.released
        assert fake_app.exit_codes == [0]

    def test_forced_exit(self, running, engine, ui, fake_app, scheduler, metrics) -> None:
        running.quit()
        scheduler.run_soon()
        scheduler.fire_timers()
        assert running.state is SupervisorState.TERMINATED
        assert engine().killed
        assert ui().killed
        assert fake_app.exit_codes == [0]
        assert metrics.registry.get_sample_value("proton_forced_exits_total") == 1.0

    def test_late_ack_ignored(self, running, engine, fake_app, scheduler) -> None:
        running.quit()
        scheduler.fire_timers()
        engine().emit(MessageType.BACKEND_STOPPED)
        assert fake_app.exit_codes == [0]

    def test_quit_twice(self, running, engine, scheduler) -> None:
        running.quit()
        running.quit()
        scheduler.run_soon()
        assert engine().sent_types() == [MessageType.STOP_REQUEST]
        assert len(scheduler.timers) == 1

    def test_quit_while_waiting_for_ready(self, supervisor, launcher, fake_app) -> None:
        supervisor.run()
        supervisor.quit()
        engine = launcher.handles[ProcessRole.ENGINE]
        assert supervisor.state is SupervisorState.STOPPING
        assert engine.sent_types() == [MessageType.STOP_REQUEST]
        engine.emit(MessageType.BACKEND_STOPPED)
        assert supervisor.state is SupervisorState.TERMINATED
        assert fake_app.exit_codes == [0]

    def test_loaded_after_quit_does_not_start_relay(self, supervisor, launcher, scheduler) -> None:
        supervisor.run()
        supervisor.quit()
        launcher.handles[ProcessRole.ENGINE].emit(MessageType.LOADED)
        launcher.handles[ProcessRole.UI].emit(MessageType.LOADED)
        scheduler.run_soon()
        assert supervisor.gate.is_ready
        assert supervisor.relayer is None
        assert supervisor.state is SupervisorState.STOPPING
        assert launcher.handles[ProcessRole.ENGINE].sent_types() == [MessageType.STOP_REQUEST]
        assert launcher.handles[ProcessRole.UI].sent == []

    def test_engine_exit_counts_as_stop(self, running, engine, ui, fake_app) -> None:
        engine().exit(1)
        assert running.state is SupervisorState.TERMINATED
        assert ui().killed
        assert fake_app.exit_codes == [0]

    def test_ui_exit_starts_quit(self, running, engine, ui, scheduler) -> None:
        ui().exit(0)
        scheduler.run_soon()
        assert running.state is SupervisorState.STOPPING
        assert engine().sent_types() == [MessageType.STOP_REQUEST]

    def test_exits_after_termination_ignored(self, running, engine, ui, fake_app) -> None:
        running.quit()
        engine().emit(MessageType.BACKEND_STOPPED)
        ui().exit(9)
        engine().exit(0)
        assert fake_app.exit_codes == [0]

    def test_shutdown_restores_excepthook(self, running, engine) -> None:
        running.quit()
        engine().emit(MessageType.BACKEND_STOPPED)
        assert sys.excepthook != running.handle_uncaught_exception

    def test_shutdown_duration_observed(self, running, engine, metrics) -> None:
        running.quit()
        engine().emit(MessageType.BACKEND_STOPPED)
        assert metrics.registry.get_sample_value("proton_shutdown_seconds_count") == 1.0


# ---------------------------------------------------------------------------
# Uncaught exceptions
# ---------------------------------------------------------------------------


class TestUncaughtException:
    def test_dialog_then_exit_1(self, running, dialog, fake_app) -> None:
        error = ValueError("boom")
        running.handle_uncaught_exception(ValueError, error, None)
        [(title, message)] = dialog.shown
        assert title == UNCAUGHT_ERROR_TITLE == "Uncaught Error"
        assert "boom" not in message
        assert fake_app.exit_codes == [1]
