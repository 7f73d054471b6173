"""Tests for the per-direction relay queues."""

from __future__ import annotations

import pytest

from proton_wallet.errors.definitions import ErrProcessNotStarted
from proton_wallet.metrics.collector import ShellMetrics
from proton_wallet.relay.messages import MessageType, RelayMessage, Route
from proton_wallet.relay.relayer import Direction, MessageRelayer


class _Endpoint:
    def __init__(self, *, running: bool = True, broken: bool = False) -> None:
        self.running = running
        self.broken = broken
        self.received: list[RelayMessage] = []

    @property
    def is_running(self) -> bool:
        return self.running

    def send(self, message: RelayMessage) -> None:
        if self.broken:
            raise ErrProcessNotStarted
        self.received.append(message)


class _Deferred:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, callback) -> None:
        self.calls.append(callback)

    def run(self) -> None:
        while self.calls:
            calls, self.calls = self.calls, []
            for callback in calls:
                callback()


@pytest.fixture
def engine() -> _Endpoint:
    return _Endpoint()


@pytest.fixture
def ui() -> _Endpoint:
    return _Endpoint()


@pytest.fixture
def defer() -> _Deferred:
    return _Deferred()


@pytest.fixture
def supervisor_inbox() -> list[RelayMessage]:
    return []


@pytest.fixture
def relayer(engine, ui, defer, supervisor_inbox, metrics: ShellMetrics) -> MessageRelayer:
    return MessageRelayer(
        engine, ui, defer=defer, on_supervisor_message=supervisor_inbox.append, metrics=metrics
    )


def _count(metrics: ShellMetrics, name: str, direction: Direction) -> float:
    return metrics.registry.get_sample_value(name, {"direction": str(direction)}) or 0.0


class TestSending:
    def test_send_returns_before_delivery(self, relayer, engine, defer) -> None:
        relayer.send_to_engine(MessageType.CONFIG, {"config": {}})
        assert engine.received == []
        assert relayer.pending(Direction.TO_ENGINE) == 1
        defer.run()
        assert engine.received == [RelayMessage(MessageType.CONFIG, {"config": {}})]
        assert relayer.pending(Direction.TO_ENGINE) == 0

    def test_fifo_per_direction(self, relayer, ui, defer) -> None:
        for fee in range(5):
            relayer.send_to_ui(MessageType.NODE_FEE, fee)
        defer.run()
        assert [m.data for m in ui.received] == [0, 1, 2, 3, 4]

    def test_one_flush_per_turn(self, relayer, defer) -> None:
        relayer.send_to_ui(MessageType.NODE_FEE, 1)
        relayer.send_to_ui(MessageType.NODE_FEE, 2)
        relayer.send_to_engine(MessageType.STOP_REQUEST)
        assert len(defer.calls) == 2

    def test_directions_independent(self, relayer, engine, ui, defer) -> None:
        ui.running = False
        relayer.send_to_ui(MessageType.NODE_FEE, 1)
        relayer.send_to_engine(MessageType.STOP_REQUEST)
        defer.run()
        assert ui.received == []
        assert engine.received == [RelayMessage(MessageType.STOP_REQUEST)]

    def test_delivered_metric(self, relayer, defer, metrics) -> None:
        relayer.send_to_engine(MessageType.STOP_REQUEST)
        defer.run()
        assert _count(metrics, "proton_relay_messages_total", Direction.TO_ENGINE) == 1


class TestDropping:
    def test_dead_endpoint_drops(self, relayer, engine, defer, metrics) -> None:
        engine.running = False
        relayer.send_to_engine(MessageType.STOP_REQUEST)
        defer.run()
        assert engine.received == []
        assert _count(metrics, "proton_relay_dropped_total", Direction.TO_ENGINE) == 1

    def test_write_failure_drops_and_continues(self, relayer, ui, defer, metrics) -> None:
        ui.broken = True
        relayer.send_to_ui(MessageType.NODE_FEE, 1)
        defer.run()
        ui.broken = False
        relayer.send_to_ui(MessageType.NODE_FEE, 2)
        defer.run()
        assert [m.data for m in ui.received] == [2]
        assert _count(metrics, "proton_relay_dropped_total", Direction.TO_UI) == 1

    def test_no_retry(self, relayer, engine, defer) -> None:
        engine.running = False
        relayer.send_to_engine(MessageType.STOP_REQUEST)
        defer.run()
        engine.running = True
        defer.run()
        assert engine.received == []

    def test_closed_relayer_drops(self, relayer, ui, defer) -> None:
        relayer.send_to_ui(MessageType.NODE_FEE, 1)
        relayer.close()
        relayer.send_to_ui(MessageType.NODE_FEE, 2)
        defer.run()
        assert ui.received == []


class TestForwarding:
    def test_engine_state_reaches_ui(self, relayer, ui, defer) -> None:
        route = relayer.forward_from_engine(RelayMessage(MessageType.BALANCE, [1, 2]))
        defer.run()
        assert route is Route.UI
        assert ui.received == [RelayMessage(MessageType.BALANCE, [1, 2])]

    def test_ui_request_reaches_engine(self, relayer, engine, defer) -> None:
        payload = {"notify": True, "savePath": "/tmp/w.wallet"}
        assert relayer.forward_from_ui(RelayMessage(MessageType.SAVE_WALLET_AS, payload)) is Route.ENGINE
        defer.run()
        assert engine.received == [RelayMessage(MessageType.SAVE_WALLET_AS, payload)]

    def test_control_goes_to_supervisor(self, relayer, supervisor_inbox, engine, ui, defer) -> None:
        relayer.forward_from_engine(RelayMessage(MessageType.BACKEND_STOPPED))
        relayer.forward_from_ui(RelayMessage(MessageType.FRONT_READY))
        defer.run()
        assert [m.type for m in supervisor_inbox] == [
            MessageType.BACKEND_STOPPED,
            MessageType.FRONT_READY,
        ]
        assert engine.received == ui.received == []

    def test_misrouted_dropped(self, relayer, engine, ui, defer) -> None:
        assert relayer.forward_from_ui(RelayMessage(MessageType.BALANCE, [9, 9])) is Route.DROP
        defer.run()
        assert engine.received == ui.received == []
