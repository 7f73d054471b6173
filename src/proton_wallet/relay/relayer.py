"""MessageRelayer: typed message forwarder between the engine and UI processes.

Sends are fire-and-forget: ``send_to_engine`` / ``send_to_ui`` append to a
per-direction FIFO and return; the queue is flushed on the next event-loop
turn. Delivery is at-most-once. If the receiving process is gone the message
is dropped and counted, never retried. The two directions are independent and
have no ordering relative to each other.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from typing import TYPE_CHECKING, Any

from proton_wallet.errors.proton_errors import ProcessError
from proton_wallet.relay.messages import (
    MessageType,
    RelayMessage,
    Route,
    route_from_engine,
    route_from_ui,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.lifecycle.ports import Endpoint
    from proton_wallet.metrics.collector import ShellMetrics

logger = logging.getLogger(__name__)


class Direction(enum.StrEnum):
    TO_ENGINE = "to_engine"
    TO_UI = "to_ui"


class MessageRelayer:
    """Bidirectional forwarder owned by the supervisor.

    Usage::

        relayer = MessageRelayer(engine, ui, defer=scheduler.call_soon)
        relayer.send_to_engine(MessageType.CONFIG, config)
        relayer.forward_from_ui(message)   # routes to engine or supervisor
    """

    def __init__(
        self,
        engine: Endpoint,
        ui: Endpoint,
        *,
        defer: Callable[[Callable[[], None]], None],
        on_supervisor_message: Callable[[RelayMessage], None] | None = None,
        metrics: ShellMetrics | None = None,
    ) -> None:
        self._endpoints: dict[Direction, Endpoint] = {
            Direction.TO_ENGINE: engine,
            Direction.TO_UI: ui,
        }
        self._queues: dict[Direction, deque[RelayMessage]] = {d: deque() for d in Direction}
        self._flush_scheduled: dict[Direction, bool] = {d: False for d in Direction}
        self._defer = defer
        self._on_supervisor_message = on_supervisor_message
        self._metrics = metrics
        self._closed = False

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send_to_engine(self, message_type: MessageType, data: Any = None) -> None:
        self._enqueue(Direction.TO_ENGINE, RelayMessage(message_type, data))

    def send_to_ui(self, message_type: MessageType, data: Any = None) -> None:
        self._enqueue(Direction.TO_UI, RelayMessage(message_type, data))

    def pending(self, direction: Direction) -> int:
        """Messages queued but not yet handed to the endpoint."""
        return len(self._queues[direction])

    def close(self) -> None:
        """Stop forwarding; anything still queued is discarded."""
        self._closed = True
        for queue in self._queues.values():
            queue.clear()

    # ------------------------------------------------------------------
    # Inbound routing
    # ------------------------------------------------------------------

    def forward_from_engine(self, message: RelayMessage) -> Route:
        route = route_from_engine(message.type)
        self._dispatch(route, message, source="engine")
        return route

    def forward_from_ui(self, message: RelayMessage) -> Route:
        route = route_from_ui(message.type)
        self._dispatch(route, message, source="ui")
        return route

    def _dispatch(self, route: Route, message: RelayMessage, *, source: str) -> None:
        if route is Route.UI:
            self._enqueue(Direction.TO_UI, message)
        elif route is Route.ENGINE:
            self._enqueue(Direction.TO_ENGINE, message)
        elif route is Route.SUPERVISOR:
            if self._on_supervisor_message is not None:
                self._on_supervisor_message(message)
        else:
            logger.debug("Ignoring %s message from %s", message.type, source)

    # ------------------------------------------------------------------
    # Queue pump
    # ------------------------------------------------------------------

    def _enqueue(self, direction: Direction, message: RelayMessage) -> None:
        if self._closed:
            self._drop(direction, message)
            return
        self._queues[direction].append(message)
        if not self._flush_scheduled[direction]:
            self._flush_scheduled[direction] = True
            self._defer(lambda: self._flush(direction))

    def _flush(self, direction: Direction) -> None:
        self._flush_scheduled[direction] = False
        queue = self._queues[direction]
        endpoint = self._endpoints[direction]
        while queue:
            message = queue.popleft()
            if not endpoint.is_running:
                self._drop(direction, message)
                continue
            try:
                endpoint.send(message)
            except ProcessError:
                self._drop(direction, message)
                continue
            if self._metrics:
                self._metrics.message_relayed(direction)

    def _drop(self, direction: Direction, message: RelayMessage) -> None:
        logger.debug("Dropping %s message (%s): receiver unavailable", message.type, direction)
        if self._metrics:
            self._metrics.message_dropped(direction)
