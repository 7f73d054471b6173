"""Lifecycle state machine for the supervised engine/UI process pair."""

from __future__ import annotations

import logging
from enum import Enum, auto

logger = logging.getLogger(__name__)


class SupervisorState(Enum):
    STARTING = auto()
    WAITING_READY = auto()
    RUNNING = auto()
    STOPPING = auto()
    TERMINATED = auto()


class SupervisorEvent(Enum):
    PROCESSES_CREATED = auto()
    READY = auto()
    QUIT_REQUESTED = auto()
    ALL_WINDOWS_CLOSED = auto()
    STOP_ACKNOWLEDGED = auto()
    STOP_TIMED_OUT = auto()


_TRANSITIONS = {
    SupervisorState.STARTING: {
        SupervisorEvent.PROCESSES_CREATED: SupervisorState.WAITING_READY,
    },
    SupervisorState.WAITING_READY: {
        SupervisorEvent.READY: SupervisorState.RUNNING,
        SupervisorEvent.QUIT_REQUESTED: SupervisorState.STOPPING,
    },
    SupervisorState.RUNNING: {
        SupervisorEvent.QUIT_REQUESTED: SupervisorState.STOPPING,
        SupervisorEvent.ALL_WINDOWS_CLOSED: SupervisorState.STOPPING,
    },
    SupervisorState.STOPPING: {
        SupervisorEvent.STOP_ACKNOWLEDGED: SupervisorState.TERMINATED,
        SupervisorEvent.STOP_TIMED_OUT: SupervisorState.TERMINATED,
    },
    SupervisorState.TERMINATED: {},
}


class SupervisorStateMachine:
    def __init__(self) -> None:
        self.state = SupervisorState.STARTING

    def can(self, event: SupervisorEvent) -> bool:
        return event in _TRANSITIONS[self.state]

    def transition(self, event: SupervisorEvent) -> SupervisorState:
        """Apply *event*; invalid events are logged and leave the state unchanged."""
        next_state = _TRANSITIONS[self.state].get(event)
        if next_state is None:
            logger.warning(
                "Invalid supervisor transition: %s --%s-->", self.state.name, event.name
            )
            return self.state
        self.state = next_state
        return self.state
