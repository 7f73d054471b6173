"""Lifecycle: readiness gating, supervision and shutdown of the process pair.

Provides:
- ``ReadinessGate``: one-shot AND barrier over the three startup signals
- ``ShutdownRace``: stop acknowledgement vs. forced-exit timer
- ``ProcessSupervisor``: owner of both child processes and the relayer
"""

from __future__ import annotations

from proton_wallet.lifecycle.readiness import ReadinessGate
from proton_wallet.lifecycle.shutdown import FORCED_EXIT_TIMEOUT, ShutdownRace, StopOutcome
from proton_wallet.lifecycle.state_machine import SupervisorEvent, SupervisorState
from proton_wallet.lifecycle.supervisor import ProcessSupervisor

__all__ = [
    "FORCED_EXIT_TIMEOUT",
    "ProcessSupervisor",
    "ReadinessGate",
    "ShutdownRace",
    "StopOutcome",
    "SupervisorEvent",
    "SupervisorState",
]
