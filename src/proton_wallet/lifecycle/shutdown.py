"""Graceful-stop acknowledgement racing a forced-exit timer.

Whichever finishes first resolves the race; the other outcome is discarded.
There are no retries.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.lifecycle.ports import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

FORCED_EXIT_TIMEOUT = 10.0  # seconds


class StopOutcome(enum.Enum):
    ACKNOWLEDGED = enum.auto()
    TIMED_OUT = enum.auto()


class ShutdownRace:
    """Cancellable timer plus a single-resolution completion signal.

    Usage::

        race = ShutdownRace(scheduler, on_resolved=finish)
        race.arm()            # after sending stopRequest
        race.acknowledge()    # on backendStopped; cancels the timer
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        on_resolved: Callable[[StopOutcome], None],
        timeout: float = FORCED_EXIT_TIMEOUT,
    ) -> None:
        self._scheduler = scheduler
        self._on_resolved = on_resolved
        self._timeout = timeout
        self._timer: TimerHandle | None = None
        self._outcome: StopOutcome | None = None

    @property
    def armed(self) -> bool:
        return self._timer is not None

    @property
    def outcome(self) -> StopOutcome | None:
        return self._outcome

    @property
    def resolved(self) -> bool:
        return self._outcome is not None

    def arm(self) -> None:
        """Start the forced-exit timer. Re-arming is a no-op."""
        if self._timer is not None or self.resolved:
            return
        self._timer = self._scheduler.call_later(self._timeout, self._expire)
        logger.debug("Forced exit armed for %.1fs", self._timeout)

    def acknowledge(self) -> bool:
        """Resolve as acknowledged. Returns ``False`` if the race was already decided."""
        return self._resolve(StopOutcome.ACKNOWLEDGED)

    def _expire(self) -> None:
        if self._resolve(StopOutcome.TIMED_OUT):
            logger.warning("Engine did not acknowledge stop within %.1fs; forcing exit", self._timeout)

    def _resolve(self, outcome: StopOutcome) -> bool:
        if self._outcome is not None:
            return False
        self._outcome = outcome
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._on_resolved(outcome)
        return True
