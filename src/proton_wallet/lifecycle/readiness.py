"""ReadinessGate: one-shot AND barrier over the three startup signals."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ReadinessGate:
    """Fires its ready callbacks exactly once, after the UI, engine and config are all ready.

    Each ``mark_*`` call is idempotent and returns ``True`` only when that
    call completed the set. Callbacks run synchronously inside that call.
    """

    def __init__(self) -> None:
        self._frontend_ready = False
        self._backend_ready = False
        self._config_ready = False
        self._fired = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def frontend_ready(self) -> bool:
        return self._frontend_ready

    @property
    def backend_ready(self) -> bool:
        return self._backend_ready

    @property
    def config_ready(self) -> bool:
        return self._config_ready

    @property
    def is_ready(self) -> bool:
        return self._frontend_ready and self._backend_ready and self._config_ready

    def on_ready(self, callback: Callable[[], None]) -> None:
        """Register *callback*. It is never called if the gate already fired."""
        if self._fired:
            logger.debug("Readiness gate already fired; callback %r will not run", callback)
            return
        self._callbacks.append(callback)

    def mark_frontend_ready(self) -> bool:
        if self._frontend_ready:
            return False
        self._frontend_ready = True
        logger.debug("Frontend finished loading.")
        return self._check()

    def mark_backend_ready(self) -> bool:
        if self._backend_ready:
            return False
        self._backend_ready = True
        logger.debug("Backend finished loading.")
        return self._check()

    def mark_config_ready(self) -> bool:
        if self._config_ready:
            return False
        self._config_ready = True
        logger.debug("Config loaded.")
        return self._check()

    def _check(self) -> bool:
        if self._fired or not self.is_ready:
            return False
        self._fired = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return True
