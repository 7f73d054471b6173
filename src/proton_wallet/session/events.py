"""Synchronous named-event bus for UI-side observers."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class SessionEvent(enum.StrEnum):
    """Named events emitted on the UI side."""

    # Cache changes
    SYNC_STATUS = "gotSyncStatus"
    BALANCE = "gotNewBalance"
    TRANSACTIONS = "gotNewTransactions"
    NODE_FEE = "gotNodeFee"
    PRIMARY_ADDRESS = "gotPrimaryAddress"
    LOG_LINE = "gotLogLine"
    FIAT_PRICE = "gotFiatPrice"

    # Engine replies surfaced to the user
    WALLET_SAVED = "walletSaved"
    WALLET_SAVE_FAILED = "walletSaveFailed"
    TRANSACTION_SENT = "transactionSent"
    TRANSACTION_FAILED = "transactionFailed"
    WALLET_ACTIVE = "walletActiveStatus"
    CONFIG_RECEIVED = "configReceived"


class EventBus:
    """Register callbacks per event name and call them in registration order.

    A failing listener is logged and does not stop the remaining listeners.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(*args)
            except Exception:
                logger.exception("Listener for %s failed", event)
