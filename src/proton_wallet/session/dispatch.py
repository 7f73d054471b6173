"""Apply inbound relay messages to the UI-side session state.

This is the only writer of :class:`SessionStateCache`. Payloads that fail
validation are logged and skipped; they never take the UI process down.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from proton_wallet.relay.messages import MessageType
from proton_wallet.session.events import SessionEvent
from proton_wallet.session.models import Balance, SendTransactionResult, SyncStatus, Transaction

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.relay.messages import RelayMessage
    from proton_wallet.session.cache import SessionStateCache
    from proton_wallet.session.login import LoginState

logger = logging.getLogger(__name__)


def parse_transactions(data: Any) -> list[Transaction]:
    """Decode a ``transactionList`` payload, skipping malformed rows."""
    transactions = []
    for row in data or []:
        try:
            transactions.append(Transaction.from_wire(row))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed transaction %r", row)
    return transactions


class SessionDispatcher:
    """Route engine → UI messages onto the cache, login state and event bus."""

    def __init__(self, cache: SessionStateCache, login: LoginState) -> None:
        self._cache = cache
        self._login = login
        self._events = cache.events
        self._handlers: dict[MessageType, Callable[[Any], None]] = {
            MessageType.CONFIG: self._on_config,
            MessageType.SAVE_WALLET_RESPONSE: self._on_save_wallet_response,
            MessageType.WALLET_ACTIVE_STATUS: self._on_wallet_active_status,
            MessageType.PRIMARY_ADDRESS: self._on_primary_address,
            MessageType.TRANSACTION_LIST: self._on_transaction_list,
            MessageType.SYNC_STATUS: self._on_sync_status,
            MessageType.BALANCE: self._on_balance,
            MessageType.NODE_FEE: self._on_node_fee,
            MessageType.SEND_TRANSACTION_RESPONSE: self._on_send_transaction_response,
            MessageType.BACKEND_LOG_LINE: self._on_backend_log_line,
        }

    def handle(self, message: RelayMessage) -> bool:
        """Apply *message*. Returns ``False`` if it was ignored."""
        handler = self._handlers.get(message.type)
        if handler is None:
            return False
        try:
            handler(message.data)
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Malformed %s payload: %r", message.type, message.data)
            return False
        return True

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_config(self, data: Any) -> None:
        config = data.get("config", data)
        self._events.emit(SessionEvent.CONFIG_RECEIVED, dict(config), data.get("configPath"))

    def _on_save_wallet_response(self, data: Any) -> None:
        if data:
            self._events.emit(SessionEvent.WALLET_SAVED)
        else:
            self._events.emit(SessionEvent.WALLET_SAVE_FAILED)

    def _on_wallet_active_status(self, data: Any) -> None:
        self._login.set_wallet_active(bool(data))
        self._events.emit(SessionEvent.WALLET_ACTIVE, bool(data))

    def _on_primary_address(self, data: Any) -> None:
        self._cache.set_primary_address(str(data))

    def _on_transaction_list(self, data: Any) -> None:
        self._cache.set_transactions(parse_transactions(data))

    def _on_sync_status(self, data: Any) -> None:
        self._cache.set_sync_status(SyncStatus.from_wire(data))

    def _on_balance(self, data: Any) -> None:
        self._cache.set_balance(Balance.from_wire(data))

    def _on_node_fee(self, data: Any) -> None:
        self._cache.set_node_fee(int(data))

    def _on_send_transaction_response(self, data: Any) -> None:
        result = SendTransactionResult.from_wire(data)
        if result.succeeded:
            self._events.emit(SessionEvent.TRANSACTION_SENT, result.hash)
        else:
            logger.info("Transaction failed: %s", result.error)
            self._events.emit(SessionEvent.TRANSACTION_FAILED, result.error)

    def _on_backend_log_line(self, data: Any) -> None:
        self._cache.append_log_line(str(data))
