"""SessionStateCache: latest view state known to the UI process.

Only the inbound relay dispatcher writes here; the 100 ms poll loop reads.
Every setter replaces its field wholesale and emits a change event.
Accessors never raise and return zeroed values before the first update.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from proton_wallet.session.events import EventBus, SessionEvent
from proton_wallet.session.models import Balance, SyncStatus, Transaction
from proton_wallet.session.sync import compute_sync_percentage

if TYPE_CHECKING:
    from collections.abc import Iterable

MAX_LOG_LINES = 1000


class SessionStateCache:
    """Mutable holder of sync status, balance, transactions, fee and address."""

    def __init__(self, events: EventBus | None = None, *, max_log_lines: int = MAX_LOG_LINES) -> None:
        self.events = events or EventBus()
        self._sync_status = SyncStatus()
        self._balance = Balance()
        self._transactions: tuple[Transaction, ...] = ()
        self._node_fee = 0
        self._primary_address = ""
        self._log_lines: deque[str] = deque(maxlen=max_log_lines)

    # ------------------------------------------------------------------
    # Mutations (relay-driven)
    # ------------------------------------------------------------------

    def set_sync_status(self, status: SyncStatus) -> None:
        self._sync_status = status
        self.events.emit(SessionEvent.SYNC_STATUS)

    def set_balance(self, balance: Balance) -> None:
        self._balance = balance
        self.events.emit(SessionEvent.BALANCE)

    def set_transactions(self, transactions: Iterable[Transaction]) -> None:
        self._transactions = tuple(transactions)
        self.events.emit(SessionEvent.TRANSACTIONS)

    def set_node_fee(self, fee: int) -> None:
        self._node_fee = fee
        self.events.emit(SessionEvent.NODE_FEE)

    def set_primary_address(self, address: str) -> None:
        self._primary_address = address
        self.events.emit(SessionEvent.PRIMARY_ADDRESS)

    def append_log_line(self, line: str) -> None:
        self._log_lines.append(line)
        self.events.emit(SessionEvent.LOG_LINE, line)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_sync_status(self) -> SyncStatus:
        return self._sync_status

    def get_wallet_block_height(self) -> int:
        return self._sync_status[0]

    def get_local_block_height(self) -> int:
        return self._sync_status[1]

    def get_network_block_height(self) -> int:
        return self._sync_status[2]

    def get_sync_percentage(self) -> float:
        return compute_sync_percentage(*self._sync_status)

    def get_balance(self) -> Balance:
        return self._balance

    def get_unlocked_balance(self) -> int:
        return self._balance[0]

    def get_locked_balance(self) -> int:
        return self._balance[1]

    def get_transactions(self) -> list[Transaction]:
        return list(self._transactions)

    def get_node_fee(self) -> int:
        return self._node_fee

    def get_primary_address(self) -> str:
        return self._primary_address

    def get_log_lines(self) -> list[str]:
        return list(self._log_lines)
