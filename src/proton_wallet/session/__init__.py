"""Session: UI-side view state and the pure helpers that render it.

Provides:
- ``SessionStateCache``: latest sync status, balance, transactions, fee, address
- ``SessionDispatcher``: applies engine messages to the cache
- ``compute_sync_percentage``: sync progress estimate
- ``atomic_to_human`` / ``human_to_atomic`` / ``convert_timestamp``: formatting
"""

from __future__ import annotations

from proton_wallet.session.cache import SessionStateCache
from proton_wallet.session.dispatch import SessionDispatcher
from proton_wallet.session.events import EventBus, SessionEvent
from proton_wallet.session.formatting import atomic_to_human, convert_timestamp, human_to_atomic
from proton_wallet.session.models import Balance, SyncStatus, Transaction
from proton_wallet.session.sync import compute_sync_percentage

__all__ = [
    "Balance",
    "EventBus",
    "SessionDispatcher",
    "SessionEvent",
    "SessionStateCache",
    "SyncStatus",
    "Transaction",
    "atomic_to_human",
    "compute_sync_percentage",
    "convert_timestamp",
    "human_to_atomic",
]
