"""Periodic snapshot of the session cache for the renderer.

The renderer never reads the cache directly. Every tick the poller builds an
immutable :class:`WalletView` and hands it over only when it differs from the
previous one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from proton_wallet.session.formatting import atomic_to_human, format_transaction_date

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.session.cache import SessionStateCache
    from proton_wallet.session.login import LoginState
    from proton_wallet.session.prices import PriceTicker

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1  # seconds


@dataclass(frozen=True)
class TransactionRow:
    date: str
    hash: str
    amount: str
    incoming: bool


@dataclass(frozen=True)
class WalletView:
    """Display-ready wallet state."""

    wallet_active: bool
    sync_percentage: float
    wallet_height: int
    network_height: int
    unlocked: str
    locked: str
    primary_address: str
    node_fee: str
    transactions: tuple[TransactionRow, ...]
    fiat: str = ""
    fiat_value: str | None = None

    @property
    def synced(self) -> bool:
        return self.sync_percentage >= 100.0


def build_view(
    cache: SessionStateCache,
    *,
    login: LoginState | None = None,
    ticker: PriceTicker | None = None,
) -> WalletView:
    """Snapshot *cache* into a :class:`WalletView`."""
    status = cache.get_sync_status()
    rows = tuple(
        TransactionRow(
            date=format_transaction_date(tx.timestamp),
            hash=tx.hash,
            amount=str(atomic_to_human(tx.amount, pretty=True)),
            incoming=tx.amount > 0,
        )
        for tx in cache.get_transactions()
    )
    fiat_value = None
    if ticker is not None and ticker.price > 0:
        total = atomic_to_human(cache.get_unlocked_balance() + cache.get_locked_balance())
        fiat_value = f"{float(total) * ticker.price:,.2f}"
    return WalletView(
        wallet_active=login.wallet_active if login is not None else False,
        sync_percentage=cache.get_sync_percentage(),
        wallet_height=status.wallet_height,
        network_height=status.network_height,
        unlocked=str(atomic_to_human(cache.get_unlocked_balance(), pretty=True)),
        locked=str(atomic_to_human(cache.get_locked_balance(), pretty=True)),
        primary_address=cache.get_primary_address(),
        node_fee=str(atomic_to_human(cache.get_node_fee(), pretty=True)),
        transactions=rows,
        fiat=ticker.fiat if ticker is not None else "",
        fiat_value=fiat_value,
    )


class ViewPoller:
    """Render the cache whenever its snapshot changes.

    ``tick`` is meant to run as a :class:`~proton_wallet.taskmanager.CronJob`
    every :data:`POLL_INTERVAL` seconds.
    """

    def __init__(
        self,
        cache: SessionStateCache,
        render: Callable[[WalletView], None],
        *,
        login: LoginState | None = None,
        ticker: PriceTicker | None = None,
    ) -> None:
        self.cache = cache
        self.login = login
        self._render = render
        self._ticker = ticker
        self._last: WalletView | None = None

    @property
    def last_view(self) -> WalletView | None:
        return self._last

    async def tick(self) -> None:
        view = build_view(self.cache, login=self.login, ticker=self._ticker)
        if view == self._last:
            return
        self._last = view
        self._render(view)
