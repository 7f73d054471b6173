"""Wallet backends hosted by the engine process.

A backend owns the wallet file and the daemon connection. It reports state
by calling *publish* with engine → UI message types (``syncStatus``,
``balance``, ``transactionList`` ...); the host forwards those to the
supervisor unchanged.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from proton_wallet.relay.messages import MessageType

if TYPE_CHECKING:
    from collections.abc import Callable

    Publish = Callable[[MessageType, Any], None]

logger = logging.getLogger(__name__)


class WalletBackend(ABC):
    """Abstract wallet backend interface."""

    def __init__(self, publish: Publish) -> None:
        self._publish = publish

    def publish(self, message_type: MessageType, data: Any = None) -> None:
        """Send a message towards the UI process."""
        self._publish(message_type, data)

    async def start(self) -> None:  # noqa: B027
        """Called once before the host reports ``loaded``."""

    @abstractmethod
    async def configure(self, config: dict[str, Any]) -> None:
        """Apply (or re-apply) the user's configuration."""

    @abstractmethod
    async def close_wallet(self) -> None:
        """Close the open wallet, if any."""

    @abstractmethod
    async def save_wallet_as(self, path: str) -> bool:
        """Write the open wallet to *path*. Returns ``True`` on success."""

    @abstractmethod
    async def stop(self) -> None:
        """Save and release everything ahead of process exit."""


class NullWalletBackend(WalletBackend):
    """Backend with no wallet attached.

    Accepts configuration and reports that no wallet is active. Saving
    always fails.
    """

    def __init__(self, publish: Publish) -> None:
        super().__init__(publish)
        self.config: dict[str, Any] = {}
        self.stopped = False

    async def configure(self, config: dict[str, Any]) -> None:
        """Store *config* and report no active wallet."""
        self.config = dict(config)
        self.publish(MessageType.WALLET_ACTIVE_STATUS, False)

    async def close_wallet(self) -> None:
        self.publish(MessageType.WALLET_ACTIVE_STATUS, False)

    async def save_wallet_as(self, path: str) -> bool:
        logger.info("No wallet open; cannot save to %s", path)
        return False

    async def stop(self) -> None:
        self.stopped = True
