"""View renderers for the UI process.

A renderer receives :class:`~proton_wallet.ui.poller.WalletView` snapshots
and the window commands relayed by the supervisor. Widgets are out of scope
for this package; :class:`LogRenderer` writes a status line to the log so
the UI process is usable headless.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from proton_wallet.ui.poller import WalletView

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def render(self, view: WalletView) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def focus(self) -> None: ...

    def close(self) -> None: ...


class LogRenderer:
    """Renderer that logs each new view."""

    def __init__(self) -> None:
        self.visible = False
        self.closed = False

    def render(self, view: WalletView) -> None:
        fiat = f" ({view.fiat_value} {view.fiat.upper()})" if view.fiat_value else ""
        logger.info(
            "sync %.2f%% [%d/%d] balance %s + %s locked%s, %d transactions",
            view.sync_percentage,
            view.wallet_height,
            view.network_height,
            view.unlocked,
            view.locked,
            fiat,
            len(view.transactions),
        )

    def show(self) -> None:
        self.visible = True
        self.closed = False
        logger.debug("window shown")

    def hide(self) -> None:
        self.visible = False
        logger.debug("window hidden")

    def focus(self) -> None:
        logger.debug("window focused")

    def close(self) -> None:
        self.visible = False
        self.closed = True
        logger.debug("window closed")
