"""UI process: session cache, view polling and the renderer seam."""

from __future__ import annotations

from proton_wallet.ui.host import UIHost
from proton_wallet.ui.poller import TransactionRow, ViewPoller, WalletView, build_view
from proton_wallet.ui.render import LogRenderer, Renderer

__all__ = [
    "LogRenderer",
    "Renderer",
    "TransactionRow",
    "UIHost",
    "ViewPoller",
    "WalletView",
    "build_view",
]
