"""Wallet-open state tracked by the UI process."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LoginState:
    """Whether the engine reports an open wallet."""

    wallet_active: bool = False

    def set_wallet_active(self, active: bool) -> None:
        self.wallet_active = active

    def reset(self) -> None:
        self.wallet_active = False
