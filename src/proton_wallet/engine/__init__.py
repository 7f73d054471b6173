"""Engine process: hosts the wallet backend behind the relay.

Provides:
- ``WalletBackend``: abstract wallet backend interface
- ``NullWalletBackend``: backend with no wallet, used until one is configured
- ``EngineHost``: stdin/stdout message loop around a backend
"""

from __future__ import annotations

from proton_wallet.engine.backend import NullWalletBackend, WalletBackend
from proton_wallet.engine.host import EngineHost

__all__ = [
    "EngineHost",
    "NullWalletBackend",
    "WalletBackend",
]
