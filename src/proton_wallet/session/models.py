"""View-state records delivered by the engine process.

Wire shapes follow the engine's JSON payloads: sync status and balance are
arrays, transactions are ``[timestamp, hash, amount]`` arrays (objects with
the same keys are accepted too).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple, Self

HASH_LENGTH = 64


class SyncStatus(NamedTuple):
    """Snapshot of (wallet, local daemon, network) block heights."""

    wallet_height: int = 0
    local_height: int = 0
    network_height: int = 0

    @classmethod
    def from_wire(cls, data: Any) -> Self:
        wallet, local, network = (int(v) for v in data)
        if min(wallet, local, network) < 0:
            raise ValueError(f"negative block height in {data!r}")
        return cls(wallet, local, network)


class Balance(NamedTuple):
    """Balance pair in atomic units: index 0 unlocked, index 1 locked."""

    unlocked: int = 0
    locked: int = 0

    @classmethod
    def from_wire(cls, data: Any) -> Self:
        unlocked, locked = (int(v) for v in data)
        return cls(unlocked, locked)


@dataclass(frozen=True)
class Transaction:
    """One wallet transaction as listed by the engine."""

    timestamp: int  # 0 = unconfirmed
    hash: str
    amount: int  # atomic units, negative for outgoing

    @property
    def is_confirmed(self) -> bool:
        return self.timestamp != 0

    @classmethod
    def from_wire(cls, data: Any) -> Self:
        if isinstance(data, dict):
            timestamp, tx_hash, amount = data["timestamp"], data["hash"], data["amount"]
        else:
            timestamp, tx_hash, amount = data
        tx_hash = str(tx_hash)
        if len(tx_hash) != HASH_LENGTH:
            raise ValueError(f"transaction hash must be {HASH_LENGTH} hex chars: {tx_hash!r}")
        return cls(timestamp=int(timestamp), hash=tx_hash, amount=int(amount))


@dataclass(frozen=True)
class SendTransactionResult:
    """Outcome of a send request reported by the engine."""

    status: str
    hash: str = ""
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCESS"

    @classmethod
    def from_wire(cls, data: Any) -> Self:
        error = data.get("error") or ""
        if isinstance(error, dict):
            error = error.get("customMessage") or error.get("message") or str(error)
        return cls(status=str(data.get("status", "")), hash=data.get("hash") or "", error=str(error))
