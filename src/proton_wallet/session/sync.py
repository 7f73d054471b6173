"""Sync progress estimate shown in the status bar."""

from __future__ import annotations

import math

# Wallet height may briefly run ahead of the polled network height.
_REFRESH_LAG_BLOCKS = 10
_NEAR_COMPLETE_CEILING = 99.99


def round_up_to_hundredth(x: float) -> float:
    return math.ceil(x * 100) / 100


def compute_sync_percentage(wallet_height: int, local_height: int, network_height: int) -> float:
    """Return the sync percentage in ``[0, 100]`` rounded up to the hundredth.

    ``local_height`` is part of the status triple but does not affect the
    estimate. The rules are applied in order; the one-block-behind rule is
    checked on the corrected heights and overrides the 99.99 ceiling.
    """
    if (
        wallet_height > network_height
        and network_height != 0
        and network_height + _REFRESH_LAG_BLOCKS > wallet_height
    ):
        network_height = wallet_height

    # A wallet synced in a previous session can report height / 0.
    if network_height == 0 and wallet_height != 0:
        network_height = wallet_height

    fraction = 0 if network_height == 0 else wallet_height / network_height
    percentage = 100 * fraction

    if _NEAR_COMPLETE_CEILING < percentage < 100:
        percentage = _NEAR_COMPLETE_CEILING

    if network_height - wallet_height == 1:
        percentage = 100.0

    # Wallet far ahead of a stale network height.
    percentage = min(percentage, 100.0)

    return round_up_to_hundredth(percentage)
