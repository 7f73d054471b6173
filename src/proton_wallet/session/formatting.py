"""Amount and timestamp formatting for wallet display.

Amounts travel between processes in atomic units. Display divides by a fixed
scale factor of 100.
"""

from __future__ import annotations

from datetime import datetime

ATOMIC_SCALE = 100
UNCONFIRMED_LABEL = "Unconfirmed"


def format_like_currency(x: float | str) -> str:
    """Insert thousands separators into the integer part of *x*."""
    text = str(x)
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    integer, dot, fraction = text.partition(".")
    return f"{sign}{int(integer):,}{dot}{fraction}"


def atomic_to_human(value: int, pretty: bool = False) -> float | str:
    """Convert atomic units to display units.

    With *pretty* the result is a string with exactly two decimals and
    thousands separators; otherwise the raw quotient.
    """
    if pretty:
        return format_like_currency(f"{value / ATOMIC_SCALE:.2f}")
    return value / ATOMIC_SCALE


def human_to_atomic(x: float) -> float:
    return x * ATOMIC_SCALE


def convert_timestamp(epoch_seconds: int) -> str:
    """Render *epoch_seconds* as ``YYYY-MM-DD HH:MM`` in local time."""
    return datetime.fromtimestamp(epoch_seconds).strftime("%Y-%m-%d %H:%M")


def format_transaction_date(timestamp: int) -> str:
    """Date column text for a transaction row (0 means unconfirmed)."""
    if timestamp == 0:
        return UNCONFIRMED_LABEL
    return convert_timestamp(timestamp)
