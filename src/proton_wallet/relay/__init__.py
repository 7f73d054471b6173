"""Relay: typed messages between the engine, UI and supervisor processes.

Provides:
- ``MessageType`` / ``RelayMessage``: the closed tag set and envelope
- ``encode_message`` / ``decode_line`` / ``LineBuffer``: JSON-lines framing
- ``MessageRelayer``: per-direction FIFO forwarder owned by the supervisor
- ``StdioChannel``: the child-process end of the pipe
"""

from __future__ import annotations

from proton_wallet.relay.codec import LineBuffer, decode_line, encode_message
from proton_wallet.relay.messages import MessageType, RelayMessage, Route
from proton_wallet.relay.relayer import Direction, MessageRelayer
from proton_wallet.relay.stdio import StdioChannel

__all__ = [
    "Direction",
    "LineBuffer",
    "MessageRelayer",
    "MessageType",
    "RelayMessage",
    "Route",
    "StdioChannel",
    "decode_line",
    "encode_message",
]
