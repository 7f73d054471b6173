"""JSON-lines framing for messages on a child process's stdin/stdout."""

from __future__ import annotations

import json
import logging

from proton_wallet.errors.definitions import ErrUndecodableMessage
from proton_wallet.errors.proton_errors import RelayError
from proton_wallet.relay.messages import RelayMessage

logger = logging.getLogger(__name__)


def encode_message(message: RelayMessage) -> bytes:
    """Serialize *message* as one UTF-8 line terminated by ``\\n``."""
    return (json.dumps(message.to_dict(), separators=(",", ":")) + "\n").encode("utf-8")


def decode_line(line: bytes | str) -> RelayMessage | None:
    """Parse one line.

    Returns ``None`` for blank lines and for well-formed envelopes carrying an
    unknown ``messageType``.

    Raises:
        RelayError: If the line is not a JSON object.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.strip()
    if not line:
        return None
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ErrUndecodableMessage from exc
    if not isinstance(raw, dict):
        raise ErrUndecodableMessage
    message = RelayMessage.from_dict(raw)
    if message is None:
        logger.debug("Ignoring unknown message type %r", raw.get("messageType"))
    return message


class LineBuffer:
    """Accumulate raw pipe output and yield complete messages.

    Undecodable lines are logged and skipped.
    """

    def __init__(self) -> None:
        self._pending = b""

    def feed(self, chunk: bytes) -> list[RelayMessage]:
        self._pending += chunk
        *lines, self._pending = self._pending.split(b"\n")
        messages = []
        for line in lines:
            try:
                message = decode_line(line)
            except RelayError:
                logger.debug("Dropping undecodable line %r", line[:200])
                continue
            if message is not None:
                messages.append(message)
        return messages
