"""Child-process end of the relay: JSON lines on stdin / stdout.

stdout carries the relay, so nothing else in a child process may print to
it; logging goes to stderr and the log file.

stdin is read on a daemon thread so a parent that never closes the pipe
cannot keep the interpreter alive at exit.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import IO, TYPE_CHECKING, Any

from proton_wallet.errors.proton_errors import RelayError
from proton_wallet.relay.codec import decode_line, encode_message
from proton_wallet.relay.messages import RelayMessage

if TYPE_CHECKING:
    from proton_wallet.relay.messages import MessageType

logger = logging.getLogger(__name__)


class StdioChannel:
    """Bidirectional message channel to the supervisor.

    Usage::

        channel = StdioChannel()
        channel.start()
        channel.send(MessageType.LOADED)
        while (message := await channel.receive()) is not None:
            ...
    """

    def __init__(self, stdin: IO[bytes] | None = None, stdout: IO[bytes] | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer
        self._queue: asyncio.Queue[bytes | None] | None = None
        self._thread: threading.Thread | None = None
        self._closed = False

    def start(self) -> None:
        """Begin reading stdin. Must be called from inside the running loop."""
        if self._thread is not None:
            return
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._thread = threading.Thread(
            target=self._read_forever,
            args=(loop, self._queue),
            name="relay-stdin",
            daemon=True,
        )
        self._thread.start()

    def _read_forever(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[bytes | None]) -> None:
        try:
            for line in iter(self._stdin.readline, b""):
                loop.call_soon_threadsafe(queue.put_nowait, line)
            loop.call_soon_threadsafe(queue.put_nowait, None)
        except (OSError, ValueError, RuntimeError):
            # Pipe closed under us or the loop is already gone.
            try:
                loop.call_soon_threadsafe(queue.put_nowait, None)
            except RuntimeError:
                pass

    async def receive(self) -> RelayMessage | None:
        """Next known message, or ``None`` once the supervisor closes the pipe."""
        if self._queue is None:
            raise RuntimeError("StdioChannel not started; call start() first")
        while True:
            line = await self._queue.get()
            if line is None:
                return None
            try:
                message = decode_line(line)
            except RelayError:
                logger.debug("Dropping undecodable line %r", line[:200])
                continue
            if message is not None:
                return message

    def send(self, message_type: MessageType, data: Any = None) -> bool:
        """Write one message. Returns ``False`` if the pipe is gone (message dropped)."""
        if self._closed:
            return False
        try:
            self._stdout.write(encode_message(RelayMessage(message_type, data)))
            self._stdout.flush()
        except (BrokenPipeError, ValueError, OSError):
            logger.debug("Supervisor pipe closed; dropping %s", message_type)
            self._closed = True
            return False
        return True
