"""Engine process message loop.

Reads supervisor messages from the channel and drives the backend:

- ``config``         → ``backend.configure``
- ``openNewWallet``  → ``backend.close_wallet``
- ``saveWalletAs``   → ``backend.save_wallet_as`` (+ ``saveWalletResponse`` if asked)
- ``stopRequest``    → ``backend.stop``, then ``backendStopped`` and exit

Anything else is ignored. The host announces ``loaded`` once the backend
has started.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from proton_wallet.relay.messages import MessageType

if TYPE_CHECKING:
    from collections.abc import Callable

    from proton_wallet.engine.backend import WalletBackend
    from proton_wallet.relay.messages import RelayMessage

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """What the host needs from its link to the supervisor."""

    def start(self) -> None: ...

    async def receive(self) -> RelayMessage | None: ...

    def send(self, message_type: MessageType, data: Any = None) -> bool: ...


class EngineHost:
    """Run a :class:`WalletBackend` behind the relay.

    Usage::

        host = EngineHost(StdioChannel(), NullWalletBackend)
        exit_code = await host.run()
    """

    def __init__(
        self,
        channel: Channel,
        backend_factory: Callable[[Callable[[MessageType, Any], None]], WalletBackend],
    ) -> None:
        self._channel = channel
        self._backend = backend_factory(self._publish)
        self._stopped = False

    @property
    def backend(self) -> WalletBackend:
        return self._backend

    @property
    def stopped(self) -> bool:
        return self._stopped

    def _publish(self, message_type: MessageType, data: Any = None) -> None:
        self._channel.send(message_type, data)

    async def run(self) -> int:
        """Serve until a stop request or until the supervisor goes away."""
        self._channel.start()
        await self._backend.start()
        self._channel.send(MessageType.LOADED)
        logger.info("Engine loaded")

        while not self._stopped:
            message = await self._channel.receive()
            if message is None:
                logger.warning("Supervisor closed the pipe; stopping backend")
                await self._stop(acknowledge=False)
                break
            await self.handle(message)
        return 0

    async def handle(self, message: RelayMessage) -> None:
        """Process one supervisor message."""
        try:
            if message.type is MessageType.STOP_REQUEST:
                await self._stop(acknowledge=True)
            elif message.type is MessageType.CONFIG:
                await self._backend.configure(_unwrap_config(message.data))
            elif message.type is MessageType.OPEN_NEW_WALLET:
                await self._backend.close_wallet()
            elif message.type is MessageType.SAVE_WALLET_AS:
                await self._save_wallet_as(message.data)
            else:
                logger.debug("Engine ignoring %s", message.type)
        except Exception:
            logger.exception("Engine failed handling %s", message.type)

    async def _save_wallet_as(self, data: Any) -> None:
        data = data if isinstance(data, dict) else {}
        notify = bool(data.get("notify", False))
        path = data.get("savePath")
        try:
            saved = bool(path) and await self._backend.save_wallet_as(str(path))
        except Exception:
            logger.exception("Saving wallet to %s failed", path)
            saved = False
        if notify:
            self._channel.send(MessageType.SAVE_WALLET_RESPONSE, saved)

    async def _stop(self, *, acknowledge: bool) -> None:
        if self._stopped:
            return
        self._stopped = True
        try:
            await self._backend.stop()
        finally:
            if acknowledge:
                self._channel.send(MessageType.BACKEND_STOPPED)
                logger.info("Backend stopped")


def _unwrap_config(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"config payload must be an object, got {type(data).__name__}")
    inner = data.get("config", data)
    if not isinstance(inner, dict):
        raise TypeError("config payload must be an object")
    return inner
