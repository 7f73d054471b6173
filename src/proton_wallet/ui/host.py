"""UI process: session cache, view polling and window commands.

Inbound relay messages from the engine are applied to the
:class:`SessionStateCache` through the :class:`SessionDispatcher`; the
renderer only ever sees :class:`WalletView` snapshots produced by the
poller. The ``*Window`` control messages from the supervisor drive the
renderer's window. User actions leave through the ``request_*`` /
``open_wallet`` / ``save_wallet_as`` methods.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from proton_wallet.relay.messages import MessageType
from proton_wallet.session.cache import SessionStateCache
from proton_wallet.session.dispatch import SessionDispatcher
from proton_wallet.session.events import EventBus, SessionEvent
from proton_wallet.session.login import LoginState
from proton_wallet.session.prices import FiatPriceClient, PriceTicker
from proton_wallet.taskmanager import CronJob, TaskManager
from proton_wallet.ui.poller import POLL_INTERVAL, ViewPoller

if TYPE_CHECKING:
    from proton_wallet.config.settings import PriceConfig
    from proton_wallet.engine.host import Channel
    from proton_wallet.metrics.collector import ShellMetrics
    from proton_wallet.relay.messages import RelayMessage
    from proton_wallet.ui.render import Renderer

logger = logging.getLogger(__name__)


class UIHost:
    """Run the UI side of a wallet session.

    Usage::

        host = UIHost(StdioChannel(), LogRenderer(), price_config=settings.price)
        exit_code = await host.run()
    """

    def __init__(
        self,
        channel: Channel,
        renderer: Renderer,
        *,
        price_config: PriceConfig | None = None,
        price_client: FiatPriceClient | None = None,
        poll_interval: float = POLL_INTERVAL,
        metrics: ShellMetrics | None = None,
    ) -> None:
        self._channel = channel
        self._renderer = renderer
        self.events = EventBus()
        self.login = LoginState()
        self.cache = SessionStateCache(self.events)
        self._dispatcher = SessionDispatcher(self.cache, self.login)

        self._price_config = price_config
        self._price_client = price_client
        if self._price_client is None and price_config is not None and price_config.enabled:
            self._price_client = FiatPriceClient(price_config)
        self.ticker = (
            PriceTicker(self._price_client, self.events) if self._price_client is not None else None
        )

        self.poller = ViewPoller(self.cache, renderer.render, login=self.login, ticker=self.ticker)
        self._poll_interval = poll_interval
        self._tasks = TaskManager(metrics=metrics)

        self.config: dict[str, Any] = {}
        self.config_path: str | None = None
        self._front_ready = False
        self._window_closed = False

        self._window_commands = {
            MessageType.SHOW_WINDOW: self._show,
            MessageType.HIDE_WINDOW: renderer.hide,
            MessageType.FOCUS_WINDOW: renderer.focus,
        }
        self.events.on(SessionEvent.CONFIG_RECEIVED, self._on_config)

    @property
    def window_closed(self) -> bool:
        return self._window_closed

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> int:
        """Serve until the supervisor closes the pipe.

        Closing the window does not end the process; a later ``showWindow``
        reopens it.
        """
        self._channel.start()
        self._tasks.register("view_poll", CronJob(handler=self.poller.tick, period=self._poll_interval))
        if self.ticker is not None and self._price_client is not None:
            if not self._price_client.is_connected:
                await self._price_client.connect()
            interval = self._price_config.refresh_interval if self._price_config else 300.0
            self._tasks.register(
                "fiat_price", CronJob(handler=self._refresh_price, period=interval, immediate=True)
            )
        await self._tasks.start()
        self._channel.send(MessageType.LOADED)
        logger.info("UI loaded")

        try:
            while True:
                message = await self._channel.receive()
                if message is None:
                    logger.warning("Supervisor closed the pipe; closing UI")
                    break
                self.handle(message)
        finally:
            await self._tasks.stop()
            if self._price_client is not None:
                await self._price_client.close()
        return 0

    def handle(self, message: RelayMessage) -> None:
        """Process one message from the supervisor."""
        command = self._window_commands.get(message.type)
        if command is not None:
            command()
        elif message.type is MessageType.CLOSE_WINDOW:
            self._close()
        elif not self._dispatcher.handle(message):
            logger.debug("UI ignoring %s", message.type)

    async def _refresh_price(self) -> None:
        if self.ticker is not None:
            await self.ticker.refresh()

    def _on_config(self, config: dict[str, Any], config_path: str | None = None) -> None:
        self.config = config
        if config_path is not None:
            self.config_path = config_path
        if self.ticker is not None:
            self.ticker.fiat = str(config.get("selectedFiat", self.ticker.fiat))
        if not self._front_ready:
            self._front_ready = True
            self._channel.send(MessageType.FRONT_READY)

    def _show(self) -> None:
        self._window_closed = False
        self._renderer.show()

    def _close(self) -> None:
        if self._window_closed:
            return
        self._window_closed = True
        self._renderer.close()
        self._channel.send(MessageType.WINDOW_CLOSED)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def request_close(self) -> None:
        """The user clicked the window's close button."""
        self._channel.send(MessageType.WINDOW_CLOSE_REQUESTED)

    def toggle_close_to_tray(self, enabled: bool) -> None:
        self._channel.send(MessageType.CLOSE_TO_TRAY_TOGGLE, enabled)

    def update_config(self, key: str, value: Any) -> None:
        """Persist one preference through the supervisor."""
        self._channel.send(MessageType.CONFIG_UPDATE, {"key": key, "value": value})

    def save_wallet_as(self, path: str, *, notify: bool = True) -> None:
        self._channel.send(MessageType.SAVE_WALLET_AS, {"notify": notify, "savePath": path})

    def open_wallet(self, path: str) -> None:
        """Switch the engine to another wallet file and start a fresh session."""
        self._channel.send(MessageType.OPEN_NEW_WALLET)
        self.update_config("walletFile", path)
        self._new_session()

    def _new_session(self) -> None:
        self.login.reset()
        self.cache = SessionStateCache(self.events)
        self._dispatcher = SessionDispatcher(self.cache, self.login)
        self.poller.cache = self.cache
