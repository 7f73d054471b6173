"""Fiat price ticker backed by the CoinGecko markets endpoint.

- GET /coins/markets?vs_currency=<fiat>&ids=<coin>

A failed fetch is logged and swallowed: the last good price stays in place
and the next scheduled refresh tries again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from proton_wallet.session.events import SessionEvent

if TYPE_CHECKING:
    from proton_wallet.config.settings import PriceConfig
    from proton_wallet.session.events import EventBus

logger = logging.getLogger(__name__)


class FiatPriceClient:
    """Async HTTP client for the CoinGecko markets API.

    Usage::

        client = FiatPriceClient(config)
        await client.connect()
        try:
            price = await client.get_price("usd")
        finally:
            await client.close()
    """

    def __init__(self, config: PriceConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.api_url,
            headers={"Accept": "application/json"},
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def get_price(self, fiat: str) -> float:
        """Current price of the configured coin in *fiat*.

        Raises:
            RuntimeError: If the client is not connected.
            httpx.HTTPError: On transport or HTTP status errors.
            LookupError / ValueError: If the response has no usable price.
        """
        if self._client is None:
            raise RuntimeError("FiatPriceClient not connected; call connect() first")
        resp = await self._client.get(
            "/coins/markets",
            params={
                "vs_currency": fiat,
                "ids": self._config.coin_id,
                "order": "market_cap_desc",
                "per_page": 100,
                "page": 1,
                "sparkline": "false",
            },
        )
        resp.raise_for_status()
        data = resp.json()
        return float(data[0]["current_price"])


class PriceTicker:
    """Holds the last known fiat price and refreshes it on demand."""

    def __init__(self, client: FiatPriceClient, events: EventBus, *, fiat: str = "usd") -> None:
        self._client = client
        self._events = events
        self.fiat = fiat
        self._price = 0.0

    @property
    def price(self) -> float:
        """Last successfully fetched price (0 until the first success)."""
        return self._price

    async def refresh(self) -> float:
        """Fetch a new price; on failure keep and return the stale one."""
        try:
            price = await self._client.get_price(self.fiat)
        except (httpx.HTTPError, LookupError, ValueError, TypeError) as exc:
            logger.debug("Request failed, CoinGecko API call error: %s", exc)
            return self._price
        self._price = price
        self._events.emit(SessionEvent.FIAT_PRICE, price)
        return price
