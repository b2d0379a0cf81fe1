"""Kraken REST API client for fetching historical OHLC data."""

import logging
from typing import Any

import httpx

from core.models import Candle

logger = logging.getLogger(__name__)

# Interval label -> Kraken OHLC interval in minutes (closest supported match)
KRAKEN_INTERVALS: dict[str, int] = {
    "1m": 1,
    "3m": 5,
    "5m": 5,
    "15m": 15,
    "30m": 30,
    "1h": 60,
    "2h": 240,
    "4h": 240,
    "12h": 1440,
    "1d": 1440,
    "3d": 10080,
    "1w": 10080,
    "1M": 21600,
}

DEFAULT_INTERVAL_MINUTES = 60


def kraken_interval(interval: str) -> int:
    """Map an interval label to Kraken minutes, defaulting to 1h."""
    return KRAKEN_INTERVALS.get(interval, DEFAULT_INTERVAL_MINUTES)


class KrakenApiError(Exception):
    """Kraken returned an error payload or an unusable response."""


class KrakenRestClient:
    """Kraken public REST API client."""

    BASE_URL = "https://api.kraken.com"

    def __init__(self, base_url: str | None = None, timeout: float = 30.0):
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request and unwrap Kraken's result envelope."""
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise KrakenApiError(f"invalid JSON response: {e}") from e
        if not isinstance(data, dict):
            raise KrakenApiError(f"unexpected response type: {type(data).__name__}")

        errors = data.get("error") or []
        if errors:
            raise KrakenApiError(", ".join(str(e) for e in errors))
        if not isinstance(data.get("result"), dict):
            raise KrakenApiError("response has no result")
        return data["result"]

    async def get_ohlc(
        self,
        exchange_id: str,
        interval: str,
        currency: str = "USD",
        since: int | None = None,
    ) -> list[Candle]:
        """
        Fetch OHLC candles from Kraken.

        Kraken returns up to 720 candles per request, oldest first.

        Args:
            exchange_id: Kraken base asset code (e.g., "XBT", "SOL")
            interval: Interval label (e.g., "1d", "1w")
            currency: Quote currency (e.g., "USD", "EUR")
            since: Only return candles after this unix time

        Returns:
            List of Candle objects sorted by time

        Raises:
            KrakenApiError: If Kraken reports an error or returns no series
            httpx.HTTPError: On transport or HTTP status errors
        """
        pair = f"{exchange_id}{currency}"
        params: dict[str, Any] = {
            "pair": pair,
            "interval": kraken_interval(interval),
        }
        if since is not None:
            params["since"] = since

        result = await self._request("GET", "/0/public/OHLC", params)

        # Result is keyed by Kraken's canonical pair name (e.g. XXBTZUSD)
        rows = next(
            (value for key, value in result.items() if key != "last"),
            None,
        )
        if not isinstance(rows, list):
            raise KrakenApiError(f"no OHLC series for {pair}")

        # Row: [time, open, high, low, close, vwap, volume, count]
        try:
            candles = [
                Candle(
                    time=int(row[0]),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                )
                for row in rows
            ]
        except (IndexError, TypeError, ValueError) as e:
            raise KrakenApiError(f"malformed OHLC row for {pair}: {e}") from e
        candles.sort(key=lambda c: c.time)

        logger.debug("Fetched %d %s candles for %s", len(candles), interval, pair)
        return candles
