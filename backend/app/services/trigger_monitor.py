"""Trigger monitoring service.

Feeds the TriggerBoard from Kraken:

1. Mark every asset as loading
2. Fetch each asset's history one request at a time, sleeping
   ``request_delay`` seconds between requests (no parallel fan-out)
3. Open one live OHLC stream covering all assets and merge ticks

A failed history request marks only that asset as failed; the remaining
assets are still fetched. Restarting (e.g. on a quote currency change)
cancels the running load and closes the previous stream before opening a
new one, so each asset has at most one live subscription.
"""

import asyncio
import logging
from typing import Callable

import httpx

from app.clients import KrakenApiError, KrakenOhlcWebSocket, KrakenRestClient, kraken_interval
from core.board import TriggerBoard
from core.models import AssetTriggerConfig, Candle

logger = logging.getLogger(__name__)


class TriggerMonitor:
    """Drives history loading and live updates for a TriggerBoard."""

    def __init__(
        self,
        board: TriggerBoard,
        rest_client: KrakenRestClient,
        ws_factory: Callable[[], KrakenOhlcWebSocket],
        currency: str = "USD",
        request_delay: float = 0.6,
    ):
        self.board = board
        self.rest_client = rest_client
        self._ws_factory = ws_factory
        self.currency = currency
        self.request_delay = request_delay

        self._ws: KrakenOhlcWebSocket | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ws(self) -> KrakenOhlcWebSocket | None:
        return self._ws

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start loading history in the background, then go live."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel any running load and close the live stream."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._ws:
            await self._ws.stop()
            self._ws = None

    async def restart(self, currency: str | None = None) -> None:
        """Reload everything, optionally switching the quote currency."""
        await self.stop()
        if currency:
            self.currency = currency
        logger.info(f"Restarting trigger monitor in {self.currency}")
        await self.start()

    async def _run(self) -> None:
        await self.load_history()
        await self.connect_live()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def load_history(self) -> None:
        """Fetch every asset's history sequentially with a fixed delay."""
        for symbol in self.board.symbols:
            self.board.mark_loading(symbol)

        configs = self.board.configs()
        for index, config in enumerate(configs):
            await self.refresh(config)
            if index < len(configs) - 1 and self.request_delay > 0:
                await asyncio.sleep(self.request_delay)

    async def refresh(self, config: AssetTriggerConfig) -> bool:
        """Fetch one asset's history into the board.

        Returns:
            True if the fetch succeeded
        """
        logger.info(
            f"Fetching {config.symbol} {config.interval} in {self.currency}..."
        )
        try:
            candles = await self.rest_client.get_ohlc(
                config.exchange_id, config.interval, self.currency
            )
        except (KrakenApiError, httpx.HTTPError) as e:
            logger.warning(f"Failed to fetch {config.symbol}: {e}")
            self.board.mark_failed(config.symbol)
            return False
        except Exception as e:
            logger.error(f"Unexpected error fetching {config.symbol}: {e}")
            self.board.mark_failed(config.symbol)
            return False

        state = self.board.load_history(config.symbol, candles)
        if state.error:
            logger.warning(
                f"{config.symbol}: insufficient history ({len(candles)} candles)"
            )
        return True

    # ------------------------------------------------------------------
    # Live ticks
    # ------------------------------------------------------------------

    def _tick_handler(self, symbol: str):
        async def on_tick(candle: Candle) -> None:
            self.board.apply_tick(symbol, candle)

        return on_tick

    async def connect_live(self) -> None:
        """Open a fresh OHLC stream for all assets, closing any previous one."""
        if self._ws:
            await self._ws.stop()

        self._ws = self._ws_factory()
        for config in self.board.configs():
            pair = f"{config.exchange_id}/{self.currency}"
            await self._ws.subscribe(
                pair,
                kraken_interval(config.interval),
                self._tick_handler(config.symbol),
            )
        await self._ws.start()
        logger.info(f"Live OHLC stream started for {len(self.board.symbols)} assets")
