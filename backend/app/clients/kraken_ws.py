"""Kraken WebSocket client for real-time OHLC ticks using picows."""

import asyncio
import json
import logging
from typing import Callable, Awaitable

from picows import ws_connect, WSFrame, WSTransport, WSListener, WSMsgType, WSCloseCode

from core.models import Candle

logger = logging.getLogger(__name__)

# Type alias for tick callback
TickCallback = Callable[[Candle], Awaitable[None]]


def stream_key(pair: str, interval: int) -> str:
    """Key of one OHLC stream, e.g. 'XBT/USD@10080'."""
    return f"{pair}@{interval}"


def parse_ohlc_message(data: list) -> tuple[str, int, Candle] | None:
    """
    Parse a Kraken v1 OHLC channel message.

    Format: [channel_id, [time, etime, open, high, low, close, vwap, volume,
    count], "ohlc-<minutes>", "<pair>"]

    Kraken reports the interval end time; candles are keyed by interval
    start, so the tick time is ``etime - minutes * 60``.

    Returns:
        (pair, interval_minutes, candle), or None if the message is not OHLC
    """
    if len(data) < 4 or not isinstance(data[1], list):
        return None

    channel = data[-2]
    if not isinstance(channel, str) or not channel.startswith("ohlc-"):
        return None

    interval = int(channel.split("-", 1)[1])
    pair = data[-1]
    row = data[1]

    candle = Candle(
        time=int(float(row[1])) - interval * 60,
        open=float(row[2]),
        high=float(row[3]),
        low=float(row[4]),
        close=float(row[5]),
    )
    return pair, interval, candle


class KrakenOhlcListener(WSListener):
    """picows listener for the Kraken OHLC WebSocket channel."""

    def __init__(
        self,
        callbacks: dict[str, TickCallback],
        on_connected: Callable[[], None],
        on_disconnected: Callable[[], None],
        loop: asyncio.AbstractEventLoop,
    ):
        self._callbacks = callbacks
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected
        self._transport: WSTransport | None = None
        # Store loop at init time; picows callbacks may run outside it
        self._loop = loop

    def on_ws_connected(self, transport: WSTransport):
        """Called when WebSocket connection is established."""
        self._transport = transport
        logger.info("picows: OHLC WebSocket connected")

        if self._callbacks:
            self._send_subscribe(list(self._callbacks.keys()))

        self._on_connected()

    def on_ws_disconnected(self, transport: WSTransport):
        """Called when WebSocket is disconnected."""
        logger.info("picows: OHLC WebSocket disconnected")
        self._transport = None
        self._on_disconnected()

    def on_ws_frame(self, transport: WSTransport, frame: WSFrame):
        """Called when a new frame is received."""
        if frame.msg_type == WSMsgType.TEXT:
            payload = frame.get_payload_as_utf8_text()
            self._handle_message(payload)
        elif frame.msg_type == WSMsgType.PING:
            transport.send_pong(frame.get_payload_as_bytes())

    def _send_subscribe(self, keys: list[str]) -> None:
        """Send one subscription request per interval."""
        if not self._transport:
            return

        by_interval: dict[int, list[str]] = {}
        for key in keys:
            pair, interval = key.rsplit("@", 1)
            by_interval.setdefault(int(interval), []).append(pair)

        for interval, pairs in sorted(by_interval.items()):
            msg = {
                "event": "subscribe",
                "pair": pairs,
                "subscription": {"name": "ohlc", "interval": interval},
            }
            self._transport.send(WSMsgType.TEXT, json.dumps(msg).encode())
            logger.info(f"Subscribed to ohlc-{interval}: {pairs}")

    def send_subscribe(self, keys: list[str]) -> None:
        """Public method to subscribe to additional streams."""
        self._send_subscribe(keys)

    def _handle_message(self, message: str) -> None:
        """Handle incoming WebSocket message."""
        try:
            data = json.loads(message)

            # Events: heartbeat, systemStatus, subscriptionStatus
            if isinstance(data, dict):
                if data.get("event") == "subscriptionStatus" and data.get("status") == "error":
                    logger.warning(
                        f"Kraken subscription error for {data.get('pair')}: "
                        f"{data.get('errorMessage')}"
                    )
                return

            if isinstance(data, list):
                self._process_ohlc(data)

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse OHLC message: {e}")
        except (ValueError, IndexError, TypeError) as e:
            logger.error(f"Malformed OHLC message: {e}")

    def _process_ohlc(self, data: list) -> None:
        """Parse an OHLC message and dispatch it to its stream callback."""
        parsed = parse_ohlc_message(data)
        if parsed is None:
            return

        pair, interval, candle = parsed
        callback = self._callbacks.get(stream_key(pair, interval))
        if callback and self._loop:
            asyncio.run_coroutine_threadsafe(
                self._safe_callback(callback, candle), self._loop
            )

    async def _safe_callback(self, callback: TickCallback, candle: Candle) -> None:
        """Safely execute async callback."""
        try:
            await callback(candle)
        except Exception as e:
            logger.error(f"Tick callback error: {e}")

    def disconnect(self) -> None:
        """Disconnect the WebSocket."""
        if self._transport:
            self._transport.send_close(WSCloseCode.OK)
            self._transport.disconnect()


class KrakenOhlcWebSocket:
    """WebSocket client for Kraken OHLC streams using picows.

    Holds at most one callback per stream; subscribing again to the same
    pair and interval replaces the previous callback.
    """

    WS_URL = "wss://ws.kraken.com"

    def __init__(self, url: str | None = None):
        self.url = url or self.WS_URL
        self._callbacks: dict[str, TickCallback] = {}
        self._running = False
        self._reconnect_delay = 1.0
        self._max_reconnect_delay = 60.0
        self._task: asyncio.Task | None = None
        self._listener: KrakenOhlcListener | None = None
        self._connected = asyncio.Event()
        self._disconnected = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def streams(self) -> list[str]:
        return list(self._callbacks)

    async def subscribe(
        self,
        pair: str,
        interval: int,
        callback: TickCallback,
    ) -> None:
        """
        Subscribe to OHLC updates for a pair.

        Args:
            pair: Kraken WebSocket pair (e.g., "XBT/USD")
            interval: Candle interval in minutes (e.g., 1440)
            callback: Async function called with each tick as a Candle
        """
        key = stream_key(pair, interval)
        is_new = key not in self._callbacks
        self._callbacks[key] = callback

        # Send subscribe message if already connected
        if is_new and self._listener and self._connected.is_set():
            self._listener.send_subscribe([key])

    async def start(self) -> None:
        """Start the WebSocket connection and message processing."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the WebSocket connection."""
        self._running = False
        if self._listener:
            self._listener.disconnect()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def _on_connected(self) -> None:
        """Called when connection is established."""
        self._connected.set()
        self._disconnected.clear()
        self._reconnect_delay = 1.0

    def _on_disconnected(self) -> None:
        """Called when connection is lost."""
        self._connected.clear()
        self._disconnected.set()

    async def _run(self) -> None:
        """Main WebSocket loop with reconnection."""
        while self._running:
            try:
                await self._connect_and_process()
            except Exception as e:
                logger.error(f"picows OHLC error: {e}")

            if self._running:
                logger.info(
                    f"Reconnecting OHLC WS in {self._reconnect_delay} seconds..."
                )
                await asyncio.sleep(self._reconnect_delay)
                self._reconnect_delay = min(
                    self._reconnect_delay * 2, self._max_reconnect_delay
                )

    async def _connect_and_process(self) -> None:
        """Connect to WebSocket and wait for disconnection."""
        self._disconnected.clear()

        # Capture event loop here (in async context) to pass to listener
        loop = asyncio.get_running_loop()

        def listener_factory():
            self._listener = KrakenOhlcListener(
                callbacks=self._callbacks,
                on_connected=self._on_connected,
                on_disconnected=self._on_disconnected,
                loop=loop,
            )
            return self._listener

        logger.info(f"Connecting to {self.url}")
        await ws_connect(
            listener_factory,
            self.url,
            enable_auto_ping=True,
            auto_ping_idle_timeout=30,
            auto_ping_reply_timeout=10,
        )

        # Wait until disconnected
        await self._disconnected.wait()
