"""Exchange clients."""

from app.clients.kraken_rest import KrakenApiError, KrakenRestClient, kraken_interval
from app.clients.kraken_ws import KrakenOhlcWebSocket, parse_ohlc_message

__all__ = [
    "KrakenApiError",
    "KrakenRestClient",
    "kraken_interval",
    "KrakenOhlcWebSocket",
    "parse_ohlc_message",
]
