#!/usr/bin/env python3
"""
One-shot trigger check.

Fetches history for every tracked asset (sequentially, with the configured
delay between requests), evaluates the entry/exit rules and prints a table.
Optionally reports moving-average convergence for each asset.

Usage:
    python scripts/check_triggers.py
    python scripts/check_triggers.py --currency EUR --convergence
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.clients import KrakenOhlcWebSocket, KrakenRestClient
from app.config import get_settings
from app.services import TriggerMonitor
from app.trigger_config import load_trigger_config
from core.board import TriggerBoard
from core.indicators import check_ma_convergence

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def _flag(value: bool) -> str:
    return "YES" if value else "-"


def print_table(board: TriggerBoard, show_convergence: bool) -> None:
    print()
    print("=" * 78)
    print(f"{'Ticker':<9}{'Family':<22}{'Price':>14}  {'Entry':<6}{'Stop':<6}{'TP':<6}{'State':<8}")
    print("-" * 78)

    for config in board.configs():
        state = board.state(config.symbol)
        price = f"{state.price:.6g}" if state.price is not None else "n/a"
        status = "loading" if state.loading else "no data" if state.error else "ok"
        print(
            f"{config.symbol:<9}{config.family.value:<22}{price:>14}  "
            f"{_flag(state.entry):<6}{_flag(state.exit):<6}{_flag(state.take_profit):<6}{status:<8}"
        )

        if show_convergence:
            series = board.series(config.symbol)
            snapshot = None
            if series is not None:
                snapshot = check_ma_convergence(series.highs(), series.lows(), series.closes())
            if snapshot is None:
                print(f"{'':<9}convergence: not enough history")
            else:
                print(
                    f"{'':<9}convergence: spread {snapshot.spread_pct:.2f}% "
                    f"atr {snapshot.atr:.6g} -> {'TRIGGERED' if snapshot.triggered else 'no'}"
                )

    print("=" * 78)


async def run(currency: str, show_convergence: bool) -> None:
    settings = get_settings()
    config_path = Path(settings.triggers_file) if settings.triggers_file else None
    board = TriggerBoard(load_trigger_config(config_path).get_assets())

    rest_client = KrakenRestClient(
        base_url=settings.kraken_rest_url,
        timeout=settings.http_timeout,
    )
    monitor = TriggerMonitor(
        board=board,
        rest_client=rest_client,
        ws_factory=lambda: KrakenOhlcWebSocket(settings.kraken_ws_url),
        currency=currency,
        request_delay=settings.history_request_delay,
    )

    try:
        await monitor.load_history()
    finally:
        await rest_client.close()

    print_table(board, show_convergence)


def main() -> None:
    parser = argparse.ArgumentParser(description="Evaluate trigger rules once")
    parser.add_argument(
        "--currency",
        default=get_settings().quote_currency,
        help="Quote currency (default from settings)",
    )
    parser.add_argument(
        "--convergence",
        action="store_true",
        help="Also report moving-average convergence",
    )
    args = parser.parse_args()

    asyncio.run(run(args.currency.upper(), args.convergence))


if __name__ == "__main__":
    main()
