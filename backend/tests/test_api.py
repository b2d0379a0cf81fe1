"""Tests for the REST routes and the WebSocket push endpoint."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.websocket import ConnectionManager
from app.main import create_app
from core.board import TriggerBoard
from core.models import AssetTriggerConfig, Candle, StrategyFamily

DAY = 86400


def make_candles(closes: list[float], spread: float = 0.0) -> list[Candle]:
    return [
        Candle(time=i * DAY, open=c, high=c + spread, low=c - spread, close=c)
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def board():
    board = TriggerBoard([
        AssetTriggerConfig(
            symbol="BTC", exchange_id="XBT", role="Master Switch",
            family=StrategyFamily.MACRO_TREND, interval="1w",
            entry_label="Weekly Close > 21 EMA",
        ),
        AssetTriggerConfig(symbol="SUI", exchange_id="SUI", family=StrategyFamily.MOMENTUM_BREAKOUT),
    ])
    board.load_history("BTC", make_candles([float(100 + i) for i in range(30)]))
    return board


@pytest.fixture
def app(board):
    app = create_app(lifespan=None)
    app.state.board = board
    app.state.monitor = None
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestTriggerRoutes:
    def test_list_triggers(self, client):
        response = client.get("/api/triggers")

        assert response.status_code == 200
        data = response.json()
        assert [t["symbol"] for t in data] == ["BTC", "SUI"]

        btc = data[0]
        assert btc["entry"] is True
        assert btc["exit"] is False
        assert btc["family"] == "macro_trend"
        assert btc["role"] == "Master Switch"
        assert btc["entry_label"] == "Weekly Close > 21 EMA"
        assert btc["price"] == 129.0

        sui = data[1]
        assert sui["loading"] is True
        assert sui["price"] is None

    def test_single_trigger_case_insensitive(self, client):
        response = client.get("/api/triggers/btc")

        assert response.status_code == 200
        assert response.json()["symbol"] == "BTC"

    def test_unknown_symbol(self, client):
        response = client.get("/api/triggers/ETH")
        assert response.status_code == 404


class TestStatusRoutes:
    def test_status_without_monitor(self, client):
        data = client.get("/api/status").json()

        assert data["assets"] == 2
        assert data["loading"] == 1
        assert data["errors"] == 0
        assert data["live"] is False
        assert data["currency"] == ""

    def test_status_with_monitor(self, app, client):
        monitor = MagicMock()
        monitor.currency = "EUR"
        monitor.ws.is_running = True
        app.state.monitor = monitor

        data = client.get("/api/status").json()

        assert data["currency"] == "EUR"
        assert data["live"] is True

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestReload:
    def test_reload_without_monitor(self, client):
        assert client.post("/api/reload").status_code == 503

    def test_reload_with_currency(self, app, client):
        monitor = MagicMock()
        monitor.currency = "EUR"
        monitor.ws = None
        monitor.restart = AsyncMock()
        app.state.monitor = monitor

        response = client.post("/api/reload", params={"currency": "eur"})

        assert response.status_code == 200
        monitor.restart.assert_awaited_once_with("EUR")


class TestConvergence:
    def test_not_enough_history(self, client):
        data = client.get("/api/convergence/BTC").json()

        assert data["available"] is False
        assert data["triggered"] is False

    def test_flat_market(self, board, client):
        board.load_history("SUI", make_candles([100.0] * 130, spread=1.0))

        data = client.get("/api/convergence/SUI").json()

        assert data["available"] is True
        assert data["triggered"] is True
        assert data["spread"] == 0.0
        assert "sma120" in data["averages"]

    def test_invalid_threshold(self, client):
        response = client.get("/api/convergence/BTC", params={"max_spread_pct": 0})
        assert response.status_code == 422

    def test_unknown_symbol(self, client):
        assert client.get("/api/convergence/ETH").status_code == 404


class TestWebSocket:
    def test_snapshot_on_connect(self, client):
        with client.websocket_connect("/ws") as ws:
            message = ws.receive_json()

        assert message["type"] == "snapshot"
        assert [s["symbol"] for s in message["data"]] == ["BTC", "SUI"]
        assert message["data"][0]["entry"] is True

    def test_ping_pong(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"

            ws.send_text("not json")
            assert ws.receive_json()["type"] == "error"


@pytest.mark.asyncio
class TestConnectionManager:
    async def test_broadcast_drops_failed_connections(self, board):
        manager = ConnectionManager()
        good, bad = MagicMock(), MagicMock()
        good.send_text = AsyncMock()
        bad.send_text = AsyncMock(side_effect=RuntimeError("closed"))
        manager._connections = [good, bad]

        await manager.send_trigger(board.state("BTC"))

        good.send_text.assert_awaited_once()
        assert '"type":"trigger"' in good.send_text.await_args.args[0]
        assert manager.connection_count == 1

    async def test_notify_without_connections_is_noop(self, board):
        manager = ConnectionManager()
        manager.notify(board.state("BTC"))
        assert manager.connection_count == 0

    async def test_notify_keeps_task_until_sent(self, board):
        manager = ConnectionManager()
        connection = MagicMock()
        connection.send_text = AsyncMock()
        manager._connections = [connection]

        manager.notify(board.state("BTC"))

        assert len(manager._pending) == 1
        await asyncio.gather(*list(manager._pending))
        await asyncio.sleep(0)

        connection.send_text.assert_awaited_once()
        assert manager._pending == set()
