"""REST API routes."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from core.board import TriggerBoard
from core.indicators import check_ma_convergence

logger = logging.getLogger(__name__)

router = APIRouter()


# Response models
class TriggerResponse(BaseModel):
    """Trigger state of one asset."""

    symbol: str
    role: str
    family: str
    interval: str
    entry: bool
    exit: bool
    take_profit: bool
    loading: bool
    error: bool
    price: Optional[float] = None
    entry_label: str
    stop_label: str
    take_profit_label: str
    updated_at: datetime


class SystemStatus(BaseModel):
    """System status response."""

    status: str
    version: str
    currency: str
    assets: int
    loading: int
    errors: int
    live: bool


class ConvergenceResponse(BaseModel):
    """Moving-average convergence snapshot."""

    symbol: str
    available: bool
    triggered: bool = False
    price: Optional[float] = None
    spread: Optional[float] = None
    spread_pct: Optional[float] = None
    atr: Optional[float] = None
    averages: dict[str, float] = {}
    passed_spread: bool = False
    passed_atr: bool = False
    passed_disorder: bool = False


def get_board(request: Request) -> TriggerBoard:
    return request.app.state.board


def _to_response(board: TriggerBoard, symbol: str) -> TriggerResponse:
    config = board.config(symbol)
    state = board.state(symbol)
    return TriggerResponse(
        symbol=symbol,
        role=config.role,
        family=config.family.value,
        interval=config.interval,
        entry=state.entry,
        exit=state.exit,
        take_profit=state.take_profit,
        loading=state.loading,
        error=state.error,
        price=state.price,
        entry_label=config.entry_label,
        stop_label=config.stop_label,
        take_profit_label=config.take_profit_label,
        updated_at=state.updated_at,
    )


@router.get("/status", response_model=SystemStatus)
async def get_status(request: Request):
    """Get system status."""
    board = get_board(request)
    monitor = request.app.state.monitor
    states = board.states()

    return SystemStatus(
        status="running",
        version="0.1.0",
        currency=monitor.currency if monitor else "",
        assets=len(states),
        loading=sum(1 for s in states if s.loading),
        errors=sum(1 for s in states if s.error),
        live=bool(monitor and monitor.ws and monitor.ws.is_running),
    )


@router.get("/triggers", response_model=list[TriggerResponse])
async def get_triggers(request: Request):
    """Get trigger states of all tracked assets."""
    board = get_board(request)
    return [_to_response(board, symbol) for symbol in board.symbols]


@router.get("/triggers/{symbol}", response_model=TriggerResponse)
async def get_trigger(symbol: str, request: Request):
    """Get the trigger state of one asset."""
    board = get_board(request)
    symbol = symbol.upper()
    if symbol not in board:
        raise HTTPException(status_code=404, detail=f"Unknown symbol: {symbol}")
    return _to_response(board, symbol)


@router.get("/convergence/{symbol}", response_model=ConvergenceResponse)
async def get_convergence(
    symbol: str,
    request: Request,
    max_spread_pct: float = Query(1.5, gt=0, description="Spread limit as % of price"),
    atr_mult: float = Query(1.5, gt=0, description="Spread limit as a multiple of ATR"),
):
    """Check whether an asset's moving averages are compressed together."""
    board = get_board(request)
    symbol = symbol.upper()
    if symbol not in board:
        raise HTTPException(status_code=404, detail=f"Unknown symbol: {symbol}")

    series = board.series(symbol)
    snapshot = None
    if series is not None:
        snapshot = check_ma_convergence(
            series.highs(),
            series.lows(),
            series.closes(),
            max_spread_pct=max_spread_pct,
            atr_mult=atr_mult,
        )

    if snapshot is None:
        return ConvergenceResponse(symbol=symbol, available=False)

    return ConvergenceResponse(
        symbol=symbol,
        available=True,
        triggered=snapshot.triggered,
        price=snapshot.price,
        spread=snapshot.spread,
        spread_pct=snapshot.spread_pct,
        atr=snapshot.atr,
        averages=snapshot.averages,
        passed_spread=snapshot.passed_spread,
        passed_atr=snapshot.passed_atr,
        passed_disorder=snapshot.passed_disorder,
    )


@router.post("/reload", response_model=SystemStatus)
async def reload_history(
    request: Request,
    currency: Optional[str] = Query(None, description="New quote currency (e.g. EUR)"),
):
    """Refetch all history and reconnect the live stream."""
    monitor = request.app.state.monitor
    if monitor is None:
        raise HTTPException(status_code=503, detail="Trigger monitor not running")

    await monitor.restart(currency.upper() if currency else None)
    return await get_status(request)
