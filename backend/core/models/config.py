"""Trigger configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StrategyFamily(str, Enum):
    """Entry/exit rule template an asset is assigned to."""

    MACRO_TREND = "macro_trend"  # close vs EMA-21
    STRUCTURE_BREAK = "structure_break"  # SMA-50 + swing high
    MOMENTUM_BREAKOUT = "momentum_breakout"  # prior 20-bar high + SMA-10
    STRUCTURE_BREAK_ALT = "structure_break_alt"  # SMA-100 + swing low


class AssetTriggerConfig(BaseModel):
    """Static trigger configuration for one tracked asset."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    exchange_id: str  # base asset code on the exchange, e.g. "XBT"
    role: str = ""
    family: StrategyFamily
    interval: str = "1d"

    # Display labels for the signal consumer
    entry_label: str = ""
    stop_label: str = ""
    take_profit_label: str = ""


# =============================================================================
# Default tracked assets
# =============================================================================
TITAN_ASSETS: list[AssetTriggerConfig] = [
    AssetTriggerConfig(
        symbol="BTC", exchange_id="XBT", role="Master Switch",
        family=StrategyFamily.MACRO_TREND, interval="1w",
        entry_label="Weekly Close > 21 EMA",
        stop_label="Weekly Close < 21 EMA",
        take_profit_label="Weekly Close < 21 EMA",
    ),
    AssetTriggerConfig(
        symbol="SOL", exchange_id="SOL", role="Core",
        family=StrategyFamily.STRUCTURE_BREAK, interval="1d",
        entry_label="Break > 50D MA & Swing High",
        stop_label="Daily Close < 50 SMA",
        take_profit_label="Daily Close < 20 SMA",
    ),
    AssetTriggerConfig(
        symbol="SUI", exchange_id="SUI", role="Vanguard",
        family=StrategyFamily.MOMENTUM_BREAKOUT, interval="1d",
        entry_label="Break 20-Day High",
        stop_label="Daily Close < 10 SMA",
        take_profit_label="Daily Close < 10 SMA",
    ),
    AssetTriggerConfig(
        symbol="PEPE", exchange_id="PEPE", role="Berserker",
        family=StrategyFamily.MOMENTUM_BREAKOUT, interval="1d",
        entry_label="Break 20-Day High",
        stop_label="Daily Close < 10 SMA",
        take_profit_label="Trail 10 SMA",
    ),
    AssetTriggerConfig(
        symbol="TAO", exchange_id="TAO", role="Anchor",
        family=StrategyFamily.STRUCTURE_BREAK, interval="1d",
        entry_label="Break > 50D MA & Swing High",
        stop_label="Daily Close < 50 SMA",
        take_profit_label="Daily Close < 20 SMA",
    ),
    AssetTriggerConfig(
        symbol="RENDER", exchange_id="RENDER", role="Berserker",
        family=StrategyFamily.MOMENTUM_BREAKOUT, interval="1d",
        entry_label="Break 20-Day High",
        stop_label="Daily Close < 10 SMA",
        take_profit_label="Trail 10 SMA",
    ),
    AssetTriggerConfig(
        symbol="ONDO", exchange_id="ONDO", role="The Insider",
        family=StrategyFamily.STRUCTURE_BREAK, interval="1d",
        entry_label="Break > 50D MA & Swing High",
        stop_label="Daily Close < 50 SMA",
        take_profit_label="Daily Close < 20 SMA",
    ),
    AssetTriggerConfig(
        symbol="KAS", exchange_id="KAS", role="The Cult",
        family=StrategyFamily.STRUCTURE_BREAK_ALT, interval="1d",
        entry_label="Break > 100D MA",
        stop_label="Break Prev. Swing Low",
        take_profit_label="Daily Close < 50 SMA",
    ),
    AssetTriggerConfig(
        symbol="VIRTUAL", exchange_id="VIRTUAL", role="Berserker",
        family=StrategyFamily.MOMENTUM_BREAKOUT, interval="1d",
        entry_label="Break 20-Day High",
        stop_label="Daily Close < 10 SMA",
        take_profit_label="Trail 10 SMA",
    ),
]
