"""Data models shared by the trigger engine and its collaborators."""

from core.models.candle import Candle, CandleSeries
from core.models.config import AssetTriggerConfig, StrategyFamily, TITAN_ASSETS
from core.models.signal import TriggerState

__all__ = [
    "Candle",
    "CandleSeries",
    "AssetTriggerConfig",
    "StrategyFamily",
    "TITAN_ASSETS",
    "TriggerState",
]
