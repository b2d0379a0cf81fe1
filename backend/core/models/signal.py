"""Trigger state model exposed to signal consumers."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TriggerState(BaseModel):
    """Entry/exit signal pair for one asset.

    ``loading`` and ``error`` are distinct from a resolved False signal:
    loading means history has not arrived yet, error means the history is
    missing or shorter than the minimum candle count.
    """

    symbol: str
    entry: bool = False
    exit: bool = False
    take_profit: bool = False
    loading: bool = False
    error: bool = False
    price: float | None = None
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def pending(cls, symbol: str) -> "TriggerState":
        """State while history is being fetched."""
        return cls(symbol=symbol, loading=True)

    @classmethod
    def insufficient(cls, symbol: str, price: float | None = None) -> "TriggerState":
        """State when history is missing or too short to evaluate."""
        return cls(symbol=symbol, error=True, price=price)
