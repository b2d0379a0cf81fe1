"""Candle (OHLC) data models."""

from pydantic import BaseModel, ConfigDict, Field


class Candle(BaseModel):
    """One OHLC record for a fixed interval, keyed by its open time."""

    model_config = ConfigDict(frozen=True)

    time: int  # unix seconds, interval start
    open: float
    high: float
    low: float
    close: float

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """Check if this is a bearish (red) candle."""
        return self.close < self.open

    def merge(self, tick: "Candle") -> "Candle":
        """Overwrite OHLC with a live tick, keeping this candle's time."""
        return self.model_copy(
            update={
                "open": tick.open,
                "high": tick.high,
                "low": tick.low,
                "close": tick.close,
            }
        )


class CandleSeries(BaseModel):
    """Time-ordered candles for one asset and interval.

    Candles are ascending by time with no duplicate timestamps. The last
    candle may still be open and is revised in place by live ticks.
    """

    symbol: str
    interval: str
    candles: list[Candle] = Field(default_factory=list)
    max_size: int | None = None

    @classmethod
    def from_candles(
        cls,
        symbol: str,
        interval: str,
        candles: list[Candle],
        max_size: int | None = None,
    ) -> "CandleSeries":
        """Build a series from unordered history, dropping duplicate times.

        When two records share a timestamp the later one in the input wins.
        """
        by_time: dict[int, Candle] = {}
        for candle in candles:
            by_time[candle.time] = candle

        ordered = [by_time[t] for t in sorted(by_time)]
        if max_size is not None and len(ordered) > max_size:
            ordered = ordered[-max_size:]
        return cls(symbol=symbol, interval=interval, candles=ordered, max_size=max_size)

    def apply_tick(self, tick: Candle) -> bool:
        """Merge a live tick into the series.

        - same time as the last candle: OHLC overwritten, length unchanged
        - later time: appended as a new candle
        - empty series or older time: dropped

        Returns:
            True if the series changed
        """
        if not self.candles:
            return False

        last = self.candles[-1]
        if tick.time == last.time:
            self.candles[-1] = last.merge(tick)
            return True
        if tick.time < last.time:
            return False

        self.candles.append(tick)
        if self.max_size is not None and len(self.candles) > self.max_size:
            self.candles = self.candles[-self.max_size :]
        return True

    @property
    def last(self) -> Candle | None:
        return self.candles[-1] if self.candles else None

    def closes(self) -> list[float]:
        """Get list of close prices."""
        return [c.close for c in self.candles]

    def highs(self) -> list[float]:
        """Get list of high prices."""
        return [c.high for c in self.candles]

    def lows(self) -> list[float]:
        """Get list of low prices."""
        return [c.low for c in self.candles]

    def __len__(self) -> int:
        return len(self.candles)
