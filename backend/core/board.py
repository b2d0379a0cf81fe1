"""Per-asset trigger state board.

Holds, for every configured symbol, the owned candle series plus the
derived TriggerState. Mutations go through load_history(), mark_failed(),
mark_loading() and apply_tick(); each one re-evaluates that asset
synchronously so state() is always a plain read. Assets never share
mutable state, so a failure on one leaves the others untouched.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from core.models.candle import Candle, CandleSeries
from core.models.config import AssetTriggerConfig
from core.models.signal import TriggerState
from core.strategy import evaluate_triggers

logger = logging.getLogger(__name__)

StateCallback = Callable[[TriggerState], None]


@dataclass
class AssetSlot:
    """Owned state of one tracked asset."""

    config: AssetTriggerConfig
    series: CandleSeries | None = None
    loading: bool = True
    state: TriggerState = field(init=False)

    def __post_init__(self) -> None:
        self.state = TriggerState.pending(self.config.symbol)


class TriggerBoard:
    """State container keyed by symbol."""

    def __init__(self, configs: list[AssetTriggerConfig]):
        self._slots: dict[str, AssetSlot] = {}
        for config in configs:
            if config.symbol in self._slots:
                raise ValueError(f"Duplicate asset symbol: {config.symbol}")
            self._slots[config.symbol] = AssetSlot(config=config)
        self._callbacks: list[StateCallback] = []

    @property
    def symbols(self) -> list[str]:
        return list(self._slots)

    def config(self, symbol: str) -> AssetTriggerConfig:
        return self._slots[symbol].config

    def configs(self) -> list[AssetTriggerConfig]:
        return [slot.config for slot in self._slots.values()]

    def series(self, symbol: str) -> CandleSeries | None:
        return self._slots[symbol].series

    def on_change(self, callback: StateCallback) -> None:
        """Register callback for state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_change(self, callback: StateCallback) -> None:
        """Unregister callback for state changes."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mark_loading(self, symbol: str) -> None:
        """Flag an asset as waiting for history."""
        slot = self._slots[symbol]
        slot.loading = True
        self._recompute(slot)

    def load_history(self, symbol: str, candles: list[Candle]) -> TriggerState:
        """Replace an asset's series with freshly fetched history."""
        slot = self._slots[symbol]
        slot.series = CandleSeries.from_candles(
            symbol, slot.config.interval, candles
        )
        slot.loading = False
        logger.info("%s: loaded %d candles", symbol, len(slot.series))
        return self._recompute(slot)

    def mark_failed(self, symbol: str) -> TriggerState:
        """Record a failed history fetch; the asset reports error until reloaded."""
        slot = self._slots[symbol]
        slot.series = None
        slot.loading = False
        return self._recompute(slot)

    def apply_tick(self, symbol: str, tick: Candle) -> bool:
        """Merge a live tick into an asset's series.

        Ticks for unknown symbols, or arriving before history has loaded,
        are dropped.

        Returns:
            True if the series changed and the asset was re-evaluated
        """
        slot = self._slots.get(symbol)
        if slot is None or slot.series is None:
            return False
        if not slot.series.apply_tick(tick):
            return False
        self._recompute(slot)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def state(self, symbol: str) -> TriggerState:
        """Current trigger state of an asset.

        Raises:
            KeyError: If the symbol is not configured.
        """
        return self._slots[symbol].state

    def states(self) -> list[TriggerState]:
        """Current trigger states in configuration order."""
        return [slot.state for slot in self._slots.values()]

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._slots

    def _recompute(self, slot: AssetSlot) -> TriggerState:
        slot.state = evaluate_triggers(slot.config, slot.series, loading=slot.loading)
        for callback in self._callbacks:
            try:
                callback(slot.state)
            except Exception as e:
                logger.error(f"Trigger state callback error: {e}")
        return slot.state
