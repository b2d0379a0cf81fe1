"""Per-asset trigger evaluation.

State machine, re-evaluated on every data change:
- Loading: history not fetched yet -> loading=True
- Insufficient: fewer than MIN_CANDLES candles -> error=True
- Ready: the family rule runs against the full history
"""

import logging

from core.models.candle import CandleSeries
from core.models.config import AssetTriggerConfig
from core.models.signal import TriggerState
from core.strategy.registry import get_rule

logger = logging.getLogger(__name__)

MIN_CANDLES = 20


def evaluate_triggers(
    config: AssetTriggerConfig,
    series: CandleSeries | None,
    loading: bool = False,
) -> TriggerState:
    """
    Evaluate one asset's entry/exit signals.

    Args:
        config: Static trigger configuration of the asset
        series: Candle history, or None if none has been received
        loading: True while the history request is in flight

    Returns:
        TriggerState for the asset
    """
    if loading:
        return TriggerState.pending(config.symbol)

    if series is None or len(series) < MIN_CANDLES:
        price = series.last.close if series is not None and series.last else None
        return TriggerState.insufficient(config.symbol, price=price)

    closes = series.closes()
    result = get_rule(config.family)(closes, series.highs(), series.lows())

    logger.debug(
        "%s %s: close=%s entry=%s exit=%s tp=%s",
        config.symbol, config.family.value, closes[-1],
        result.entry, result.exit, result.take_profit,
    )

    return TriggerState(
        symbol=config.symbol,
        entry=result.entry,
        exit=result.exit,
        take_profit=result.take_profit,
        price=closes[-1],
    )
