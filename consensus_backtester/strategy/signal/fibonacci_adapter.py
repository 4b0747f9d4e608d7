"""Fibonacci retracement adapter."""

from __future__ import annotations

from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.fibonacci import FibonacciIndicator, FibonacciLevel
from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.utils.rolling_window import RollingWindow

from .adapter_configs import FibonacciAdapterConfig
from .base_adapter import BaseIndicatorAdapter


def within_zone(value: float, lower: float, upper: float, buffer: float) -> bool:
    """Check whether ``value`` lies in ``[lower - buffer, upper + buffer]``."""
    return lower - buffer <= value <= upper + buffer


class FibonacciAdapter(BaseIndicatorAdapter):
    """Signal a move back into the retracement range from one of its outer zones.

    The adapter waits unless the current close sits strictly between the 76.4 and
    23.6 levels. It then scans previous closes backward: a close near the top zone
    (0 to 23.6) gives Sell, a close near the bottom zone (76.4 to 100) gives Buy,
    and a close strictly inside the 23.6 to 76.4 range ends the scan.
    """

    kind = "fibonacci"
    config: FibonacciAdapterConfig

    def __init__(self, config: FibonacciAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.fibonacci = FibonacciIndicator(
            IndicatorConfig(indicator_name="fibonacci", period=config.size),
            logger=self.logger,
        )
        self.closes: RollingWindow[float] = RollingWindow(config.size)

    @property
    def name(self) -> str:
        return f"Fibonacci_{self.config.size}"

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return (self.fibonacci,)

    def _consume(self, bar: PriceBar) -> None:
        self.fibonacci.add_data_point(bar)
        self.closes.append(bar.close)
        if self.fibonacci.is_initialized:
            for level, value in self.fibonacci.levels.items():
                self._set_gauge("level", value, level_name=level.label)

    def _evaluate(self) -> StockAction:
        if not self.fibonacci.is_initialized or len(self.closes) == 0:
            return StockAction.WAIT

        level = self.fibonacci.level
        top = level(FibonacciLevel.ZERO)
        upper_key = level(FibonacciLevel.LEVEL_23_6)
        next_key = level(FibonacciLevel.LEVEL_38_2)
        lower_key = level(FibonacciLevel.LEVEL_76_4)
        bottom = level(FibonacciLevel.HUNDRED)

        current = self.closes[-1]
        if not lower_key < current < upper_key:
            return StockAction.WAIT

        top_buffer = min(abs(top - upper_key), abs(next_key - upper_key)) * 0.25
        bottom_buffer = abs(lower_key - bottom) * 0.25

        for previous in reversed(self.closes.to_list()[:-1]):
            if within_zone(previous, upper_key, top, top_buffer):
                return StockAction.SELL
            if within_zone(previous, bottom, lower_key, bottom_buffer):
                return StockAction.BUY
            if lower_key < previous < upper_key:
                break
        return StockAction.WAIT
