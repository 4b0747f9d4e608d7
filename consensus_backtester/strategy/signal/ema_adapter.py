"""Multi-period EMA crossover adapter."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.ema import EMAIndicator
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.utils.math_utils import is_line_intersect
from consensus_backtester.utils.rolling_window import RollingWindow

from .adapter_configs import EMAAdapterConfig
from .base_adapter import BaseIndicatorAdapter


class EMAAdapter(BaseIndicatorAdapter):
    """Signal when the shortest EMA crosses every longer EMA in the same direction.

    Each period keeps a window of its EMA values, appended only once that EMA is
    initialised. The adapter waits until every EMA is initialised and the longest
    period holds at least two values.

    Buy: for every longer period, the shortest EMA started below it inside the
    window and the two lines crossed. Sell is the mirror image.
    """

    kind = "ema"
    config: EMAAdapterConfig

    def __init__(self, config: EMAAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.emas: dict[int, EMAIndicator] = {
            period: EMAIndicator.with_period(period, logger=self.logger)
            for period in config.periods
        }
        self.values: dict[int, RollingWindow[float]] = {
            period: RollingWindow(config.max_total_historical_data) for period in config.periods
        }

    @property
    def name(self) -> str:
        return "EMA_" + "_".join(str(period) for period in self.config.periods)

    @property
    def periods(self) -> tuple[int, ...]:
        return self.config.periods

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return tuple(self.emas.values())

    def _consume(self, bar: PriceBar) -> None:
        for ema in self.emas.values():
            ema.add_data_point(bar)
        for period, ema in self.emas.items():
            if ema.is_initialized:
                self.values[period].append(ema.value)
                self._set_gauge("value", ema.value, period=period)

    def _evaluate(self) -> StockAction:
        if not all(ema.is_initialized for ema in self.emas.values()):
            return StockAction.WAIT
        if len(self.values[self.periods[-1]]) < 2:
            return StockAction.WAIT

        if self._crossed(lambda short_start, long_start: short_start < long_start):
            return StockAction.BUY
        if self._crossed(lambda short_start, long_start: short_start > long_start):
            return StockAction.SELL
        return StockAction.WAIT

    def _crossed(self, started: Callable[[float, float], bool]) -> bool:
        shortest = self.values[self.periods[0]].to_list()
        for period in self.periods[1:]:
            longer = self.values[period].to_list()
            if not started(shortest[0], longer[0]):
                return False
            if not is_line_intersect(shortest, longer):
                return False
        return True
