"""MACD/signal line crossover adapter."""

from __future__ import annotations

from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.indicators.macd import MACDIndicator, MACDResult
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.utils.math_utils import is_line_intersect
from consensus_backtester.utils.rolling_window import RollingWindow

from .adapter_configs import MACDAdapterConfig
from .base_adapter import BaseIndicatorAdapter


class MACDAdapter(BaseIndicatorAdapter):
    """Signal when the MACD line crosses its signal line inside the window.

    Buy when the oldest retained MACD value sits below its signal value and the
    two series intersect; Sell on the mirror condition.
    """

    kind = "macd"
    config: MACDAdapterConfig

    def __init__(self, config: MACDAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.macd = MACDIndicator(
            IndicatorConfig(
                indicator_name="macd",
                period=config.long_period,
                fast_period=config.short_period,
                slow_period=config.long_period,
                signal_period=config.signal_period,
            ),
            logger=self.logger,
        )
        self.records: RollingWindow[MACDResult] = RollingWindow(config.max_total_historical_data)

    @property
    def name(self) -> str:
        return (
            f"MACD_{self.config.short_period}_{self.config.long_period}"
            f"_{self.config.signal_period}"
        )

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return (self.macd,)

    def _consume(self, bar: PriceBar) -> None:
        self.macd.add_data_point(bar)
        if self.macd.is_initialized:
            result = self.macd.result()
            self.records.append(result)
            self._set_gauge("line", result.macd_line, line_type="macd")
            self._set_gauge("line", result.signal_line, line_type="signal")

    def _evaluate(self) -> StockAction:
        if len(self.records) < 2:
            return StockAction.WAIT

        oldest = self.records.oldest()
        macd_values = [record.macd_line for record in self.records]
        signal_values = [record.signal_line for record in self.records]
        if not is_line_intersect(signal_values, macd_values):
            return StockAction.WAIT
        if oldest.macd_line < oldest.signal_line:
            return StockAction.BUY
        if oldest.macd_line > oldest.signal_line:
            return StockAction.SELL
        return StockAction.WAIT
