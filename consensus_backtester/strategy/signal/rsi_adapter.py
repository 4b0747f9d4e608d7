"""RSI overbought/oversold reversal adapter."""

from __future__ import annotations

from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.indicators.rsi import RSIIndicator
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.utils.rolling_window import RollingWindow

from .adapter_configs import RSIAdapterConfig
from .base_adapter import BaseIndicatorAdapter


class RSIAdapter(BaseIndicatorAdapter):
    """Signal when RSI returns from an overbought or oversold excursion.

    Scanning backward from the value before the current one, the first value
    outside the neutral band decides: above the overbought threshold gives Sell
    when the current RSI is back at or below it, below the oversold threshold
    gives Buy when the current RSI is back at or above it. A value strictly inside
    the band stops the scan.
    """

    kind = "rsi"
    config: RSIAdapterConfig

    def __init__(self, config: RSIAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.rsi = RSIIndicator(
            IndicatorConfig(indicator_name="rsi", period=config.period),
            logger=self.logger,
        )
        self.values: RollingWindow[float] = RollingWindow(config.max_total_historical_data)

    @property
    def name(self) -> str:
        return (
            f"RSI_P({self.config.period})"
            f"_OBT({self.config.overbought_threshold:f})"
            f"_OST({self.config.oversold_threshold:f})"
            f"_L({self.config.max_total_historical_data})"
        )

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return (self.rsi,)

    def _consume(self, bar: PriceBar) -> None:
        self.rsi.add_data_point(bar)
        if self.rsi.is_initialized:
            self.values.append(self.rsi.value)
            self._set_gauge("value", self.rsi.value)

    def _evaluate(self) -> StockAction:
        if len(self.values) < 2 or not self.rsi.is_initialized:
            return StockAction.WAIT

        overbought = self.config.overbought_threshold
        oversold = self.config.oversold_threshold
        current = self.values[-1]
        history = self.values.to_list()

        for previous in reversed(history[:-1]):
            if previous > overbought:
                return StockAction.SELL if current <= overbought else StockAction.WAIT
            if previous < oversold:
                return StockAction.BUY if current >= oversold else StockAction.WAIT
            if oversold < previous < overbought:
                break
        return StockAction.WAIT
