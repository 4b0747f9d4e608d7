"""SuperTrend direction flip adapter."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.indicators.supertrend import SuperTrendIndicator
from consensus_backtester.signal.signal_types import StockAction

from .adapter_configs import SuperTrendAdapterConfig
from .base_adapter import BaseIndicatorAdapter


class Readiness(IntEnum):
    """Signalling readiness of the SuperTrend adapter."""

    NOT_INITIALIZED = 0
    INITIALIZED = 1
    START_SIGNALING = 2


class SuperTrendAdapter(BaseIndicatorAdapter):
    """Signal on SuperTrend direction changes.

    The first initialised update only records the direction. From the next update
    on, a down-to-up flip gives Buy and an up-to-down flip gives Sell.
    """

    kind = "supertrend"
    config: SuperTrendAdapterConfig

    def __init__(self, config: SuperTrendAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.supertrend = SuperTrendIndicator(
            IndicatorConfig(
                indicator_name="supertrend",
                period=config.period,
                atr_multiplier=config.multiplier,
            ),
            logger=self.logger,
        )
        self.readiness = Readiness.NOT_INITIALIZED
        self.previous_up_trend = False
        self.current_up_trend = False

    @property
    def name(self) -> str:
        return f"SuperTrend_{self.config.period}_{self.config.multiplier:.2f}"

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return (self.supertrend,)

    def _consume(self, bar: PriceBar) -> None:
        self.supertrend.add_data_point(bar)
        if not self.supertrend.is_initialized:
            return

        if self.readiness is Readiness.NOT_INITIALIZED:
            self.readiness = Readiness.INITIALIZED
        else:
            self.previous_up_trend = self.current_up_trend
            self.readiness = Readiness.START_SIGNALING
        self.current_up_trend = self.supertrend.is_up_trend

        self._set_gauge("direction", 1.0 if self.current_up_trend else 0.0)
        self._set_gauge("line", self.supertrend.line)

    def _evaluate(self) -> StockAction:
        if self.readiness is not Readiness.START_SIGNALING:
            return StockAction.WAIT
        if not self.previous_up_trend and self.current_up_trend:
            return StockAction.BUY
        if self.previous_up_trend and not self.current_up_trend:
            return StockAction.SELL
        return StockAction.WAIT
