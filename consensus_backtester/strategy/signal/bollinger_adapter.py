"""Bollinger Bands re-entry adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.bollinger_bands import BollingerBandsIndicator
from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.utils.rolling_window import RollingWindow

from .adapter_configs import BollingerAdapterConfig
from .base_adapter import BaseIndicatorAdapter


@dataclass(frozen=True, slots=True)
class BandRecord:
    """Close and band values for one bar."""

    close: float
    upper: float
    lower: float


class BollingerAdapter(BaseIndicatorAdapter):
    """Signal when price comes back inside the bands after touching or breaking one.

    Buy when the previous close was at or below its lower band and the current
    close is above the current lower band. Sell when the previous close was at or
    above its upper band and the current close is below the current upper band.
    """

    kind = "bollinger"
    config: BollingerAdapterConfig

    def __init__(self, config: BollingerAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.bands = BollingerBandsIndicator(
            IndicatorConfig(
                indicator_name="bollinger",
                period=config.period,
                standard_deviations=config.standard_deviations,
            ),
            logger=self.logger,
        )
        self.records: RollingWindow[BandRecord] = RollingWindow(config.max_total_historical_data)

    @property
    def name(self) -> str:
        return f"Bollinger_{self.config.period}_{self.config.standard_deviations:.2f}"

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return (self.bands,)

    def _consume(self, bar: PriceBar) -> None:
        self.bands.add_data_point(bar)
        if self.bands.is_initialized:
            self.records.append(
                BandRecord(
                    close=bar.close,
                    upper=self.bands.upper_band,
                    lower=self.bands.lower_band,
                )
            )
            self._set_gauge("band", self.bands.upper_band, band="upper")
            self._set_gauge("band", self.bands.lower_band, band="lower")

    def _evaluate(self) -> StockAction:
        if len(self.records) < 2:
            return StockAction.WAIT

        previous, current = self.records[-2], self.records[-1]
        if previous.close <= previous.lower and current.close > current.lower:
            return StockAction.BUY
        if previous.close >= previous.upper and current.close < current.upper:
            return StockAction.SELL
        return StockAction.WAIT
