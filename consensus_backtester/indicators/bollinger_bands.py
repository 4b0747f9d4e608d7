"""Bollinger Bands indicator implementation.

This module provides the Bollinger Bands volatility indicator: a simple moving
average of the closes with bands placed a fixed number of population standard
deviations above and below it.
"""

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.utils.math_utils import population_std, simple_mean

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


@IndicatorFactory.register("bollinger")
class BollingerBandsIndicator(BaseIndicator):
    """Bollinger Bands volatility indicator.

    Initialised once ``period`` bars have been seen; every bar after that
    recomputes the bands over the trailing ``period`` closes.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical Bollinger Bands configuration."""
        return IndicatorConfig(
            indicator_name="bollinger",
            indicator_type="volatility",
            period=20,
            standard_deviations=2.0,
        )

    @property
    def middle_band(self) -> float:
        return self._middle

    @property
    def upper_band(self) -> float:
        return self._upper

    @property
    def lower_band(self) -> float:
        return self._lower

    @property
    def standard_deviation(self) -> float:
        return self._std

    @property
    def bandwidth(self) -> float:
        """Distance between the bands relative to the middle band."""
        if self._middle == 0:
            return 0.0
        return (self._upper - self._lower) / self._middle

    def _update(self, bar: PriceBar) -> None:
        if len(self.history) < self.config.period:
            return
        closes = [item.close for item in self.history]
        self._middle = simple_mean(closes)
        self._std = population_std(closes)
        width = self.config.standard_deviations * self._std
        self._upper = self._middle + width
        self._lower = self._middle - width
        self._is_initialized = True

    def _reset_state(self) -> None:
        self._middle = 0.0
        self._upper = 0.0
        self._lower = 0.0
        self._std = 0.0

    def snapshot(self) -> dict[str, float]:
        return {
            "upper": self._upper,
            "middle": self._middle,
            "lower": self._lower,
        }
