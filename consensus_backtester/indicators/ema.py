"""Exponential Moving Average (EMA) indicator implementation."""

import logging

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.utils.math_utils import simple_mean

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


@IndicatorFactory.register("ema")
class EMAIndicator(BaseIndicator):
    """Exponential Moving Average trend indicator.

    The average is seeded with the simple mean of the first ``period`` closes and
    then follows ``value = (close - value) * 2 / (period + 1) + value``.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical EMA configuration."""
        return IndicatorConfig(indicator_name="ema", indicator_type="trend", period=12)

    @classmethod
    def with_period(cls, period: int, logger: logging.Logger | None = None) -> "EMAIndicator":
        """Build an EMA named after its period (``ema_<period>``)."""
        config = IndicatorConfig(
            indicator_name=f"ema_{period}",
            factory_name="ema",
            indicator_type="trend",
            period=period,
        )
        return cls(config, logger=logger)

    @property
    def period(self) -> int:
        return self.config.period

    @property
    def multiplier(self) -> float:
        """Smoothing factor applied to each new close."""
        return 2.0 / (self.period + 1)

    @property
    def value(self) -> float:
        """Current EMA value (0.0 until initialised)."""
        return self._value

    def _update(self, bar: PriceBar) -> None:
        if self._is_initialized:
            self._value = (bar.close - self._value) * self.multiplier + self._value
        elif len(self.history) == self.period:
            self._value = simple_mean([item.close for item in self.history])
            self._is_initialized = True

    def _reset_state(self) -> None:
        self._value = 0.0

    def snapshot(self) -> dict[str, float]:
        return {"value": self._value}
