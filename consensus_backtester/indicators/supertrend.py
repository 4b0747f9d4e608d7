"""SuperTrend indicator implementation."""

from consensus_backtester.core.errors import InvalidInputError
from consensus_backtester.data.price_bar import PriceBar

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


def true_range(bar: PriceBar, previous_close: float) -> float:
    """Largest of the bar's range and its gaps from the previous close."""
    return max(
        bar.high - bar.low,
        abs(bar.high - previous_close),
        abs(bar.low - previous_close),
    )


@IndicatorFactory.register("supertrend")
class SuperTrendIndicator(BaseIndicator):
    """SuperTrend trend-following indicator.

    ATR is the sum of the true ranges of the consecutive bar pairs held in the
    ``period``-bar window, divided by ``period``. The trend starts down. In an
    up-trend the line is ``mid - multiplier * ATR`` and a close below it flips the
    trend down; in a down-trend the line is ``mid + multiplier * ATR`` and a close
    above it flips the trend up. ``mid`` is the latest bar's high/low midpoint.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical SuperTrend configuration."""
        return IndicatorConfig(
            indicator_name="supertrend",
            indicator_type="trend",
            period=7,
            atr_multiplier=3.0,
        )

    @property
    def multiplier(self) -> float:
        return self.config.atr_multiplier

    @property
    def atr(self) -> float:
        return self._atr

    @property
    def line(self) -> float:
        """Current SuperTrend line value."""
        return self._line

    @property
    def is_up_trend(self) -> bool:
        return self._is_up_trend

    def _validate_bar(self, bar: PriceBar) -> None:
        if min(bar.open, bar.high, bar.low, bar.close) <= 0:
            raise InvalidInputError(
                "Bar contains non-positive prices",
                component=self.name,
                time=bar.time,
            )

    def _update(self, bar: PriceBar) -> None:
        if len(self.history) < self.config.period:
            return
        self._is_initialized = True

        bars = self.history.to_list()
        ranges = [true_range(current, previous.close) for previous, current in zip(bars, bars[1:])]
        self._atr = sum(ranges) / self.config.period

        if self._is_up_trend:
            self._line = bar.midpoint - self.multiplier * self._atr
            if bar.close < self._line:
                self._is_up_trend = False
        else:
            self._line = bar.midpoint + self.multiplier * self._atr
            if bar.close > self._line:
                self._is_up_trend = True

    def _reset_state(self) -> None:
        self._atr = 0.0
        self._line = 0.0
        self._is_up_trend = False

    def snapshot(self) -> dict[str, float]:
        return {
            "line": self._line,
            "atr": self._atr,
            "up_trend": 1.0 if self._is_up_trend else 0.0,
        }
