"""Moving Average Convergence Divergence (MACD) indicator implementation."""

from dataclasses import dataclass

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.utils.math_utils import simple_mean

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


@dataclass(frozen=True, slots=True)
class MACDResult:
    """MACD line, signal line and histogram for one bar."""

    macd_line: float
    signal_line: float
    histogram: float


@IndicatorFactory.register("macd")
class MACDIndicator(BaseIndicator):
    """MACD momentum indicator.

    The history holds ``slow_period`` bars. When it first fills, the fast and slow
    EMAs are seeded with the simple means of the last ``fast_period`` and
    ``slow_period`` closes; afterwards both update incrementally. The signal line
    is an EMA of the MACD line, starting from 0.0 and updated on every bar from
    initialisation on, including the seed bar.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical MACD configuration."""
        return IndicatorConfig(
            indicator_name="macd",
            indicator_type="momentum",
            period=26,
            fast_period=12,
            slow_period=26,
            signal_period=9,
        )

    def _history_capacity(self) -> int:
        return self.config.slow_period

    @property
    def fast_ema(self) -> float:
        return self._fast_ema

    @property
    def slow_ema(self) -> float:
        return self._slow_ema

    @property
    def macd_line(self) -> float:
        return self._fast_ema - self._slow_ema

    @property
    def signal_line(self) -> float:
        return self._signal_line

    @property
    def histogram(self) -> float:
        return self.macd_line - self._signal_line

    def result(self) -> MACDResult:
        """Return the current MACD values as one record."""
        return MACDResult(
            macd_line=self.macd_line,
            signal_line=self._signal_line,
            histogram=self.histogram,
        )

    def _update(self, bar: PriceBar) -> None:
        fast, slow, signal = (
            self.config.fast_period,
            self.config.slow_period,
            self.config.signal_period,
        )
        if self._is_initialized:
            self._fast_ema = (bar.close - self._fast_ema) * (2.0 / (fast + 1)) + self._fast_ema
            self._slow_ema = (bar.close - self._slow_ema) * (2.0 / (slow + 1)) + self._slow_ema
        elif len(self.history) == slow:
            closes = [item.close for item in self.history]
            self._fast_ema = simple_mean(closes[-fast:])
            self._slow_ema = simple_mean(closes[-slow:])
            self._is_initialized = True
        else:
            return

        self._signal_line = (self.macd_line - self._signal_line) * (
            2.0 / (signal + 1)
        ) + self._signal_line

    def _reset_state(self) -> None:
        self._fast_ema = 0.0
        self._slow_ema = 0.0
        self._signal_line = 0.0

    def snapshot(self) -> dict[str, float]:
        return {
            "macd": self.macd_line,
            "signal": self._signal_line,
            "histogram": self.histogram,
        }
