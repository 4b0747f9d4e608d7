"""Fibonacci retracement indicator implementation."""

from enum import Enum

from consensus_backtester.data.price_bar import PriceBar

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


class FibonacciLevel(Enum):
    """Retracement ratios measured down from the window high."""

    ZERO = 0.0
    LEVEL_23_6 = 0.236
    LEVEL_38_2 = 0.382
    LEVEL_50 = 0.5
    LEVEL_61_8 = 0.618
    LEVEL_76_4 = 0.764
    HUNDRED = 1.0

    @property
    def label(self) -> str:
        return f"{self.value * 100:g}"


@IndicatorFactory.register("fibonacci")
class FibonacciIndicator(BaseIndicator):
    """Fibonacci retracement levels over a rolling window.

    Once ``period`` bars are held, the window high is the largest High and the
    window low the smallest Low. Level ``r`` sits at ``high - r * (high - low)``,
    so the 0 level equals the high and the 100 level equals the low.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical Fibonacci configuration."""
        return IndicatorConfig(
            indicator_name="fibonacci",
            indicator_type="support_resistance",
            period=20,
        )

    @property
    def size(self) -> int:
        return self.config.period

    @property
    def high(self) -> float:
        return self._high

    @property
    def low(self) -> float:
        return self._low

    @property
    def levels(self) -> dict[FibonacciLevel, float]:
        """Copy of the current retracement levels."""
        return dict(self._levels)

    def level(self, level: FibonacciLevel) -> float:
        return self._levels[level]

    def _update(self, bar: PriceBar) -> None:
        if len(self.history) < self.size:
            return
        self._high = max(item.high for item in self.history)
        self._low = min(item.low for item in self.history)
        price_range = self._high - self._low
        for level in FibonacciLevel:
            self._levels[level] = self._high - level.value * price_range
        self._levels[FibonacciLevel.ZERO] = self._high
        self._levels[FibonacciLevel.HUNDRED] = self._low
        self._is_initialized = True

    def _reset_state(self) -> None:
        self._high = 0.0
        self._low = 0.0
        self._levels = {level: 0.0 for level in FibonacciLevel}

    def snapshot(self) -> dict[str, float]:
        return {
            f"level_{level.label.replace('.', '_')}": value for level, value in self._levels.items()
        }
