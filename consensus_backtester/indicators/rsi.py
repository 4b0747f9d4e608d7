"""Relative Strength Index (RSI) indicator implementation."""

from consensus_backtester.data.price_bar import PriceBar

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


@IndicatorFactory.register("rsi")
class RSIIndicator(BaseIndicator):
    """Relative Strength Index momentum oscillator.

    The history holds ``period`` bars. Once it is full the average gain and loss
    are seeded from the ``period - 1`` close-to-close changes inside the window.
    Each later bar applies Wilder smoothing:
    ``avg = (avg * (period - 1) + change) / period``.

    The RSI is 100 while the average loss is zero.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical RSI configuration."""
        return IndicatorConfig(indicator_name="rsi", indicator_type="momentum", period=14)

    @property
    def period(self) -> int:
        return self.config.period

    @property
    def value(self) -> float:
        """Current RSI value in [0, 100] (0.0 until initialised)."""
        return self._rsi

    @property
    def average_gain(self) -> float:
        return self._avg_gain

    @property
    def average_loss(self) -> float:
        return self._avg_loss

    def _update(self, bar: PriceBar) -> None:
        if self._is_initialized:
            change = bar.close - self.history[-2].close
            gain = max(change, 0.0)
            loss = max(-change, 0.0)
            self._avg_gain = (self._avg_gain * (self.period - 1) + gain) / self.period
            self._avg_loss = (self._avg_loss * (self.period - 1) + loss) / self.period
        elif len(self.history) == self.period:
            self._seed_averages()
            self._is_initialized = True
        else:
            return
        self._rsi = self._compute_rsi()

    def _seed_averages(self) -> None:
        closes = [item.close for item in self.history]
        changes = [current - previous for previous, current in zip(closes, closes[1:])]
        self._avg_gain = sum(change for change in changes if change > 0) / len(changes)
        self._avg_loss = sum(-change for change in changes if change < 0) / len(changes)

    def _compute_rsi(self) -> float:
        if self._avg_loss == 0:
            return 100.0
        relative_strength = self._avg_gain / self._avg_loss
        return 100.0 - 100.0 / (1.0 + relative_strength)

    def _reset_state(self) -> None:
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._rsi = 0.0

    def snapshot(self) -> dict[str, float]:
        return {
            "rsi": self._rsi,
            "avg_gain": self._avg_gain,
            "avg_loss": self._avg_loss,
        }
