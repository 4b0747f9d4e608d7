"""Classic floor-trader pivot point indicator."""

from dataclasses import asdict, dataclass

from consensus_backtester.data.price_bar import PriceBar

from .base_indicator import BaseIndicator, IndicatorFactory
from .indicator_configs import IndicatorConfig


@dataclass(frozen=True, slots=True)
class PivotLevels:
    """Pivot point with its three support and three resistance levels."""

    pivot: float = 0.0
    support1: float = 0.0
    support2: float = 0.0
    support3: float = 0.0
    resistance1: float = 0.0
    resistance2: float = 0.0
    resistance3: float = 0.0

    @classmethod
    def from_bar(cls, bar: PriceBar) -> "PivotLevels":
        """Compute the levels implied by ``bar``'s high, low and close."""
        high, low, close = bar.high, bar.low, bar.close
        pivot = (high + low + close) / 3
        return cls(
            pivot=pivot,
            support1=2 * pivot - high,
            support2=pivot - (high - low),
            support3=low - 2 * (high - pivot),
            resistance1=2 * pivot - low,
            resistance2=pivot + (high - low),
            resistance3=high + 2 * (pivot - low),
        )


@IndicatorFactory.register("pivot_point")
class PivotPointIndicator(BaseIndicator):
    """Support/resistance levels derived from the previous bar.

    The first bar only becomes the reference bar. From the second bar on, the
    levels are recomputed from the bar before the current one.
    """

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the canonical pivot point configuration."""
        return IndicatorConfig(
            indicator_name="pivot_point",
            indicator_type="support_resistance",
            period=2,
        )

    def _history_capacity(self) -> int:
        return 2

    @property
    def previous_bar(self) -> PriceBar | None:
        """Bar the current levels were derived from."""
        if len(self.history) < 2:
            return None
        return self.history[-2]

    @property
    def levels(self) -> PivotLevels:
        return self._levels

    def _update(self, bar: PriceBar) -> None:
        previous = self.previous_bar
        if previous is None:
            return
        self._levels = PivotLevels.from_bar(previous)
        self._is_initialized = True

    def _reset_state(self) -> None:
        self._levels = PivotLevels()

    def snapshot(self) -> dict[str, float]:
        return asdict(self._levels)
