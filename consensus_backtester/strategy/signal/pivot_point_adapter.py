"""Pivot point breakout adapter."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.indicators.pivot_point import PivotLevels, PivotPointIndicator
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.utils.math_utils import is_within_band
from consensus_backtester.utils.rolling_window import RollingWindow

from .adapter_configs import PivotPointAdapterConfig
from .base_adapter import BaseIndicatorAdapter

RECENT_TEST_BARS = 5


def level_neighbours(levels: PivotLevels) -> dict[str, tuple[float, float, float]]:
    """Return ``(lower, level, upper)`` triples for each support/resistance level.

    The outermost levels have no neighbour beyond them; 0 stands in for it.
    """
    return {
        "resistance1": (levels.pivot, levels.resistance1, levels.resistance2),
        "resistance2": (levels.resistance1, levels.resistance2, levels.resistance3),
        "resistance3": (levels.resistance2, levels.resistance3, 0.0),
        "support1": (levels.support2, levels.support1, levels.pivot),
        "support2": (levels.support3, levels.support2, levels.support1),
        "support3": (0.0, levels.support3, levels.support2),
    }


class PivotPointAdapter(BaseIndicatorAdapter):
    """Signal a breakout through a level that recent closes kept testing.

    A close "tests" a level when it lands inside the level's tolerance band: a
    quarter of the distance to the nearer neighbouring level on either side. Over
    the last five bars the tests per level are counted. Buy when the current bar
    straddles a resistance level (checked R3, R2, R1) tested at least
    ``threshold`` times and closes above it; Sell on the mirror for supports.
    """

    kind = "pivot_point"
    config: PivotPointAdapterConfig

    def __init__(self, config: PivotPointAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.pivot_point = PivotPointIndicator(
            IndicatorConfig(indicator_name="pivot_point", period=2),
            logger=self.logger,
        )
        self.bars: RollingWindow[PriceBar] = RollingWindow(config.max_total_historical_data)

    @property
    def name(self) -> str:
        return f"PivotPoint_{self.config.max_total_historical_data}_{self.config.threshold}"

    @property
    def levels(self) -> PivotLevels:
        return self.pivot_point.levels

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        return (self.pivot_point,)

    def _consume(self, bar: PriceBar) -> None:
        self.pivot_point.add_data_point(bar)
        self.bars.append(bar)
        if self.pivot_point.is_initialized:
            for level_name, value in asdict(self.levels).items():
                self._set_gauge("levels", value, level_type=level_name)

    def recent_tests(self) -> dict[str, int]:
        """Count how many of the last five closes tested each level."""
        neighbours = level_neighbours(self.levels)
        counts = {level_name: 0 for level_name in neighbours}
        for bar in self.bars[-RECENT_TEST_BARS:]:
            for level_name, (lower, middle, upper) in neighbours.items():
                if is_within_band(bar.close, lower, middle, upper):
                    counts[level_name] += 1
        return counts

    def _evaluate(self) -> StockAction:
        bar = self.current_bar
        if bar is None or len(self.bars) == 0 or not self.pivot_point.is_initialized:
            return StockAction.WAIT

        levels = self.levels
        tests = self.recent_tests()
        threshold = self.config.threshold

        for level_name in ("resistance3", "resistance2", "resistance1"):
            level = getattr(levels, level_name)
            if tests[level_name] >= threshold and bar.low < level < bar.high and bar.close > level:
                return StockAction.BUY

        for level_name in ("support3", "support2", "support1"):
            level = getattr(levels, level_name)
            if tests[level_name] >= threshold and bar.low < level < bar.high and bar.close < level:
                return StockAction.SELL

        return StockAction.WAIT
