"""Unit tests for the MACD indicator."""

import pytest

from consensus_backtester.indicators.indicator_configs import IndicatorConfig
from consensus_backtester.indicators.macd import MACDIndicator, MACDResult


def _macd() -> MACDIndicator:
    return MACDIndicator(
        IndicatorConfig(indicator_name="macd", fast_period=2, slow_period=3, signal_period=2)
    )


class TestMACDIndicator:
    """Test MACD seeding and incremental updates."""

    def test_waits_for_slow_period(self, closes_to_bars) -> None:
        """Nothing is computed before slow_period bars."""
        macd = _macd()
        macd.add_data_points(closes_to_bars([1.0, 2.0]))

        assert not macd.is_initialized
        assert macd.result() == MACDResult(0.0, 0.0, 0.0)

    def test_seed_bar(self, closes_to_bars) -> None:
        """The seed uses simple means and updates the signal line once."""
        macd = _macd()
        macd.add_data_points(closes_to_bars([1.0, 2.0, 3.0]))

        assert macd.is_initialized
        assert macd.fast_ema == pytest.approx(2.5)
        assert macd.slow_ema == pytest.approx(2.0)
        assert macd.macd_line == pytest.approx(0.5)
        assert macd.signal_line == pytest.approx(1.0 / 3.0)

    def test_incremental_update(self, closes_to_bars) -> None:
        """After the seed every EMA updates with its own multiplier."""
        macd = _macd()
        macd.add_data_points(closes_to_bars([1.0, 2.0, 3.0, 4.0]))

        assert macd.fast_ema == pytest.approx(3.5)
        assert macd.slow_ema == pytest.approx(3.0)
        assert macd.signal_line == pytest.approx(4.0 / 9.0)
        assert macd.histogram == pytest.approx(0.5 - 4.0 / 9.0)

    def test_history_capacity_is_slow_period(self, closes_to_bars) -> None:
        """History is bounded by the slow period."""
        macd = _macd()
        macd.add_data_points(closes_to_bars([1.0, 2.0, 3.0, 4.0, 5.0]))

        assert len(macd.history) == 3
