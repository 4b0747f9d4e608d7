"""Unit tests for the Bollinger Bands indicator."""

import pytest

from consensus_backtester.indicators.bollinger_bands import BollingerBandsIndicator
from consensus_backtester.indicators.indicator_configs import IndicatorConfig


class TestBollingerBandsIndicator:
    """Test band computation."""

    def test_bands_use_population_std(self, closes_to_bars) -> None:
        """Bands sit two population standard deviations from the mean."""
        bands = BollingerBandsIndicator(IndicatorConfig(indicator_name="bollinger", period=3))
        bands.add_data_points(closes_to_bars([1.0, 2.0, 3.0]))
        sigma = (2.0 / 3.0) ** 0.5

        assert bands.is_initialized
        assert bands.middle_band == pytest.approx(2.0)
        assert bands.standard_deviation == pytest.approx(sigma)
        assert bands.upper_band == pytest.approx(2.0 + 2 * sigma)
        assert bands.lower_band == pytest.approx(2.0 - 2 * sigma)
        assert bands.bandwidth == pytest.approx(4 * sigma / 2.0)

    def test_window_rolls(self, closes_to_bars) -> None:
        """Only the trailing period closes are used."""
        bands = BollingerBandsIndicator(IndicatorConfig(indicator_name="bollinger", period=2))
        bands.add_data_points(closes_to_bars([100.0, 4.0, 6.0]))

        assert bands.middle_band == pytest.approx(5.0)
        assert bands.upper_band == pytest.approx(7.0)
        assert bands.lower_band == pytest.approx(3.0)

    def test_not_initialised(self, closes_to_bars) -> None:
        """Bands read zero before period bars."""
        bands = BollingerBandsIndicator(BollingerBandsIndicator.default_config())
        bands.add_data_points(closes_to_bars([1.0] * 19))

        assert not bands.is_initialized
        assert bands.snapshot() == {"upper": 0.0, "middle": 0.0, "lower": 0.0}
        assert bands.bandwidth == 0.0
