"""Tests for the PriceBar value type."""

import dataclasses

import pytest

from consensus_backtester.data.price_bar import PriceBar


class TestPriceBar:
    """Test PriceBar helpers."""

    def test_midpoint(self) -> None:
        """Midpoint is the average of high and low."""
        bar = PriceBar(time=1, open=10.0, high=12.0, low=8.0, close=11.0)

        assert bar.midpoint == 10.0
        assert bar.volume == 0.0

    def test_to_dict(self) -> None:
        """to_dict exposes every field."""
        bar = PriceBar(time=5, open=1.0, high=2.0, low=0.5, close=1.5, volume=100.0)

        assert bar.to_dict() == {
            "time": 5,
            "open": 1.0,
            "high": 2.0,
            "low": 0.5,
            "close": 1.5,
            "volume": 100.0,
        }

    def test_is_frozen(self) -> None:
        """Bars are immutable."""
        bar = PriceBar(time=1, open=1.0, high=1.0, low=1.0, close=1.0)

        with pytest.raises(dataclasses.FrozenInstanceError):
            bar.close = 2.0  # type: ignore[misc]
