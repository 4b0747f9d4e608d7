"""Tests for the RSI reversal adapter."""

import pytest

from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.strategy.signal import RSIAdapter, RSIAdapterConfig


@pytest.fixture
def rsi_adapter() -> RSIAdapter:
    return RSIAdapter(RSIAdapterConfig(period=2))


class TestRSIAdapter:
    """Test RSI reversal signals."""

    def test_name_format(self) -> None:
        """The name carries every parameter."""
        expected = "RSI_P(14)_OBT(70.000000)_OST(30.000000)_L(10)"
        assert RSIAdapter(RSIAdapterConfig()).name == expected

    def test_buy_after_oversold(self, rsi_adapter, closes_to_bars) -> None:
        """Returning above oversold after an oversold reading gives BUY."""
        signals = []
        for bar in closes_to_bars([10.0, 9.0, 8.0, 12.0]):
            rsi_adapter.add_data_point(bar)
            signals.append(rsi_adapter.get_signal())

        assert rsi_adapter.values.to_list() == pytest.approx([0.0, 0.0, 80.0])
        assert signals == [StockAction.WAIT] * 3 + [StockAction.BUY]

    def test_sell_after_overbought(self, rsi_adapter, closes_to_bars) -> None:
        """Falling back below overbought after an overbought reading gives SELL."""
        for bar in closes_to_bars([10.0, 11.0, 12.0, 8.0]):
            rsi_adapter.add_data_point(bar)

        assert rsi_adapter.values.to_list() == pytest.approx([100.0, 100.0, 20.0])
        assert rsi_adapter.get_signal() is StockAction.SELL

    def test_neutral_value_stops_scan(self, rsi_adapter, closes_to_bars) -> None:
        """A neutral reading between the excursion and now suppresses the signal."""
        for bar in closes_to_bars([10.0, 9.0, 8.0]):
            rsi_adapter.add_data_point(bar)
        rsi_adapter.values.clear()
        for value in (20.0, 50.0, 60.0):
            rsi_adapter.values.append(value)

        assert rsi_adapter.get_signal() is StockAction.WAIT

    def test_still_oversold(self, rsi_adapter, closes_to_bars) -> None:
        """Staying oversold is not a reversal."""
        for bar in closes_to_bars([10.0, 9.0, 8.0]):
            rsi_adapter.add_data_point(bar)

        assert rsi_adapter.get_signal() is StockAction.WAIT

    def test_gauge_reports_value(self, memory_monitor, closes_to_bars) -> None:
        """The latest RSI value is published as a gauge."""
        adapter = RSIAdapter(RSIAdapterConfig(period=2), monitor=memory_monitor)
        for bar in closes_to_bars([10.0, 11.0]):
            adapter.add_data_point(bar)

        assert memory_monitor.gauge_value("rsi_value", adaptor_name=adapter.name) == 100.0
