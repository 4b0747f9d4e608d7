"""Tests for the EMA crossover adapter."""

from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.strategy.signal import EMAAdapter, EMAAdapterConfig


def _signals(closes, bars_factory):
    adapter = EMAAdapter(EMAAdapterConfig(periods=(3, 2), max_total_historical_data=3))
    signals = []
    for bar in bars_factory(closes):
        adapter.add_data_point(bar)
        signals.append(adapter.get_signal())
    return adapter, signals


def test_name_lists_sorted_periods() -> None:
    """The name joins the ascending periods."""
    assert EMAAdapter(EMAAdapterConfig(periods=(20, 5, 10))).name == "EMA_5_10_20"


def test_buy_when_short_crosses_above(closes_to_bars) -> None:
    """The short EMA starting below and ending above the long one gives BUY."""
    adapter, signals = _signals([10.0, 8.0, 6.0, 10.0, 14.0], closes_to_bars)

    assert signals == [StockAction.WAIT] * 4 + [StockAction.BUY]
    assert adapter.values[2].to_list()[0] < adapter.values[3].to_list()[0]


def test_sell_when_short_crosses_below(closes_to_bars) -> None:
    """The mirror crossover gives SELL."""
    _, signals = _signals([10.0, 12.0, 14.0, 10.0, 6.0], closes_to_bars)

    assert signals[-1] is StockAction.SELL
    assert signals[:-1] == [StockAction.WAIT] * 4


def test_waits_until_every_ema_is_ready(closes_to_bars) -> None:
    """Nothing is signalled before the longest EMA has two values."""
    adapter = EMAAdapter(EMAAdapterConfig(periods=(2, 5)))
    for bar in closes_to_bars([1.0, 5.0, 1.0, 5.0, 1.0]):
        adapter.add_data_point(bar)

    assert adapter.emas[5].is_initialized
    assert len(adapter.values[5]) == 1
    assert adapter.get_signal() is StockAction.WAIT
