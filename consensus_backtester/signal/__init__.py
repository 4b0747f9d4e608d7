"""Trading signal types."""

from consensus_backtester.signal.signal_types import StockAction, TradingSignal

__all__ = ["StockAction", "TradingSignal"]
