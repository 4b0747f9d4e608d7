"""Consensus Backtesting Framework.

This package replays historical price bars through streaming technical indicators,
combines their opinions under a unanimity vote and tracks the profit of acting on
each decision over a fixed holding horizon.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"
__all__ = [
    "BacktestEngine",
    "BacktesterConfig",
    "CombinationAlgorithm",
    "PriceBar",
    "StockAction",
    "TradingSignal",
]

_EXPORTS: dict[str, tuple[str, str]] = {
    "BacktestEngine": ("consensus_backtester.core.backtest_engine", "BacktestEngine"),
    "BacktesterConfig": ("consensus_backtester.core.config", "BacktesterConfig"),
    "CombinationAlgorithm": (
        "consensus_backtester.strategy.orchestration.combination_algorithm",
        "CombinationAlgorithm",
    ),
    "PriceBar": ("consensus_backtester.data.price_bar", "PriceBar"),
    "StockAction": ("consensus_backtester.signal.signal_types", "StockAction"),
    "TradingSignal": ("consensus_backtester.signal.signal_types", "TradingSignal"),
}


def __getattr__(name: str) -> Any:
    """Lazily resolve heavy exports to keep import-time dependencies minimal."""
    try:
        module_path, attr_name = _EXPORTS[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from exc
    module = import_module(module_path)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    """Expose dynamically-resolved attributes via dir()."""
    return sorted(list(globals().keys()) + __all__)
