"""Shared Protocol definitions used to decouple core components.

The backtesting engine replays bars through trading algorithms, which in turn are
built from indicator adapters. These Protocols capture the minimal contracts each
layer relies upon so components can be swapped in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from consensus_backtester.core.monitoring import MetricTags
    from consensus_backtester.data.data_request import HistoricalDataRequest
    from consensus_backtester.data.price_bar import PriceBar
    from consensus_backtester.signal.signal_types import StockAction, TradingSignal


@runtime_checkable
class TradingAlgorithmProtocol(Protocol):
    """Interface the engine expects from every trading algorithm."""

    @property
    def name(self) -> str:
        """Stable identifier used to key performance metrics."""

    def evaluate(self, bar: PriceBar) -> TradingSignal:
        """Consume ``bar`` and return the decision for it."""


@runtime_checkable
class IndicatorAdapterProtocol(Protocol):
    """Streaming opinion source wrapping one technical indicator."""

    @property
    def name(self) -> str:
        """Deterministic name derived from the adapter configuration."""

    def check_data_point(self, bar: PriceBar) -> None:
        """Raise if ``add_data_point(bar)`` would reject the bar, without changing state."""

    def add_data_point(self, bar: PriceBar) -> None:
        """Feed the next bar; timestamps must be strictly increasing."""

    def get_signal(self) -> StockAction:
        """Return the opinion for the most recently fed bar."""

    def clone(self, *, tags: MetricTags | None = None) -> Self:
        """Return a fresh adapter with identical configuration and empty state."""


@runtime_checkable
class HistoricalDataSourceProtocol(Protocol):
    """Provider of historical bars."""

    def get_bars(self, request: HistoricalDataRequest) -> list[PriceBar]:
        """Return bars inside the request window, oldest first."""
