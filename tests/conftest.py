"""Pytest configuration and shared fixtures for the backtester test suite.

This module provides pytest configuration, fixtures, and shared test utilities
that are used across all test modules.
"""

import math
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from consensus_backtester.core.config import reset_config
from consensus_backtester.core.monitoring import InMemoryMonitoring, NoOpMonitoring
from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.signal.signal_types import StockAction
from consensus_backtester.strategy.signal.adapter_configs import BaseAdapterConfig
from consensus_backtester.strategy.signal.base_adapter import BaseIndicatorAdapter

DAY_MS = 86_400_000
START_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z

# Classic 14-period RSI worked example.
TEXTBOOK_RSI_CLOSES = [
    44.34,
    44.09,
    44.15,
    43.61,
    44.33,
    44.83,
    45.10,
    45.42,
    45.84,
    46.08,
    45.89,
    46.03,
    45.61,
    46.28,
    46.28,
]


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def make_bar(
    time: int,
    close: float,
    *,
    high: float | None = None,
    low: float | None = None,
    open: float | None = None,
    volume: float = 1000.0,
) -> PriceBar:
    """Build a bar whose unspecified prices default to ``close``."""
    return PriceBar(
        time=time,
        open=close if open is None else open,
        high=close if high is None else high,
        low=close if low is None else low,
        close=close,
        volume=volume,
    )


def bars_from_closes(closes: Sequence[float], *, start: int = 1, step: int = 1) -> list[PriceBar]:
    """Build one flat bar per close with increasing timestamps."""
    return [make_bar(start + index * step, close) for index, close in enumerate(closes)]


class ScriptedAdapterConfig(BaseAdapterConfig):
    """Configuration for an adapter that replays a fixed list of opinions."""

    kind: str = "scripted"
    label: str = "Scripted"
    actions: tuple[StockAction, ...] = ()


class ScriptedAdapter(BaseIndicatorAdapter):
    """Adapter whose opinion for the n-th bar is ``actions[n - 1]``.

    Once the script runs out the last action repeats; an empty script always waits.
    """

    kind = "scripted"
    config: ScriptedAdapterConfig

    def __init__(self, config: ScriptedAdapterConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.seen: list[PriceBar] = []

    @property
    def name(self) -> str:
        return self.config.label

    def _consume(self, bar: PriceBar) -> None:
        self.seen.append(bar)

    def _evaluate(self) -> StockAction:
        actions = self.config.actions
        if not actions or not self.seen:
            return StockAction.WAIT
        return actions[min(len(self.seen), len(actions)) - 1]


@pytest.fixture(autouse=True)
def _reset_global_config() -> Any:
    """Keep the global configuration isolated between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def bar_factory() -> Callable[..., PriceBar]:
    """Factory building bars with prices defaulting to the close."""
    return make_bar


@pytest.fixture
def closes_to_bars() -> Callable[..., list[PriceBar]]:
    """Factory turning a list of closes into flat, time-ordered bars."""
    return bars_from_closes


@pytest.fixture
def textbook_rsi_bars() -> list[PriceBar]:
    """Bars for the classic RSI worked example."""
    return bars_from_closes(TEXTBOOK_RSI_CLOSES)


@pytest.fixture
def sine_bars() -> list[PriceBar]:
    """120 daily bars oscillating around 100 so every adapter eventually signals."""
    bars = []
    for index in range(120):
        close = 100.0 + 10.0 * math.sin(index / 4.0) + 0.05 * index
        bars.append(
            PriceBar(
                time=START_MS + index * DAY_MS,
                open=close - 0.5,
                high=close + 1.5,
                low=close - 1.5,
                close=close,
                volume=1_000_000.0 + index,
            )
        )
    return bars


@pytest.fixture
def scripted_adapter() -> Callable[..., ScriptedAdapter]:
    """Factory for scripted adapters."""

    def _build(label: str, *actions: StockAction, **kwargs: Any) -> ScriptedAdapter:
        return ScriptedAdapter(ScriptedAdapterConfig(label=label, actions=actions), **kwargs)

    return _build


@pytest.fixture
def memory_monitor() -> InMemoryMonitoring:
    """In-memory metrics sink for asserting on recorded samples."""
    return InMemoryMonitoring()


@pytest.fixture
def noop_monitor() -> NoOpMonitoring:
    """Metrics sink that discards every sample."""
    return NoOpMonitoring()
