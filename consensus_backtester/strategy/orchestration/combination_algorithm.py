"""Unanimity vote over a fixed group of indicator adapters.

``create_combination_algorithms`` expands a pool of adapters into one algorithm
per non-empty subset so every combination can be backtested side by side.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from consensus_backtester.core.interfaces import IndicatorAdapterProtocol
from consensus_backtester.core.logger import get_backtester_logger
from consensus_backtester.core.monitoring import MetricTags, Monitoring, NoOpMonitoring
from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.signal.signal_types import StockAction, TradingSignal
from consensus_backtester.strategy.signal.base_adapter import SIGNAL_TYPE_LABEL

ALGORITHM_NAME_LABEL = "algorithm_name"


def combine_actions(actions: Sequence[StockAction]) -> StockAction:
    """Reduce member opinions to one decision.

    Any WAIT (or an empty vote) gives WAIT; unanimous BUY gives BUY; unanimous
    SELL gives SELL; a BUY/SELL split gives WAIT.
    """
    if not actions or StockAction.WAIT in actions:
        return StockAction.WAIT
    if all(action is StockAction.BUY for action in actions):
        return StockAction.BUY
    if all(action is StockAction.SELL for action in actions):
        return StockAction.SELL
    return StockAction.WAIT


class CombinationAlgorithm:
    """Trading algorithm that acts only when every member adapter agrees."""

    def __init__(
        self,
        adapters: Sequence[IndicatorAdapterProtocol],
        *,
        monitor: Monitoring | None = None,
        tags: MetricTags | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the combination.

        Args:
            adapters: Ordered, non-empty group of adapters owned by this algorithm
            monitor: Optional metrics sink
            tags: Optional base metric labels
            logger: Optional logger instance

        Raises:
            ValueError: If ``adapters`` is empty
        """
        if not adapters:
            raise ValueError("CombinationAlgorithm requires at least one adapter")
        self._adapters: tuple[IndicatorAdapterProtocol, ...] = tuple(adapters)
        self._name = "_".join(adapter.name for adapter in self._adapters)
        self.monitor: Monitoring = monitor or NoOpMonitoring()
        self.tags = (tags or MetricTags()).with_labels(**{ALGORITHM_NAME_LABEL: self._name})
        self.logger = logger or get_backtester_logger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def adapters(self) -> tuple[IndicatorAdapterProtocol, ...]:
        return self._adapters

    def evaluate(self, bar: PriceBar) -> TradingSignal:
        """Feed ``bar`` to every member, then combine their opinions.

        Every member checks the bar before any is fed, so a rejected bar leaves the
        whole group untouched.

        Raises:
            OrderingViolationError: If a member rejects the bar's timestamp
            InvalidInputError: If a member's indicator rejects the bar's values
        """
        self.monitor.set_gauge("algorithm_close_price", bar.close, self.tags)

        for adapter in self._adapters:
            adapter.check_data_point(bar)
        for adapter in self._adapters:
            adapter.add_data_point(bar)
        actions = [adapter.get_signal() for adapter in self._adapters]

        signal = TradingSignal(time=bar.time, action=combine_actions(actions))
        self.monitor.increment_counter(
            "algorithm_signals_generated",
            self.tags.with_labels(**{SIGNAL_TYPE_LABEL: signal.action.value}),
        )
        return signal

    def __len__(self) -> int:
        return len(self._adapters)

    def __repr__(self) -> str:
        return f"CombinationAlgorithm(name={self._name!r})"


def create_combination_algorithms(
    adapters: Sequence[IndicatorAdapterProtocol],
    *,
    monitor: Monitoring | None = None,
    tags: MetricTags | None = None,
    logger: logging.Logger | None = None,
) -> list[CombinationAlgorithm]:
    """Build one algorithm per non-empty subset of ``adapters``.

    Subsets are generated depth-first: every subset is emitted before the subsets
    that extend it with later adapters, so for ``[A, B, C]`` the order is A, AB,
    ABC, AC, B, BC, C. Each algorithm receives fresh clones of its members.

    Args:
        adapters: Adapter pool; the pool members themselves are never fed bars
        monitor: Optional metrics sink shared by every algorithm
        tags: Optional base metric labels
        logger: Optional logger instance

    Returns:
        ``2 ** len(adapters) - 1`` independent algorithms
    """
    base_tags = tags or MetricTags()
    pool = tuple(adapters)
    algorithms: list[CombinationAlgorithm] = []

    def generate(current: list[IndicatorAdapterProtocol], start: int) -> None:
        if current:
            name = "_".join(adapter.name for adapter in current)
            member_tags = base_tags.with_labels(**{ALGORITHM_NAME_LABEL: name})
            members = [adapter.clone(tags=member_tags) for adapter in current]
            algorithms.append(
                CombinationAlgorithm(members, monitor=monitor, tags=base_tags, logger=logger)
            )
        for index in range(start, len(pool)):
            generate([*current, pool[index]], index + 1)

    generate([], 0)
    return algorithms
