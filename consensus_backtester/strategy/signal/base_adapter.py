"""Base class for indicator adapters.

An adapter owns one streaming indicator (or, for the EMA crossover, one per
period), keeps a bounded window of the values it needs and turns them into a
Buy/Sell/Wait opinion for the latest bar.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Self

from consensus_backtester.core.errors import OrderingViolationError
from consensus_backtester.core.logger import get_backtester_logger
from consensus_backtester.core.monitoring import MetricTags, Monitoring, NoOpMonitoring
from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.indicators.base_indicator import BaseIndicator
from consensus_backtester.signal.signal_types import StockAction

from .adapter_configs import BaseAdapterConfig

ADAPTER_NAME_LABEL = "adaptor_name"
SIGNAL_TYPE_LABEL = "signal_type"


class BaseIndicatorAdapter(ABC):
    """Abstract base class for indicator adapters.

    Subclasses implement ``name``, ``_consume`` (feed the bar to the owned
    indicator and record derived values) and ``_evaluate`` (derive the opinion).
    The base class rejects out-of-order bars before any owned state changes and
    reports every emitted opinion to the metrics sink.
    """

    kind: ClassVar[str] = "adapter"

    def __init__(
        self,
        config: BaseAdapterConfig,
        *,
        monitor: Monitoring | None = None,
        tags: MetricTags | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            monitor: Metrics sink; defaults to a no-op sink
            tags: Labels inherited from the caller, attached to every sample
            logger: Optional logger instance
        """
        self.config = config
        self.monitor: Monitoring = monitor or NoOpMonitoring()
        self.base_tags = tags or MetricTags()
        self.logger = logger or get_backtester_logger(__name__)
        self.current_bar: PriceBar | None = None
        self._last_time: int | None = None
        self.tags = self.base_tags.with_labels(**{ADAPTER_NAME_LABEL: self.name})

    @property
    @abstractmethod
    def name(self) -> str:
        """Deterministic name derived from the configuration."""

    @abstractmethod
    def _consume(self, bar: PriceBar) -> None:
        """Feed ``bar`` to the owned indicator(s) and update the value window."""

    @abstractmethod
    def _evaluate(self) -> StockAction:
        """Derive the opinion for the current bar."""

    @property
    def indicators(self) -> tuple[BaseIndicator, ...]:
        """Indicators owned by this adapter."""
        return ()

    def check_data_point(self, bar: PriceBar) -> None:
        """Raise if the adapter or any owned indicator would reject ``bar``.

        Nothing is mutated, so a group of adapters can be checked before any of
        them is fed.

        Raises:
            OrderingViolationError: If ``bar.time`` does not advance the stream
            InvalidInputError: If an owned indicator rejects the bar
        """
        if self._last_time is not None and bar.time <= self._last_time:
            raise OrderingViolationError(
                f"Bar time {bar.time} is not after last time {self._last_time}",
                component=self.name,
                time=bar.time,
            )
        for indicator in self.indicators:
            indicator.check_data_point(bar)

    def add_data_point(self, bar: PriceBar) -> None:
        """Feed the next bar. A rejected bar leaves every owned indicator untouched.

        Raises:
            OrderingViolationError: If ``bar.time`` does not advance the stream
            InvalidInputError: If the owned indicator rejects the bar
        """
        self.check_data_point(bar)
        self._consume(bar)
        self.current_bar = bar
        self._last_time = bar.time

    def get_signal(self) -> StockAction:
        """Return the opinion for the most recently fed bar."""
        action = self._evaluate()
        self.monitor.increment_counter(
            f"{self.kind}_signals_generated",
            self.tags.with_labels(**{SIGNAL_TYPE_LABEL: action.value}),
        )
        if action is not StockAction.WAIT:
            self.logger.debug(
                "%s signal from %s at %s", action.value, self.name, self._current_time()
            )
        return action

    def clone(self, *, tags: MetricTags | None = None) -> Self:
        """Return a fresh adapter with the same configuration and metrics sink.

        Args:
            tags: Base labels for the clone; defaults to this adapter's base labels
        """
        return type(self)(
            self.config.model_copy(deep=True),
            monitor=self.monitor,
            tags=self.base_tags if tags is None else tags,
            logger=self.logger,
        )

    def _set_gauge(self, metric: str, value: float, **labels: Any) -> None:
        self.monitor.set_gauge(f"{self.kind}_{metric}", value, self.tags.with_labels(**labels))

    def _current_time(self) -> int | None:
        return self.current_bar.time if self.current_bar is not None else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
