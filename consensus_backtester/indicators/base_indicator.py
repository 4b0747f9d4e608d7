"""Base indicator class and factory pattern for the indicator system.

Indicators are streaming state machines: they consume one ``PriceBar`` at a time,
keep a bounded rolling history and expose the latest derived values. Timestamps fed
to a single indicator must be strictly increasing; a violation is rejected before
any state changes.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

import pandas as pd

from consensus_backtester.core.errors import OrderingViolationError
from consensus_backtester.core.logger import get_backtester_logger
from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.utils.rolling_window import RollingWindow

from .indicator_configs import IndicatorConfig


class BaseIndicator(ABC):
    """Abstract base class for all streaming technical indicators.

    Subclasses implement ``_update`` (recompute derived state after the new bar has
    been appended to ``history``) and ``snapshot`` (current derived values). They may
    override ``_history_capacity`` and ``_validate_bar``.
    """

    def __init__(self, config: IndicatorConfig, logger: logging.Logger | None = None) -> None:
        """Initialize the indicator with configuration.

        Args:
            config: Indicator configuration parameters
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or get_backtester_logger(__name__)
        self.name = config.indicator_name
        self.type = config.indicator_type
        self.history: RollingWindow[PriceBar] = RollingWindow(self._history_capacity())
        self._last_time: int | None = None
        self._is_initialized = False
        self._reset_state()

        self.logger.debug(f"Initialized indicator: {self.name} (type: {self.type})")

    @classmethod
    def default_config(cls) -> IndicatorConfig:
        """Return the default configuration for the indicator implementation."""
        raise NotImplementedError(f"{cls.__name__} must define default_config()")

    @property
    def is_initialized(self) -> bool:
        """Whether enough bars have been seen to produce meaningful values."""
        return self._is_initialized

    @property
    def last_time(self) -> int | None:
        """Timestamp of the most recently accepted bar."""
        return self._last_time

    def check_data_point(self, bar: PriceBar) -> None:
        """Raise if ``add_data_point(bar)`` would reject the bar. Never changes state.

        Raises:
            OrderingViolationError: If ``bar.time`` does not advance the stream
            InvalidInputError: If the indicator rejects the bar's values
        """
        if self._last_time is not None and bar.time <= self._last_time:
            raise OrderingViolationError(
                f"Bar time {bar.time} is not after last time {self._last_time}",
                component=self.name,
                time=bar.time,
            )
        self._validate_bar(bar)

    def add_data_point(self, bar: PriceBar) -> None:
        """Consume the next bar and update derived values.

        Args:
            bar: Next price bar; its time must be after every previously accepted bar

        Raises:
            OrderingViolationError: If ``bar.time`` does not advance the stream
            InvalidInputError: If the indicator rejects the bar's values
        """
        self.check_data_point(bar)

        self.history.append(bar)
        self._last_time = bar.time
        self._update(bar)

    def add_data_points(self, bars: Iterable[PriceBar]) -> None:
        """Consume several bars in order."""
        for bar in bars:
            self.add_data_point(bar)

    @abstractmethod
    def _update(self, bar: PriceBar) -> None:
        """Recompute derived state after ``bar`` has been appended to history."""

    @abstractmethod
    def snapshot(self) -> dict[str, float]:
        """Return the current derived values keyed by output name."""

    def _history_capacity(self) -> int:
        return self.config.period

    def _validate_bar(self, bar: PriceBar) -> None:
        """Reject bars the indicator cannot process. No-op by default."""

    def _reset_state(self) -> None:
        """Initialise or clear indicator-specific derived state."""

    def reset(self) -> None:
        """Reset indicator state for reuse."""
        self.history.clear()
        self._last_time = None
        self._is_initialized = False
        self._reset_state()
        self.logger.debug(f"Indicator {self.name} reset")

    def calculate(self, data: pd.DataFrame) -> pd.DataFrame:
        """Replay a bar frame through a fresh copy of this indicator.

        Args:
            data: Frame with ``time``, ``open``, ``high``, ``low``, ``close`` and
                ``volume`` columns, oldest row first

        Returns:
            Copy of ``data`` with one column per ``snapshot`` output, prefixed with
            the indicator name; rows before initialisation are NaN
        """
        replica = type(self)(self.config.model_copy(deep=True), logger=self.logger)
        rows: list[dict[str, float]] = []
        for record in data.itertuples(index=False):
            replica.add_data_point(
                PriceBar(
                    time=int(record.time),
                    open=float(record.open),
                    high=float(record.high),
                    low=float(record.low),
                    close=float(record.close),
                    volume=float(getattr(record, 'volume', 0.0)),
                )
            )
            values = replica.snapshot()
            if not replica.is_initialized:
                values = {key: float('nan') for key in values}
            rows.append(values)

        prefix = self.name.lower()
        computed = pd.DataFrame(rows, index=data.index)
        computed.columns = [f"{prefix}_{column}" for column in computed.columns]
        return pd.concat([data, computed], axis=1)

    def get_indicator_info(self) -> dict[str, Any]:
        """Get indicator information and current configuration.

        Returns:
            Dictionary with indicator information
        """
        return {
            "name": self.name,
            "type": self.type,
            "period": self.config.period,
            "is_initialized": self._is_initialized,
            "history_size": len(self.history),
            "values": self.snapshot(),
            "config": self.config.model_dump(),
        }


class IndicatorFactory:
    """Factory for creating indicator instances by registered name."""

    _indicators: dict[str, type[BaseIndicator]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[BaseIndicator]], type[BaseIndicator]]:
        """Register an indicator class with the factory.

        Args:
            name: Name to register the indicator under

        Returns:
            Decorator function for registering the indicator class
        """

        def decorator(indicator_class: type[BaseIndicator]) -> type[BaseIndicator]:
            cls._indicators[name.lower()] = indicator_class
            return indicator_class

        return decorator

    @classmethod
    def _get_indicator_class(cls, name: str) -> type[BaseIndicator]:
        slug = name.lower()
        indicator_class = cls._indicators.get(slug)
        if indicator_class is None:
            available = list(cls._indicators.keys())
            raise ValueError(f"Unknown indicator: {slug}. Available indicators: {available}")
        return indicator_class

    @classmethod
    def default_config(cls, name: str) -> IndicatorConfig:
        """Return the registered indicator's default configuration."""
        return cls._get_indicator_class(name).default_config()

    @classmethod
    def create(
        cls,
        name: str,
        config: IndicatorConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> BaseIndicator:
        """Create an indicator instance by name.

        Args:
            name: Name of the indicator to create
            config: Configuration for the indicator. When omitted the registered
                indicator default will be used.
            logger: Optional logger passed to the indicator

        Returns:
            Indicator instance

        Raises:
            ValueError: If the indicator name is not registered
        """
        indicator_class = cls._get_indicator_class(name)
        resolved_config = config or indicator_class.default_config()
        return indicator_class(resolved_config, logger=logger)

    @classmethod
    def get_available_indicators(cls) -> list[str]:
        """Get list of available indicator names."""
        return list(cls._indicators.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if an indicator is registered."""
        return name.lower() in cls._indicators
