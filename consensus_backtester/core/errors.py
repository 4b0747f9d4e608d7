"""Exception hierarchy shared by the backtester components."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class BacktesterError(RuntimeError):
    """Base exception for backtester failures."""


class IndicatorError(BacktesterError):
    """Raised when an indicator or adapter rejects a data point."""

    def __init__(self, message: str, *, component: str | None = None, time: int | None = None):
        """Capture the rejecting component and the offending bar timestamp."""
        context = []
        if component:
            context.append(f"component={component}")
        if time is not None:
            context.append(f"time={time}")
        suffix = f" ({', '.join(context)})" if context else ""
        super().__init__(f"{message}{suffix}")
        self.component = component
        self.time = time


class OrderingViolationError(IndicatorError):
    """Raised when a bar's timestamp is not strictly after the last one seen."""


class InvalidInputError(IndicatorError):
    """Raised when a bar carries values an indicator cannot process."""


class DataSourceError(BacktesterError):
    """Raised when historical data cannot be loaded."""


class ConfigProcessorError(BacktesterError):
    """Base exception for config processor failures."""


class ConfigSourceError(ConfigProcessorError):
    """Raised when a config source cannot be resolved."""


class ConfigValidationError(ConfigProcessorError):
    """Raised when a merged configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        component: str | None = None,
        source: str | None = None,
        errors: Sequence[Any] | None = None,
    ) -> None:
        """Capture rich validation metadata for downstream error reporting."""
        context = []
        if component:
            context.append(f"component={component}")
        if source:
            context.append(f"source={source}")
        if errors:
            context.append(f"errors={errors}")
        suffix = f" ({', '.join(context)})" if context else ""
        super().__init__(f"{message}{suffix}")
        self.component = component
        self.source = source
        self.errors = errors
