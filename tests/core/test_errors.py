"""Tests for the exception hierarchy."""

import pytest

from consensus_backtester.core.errors import (
    BacktesterError,
    ConfigSourceError,
    ConfigValidationError,
    IndicatorError,
    InvalidInputError,
    OrderingViolationError,
)


class TestIndicatorErrors:
    """Indicator errors carry the rejecting component and bar time."""

    def test_context_in_message(self) -> None:
        """Component and time are appended to the message."""
        error = OrderingViolationError("Out of order", component="ema_5", time=42)

        assert str(error) == "Out of order (component=ema_5, time=42)"
        assert error.component == "ema_5"
        assert error.time == 42

    def test_message_without_context(self) -> None:
        """No suffix is added without context."""
        assert str(InvalidInputError("Bad bar")) == "Bad bar"

    @pytest.mark.parametrize("error_type", [OrderingViolationError, InvalidInputError])
    def test_hierarchy(self, error_type) -> None:
        """Both indicator errors can be caught as IndicatorError and BacktesterError."""
        assert issubclass(error_type, IndicatorError)
        assert issubclass(error_type, BacktesterError)


def test_config_validation_error_metadata() -> None:
    """ConfigValidationError keeps its metadata."""
    error = ConfigValidationError("Invalid", component="engine", source="payload", errors=["x"])

    assert "component=engine" in str(error)
    assert error.source == "payload"
    assert error.errors == ["x"]
    assert isinstance(ConfigSourceError("missing"), BacktesterError)
