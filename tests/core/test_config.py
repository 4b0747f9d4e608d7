"""Tests for the configuration models."""

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from consensus_backtester.core.config import (
    EARLIEST_START_DATE,
    BacktesterConfig,
    DataSourceConfig,
    EngineConfig,
    LoggingConfig,
    MonitoringConfig,
    get_config,
    reset_config,
    set_config,
    validate_run_config,
)
from consensus_backtester.data.data_request import Timespan
from consensus_backtester.strategy.signal import RSIAdapterConfig


class TestBacktesterConfigDefaults:
    """Test default values."""

    def test_defaults(self) -> None:
        """Defaults cover a full daily replay with the classic adapter pool."""
        config = BacktesterConfig()

        assert config.data.ticker == "SPY"
        assert config.data.timespan is Timespan.DAY
        assert config.data.start_date == EARLIEST_START_DATE == date(1970, 1, 1)
        assert config.data.end_date is None
        assert config.engine.track_iterations == 10
        assert config.engine.on_error == "raise"
        assert len(config.adapters) == 6
        assert config.monitoring.backend == "noop"

    def test_adapters_from_mappings(self) -> None:
        """Adapter mappings are parsed by kind."""
        config = BacktesterConfig(adapters=[{"kind": "rsi", "period": 5}, {"kind": "bollinger"}])

        assert isinstance(config.adapters[0], RSIAdapterConfig)
        assert config.adapters[0].period == 5
        assert config.adapters[1].kind == "bollinger"


class TestComponentConfigs:
    """Test component validators."""

    def test_to_request_defaults_end_to_today(self) -> None:
        """A missing end date means today."""
        request = DataSourceConfig(ticker="qqq", start_date=date(2024, 1, 1)).to_request()

        assert request.ticker == "QQQ"
        assert request.end == datetime.now(UTC).date()

    def test_track_iterations_positive(self) -> None:
        """Positions must be followed for at least one bar."""
        with pytest.raises(ValidationError):
            EngineConfig(track_iterations=0)

    def test_on_error_choices(self) -> None:
        """Only raise and skip are supported."""
        assert EngineConfig(on_error="skip").on_error == "skip"
        with pytest.raises(ValidationError):
            EngineConfig(on_error="ignore")

    def test_log_level_normalised(self) -> None:
        """Log levels are upper-cased and validated."""
        assert LoggingConfig(level=" debug ").level == "DEBUG"
        with pytest.raises(ValidationError, match="Invalid log level"):
            LoggingConfig(level="verbose")

    def test_monitoring_port_range(self) -> None:
        """Ports must be valid TCP ports."""
        with pytest.raises(ValidationError):
            MonitoringConfig(backend="prometheus", port=70000)


class TestValidateRunConfig:
    """Test cross-field validation."""

    def test_valid_config_returned(self) -> None:
        """A valid config passes through unchanged."""
        config = BacktesterConfig()

        assert validate_run_config(config) is config

    def test_collects_every_error(self) -> None:
        """All problems are reported together."""
        config = BacktesterConfig(
            data=DataSourceConfig(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)),
            adapters=[],
            monitoring=MonitoringConfig(port=9000),
        )

        with pytest.raises(ValueError) as excinfo:
            validate_run_config(config)

        message = str(excinfo.value)
        assert message.startswith("Invalid backtest configuration:")
        assert "must not be earlier than data.start_date" in message
        assert "adapters must contain at least one adapter" in message
        assert "monitoring.port requires monitoring.backend 'prometheus'" in message

    def test_duplicate_adapters(self) -> None:
        """The same adapter configuration may appear only once."""
        config = BacktesterConfig(adapters=[{"kind": "rsi"}, {"kind": "rsi"}, {"kind": "macd"}])

        with pytest.raises(ValueError, match="duplicate entries"):
            validate_run_config(config)


def test_global_config_helpers() -> None:
    """get_config returns the global instance, set_config and reset_config replace it."""
    custom = BacktesterConfig(engine=EngineConfig(track_iterations=3))
    set_config(custom)
    assert get_config() is custom

    reset_config()
    assert get_config() is not custom
    assert get_config().engine.track_iterations == 10
