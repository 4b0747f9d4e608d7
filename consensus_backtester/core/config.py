"""Configuration System for the Backtester.

This module provides a centralized configuration system that can be used
globally throughout the backtesting framework.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from consensus_backtester.data.data_request import HistoricalDataRequest, Timespan
from consensus_backtester.strategy.signal.adapter_configs import (
    AdapterConfig,
    default_adapter_pool,
)

EARLIEST_START_DATE = date(1970, 1, 1)


class DataSourceConfig(BaseModel):
    """Where bars come from and which window of them to replay."""

    model_config = ConfigDict(use_enum_values=False)

    csv_path: str | None = Field(
        default=None, description="CSV file, or directory of <TICKER>.csv files"
    )
    ticker: str = Field(default="SPY", min_length=1, description="Instrument symbol")
    interval: int = Field(default=1, gt=0, description="Number of timespans per bar")
    timespan: Timespan = Field(default=Timespan.DAY, description="Bar aggregation unit")
    start_date: date = Field(
        default=EARLIEST_START_DATE, description="First calendar day to replay (UTC)"
    )
    end_date: date | None = Field(
        default=None, description="Last calendar day to replay (UTC); today when unset"
    )

    def to_request(self) -> HistoricalDataRequest:
        """Build the data request described by this configuration."""
        return HistoricalDataRequest(
            ticker=self.ticker,
            interval=self.interval,
            timespan=self.timespan,
            start=self.start_date,
            end=self.end_date or datetime.now(UTC).date(),
        )


class EngineConfig(BaseModel):
    """Backtest engine settings."""

    track_iterations: int = Field(
        default=10, ge=1, description="Bars each position is followed after it opens"
    )
    on_error: Literal["raise", "skip"] = Field(
        default="raise",
        description="Propagate indicator errors, or log them and skip the bar for that algorithm",
    )


class LoggingConfig(BaseModel):
    """Logging configuration applied through BacktesterLogger.configure."""

    level: str = Field(default="INFO", description="Root log level")
    file_path: str | None = Field(default=None, description="Optional rotating log file")
    structured: bool = Field(default=False, description="Emit JSON log lines")
    console: bool = Field(default=True, description="Log to stdout")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the log level name."""
        normalized = v.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return normalized


class MonitoringConfig(BaseModel):
    """Metrics sink selection."""

    backend: Literal["noop", "memory", "prometheus"] = Field(
        default="noop", description="Metrics sink"
    )
    namespace: str = Field(default="consensus_backtester", description="Prometheus namespace")
    port: int | None = Field(
        default=None, ge=1, le=65535, description="Expose Prometheus metrics on this port"
    )


class BacktesterConfig(BaseModel):
    """Main configuration class for the backtester."""

    model_config = ConfigDict(
        use_enum_values=False,
        arbitrary_types_allowed=True,
    )

    data: DataSourceConfig = Field(default_factory=DataSourceConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    adapters: list[AdapterConfig] = Field(
        default_factory=lambda: list(default_adapter_pool()),
        description="Adapter pool every combination is drawn from",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)


# Global configuration instance
_global_config: BacktesterConfig | None = None


def get_config() -> BacktesterConfig:
    """Get the global configuration instance.

    Returns:
        Global BacktesterConfig instance
    """
    global _global_config
    if _global_config is None:
        _global_config = BacktesterConfig()
    return _global_config


def set_config(config: BacktesterConfig) -> None:
    """Set the global configuration instance.

    Args:
        config: BacktesterConfig instance to set as global
    """
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = BacktesterConfig()


def validate_run_config(config: BacktesterConfig) -> BacktesterConfig:
    """Validate a backtest configuration and raise if any invalid combinations exist."""
    errors: list[str] = []

    data = config.data
    if data.end_date is not None and data.end_date < data.start_date:
        errors.append(
            f"data.end_date ({data.end_date}) must not be earlier than "
            f"data.start_date ({data.start_date})"
        )

    if not config.adapters:
        errors.append("adapters must contain at least one adapter")
    else:
        names = [_adapter_identity(adapter) for adapter in config.adapters]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            errors.append(f"adapters contains duplicate entries: {duplicates}")

    monitoring = config.monitoring
    if monitoring.port is not None and monitoring.backend != "prometheus":
        errors.append("monitoring.port requires monitoring.backend 'prometheus'")

    if errors:
        formatted = "\n - ".join(errors)
        raise ValueError(f"Invalid backtest configuration:\n - {formatted}")

    return config


def _adapter_identity(adapter: Any) -> str:
    return repr(adapter.model_dump(mode="python"))
