"""Configuration models for indicator adapters.

Each adapter kind has its own pydantic model tagged with a ``kind`` literal;
``AdapterConfig`` is the discriminated union used wherever a pool of adapters is
described in YAML or code.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

if TYPE_CHECKING:
    from consensus_backtester.core.monitoring import MetricTags, Monitoring
    from consensus_backtester.strategy.signal.base_adapter import BaseIndicatorAdapter


class BaseAdapterConfig(BaseModel):
    """Fields and behaviour shared by every adapter configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: str

    def build(
        self,
        monitor: Monitoring | None = None,
        tags: MetricTags | None = None,
        logger: logging.Logger | None = None,
    ) -> BaseIndicatorAdapter:
        """Instantiate the adapter described by this configuration."""
        from consensus_backtester.strategy.factories import build_adapter

        return build_adapter(self, monitor=monitor, tags=tags, logger=logger)


class EMAAdapterConfig(BaseAdapterConfig):
    """Crossover of several EMAs."""

    kind: Literal["ema"] = "ema"
    periods: tuple[int, ...] = Field(default=(5, 10, 20), description="EMA periods")
    max_total_historical_data: int = Field(default=10, gt=0)

    @field_validator("periods", mode="after")
    @classmethod
    def validate_periods(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        """Require at least two distinct positive periods and sort them ascending."""
        if len(value) < 2:
            raise ValueError("EMA adapter needs at least two periods")
        if any(period <= 0 for period in value):
            raise ValueError("EMA periods must be positive")
        if len(set(value)) != len(value):
            raise ValueError("EMA periods must be distinct")
        return tuple(sorted(value))


class RSIAdapterConfig(BaseAdapterConfig):
    """Overbought/oversold reversal on RSI."""

    kind: Literal["rsi"] = "rsi"
    period: int = Field(default=14, ge=2)
    overbought_threshold: float = Field(default=70.0, ge=0.0, le=100.0)
    oversold_threshold: float = Field(default=30.0, ge=0.0, le=100.0)
    max_total_historical_data: int = Field(default=10, gt=0)

    @model_validator(mode="after")
    def validate_thresholds(self) -> RSIAdapterConfig:
        if self.overbought_threshold <= self.oversold_threshold:
            raise ValueError("Overbought threshold must be greater than oversold threshold")
        return self


class MACDAdapterConfig(BaseAdapterConfig):
    """MACD/signal line crossover."""

    kind: Literal["macd"] = "macd"
    short_period: int = Field(default=12, gt=0)
    long_period: int = Field(default=26, gt=0)
    signal_period: int = Field(default=9, gt=0)
    max_total_historical_data: int = Field(default=10, gt=0)

    @model_validator(mode="after")
    def validate_periods(self) -> MACDAdapterConfig:
        if self.short_period >= self.long_period:
            raise ValueError("Short period must be less than long period for MACD")
        return self


class PivotPointAdapterConfig(BaseAdapterConfig):
    """Breakout through repeatedly tested pivot levels."""

    kind: Literal["pivot_point"] = "pivot_point"
    max_total_historical_data: int = Field(default=5, gt=0)
    threshold: int = Field(default=2, gt=0, description="Minimum recent level tests")


class FibonacciAdapterConfig(BaseAdapterConfig):
    """Retracement bounce off the outer Fibonacci zones."""

    kind: Literal["fibonacci"] = "fibonacci"
    size: int = Field(default=20, gt=0, description="Rolling window size in bars")


class SuperTrendAdapterConfig(BaseAdapterConfig):
    """SuperTrend direction flips."""

    kind: Literal["supertrend"] = "supertrend"
    period: int = Field(default=7, ge=2)
    multiplier: float = Field(default=3.0, gt=0.0)


class BollingerAdapterConfig(BaseAdapterConfig):
    """Re-entry into the Bollinger Bands after a band break."""

    kind: Literal["bollinger"] = "bollinger"
    period: int = Field(default=20, gt=0)
    standard_deviations: float = Field(default=2.0, gt=0.0)
    max_total_historical_data: int = Field(default=10, gt=0)


AdapterConfig = Annotated[
    EMAAdapterConfig
    | RSIAdapterConfig
    | MACDAdapterConfig
    | PivotPointAdapterConfig
    | FibonacciAdapterConfig
    | SuperTrendAdapterConfig
    | BollingerAdapterConfig,
    Field(discriminator="kind"),
]

_ADAPTER_CONFIG_VALIDATOR: TypeAdapter[Any] = TypeAdapter(AdapterConfig)

ADAPTER_KINDS: tuple[str, ...] = (
    "ema",
    "rsi",
    "macd",
    "pivot_point",
    "fibonacci",
    "supertrend",
    "bollinger",
)


def default_adapter_pool() -> list[BaseAdapterConfig]:
    """Adapters used when no pool is configured."""
    return [
        EMAAdapterConfig(periods=(5, 10, 20)),
        RSIAdapterConfig(period=14, overbought_threshold=70.0, oversold_threshold=30.0),
        MACDAdapterConfig(short_period=12, long_period=26, signal_period=9),
        PivotPointAdapterConfig(),
        FibonacciAdapterConfig(),
        SuperTrendAdapterConfig(period=7, multiplier=3.0),
    ]


def parse_adapter_config(payload: dict[str, Any] | BaseAdapterConfig) -> BaseAdapterConfig:
    """Validate a raw mapping into the matching adapter configuration."""
    if isinstance(payload, BaseAdapterConfig):
        return payload
    return _ADAPTER_CONFIG_VALIDATOR.validate_python(payload)
