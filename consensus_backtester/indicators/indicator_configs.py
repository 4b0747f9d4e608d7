"""Indicator configuration model.

One pydantic model carries the parameters of every streaming indicator. Each
indicator reads the fields that apply to it; cross-field checks run per indicator
family in ``validate_for_indicator``.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_INDICATOR_TYPE_HINTS: dict[str, str] = {
    'ema': 'trend',
    'supertrend': 'trend',
    'rsi': 'momentum',
    'macd': 'momentum',
    'bollinger': 'volatility',
    'pivot': 'support_resistance',
    'fibonacci': 'support_resistance',
}

VALID_INDICATOR_TYPES: tuple[str, ...] = ('trend', 'momentum', 'volatility', 'support_resistance')


class IndicatorConfig(BaseModel):
    """Configuration for streaming indicator parameters."""

    model_config = ConfigDict(
        validate_assignment=False,
        json_schema_extra={
            'component': 'indicator',
            'yaml_example': {
                'indicator_name': 'rsi',
                'factory_name': 'rsi',
                'indicator_type': 'momentum',
                'period': 14,
            },
        },
    )

    indicator_name: str = Field(description="Name of the indicator")
    indicator_type: str = Field(default="trend", description="Type/category of indicator")
    factory_name: str | None = Field(
        default=None,
        description="Optional IndicatorFactory registration name",
    )
    period: int = Field(default=14, description="Lookback period / window size")

    # MACD
    fast_period: int = Field(default=12, description="Short EMA period for MACD")
    slow_period: int = Field(default=26, description="Long EMA period for MACD")
    signal_period: int = Field(default=9, description="Signal line period for MACD")

    # Volatility bands
    standard_deviations: float = Field(default=2.0, description="Bollinger band width in sigma")
    atr_multiplier: float = Field(default=3.0, description="ATR multiplier for SuperTrend")

    @field_validator('indicator_name')
    @classmethod
    def validate_indicator_name(cls, v: str) -> str:
        """Ensure indicator name is a non-empty string."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("indicator_name must be a non-empty string")
        return v.strip()

    @field_validator('indicator_type', mode='before')
    @classmethod
    def validate_indicator_type(cls, v: str) -> str:
        """Validate indicator type is one of the allowed values."""
        value = str(v).lower().strip()
        if value not in VALID_INDICATOR_TYPES:
            raise ValueError(f"indicator_type must be one of {list(VALID_INDICATOR_TYPES)}")
        return value

    @field_validator('period', 'fast_period', 'slow_period', 'signal_period')
    @classmethod
    def validate_positive_periods(cls, v: int) -> int:
        """Validate that all period parameters are positive."""
        if v <= 0:
            raise ValueError("Period must be positive")
        return v

    @field_validator('standard_deviations', 'atr_multiplier')
    @classmethod
    def validate_positive_multipliers(cls, v: float) -> float:
        """Validate band multipliers are strictly positive."""
        if v <= 0:
            raise ValueError(f"Multiplier {v} must be positive")
        return v

    @model_validator(mode='after')
    def _normalise_indicator(self) -> 'IndicatorConfig':
        """Infer indicator type and factory name from the indicator name."""
        normalized_lower = self.indicator_name.lower()

        for key, hint in _INDICATOR_TYPE_HINTS.items():
            if normalized_lower == key or normalized_lower.startswith(key):
                self.indicator_type = hint
                break

        if self.factory_name is None:
            self.factory_name = normalized_lower

        self.validate_for_indicator()
        return self

    def validate_for_indicator(self) -> None:
        """Validate configuration is appropriate for the specified indicator.

        Raises:
            ValueError: If configuration is invalid for the indicator type
        """
        name = self.indicator_name.lower()
        if name.startswith('macd') and self.fast_period >= self.slow_period:
            raise ValueError("Fast period must be less than slow period for MACD")
        if name.startswith('rsi') and self.period < 2:
            raise ValueError("RSI period must be at least 2")
        if name.startswith('supertrend') and self.period < 2:
            raise ValueError("SuperTrend period must be at least 2")
