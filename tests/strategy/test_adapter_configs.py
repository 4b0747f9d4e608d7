"""Tests for adapter configuration models."""

import pytest
from pydantic import ValidationError

from consensus_backtester.strategy.signal.adapter_configs import (
    ADAPTER_KINDS,
    BollingerAdapterConfig,
    EMAAdapterConfig,
    FibonacciAdapterConfig,
    MACDAdapterConfig,
    RSIAdapterConfig,
    SuperTrendAdapterConfig,
    default_adapter_pool,
    parse_adapter_config,
)


class TestParseAdapterConfig:
    """Test discriminated parsing of raw mappings."""

    @pytest.mark.parametrize(
        ("payload", "expected_type"),
        [
            ({"kind": "ema", "periods": [20, 5]}, EMAAdapterConfig),
            ({"kind": "rsi"}, RSIAdapterConfig),
            ({"kind": "macd", "short_period": 3, "long_period": 6}, MACDAdapterConfig),
            ({"kind": "fibonacci", "size": 10}, FibonacciAdapterConfig),
            ({"kind": "supertrend", "multiplier": 2}, SuperTrendAdapterConfig),
            ({"kind": "bollinger"}, BollingerAdapterConfig),
        ],
    )
    def test_kind_selects_model(self, payload, expected_type) -> None:
        """The kind field picks the configuration model."""
        assert isinstance(parse_adapter_config(payload), expected_type)

    def test_models_pass_through(self) -> None:
        """Already-built configs are returned unchanged."""
        config = RSIAdapterConfig(period=7)

        assert parse_adapter_config(config) is config

    def test_unknown_kind(self) -> None:
        """Unknown kinds fail validation."""
        with pytest.raises(ValidationError):
            parse_adapter_config({"kind": "vwap"})

    def test_extra_fields_forbidden(self) -> None:
        """Misspelt fields are not silently ignored."""
        with pytest.raises(ValidationError):
            parse_adapter_config({"kind": "rsi", "peroid": 3})


class TestAdapterConfigValidation:
    """Test per-kind validators."""

    def test_ema_periods_sorted(self) -> None:
        """EMA periods are stored in ascending order."""
        assert EMAAdapterConfig(periods=(20, 5, 10)).periods == (5, 10, 20)

    @pytest.mark.parametrize(
        ("periods", "message"),
        [
            ((5,), "at least two periods"),
            ((5, 0), "must be positive"),
            ((5, 5), "must be distinct"),
        ],
    )
    def test_ema_periods_rejected(self, periods, message) -> None:
        """Invalid EMA period sets are rejected."""
        with pytest.raises(ValidationError, match=message):
            EMAAdapterConfig(periods=periods)

    def test_rsi_thresholds_ordered(self) -> None:
        """Overbought must sit above oversold."""
        with pytest.raises(ValidationError, match="Overbought threshold must be greater"):
            RSIAdapterConfig(overbought_threshold=30.0, oversold_threshold=70.0)

    def test_macd_periods_ordered(self) -> None:
        """The short MACD period must be below the long one."""
        with pytest.raises(ValidationError, match="Short period must be less than long period"):
            MACDAdapterConfig(short_period=26, long_period=12)

    def test_supertrend_multiplier_positive(self) -> None:
        """SuperTrend needs a positive multiplier."""
        with pytest.raises(ValidationError):
            SuperTrendAdapterConfig(multiplier=0.0)

    def test_configs_are_frozen(self) -> None:
        """Configs cannot be mutated once built."""
        config = FibonacciAdapterConfig()

        with pytest.raises(ValidationError):
            config.size = 5


class TestDefaultAdapterPool:
    """Test the default pool."""

    def test_default_pool(self) -> None:
        """The default pool holds the six classic adapters in order."""
        pool = default_adapter_pool()

        assert [config.kind for config in pool] == list(ADAPTER_KINDS[:6])
        assert pool[0].periods == (5, 10, 20)
        assert pool[1].max_total_historical_data == 10

    def test_default_pool_is_fresh(self) -> None:
        """Each call returns a new list."""
        assert default_adapter_pool() is not default_adapter_pool()
