"""Indicator adapters and their configuration models."""

from .adapter_configs import (
    ADAPTER_KINDS,
    AdapterConfig,
    BaseAdapterConfig,
    BollingerAdapterConfig,
    EMAAdapterConfig,
    FibonacciAdapterConfig,
    MACDAdapterConfig,
    PivotPointAdapterConfig,
    RSIAdapterConfig,
    SuperTrendAdapterConfig,
    default_adapter_pool,
    parse_adapter_config,
)
from .base_adapter import BaseIndicatorAdapter
from .bollinger_adapter import BollingerAdapter
from .ema_adapter import EMAAdapter
from .fibonacci_adapter import FibonacciAdapter
from .macd_adapter import MACDAdapter
from .pivot_point_adapter import PivotPointAdapter
from .rsi_adapter import RSIAdapter
from .supertrend_adapter import SuperTrendAdapter

__all__ = [
    "ADAPTER_KINDS",
    "AdapterConfig",
    "BaseAdapterConfig",
    "BaseIndicatorAdapter",
    # Adapters
    "BollingerAdapter",
    "EMAAdapter",
    "FibonacciAdapter",
    "MACDAdapter",
    "PivotPointAdapter",
    "RSIAdapter",
    "SuperTrendAdapter",
    # Configs
    "BollingerAdapterConfig",
    "EMAAdapterConfig",
    "FibonacciAdapterConfig",
    "MACDAdapterConfig",
    "PivotPointAdapterConfig",
    "RSIAdapterConfig",
    "SuperTrendAdapterConfig",
    "default_adapter_pool",
    "parse_adapter_config",
]
