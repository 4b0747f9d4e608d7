"""Streaming technical indicators.

Each indicator consumes one price bar at a time, keeps a bounded history and
exposes its latest derived values. Indicators register themselves with
``IndicatorFactory`` on import.
"""

from .base_indicator import BaseIndicator, IndicatorFactory
from .bollinger_bands import BollingerBandsIndicator
from .ema import EMAIndicator
from .fibonacci import FibonacciIndicator, FibonacciLevel
from .indicator_configs import IndicatorConfig
from .macd import MACDIndicator, MACDResult
from .pivot_point import PivotLevels, PivotPointIndicator
from .rsi import RSIIndicator
from .supertrend import SuperTrendIndicator

__all__ = [
    "BaseIndicator",
    "IndicatorConfig",
    "IndicatorFactory",
    # Indicator classes
    "BollingerBandsIndicator",
    "EMAIndicator",
    "FibonacciIndicator",
    "MACDIndicator",
    "PivotPointIndicator",
    "RSIIndicator",
    "SuperTrendIndicator",
    # Value types
    "FibonacciLevel",
    "MACDResult",
    "PivotLevels",
]
