"""Utility functions and helper classes for the backtester.

This module provides the bounded rolling window used by every streaming component,
line-crossing and tolerance-band math, and report formatting helpers.
"""

from consensus_backtester.utils.format_utils import (
    FormatUtils,
    format_percentage,
    format_table_row,
)
from consensus_backtester.utils.math_utils import (
    MathUtils,
    is_line_intersect,
    is_within_band,
    population_std,
    safe_divide,
    simple_mean,
)
from consensus_backtester.utils.rolling_window import RollingWindow

__all__ = [
    'FormatUtils',
    'MathUtils',
    'RollingWindow',
    'format_percentage',
    'format_table_row',
    'is_line_intersect',
    'is_within_band',
    'population_std',
    'safe_divide',
    'simple_mean',
]
