"""Mathematical helpers shared by indicators and signal adapters."""

from collections.abc import Sequence

import numpy as np


class MathUtils:
    """Utility class for mathematical operations."""

    @staticmethod
    def is_line_intersect(first: Sequence[float], second: Sequence[float]) -> bool:
        """Check whether two equally sampled series cross each other.

        The series intersect when their relative order at the first sample differs
        strictly from their relative order at the last sample.

        Args:
            first: First series, oldest value first
            second: Second series, oldest value first

        Returns:
            True when the series cross, False otherwise (including for series with
            fewer than two samples)
        """
        if len(first) <= 1 or len(second) <= 1:
            return False

        first_start, first_end = first[0], first[-1]
        second_start, second_end = second[0], second[-1]
        if first_start > second_start and first_end < second_end:
            return True
        return first_start < second_start and first_end > second_end

    @staticmethod
    def simple_mean(values: Sequence[float]) -> float:
        """Calculate the arithmetic mean of ``values`` (0.0 when empty)."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(np.asarray(values, dtype=float)))

    @staticmethod
    def population_std(values: Sequence[float]) -> float:
        """Calculate the population standard deviation of ``values`` (0.0 when empty)."""
        if len(values) == 0:
            return 0.0
        return float(np.std(np.asarray(values, dtype=float), ddof=0))

    @staticmethod
    def band_tolerance(lower: float, middle: float, upper: float, fraction: float = 0.25) -> float:
        """Width of the tolerance band around ``middle``.

        Args:
            lower: Neighbouring level below ``middle``
            middle: Level being tested
            upper: Neighbouring level above ``middle``
            fraction: Share of the narrower neighbour distance to use

        Returns:
            Half-width of the band centred on ``middle``
        """
        return min(abs(middle - lower), abs(upper - middle)) * fraction

    @staticmethod
    def is_within_band(
        value: float, lower: float, middle: float, upper: float, fraction: float = 0.25
    ) -> bool:
        """Check whether ``value`` lies inside the tolerance band around ``middle``."""
        tolerance = MathUtils.band_tolerance(lower, middle, upper, fraction)
        return middle - tolerance <= value <= middle + tolerance

    @staticmethod
    def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
        """Safe division that handles zero and infinite denominators.

        Args:
            numerator: Numerator
            denominator: Denominator
            default: Default value to return if division is not possible

        Returns:
            Division result or default value
        """
        if denominator == 0 or np.isinf(denominator):
            return default
        return numerator / denominator


def is_line_intersect(first: Sequence[float], second: Sequence[float]) -> bool:
    """Check whether two series cross each other."""
    return MathUtils.is_line_intersect(first, second)


def simple_mean(values: Sequence[float]) -> float:
    """Calculate the arithmetic mean."""
    return MathUtils.simple_mean(values)


def population_std(values: Sequence[float]) -> float:
    """Calculate the population standard deviation."""
    return MathUtils.population_std(values)


def is_within_band(
    value: float, lower: float, middle: float, upper: float, fraction: float = 0.25
) -> bool:
    """Check whether a value lies in the tolerance band around a level."""
    return MathUtils.is_within_band(value, lower, middle, upper, fraction)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division function."""
    return MathUtils.safe_divide(numerator, denominator, default)
