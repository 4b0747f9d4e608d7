"""Combination of indicator adapters into trading algorithms."""

from .combination_algorithm import (
    CombinationAlgorithm,
    combine_actions,
    create_combination_algorithms,
)

__all__ = ["CombinationAlgorithm", "combine_actions", "create_combination_algorithms"]
