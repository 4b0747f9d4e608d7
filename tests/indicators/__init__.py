"""Test module for technical indicators.

This module contains all test files for testing the technical indicator implementations,
following the established testing patterns from the backtester project.
"""

# Re-export test utilities and common fixtures for easy access
__all__ = []
