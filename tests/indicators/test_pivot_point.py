"""Unit tests for the pivot point indicator."""

import pytest

from consensus_backtester.indicators.pivot_point import PivotLevels, PivotPointIndicator


class TestPivotLevels:
    """Test the floor-trader level formulas."""

    def test_from_bar(self, bar_factory) -> None:
        """Levels are spaced by the bar's range around the pivot."""
        levels = PivotLevels.from_bar(bar_factory(1, 100.0, high=110.0, low=90.0))

        assert levels.pivot == pytest.approx(100.0)
        assert (levels.support1, levels.support2, levels.support3) == pytest.approx(
            (90.0, 80.0, 70.0)
        )
        assert (levels.resistance1, levels.resistance2, levels.resistance3) == pytest.approx(
            (110.0, 120.0, 130.0)
        )


class TestPivotPointIndicator:
    """Test pivot point streaming behaviour."""

    def test_first_bar_is_reference_only(self, bar_factory) -> None:
        """A single bar does not initialise the indicator."""
        pivot = PivotPointIndicator(PivotPointIndicator.default_config())
        pivot.add_data_point(bar_factory(1, 100.0, high=110.0, low=90.0))

        assert not pivot.is_initialized
        assert pivot.previous_bar is None
        assert pivot.levels == PivotLevels()

    def test_levels_come_from_previous_bar(self, bar_factory) -> None:
        """From the second bar on, levels use the bar before the current one."""
        pivot = PivotPointIndicator(PivotPointIndicator.default_config())
        pivot.add_data_point(bar_factory(1, 100.0, high=110.0, low=90.0))
        pivot.add_data_point(bar_factory(2, 50.0, high=60.0, low=40.0))

        assert pivot.is_initialized
        assert pivot.levels.pivot == pytest.approx(100.0)
        assert pivot.snapshot()["resistance3"] == pytest.approx(130.0)

        pivot.add_data_point(bar_factory(3, 55.0))
        assert pivot.levels.pivot == pytest.approx(50.0)
        assert pivot.levels.support1 == pytest.approx(40.0)
