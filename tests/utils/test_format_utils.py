"""Tests for report formatting helpers."""

from consensus_backtester.utils.format_utils import (
    REPORT_DIVIDER,
    FormatUtils,
    format_percentage,
    format_table_row,
)


class TestFormatUtils:
    """Test FormatUtils methods."""

    def test_number(self) -> None:
        """Numbers get thousands separators."""
        formatter = FormatUtils()

        assert formatter.number(1234567) == "1,234,567"
        assert formatter.number(1234.567, decimals=2) == "1,234.57"
        assert formatter.number(None) == "0"

    def test_percentage(self) -> None:
        """Decimal values are rendered as percentages."""
        assert format_percentage(0.1234) == "12.34%"

    def test_percent_points(self) -> None:
        """Values already in percent get an explicit sign."""
        formatter = FormatUtils()

        assert formatter.percent_points(1.5) == "+1.50%"
        assert formatter.percent_points(-0.25) == "-0.25%"

    def test_table_cell(self) -> None:
        """Cells are padded to a fixed width."""
        formatter = FormatUtils()

        assert formatter.table_cell(1.5) == "1.50     "
        assert formatter.table_cell(3) == "        3"
        assert formatter.table_cell("BUY") == "BUY      "

    def test_table_row(self) -> None:
        """Rows join the label and cells with pipes."""
        row = format_table_row("Win Rate", ["1.00", "2.00"])

        assert row == "|Win Rate              | 1.00 | 2.00 |"

    def test_divider_width(self) -> None:
        """The divider spans the report width."""
        assert len(REPORT_DIVIDER) == 100
        assert REPORT_DIVIDER.startswith("|-")
