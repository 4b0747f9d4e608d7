"""Formatting utilities for numbers and performance report tables."""

from collections.abc import Sequence

REPORT_DIVIDER = "|" + "-" * 99


class FormatUtils:
    """Utility class for formatting report values."""

    def number(self, value: int | float | None, decimals: int = 0) -> str:
        """Format number with thousands separator.

        Args:
            value: Number to format
            decimals: Number of decimal places

        Returns:
            Formatted number string
        """
        try:
            value = 0.0 if value is None else float(value)
        except (ValueError, TypeError):
            value = 0.0

        if decimals == 0:
            return f"{value:,.0f}"
        return f"{value:,.{decimals}f}"

    def percentage(self, value: float, decimals: int = 2) -> str:
        """Format value as percentage.

        Args:
            value: Decimal value (e.g., 0.1234 for 12.34%)
            decimals: Number of decimal places

        Returns:
            Formatted percentage string
        """
        return f"{value * 100:.{decimals}f}%"

    def percent_points(self, value: float, decimals: int = 2) -> str:
        """Format a value that is already expressed in percent, with sign."""
        sign = "+" if value >= 0 else ""
        return f"{sign}{value:.{decimals}f}%"

    def table_cell(self, value: float | int | str, width: int = 9, decimals: int = 2) -> str:
        """Left-align a value in a fixed-width report cell.

        Integers are rendered right-aligned so iteration headers line up with the
        numeric columns below them.
        """
        if isinstance(value, str):
            return f"{value:<{width}}"
        if isinstance(value, int) and not isinstance(value, bool):
            return f"{value:>{width}d}"
        return f"{value:<{width}.{decimals}f}"

    def table_row(self, label: str, cells: Sequence[str], label_width: int = 21) -> str:
        """Render a ``|label | cell | cell |`` report row."""
        row = f"|{label:<{label_width}} | "
        for cell in cells:
            row += f"{cell} | "
        return row.rstrip()


def format_percentage(value: float, decimals: int = 2) -> str:
    """Format value as percentage."""
    formatter = FormatUtils()
    return formatter.percentage(value, decimals)


def format_table_row(label: str, cells: Sequence[str], label_width: int = 21) -> str:
    """Render a report table row."""
    return FormatUtils().table_row(label, cells, label_width)
