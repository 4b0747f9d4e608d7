"""OHLCV bar value type."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PriceBar:
    """One OHLCV sample.

    ``time`` is an epoch timestamp in milliseconds. Within a single indicator stream
    timestamps must be strictly increasing.
    """

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the bar as a plain dictionary."""
        return asdict(self)

    @property
    def midpoint(self) -> float:
        """Average of the bar's high and low."""
        return (self.high + self.low) / 2
