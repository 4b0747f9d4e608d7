"""Historical data request model."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Timespan(StrEnum):
    """Bar aggregation unit."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"


class HistoricalDataRequest(BaseModel):
    """Describe the bars a data source should return.

    ``start`` and ``end`` are calendar days in UTC; both are inclusive.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ticker: str = Field(min_length=1, description="Instrument symbol")
    interval: int = Field(default=1, gt=0, description="Number of timespans per bar")
    timespan: Timespan = Field(default=Timespan.DAY, description="Bar aggregation unit")
    start: date
    end: date

    @field_validator("ticker")
    @classmethod
    def _normalise_ticker(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("ticker must not be blank")
        return stripped.upper()

    @model_validator(mode="after")
    def _check_window(self) -> HistoricalDataRequest:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must not be before start ({self.start})")
        return self

    @property
    def start_millis(self) -> int:
        """Inclusive lower bound of the window in epoch milliseconds."""
        return _day_start_millis(self.start)

    @property
    def end_millis(self) -> int:
        """Exclusive upper bound of the window in epoch milliseconds."""
        return _day_start_millis(self.end + timedelta(days=1))


def _day_start_millis(day: date) -> int:
    return int(datetime.combine(day, time.min, tzinfo=UTC).timestamp() * 1000)
