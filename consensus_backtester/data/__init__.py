"""Price data types and historical bar sources."""

from consensus_backtester.data.data_request import HistoricalDataRequest, Timespan
from consensus_backtester.data.data_source import (
    CSVDataSource,
    FrameDataSource,
    bars_from_frame,
    bars_to_frame,
    write_bars_csv,
)
from consensus_backtester.data.price_bar import PriceBar

__all__ = [
    "CSVDataSource",
    "FrameDataSource",
    "HistoricalDataRequest",
    "PriceBar",
    "Timespan",
    "bars_from_frame",
    "bars_to_frame",
    "write_bars_csv",
]
