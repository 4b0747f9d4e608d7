"""Historical bar sources backed by CSV files and pandas frames."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from consensus_backtester.core.errors import DataSourceError
from consensus_backtester.core.logger import get_backtester_logger
from consensus_backtester.data.data_request import HistoricalDataRequest
from consensus_backtester.data.price_bar import PriceBar

CSV_COLUMNS: tuple[str, ...] = ("Time", "Open", "High", "Low", "Close", "Volume")
_FRAME_COLUMNS: tuple[str, ...] = ("time", "open", "high", "low", "close", "volume")
_EPOCH = pd.Timestamp(0, tz="UTC")


def _to_epoch_millis(values: pd.Series) -> pd.Series:
    """Convert RFC3339 strings, datetimes or epoch-millis numbers to int64 millis."""
    if pd.api.types.is_numeric_dtype(values):
        return values.astype("int64")
    parsed = pd.to_datetime(values, utc=True, format="ISO8601")
    return ((parsed - _EPOCH) // pd.Timedelta(milliseconds=1)).astype("int64")


def _normalise_frame(frame: pd.DataFrame) -> pd.DataFrame:
    columns = {column: str(column).strip().lower() for column in frame.columns}
    renamed = frame.rename(columns=columns)
    missing = [column for column in _FRAME_COLUMNS if column not in renamed.columns]
    if missing == ["volume"]:
        renamed = renamed.assign(volume=0.0)
    elif missing:
        raise DataSourceError(f"Price frame is missing columns: {', '.join(missing)}")

    normalised = renamed.loc[:, list(_FRAME_COLUMNS)].copy()
    normalised["time"] = _to_epoch_millis(normalised["time"])
    for column in _FRAME_COLUMNS[1:]:
        normalised[column] = normalised[column].astype(float)
    normalised = normalised.sort_values("time", kind="stable")
    return normalised.drop_duplicates(subset="time", keep="last").reset_index(drop=True)


def bars_from_frame(frame: pd.DataFrame) -> list[PriceBar]:
    """Convert an OHLCV frame into time-ordered bars.

    Column names are matched case-insensitively. Rows are sorted by time and rows
    sharing a timestamp collapse to the last one.

    Args:
        frame: DataFrame with time, open, high, low, close and (optionally) volume

    Returns:
        List of PriceBar objects, oldest first

    Raises:
        DataSourceError: If required columns are missing or timestamps cannot be parsed
    """
    try:
        normalised = _normalise_frame(frame)
    except (ValueError, TypeError) as exc:
        raise DataSourceError(f"Unable to parse price frame: {exc}") from exc

    return [
        PriceBar(
            time=int(row.time),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in normalised.itertuples(index=False)
    ]


def bars_to_frame(bars: Iterable[PriceBar]) -> pd.DataFrame:
    """Convert bars into a DataFrame with lowercase OHLCV columns."""
    records = [bar.to_dict() for bar in bars]
    return pd.DataFrame.from_records(records, columns=list(_FRAME_COLUMNS))


def write_bars_csv(bars: Sequence[PriceBar], path: str | Path) -> Path:
    """Persist bars in the ``Time,Open,High,Low,Close,Volume`` CSV layout.

    Timestamps are written as RFC3339 strings in UTC.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    frame = bars_to_frame(bars)
    frame["time"] = pd.to_datetime(frame["time"], unit="ms", utc=True).dt.strftime(
        "%Y-%m-%dT%H:%M:%SZ"
    )
    frame.columns = list(CSV_COLUMNS)
    frame.to_csv(target, index=False)
    return target


class CSVDataSource:
    """Load bars from a CSV file or from ``<ticker>.csv`` inside a directory."""

    def __init__(self, path: str | Path, *, logger: logging.Logger | None = None) -> None:
        """Initialise the source.

        Args:
            path: CSV file, or directory holding one ``<TICKER>.csv`` file per ticker
            logger: Optional logger instance
        """
        self.path = Path(path)
        self.logger = logger or get_backtester_logger(__name__)

    def resolve_path(self, request: HistoricalDataRequest) -> Path:
        """Return the CSV file that serves ``request``."""
        if self.path.is_dir():
            for candidate in (f"{request.ticker}.csv", f"{request.ticker.lower()}.csv"):
                file_path = self.path / candidate
                if file_path.is_file():
                    return file_path
            raise DataSourceError(f"No CSV file for ticker {request.ticker} under {self.path}")
        if not self.path.is_file():
            raise DataSourceError(f"CSV file not found: {self.path}")
        return self.path

    def read_frame(self, request: HistoricalDataRequest) -> pd.DataFrame:
        """Read the request window as a normalised OHLCV frame."""
        file_path = self.resolve_path(request)
        self.logger.debug("Reading bars for %s from %s", request.ticker, file_path)
        try:
            raw = pd.read_csv(file_path)
            frame = _normalise_frame(raw)
        except (OSError, ValueError, TypeError, pd.errors.ParserError) as exc:
            raise DataSourceError(f"Unable to read price data from {file_path}: {exc}") from exc

        mask = (frame["time"] >= request.start_millis) & (frame["time"] < request.end_millis)
        return frame.loc[mask].reset_index(drop=True)

    def get_bars(self, request: HistoricalDataRequest) -> list[PriceBar]:
        """Return the bars inside the request window, oldest first."""
        frame = self.read_frame(request)
        bars = bars_from_frame(frame)
        self.logger.info(
            "Loaded %d bars for %s between %s and %s",
            len(bars),
            request.ticker,
            request.start,
            request.end,
        )
        return bars


class FrameDataSource:
    """Serve bars from an in-memory DataFrame."""

    def __init__(self, frame: pd.DataFrame) -> None:
        self._frame = _normalise_frame(frame)

    def get_bars(self, request: HistoricalDataRequest) -> list[PriceBar]:
        """Return the bars inside the request window, oldest first."""
        frame = self._frame
        mask = (frame["time"] >= request.start_millis) & (frame["time"] < request.end_millis)
        return bars_from_frame(frame.loc[mask])
