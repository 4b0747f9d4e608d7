"""Position bookkeeping and per-iteration performance aggregation.

Every decision that opens a position is followed for a fixed number of bars
(``track_iterations``). Each bar after the opening one adds an ``IterationData``
sample; once the position has ``track_iterations`` samples it is completed. After
a replay, samples are aggregated per iteration index across all positions of an
algorithm.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.signal.signal_types import StockAction, TradingSignal
from consensus_backtester.utils.format_utils import REPORT_DIVIDER, FormatUtils
from consensus_backtester.utils.math_utils import safe_divide


@dataclass(frozen=True, slots=True)
class IterationData:
    """One sample of an open position, taken on a bar after the opening bar."""

    time: int
    price: float
    profit: float
    iteration_number: int


@dataclass
class OpenPosition:
    """Hypothetical position opened on a BUY or SELL decision."""

    entry_bar: PriceBar
    signal: TradingSignal
    current_profit: float = 0.0
    iteration_count: int = 0
    winning_iterations: int = 0
    iteration_history: list[IterationData] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Reject decisions that do not open a position."""
        if not self.signal.action.opens_position:
            raise ValueError(f"Cannot open a position on a {self.signal.action.value} signal")

    @property
    def action(self) -> StockAction:
        return self.signal.action

    def profit_at(self, bar: PriceBar) -> float:
        """Profit of the position if it were valued at ``bar``'s close."""
        if self.action is StockAction.BUY:
            return bar.close - self.entry_bar.close
        return self.entry_bar.close - bar.close

    def advance(self, bar: PriceBar) -> IterationData:
        """Record the next sample and return it."""
        profit = self.profit_at(bar)
        self.current_profit = profit
        if profit > 0:
            self.winning_iterations += 1
        self.iteration_count += 1
        sample = IterationData(
            time=bar.time,
            price=bar.close,
            profit=profit,
            iteration_number=self.iteration_count,
        )
        self.iteration_history.append(sample)
        return sample

    def is_complete(self, track_iterations: int) -> bool:
        return self.iteration_count >= track_iterations

    def profit_percentage(self, sample: IterationData) -> float:
        """Profit of ``sample`` relative to the entry close, in percent."""
        return sample.profit / self.entry_bar.close * 100

    def profit_percentages(self) -> list[float]:
        return [self.profit_percentage(sample) for sample in self.iteration_history]


@dataclass
class PerformanceMetrics:
    """Running bookkeeping for one algorithm."""

    trades_closed: int = 0
    max_profit_seen: float = 0.0
    min_profit_seen: float = 0.0
    active_positions: list[OpenPosition] = field(default_factory=list)
    completed_positions: list[OpenPosition] = field(default_factory=list)

    def record_profit(self, profit: float) -> None:
        """Track the extreme profits seen across every sample."""
        self.max_profit_seen = max(self.max_profit_seen, profit)
        self.min_profit_seen = min(self.min_profit_seen, profit)

    def all_positions(self) -> Iterator[OpenPosition]:
        """Completed positions first, then the ones still open."""
        yield from self.completed_positions
        yield from self.active_positions

    def to_dict(self) -> dict[str, Any]:
        return {
            "trades_closed": self.trades_closed,
            "max_profit_seen": self.max_profit_seen,
            "min_profit_seen": self.min_profit_seen,
            "active_positions": len(self.active_positions),
            "completed_positions": len(self.completed_positions),
        }


@dataclass
class IterationSummaryMetrics:
    """Aggregate of every position's sample at one iteration index."""

    iteration_number: int
    trades: int = 0
    wins: int = 0
    total_profit_percentage: float = 0.0
    average_profit_percentage: float = 0.0
    max_profit_percentage: float = 0.0
    win_rate: float = 0.0

    def add_sample(self, profit_percentage: float, profit: float) -> None:
        self.trades += 1
        self.total_profit_percentage += profit_percentage
        if profit > 0:
            self.wins += 1
        self.max_profit_percentage = max(self.max_profit_percentage, profit_percentage)

    def finalize(self) -> None:
        """Derive averages; an index without trades keeps 0.0."""
        self.average_profit_percentage = safe_divide(self.total_profit_percentage, self.trades)
        self.win_rate = safe_divide(self.wins, self.trades) * 100

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def summarize_iterations(
    positions: Iterable[OpenPosition],
    track_iterations: int | None = None,
) -> dict[int, IterationSummaryMetrics]:
    """Aggregate position samples per iteration index.

    Args:
        positions: Positions to aggregate (completed and still open)
        track_iterations: When given, indices ``1..track_iterations`` are always
            present, with zero-trade entries where no position reached them

    Returns:
        Mapping of iteration index to its summary, in ascending index order
    """
    summary: dict[int, IterationSummaryMetrics] = {}
    if track_iterations:
        for index in range(1, track_iterations + 1):
            summary[index] = IterationSummaryMetrics(iteration_number=index)

    for position in positions:
        for sample in position.iteration_history:
            entry = summary.setdefault(
                sample.iteration_number,
                IterationSummaryMetrics(iteration_number=sample.iteration_number),
            )
            entry.add_sample(position.profit_percentage(sample), sample.profit)

    for entry in summary.values():
        entry.finalize()
    return dict(sorted(summary.items()))


_SUMMARY_ROWS: tuple[tuple[str, str], ...] = (
    ("Number of Trades", "trades"),
    ("Number of Wins", "wins"),
    ("Avg Profit Percent", "average_profit_percentage"),
    ("Max Profit Percent", "max_profit_percentage"),
    ("Win Rate", "win_rate"),
)


def render_algorithm_report(
    algorithm_name: str,
    metrics: PerformanceMetrics,
    summary: Mapping[int, IterationSummaryMetrics],
) -> str:
    """Render one algorithm's positions and iteration summary as a text table.

    Each position row lists its profit percentage per iteration; the footer rows
    list the per-iteration aggregates.
    """
    fmt = FormatUtils()
    indices = list(summary)
    lines = [
        f"Algorithm: {algorithm_name}",
        "Performance by Iteration:",
        fmt.table_row(
            f"{'Position Time':<13} | {'Signal':<6}",
            [fmt.table_cell(index) for index in indices],
        ),
        REPORT_DIVIDER,
    ]

    for position in [*metrics.active_positions, *metrics.completed_positions]:
        label = f"{position.signal.time:<13d} | {position.action.value:<6}"
        cells = [fmt.table_cell(value) for value in position.profit_percentages()]
        lines.append(fmt.table_row(label, cells))

    lines.append(REPORT_DIVIDER)
    for label, attribute in _SUMMARY_ROWS:
        cells = [fmt.table_cell(getattr(entry, attribute)) for entry in summary.values()]
        lines.append(fmt.table_row(label, cells))
    lines.append(REPORT_DIVIDER)
    return "\n".join(lines)
