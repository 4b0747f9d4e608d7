"""Backtest Engine - Main orchestrator for the backtesting system.

This module replays historical bars through every registered trading algorithm,
opens a hypothetical position on each BUY or SELL decision, follows it for a
fixed number of bars, and aggregates per-iteration performance statistics.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence

import pandas as pd

from consensus_backtester.core.config import BacktesterConfig, get_config
from consensus_backtester.core.errors import DataSourceError, IndicatorError
from consensus_backtester.core.interfaces import (
    HistoricalDataSourceProtocol,
    TradingAlgorithmProtocol,
)
from consensus_backtester.core.logger import bind_logger_context, get_backtester_logger
from consensus_backtester.core.monitoring import MetricTags, Monitoring, NoOpMonitoring
from consensus_backtester.core.performance import (
    IterationSummaryMetrics,
    OpenPosition,
    PerformanceMetrics,
    render_algorithm_report,
    summarize_iterations,
)
from consensus_backtester.data.data_request import HistoricalDataRequest
from consensus_backtester.data.price_bar import PriceBar
from consensus_backtester.strategy.factories import build_adapter_pool
from consensus_backtester.strategy.orchestration.combination_algorithm import (
    ALGORITHM_NAME_LABEL,
    create_combination_algorithms,
)

SUMMARY_COLUMNS: tuple[str, ...] = (
    "trades",
    "wins",
    "average_profit_percentage",
    "max_profit_percentage",
    "win_rate",
)


class BacktestEngine:
    """Main backtesting engine that coordinates algorithms and position bookkeeping."""

    def __init__(
        self,
        config: BacktesterConfig | None = None,
        *,
        algorithms: Iterable[TradingAlgorithmProtocol] | None = None,
        historical_data: Iterable[PriceBar] | None = None,
        track_iterations: int | None = None,
        logger: logging.Logger | None = None,
        monitor: Monitoring | None = None,
    ) -> None:
        """Initialize the backtest engine.

        Args:
            config: Configuration snapshot; the global configuration when omitted
            algorithms: Algorithms to replay the data through
            historical_data: Bars to replay, oldest first
            track_iterations: Bars each position is followed; overrides the config
            logger: Logger instance
            monitor: Metrics sink; no-op when omitted
        """
        self.config: BacktesterConfig = (config or get_config()).model_copy(deep=True)
        self.track_iterations = (
            track_iterations
            if track_iterations is not None
            else self.config.engine.track_iterations
        )
        if self.track_iterations < 1:
            raise ValueError(f"track_iterations must be positive, got {self.track_iterations}")
        self.on_error = self.config.engine.on_error

        self.run_id = uuid.uuid4().hex[:8]
        if logger is not None:
            self.logger = bind_logger_context(logger, run_id=self.run_id)
        else:
            self.logger = get_backtester_logger(__name__, run_id=self.run_id)
        self.monitor: Monitoring = monitor or NoOpMonitoring()

        self.algorithms: list[TradingAlgorithmProtocol] = []
        self.historical_data: list[PriceBar] = []
        self.performance: dict[str, PerformanceMetrics] = {}
        self.skipped_bars: dict[str, int] = {}
        self.bars_processed = 0

        if algorithms is not None:
            self.add_all_algorithms(algorithms)
        if historical_data is not None:
            self.set_historical_data(historical_data)

        self.logger.info(
            "Backtest engine initialized (track_iterations=%d, on_error=%s)",
            self.track_iterations,
            self.on_error,
        )

    # ------------------------------------------------------------------#
    # Setup
    # ------------------------------------------------------------------#
    def add_algorithm(self, algorithm: TradingAlgorithmProtocol) -> None:
        """Register one algorithm."""
        self.algorithms.append(algorithm)

    def add_all_algorithms(self, algorithms: Iterable[TradingAlgorithmProtocol]) -> None:
        """Register several algorithms, preserving their order."""
        for algorithm in algorithms:
            self.add_algorithm(algorithm)

    def build_algorithms(self, tags: MetricTags | None = None) -> int:
        """Register one combination algorithm per subset of the configured adapter pool.

        Returns:
            Number of algorithms registered
        """
        pool = build_adapter_pool(
            self.config.adapters, monitor=self.monitor, tags=tags, logger=self.logger
        )
        algorithms = create_combination_algorithms(
            pool, monitor=self.monitor, tags=tags, logger=self.logger
        )
        self.add_all_algorithms(algorithms)
        self.logger.info(
            "Registered %d combination algorithms from %d adapters", len(algorithms), len(pool)
        )
        return len(algorithms)

    def set_historical_data(self, bars: Iterable[PriceBar]) -> None:
        """Replace the bars to replay.

        Raises:
            DataSourceError: If the bars are not in strictly increasing time order
        """
        ordered = list(bars)
        for previous, current in zip(ordered, ordered[1:], strict=False):
            if current.time <= previous.time:
                raise DataSourceError(
                    f"Historical data must be strictly increasing in time: "
                    f"{current.time} follows {previous.time}"
                )
        self.historical_data = ordered

    def load_data(
        self,
        source: HistoricalDataSourceProtocol,
        request: HistoricalDataRequest | None = None,
    ) -> list[PriceBar]:
        """Load the bars to replay from ``source``.

        Args:
            source: Historical data source
            request: Window to load; derived from the data config when omitted

        Returns:
            The loaded bars, oldest first
        """
        target = request or self.config.data.to_request()
        self.logger.info(
            "Loading data for %s from %s to %s (%d %s)",
            target.ticker,
            target.start,
            target.end,
            target.interval,
            target.timespan.value,
        )
        bars = source.get_bars(target)
        self.set_historical_data(bars)
        self.logger.info("Loaded %d bars", len(self.historical_data))
        return self.historical_data

    # ------------------------------------------------------------------#
    # Replay
    # ------------------------------------------------------------------#
    def run(self) -> dict[str, PerformanceMetrics]:
        """Replay every bar through every algorithm.

        Returns:
            Performance bookkeeping keyed by algorithm name; empty when there are
            no bars to replay

        Raises:
            ValueError: If no algorithms are registered
            OrderingViolationError: When ``on_error`` is ``raise``
            InvalidInputError: When ``on_error`` is ``raise``
        """
        if not self.algorithms:
            raise ValueError("No algorithms registered. Call add_algorithm() first.")
        if not self.historical_data:
            self.logger.warning("No data loaded; nothing to replay")
            return self.performance

        self.logger.info(
            "Starting backtest: %d algorithms over %d bars",
            len(self.algorithms),
            len(self.historical_data),
        )
        for bar in self.historical_data:
            for algorithm in self.algorithms:
                self.process_bar(algorithm, bar)
            self.bars_processed += 1

        self.logger.info(
            "Backtest completed: %d algorithms evaluated, %d trades closed",
            len(self.performance),
            sum(metrics.trades_closed for metrics in self.performance.values()),
        )
        return self.performance

    def process_bar(self, algorithm: TradingAlgorithmProtocol, bar: PriceBar) -> None:
        """Run one time step for one algorithm."""
        name = algorithm.name
        tags = MetricTags.of(**{ALGORITHM_NAME_LABEL: name})
        try:
            signal = algorithm.evaluate(bar)
        except IndicatorError as exc:
            if self.on_error == "skip":
                self.skipped_bars[name] = self.skipped_bars.get(name, 0) + 1
                self.monitor.increment_counter("backtest_bars_skipped", tags)
                self.logger.warning("Skipping bar %d for %s: %s", bar.time, name, exc)
                return
            self.logger.error("Backtest aborted on bar %d for %s: %s", bar.time, name, exc)
            raise

        metrics = self.performance.get(name)
        if metrics is None:
            metrics = self.performance[name] = PerformanceMetrics()
        # Positions opened on this bar are not advanced until the next one.
        advancing = list(metrics.active_positions)

        if signal.action.opens_position:
            metrics.active_positions.append(OpenPosition(entry_bar=bar, signal=signal))
            self.monitor.increment_counter("backtest_positions_opened", tags)
            self.logger.debug("%s opened %s position at %d", name, signal.action, bar.time)

        if advancing:
            self._advance_positions(metrics, advancing, bar, tags)

    def _advance_positions(
        self,
        metrics: PerformanceMetrics,
        positions: Sequence[OpenPosition],
        bar: PriceBar,
        tags: MetricTags,
    ) -> None:
        for position in positions:
            sample = position.advance(bar)
            metrics.record_profit(sample.profit)
            self.monitor.observe(
                "backtest_position_profit_percentage",
                position.profit_percentage(sample),
                tags,
            )
            if position.is_complete(self.track_iterations):
                metrics.active_positions.remove(position)
                metrics.completed_positions.append(position)
                metrics.trades_closed += 1
                self.monitor.increment_counter("backtest_positions_closed", tags)

    # ------------------------------------------------------------------#
    # Results
    # ------------------------------------------------------------------#
    def iteration_summary(self, algorithm_name: str) -> dict[int, IterationSummaryMetrics]:
        """Per-iteration aggregates for one algorithm.

        Raises:
            KeyError: If the algorithm was never evaluated
        """
        metrics = self.performance[algorithm_name]
        return summarize_iterations(metrics.all_positions(), self.track_iterations)

    def summary_frame(self) -> pd.DataFrame:
        """Per-algorithm, per-iteration aggregates as a DataFrame.

        Returns:
            Frame indexed by ``(algorithm, iteration)`` with one column per statistic
        """
        records = []
        for name in self.performance:
            for index, entry in self.iteration_summary(name).items():
                records.append(
                    {
                        "algorithm": name,
                        "iteration": index,
                        **{column: getattr(entry, column) for column in SUMMARY_COLUMNS},
                    }
                )
        frame = pd.DataFrame.from_records(
            records, columns=["algorithm", "iteration", *SUMMARY_COLUMNS]
        )
        return frame.set_index(["algorithm", "iteration"])

    def generate_performance_report(self) -> str:
        """Generate detailed performance report.

        Returns:
            Formatted performance report
        """
        if not self.performance:
            return "No performance metrics available. Run backtest first."

        report = ["=" * 100, "BACKTEST PERFORMANCE REPORT", "=" * 100]
        report.append(f"Run: {self.run_id}")
        report.append(f"Bars Processed: {self.bars_processed}")
        report.append(f"Algorithms: {len(self.algorithms)}")
        report.append(f"Track Iterations: {self.track_iterations}")
        if self.skipped_bars:
            report.append(f"Skipped Bars: {sum(self.skipped_bars.values())}")

        for name, metrics in self.performance.items():
            report.append("")
            report.append(
                render_algorithm_report(name, metrics, self.iteration_summary(name))
            )
            report.append(
                f"Trades Closed: {metrics.trades_closed} | "
                f"Max Profit Seen: {metrics.max_profit_seen:.2f} | "
                f"Min Profit Seen: {metrics.min_profit_seen:.2f}"
            )

        report.append("=" * 100)
        return "\n".join(report)
