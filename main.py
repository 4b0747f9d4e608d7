"""Consensus Backtester Main Entry Point.

This module provides the main entry point for replaying a price history through
every combination of the configured indicator adapters.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence

from consensus_backtester.cli import (
    build_run_config_from_cli,
    collect_overrides,
    parse_runtime_args,
)
from consensus_backtester.core.backtest_engine import BacktestEngine
from consensus_backtester.core.config import get_config
from consensus_backtester.core.config_processor import ConfigProcessor, ConfigProcessorError
from consensus_backtester.core.errors import BacktesterError
from consensus_backtester.core.logger import BacktesterLogger
from consensus_backtester.core.monitoring import PrometheusMonitoring, build_monitoring
from consensus_backtester.data.data_source import CSVDataSource


def main(argv: Sequence[str] | None = None) -> int:
    """Run a backtest configured from YAML, environment and CLI overrides."""
    args = parse_runtime_args(argv)
    processor = ConfigProcessor(base=get_config())

    try:
        overrides = collect_overrides(args, processor=processor)
        config_source = args.config or os.environ.get("BACKTEST_CONFIG_PATH")
        run_config = build_run_config_from_cli(
            overrides,
            processor=processor,
            config_source=config_source,
        )
    except (ValueError, ConfigProcessorError) as exc:
        print(f"[consensus-backtester] {exc}", file=sys.stderr)
        return 2

    if run_config.data.csv_path is None:
        print(
            "[consensus-backtester] No price data configured; pass --csv or set data.csv_path.",
            file=sys.stderr,
        )
        return 2

    logging_config = run_config.logging
    BacktesterLogger.configure(
        level=logging_config.level,
        file_path=logging_config.file_path,
        structured=logging_config.structured,
        console=logging_config.console,
    )

    monitoring_config = run_config.monitoring
    if monitoring_config.backend == "prometheus":
        monitor = build_monitoring("prometheus", namespace=monitoring_config.namespace)
    else:
        monitor = build_monitoring(monitoring_config.backend)

    engine = BacktestEngine(run_config, monitor=monitor)
    try:
        engine.load_data(CSVDataSource(run_config.data.csv_path, logger=engine.logger))
        engine.build_algorithms()
    except (ValueError, BacktesterError) as exc:
        print(f"[consensus-backtester] {exc}", file=sys.stderr)
        return 1

    if overrides.dry_run:
        print(
            f"Backtest engine initialised with {len(engine.algorithms)} algorithms "
            f"and {len(engine.historical_data)} bars."
        )
        return 0

    if monitoring_config.port is not None and isinstance(monitor, PrometheusMonitoring):
        monitor.expose(monitoring_config.port)

    try:
        engine.run()
    except (ValueError, BacktesterError) as exc:
        print(f"[consensus-backtester] Backtest execution failed: {exc}", file=sys.stderr)
        return 1

    print(engine.generate_performance_report())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
