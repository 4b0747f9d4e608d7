"""Runtime helpers for CLI-driven configuration overrides."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from consensus_backtester.core.config import BacktesterConfig
from consensus_backtester.core.config_processor import ConfigInput, ConfigProcessor


@dataclass
class CLIOverrides:
    """Container for parsed CLI/environment overrides."""

    dry_run: bool = False
    _component_overrides: dict[str, dict[str, Any]] = field(
        default_factory=dict,
        repr=False,
    )

    def has_overrides(self) -> bool:
        """Return True when any component overrides are present."""
        return bool(self._component_overrides)

    def component_overrides(self) -> Mapping[str, Mapping[str, Any]]:
        """Return the raw component override payloads."""
        return self._component_overrides

    def get_override(self, component: str) -> Mapping[str, Any] | None:
        """Return the raw overrides for an individual component."""
        return self._component_overrides.get(component)


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the shared argparse parser for CLI entrypoints."""
    parser = argparse.ArgumentParser(
        description="Backtest every combination of an indicator adapter pool."
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a BacktesterConfig YAML merged before CLI/environment overrides.",
    )
    parser.add_argument("--csv", help="CSV file, or directory of <TICKER>.csv files.")
    parser.add_argument("--ticker", help="Ticker to replay.")
    parser.add_argument("--start-date", help="First day to replay (YYYY-MM-DD).")
    parser.add_argument("--end-date", help="Last day to replay (YYYY-MM-DD).")
    parser.add_argument(
        "--track-iterations",
        type=int,
        help="Number of bars each position is followed after it opens.",
    )
    parser.add_argument(
        "--on-error",
        choices=["raise", "skip"],
        help="Abort on indicator errors, or skip the offending bar for that algorithm.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Root log level.",
    )
    parser.add_argument(
        "--monitoring",
        choices=["noop", "memory", "prometheus"],
        help="Metrics sink.",
    )
    parser.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics on a port.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve the configuration and load data without running the backtest.",
    )
    return parser


def parse_runtime_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using the shared parser."""
    parser = build_arg_parser()
    return parser.parse_args(list(argv) if argv is not None else None)


# argparse destination -> (component, field)
_ARGUMENT_OVERRIDES: dict[str, tuple[str, str]] = {
    "csv": ("data", "csv_path"),
    "ticker": ("data", "ticker"),
    "start_date": ("data", "start_date"),
    "end_date": ("data", "end_date"),
    "track_iterations": ("engine", "track_iterations"),
    "on_error": ("engine", "on_error"),
    "log_level": ("logging", "level"),
    "monitoring": ("monitoring", "backend"),
    "metrics_port": ("monitoring", "port"),
}


def collect_overrides(
    args: argparse.Namespace,
    env: Mapping[str, str] | None = None,
    *,
    processor: ConfigProcessor | None = None,
) -> CLIOverrides:
    """Merge environment and CLI values into component override dictionaries.

    CLI arguments win over ``BACKTEST_*`` environment variables.
    """
    processor = processor or ConfigProcessor()
    component_payloads = processor.environment_overrides(env)

    for destination, (component, field_name) in _ARGUMENT_OVERRIDES.items():
        value = getattr(args, destination, None)
        if value is None:
            continue
        component_payloads.setdefault(component, {})[field_name] = value

    resolved_env = env if env is not None else os.environ
    dry_run = bool(args.dry_run) or _is_truthy(resolved_env.get("BACKTEST_DRY_RUN"))
    return CLIOverrides(dry_run=dry_run, _component_overrides=component_payloads)


def build_run_config_from_cli(
    overrides: CLIOverrides,
    *,
    config_source: ConfigInput | None = None,
    processor: ConfigProcessor | None = None,
) -> BacktesterConfig:
    """Apply parsed CLI overrides on top of ``config_source``."""
    processor = processor or ConfigProcessor()
    component_overrides = overrides.component_overrides()
    return processor.apply(
        source=config_source,
        component_overrides=component_overrides if component_overrides else None,
    )


def _is_truthy(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes"}
