"""Helpers for parsing CLI overrides for the backtest entrypoint."""

from .runtime import (
    CLIOverrides,
    build_arg_parser,
    build_run_config_from_cli,
    collect_overrides,
    parse_runtime_args,
)

__all__ = [
    "CLIOverrides",
    "build_arg_parser",
    "parse_runtime_args",
    "collect_overrides",
    "build_run_config_from_cli",
]
