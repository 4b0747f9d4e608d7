"""Tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

import main
from consensus_backtester.core.logger import BacktesterLogger
from consensus_backtester.data.data_source import write_bars_csv
from consensus_backtester.data.price_bar import PriceBar

JAN_2024_MS = 1_704_067_200_000
DAY_MS = 86_400_000


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch):
    for variable in ("BACKTEST_CONFIG_PATH", "BACKTEST_CSV_PATH", "BACKTEST_DRY_RUN"):
        monkeypatch.delenv(variable, raising=False)
    yield
    BacktesterLogger.reset()


@pytest.fixture
def csv_path(tmp_path: Path, sine_bars) -> Path:
    return write_bars_csv(sine_bars, tmp_path / "SPY.csv")


def _adapter_config(tmp_path: Path, adapters, **engine) -> Path:
    path = tmp_path / "backtest.yaml"
    path.write_text(yaml.safe_dump({"adapters": adapters, "engine": engine}), encoding="utf-8")
    return path


def test_missing_csv_path(capsys) -> None:
    """Without price data the entry point exits with a usage error."""
    assert main.main([]) == 2
    assert "No price data configured" in capsys.readouterr().err


def test_invalid_configuration(capsys) -> None:
    """Configuration errors exit with status 2."""
    exit_code = main.main(
        ["--csv", "prices.csv", "--start-date", "2024-02-01", "--end-date", "2024-01-01"]
    )

    assert exit_code == 2
    assert "Invalid backtest configuration" in capsys.readouterr().err


def test_unreadable_data(tmp_path: Path, capsys) -> None:
    """Data loading errors exit with status 1."""
    exit_code = main.main(["--csv", str(tmp_path / "absent.csv"), "--log-level", "ERROR"])

    assert exit_code == 1
    assert "CSV file not found" in capsys.readouterr().err


def test_dry_run(csv_path: Path, capsys) -> None:
    """A dry run reports the prepared engine without replaying."""
    exit_code = main.main(["--csv", str(csv_path), "--dry-run", "--log-level", "ERROR"])

    assert exit_code == 0
    assert "63 algorithms and 120 bars" in capsys.readouterr().out


def test_full_run_prints_report(csv_path: Path, tmp_path: Path, capsys) -> None:
    """A complete run prints the performance report."""
    config_path = _adapter_config(tmp_path, [{"kind": "ema"}, {"kind": "supertrend"}])

    exit_code = main.main(
        [
            "--csv",
            str(csv_path),
            "-c",
            str(config_path),
            "--track-iterations",
            "5",
            "--log-level",
            "ERROR",
        ]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "BACKTEST PERFORMANCE REPORT" in out
    assert "Algorithms: 3" in out
    assert "Track Iterations: 5" in out


@pytest.mark.parametrize(("on_error", "expected"), [("raise", 1), ("skip", 0)])
def test_indicator_errors_follow_policy(tmp_path: Path, capsys, on_error, expected) -> None:
    """Rejected bars abort the run or are skipped according to the error policy."""
    bars = [
        PriceBar(
            time=JAN_2024_MS + index * DAY_MS, open=10.0, high=11.0, low=9.0, close=10.0 + index % 3
        )
        for index in range(9)
    ]
    bars[5] = PriceBar(time=bars[5].time, open=10.0, high=11.0, low=0.0, close=10.0)
    csv_path = write_bars_csv(bars, tmp_path / "bad.csv")
    config_path = _adapter_config(tmp_path, [{"kind": "supertrend", "period": 2}])

    argv = ["--csv", str(csv_path), "-c", str(config_path), "--on-error", on_error]
    exit_code = main.main([*argv, "--log-level", "ERROR"])

    assert exit_code == expected
    if on_error == "raise":
        assert "Backtest execution failed" in capsys.readouterr().err
