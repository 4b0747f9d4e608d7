"""Smoke tests for the documented public API surface."""

import importlib

import pytest

PUBLIC_MODULES = [
    "consensus_backtester",
    "consensus_backtester.cli",
    "consensus_backtester.data",
    "consensus_backtester.indicators",
    "consensus_backtester.signal",
    "consensus_backtester.strategy.signal",
    "consensus_backtester.strategy.orchestration",
    "consensus_backtester.utils",
]


@pytest.mark.parametrize("module_path", PUBLIC_MODULES)
def test_declared_symbols_are_importable(module_path: str) -> None:
    """Every name listed in __all__ must be present on the module."""
    module = importlib.import_module(module_path)
    public_names = getattr(module, "__all__", None)
    assert public_names, f"{module_path} is missing an __all__ declaration"

    missing = [name for name in public_names if not hasattr(module, name)]
    assert not missing, f"{module_path} is missing exports: {missing}"


def test_unknown_root_attribute() -> None:
    """Undeclared names on the package raise AttributeError."""
    package = importlib.import_module("consensus_backtester")

    with pytest.raises(AttributeError):
        package.NotAThing  # noqa: B018
    assert "BacktestEngine" in dir(package)
