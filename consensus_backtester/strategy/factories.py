"""Factory helpers for assembling indicator adapters from configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from consensus_backtester.core.monitoring import MetricTags, Monitoring
from consensus_backtester.strategy.signal.adapter_configs import (
    BaseAdapterConfig,
    parse_adapter_config,
)
from consensus_backtester.strategy.signal.base_adapter import BaseIndicatorAdapter
from consensus_backtester.strategy.signal.bollinger_adapter import BollingerAdapter
from consensus_backtester.strategy.signal.ema_adapter import EMAAdapter
from consensus_backtester.strategy.signal.fibonacci_adapter import FibonacciAdapter
from consensus_backtester.strategy.signal.macd_adapter import MACDAdapter
from consensus_backtester.strategy.signal.pivot_point_adapter import PivotPointAdapter
from consensus_backtester.strategy.signal.rsi_adapter import RSIAdapter
from consensus_backtester.strategy.signal.supertrend_adapter import SuperTrendAdapter

ADAPTER_REGISTRY: dict[str, type[BaseIndicatorAdapter]] = {
    adapter_class.kind: adapter_class
    for adapter_class in (
        EMAAdapter,
        RSIAdapter,
        MACDAdapter,
        PivotPointAdapter,
        FibonacciAdapter,
        SuperTrendAdapter,
        BollingerAdapter,
    )
}


def build_adapter(
    config: BaseAdapterConfig | Mapping[str, Any],
    *,
    monitor: Monitoring | None = None,
    tags: MetricTags | None = None,
    logger: logging.Logger | None = None,
) -> BaseIndicatorAdapter:
    """Create the adapter described by ``config``.

    Args:
        config: Adapter configuration model, or a raw mapping with a ``kind`` key
        monitor: Optional metrics sink handed to the adapter
        tags: Optional base metric labels
        logger: Optional logger instance

    Returns:
        Adapter instance with empty state

    Raises:
        ValueError: If the configuration kind is not registered
    """
    resolved = parse_adapter_config(dict(config) if isinstance(config, Mapping) else config)
    adapter_class = ADAPTER_REGISTRY.get(resolved.kind)
    if adapter_class is None:
        available = sorted(ADAPTER_REGISTRY)
        raise ValueError(f"Unknown adapter kind: {resolved.kind}. Available kinds: {available}")
    return adapter_class(resolved, monitor=monitor, tags=tags, logger=logger)


def build_adapter_pool(
    configs: Sequence[BaseAdapterConfig | Mapping[str, Any]],
    *,
    monitor: Monitoring | None = None,
    tags: MetricTags | None = None,
    logger: logging.Logger | None = None,
) -> list[BaseIndicatorAdapter]:
    """Create one adapter per configuration, preserving order."""
    return [
        build_adapter(config, monitor=monitor, tags=tags, logger=logger) for config in configs
    ]
