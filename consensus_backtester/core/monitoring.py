"""Metrics sinks for signal and backtest instrumentation.

Components receive a ``Monitoring`` implementation and a ``MetricTags`` accumulator
through their constructors. Swapping the sink never changes backtest results; it
only changes where the samples end up.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

from consensus_backtester.core.logger import get_backtester_logger

MISSING_LABEL_VALUE = "NA"


@dataclass(frozen=True)
class MetricTags(Mapping[str, str]):
    """Immutable set of metric labels.

    ``with_labels`` returns a new accumulator so a parent's tags are never mutated
    by the components it hands them to.
    """

    labels: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, **labels: Any) -> MetricTags:
        """Build tags from keyword arguments."""
        return cls().with_labels(**labels)

    def with_labels(self, **labels: Any) -> MetricTags:
        """Return a copy extended (or overridden) with ``labels``."""
        merged = dict(self.labels)
        for key, value in labels.items():
            merged[key] = MISSING_LABEL_VALUE if value is None else str(value)
        return MetricTags(tuple(sorted(merged.items())))

    def as_dict(self) -> dict[str, str]:
        """Return the labels as a plain dictionary."""
        return dict(self.labels)

    def __getitem__(self, key: str) -> str:
        for label, value in self.labels:
            if label == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return (label for label, _ in self.labels)

    def __len__(self) -> int:
        return len(self.labels)


@runtime_checkable
class Monitoring(Protocol):
    """Minimal metrics sink interface."""

    def increment_counter(
        self, name: str, tags: Mapping[str, str] | None = None, amount: float = 1.0
    ) -> None:
        """Add ``amount`` to the counter ``name``."""

    def set_gauge(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        """Set gauge ``name`` to ``value``."""

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        """Record ``value`` in histogram ``name``."""


class NoOpMonitoring:
    """Sink that discards every sample."""

    def increment_counter(
        self, name: str, tags: Mapping[str, str] | None = None, amount: float = 1.0
    ) -> None:
        return None

    def set_gauge(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        return None

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        return None


def _tag_key(tags: Mapping[str, str] | None) -> tuple[tuple[str, str], ...]:
    return tuple(sorted((tags or {}).items()))


class InMemoryMonitoring:
    """Sink that keeps every sample in memory for inspection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.counters: dict[tuple[str, tuple[tuple[str, str], ...]], float] = defaultdict(float)
        self.gauges: dict[tuple[str, tuple[tuple[str, str], ...]], float] = {}
        self.observations: dict[tuple[str, tuple[tuple[str, str], ...]], list[float]] = (
            defaultdict(list)
        )

    def increment_counter(
        self, name: str, tags: Mapping[str, str] | None = None, amount: float = 1.0
    ) -> None:
        with self._lock:
            self.counters[(name, _tag_key(tags))] += amount

    def set_gauge(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        with self._lock:
            self.gauges[(name, _tag_key(tags))] = value

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        with self._lock:
            self.observations[(name, _tag_key(tags))].append(value)

    def counter_value(self, name: str, **tags: str) -> float:
        """Return the counter value for an exact label set."""
        return self.counters.get((name, _tag_key(tags)), 0.0)

    def counter_total(self, name: str) -> float:
        """Return the counter value summed across every label set."""
        return sum(value for (metric, _), value in self.counters.items() if metric == name)

    def gauge_value(self, name: str, **tags: str) -> float | None:
        """Return the last gauge value for an exact label set."""
        return self.gauges.get((name, _tag_key(tags)))


class PrometheusMonitoring:
    """Sink that records samples as Prometheus metrics on a private registry.

    Metrics are created on first use. The label names of a metric are fixed by the
    first sample recorded for it; later samples missing one of those labels get
    ``NA``.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        namespace: str = "consensus_backtester",
        histogram_buckets: tuple[float, ...] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialise the sink.

        Args:
            registry: Optional registry; a fresh one isolates metrics per instance
            namespace: Prefix prepended to every metric name
            histogram_buckets: Optional bucket boundaries for histograms
            logger: Optional logger instance
        """
        self.registry = registry or CollectorRegistry()
        self.namespace = namespace
        self.histogram_buckets = histogram_buckets
        self.logger = logger or get_backtester_logger(__name__)
        self._lock = threading.Lock()
        self._counters: dict[str, Counter] = {}
        self._gauges: dict[str, Gauge] = {}
        self._histograms: dict[str, Histogram] = {}
        self._label_names: dict[str, tuple[str, ...]] = {}

    def increment_counter(
        self, name: str, tags: Mapping[str, str] | None = None, amount: float = 1.0
    ) -> None:
        counter = self._metric(self._counters, Counter, name, tags)
        self._labelled(counter, name, tags).inc(amount)

    def set_gauge(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        gauge = self._metric(self._gauges, Gauge, name, tags)
        self._labelled(gauge, name, tags).set(value)

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        histogram = self._metric(self._histograms, Histogram, name, tags)
        self._labelled(histogram, name, tags).observe(value)

    def render(self) -> bytes:
        """Return the registry contents in the Prometheus text format."""
        return generate_latest(self.registry)

    def expose(self, port: int, addr: str = "0.0.0.0") -> None:
        """Serve ``/metrics`` for this registry on a background thread."""
        start_http_server(port, addr=addr, registry=self.registry)
        self.logger.info("Serving Prometheus metrics on %s:%d", addr, port)

    def _metric(
        self,
        store: dict[str, Any],
        factory: Any,
        name: str,
        tags: Mapping[str, str] | None,
    ) -> Any:
        with self._lock:
            metric = store.get(name)
            if metric is not None:
                return metric
            label_names = tuple(sorted((tags or {}).keys()))
            kwargs: dict[str, Any] = {
                "name": name,
                "documentation": name.replace("_", " "),
                "labelnames": label_names,
                "namespace": self.namespace,
                "registry": self.registry,
            }
            if factory is Histogram and self.histogram_buckets:
                kwargs["buckets"] = self.histogram_buckets
            metric = factory(**kwargs)
            store[name] = metric
            self._label_names[name] = label_names
            self.logger.debug("Registered %s %s labels=%s", factory.__name__, name, label_names)
            return metric

    def _labelled(self, metric: Any, name: str, tags: Mapping[str, str] | None) -> Any:
        label_names = self._label_names[name]
        if not label_names:
            return metric
        values = dict(tags or {})
        unknown = set(values) - set(label_names)
        if unknown:
            self.logger.warning(
                "Dropping unregistered labels %s for metric %s", sorted(unknown), name
            )
        return metric.labels(
            **{label: values.get(label, MISSING_LABEL_VALUE) for label in label_names}
        )


def build_monitoring(backend: str, **kwargs: Any) -> Monitoring:
    """Create a sink by backend name (``noop``, ``memory`` or ``prometheus``)."""
    normalized = backend.strip().lower()
    if normalized in {"noop", "none"}:
        return NoOpMonitoring()
    if normalized in {"memory", "in_memory"}:
        return InMemoryMonitoring()
    if normalized == "prometheus":
        return PrometheusMonitoring(**kwargs)
    raise ValueError(f"Unknown monitoring backend: {backend}")
