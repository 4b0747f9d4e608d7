"""Tests for the metrics sinks."""

import pytest
from prometheus_client import CollectorRegistry

from consensus_backtester.core.monitoring import (
    MISSING_LABEL_VALUE,
    InMemoryMonitoring,
    MetricTags,
    Monitoring,
    NoOpMonitoring,
    PrometheusMonitoring,
    build_monitoring,
)


class TestMetricTags:
    """Test the immutable label accumulator."""

    def test_with_labels_returns_new_tags(self) -> None:
        """Extending tags never mutates the parent."""
        parent = MetricTags.of(run_id="r1")
        child = parent.with_labels(algorithm_name="A", period=5)

        assert parent.as_dict() == {"run_id": "r1"}
        assert child.as_dict() == {"algorithm_name": "A", "period": "5", "run_id": "r1"}

    def test_override_and_missing_values(self) -> None:
        """Later values win and None becomes a placeholder."""
        tags = MetricTags.of(a="1").with_labels(a="2", b=None)

        assert tags["a"] == "2"
        assert tags["b"] == MISSING_LABEL_VALUE
        assert len(tags) == 2
        assert list(tags) == ["a", "b"]

    def test_missing_key(self) -> None:
        """Unknown labels raise KeyError."""
        with pytest.raises(KeyError):
            MetricTags()["absent"]


class TestInMemoryMonitoring:
    """Test the inspection sink."""

    def test_counters_and_gauges(self) -> None:
        """Samples are keyed by name and exact label set."""
        monitor = InMemoryMonitoring()
        monitor.increment_counter("signals", MetricTags.of(kind="BUY"))
        monitor.increment_counter("signals", MetricTags.of(kind="BUY"), amount=2)
        monitor.increment_counter("signals", MetricTags.of(kind="SELL"))
        monitor.set_gauge("price", 10.0)
        monitor.set_gauge("price", 11.0)
        monitor.observe("profit", 1.5, {"a": "b"})

        assert monitor.counter_value("signals", kind="BUY") == 3.0
        assert monitor.counter_total("signals") == 4.0
        assert monitor.gauge_value("price") == 11.0
        assert monitor.gauge_value("price", kind="BUY") is None
        assert monitor.observations[("profit", (("a", "b"),))] == [1.5]

    def test_protocol_conformance(self) -> None:
        """Every sink satisfies the Monitoring protocol."""
        for sink in (NoOpMonitoring(), InMemoryMonitoring(), PrometheusMonitoring()):
            assert isinstance(sink, Monitoring)


class TestPrometheusMonitoring:
    """Test the Prometheus sink."""

    def test_render_contains_samples(self) -> None:
        """Samples appear in the exposition output under the namespace."""
        registry = CollectorRegistry()
        monitor = PrometheusMonitoring(registry, namespace="test")
        monitor.increment_counter("signals_generated", MetricTags.of(signal_type="BUY"))
        monitor.set_gauge("close_price", 101.5)
        monitor.observe("profit_percentage", 2.0)

        output = monitor.render().decode()

        assert 'test_signals_generated_total{signal_type="BUY"} 1.0' in output
        assert "test_close_price 101.5" in output
        assert "test_profit_percentage_count 1.0" in output
        assert registry.get_sample_value(
            "test_signals_generated_total", {"signal_type": "BUY"}
        ) == 1.0

    def test_label_names_fixed_by_first_sample(self) -> None:
        """Missing labels are filled and unknown labels dropped."""
        monitor = PrometheusMonitoring(namespace="t")
        monitor.set_gauge("band", 1.0, MetricTags.of(band="upper", adaptor_name="B"))
        monitor.set_gauge("band", 2.0, MetricTags.of(band="lower", extra="x"))

        assert monitor.registry.get_sample_value(
            "t_band", {"adaptor_name": MISSING_LABEL_VALUE, "band": "lower"}
        ) == 2.0

    def test_expose_starts_server(self, monkeypatch) -> None:
        """expose serves the private registry."""
        calls = []
        monkeypatch.setattr(
            "consensus_backtester.core.monitoring.start_http_server",
            lambda port, addr, registry: calls.append((port, addr, registry)),
        )
        monitor = PrometheusMonitoring()

        monitor.expose(9100)

        assert calls == [(9100, "0.0.0.0", monitor.registry)]


@pytest.mark.parametrize(
    ("backend", "expected"),
    [
        ("noop", NoOpMonitoring),
        ("memory", InMemoryMonitoring),
        (" Prometheus ", PrometheusMonitoring),
    ],
)
def test_build_monitoring(backend, expected) -> None:
    """Backends are selected by name."""
    assert isinstance(build_monitoring(backend), expected)


def test_build_monitoring_unknown() -> None:
    """Unknown backends raise ValueError."""
    with pytest.raises(ValueError, match="Unknown monitoring backend: statsd"):
        build_monitoring("statsd")
