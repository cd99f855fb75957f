"""Tests for breaker metrics collection and Prometheus export."""

from __future__ import annotations

from chain_breaker.circuit_breaker import CircuitBreaker
from chain_breaker.circuit_breaker_config import BreakerConfig
from chain_breaker.metrics import MetricsCollector, MetricType, MetricValue
from tests.helpers import FakeClock, fail, succeed


def make_attached(clock: FakeClock) -> tuple[CircuitBreaker, MetricsCollector]:
    breaker = CircuitBreaker(
        BreakerConfig(call_timeout_seconds=1.0, reset_timeout_seconds=5.0, name="next-hop"),
        clock=clock,
    )
    metrics = MetricsCollector(clock=clock)
    metrics.attach(breaker)
    return breaker, metrics


class TestMetricValue:
    def test_prometheus_line_with_labels(self) -> None:
        metric = MetricValue(
            name="chain_breaker_events_total",
            value=3.0,
            metric_type=MetricType.COUNTER,
            labels={"breaker": "next-hop", "event": "success"},
        )
        assert (
            metric.to_prometheus()
            == 'chain_breaker_events_total{breaker="next-hop",event="success"} 3.0'
        )

    def test_prometheus_line_without_labels(self) -> None:
        metric = MetricValue(name="up", value=1.0, metric_type=MetricType.GAUGE)
        assert metric.to_prometheus() == "up 1.0"


class TestMetricsCollector:
    def test_attach_seeds_state_gauge(self, clock: FakeClock) -> None:
        _, metrics = make_attached(clock)
        assert metrics.get_value("chain_breaker_state", breaker="next-hop") == 0

    async def test_counts_events(self, clock: FakeClock) -> None:
        breaker, metrics = make_attached(clock)

        await breaker.fire(succeed())
        await breaker.fire(succeed())

        assert (
            metrics.get_value("chain_breaker_events_total", breaker="next-hop", event="success")
            == 2
        )
        assert (
            metrics.get_value("chain_breaker_events_total", breaker="next-hop", event="failure")
            == 0
        )

    async def test_tracks_state_transitions(self, clock: FakeClock) -> None:
        breaker, metrics = make_attached(clock)

        clock.advance(3.0)
        await breaker.fire(fail())

        assert metrics.get_value("chain_breaker_state", breaker="next-hop") == 1
        assert (
            metrics.get_value(
                "chain_breaker_state_duration_seconds", breaker="next-hop", state="closed"
            )
            == 3.0
        )

        clock.advance(5.0)
        await breaker.fire(succeed())

        assert metrics.get_value("chain_breaker_state", breaker="next-hop") == 0
        for event in ("open", "halfOpen", "close"):
            assert (
                metrics.get_value("chain_breaker_events_total", breaker="next-hop", event=event)
                == 1
            )

    async def test_rejections_counted(self, clock: FakeClock) -> None:
        breaker, metrics = make_attached(clock)
        await breaker.fire(fail())

        await breaker.fire(succeed())

        assert (
            metrics.get_value("chain_breaker_events_total", breaker="next-hop", event="reject")
            == 1
        )

    async def test_export_prometheus_groups_families(self, clock: FakeClock) -> None:
        breaker, metrics = make_attached(clock)
        await breaker.fire(succeed())
        await breaker.fire(fail())

        text = metrics.export_prometheus()

        assert text.count("# TYPE chain_breaker_events_total counter") == 1
        assert "# TYPE chain_breaker_state gauge" in text
        assert 'chain_breaker_events_total{breaker="next-hop",event="success"} 1' in text
        assert 'chain_breaker_events_total{breaker="next-hop",event="failure"} 1' in text

    async def test_callbacks_receive_updates(self, clock: FakeClock) -> None:
        breaker, metrics = make_attached(clock)
        seen: list[str] = []
        metrics.register_callback(lambda metric: seen.append(metric.name))

        await breaker.fire(succeed())

        assert seen == ["chain_breaker_events_total"]

    async def test_failing_callback_does_not_break_collection(self, clock: FakeClock) -> None:
        breaker, metrics = make_attached(clock)

        def broken(metric: MetricValue) -> None:
            raise RuntimeError("sink down")

        metrics.register_callback(broken)
        await breaker.fire(succeed())

        assert (
            metrics.get_value("chain_breaker_events_total", breaker="next-hop", event="success")
            == 1
        )
