"""Metrics collection for circuit breaker monitoring.

Subscribes to breaker events and keeps counters and gauges that can be
exported in Prometheus exposition format.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from .circuit_breaker import BreakerEvent, CircuitBreaker

logger = logging.getLogger(__name__)

_STATE_VALUES = {"closed": 0, "open": 1, "half_open": 2}


class MetricType(Enum):
    """Types of metrics collected."""

    COUNTER = "counter"  # Monotonically increasing count
    GAUGE = "gauge"  # Point-in-time value


@dataclass
class MetricValue:
    """A single metric value with metadata."""

    name: str
    value: float
    metric_type: MetricType
    labels: dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    description: str = ""

    def to_prometheus(self) -> str:
        """Format as Prometheus exposition format."""
        label_str = ""
        if self.labels:
            pairs = [f'{k}="{v}"' for k, v in self.labels.items()]
            label_str = "{" + ",".join(pairs) + "}"
        return f"{self.name}{label_str} {self.value}"


class MetricsCollector:
    """
    Collects metrics from circuit breaker events.

    Tracks:
    - Per-event counters (success, failure, timeout, reject, ...)
    - Current state gauge
    - Time spent in the previous state on each transition
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._metrics: dict[str, MetricValue] = {}
        self._callbacks: list[Callable[[MetricValue], None]] = []
        self._state_entered: dict[str, tuple[str, float]] = {}  # breaker -> (state, since)
        self._clock = clock

    def register_callback(self, callback: Callable[[MetricValue], None]) -> None:
        """Register a callback for metric updates."""
        self._callbacks.append(callback)

    def attach(self, breaker: CircuitBreaker) -> None:
        """Subscribe to every event of ``breaker`` and seed its state gauge."""
        breaker.add_listener(self.handle_event)
        self._state_entered[breaker.name] = (breaker.state.value, self._clock())
        self._set_state_gauge(breaker.name, breaker.state.value)

    def handle_event(self, event: dict[str, Any]) -> None:
        """Breaker listener: update counters and, on transitions, the state metrics."""
        breaker = event["breaker"]
        self._increment(
            name="chain_breaker_events_total",
            labels={"breaker": breaker, "event": event["event"]},
            description="Total circuit breaker events",
        )
        if event["event"] in (
            BreakerEvent.OPEN.value,
            BreakerEvent.HALF_OPEN.value,
            BreakerEvent.CLOSE.value,
        ):
            self.record_state_change(breaker, event["state"])

    def record_state_change(self, breaker: str, to_state: str) -> None:
        """Record a circuit state change."""
        now = self._clock()
        previous = self._state_entered.get(breaker)
        if previous is not None:
            from_state, since = previous
            self._emit_metric(
                name="chain_breaker_state_duration_seconds",
                value=now - since,
                metric_type=MetricType.GAUGE,
                labels={"breaker": breaker, "state": from_state},
                description="Time spent in the state before the last transition",
            )
        self._state_entered[breaker] = (to_state, now)
        self._set_state_gauge(breaker, to_state)

    def get_value(self, name: str, **labels: str) -> float:
        """Return the current value of a metric, or 0.0 if never emitted."""
        metric = self._metrics.get(self._key(name, labels))
        return metric.value if metric else 0.0

    def get_all_metrics(self) -> list[MetricValue]:
        """Get all current metrics."""
        return list(self._metrics.values())

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus format."""
        lines = []
        described: set[str] = set()
        # Samples of one metric family must be contiguous
        for metric in sorted(self._metrics.values(), key=lambda m: m.name):
            if metric.name not in described:
                described.add(metric.name)
                if metric.description:
                    lines.append(f"# HELP {metric.name} {metric.description}")
                lines.append(f"# TYPE {metric.name} {metric.metric_type.value}")
            lines.append(metric.to_prometheus())
        return "\n".join(lines)

    def _set_state_gauge(self, breaker: str, state: str) -> None:
        self._emit_metric(
            name="chain_breaker_state",
            value=_STATE_VALUES.get(state, -1),
            metric_type=MetricType.GAUGE,
            labels={"breaker": breaker},
            description="Current state (0=closed, 1=open, 2=half_open)",
        )

    def _increment(self, name: str, labels: dict[str, str], description: str) -> None:
        current = self.get_value(name, **labels)
        self._emit_metric(
            name=name,
            value=current + 1,
            metric_type=MetricType.COUNTER,
            labels=labels,
            description=description,
        )

    @staticmethod
    def _key(name: str, labels: dict[str, str]) -> str:
        return f"{name}:{':'.join(f'{k}={v}' for k, v in sorted(labels.items()))}"

    def _emit_metric(
        self,
        name: str,
        value: float,
        metric_type: MetricType,
        labels: dict[str, str],
        description: str = "",
    ) -> None:
        """Store a metric and notify callbacks."""
        metric = MetricValue(
            name=name,
            value=value,
            metric_type=metric_type,
            labels=labels,
            description=description,
        )
        self._metrics[self._key(name, labels)] = metric

        for callback in self._callbacks:
            try:
                callback(metric)
            except Exception as e:
                logger.error("Metrics callback error: %s", e)
