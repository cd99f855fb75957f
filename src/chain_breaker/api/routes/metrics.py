"""Metrics router for Prometheus exposition format and JSON metrics."""

from typing import Any

from fastapi import APIRouter, Depends, Response

from chain_breaker.api.dependencies import get_metrics_dep
from chain_breaker.metrics import MetricsCollector

router = APIRouter()

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get("")
def metrics_endpoint(metrics: MetricsCollector = Depends(get_metrics_dep)) -> Response:
    """Return metrics in Prometheus exposition format."""
    return Response(
        content=metrics.export_prometheus(),
        media_type=PROMETHEUS_CONTENT_TYPE,
    )


@router.get("/json")
def metrics_json_endpoint(
    metrics: MetricsCollector = Depends(get_metrics_dep),
) -> dict[str, Any]:
    """Return the collected metrics as a JSON list."""
    return {
        "metrics": [
            {
                "name": metric.name,
                "type": metric.metric_type.value,
                "labels": metric.labels,
                "value": metric.value,
            }
            for metric in metrics.get_all_metrics()
        ]
    }
