"""Dependency accessors for API routes.

The orchestrator, breaker and metrics collector are built by
``create_app`` and stored on ``app.state``; routes reach them through
these functions via ``Depends``.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request

from chain_breaker.chain import ChainOrchestrator
from chain_breaker.circuit_breaker import CircuitBreaker
from chain_breaker.config import ChainSettings
from chain_breaker.metrics import MetricsCollector


def _get_state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"Application not initialized: missing {name}")
    return value


def get_settings_dep(request: Request) -> ChainSettings:
    """Get the settings the application was created with.

    Raises:
        RuntimeError: If the application was not built by create_app().
    """
    settings: ChainSettings = _get_state(request, "settings")
    return settings


def get_orchestrator_dep(request: Request) -> ChainOrchestrator:
    """Get the chain orchestrator.

    Raises:
        RuntimeError: If the application was not built by create_app().
    """
    orchestrator: ChainOrchestrator = _get_state(request, "orchestrator")
    return orchestrator


def get_breaker_dep(request: Request) -> CircuitBreaker:
    """Get the process-wide circuit breaker.

    Raises:
        RuntimeError: If the application was not built by create_app().
    """
    breaker: CircuitBreaker = _get_state(request, "breaker")
    return breaker


def get_metrics_dep(request: Request) -> MetricsCollector:
    """Get the metrics collector.

    Raises:
        RuntimeError: If the application was not built by create_app().
    """
    metrics: MetricsCollector = _get_state(request, "metrics")
    return metrics
