"""Shared fixtures for API tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi import FastAPI

from chain_breaker.api.app import create_app
from chain_breaker.chain import FaultInjector
from chain_breaker.circuit_breaker import CircuitBreaker
from chain_breaker.circuit_breaker_config import BreakerConfig
from chain_breaker.config import ChainSettings
from tests.helpers import FakeClock, RecordingCaller

NEXT_HOP = "http://node-b:3000/chain"


@pytest.fixture
def caller() -> RecordingCaller:
    """Downstream caller that answers "ok" and records endpoints."""
    return RecordingCaller()


@pytest.fixture
def make_app(clock: FakeClock) -> Callable[..., FastAPI]:
    """Build an app around a stub caller and a breaker on the fake clock."""

    def _make(
        caller: RecordingCaller,
        fault_injector: FaultInjector | None = None,
        **overrides: Any,
    ) -> FastAPI:
        values: dict[str, Any] = {"instance_id": "node-a", "chain_service": NEXT_HOP}
        values.update(overrides)
        settings = ChainSettings(**values)
        breaker = CircuitBreaker(
            BreakerConfig(call_timeout_seconds=1.0, reset_timeout_seconds=10.0),
            clock=clock,
        )
        return create_app(
            settings, breaker=breaker, caller=caller, fault_injector=fault_injector
        )

    return _make
