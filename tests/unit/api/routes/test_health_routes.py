"""Tests for the health endpoints with circuit breaker status."""

from __future__ import annotations

import asyncio
from typing import Callable

from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from chain_breaker.outcomes import Failure, Success
from tests.helpers import FakeClock, RecordingCaller, fail, gated


class TestHealthEndpoint:
    def test_healthy_when_closed(
        self, make_app: Callable[..., FastAPI], caller: RecordingCaller
    ) -> None:
        client = TestClient(make_app(caller))

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["instance_id"] == "node-a"
        assert data["circuit"]["state"] == "closed"
        assert data["timestamp"].endswith("Z")

    def test_unhealthy_when_open_still_200(self, make_app: Callable[..., FastAPI]) -> None:
        client = TestClient(make_app(RecordingCaller(Failure("refused"))))
        client.get("/chain")

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["circuit"]["state"] == "open"
        assert data["circuit"]["time_until_retry"] == 10.0
        assert data["circuit"]["opened_at"] is not None

    async def test_degraded_while_trial_in_flight(
        self, make_app: Callable[..., FastAPI], clock: FakeClock
    ) -> None:
        app = make_app(RecordingCaller())
        breaker = app.state.breaker
        await breaker.fire(fail())
        clock.advance(10.0)
        gate = asyncio.Event()
        trial = asyncio.create_task(breaker.fire(gated(gate, Success("ok"))))
        await asyncio.sleep(0)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        gate.set()
        await trial
        data = response.json()
        assert data["status"] == "degraded"
        assert data["circuit"]["state"] == "half_open"
        assert data["circuit"]["trial_in_flight"] is True


class TestHealthLive:
    def test_live(self, make_app: Callable[..., FastAPI], caller: RecordingCaller) -> None:
        client = TestClient(make_app(caller))

        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}
