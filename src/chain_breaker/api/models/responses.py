"""API response models for chain breaker."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from chain_breaker.circuit_breaker import BreakerSnapshot


class CircuitResponse(BaseModel):
    """Response model for the breaker status."""

    model_config = ConfigDict(frozen=True)

    name: str
    state: Literal["closed", "open", "half_open"]
    completed: int
    failed: int
    failure_percentage: float
    opened_at: datetime | None
    time_until_retry: float
    trial_in_flight: bool

    @classmethod
    def from_snapshot(cls, snapshot: BreakerSnapshot) -> CircuitResponse:
        return cls(
            name=snapshot.name,
            state=snapshot.state.value,  # type: ignore[arg-type]
            completed=snapshot.completed,
            failed=snapshot.failed,
            failure_percentage=snapshot.failure_percentage,
            opened_at=snapshot.opened_at,
            time_until_retry=snapshot.time_until_retry,
            trial_in_flight=snapshot.trial_in_flight,
        )


class HealthResponse(BaseModel):
    """Response model for the health endpoint.

    ``status`` follows the breaker: healthy when closed, degraded while a
    recovery trial is allowed, unhealthy while open.
    """

    status: Literal["healthy", "degraded", "unhealthy"]
    instance_id: str
    circuit: CircuitResponse
    timestamp: str


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str
