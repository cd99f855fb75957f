"""Health check router reporting breaker state."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from chain_breaker.api.dependencies import get_breaker_dep, get_settings_dep
from chain_breaker.api.models.responses import CircuitResponse, HealthResponse
from chain_breaker.circuit_breaker import CircuitBreaker
from chain_breaker.circuit_breaker_config import CircuitState
from chain_breaker.config import ChainSettings

router = APIRouter()

_STATUS_BY_STATE = {
    CircuitState.CLOSED: "healthy",
    CircuitState.HALF_OPEN: "degraded",
    CircuitState.OPEN: "unhealthy",
}


@router.get("", response_model=HealthResponse)
def get_health(
    breaker: CircuitBreaker = Depends(get_breaker_dep),
    settings: ChainSettings = Depends(get_settings_dep),
) -> HealthResponse:
    """Return health status including circuit breaker information.

    The node itself keeps serving while the breaker is open (it answers
    with error envelopes), so this always responds 200.
    """
    snapshot = breaker.snapshot()
    return HealthResponse(
        status=_STATUS_BY_STATE[snapshot.state],  # type: ignore[arg-type]
        instance_id=settings.instance_id,
        circuit=CircuitResponse.from_snapshot(snapshot),
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get("/live")
def get_health_live() -> dict[str, str]:
    """Return liveness status.

    Returns:
        A dictionary with status "alive".
    """
    return {"status": "alive"}
