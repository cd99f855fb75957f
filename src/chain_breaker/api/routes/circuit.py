"""Circuit breaker endpoints.

Endpoints:
- GET /circuit - Get the breaker status
- POST /circuit/reset - Force the breaker back to closed
"""

from fastapi import APIRouter, Depends

from chain_breaker.api.dependencies import get_breaker_dep
from chain_breaker.api.models.responses import CircuitResponse
from chain_breaker.circuit_breaker import CircuitBreaker

router = APIRouter()


@router.get("", response_model=CircuitResponse)
def get_circuit(breaker: CircuitBreaker = Depends(get_breaker_dep)) -> CircuitResponse:
    """Return the breaker's current state and window counters."""
    return CircuitResponse.from_snapshot(breaker.snapshot())


@router.post("/reset", response_model=CircuitResponse)
async def reset_circuit(breaker: CircuitBreaker = Depends(get_breaker_dep)) -> CircuitResponse:
    """Reset the breaker to closed and clear its counters.

    Returns:
        The breaker status after the reset.
    """
    await breaker.reset()
    return CircuitResponse.from_snapshot(breaker.snapshot())
