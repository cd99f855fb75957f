"""API models package for chain breaker."""

from .responses import CircuitResponse, ErrorResponse, HealthResponse

__all__ = [
    "CircuitResponse",
    "ErrorResponse",
    "HealthResponse",
]
