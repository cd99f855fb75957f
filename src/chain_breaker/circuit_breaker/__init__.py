"""Circuit breaker implementation for chain breaker.

Implements the circuit breaker pattern around the outbound call to the
next hop so a failing or slow downstream is cut off instead of being
hammered by every upstream request.

The circuit breaker has three states:
- CLOSED: Normal operation, failures are counted
- OPEN: Circuit tripped, requests immediately rejected
- HALF_OPEN: Testing recovery, a single trial request allowed
"""

from .breaker import BreakerSnapshot, CircuitBreaker
from .events import BreakerEvent, EventDispatcher, log_breaker_event
from .exceptions import (
    BreakerRejection,
    ChainError,
    DownstreamFailure,
    DownstreamTimeout,
    InjectedFault,
    error_for_outcome,
)

__all__ = [
    "BreakerEvent",
    "BreakerRejection",
    "BreakerSnapshot",
    "ChainError",
    "CircuitBreaker",
    "DownstreamFailure",
    "DownstreamTimeout",
    "EventDispatcher",
    "InjectedFault",
    "error_for_outcome",
    "log_breaker_event",
]
