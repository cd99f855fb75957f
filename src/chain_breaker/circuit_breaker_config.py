"""Circuit breaker configuration for chain breaker.

This module defines the breaker state enum and the configuration
dataclass governing when the breaker trips, how long calls may run,
and how long it stays open before probing the downstream again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CircuitState(Enum):
    """Possible states for a circuit breaker."""

    CLOSED = "closed"  # Normal operation - requests allowed
    OPEN = "open"  # Circuit tripped - requests blocked
    HALF_OPEN = "half_open"  # Testing recovery - single trial request


@dataclass(frozen=True)
class BreakerConfig:
    """Configuration for the outbound-call circuit breaker.

    Attributes:
        call_timeout_seconds: Max duration of a call before it counts as failed.
        error_threshold_percent: Failure percentage within the window that trips
            the breaker.
        reset_timeout_seconds: Time to wait in OPEN before the half-open trial.
        rolling_window_seconds: Length of the sliding window over which the
            failure percentage is computed.
        volume_threshold: Minimum completed calls in the window before the
            threshold applies.
        name: Label used in logs, events and metrics.
    """

    call_timeout_seconds: float = 0.3
    error_threshold_percent: float = 50.0
    reset_timeout_seconds: float = 10.0
    rolling_window_seconds: float = 10.0
    volume_threshold: int = 0
    name: str = "chain"

    def __post_init__(self) -> None:
        if self.call_timeout_seconds <= 0:
            raise ValueError("call_timeout_seconds must be positive")
        if not 0 < self.error_threshold_percent <= 100:
            raise ValueError("error_threshold_percent must be in (0, 100]")
        if self.reset_timeout_seconds <= 0:
            raise ValueError("reset_timeout_seconds must be positive")
        if self.rolling_window_seconds <= 0:
            raise ValueError("rolling_window_seconds must be positive")
        if self.volume_threshold < 0:
            raise ValueError("volume_threshold must be non-negative")


# Default configuration instance for convenience
DEFAULT_CONFIG = BreakerConfig()
