"""Chain Breaker - a call-chain node guarding its next hop with a circuit breaker."""

from .chain import ChainOrchestrator, ChainRequest, ChainResponse, FaultInjector
from .circuit_breaker import CircuitBreaker
from .circuit_breaker_config import BreakerConfig, CircuitState
from .config import ChainSettings, load_settings
from .outcomes import CallOutcome, Failure, Rejected, Success, TimedOut

__version__ = "1.0.0"

__all__ = [
    "BreakerConfig",
    "CallOutcome",
    "ChainOrchestrator",
    "ChainRequest",
    "ChainResponse",
    "ChainSettings",
    "CircuitBreaker",
    "CircuitState",
    "Failure",
    "FaultInjector",
    "Rejected",
    "Success",
    "TimedOut",
    "__version__",
    "load_settings",
]
