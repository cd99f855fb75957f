"""Chain hop orchestration: termination, fault injection, response shaping."""

from .envelope import ChainEnvelope
from .faults import DEFAULT_FAULT_THRESHOLD, FaultInjector
from .orchestrator import (
    TERMINAL_DATA,
    ChainOrchestrator,
    ChainRequest,
    ChainResponse,
    DownstreamCaller,
    build_next_hop_url,
    parse_hop_count,
)

__all__ = [
    "ChainEnvelope",
    "ChainOrchestrator",
    "ChainRequest",
    "ChainResponse",
    "DEFAULT_FAULT_THRESHOLD",
    "DownstreamCaller",
    "FaultInjector",
    "TERMINAL_DATA",
    "build_next_hop_url",
    "parse_hop_count",
]
