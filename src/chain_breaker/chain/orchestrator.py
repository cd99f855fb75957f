"""Chain hop orchestration.

Decides, for each inbound request, whether this node terminates the
chain, fails on purpose (fault injection), or forwards to the next hop
through the circuit breaker, and shapes the result into an envelope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable

from ..circuit_breaker import CircuitBreaker, InjectedFault, error_for_outcome
from ..outcomes import CallOutcome, Success
from .envelope import ChainEnvelope
from .faults import FaultInjector

logger = logging.getLogger(__name__)

DownstreamCaller = Callable[[str], Awaitable[CallOutcome]]

TERMINAL_DATA = "Last"


@dataclass(frozen=True)
class ChainRequest:
    """An inbound chain request.

    Attributes:
        hop_count: Number of hops already taken (non-negative).
        endpoint_template: Base address of the next hop.
    """

    hop_count: int
    endpoint_template: str

    def __post_init__(self) -> None:
        if self.hop_count < 0:
            raise ValueError("hop_count must be non-negative")

    @property
    def next_hop(self) -> int:
        return self.hop_count + 1


@dataclass(frozen=True)
class ChainResponse:
    """HTTP status plus envelope produced for one request."""

    status_code: int
    body: ChainEnvelope


def parse_hop_count(raw: str | None) -> int:
    """Parse the ``count`` query value, defaulting to 0 when absent or invalid."""
    if raw is None:
        return 0
    try:
        value = int(raw.strip())
    except ValueError:
        return 0
    return value if value >= 0 else 0


def build_next_hop_url(base: str, next_hop: int) -> str:
    """Build ``<base>?count=<next_hop>``, appending if ``base`` already has a query."""
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}count={next_hop}"


class ChainOrchestrator:
    """Handles chain requests for one node.

    The breaker is owned by the caller (normally the application) and
    shared by every request; the orchestrator never creates its own.

    Args:
        breaker: Circuit breaker guarding the outbound call.
        caller: Downstream caller producing a Success or Failure for an address.
        instance_id: Identity of this node, used in envelope locations.
        jumps: Maximum chain length.
        fault_injector: Decides when to fail on purpose.
        clock: Wall clock used for envelope timestamps.
    """

    def __init__(
        self,
        breaker: CircuitBreaker,
        caller: DownstreamCaller,
        instance_id: str,
        jumps: int,
        fault_injector: FaultInjector | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._breaker = breaker
        self._caller = caller
        self._instance_id = instance_id
        self._jumps = jumps
        self._faults = fault_injector or FaultInjector(enabled=False)
        self._clock = clock

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def instance_id(self) -> str:
        return self._instance_id

    def greeting(self) -> str:
        return f"hello from {self._instance_id}"

    def location(self) -> str:
        """Return this node's identity stamped with the current time."""
        return f"{self._instance_id} @{self._clock():%M:%S}"

    async def handle(self, request: ChainRequest) -> ChainResponse:
        """Handle one chain request.

        Returns:
            502 with an error envelope when a fault is injected, otherwise
            200 with either the terminal envelope, the next hop's payload,
            or an error envelope describing why the next hop was unavailable.
        """
        next_hop = request.next_hop

        if self._faults.should_inject():
            fault = InjectedFault(self._instance_id)
            logger.info("Injected fault at hop %d", next_hop)
            return ChainResponse(502, ChainEnvelope.failure(self.location(), str(fault)))

        if next_hop >= self._jumps:
            logger.debug("Hop %d reached chain length %d, terminating", next_hop, self._jumps)
            return ChainResponse(200, ChainEnvelope.success(self.location(), TERMINAL_DATA))

        endpoint = build_next_hop_url(request.endpoint_template, next_hop)
        outcome = await self._breaker.fire(lambda: self._caller(endpoint))

        if isinstance(outcome, Success):
            return ChainResponse(200, ChainEnvelope.success(self.location(), outcome.payload))

        error = error_for_outcome(outcome, self._breaker.name)
        logger.info("Hop %d to %s unavailable: %s", next_hop, endpoint, error)
        return ChainResponse(200, ChainEnvelope.failure(self.location(), str(error)))
