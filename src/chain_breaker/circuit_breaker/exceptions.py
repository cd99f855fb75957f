"""Chain error taxonomy.

These are never raised out of a request: the orchestrator builds one per
failed hop and renders its message into the response envelope.
"""

from __future__ import annotations

from ..outcomes import CallOutcome, Failure, Rejected, Success, TimedOut


class ChainError(Exception):
    """Base exception for chain hop errors."""

    pass


class DownstreamFailure(ChainError):
    """The next hop responded with an error or could not be reached."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"next hop failed: {reason}")


class DownstreamTimeout(ChainError):
    """The next hop did not respond within the call timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"next hop timed out after {timeout_seconds * 1000:.0f}ms")


class BreakerRejection(ChainError):
    """Raised when circuit is open and request is blocked."""

    def __init__(self, identifier: str, time_until_retry: float) -> None:
        self.identifier = identifier
        self.time_until_retry = time_until_retry
        super().__init__(f"Circuit {identifier} is open. Retry in {time_until_retry:.1f}s")


class InjectedFault(ChainError):
    """Deliberate failure produced by fault injection."""

    def __init__(self, identity: str) -> None:
        self.identity = identity
        super().__init__(f"{identity} unavailable (injected fault)")


def error_for_outcome(outcome: CallOutcome, identifier: str) -> ChainError:
    """Map a non-success outcome onto the error taxonomy.

    Raises:
        ValueError: If ``outcome`` is a ``Success``.
    """
    if isinstance(outcome, Failure):
        return DownstreamFailure(outcome.reason)
    if isinstance(outcome, TimedOut):
        return DownstreamTimeout(outcome.timeout_seconds)
    if isinstance(outcome, Rejected):
        return BreakerRejection(identifier, outcome.retry_in_seconds)
    if isinstance(outcome, Success):
        raise ValueError("a successful outcome has no error")
    raise TypeError(f"unknown outcome: {outcome!r}")
