"""Outcomes of a guarded downstream call.

A ``CallOutcome`` is exactly one of ``Success``, ``Failure``, ``TimedOut``
or ``Rejected``. The breaker produces the last two itself; the downstream
caller produces the first two.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """The downstream answered; ``payload`` is its response body."""

    payload: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The downstream errored or could not be reached."""

    reason: str

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class TimedOut:
    """The call did not complete within the breaker's call timeout."""

    timeout_seconds: float

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return f"timed out after {self.timeout_seconds * 1000:.0f}ms"


@dataclass(frozen=True)
class Rejected:
    """The breaker refused to attempt the call."""

    retry_in_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return f"circuit open, retry in {self.retry_in_seconds:.1f}s"


CallOutcome = Union[Success, Failure, TimedOut, Rejected]
