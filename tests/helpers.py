"""Shared test helpers: fake clock, stub RNG and canned downstream calls."""

from __future__ import annotations

import asyncio
import random
from typing import Any, Awaitable, Callable

from chain_breaker.outcomes import CallOutcome, Failure, Success


class FakeClock:
    """Monotonic clock whose time only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixedRandom(random.Random):
    """Random source that always draws the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value


def succeed(payload: Any = "ok") -> Callable[[], Awaitable[CallOutcome]]:
    async def call() -> CallOutcome:
        return Success(payload)

    return call


def fail(reason: str = "boom") -> Callable[[], Awaitable[CallOutcome]]:
    async def call() -> CallOutcome:
        return Failure(reason)

    return call


def hang(seconds: float = 5.0) -> Callable[[], Awaitable[CallOutcome]]:
    async def call() -> CallOutcome:
        await asyncio.sleep(seconds)
        return Success("too late")

    return call


def gated(gate: asyncio.Event, outcome: CallOutcome) -> Callable[[], Awaitable[CallOutcome]]:
    """Call that completes with ``outcome`` once ``gate`` is set."""

    async def call() -> CallOutcome:
        await gate.wait()
        return outcome

    return call


class RecordingCaller:
    """Downstream caller stub that records the endpoints it was called with."""

    def __init__(self, outcome: CallOutcome | None = None, delay: float = 0.0) -> None:
        self.outcome = outcome if outcome is not None else Success("ok")
        self.delay = delay
        self.endpoints: list[str] = []

    async def __call__(self, endpoint: str) -> CallOutcome:
        self.endpoints.append(endpoint)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.outcome
