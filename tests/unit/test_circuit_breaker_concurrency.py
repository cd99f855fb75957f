"""Concurrency and race condition tests for the circuit breaker.

Tests verify the half-open single-trial rule, that counter updates
are not lost under concurrent calls, and that stale results from calls
admitted before a trip are ignored.
"""

from __future__ import annotations

import asyncio

import pytest

from chain_breaker.circuit_breaker import CircuitBreaker
from chain_breaker.circuit_breaker_config import BreakerConfig, CircuitState
from chain_breaker.outcomes import Failure, Rejected, Success
from tests.helpers import FakeClock, fail, gated, succeed


def make_breaker(clock: FakeClock, **overrides: float) -> CircuitBreaker:
    options = {"call_timeout_seconds": 5.0, "reset_timeout_seconds": 10.0}
    options.update(overrides)
    return CircuitBreaker(BreakerConfig(**options), clock=clock)


async def trip(breaker: CircuitBreaker, clock: FakeClock) -> None:
    await breaker.fire(fail())
    assert breaker.state == CircuitState.OPEN
    clock.advance(breaker.config.reset_timeout_seconds)


class TestHalfOpenSingleTrial:
    """Only one trial call may be in flight while half-open."""

    async def test_second_concurrent_call_is_rejected(self, clock: FakeClock) -> None:
        breaker = make_breaker(clock)
        await trip(breaker, clock)
        gate = asyncio.Event()

        trial = asyncio.create_task(breaker.fire(gated(gate, Success("recovered"))))
        await asyncio.sleep(0)  # let the trial get admitted

        assert breaker.state == CircuitState.HALF_OPEN
        assert breaker.snapshot().trial_in_flight is True

        second = await breaker.fire(succeed("second"))
        assert isinstance(second, Rejected)

        gate.set()
        assert await trial == Success("recovered")
        assert breaker.state == CircuitState.CLOSED

    async def test_many_concurrent_callers_get_one_trial(self, clock: FakeClock) -> None:
        breaker = make_breaker(clock)
        await trip(breaker, clock)
        gate = asyncio.Event()
        calls = 0

        async def call() -> Success:
            nonlocal calls
            calls += 1
            await gate.wait()
            return Success("ok")

        tasks = [asyncio.create_task(breaker.fire(call)) for _ in range(10)]
        await asyncio.sleep(0)
        gate.set()
        outcomes = await asyncio.gather(*tasks)

        assert calls == 1
        assert sum(isinstance(o, Success) for o in outcomes) == 1
        assert sum(isinstance(o, Rejected) for o in outcomes) == 9

    async def test_cancelled_trial_frees_slot(self, clock: FakeClock) -> None:
        breaker = make_breaker(clock)
        await trip(breaker, clock)
        gate = asyncio.Event()

        trial = asyncio.create_task(breaker.fire(gated(gate, Success("never"))))
        await asyncio.sleep(0)
        trial.cancel()
        with pytest.raises(asyncio.CancelledError):
            await trial

        assert breaker.state == CircuitState.HALF_OPEN
        assert await breaker.fire(succeed()) == Success("ok")
        assert breaker.state == CircuitState.CLOSED


class TestConcurrentCounters:
    """Counter updates from concurrent calls are serialized."""

    async def test_no_lost_updates(self, clock: FakeClock) -> None:
        breaker = make_breaker(clock, error_threshold_percent=100, volume_threshold=1000)

        async def call(i: int) -> Success | Failure:
            await asyncio.sleep(0)
            return Failure("odd") if i % 2 else Success(i)

        await asyncio.gather(*(breaker.fire(lambda i=i: call(i)) for i in range(50)))

        assert breaker.completed == 50
        assert breaker.failed == 25

    async def test_stale_result_after_trip_is_ignored(self, clock: FakeClock) -> None:
        """A call admitted while closed that finishes after the trip changes nothing."""
        breaker = make_breaker(clock)
        gate = asyncio.Event()

        slow = asyncio.create_task(breaker.fire(gated(gate, Success("late"))))
        await asyncio.sleep(0)
        await breaker.fire(fail())
        assert breaker.state == CircuitState.OPEN

        gate.set()
        assert await slow == Success("late")
        assert breaker.state == CircuitState.OPEN
        assert breaker.completed == 0

    async def test_trial_from_before_reset_does_not_disturb_current_trial(
        self, clock: FakeClock
    ) -> None:
        """A trial admitted before a manual reset cannot decide a later trial."""
        breaker = make_breaker(clock)
        await trip(breaker, clock)
        old_gate = asyncio.Event()
        old_trial = asyncio.create_task(breaker.fire(gated(old_gate, Failure("old"))))
        await asyncio.sleep(0)

        await breaker.reset()
        await trip(breaker, clock)
        new_gate = asyncio.Event()
        new_trial = asyncio.create_task(breaker.fire(gated(new_gate, Success("fresh"))))
        await asyncio.sleep(0)

        old_gate.set()
        assert await old_trial == Failure("old")
        assert breaker.state == CircuitState.HALF_OPEN
        assert breaker.snapshot().trial_in_flight is True

        new_gate.set()
        assert await new_trial == Success("fresh")
        assert breaker.state == CircuitState.CLOSED

    async def test_closed_call_spanning_trip_and_reset_is_not_counted(
        self, clock: FakeClock
    ) -> None:
        breaker = make_breaker(clock)
        gate = asyncio.Event()
        slow = asyncio.create_task(breaker.fire(gated(gate, Failure("late"))))
        await asyncio.sleep(0)

        await breaker.fire(fail())
        await breaker.reset()
        gate.set()
        await slow

        assert breaker.state == CircuitState.CLOSED
        assert breaker.completed == 0

    async def test_lock_not_held_during_call(self, clock: FakeClock) -> None:
        """A slow call does not block other calls from being admitted."""
        breaker = make_breaker(clock, error_threshold_percent=100, volume_threshold=10)
        gate = asyncio.Event()

        slow = asyncio.create_task(breaker.fire(gated(gate, Success("slow"))))
        await asyncio.sleep(0)

        fast = await asyncio.wait_for(breaker.fire(succeed("fast")), timeout=1.0)
        assert fast == Success("fast")

        gate.set()
        await slow
        assert breaker.completed == 2
