"""Outbound-call circuit breaker implementation.

Guards calls to the next hop so that a failing or slow downstream does
not cascade failures upstream. The breaker tracks the failure percentage
over a sliding time window and trips once it reaches the configured
threshold.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable

from ..circuit_breaker_config import DEFAULT_CONFIG, BreakerConfig, CircuitState
from ..outcomes import CallOutcome, Failure, Rejected, Success, TimedOut
from .events import BreakerEvent, BreakerListener, EventDispatcher

logger = logging.getLogger(__name__)

_OUTCOME_TYPES = (Success, Failure, TimedOut, Rejected)


@dataclass(frozen=True)
class BreakerSnapshot:
    """Point-in-time view of a breaker, for status reporting."""

    name: str
    state: CircuitState
    completed: int
    failed: int
    failure_percentage: float
    opened_at: datetime | None
    time_until_retry: float
    trial_in_flight: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "completed": self.completed,
            "failed": self.failed,
            "failure_percentage": self.failure_percentage,
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "time_until_retry": self.time_until_retry,
            "trial_in_flight": self.trial_in_flight,
        }


class CircuitBreaker:
    """Circuit breaker guarding a single downstream dependency.

    One instance is shared by every concurrent request of the process.
    Bookkeeping (admission, counters, transitions) is serialized by an
    asyncio lock that is never held while the guarded call is awaited.

    Usage:
        breaker = CircuitBreaker(BreakerConfig(call_timeout_seconds=0.3))
        breaker.on("open", lambda event: print("opened"))

        outcome = await breaker.fire(lambda: caller(endpoint))
        if isinstance(outcome, Success):
            ...

    Attributes:
        config: Breaker configuration.
        state: Current circuit state.
    """

    def __init__(
        self,
        config: BreakerConfig | None = None,
        *,
        fallback: Callable[[CallOutcome], CallOutcome] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the circuit breaker.

        Args:
            config: Configuration settings. Uses DEFAULT_CONFIG if None.
            fallback: Called with every non-success outcome; its return value
                replaces the outcome returned by ``fire``.
            clock: Monotonic clock in seconds, injectable for tests.
        """
        self._config = config or DEFAULT_CONFIG
        self._fallback = fallback
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._window: deque[tuple[float, bool]] = deque()  # (completed_at, failed)
        self._opened_at: float | None = None
        self._opened_at_wall: datetime | None = None
        self._trial_in_flight = False
        # Bumped on every transition; results from an older generation are stale
        self._generation = 0

        self._events = EventDispatcher()

        # Concurrency protection
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        """Return the breaker name."""
        return self._config.name

    @property
    def config(self) -> BreakerConfig:
        """Return the breaker configuration."""
        return self._config

    @property
    def state(self) -> CircuitState:
        """Return the current circuit state."""
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if circuit is currently open (blocking requests)."""
        return self._state == CircuitState.OPEN

    @property
    def is_closed(self) -> bool:
        """Check if circuit is currently closed (normal operation)."""
        return self._state == CircuitState.CLOSED

    @property
    def completed(self) -> int:
        """Return completed calls in the current window."""
        return self._window_counts()[0]

    @property
    def failed(self) -> int:
        """Return failed calls in the current window."""
        return self._window_counts()[1]

    @property
    def failure_percentage(self) -> float:
        """Return the failure percentage over the current window."""
        completed, failed = self._window_counts()
        if completed == 0:
            return 0.0
        return (failed / completed) * 100

    @property
    def opened_at(self) -> datetime | None:
        """Return the wall-clock time of the last transition into OPEN."""
        return self._opened_at_wall

    def on(self, event: BreakerEvent | str, listener: BreakerListener) -> None:
        """Register ``listener`` for ``event`` (e.g. ``"open"`` or ``BreakerEvent.OPEN``)."""
        self._events.add_listener(listener, BreakerEvent(event))

    def add_listener(self, listener: BreakerListener) -> None:
        """Register ``listener`` for every event."""
        self._events.add_listener(listener)

    def remove_listener(self, listener: BreakerListener) -> bool:
        """Unregister ``listener`` from every event it was registered for."""
        return self._events.remove_listener(listener)

    def get_time_until_retry(self) -> float:
        """Get seconds until circuit can attempt recovery."""
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return 0.0

        elapsed = self._clock() - self._opened_at
        return max(0.0, self._config.reset_timeout_seconds - elapsed)

    def snapshot(self) -> BreakerSnapshot:
        """Return a point-in-time view of the breaker."""
        completed, failed = self._window_counts()
        return BreakerSnapshot(
            name=self.name,
            state=self._state,
            completed=completed,
            failed=failed,
            failure_percentage=(failed / completed) * 100 if completed else 0.0,
            opened_at=self._opened_at_wall,
            time_until_retry=self.get_time_until_retry(),
            trial_in_flight=self._trial_in_flight,
        )

    async def fire(self, call: Callable[[], Awaitable[Any]]) -> CallOutcome:
        """Run ``call`` through the breaker.

        ``call`` should resolve to a ``Success`` or ``Failure``; any other
        value is treated as a successful payload and any exception as a
        failure.

        Returns:
            The call's outcome, ``TimedOut`` if it exceeded the call timeout,
            or ``Rejected`` if the breaker refused to attempt it. When a
            fallback is configured, non-success outcomes are replaced by the
            fallback's result.
        """
        async with self._lock:
            admitted = self._admit()
            generation = self._generation

        if admitted is None:
            outcome: CallOutcome = Rejected(self.get_time_until_retry())
            self._emit(BreakerEvent.REJECT, outcome.reason)
            return self._apply_fallback(outcome)

        try:
            outcome = await self._invoke(call)
        except asyncio.CancelledError:
            # Caller went away; free the trial slot so the breaker can probe again
            if admitted is CircuitState.HALF_OPEN and generation == self._generation:
                self._trial_in_flight = False
            raise

        async with self._lock:
            self._record(outcome, admitted, generation)

        if isinstance(outcome, Success):
            return outcome
        return self._apply_fallback(outcome)

    async def reset(self) -> None:
        """Manually reset the circuit to closed state.

        This is typically used for administrative intervention.
        """
        async with self._lock:
            if self._state != CircuitState.CLOSED:
                self._transition_to_closed()
                logger.info("Circuit %s manually reset to CLOSED", self.name)
            else:
                self._window.clear()

    def _admit(self) -> CircuitState | None:
        """Decide whether a call may proceed (called within locked context).

        Returns:
            The state the call was admitted under, or None if rejected.
        """
        if self._state == CircuitState.CLOSED:
            return CircuitState.CLOSED

        if self._state == CircuitState.OPEN:
            if not self._should_attempt_recovery():
                return None
            self._transition_to_half_open()

        # HALF_OPEN: only one trial request at a time
        if self._trial_in_flight:
            return None
        self._trial_in_flight = True
        return CircuitState.HALF_OPEN

    def _should_attempt_recovery(self) -> bool:
        """Check if enough time has passed to attempt recovery."""
        if self._opened_at is None:
            return True

        elapsed = self._clock() - self._opened_at
        return elapsed >= self._config.reset_timeout_seconds

    async def _invoke(self, call: Callable[[], Awaitable[Any]]) -> CallOutcome:
        """Await ``call`` within the call timeout and normalize its result."""
        timeout = self._config.call_timeout_seconds
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                result = await call()
        except Exception as e:
            # A TimeoutError raised by the call itself is an ordinary failure
            if isinstance(e, TimeoutError) and deadline.expired():
                return TimedOut(timeout)
            logger.debug("Circuit %s call raised: %r", self.name, e)
            return Failure(str(e) or type(e).__name__)

        if isinstance(result, _OUTCOME_TYPES):
            return result
        return Success(result)

    def _record(self, outcome: CallOutcome, admitted: CircuitState, generation: int) -> None:
        """Record a finished attempt (called within locked context)."""
        failed = not isinstance(outcome, Success)
        self._emit_outcome(outcome)

        if generation != self._generation:
            # The breaker transitioned (or was reset) while this call was in flight
            return

        if admitted is CircuitState.HALF_OPEN:
            self._trial_in_flight = False
            if failed:
                self._transition_to_open(_reason(outcome), from_half_open=True)
            else:
                self._transition_to_closed()
            return

        now = self._clock()
        self._window.append((now, failed))
        self._prune(now)

        if failed and self._threshold_reached():
            self._transition_to_open(_reason(outcome))

    def _threshold_reached(self) -> bool:
        completed = len(self._window)
        if completed == 0 or completed < self._config.volume_threshold:
            return False
        failed = sum(1 for _, was_failure in self._window if was_failure)
        return (failed / completed) * 100 >= self._config.error_threshold_percent

    def _prune(self, now: float) -> None:
        """Drop outcomes that have slid out of the window."""
        horizon = now - self._config.rolling_window_seconds
        while self._window and self._window[0][0] <= horizon:
            self._window.popleft()

    def _window_counts(self) -> tuple[int, int]:
        """Return (completed, failed) within the window without mutating it."""
        horizon = self._clock() - self._config.rolling_window_seconds
        completed = 0
        failed = 0
        for completed_at, was_failure in self._window:
            if completed_at > horizon:
                completed += 1
                if was_failure:
                    failed += 1
        return completed, failed

    def _transition_to_open(self, reason: str, from_half_open: bool = False) -> None:
        """Transition circuit to OPEN state."""
        failed = sum(1 for _, was_failure in self._window if was_failure)
        completed = len(self._window)

        self._state = CircuitState.OPEN
        self._generation += 1
        self._opened_at = self._clock()
        self._opened_at_wall = datetime.now()
        self._window.clear()
        self._trial_in_flight = False

        if from_half_open:
            logger.warning("Circuit %s re-OPENED after failed trial: %s", self.name, reason)
        else:
            logger.warning(
                "Circuit %s OPENED: %s (failures=%d/%d)",
                self.name,
                reason,
                failed,
                completed,
            )
        self._emit(BreakerEvent.OPEN, reason)

    def _transition_to_half_open(self) -> None:
        """Transition circuit to HALF_OPEN state for recovery testing."""
        self._state = CircuitState.HALF_OPEN
        self._generation += 1
        self._trial_in_flight = False

        logger.info("Circuit %s entering HALF_OPEN for recovery test", self.name)
        self._emit(BreakerEvent.HALF_OPEN)

    def _transition_to_closed(self) -> None:
        """Transition circuit to CLOSED state and reset counters."""
        self._state = CircuitState.CLOSED
        self._window.clear()
        self._generation += 1
        self._opened_at = None
        self._opened_at_wall = None
        self._trial_in_flight = False

        logger.info("Circuit %s CLOSED", self.name)
        self._emit(BreakerEvent.CLOSE)

    def _emit_outcome(self, outcome: CallOutcome) -> None:
        if isinstance(outcome, Success):
            self._emit(BreakerEvent.SUCCESS)
        elif isinstance(outcome, TimedOut):
            self._emit(BreakerEvent.TIMEOUT, outcome.reason)
            self._emit(BreakerEvent.FAILURE, outcome.reason)
        else:
            self._emit(BreakerEvent.FAILURE, _reason(outcome))

    def _emit(self, event: BreakerEvent, detail: str | None = None) -> None:
        self._events.dispatch(event, self.name, self._state.value, detail)

    def _apply_fallback(self, outcome: CallOutcome) -> CallOutcome:
        if self._fallback is None:
            return outcome
        result = self._fallback(outcome)
        self._emit(BreakerEvent.FALLBACK, _reason(outcome))
        return result


def _reason(outcome: CallOutcome) -> str:
    if isinstance(outcome, Success):
        return "success"
    return outcome.reason
