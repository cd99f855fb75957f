"""Observer pattern for circuit breaker events.

Provides a callback registry that dispatches breaker lifecycle and
outcome events to registered listeners. Listeners are notified only:
their return value is ignored and an exception raised by one of them
is logged without affecting the breaker or the remaining listeners.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

BreakerListener = Callable[[dict[str, Any]], None]


class BreakerEvent(Enum):
    """Events emitted by the circuit breaker."""

    FALLBACK = "fallback"
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"
    REJECT = "reject"
    OPEN = "open"
    HALF_OPEN = "halfOpen"
    CLOSE = "close"


class EventDispatcher:
    """Registry of listeners for one breaker's events.

    Each listener receives a dict with keys:
        - event: BreakerEvent value (e.g. "open")
        - breaker: breaker name
        - state: breaker state value after the event
        - timestamp: ISO-8601 UTC timestamp
        - detail: optional human-readable detail
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[BreakerEvent | None, BreakerListener]] = []

    def add_listener(
        self,
        listener: BreakerListener,
        event: BreakerEvent | None = None,
    ) -> None:
        """Register a listener for one event, or for every event if ``event`` is None."""
        self._listeners.append((event, listener))

    def remove_listener(self, listener: BreakerListener) -> bool:
        """Unregister every registration of ``listener``.

        Returns:
            True if the listener was registered, False otherwise.
        """
        before = len(self._listeners)
        self._listeners = [(e, cb) for e, cb in self._listeners if cb is not listener]
        return len(self._listeners) != before

    def dispatch(
        self,
        event: BreakerEvent,
        breaker: str,
        state: str,
        detail: str | None = None,
    ) -> None:
        """Dispatch an event to all matching listeners in registration order."""
        payload: dict[str, Any] = {
            "event": event.value,
            "breaker": breaker,
            "state": state,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "detail": detail,
        }
        # Iterate over a copy to handle listeners that modify the list during dispatch
        for wanted, listener in self._listeners[:]:
            if wanted is not None and wanted is not event:
                continue
            try:
                listener(payload)
            except Exception as e:
                logger.error(
                    "Breaker listener %s raised exception: %s",
                    listener,
                    e,
                    exc_info=True,
                )


_TRANSITION_EVENTS = frozenset(
    {BreakerEvent.OPEN.value, BreakerEvent.HALF_OPEN.value, BreakerEvent.CLOSE.value}
)


def log_breaker_event(event: dict[str, Any]) -> None:
    """Listener that writes breaker events to the log.

    Outcome events (success, failure, timeout, reject, fallback) are logged
    at INFO. Transitions go to DEBUG; the breaker itself logs them at
    WARNING/INFO.
    """
    level = logging.DEBUG if event["event"] in _TRANSITION_EVENTS else logging.INFO
    if event.get("detail"):
        logger.log(level, "Circuit %s %s: %s", event["breaker"], event["event"], event["detail"])
    else:
        logger.log(level, "Circuit %s %s", event["breaker"], event["event"])
