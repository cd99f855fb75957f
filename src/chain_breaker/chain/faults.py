"""Fault injection for resilience testing."""

from __future__ import annotations

import random

# A fault triggers when a uniform [0, 1) draw exceeds this value (~40% of calls)
DEFAULT_FAULT_THRESHOLD = 0.6


class FaultInjector:
    """Decides whether a request should fail on purpose.

    Args:
        enabled: If False, ``should_inject`` always returns False and no
            random draw is made.
        rng: Randomness source. Pass a seeded ``random.Random`` for
            reproducible runs.
        threshold: Draws strictly greater than this value trigger a fault.
    """

    def __init__(
        self,
        enabled: bool = False,
        rng: random.Random | None = None,
        threshold: float = DEFAULT_FAULT_THRESHOLD,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be between 0 and 1")
        self._enabled = enabled
        self._rng = rng or random.Random()
        self._threshold = threshold

    @property
    def enabled(self) -> bool:
        return self._enabled

    def should_inject(self) -> bool:
        """Return True if this request should be failed deliberately."""
        if not self._enabled:
            return False
        return self._rng.random() > self._threshold
