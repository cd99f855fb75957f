"""Process configuration for chain breaker.

Settings are read once at startup from the environment via
``load_settings()`` and passed explicitly to the application factory.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .circuit_breaker_config import BreakerConfig

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


@dataclass(frozen=True)
class ChainSettings:
    """Settings for one chain node.

    Attributes:
        jumps: Maximum chain length; a hop numbered ``jumps`` or higher terminates.
        inject_errors: If True, fault injection is enabled.
        instance_id: Identity of this node, shown in response envelopes.
        chain_service: Base address of the next hop.
        fault_seed: Optional seed for the fault-injection RNG.
        breaker: Configuration of the outbound-call breaker.
    """

    jumps: int = 6
    inject_errors: bool = False
    instance_id: str = "chain"
    chain_service: str = "http://127.0.0.1:3000/chain"
    fault_seed: int | None = None
    breaker: BreakerConfig = field(default_factory=BreakerConfig)

    def __post_init__(self) -> None:
        if self.jumps < 1:
            raise ValueError("JUMPS must be at least 1")
        if not self.chain_service:
            raise ValueError("CHAIN_SVC cannot be empty")


def load_settings(environ: Mapping[str, str] | None = None) -> ChainSettings:
    """Load settings from the environment.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Parsed ChainSettings.

    Raises:
        ValueError: On a malformed or out-of-range value.
    """
    env = os.environ if environ is None else environ
    defaults = ChainSettings()
    breaker_defaults = defaults.breaker

    breaker = BreakerConfig(
        call_timeout_seconds=_get_millis(
            env, "BREAKER_TIMEOUT_MS", breaker_defaults.call_timeout_seconds
        ),
        error_threshold_percent=_get_float(
            env, "BREAKER_ERROR_THRESHOLD", breaker_defaults.error_threshold_percent
        ),
        reset_timeout_seconds=_get_millis(
            env, "BREAKER_RESET_TIMEOUT_MS", breaker_defaults.reset_timeout_seconds
        ),
        rolling_window_seconds=_get_millis(
            env, "BREAKER_ROLLING_WINDOW_MS", breaker_defaults.rolling_window_seconds
        ),
        volume_threshold=_get_int(
            env, "BREAKER_VOLUME_THRESHOLD", breaker_defaults.volume_threshold
        ),
    )

    seed_raw = env.get("FAULT_SEED", "").strip()
    settings = ChainSettings(
        jumps=_get_int(env, "JUMPS", defaults.jumps),
        inject_errors=_get_bool(env, "INJECT_ERR", defaults.inject_errors),
        instance_id=env.get("ID", "").strip() or defaults.instance_id,
        chain_service=env.get("CHAIN_SVC", "").strip() or defaults.chain_service,
        fault_seed=_parse_int("FAULT_SEED", seed_raw) if seed_raw else None,
        breaker=breaker,
    )
    logger.debug("Loaded settings: %s", settings)
    return settings


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ValueError(msg) from exc


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    return _parse_int(key, raw)


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        msg = f"{key} must be a number, got {raw!r}"
        raise ValueError(msg) from exc


def _get_millis(env: Mapping[str, str], key: str, default_seconds: float) -> float:
    """Read a millisecond value and return it in seconds."""
    raw = env.get(key, "").strip()
    if not raw:
        return default_seconds
    return _parse_int(key, raw) / 1000


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    msg = f"{key} must be a boolean flag, got {raw!r}"
    raise ValueError(msg)
