"""Engine configuration.

One frozen ``EngineConfig`` holds every tunable engine parameter. Values
come from the environment when the instance is built; hosts and tests can
also construct one directly and hand it to ``EffectSystem``.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _env(key: str, default: T, parse: Callable[[str], T]) -> T:
    """Environment value for ``key`` parsed with ``parse``; ``default`` when
    unset or unparsable."""
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r (using %r)", key, raw, default)
        return default


def _env_field(key: str, default: T, parse: Callable[[str], T]) -> Any:
    return field(default_factory=lambda: _env(key, default, parse))


@dataclass(frozen=True)
class EngineConfig:
    """Engine configuration (immutable)

    Environment overrides:
    - TCG_STACK_LIMIT: max entries processed by one ``resolve_stack`` call
    - TCG_DON_POWER_BONUS: power added per attached DON!! card
    - TCG_LOG_LEVEL: default level for ``logging_config.setup_logging``
    - TCG_DEBUG: log contained resolution failures with tracebacks
    """

    # ==================== Stack ====================
    stack_resolution_limit: int = _env_field("TCG_STACK_LIMIT", 1000, int)

    # ==================== Rules ====================
    don_power_bonus: int = _env_field("TCG_DON_POWER_BONUS", 1000, int)

    # ==================== Logging & debugging ====================
    log_level: str = _env_field("TCG_LOG_LEVEL", "INFO", str.upper)
    debug_mode: bool = _env_field("TCG_DEBUG", False, _parse_bool)

    def __post_init__(self):
        if self.stack_resolution_limit < 1:
            raise ValueError(f"stack_resolution_limit must be >= 1, got {self.stack_resolution_limit}")
        if self.don_power_bonus < 0:
            raise ValueError(f"don_power_bonus must be >= 0, got {self.don_power_bonus}")

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config instance from the environment."""
        return cls()

    def with_overrides(self, **changes: Any) -> EngineConfig:
        """Copy with some fields replaced (validated like a new instance)."""
        return dataclasses.replace(self, **changes)


_config: EngineConfig | None = None


def get_config() -> EngineConfig:
    """Shared config instance, built from the environment on first use."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the shared instance so the next ``get_config`` re-reads the environment."""
    global _config
    _config = None
