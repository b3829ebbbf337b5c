"""
dcdesign/settings.py
====================
Runtime settings (execution configuration, not physics).

Values come from ``DCDESIGN_*`` environment variables, optionally loaded from
a ``.env`` file in the working directory. Engineering constants stay in
:mod:`dcdesign.config`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from dcdesign.config import (
    AUTOSAVE_DELAY_S,
    CACHE_SWEEP_INTERVAL_S,
    CALCULATION_TIME_WARNING_MS,
    HISTORY_LIMIT,
)

# Load environment variables
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number; received {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer; received {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings.

    Attributes:
        log_level:                Root log level name (``DCDESIGN_LOG_LEVEL``).
        log_dir:                  Directory for rotating log files (``DCDESIGN_LOG_DIR``).
        autosave_delay_s:         Debounce quiet period before autosave [s].
        history_limit:            Maximum undo/redo entries kept per layout.
        cache_sweep_interval_s:   Wall-clock interval between cache sweeps [s].
        slow_calculation_ms:      Duration above which a calculation is reported [ms].
    """
    log_level:              str = "INFO"
    log_dir:                str = "logs"
    autosave_delay_s:       float = AUTOSAVE_DELAY_S
    history_limit:          int = HISTORY_LIMIT
    cache_sweep_interval_s: float = CACHE_SWEEP_INTERVAL_S
    slow_calculation_ms:    float = CALCULATION_TIME_WARNING_MS


def load_settings() -> Settings:
    """Read settings from the environment, falling back to the defaults above."""
    return Settings(
        log_level=os.getenv("DCDESIGN_LOG_LEVEL", "INFO"),
        log_dir=os.getenv("DCDESIGN_LOG_DIR", "logs"),
        autosave_delay_s=_env_float("DCDESIGN_AUTOSAVE_DELAY_S", AUTOSAVE_DELAY_S),
        history_limit=_env_int("DCDESIGN_HISTORY_LIMIT", HISTORY_LIMIT),
        cache_sweep_interval_s=_env_float("DCDESIGN_CACHE_SWEEP_INTERVAL_S", CACHE_SWEEP_INTERVAL_S),
        slow_calculation_ms=_env_float("DCDESIGN_SLOW_CALCULATION_MS", CALCULATION_TIME_WARNING_MS),
    )
