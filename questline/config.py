"""Central configuration for the quest engine.

Tunables live here (reset periods, notification durations, expiry checks).
Every value has a sensible default and can be overridden through an
environment variable.
"""
from __future__ import annotations
import os


def _get_int_env(name: str, default: int, minval: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in {"1", "true", "yes", "on"}


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# ---------------- Reset periods ----------------
DEFAULT_DAILY_RESET_SECONDS: int = 24 * 60 * 60
DEFAULT_WEEKLY_RESET_SECONDS: int = 7 * 24 * 60 * 60

ENV_DAILY_RESET = "QL_DAILY_RESET_SECONDS"
ENV_WEEKLY_RESET = "QL_WEEKLY_RESET_SECONDS"


def get_daily_reset_seconds() -> int:
    """Length of the daily reset period.

    Order of precedence:
    1. QL_DAILY_RESET_SECONDS (if valid and > 0)
    2. DEFAULT_DAILY_RESET_SECONDS
    """
    return _get_int_env(ENV_DAILY_RESET, DEFAULT_DAILY_RESET_SECONDS, minval=1)


def get_weekly_reset_seconds() -> int:
    return _get_int_env(ENV_WEEKLY_RESET, DEFAULT_WEEKLY_RESET_SECONDS, minval=1)


# ---------------- Notifications ----------------
DEFAULT_NOTIFY_SHORT_MS: int = 3000
DEFAULT_NOTIFY_LONG_MS: int = 5000
DEFAULT_NOTIFICATION_CATEGORY = "quests"


def get_notify_short_ms() -> int:
    """Duration for routine notifications (quest started, abandoned)."""
    return _get_int_env("QL_NOTIFY_SHORT_MS", DEFAULT_NOTIFY_SHORT_MS, minval=0)


def get_notify_long_ms() -> int:
    """Duration for completion, failure and error notifications."""
    return _get_int_env("QL_NOTIFY_LONG_MS", DEFAULT_NOTIFY_LONG_MS, minval=0)


def get_notification_category() -> str:
    return _get_str_env("QL_NOTIFICATION_CATEGORY", DEFAULT_NOTIFICATION_CATEGORY)


# ---------------- Time limits ----------------

def lazy_expiry_enabled() -> bool:
    """Whether store reads fail active quests past their deadline."""
    return _get_bool_env("QL_LAZY_EXPIRY", True)
