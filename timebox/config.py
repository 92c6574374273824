"""
Centralized configuration for Timebox.

Values that vary by deployment or user preference belong here.
Override via environment variables where marked.
"""

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# Session duration bounds
# ============================================================

MIN_SESSION_MINUTES: int = _env_int("TIMEBOX_MIN_SESSION_MINUTES", 1)
"""Shortest session the planner accepts."""

MAX_SESSION_MINUTES: int = _env_int("TIMEBOX_MAX_SESSION_MINUTES", 720)
"""Longest session the planner accepts (12 hours)."""

# ============================================================
# Progress thresholds (percentage of budget used)
# ============================================================

WARNING_THRESHOLD_PCT: int = _env_int("TIMEBOX_WARNING_THRESHOLD_PCT", 75)
"""At or above this share of the budget a category shows 'warning'."""

URGENT_THRESHOLD_PCT: int = _env_int("TIMEBOX_URGENT_THRESHOLD_PCT", 90)
"""At or above this share of the budget a category shows 'urgent'."""

# ============================================================
# Allocation defaults
# ============================================================

DEFAULT_PRIORITY: int = 3
"""Priority assigned to categories that do not declare one (1 = highest)."""

DEFAULT_WEIGHT: float = 1.0
"""Relative weight assigned to categories that do not declare one."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("TIMEBOX_LOG_LEVEL", "INFO")
"""Root log level for the CLI."""

LOG_JSON: bool | None = _env_bool("TIMEBOX_LOG_JSON")
"""Force JSON (true) or human (false) log lines. Unset = auto-detect from TTY."""
