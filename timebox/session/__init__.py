"""
Session Module

Executes a timed session against an allocation and survives restarts.

Objects:
- Session (budget + usage + tagged clock state)
- SessionStateMachine (the only writer)
- RecoveryGuard (load-time suspension of stale sessions)

Invariants:
- sum(allocated_minutes) == total_duration for the session's lifetime
- category_started_at is set iff status == active
- allocated_minutes never changes after start
- used_minutes never goes negative
- Elapsed time is derived from timestamps, never accumulated in storage
"""

from .clock import (
    ExhaustionWatch,
    ManualClock,
    ProgressStatus,
    SystemClock,
    TimeProgress,
    TimeSource,
    category_progress,
    elapsed_minutes,
    elapsed_seconds,
    progress_status,
    remaining_for_category,
    remaining_for_session,
    session_progress,
    time_progress,
)
from .models import (
    AppMode,
    AppState,
    ClockState,
    Running,
    Session,
    SessionPreset,
    SessionStatus,
    Stopped,
)
from .presets import apply_preset, delete_preset, find_preset, save_preset
from .recovery import RecoveryGuard, RecoveryReport, get_recovery_guard, suspend_stale_session
from .state_machine import SessionStateMachine
from .summary import CategorySummary, SessionSummary, summarize

__all__ = [
    # Models
    "AppMode",
    "AppState",
    "ClockState",
    "Running",
    "Session",
    "SessionPreset",
    "SessionStatus",
    "Stopped",
    # Clock
    "ExhaustionWatch",
    "ManualClock",
    "ProgressStatus",
    "SystemClock",
    "TimeProgress",
    "TimeSource",
    "category_progress",
    "elapsed_minutes",
    "elapsed_seconds",
    "progress_status",
    "remaining_for_category",
    "remaining_for_session",
    "session_progress",
    "time_progress",
    # Transitions
    "SessionStateMachine",
    # Recovery
    "RecoveryGuard",
    "RecoveryReport",
    "get_recovery_guard",
    "suspend_stale_session",
    # Presets & summary
    "apply_preset",
    "delete_preset",
    "find_preset",
    "save_preset",
    "CategorySummary",
    "SessionSummary",
    "summarize",
]
