"""
Session Clock - Read-side time arithmetic over stored timestamps.

Nothing here mutates a session. Elapsed time is always recomputed as
now() - category_started_at; no ticking counter is ever persisted, so a
backgrounded or restarted process cannot drift the clock.

Formulas:
- remaining(category) = allocated + adjusted - used - elapsed
- remaining(session)  = total_duration - sum(used) - elapsed
- Elapsed applies only to the active category
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol

from timebox import config
from timebox.allocation.models import CategoryAllocation

from .models import Running, Session


class TimeSource(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock, timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class ManualClock:
    """
    Clock that only moves when told to.

    Usage:
        clock = ManualClock()
        machine = SessionStateMachine(time_source=clock)
        clock.advance(minutes=10)
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, minutes: float = 0, seconds: float = 0) -> datetime:
        self._now += timedelta(minutes=minutes, seconds=seconds)
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment


class ProgressStatus(StrEnum):
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"
    OVERTIME = "overtime"


@dataclass(frozen=True)
class TimeProgress:
    percentage: float  # 0-100+, exceeds 100 in overtime
    status: ProgressStatus
    remaining: float  # minutes, negative in overtime


# ==================== Elapsed ====================


def elapsed_seconds(session: Session | None, now: datetime) -> float:
    """
    Whole seconds since the active category's clock was anchored.

    0 when there is no session or its clock is stopped. A clock set
    backwards never yields negative elapsed time.
    """
    if session is None or not isinstance(session.clock, Running):
        return 0.0
    delta = (now - session.clock.since).total_seconds()
    return float(max(0, math.floor(delta)))


def elapsed_minutes(session: Session | None, now: datetime) -> float:
    return elapsed_seconds(session, now) / 60


# ==================== Remaining ====================


def remaining_for_category(allocation: CategoryAllocation, elapsed_secs: float) -> float:
    """Minutes left in a category. Negative means overtime; not clamped."""
    return (
        allocation.allocated_minutes
        + allocation.adjusted_minutes
        - allocation.used_minutes
        - elapsed_secs / 60
    )


def remaining_for_session(
    total_duration: int, allocations: Iterable[CategoryAllocation], elapsed_secs: float
) -> float:
    """Minutes left in the whole session. Negative means overtime."""
    used = sum(a.used_minutes for a in allocations)
    return total_duration - used - elapsed_secs / 60


# ==================== Progress ====================


def progress_status(percentage_used: float) -> ProgressStatus:
    """
    Bucket a usage percentage.

    <75 normal, [75, 90) warning, [90, 100] urgent, >100 overtime.
    Exactly 100% is urgent: remaining is zero, not negative.
    """
    if percentage_used > 100:
        return ProgressStatus.OVERTIME
    if percentage_used >= config.URGENT_THRESHOLD_PCT:
        return ProgressStatus.URGENT
    if percentage_used >= config.WARNING_THRESHOLD_PCT:
        return ProgressStatus.WARNING
    return ProgressStatus.NORMAL


def time_progress(budget_minutes: float, used_minutes: float) -> TimeProgress:
    """
    Percentage, status and remaining minutes for a budget.

    A zero (or negative) budget reports 0% / normal rather than dividing
    by zero.
    """
    remaining = budget_minutes - used_minutes
    if budget_minutes <= 0:
        return TimeProgress(percentage=0.0, status=ProgressStatus.NORMAL, remaining=remaining)

    percentage = used_minutes / budget_minutes * 100
    if remaining < 0:
        status = ProgressStatus.OVERTIME
    else:
        status = progress_status(min(percentage, 100.0))
    return TimeProgress(percentage=percentage, status=status, remaining=remaining)


def category_progress(allocation: CategoryAllocation, elapsed_secs: float = 0.0) -> TimeProgress:
    """Progress for one category, including the live elapsed span."""
    return time_progress(
        allocation.budget_minutes,
        allocation.used_minutes + elapsed_secs / 60,
    )


def session_progress(session: Session, now: datetime) -> TimeProgress:
    """Progress for the whole session, including the live elapsed span."""
    return time_progress(
        session.total_duration,
        session.total_used + elapsed_minutes(session, now),
    )


# ==================== Exhaustion ====================


class ExhaustionWatch:
    """
    Edge-triggered "time exhausted" detector.

    observe() returns True exactly once per activation: the first read at
    which the active category has no time left. Re-anchoring the clock
    (switch, resume) starts a new activation.
    """

    def __init__(self):
        self._anchor: datetime | None = None
        self._notified = False

    def observe(self, session: Session | None, now: datetime) -> bool:
        anchor = session.category_started_at if session else None
        if anchor != self._anchor:
            self._anchor = anchor
            self._notified = False

        if anchor is None or self._notified:
            return False

        allocation = session.active_allocation
        if allocation is None:
            return False

        if remaining_for_category(allocation, elapsed_seconds(session, now)) <= 0:
            self._notified = True
            return True
        return False
