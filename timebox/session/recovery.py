
"""
Recovery Guard - Never trust a clock across a process boundary.

Runs on every load, before a persisted session reaches any other
component. A session left active or paused by a previous process is forced
into suspended with its clock stopped, and the application drops back to
planning mode. The caller then decides: continue (resume, which
re-anchors the clock) or discard (end). A clock saved as running on any
other status is stopped, and a completed session is dropped.
"""

import logging
import threading
from dataclasses import dataclass

from timebox.observability import SessionContext

from .models import AppMode, AppState, SessionStatus, Stopped

logger = logging.getLogger(__name__)

_STALE_STATUSES = (SessionStatus.ACTIVE, SessionStatus.PAUSED)


@dataclass
class RecoveryReport:
    checked: bool = False
    has_existing_session: bool = False
    forced_suspend: bool = False
    handled: bool = False


def suspend_stale_session(state: AppState) -> bool:
    """
    Make a freshly loaded state safe to use, in place.

    - active/paused sessions are forced into suspended
    - a clock left running on any other status is stopped
    - a completed session is dropped; nothing can resume it

    Returns:
        True if the state was changed
    """
    session = state.session
    if session is None:
        return False

    if session.status == SessionStatus.COMPLETED:
        with SessionContext(session.id):
            logger.warning("Dropping completed session left by a previous run")
        state.session = None
        state.mode = AppMode.DEFINITION
        return True

    if session.status not in _STALE_STATUSES:
        if not session.is_running:
            return False
        with SessionContext(session.id):
            logger.warning("Stopping clock left running on %s session", session.status)
        session.clock = Stopped()
        return True

    with SessionContext(session.id):
        logger.warning(
            "Recovered %s session from previous run; suspending without folding elapsed time",
            session.status,
        )
    session.status = SessionStatus.SUSPENDED
    session.clock = Stopped()
    state.mode = AppMode.DEFINITION
    return True


class RecoveryGuard:
    """
    Applies suspend_stale_session on load and remembers what the first
    load of this process found, so the recovery prompt is offered once.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._report = RecoveryReport()

    def inspect(self, state: AppState) -> AppState:
        """Guard a freshly loaded state. Safe to call on every load."""
        with self._lock:
            forced = suspend_stale_session(state)
            if not self._report.checked:
                session = state.session
                self._report = RecoveryReport(
                    checked=True,
                    has_existing_session=session is not None
                    and session.status == SessionStatus.SUSPENDED,
                    forced_suspend=forced,
                )
        return state

    @property
    def report(self) -> RecoveryReport:
        return self._report

    @property
    def has_recoverable_session(self) -> bool:
        return self._report.has_existing_session

    def should_offer_recovery(self) -> bool:
        r = self._report
        return r.checked and r.has_existing_session and not r.handled

    def mark_handled(self) -> None:
        """The user chose continue or discard; stop offering recovery."""
        with self._lock:
            self._report.handled = True


# Singleton accessor
_guard: RecoveryGuard | None = None


def get_recovery_guard() -> RecoveryGuard:
    """Get the process-wide recovery guard."""
    global _guard
    if _guard is None:
        _guard = RecoveryGuard()
    return _guard
