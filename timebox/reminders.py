"""
Reminder gate - the seam between sessions and the reminder subsystem.

The reminder scheduler itself lives outside this package. Sessions only
need two things from it:
- a "session ended" signal that clears session-scoped trigger history
- a way to ask whether session-scoped reminders may fire right now
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

logger = logging.getLogger(__name__)


class ReminderGate(Protocol):
    def session_ended(self) -> None: ...


class SessionReminderLog:
    """
    In-process record of session-scoped reminder triggers.

    Triggers are refused while no session is active and the history is
    wiped whenever the session ends, so the next session starts clean.
    """

    def __init__(self, is_session_active: Callable[[], bool]):
        self._is_session_active = is_session_active
        self._triggered: dict[str, datetime] = {}

    def may_fire(self) -> bool:
        return self._is_session_active()

    def record_trigger(self, reminder_id: str, at: datetime) -> bool:
        """
        Record a session-scoped trigger.

        Returns False (and records nothing) when the session is not active
        or the reminder already fired this session.
        """
        if not self.may_fire():
            logger.debug("Reminder %s gated: no active session", reminder_id)
            return False
        if reminder_id in self._triggered:
            return False
        self._triggered[reminder_id] = at
        return True

    def last_triggered(self, reminder_id: str) -> datetime | None:
        return self._triggered.get(reminder_id)

    def session_ended(self) -> None:
        if self._triggered:
            logger.info("Clearing %d session-scoped reminder triggers", len(self._triggered))
        self._triggered.clear()
