"""
Session State Machine - The single writer for session state.

Transitions:
    start            (none)             -> active
    switch_context   active             -> active     (folds elapsed)
    pause            active             -> paused     (no fold)
    resume           paused | suspended -> active     (re-anchors)
    suspend          active | paused    -> suspended  (folds given elapsed)
    adjust_context_time  any            -> unchanged status
    end              any                -> (none)

Rules:
- Elapsed time is folded into used_minutes on switch and suspend only.
  Pause stops the clock and resume re-anchors it, so a span is never
  counted twice.
- allocated_minutes is frozen at start; corrections go through
  used_minutes / adjusted_minutes.
- A transition whose precondition does not hold is a no-op that returns
  the unchanged state. Nothing here raises for a bad precondition.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import replace

from timebox.allocation.models import CategoryAllocation
from timebox.observability import SessionContext
from timebox.reminders import ReminderGate

from .clock import SystemClock, TimeSource, elapsed_seconds
from .models import AppMode, AppState, Running, Session, SessionStatus, Stopped, generate_id

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


class SessionStateMachine:
    """
    Owns the application state and applies session transitions atomically.

    Responsibilities:
    - Create and destroy the session
    - Fold elapsed wall-clock time into durable usage
    - Keep mode and clock consistent with status
    - Notify listeners (persistence, UI) after each applied transition
    """

    def __init__(
        self,
        state: AppState | None = None,
        time_source: TimeSource | None = None,
        reminders: ReminderGate | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self.state = state or AppState()
        self.clock = time_source or SystemClock()
        self.reminders = reminders
        self._id_factory = id_factory or (lambda: generate_id("ses"))
        self._lock = threading.Lock()
        self._listeners: list[StateListener] = []

    # ==================== Queries ====================

    @property
    def session(self) -> Session | None:
        return self.state.session

    @property
    def is_session_active(self) -> bool:
        """Gate for session-scoped reminders."""
        session = self.state.session
        return session is not None and session.status == SessionStatus.ACTIVE

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call listener after every applied transition. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    def _ignored(self, transition: str, reason: str) -> AppState:
        logger.debug("Ignored %s: %s", transition, reason)
        return self.state

    # ==================== Transitions ====================

    def start(self, allocations: Sequence[CategoryAllocation], total_minutes: int) -> AppState:
        """Create a new active session on the first allocation's category."""
        with self._lock:
            if self.state.session is not None:
                return self._ignored("start", "a session already exists")
            if not allocations:
                return self._ignored("start", "no allocations")

            now = self.clock.now()
            session = Session(
                id=self._id_factory(),
                total_duration=total_minutes,
                started_at=now,
                allocations=[replace(a) for a in allocations],
                active_category_id=allocations[0].category_id,
                status=SessionStatus.ACTIVE,
                clock=Running(now),
            )
            self.state.session = session
            self.state.mode = AppMode.WORKING

            with SessionContext(session.id):
                logger.info(
                    "Session started: %d min across %d categories",
                    total_minutes,
                    len(session.allocations),
                )
        self._emit()
        return self.state

    def switch_context(self, new_category_id: str) -> AppState:
        """Fold elapsed time into the outgoing category and activate another."""
        with self._lock:
            session = self.state.session
            if session is None or session.status != SessionStatus.ACTIVE:
                return self._ignored("switch_context", "session not active")
            if new_category_id == session.active_category_id:
                return self._ignored("switch_context", "category already active")
            if session.allocation_for(new_category_id) is None:
                return self._ignored("switch_context", f"unknown category {new_category_id}")

            now = self.clock.now()
            folded = self._fold(session, elapsed_seconds(session, now) / 60)
            previous = session.active_category_id
            session.active_category_id = new_category_id
            session.clock = Running(now)

            with SessionContext(session.id):
                logger.info(
                    "Switched %s -> %s (folded %.2f min)", previous, new_category_id, folded
                )
        self._emit()
        return self.state

    def pause(self) -> AppState:
        """Stop the clock without folding."""
        with self._lock:
            session = self.state.session
            if session is None or session.status != SessionStatus.ACTIVE:
                return self._ignored("pause", "session not active")

            session.status = SessionStatus.PAUSED
            session.clock = Stopped()

            with SessionContext(session.id):
                logger.info("Session paused on %s", session.active_category_id)
        self._emit()
        return self.state

    def resume(self) -> AppState:
        """Restart the clock from now, discarding any unfolded span."""
        with self._lock:
            session = self.state.session
            if session is None or session.status not in (SessionStatus.PAUSED, SessionStatus.SUSPENDED):
                return self._ignored("resume", "session not paused or suspended")

            resumed_from = session.status
            session.status = SessionStatus.ACTIVE
            session.clock = Running(self.clock.now())
            self.state.mode = AppMode.WORKING

            with SessionContext(session.id):
                logger.info("Session resumed from %s on %s", resumed_from, session.active_category_id)
        self._emit()
        return self.state

    def suspend(self, elapsed_minutes: float | None = None) -> AppState:
        """
        Fold elapsed time, stop the clock, and leave working mode.

        Args:
            elapsed_minutes: Minutes to fold into the active category. When
                omitted, derived from the running clock (0 if paused).
        """
        with self._lock:
            session = self.state.session
            if session is None or session.status not in (SessionStatus.ACTIVE, SessionStatus.PAUSED):
                return self._ignored("suspend", "session not active or paused")

            if elapsed_minutes is None:
                elapsed_minutes = elapsed_seconds(session, self.clock.now()) / 60
            folded = self._fold(session, elapsed_minutes)
            session.status = SessionStatus.SUSPENDED
            session.clock = Stopped()
            self.state.mode = AppMode.DEFINITION

            with SessionContext(session.id):
                logger.info("Session suspended (folded %.2f min)", folded)
        self._emit()
        return self.state

    def adjust_context_time(
        self,
        category_id: str,
        new_remaining_minutes: float,
        current_elapsed_minutes: float = 0.0,
    ) -> AppState:
        """
        Operator override of a category's remaining time.

        The requested remaining time is clamped to
        [0, allocated - current_elapsed]; used_minutes is rewritten so the
        category shows exactly that much left. allocated_minutes is untouched.
        """
        with self._lock:
            session = self.state.session
            if session is None:
                return self._ignored("adjust_context_time", "no session")
            allocation = session.allocation_for(category_id)
            if allocation is None:
                return self._ignored("adjust_context_time", f"unknown category {category_id}")

            max_remaining = allocation.allocated_minutes - current_elapsed_minutes
            clamped = max(0.0, min(new_remaining_minutes, max_remaining))
            allocation.used_minutes = max(
                0.0, allocation.allocated_minutes - clamped - current_elapsed_minutes
            )

            with SessionContext(session.id):
                logger.info(
                    "Adjusted %s: remaining %.2f min (requested %.2f), used %.2f min",
                    category_id,
                    clamped,
                    new_remaining_minutes,
                    allocation.used_minutes,
                )
        self._emit()
        return self.state

    def end(self) -> AppState:
        """Destroy the session and clear session-scoped reminder history."""
        with self._lock:
            session = self.state.session
            if session is None:
                return self._ignored("end", "no session")

            self.state.session = None
            self.state.mode = AppMode.DEFINITION

            with SessionContext(session.id):
                logger.info(
                    "Session ended: %.1f of %d min used", session.total_used, session.total_duration
                )
        if self.reminders is not None:
            self.reminders.session_ended()
        self._emit()
        return self.state

    # ==================== Internals ====================

    @staticmethod
    def _fold(session: Session, minutes: float) -> float:
        """Add elapsed minutes to the active category. Returns minutes folded."""
        allocation = session.active_allocation
        minutes = max(0.0, minutes)
        if allocation is None or minutes == 0:
            return 0.0
        allocation.used_minutes += minutes
        return minutes
