"""
Session context management with context-local storage.
"""

import contextvars
from typing import Optional

# Context variable carrying the session being mutated
_session_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "session_id", default=None
)


def get_session_id() -> Optional[str]:
    """Get the current session ID from context."""
    return _session_id_var.get()


def set_session_id(session_id: Optional[str]) -> contextvars.Token:
    """Set the session ID in context. Returns token for reset."""
    return _session_id_var.set(session_id)


class SessionContext:
    """
    Context manager for session-scoped operations.

    Usage:
        with SessionContext(session.id):
            logger.info("Switching category")
            # All logs within this block will include the session ID
    """

    def __init__(self, session_id: Optional[str]):
        self.session_id = session_id
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "SessionContext":
        self._token = set_session_id(self.session_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _session_id_var.reset(self._token)
