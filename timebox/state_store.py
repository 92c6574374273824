"""
State Store - Durable home of the application state.

One SQLite row holds the JSON snapshot of the whole AppState. Every load
is validated and passed through the RecoveryGuard before anything else
sees it, so a session clock is never trusted across a process boundary.
"""

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from timebox import paths
from timebox.contracts import SCHEMA_VERSION, AppStateSnapshot
from timebox.session.models import AppState
from timebox.session.recovery import RecoveryGuard, get_recovery_guard

logger = logging.getLogger(__name__)

STATE_KEY = "app_state"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS app_state (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class StateStore:
    """
    Central state store. SQLite for persistence.

    Loads always go through the recovery guard; saves write the whole
    snapshot in one statement so a half-applied transition is never stored.
    """

    def __init__(self, db_path: str | Path | None = None, guard: RecoveryGuard | None = None):
        self.db_path = str(db_path or paths.db_path())
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.guard = guard or get_recovery_guard()
        self._write_lock = threading.Lock()

        with self._get_conn() as conn:
            conn.execute(_SCHEMA)

        logger.info("StateStore ready, DB path: %s", self.db_path)

    @contextmanager
    def _get_conn(self):
        """Connection per operation; commits on success."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    # ==================== Load / Save ====================

    def _read_raw(self) -> str | None:
        with self._get_conn() as conn:
            row = conn.execute("SELECT value FROM app_state WHERE key = ?", [STATE_KEY]).fetchone()
            return row["value"] if row else None

    def load(self) -> AppState:
        """
        Load, validate and recover the saved state.

        Corrupted or unreadable data yields a fresh AppState; the error is
        logged, not raised.
        """
        try:
            raw = self._read_raw()
            if raw is None:
                state = AppState()
            else:
                snapshot = AppStateSnapshot.model_validate(json.loads(raw))
                state = AppState.from_dict(snapshot.model_dump())
        except (sqlite3.Error, json.JSONDecodeError, ValidationError, ValueError) as exc:
            logger.error("Failed to load saved state, starting fresh: %s", exc)
            state = AppState()

        return self.guard.inspect(state)

    def save(self, state: AppState) -> None:
        """Persist the whole state. sqlite3 errors propagate."""
        payload = state.to_dict()
        payload["schema_version"] = SCHEMA_VERSION
        value = json.dumps(payload, sort_keys=True)
        now = datetime.now().isoformat()

        with self._write_lock, self._get_conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO app_state (key, value, updated_at) VALUES (?, ?, ?)",
                [STATE_KEY, value, now],
            )
        logger.debug("Saved state (mode=%s, session=%s)", state.mode, bool(state.session))

    def clear(self) -> None:
        with self._write_lock, self._get_conn() as conn:
            conn.execute("DELETE FROM app_state WHERE key = ?", [STATE_KEY])
        logger.info("Cleared saved state")


# Singleton accessor
_store: StateStore | None = None


def get_store(db_path: str | None = None) -> StateStore:
    """Get the singleton state store."""
    global _store
    if _store is None:
        _store = StateStore(db_path)
    return _store
