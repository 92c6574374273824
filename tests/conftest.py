"""
Test configuration - ensures repo root is in sys.path + determinism guards.

This allows tests to import from top-level packages (timebox, cli).
Every test runs against a throwaway TIMEBOX_HOME; touching the user's real
state database is a hard failure.
"""

import sqlite3
import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import timebox.*, cli.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from timebox import state_store  # noqa: E402
from timebox.session import recovery  # noqa: E402
from timebox.session.clock import ManualClock  # noqa: E402

# =============================================================================
# DETERMINISM GUARD: Block live database access
# =============================================================================

LIVE_DB_ABSOLUTE = Path.home() / ".timebox" / "data" / "timebox.db"

_original_sqlite_connect = sqlite3.connect


def _guarded_sqlite_connect(database, *args, **kwargs):
    """Intercept sqlite3.connect to block live DB access."""
    db_str = str(database)
    if db_str != ":memory:" and Path(db_str).resolve() == LIVE_DB_ABSOLUTE.resolve():
        raise RuntimeError(
            f"DETERMINISM VIOLATION: Test attempted to access live DB at {database}.\n"
            "Tests must use the isolated_home fixture (TIMEBOX_HOME under tmp_path)."
        )
    return _original_sqlite_connect(database, *args, **kwargs)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point TIMEBOX_HOME at a temp dir and reset process-wide singletons."""
    home = tmp_path / "timebox_home"
    monkeypatch.setenv("TIMEBOX_HOME", str(home))
    monkeypatch.delenv("TIMEBOX_DB", raising=False)
    monkeypatch.setattr(sqlite3, "connect", _guarded_sqlite_connect)
    monkeypatch.setattr(state_store, "_store", None)
    monkeypatch.setattr(recovery, "_guard", None)
    return home


@pytest.fixture
def clock():
    """Manual clock starting at 2026-01-01 09:00 UTC."""
    return ManualClock()
