"""Tests for the SQLite state store."""

import json
import sqlite3
from datetime import UTC, datetime

import pytest

from tests.fixtures import persisted_state
from timebox.allocation import CategoryAllocation
from timebox.session import (
    AppMode,
    AppState,
    RecoveryGuard,
    SessionStateMachine,
    SessionStatus,
    elapsed_seconds,
)
from timebox.state_store import STATE_KEY, StateStore, get_store


@pytest.fixture
def store(tmp_path):
    return StateStore(tmp_path / "state.db", guard=RecoveryGuard())


def _write_raw(store, value: str):
    conn = sqlite3.connect(store.db_path)
    conn.execute(
        "INSERT OR REPLACE INTO app_state (key, value, updated_at) VALUES (?, ?, ?)",
        [STATE_KEY, value, "2026-01-25T10:00:00"],
    )
    conn.commit()
    conn.close()


class TestLoad:
    def test_empty_store_gives_initial_state(self, store):
        state = store.load()
        assert state.session is None
        assert state.mode == AppMode.DEFINITION
        assert state.presets == []

    def test_active_session_suspended_on_load(self, store):
        _write_raw(store, json.dumps(persisted_state(status="active", mode="working")))
        state = store.load()
        assert state.session.status == SessionStatus.SUSPENDED
        assert state.session.category_started_at is None
        assert state.mode == AppMode.DEFINITION
        assert store.guard.should_offer_recovery() is True

    def test_paused_session_suspended_on_load(self, store):
        _write_raw(store, json.dumps(persisted_state(status="paused")))
        assert store.load().session.status == SessionStatus.SUSPENDED

    def test_suspended_session_with_saved_anchor_loads_stopped(self, store, clock):
        data = persisted_state(status="suspended", mode="definition")
        data["session"]["category_started_at"] = "2026-01-25T10:00:00+00:00"
        _write_raw(store, json.dumps(data))

        session = store.load().session
        assert session.status == SessionStatus.SUSPENDED
        assert session.category_started_at is None
        clock.set(datetime(2026, 1, 25, 12, 0, tzinfo=UTC))
        assert elapsed_seconds(session, clock.now()) == 0

    def test_completed_session_is_dropped(self, store):
        _write_raw(store, json.dumps(persisted_state(status="completed", mode="definition")))
        state = store.load()
        assert state.session is None
        assert state.mode == AppMode.DEFINITION
        assert store.guard.should_offer_recovery() is False

    def test_corrupted_json_starts_fresh(self, store):
        _write_raw(store, "not-valid-json{{{")
        state = store.load()
        assert state.session is None
        assert state.mode == AppMode.DEFINITION

    def test_schema_violation_starts_fresh(self, store):
        data = persisted_state(status="suspended", mode="definition")
        data["session"]["allocations"][0]["used_minutes"] = -4
        _write_raw(store, json.dumps(data))
        assert store.load().session is None

    def test_bad_timestamp_starts_fresh(self, store):
        data = persisted_state(status="suspended", mode="definition", started_at="yesterday")
        _write_raw(store, json.dumps(data))
        assert store.load().session is None


class TestSave:
    def test_roundtrip_preserves_session(self, store, clock):
        machine = SessionStateMachine(time_source=clock)
        machine.start([CategoryAllocation("A", 40), CategoryAllocation("B", 20)], 60)
        clock.advance(minutes=15)
        machine.suspend()
        store.save(machine.state)

        loaded = store.load()
        assert loaded.session.to_dict() == machine.session.to_dict()
        assert loaded.session.allocation_for("A").used_minutes == pytest.approx(15)

    def test_saved_active_session_comes_back_suspended(self, store, clock):
        machine = SessionStateMachine(time_source=clock)
        machine.subscribe(store.save)
        machine.start([CategoryAllocation("A", 60)], 60)

        loaded = store.load()
        assert loaded.session.status == SessionStatus.SUSPENDED
        assert loaded.mode == AppMode.DEFINITION

    def test_clear(self, store):
        store.save(AppState(mode=AppMode.WORKING))
        store.clear()
        assert store.load().mode == AppMode.DEFINITION


class TestGetStore:
    def test_uses_app_home(self, isolated_home):
        store = get_store()
        assert store.db_path.startswith(str(isolated_home.resolve()))
        assert get_store() is store
