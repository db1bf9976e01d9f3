"""Unit tests for the in-memory session store.

WHY: The store holds every open practice session for the HTTP API.
Leaking sessions, expiring active ones, or corrupting state under
concurrent requests would break the API in ways that are hard to see.

HOW: Tests are organized by concern:
  - TestSessionCreation: IDs, limits, selection metadata
  - TestSessionRetrieval: get, list, touch
  - TestSessionDeletion: delete semantics
  - TestTTLCleanup: idle expiry, measured from the last activity
  - TestThreadSafety: concurrent creation

RULES:
- Each test creates its own SessionStore instance
- Time-dependent tests use monkeypatch to control time.time()
"""

from __future__ import annotations

import threading
import time

import pytest

from recitation_checker.core.session import RecitationSession
from recitation_checker.server.sessions import SessionStore


def _session() -> RecitationSession:
    return RecitationSession("بسم الله الرحمن الرحيم")


class TestSessionCreation:
    def test_assigns_unique_ids(self):
        store = SessionStore()
        a = store.create_session(_session())
        b = store.create_session(_session())
        assert a.id != b.id

    def test_stores_selection(self):
        store = SessionStore()
        stored = store.create_session(_session(), {"surah": 1})
        assert stored.selection == {"surah": 1}

    def test_selection_defaults_to_empty(self):
        stored = SessionStore().create_session(_session())
        assert stored.selection == {}

    def test_timestamps_set(self):
        before = time.time()
        stored = SessionStore().create_session(_session())
        assert before <= stored.created_at == stored.updated_at <= time.time()

    def test_max_sessions_enforced(self):
        store = SessionStore(max_sessions=2)
        store.create_session(_session())
        store.create_session(_session())
        with pytest.raises(ValueError, match="Maximum number"):
            store.create_session(_session())


class TestSessionRetrieval:
    def test_get_returns_stored(self):
        store = SessionStore()
        stored = store.create_session(_session())
        assert store.get_session(stored.id) is stored

    def test_get_unknown_returns_none(self):
        assert SessionStore().get_session("missing") is None

    def test_list_oldest_first(self, monkeypatch):
        store = SessionStore()
        monkeypatch.setattr(time, "time", lambda: 200.0)
        newer = store.create_session(_session())
        monkeypatch.setattr(time, "time", lambda: 100.0)
        older = store.create_session(_session())
        assert [s.id for s in store.list_sessions()] == [older.id, newer.id]

    def test_touch_bumps_updated_at(self, monkeypatch):
        store = SessionStore()
        monkeypatch.setattr(time, "time", lambda: 100.0)
        stored = store.create_session(_session())
        monkeypatch.setattr(time, "time", lambda: 150.0)
        store.touch(stored.id)
        assert stored.updated_at == 150.0
        assert stored.created_at == 100.0

    def test_touch_unknown_returns_none(self):
        assert SessionStore().touch("missing") is None


class TestSessionDeletion:
    def test_delete_existing(self):
        store = SessionStore()
        stored = store.create_session(_session())
        assert store.delete_session(stored.id) is True
        assert store.get_session(stored.id) is None

    def test_delete_unknown(self):
        assert SessionStore().delete_session("missing") is False

    def test_delete_frees_capacity(self):
        store = SessionStore(max_sessions=1)
        stored = store.create_session(_session())
        store.delete_session(stored.id)
        store.create_session(_session())


class TestTTLCleanup:
    def test_removes_idle_session(self, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        stored = store.create_session(_session())

        monkeypatch.setattr(time, "time", lambda: 161.0)
        assert store.cleanup_expired() == 1
        assert store.get_session(stored.id) is None

    def test_keeps_recent_session(self, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.create_session(_session())

        monkeypatch.setattr(time, "time", lambda: 160.0)
        assert store.cleanup_expired() == 0

    def test_activity_extends_ttl(self, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        stored = store.create_session(_session())

        monkeypatch.setattr(time, "time", lambda: 150.0)
        store.touch(stored.id)

        monkeypatch.setattr(time, "time", lambda: 200.0)
        assert store.cleanup_expired() == 0
        assert store.get_session(stored.id) is stored


class TestThreadSafety:
    def test_concurrent_creation_respects_limit(self):
        store = SessionStore(max_sessions=10)
        errors = []

        def worker():
            try:
                store.create_session(_session())
            except ValueError as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.list_sessions()) == 10
        assert len(errors) == 10
