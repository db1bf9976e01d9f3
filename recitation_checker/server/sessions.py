"""In-memory recitation session store with TTL cleanup.

WHY: HTTP clients practise a passage over many requests: one to open a
session, then one per transcript update as the speech engine refines
its guess. The server has to keep each RecitationSession alive between
those requests. An in-memory store is enough for a single-process
service with no persistence requirements.

HOW: Two components work together:
  StoredSession — dataclass wrapping a RecitationSession with its ID,
                  selection metadata, and timestamps
  SessionStore  — thread-safe dict-based store with create/get/touch/
                  delete and TTL cleanup

RULES:
- All store mutations are protected by threading.Lock
- Session IDs are UUID4 hex strings generated at creation time
- TTL is measured from the last activity (created or updated)
- create_session() raises ValueError when max_sessions is reached
- Alignment runs outside the store lock; RecitationSession has its own
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from recitation_checker.config import MAX_SESSIONS, SESSION_TTL_SECONDS
from recitation_checker.core.session import RecitationSession

logger = logging.getLogger(__name__)


@dataclass
class StoredSession:
    """One learner's session as tracked by the server.

    RULES:
    - id: UUID4 hex string, immutable after creation
    - selection: where the reference came from (surah/verses), may be empty
    - updated_at: epoch timestamp of the last transcript submission
    """

    id: str
    session: RecitationSession
    created_at: float
    updated_at: float
    selection: Dict[str, Any] = field(default_factory=dict)


class SessionStore:
    """Thread-safe in-memory store for recitation sessions."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self._sessions: Dict[str, StoredSession] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(
        self,
        session: RecitationSession,
        selection: Optional[Dict[str, Any]] = None,
    ) -> StoredSession:
        """Store a new session under a fresh ID.

        Raises:
            ValueError: If max_sessions sessions are already stored.
        """
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of concurrent sessions ({}) reached".format(
                        self.max_sessions
                    )
                )

            session_id = uuid.uuid4().hex
            now = time.time()
            stored = StoredSession(
                id=session_id,
                session=session,
                created_at=now,
                updated_at=now,
                selection=selection or {},
            )
            self._sessions[session_id] = stored

        logger.info(
            "Created session %s (%d reference words)",
            session_id, len(session.reference_words),
        )
        return stored

    def get_session(self, session_id: str) -> Optional[StoredSession]:
        """Return the stored session, or None for an unknown ID."""
        with self._lock:
            return self._sessions.get(session_id)

    def list_sessions(self) -> List[StoredSession]:
        """Return all sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def touch(self, session_id: str) -> Optional[StoredSession]:
        """Record activity on a session, extending its TTL."""
        with self._lock:
            stored = self._sessions.get(session_id)
            if stored is not None:
                stored.updated_at = time.time()
            return stored

    def delete_session(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""
        with self._lock:
            stored = self._sessions.pop(session_id, None)

        if stored is None:
            return False

        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL.

        Returns:
            The number of sessions removed.
        """
        now = time.time()
        expired: List[StoredSession] = []

        with self._lock:
            for session_id, stored in list(self._sessions.items()):
                if now - stored.updated_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for stored in expired:
            logger.info("Expired session %s (idle %.0fs)", stored.id, now - stored.updated_at)

        return len(expired)
