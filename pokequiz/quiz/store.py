"""
Session Store - In-memory container for live sessions.

Sessions are never evicted; they live for the lifetime of the process.
The store only protects its own map. Serializing guesses on one session
is the session lock's job.
"""

from __future__ import annotations
import threading

from .session import Session


class SessionStore:
    """
    Thread-safe mapping of session id to Session.

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def add(self, session: Session):
        """
        Insert a session.

        An existing entry with the same id is replaced. Ids are 64 random
        bits, so a collision is not handled specially.
        """
        with self._lock:
            self._sessions[session.session_id] = session

    def get(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        with self._lock:
            return self._sessions.get(session_id)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
