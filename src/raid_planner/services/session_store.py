"""In-memory store of active raid sessions."""

import threading
from datetime import datetime

from raid_planner.domain.errors import DuplicateOrganizerActive
from raid_planner.domain.sessions import DisplayRef, SessionState


class SessionStore:
    """Owns every active session; all access goes through these methods."""

    def __init__(self) -> None:
        self._sessions: dict[DisplayRef, SessionState] = {}
        self._lock = threading.Lock()

    def create(
        self,
        session_id: DisplayRef,
        activity_name: str,
        deadline: datetime,
        organizer_id: int,
    ) -> SessionState:
        """Create a pending session, one per organizer."""
        with self._lock:
            if self._pending_for(organizer_id) is not None:
                raise DuplicateOrganizerActive(organizer_id)
            session = SessionState(
                id=session_id,
                activity_name=activity_name,
                deadline=deadline,
                organizer_id=organizer_id,
            )
            self._sessions[session_id] = session
            return session

    def get(self, session_id: DisplayRef) -> SessionState | None:
        """Return a session by id, if present."""
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: DisplayRef) -> SessionState | None:
        """Drop a session; removing an unknown id is a no-op."""
        with self._lock:
            return self._sessions.pop(session_id, None)

    def find_pending_by_organizer(self, organizer_id: int) -> SessionState | None:
        """Return the organizer's pending session, if any."""
        with self._lock:
            return self._pending_for(organizer_id)

    def list_sessions(self) -> list[SessionState]:
        """Return a snapshot of all stored sessions."""
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _pending_for(self, organizer_id: int) -> SessionState | None:
        for session in self._sessions.values():
            if session.organizer_id == organizer_id and session.is_pending:
                return session
        return None
