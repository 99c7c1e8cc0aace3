import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from .schemas import AudioSegment, ConversationSession, SessionStatus

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """Raised when a write targets a session id the repository does not know"""


class SessionRepository(Protocol):
    """Storage for live conversation sessions and their audio segments"""

    def create(self, user_id: str, client_name: Optional[str] = None,
               client_company: Optional[str] = None) -> ConversationSession: ...

    def get(self, session_id: str) -> Optional[ConversationSession]: ...

    def append_segment(self, segment: AudioSegment) -> ConversationSession: ...

    def end(self, session_id: str) -> ConversationSession: ...

    def list_for_user(self, user_id: str) -> List[ConversationSession]: ...


class InMemorySessionRepository:
    """
    Process-local session store.

    Callers always get copies. Reads and writes of the session map happen
    under one lock. Sessions are never evicted, ended ones included, so the
    map grows for the life of the process.
    """

    def __init__(self):
        self._sessions: Dict[str, ConversationSession] = {}
        self._lock = threading.Lock()

    def create(self, user_id: str, client_name: Optional[str] = None,
               client_company: Optional[str] = None) -> ConversationSession:
        session = ConversationSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            client_name=client_name,
            client_company=client_company,
            start_time=datetime.now(timezone.utc),
        )
        with self._lock:
            self._sessions[session.id] = session
        logger.info("Session created: %s (user %s)", session.id, user_id)
        return session.model_copy(deep=True)

    def get(self, session_id: str) -> Optional[ConversationSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session else None

    def append_segment(self, segment: AudioSegment) -> ConversationSession:
        with self._lock:
            session = self._require(segment.session_id)
            session.segments.append(segment)
            return session.model_copy(deep=True)

    def end(self, session_id: str) -> ConversationSession:
        with self._lock:
            session = self._require(session_id)
            session.status = SessionStatus.COMPLETED
            session.end_time = datetime.now(timezone.utc)
            result = session.model_copy(deep=True)
        logger.info("Session ended: %s (%d segments)", session_id, len(result.segments))
        return result

    def list_for_user(self, user_id: str) -> List[ConversationSession]:
        with self._lock:
            return [s.model_copy(deep=True) for s in self._sessions.values() if s.user_id == user_id]

    def _require(self, session_id: str) -> ConversationSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session
