"""Session store - in-memory chat sessions keyed by id (DI-friendly, no global singleton)."""

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable

from src.application.chat.session import ChatSession

logger = logging.getLogger(__name__)

MAX_SESSIONS = 200


class SessionStore:
    """Keeps the most recently used sessions; the oldest idle session is evicted first."""

    def __init__(self, factory: Callable[[str], ChatSession], max_sessions: int = MAX_SESSIONS):
        """Initialize with a factory that builds a new session for an id."""
        self._factory = factory
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> ChatSession:
        """Return the session for an id, creating it on first use."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._factory(session_id)
                self._sessions[session_id] = session
                self._evict()
            else:
                self._sessions.move_to_end(session_id)
            return session

    def get(self, session_id: str) -> ChatSession | None:
        """Return an existing session or None."""
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        """Drop a session by id."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions.keys())

    def _evict(self) -> None:
        while len(self._sessions) > self._max_sessions:
            for sid, session in self._sessions.items():
                if not session.is_busy:
                    del self._sessions[sid]
                    logger.info("Evicted idle session %s", sid)
                    break
            else:
                logger.warning("Session limit reached but every session is busy")
                return
