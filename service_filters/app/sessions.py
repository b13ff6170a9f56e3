"""
In-memory store of filter engine sessions.
"""

import uuid
from collections import OrderedDict
from typing import Dict, Optional

from shared.logging import get_logger

from .filters.engine import FilterEngine


class SessionStore:
    """Engines keyed by session id, oldest evicted first once full.

    Each engine is owned by exactly one session; handlers call it without
    awaiting in between, which serializes access on the event loop.
    """

    def __init__(self, max_sessions: int = 1000):
        self.logger = get_logger("filters.sessions")
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, FilterEngine]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, engine: FilterEngine) -> str:
        """Store ``engine`` under a new session id."""
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = engine

        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            self.logger.info("Session evicted", session_id=evicted_id)

        self.logger.info("Session created", session_id=session_id, rules=len(engine))
        return session_id

    def get(self, session_id: str) -> Optional[FilterEngine]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        self.logger.info("Session deleted", session_id=session_id)
        return True

    def stats(self) -> Dict[str, int]:
        return {
            "active_sessions": len(self._sessions),
            "max_sessions": self.max_sessions,
        }
