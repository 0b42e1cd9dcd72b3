"""In-memory session store for follow-up questions about an analysed video.

The store is a plain object constructed at service start and injected where
needed. It holds sessions for the lifetime of the process; ``max_sessions``
bounds it by evicting the least recently active session (``0`` = unbounded).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from .errors import SessionNotFoundError
from .gateway import DialogueHandle
from .models.video import AnalysisRequestPayload, Turn

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Conversation context for one analysed video."""

    session_id: str
    dialogue: DialogueHandle
    created_at: datetime = field(default_factory=datetime.now)
    last_active: datetime = field(default_factory=datetime.now)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def payload(self) -> AnalysisRequestPayload:
        return self.dialogue.payload

    @property
    def history(self) -> list[Turn]:
        return self.dialogue.history

    @property
    def turn_count(self) -> int:
        """Follow-up exchanges recorded after the seed exchange."""
        return max(len(self.history) - 2, 0) // 2


class SessionStore:
    """Process-wide session registry keyed by session id."""

    def __init__(self, max_sessions: int = 0) -> None:
        self._sessions: dict[str, Session] = {}
        self.max_sessions = max_sessions

    def create(self, session_id: str, dialogue: DialogueHandle) -> Session:
        """Store a session seeded by *dialogue*; an existing id is overwritten."""
        if session_id in self._sessions:
            logger.warning("Session id collision, overwriting %s", session_id)
        elif self.max_sessions and len(self._sessions) >= self.max_sessions:
            oldest_id = min(self._sessions, key=lambda k: self._sessions[k].last_active)
            self.evict(oldest_id)
        session = Session(session_id=session_id, dialogue=dialogue)
        self._sessions[session_id] = session
        logger.info("Opened session %s", session_id)
        return session

    def get(self, session_id: str) -> Session | None:
        """Look up a session by ID; None when unknown."""
        return self._sessions.get(session_id)

    def append_exchange(self, session_id: str, question: str, answer: str) -> int:
        """Append one (question, answer) pair. Returns the new turn count.

        Raises:
            SessionNotFoundError: *session_id* is not in the store.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.history.append(Turn(speaker="user", text=question))
        session.history.append(Turn(speaker="model", text=answer))
        session.last_active = datetime.now()
        return session.turn_count

    def evict(self, session_id: str) -> bool:
        """Remove a session. Returns False if it was not present."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Evicted session %s", session_id)
        return removed

    @property
    def count(self) -> int:
        """Number of live sessions."""
        return len(self._sessions)
