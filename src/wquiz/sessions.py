import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from .config import settings
from .models import WordPair
from .session import QuizSession

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    session: QuizSession
    topic: str
    created_at: datetime = field(default_factory=datetime.now)
    loader: Optional[asyncio.Task] = None


class SessionManager:
    """Keeps the live quiz sessions of this process, keyed by cookie value."""

    def __init__(self):
        self.entries: Dict[str, SessionEntry] = {}

    def create(
        self, loop, topic: str, words: Optional[Sequence[WordPair]] = None
    ) -> str:
        self.sweep_expired()
        session = QuizSession(
            loop,
            words,
            question_seconds=settings.QUESTION_SECONDS,
            tick_seconds=settings.TICK_SECONDS,
        )
        new_id = str(uuid.uuid4())
        self.entries[new_id] = SessionEntry(session=session, topic=topic)
        logger.info(f"New session: {new_id} [Topic: {topic}]")
        return new_id

    def _is_expired(self, entry: SessionEntry) -> bool:
        return datetime.now() - entry.created_at > timedelta(
            minutes=settings.SESSION_TIMEOUT_MINUTES
        )

    def sweep_expired(self) -> None:
        for session_id, entry in list(self.entries.items()):
            if self._is_expired(entry):
                logger.info(f"Session expired: {session_id}")
                self.discard(session_id)

    def get_entry(self, session_id: Optional[str]) -> Optional[SessionEntry]:
        if not session_id or session_id not in self.entries:
            return None
        entry = self.entries[session_id]
        if self._is_expired(entry):
            logger.info(f"Session expired: {session_id}")
            self.discard(session_id)
            return None
        return entry

    def get(self, session_id: Optional[str]) -> Optional[QuizSession]:
        entry = self.get_entry(session_id)
        return entry.session if entry else None

    def discard(self, session_id: str) -> None:
        entry = self.entries.pop(session_id, None)
        if entry is None:
            return
        entry.session.close()
        if entry.loader is not None:
            entry.loader.cancel()

    def close_all(self) -> None:
        for session_id in list(self.entries):
            self.discard(session_id)
