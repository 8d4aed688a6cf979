import logging
import uuid
from collections import OrderedDict
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRegistry(Generic[T]):
    """In-memory page sessions, oldest evicted first once ``max_sessions`` is reached."""

    def __init__(self, factory: Callable[[], T], max_sessions: int = 1000) -> None:
        self.factory = factory
        self.max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[str, T] = OrderedDict()

    def create(self) -> tuple[str, T]:
        session_id = uuid.uuid4().hex
        session = self.factory()
        self._sessions[session_id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("session.evicted id=%s", evicted_id)
        logger.info("session.created id=%s active=%d", session_id, len(self._sessions))
        return session_id, session

    def get(self, session_id: str) -> T | None:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
