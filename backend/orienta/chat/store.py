"""In-memory session transcript store.

Maps caller-chosen session IDs to ordered lists of Turns. The store is an
ordinary object owned by the ChatService, so a different backing store can be
injected later; history is lost when the process exits.

Concurrency:
    Designed for a single asyncio event loop. ``lock(session_id)`` serialises
    read-modify-write cycles on one session; different sessions never wait on
    each other. It is NOT thread-safe.

Truncation:
    Once a transcript holds more than ``max_length`` turns it is replaced by
    the system turn plus the ``keep_recent`` most recent turns. With the
    defaults (12 / 10) a transcript never settles above 11 entries.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List

from .schemas import Role, Turn

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 12
DEFAULT_KEEP_RECENT = 10


class SessionStore:
    """Owns every session transcript.

    Args:
        system_prompt: Content of the system turn that opens every session.
        max_length: Transcript length above which truncation applies.
        keep_recent: Number of most recent turns kept after the system turn.
    """

    def __init__(
        self,
        system_prompt: str,
        max_length: int = DEFAULT_MAX_LENGTH,
        keep_recent: int = DEFAULT_KEEP_RECENT,
    ) -> None:
        if keep_recent < 1 or max_length <= keep_recent:
            raise ValueError("max_length must exceed keep_recent, which must be positive")
        self.system_turn = Turn(role=Role.SYSTEM, content=system_prompt)
        self.max_length = max_length
        self.keep_recent = keep_recent

        # session_id -> transcript (system turn first)
        self._sessions: Dict[str, List[Turn]] = {}

        # session_id -> lock serialising turns of that session
        self._locks: Dict[str, asyncio.Lock] = {}

        # session_id -> number of holders plus waiters on that lock
        self._lock_users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    @asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        """Hold the per-session lock for the duration of the block.

        The lock entry is dropped once no request holds or waits on it, so the
        lock table only tracks sessions with requests in flight.
        """
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[session_id] - 1
            if remaining:
                self._lock_users[session_id] = remaining
            else:
                del self._lock_users[session_id]
                del self._locks[session_id]

    def get_or_create(self, session_id: str) -> List[Turn]:
        """Return a copy of the transcript, creating the session if needed.

        Returns:
            List[Turn]: The transcript; the first entry is always the system turn.
        """
        transcript = self._sessions.get(session_id)
        if transcript is None:
            transcript = self._sessions[session_id] = [self.system_turn]
            logger.info(f"[SessionStore] Created session {session_id}")
        return list(transcript)

    def append(self, session_id: str, turn: Turn) -> int:
        """Append a turn, creating the session if needed.

        Returns:
            int: Transcript length after the append.

        Raises:
            ValueError: If a system turn is appended.
        """
        if turn.role == Role.SYSTEM:
            raise ValueError("The system turn is fixed at session creation")
        self.get_or_create(session_id)
        transcript = self._sessions[session_id]
        transcript.append(turn)
        return len(transcript)

    def truncate(self, session_id: str) -> int:
        """Apply the sliding window to one session.

        Returns:
            int: Transcript length after truncation (0 if the session is absent).
        """
        transcript = self._sessions.get(session_id)
        if transcript is None:
            return 0
        if len(transcript) > self.max_length:
            dropped = len(transcript) - 1 - self.keep_recent
            self._sessions[session_id] = [transcript[0]] + transcript[-self.keep_recent:]
            logger.debug(f"[SessionStore] Truncated session {session_id}, dropped {dropped} turns")
        return len(self._sessions[session_id])

    def clear(self, session_id: str) -> bool:
        """Remove a session entirely; a no-op for unknown sessions.

        Returns:
            bool: True if a session was removed.
        """
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"[SessionStore] Cleared session {session_id}")
        return removed
