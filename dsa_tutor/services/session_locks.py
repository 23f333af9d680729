"""
Per-session asyncio locks that serialize exchanges on the same session.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class SessionLockRegistry:
    """
    Hands out one ``asyncio.Lock`` per session id while it is in use.

    Holders and waiters are counted per session; the lock is dropped when the
    last of them leaves, so idle sessions keep no entry.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        """Acquire the session's lock for the duration of the block."""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        self._users[session_id] = self._users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[session_id] -= 1
            if self._users[session_id] == 0:
                del self._users[session_id]
                del self._locks[session_id]

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every request handled by this process
session_locks = SessionLockRegistry()
