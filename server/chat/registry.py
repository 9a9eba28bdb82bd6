"""
Session registry.

Keeps the set of active sessions and the admission count used to enforce the
client limit. All state is guarded by a single lock that is held only for the
dictionary operation itself, never across network I/O.
"""

import asyncio
from typing import TYPE_CHECKING, Dict, List

from common.constants import MAX_CLIENTS
from common.errors import CapacityExceeded

if TYPE_CHECKING:
    from server.chat.session import Session


class SessionRegistry:
    """Concurrency-safe mapping of session id to active Session."""

    def __init__(self, max_clients: int = MAX_CLIENTS):
        self.max_clients = max_clients
        self._sessions: Dict[int, "Session"] = {}  # id -> session
        self._admitted = 0  # connections holding a slot, handshaking or active
        self._next_uid = 1
        self.lock = asyncio.Lock()  # Protect shared state

    async def try_admit(self) -> bool:
        """Reserve a slot for a new connection. False when the server is full."""
        async with self.lock:
            if self._admitted >= self.max_clients:
                return False
            self._admitted += 1
            return True

    async def release(self):
        """Give back a slot taken with try_admit."""
        async with self.lock:
            if self._admitted > 0:
                self._admitted -= 1

    async def add(self, session) -> int:
        """
        Register an active session and return its newly assigned id.

        Ids increase monotonically and are never reused. Raises
        CapacityExceeded if the registry is already full, which only happens
        when sessions are added without first taking a slot via try_admit.
        """
        async with self.lock:
            if len(self._sessions) >= self.max_clients:
                raise CapacityExceeded(f"Registry full ({self.max_clients} clients)")
            uid = self._next_uid
            self._next_uid += 1
            self._sessions[uid] = session
            return uid

    async def remove(self, uid: int) -> bool:
        """Remove a session. Returns False if it was not registered."""
        async with self.lock:
            return self._sessions.pop(uid, None) is not None

    async def snapshot(self) -> List["Session"]:
        """Copy of the active sessions, safe to iterate without the lock."""
        async with self.lock:
            return list(self._sessions.values())

    def get_participant_count(self) -> int:
        """Get the number of active sessions."""
        return len(self._sessions)

    def get_admitted_count(self) -> int:
        """Get the number of connections holding a slot."""
        return self._admitted
