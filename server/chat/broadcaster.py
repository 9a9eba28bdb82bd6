"""
Broadcast fan-out.

Delivers one encoded line to every active session except the sender. The
registry lock is only held while taking the snapshot; the writes happen
outside it and run concurrently, so a stalled recipient cannot hold up
registry changes or delivery to anyone else.
"""

import asyncio
from typing import List, Optional, Set

from server.chat.registry import SessionRegistry
from server.utils.logger import logger


class Broadcaster:
    """Send messages to all registered sessions."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        self._teardown_tasks: Set[asyncio.Task] = set()

    async def broadcast(self, message: bytes, exclude_uid: Optional[int] = None) -> List[int]:
        """
        Send an encoded line to all active sessions except ``exclude_uid``.

        Returns the ids of recipients the message could not be delivered to.
        Each of those is torn down in the background.
        """
        recipients = [
            session for session in await self.registry.snapshot()
            if session.uid != exclude_uid
        ]
        if not recipients:
            return []

        results = await asyncio.gather(
            *(session.deliver(message) for session in recipients),
            return_exceptions=True
        )

        failed = []
        for session, result in zip(recipients, results):
            if isinstance(result, Exception):
                logger.log_delivery_failure(session.nickname, session.uid, result)
                failed.append(session.uid)
                self._schedule_teardown(session)
        return failed

    def _schedule_teardown(self, session):
        # Teardown broadcasts EXIT itself, so run it outside this fan-out
        task = asyncio.create_task(session.teardown(reason="delivery failed"))
        self._teardown_tasks.add(task)
        task.add_done_callback(self._teardown_tasks.discard)

    async def wait_pending(self):
        """Wait for teardowns started by failed deliveries."""
        while self._teardown_tasks:
            await asyncio.gather(*list(self._teardown_tasks), return_exceptions=True)
