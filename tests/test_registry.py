#!/usr/bin/env python3
"""
Unit tests for server/chat/registry.py
"""

import asyncio
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.errors import CapacityExceeded
from server.chat.registry import SessionRegistry


class TestSessionRegistry(unittest.IsolatedAsyncioTestCase):
    """Test cases for SessionRegistry."""

    async def asyncSetUp(self):
        self.registry = SessionRegistry(max_clients=3)

    async def test_ids_are_monotonic_and_not_reused(self):
        first = await self.registry.add(object())
        second = await self.registry.add(object())
        await self.registry.remove(first)
        third = await self.registry.add(object())
        self.assertEqual([first, second, third], [1, 2, 3])

    async def test_remove(self):
        uid = await self.registry.add(object())
        self.assertEqual(self.registry.get_participant_count(), 1)
        self.assertTrue(await self.registry.remove(uid))
        self.assertFalse(await self.registry.remove(uid))
        self.assertEqual(self.registry.get_participant_count(), 0)

    async def test_capacity(self):
        for _ in range(3):
            await self.registry.add(object())
        with self.assertRaises(CapacityExceeded):
            await self.registry.add(object())

    async def test_snapshot_is_a_copy(self):
        a, b = object(), object()
        uid_a = await self.registry.add(a)
        await self.registry.add(b)
        snapshot = await self.registry.snapshot()
        await self.registry.remove(uid_a)
        self.assertEqual(snapshot, [a, b])
        self.assertEqual(await self.registry.snapshot(), [b])

    async def test_admission_slots(self):
        results = [await self.registry.try_admit() for _ in range(4)]
        self.assertEqual(results, [True, True, True, False])
        await self.registry.release()
        self.assertTrue(await self.registry.try_admit())
        self.assertEqual(self.registry.get_admitted_count(), 3)

    async def test_concurrent_adds_get_distinct_ids(self):
        registry = SessionRegistry(max_clients=100)
        ids = await asyncio.gather(*(registry.add(object()) for _ in range(50)))
        self.assertEqual(sorted(ids), list(range(1, 51)))
        self.assertEqual(registry.get_participant_count(), 50)


if __name__ == '__main__':
    unittest.main()
