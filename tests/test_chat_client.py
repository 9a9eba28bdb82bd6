#!/usr/bin/env python3
"""
Tests for the terminal client: local message checks, rendering of server
lines, and a login against a real server.
"""

import asyncio
import io
import unittest
from unittest.mock import AsyncMock, Mock, patch

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.chat.chat_client import ChatClient
from client.main_client import ChatRelayClient
from client.utils.config import ClientConfig
from common.protocol_definitions import Error, Exit, Join, Msg
from server.main_server import ChatRelayServer
from server.utils.config import ServerConfig
from tests.fakes import quiet_server_logger, wait_until


def setUpModule():
    quiet_server_logger()


class TestChatClient(unittest.IsolatedAsyncioTestCase):
    """Test cases for ChatClient."""

    async def asyncSetUp(self):
        self.writer = Mock()
        self.writer.drain = AsyncMock()
        self.chat_client = ChatClient(self.writer)

    async def test_send_chat(self):
        self.assertTrue(await self.chat_client.send_chat("hello there"))
        self.writer.write.assert_called_once_with(b"MSG hello there\n")

    async def test_long_message_is_not_sent(self):
        self.assertFalse(await self.chat_client.send_chat("x" * 256))
        self.writer.write.assert_not_called()

    async def test_send_exit(self):
        await self.chat_client.send_exit()
        self.writer.write.assert_called_once_with(b"EXIT\n")

    async def test_not_connected(self):
        self.assertFalse(await ChatClient().send_chat("hi"))

    async def test_write_failure(self):
        self.writer.write.side_effect = ConnectionResetError("reset")
        self.assertFalse(await self.chat_client.send_chat("hi"))

    async def test_rendering(self):
        with patch('client.chat.chat_client.logger') as mock_logger:
            await self.chat_client.handle_message(Msg("hi", sender="bob"))
            await self.chat_client.handle_message(Join("carol"))
            await self.chat_client.handle_message(Exit("carol"))
            await self.chat_client.handle_message(Error("Message too long"))

        mock_logger.show_chat.assert_called_once_with("bob", "hi")
        mock_logger.show_user_joined.assert_called_once_with("carol")
        mock_logger.show_user_left.assert_called_once_with("carol")
        mock_logger.show_server_error.assert_called_once_with("Message too long")


class TestChatRelayClient(unittest.IsolatedAsyncioTestCase):
    """ChatRelayClient against a running server."""

    async def asyncSetUp(self):
        self.server = ChatRelayServer(ServerConfig('127.0.0.1', 0))
        await self.server.start()

    async def asyncTearDown(self):
        await self.server.stop()

    def make_client(self, nickname):
        return ChatRelayClient(ClientConfig('127.0.0.1', self.server.port, nickname))

    async def test_login_and_send(self):
        alice = self.make_client("alice")
        bob = self.make_client("bob")
        self.assertTrue(await alice.connect())
        self.assertTrue(await alice.handshake())
        self.assertTrue(await bob.connect())
        self.assertTrue(await bob.handshake())

        received = []
        alice.chat_client.handle_message = AsyncMock(side_effect=received.append)
        listener = asyncio.create_task(alice.listen_for_messages())

        await bob.read_input(io.StringIO("hello alice\n/quit\n"))
        await wait_until(lambda: Msg("hello alice", sender="bob") in received)
        self.assertEqual(received[0], Join("bob"))

        await bob.chat_client.send_exit()
        await wait_until(lambda: Exit("bob") in received)

        await bob.close()
        await alice.close()
        await asyncio.wait_for(listener, 2.0)
        self.assertFalse(alice.running)

    async def test_connect_failure(self):
        client = ChatRelayClient(ClientConfig('127.0.0.1', 1, "alice"))
        self.assertFalse(await client.connect(retry_count=2, base_delay=0.01))


if __name__ == '__main__':
    unittest.main()
