"""
Chat client module.

This module handles client-side chat messaging functionality.
"""

import asyncio
from typing import Optional

from common.constants import MAX_MESSAGE_LEN
from common.protocol_definitions import (
    Command, Error, Exit, Join, Msg, create_send_message, create_logout_message
)
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, writer: Optional[asyncio.StreamWriter] = None, max_message_len: int = MAX_MESSAGE_LEN):
        self.writer = writer
        self.max_message_len = max_message_len

    def set_writer(self, writer: asyncio.StreamWriter):
        """Set the writer for sending messages."""
        self.writer = writer

    async def send_message(self, data: bytes) -> bool:
        """Send an encoded line to the server."""
        if not self.writer:
            logger.error("[ERROR] Not connected to server")
            return False

        try:
            self.writer.write(data)
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            logger.error(f"[ERROR] Failed to send message: {e}")
            return False

    async def send_chat(self, text: str) -> bool:
        """Send a chat message, refusing ones the server would reject."""
        if not text:
            return False
        if '\n' in text or '\r' in text:
            logger.warning("[WARN] Messages cannot contain line breaks")
            return False
        if len(text) > self.max_message_len:
            logger.warning(
                f"[WARN] Message too long ({len(text)} characters), "
                f"please limit to {self.max_message_len} characters"
            )
            return False
        return await self.send_message(create_send_message(text))

    async def send_exit(self) -> bool:
        """Tell the server we are leaving."""
        return await self.send_message(create_logout_message())

    async def handle_message(self, command: Command):
        """Display a decoded line from the server."""
        if isinstance(command, Msg):
            logger.show_chat(command.sender, command.text)
        elif isinstance(command, Join):
            logger.show_user_joined(command.nickname)
        elif isinstance(command, Exit):
            logger.show_user_left(command.nickname)
        elif isinstance(command, Error):
            logger.show_server_error(command.reason)
        else:
            logger.debug(f"Ignoring unexpected {type(command).__name__} from server")
