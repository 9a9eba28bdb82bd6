"""
Per-connection session.

A Session owns one client connection for its whole life: it greets the
client, validates the requested nickname, registers itself, then relays every
chat line the client sends until the client leaves or the connection fails.
"""

import asyncio
from enum import Enum
from typing import Optional

from common.constants import ErrorReasons, MAX_LINE_LENGTH
from common.errors import CapacityExceeded, IOFailure, LineTooLong, PeerClosed
from common.framing import LineFramer, LineStream
from common.protocol_definitions import (
    Error, Exit, Msg, Nick, decode_client_line,
    create_hello_message, create_ok_message, create_error_message,
    create_chat_message, create_user_joined_message, create_user_left_message
)
from server.chat.broadcaster import Broadcaster
from server.chat.connection import Connection
from server.chat.registry import SessionRegistry
from server.utils.logger import logger


class SessionState(Enum):
    CONNECTED = 'connected'
    AWAITING_NICK = 'awaiting_nick'
    ACTIVE = 'active'
    CLOSED = 'closed'


class Session:
    """Server-side state of one connected client."""

    def __init__(self, connection: Connection, registry: SessionRegistry, broadcaster: Broadcaster,
                 max_line_length: int = MAX_LINE_LENGTH):
        self.connection = connection
        self.registry = registry
        self.broadcaster = broadcaster
        self.lines = LineStream(connection.read, LineFramer(max_line_length))

        self.uid: Optional[int] = None
        self.nickname: Optional[str] = None
        self.state = SessionState.CONNECTED
        self._joined = False
        self._closing = False

    def __repr__(self):
        return f"<Session id={self.uid} nickname={self.nickname!r} state={self.state.value}>"

    @property
    def label(self) -> str:
        if self.nickname is not None:
            return f"{self.nickname} (id={self.uid})"
        return str(self.connection.peername)

    async def run(self):
        """Drive the session from greeting to teardown."""
        try:
            if await self.handshake():
                await self.receive_loop()
        except PeerClosed:
            if not self._closing:
                logger.info(f"Connection closed by {self.label}")
        except LineTooLong as e:
            logger.warning(f"Dropping {self.label}: {e}")
            await self._send_quietly(create_error_message(ErrorReasons.LINE_TOO_LONG))
        except IOFailure as e:
            if not self._closing:
                logger.warning(f"Connection error for {self.label}: {e}")
        except asyncio.CancelledError:
            logger.info(f"Session cancelled for {self.label}")
            raise
        except Exception as e:
            logger.log_error(f"session {self.label}", e)
        finally:
            await self.teardown()

    async def handshake(self) -> bool:
        """
        Greet the client and wait for its nickname.

        Returns True once the session is registered and active. Any invalid
        reply is answered with ERROR and ends the session; no retry is offered.
        """
        self.state = SessionState.AWAITING_NICK
        await self.send(create_hello_message())

        command = decode_client_line(await self.lines.readline())
        if isinstance(command, Error):
            await self.reject(command.reason)
            return False
        if not isinstance(command, Nick):
            await self.reject(ErrorReasons.NICK_REQUIRED)
            return False

        self.nickname = command.nickname
        # Hold our own write lock so no broadcast can reach the client before OK
        async with self.connection.write_lock:
            try:
                self.uid = await self.registry.add(self)
            except CapacityExceeded as e:
                logger.log_rejected(self.connection.peername, str(e))
                await self.connection.write_held(create_error_message(ErrorReasons.SERVER_FULL))
                return False
            self.state = SessionState.ACTIVE
            await self.connection.write_held(create_ok_message())

        logger.log_login(self.nickname, self.uid)
        self._joined = True
        await self.broadcaster.broadcast(create_user_joined_message(self.nickname), exclude_uid=self.uid)
        return True

    async def receive_loop(self):
        """Relay chat lines until EXIT or end of stream."""
        async for line in self.lines:
            command = decode_client_line(line)

            if isinstance(command, Msg):
                logger.log_chat(self.nickname, self.uid, command.text)
                await self.broadcaster.broadcast(
                    create_chat_message(self.nickname, command.text), exclude_uid=self.uid
                )
            elif isinstance(command, Exit):
                logger.info(f"Exit request from {self.label}")
                return
            elif isinstance(command, Nick):
                await self.send(create_error_message(ErrorReasons.ALREADY_REGISTERED))
            elif isinstance(command, Error):
                logger.warning(f"Protocol error from {self.label}: {command.reason}")
                await self.send(create_error_message(command.reason))

        if not self._closing:
            logger.info(f"Connection closed by {self.label}")

    async def reject(self, reason: str):
        """Refuse the handshake. The caller ends the session afterwards."""
        logger.log_rejected(self.connection.peername, reason)
        await self.send(create_error_message(reason))

    async def send(self, data: bytes):
        """Write a line to this client."""
        await self.connection.write(data)

    async def deliver(self, data: bytes):
        """Write a broadcast line; silently skipped once teardown has begun."""
        if self._closing:
            return
        await self.connection.write(data)

    async def _send_quietly(self, data: bytes):
        try:
            await self.send(data)
        except IOFailure:
            pass

    async def teardown(self, reason: Optional[str] = None, notify: bool = True) -> bool:
        """
        Leave the registry, tell the others, and close the connection.

        Idempotent: only the first call has any effect. Returns True for
        that call. ``notify=False`` skips the EXIT broadcast (server shutdown).
        """
        if self._closing:
            return False
        self._closing = True

        was_active = self.state is SessionState.ACTIVE
        self.state = SessionState.CLOSED
        if reason:
            logger.info(f"Closing {self.label}: {reason}")

        try:
            if was_active:
                await self.registry.remove(self.uid)
                logger.log_disconnect(self.nickname, self.uid)
                if notify and self._joined:
                    await self.broadcaster.broadcast(create_user_left_message(self.nickname), exclude_uid=self.uid)
        finally:
            await self.connection.close()
        return True

    async def close(self, reason: str = "server shutdown"):
        """Close the session without announcing it to the other clients."""
        await self.teardown(reason=reason, notify=False)
