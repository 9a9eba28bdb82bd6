#!/usr/bin/env python3
"""
Line Relay Chat Client

Connects to a relay server, registers a nickname, then sends each line typed
on stdin as a chat message while printing everything the server relays.
"""

import argparse
import asyncio
import sys
import threading
from typing import Optional

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.constants import PROTOCOL_VERSION, READ_CHUNK_SIZE
from common.errors import ChatError, IOFailure, PeerClosed
from common.framing import LineStream
from common.protocol_definitions import Error, Hello, Ok, create_nick_message, decode_server_line

QUIT_COMMAND = '/quit'


def _start_line_reader(stream) -> asyncio.Queue:
    """Read ``stream`` on a daemon thread; an empty string marks EOF."""
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def pump():
        for line in iter(stream.readline, ''):
            loop.call_soon_threadsafe(queue.put_nowait, line)
        loop.call_soon_threadsafe(queue.put_nowait, '')

    threading.Thread(target=pump, name='stdin-reader', daemon=True).start()
    return queue


class ChatRelayClient:
    """Main client class: connection, handshake and interactive loop."""

    def __init__(self, config: ClientConfig):
        self.config = config
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.lines: Optional[LineStream] = None
        self.running = False

        self.chat_client = ChatClient(max_message_len=config.max_message_len)

    async def _read_chunk(self) -> bytes:
        return await self.reader.read(READ_CHUNK_SIZE)

    async def connect(self, retry_count: Optional[int] = None, base_delay: Optional[float] = None) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        retry_count = self.config.retry_attempts if retry_count is None else retry_count
        base_delay = self.config.retry_delay_base if base_delay is None else base_delay
        attempt = 0

        while attempt < retry_count:
            try:
                self.reader, self.writer = await asyncio.open_connection(self.config.host, self.config.port)
                logger.log_connection(self.config.host, self.config.port, True)
                self.lines = LineStream(self._read_chunk)
                self.chat_client.set_writer(self.writer)
                return True
            except OSError as e:
                attempt += 1
                logger.log_connection(self.config.host, self.config.port, False)
                logger.log_error("connection", e)

                if attempt < retry_count:
                    delay = base_delay * (2 ** (attempt - 1))  # Exponential backoff
                    logger.info(f"[INFO] Retrying connection in {delay}s (attempt {attempt}/{retry_count})...")
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"[ERROR] Failed to connect after {retry_count} attempts")
        return False

    async def handshake(self) -> bool:
        """Check the greeting, send our nickname and wait for OK."""
        greeting = decode_server_line(await self.lines.readline())
        if not isinstance(greeting, Hello) or greeting.version != PROTOCOL_VERSION:
            logger.error(f"[ERROR] Unsupported server protocol: {greeting}")
            return False

        logger.show_login_info(self.config.nickname)
        if not await self.chat_client.send_message(create_nick_message(self.config.nickname)):
            return False

        reply = decode_server_line(await self.lines.readline())
        if isinstance(reply, Ok):
            logger.log_login(self.config.nickname, True)
            self.running = True
            return True
        if isinstance(reply, Error):
            logger.show_server_error(reply.reason)
        logger.log_login(self.config.nickname, False)
        return False

    async def listen_for_messages(self):
        """Print server lines until the connection ends."""
        try:
            async for line in self.lines:
                await self.chat_client.handle_message(decode_server_line(line))
            logger.info("[INFO] Server closed connection")
        except IOFailure as e:
            logger.error(f"[ERROR] Connection lost: {e}")
        except ChatError as e:
            logger.error(f"[ERROR] {e}")
        finally:
            self.running = False

    async def read_input(self, stream=None):
        """Send stdin lines as chat messages until /quit or EOF."""
        lines = _start_line_reader(stream or sys.stdin)
        while self.running:
            user_input = await lines.get()
            if not user_input:
                break
            text = user_input.rstrip('\r\n')
            if text.strip() == QUIT_COMMAND:
                break
            if text:
                await self.chat_client.send_chat(text)

    async def interactive_mode(self) -> bool:
        """Run client with interactive chat input."""
        if not await self.connect():
            return False

        try:
            logged_in = await self.handshake()
        except PeerClosed:
            logger.error("[ERROR] Server closed the connection during login")
            logged_in = False
        except IOFailure as e:
            logger.log_error("login", e)
            logged_in = False
        if not logged_in:
            await self.close()
            return False

        logger.show_interactive_mode_info()
        listener_task = asyncio.create_task(self.listen_for_messages())
        input_task = asyncio.create_task(self.read_input())

        try:
            await asyncio.wait({listener_task, input_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not listener_task.done():
                await self.chat_client.send_exit()
            input_task.cancel()
            listener_task.cancel()
            await asyncio.gather(listener_task, return_exceptions=True)
            await self.close()
        return True

    async def close(self):
        """Close the connection."""
        self.running = False
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass
            self.writer = None
        logger.info("[INFO] Disconnected from server")


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Line Relay Chat Client')
    parser.add_argument('address', type=str, help='Server HOST:PORT')
    parser.add_argument('nickname', type=str, help='Nickname, 1-12 letters, digits or _')
    args = parser.parse_args(argv)

    try:
        config = ClientConfig.from_address(args.address, args.nickname)
    except ValueError as e:
        parser.error(str(e))

    client = ChatRelayClient(config)
    try:
        ok = asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        logger.info("[INFO] Interrupted by user")
        return 0
    except Exception as e:
        logger.log_error("client", e)
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
