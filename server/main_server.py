#!/usr/bin/env python3
"""
Line Relay Chat Server

Accepts TCP clients, runs the HELLO/NICK/OK handshake for each one in its own
task, and relays chat lines between all registered clients.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Set

from common.constants import ErrorReasons
from common.errors import IOFailure
from common.protocol_definitions import create_error_message
from server.chat.broadcaster import Broadcaster
from server.chat.connection import Connection
from server.chat.registry import SessionRegistry
from server.chat.session import Session
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatRelayServer:
    """Main server class: accept loop plus the shared registry."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.registry = SessionRegistry(self.config.max_clients)
        self.broadcaster = Broadcaster(self.registry)

        # Every live session, including those still handshaking
        self.sessions: Set[Session] = set()
        self._tasks: Set[asyncio.Task] = set()
        self._server: Optional[asyncio.AbstractServer] = None
        self._stopped = asyncio.Event()

    @property
    def port(self) -> int:
        """Port actually bound (useful when configured with port 0)."""
        if self._server is None or not self._server.sockets:
            return self.config.port
        return self._server.sockets[0].getsockname()[1]

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        connection = Connection(
            reader, writer,
            read_chunk_size=self.config.read_chunk_size,
            write_timeout=self.config.write_timeout
        )
        addr = connection.peername

        if not await self.registry.try_admit():
            logger.log_rejected(addr, ErrorReasons.SERVER_FULL)
            try:
                await connection.write(create_error_message(ErrorReasons.SERVER_FULL))
            except IOFailure:
                pass
            await connection.close()
            return

        logger.log_connection(addr)
        session = Session(connection, self.registry, self.broadcaster, self.config.max_line_length)
        task = asyncio.current_task()
        self.sessions.add(session)
        self._tasks.add(task)
        try:
            await session.run()
        finally:
            self.sessions.discard(session)
            self._tasks.discard(task)
            await self.registry.release()

    async def start(self):
        """Bind the listening socket and start accepting clients."""
        self._stopped.clear()
        self._server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port
        )

        addr = ', '.join(str(sock.getsockname()) for sock in self._server.sockets)
        logger.log_listening(addr, self.config.max_clients)

    async def serve_forever(self):
        """Start (if needed) and serve until stopped or cancelled."""
        if self._server is None:
            await self.start()
        try:
            await self._stopped.wait()
        finally:
            if not self._stopped.is_set():
                await self.stop()

    async def stop(self):
        """Stop accepting, close every session, and wait for their tasks."""
        if self._server is not None:
            self._server.close()

        sessions = list(self.sessions)
        if sessions:
            logger.info(f"Closing {len(sessions)} client connection(s)...")
        for session in sessions:
            await session.close()

        await self.broadcaster.wait_pending()
        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._server is not None:
            await self._server.wait_closed()
            self._server = None
        logger.info("Server stopped")
        self._stopped.set()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Line Relay Chat Server')
    parser.add_argument('address', type=str,
                        help='HOST:PORT to listen on, e.g. 0.0.0.0:9000')
    parser.add_argument('--max-clients', type=int, default=None,
                        help='Maximum simultaneous clients (default: 50)')
    parser.add_argument('--write-timeout', type=float, default=None,
                        help='Seconds a slow client may take to accept a message (default: 10)')
    parser.add_argument('--logs-dir', type=str, default=None,
                        help='Directory for the chat history log (default: logs)')
    parser.add_argument('--no-chat-log', action='store_true',
                        help='Do not append relayed messages to the chat history log')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level (default: INFO)')
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Build a ServerConfig from parsed command line arguments."""
    kwargs = {}
    if args.max_clients is not None:
        kwargs['max_clients'] = args.max_clients
    config = ServerConfig.from_address(args.address, **kwargs)
    if args.write_timeout is not None:
        config.write_timeout = args.write_timeout
    if args.logs_dir is not None:
        config.logs_dir = args.logs_dir
    config.chat_log = not args.no_chat_log
    return config


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    logger.configure(getattr(logging, args.log_level), **config.get_log_settings())

    server = ChatRelayServer(config)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Server shut down")
    except OSError as e:
        logger.error(f"Server failed to start on {config.host}:{config.port}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
