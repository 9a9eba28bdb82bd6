"""
Client connection wrapper.

Wraps the asyncio stream pair handed out by ``asyncio.start_server`` so a
Session only sees read, write and close.
"""

import asyncio
from typing import Optional

from common.constants import READ_CHUNK_SIZE, WRITE_TIMEOUT
from common.errors import IOFailure


class Connection:
    """One client socket, closed exactly once."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 read_chunk_size: int = READ_CHUNK_SIZE, write_timeout: Optional[float] = WRITE_TIMEOUT):
        self.reader = reader
        self.writer = writer
        self.read_chunk_size = read_chunk_size
        self.write_timeout = write_timeout
        self.peername = writer.get_extra_info('peername')
        self.closed = False
        # One writer at a time keeps each sender's lines in order
        self.write_lock = asyncio.Lock()

    async def read(self) -> bytes:
        """Read the next chunk; ``b''`` once the peer or we closed the stream."""
        if self.closed:
            return b''
        return await self.reader.read(self.read_chunk_size)

    async def write(self, data: bytes):
        """Write ``data`` and wait for it to drain, raising IOFailure on error or timeout."""
        async with self.write_lock:
            await self.write_held(data)

    async def write_held(self, data: bytes):
        """Same as write(), for callers already holding ``write_lock``."""
        if self.closed:
            raise IOFailure("Connection already closed")
        try:
            self.writer.write(data)
            await asyncio.wait_for(self.writer.drain(), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            raise IOFailure(f"Write timed out after {self.write_timeout}s")
        except (ConnectionError, OSError) as e:
            raise IOFailure(str(e) or type(e).__name__) from e

    async def close(self) -> bool:
        """Close the socket. Returns False if it was already closed."""
        if self.closed:
            return False
        self.closed = True
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError):
            # The peer may already have reset the socket
            pass
        return True
