"""
Line framing for the relay protocol.

TCP delivers a byte stream with no message boundaries: a single read may hold
part of a line, one line, or several. ``LineFramer`` rebuilds complete lines
from arbitrary chunks and ``LineStream`` drives it from a connection.
"""

from collections import deque
from typing import Awaitable, Callable, Deque, List

from common.constants import MAX_LINE_LENGTH
from common.errors import IOFailure, LineTooLong, PeerClosed


class LineFramer:
    """Split incoming bytes into newline-terminated lines."""

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH):
        self.max_line_length = max_line_length
        self._pending = bytearray()

    @property
    def pending(self) -> bytes:
        """Bytes received after the last newline."""
        return bytes(self._pending)

    def feed(self, data: bytes) -> List[str]:
        """
        Append ``data`` and return every line it completes, in order.

        The terminator (and a ``\\r`` right before it) is stripped. Whatever
        follows the last newline is kept for the next call.
        """
        self._pending.extend(data)
        lines = []
        while True:
            index = self._pending.find(b'\n')
            if index < 0:
                break
            raw = bytes(self._pending[:index])
            del self._pending[:index + 1]
            if raw.endswith(b'\r'):
                raw = raw[:-1]
            lines.append(raw.decode('utf-8', errors='replace'))

        if len(self._pending) > self.max_line_length:
            self._pending.clear()
            raise LineTooLong(f"Line exceeds {self.max_line_length} bytes", lines)
        return lines


class LineStream:
    """
    Lazy sequence of lines read from a connection.

    ``read`` is a coroutine function returning the next chunk of bytes, with
    ``b''`` meaning the peer closed the stream. Lines left over from one read
    are served before the next read happens, so the stream can be consumed
    with ``readline()`` and then iterated without losing anything.
    """

    def __init__(self, read: Callable[[], Awaitable[bytes]], framer: LineFramer = None):
        self._read = read
        self.framer = framer or LineFramer()
        self._lines: Deque[str] = deque()
        self._error = None
        self.at_eof = False

    async def readline(self) -> str:
        """Return the next complete line, or raise PeerClosed / IOFailure."""
        while not self._lines:
            if self._error is not None:
                raise self._error
            if self.at_eof:
                raise PeerClosed("Stream already closed by peer")
            try:
                data = await self._read()
            except (ConnectionError, OSError) as e:
                raise IOFailure(str(e) or type(e).__name__) from e
            if not data:
                self.at_eof = True
                raise PeerClosed("Peer closed the connection")
            try:
                self._lines.extend(self.framer.feed(data))
            except LineTooLong as e:
                self._lines.extend(e.lines)
                self._error = e
        return self._lines.popleft()

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        try:
            return await self.readline()
        except PeerClosed:
            raise StopAsyncIteration
