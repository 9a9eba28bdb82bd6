"""Exceptions shared by the relay server and client."""


class ChatError(Exception):
    """Base class for chat relay failures."""


class ProtocolViolation(ChatError):
    """Raised when a peer sends something the protocol does not allow."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class LineTooLong(ProtocolViolation):
    """Raised when a peer sends more bytes than one line may hold.

    ``lines`` holds the complete lines framed from the same chunk, which are
    still valid and must be processed before the error.
    """

    def __init__(self, reason: str, lines=None):
        super().__init__(reason)
        self.lines = list(lines or [])


class PeerClosed(ChatError):
    """Raised when the peer shut the stream down in an orderly way."""


class IOFailure(ChatError):
    """Raised when reading from or writing to a connection fails."""


class CapacityExceeded(ChatError):
    """Raised when the registry already holds the maximum number of clients."""


__all__ = [
    "ChatError",
    "ProtocolViolation",
    "LineTooLong",
    "PeerClosed",
    "IOFailure",
    "CapacityExceeded",
]
