"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, MAX_MESSAGE_LEN, MAX_RETRY_ATTEMPTS, RETRY_DELAY_BASE
)
from common.protocol_definitions import validate_nickname
from common.address import parse_address


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, nickname: str = None):
        if nickname is None or not validate_nickname(nickname):
            raise ValueError(f"Invalid nickname {nickname!r}: use 1-12 letters, digits or '_'")
        self.host = host
        self.port = port
        self.nickname = nickname

        # Message settings
        self.max_message_len = MAX_MESSAGE_LEN

        # Connection settings
        self.retry_attempts = MAX_RETRY_ATTEMPTS
        self.retry_delay_base = RETRY_DELAY_BASE  # seconds

    @classmethod
    def from_address(cls, address: str, nickname: str) -> 'ClientConfig':
        """Build a config from a ``host:port`` argument."""
        host, port = parse_address(address)
        return cls(host, port, nickname)

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'nickname': self.nickname
        }
