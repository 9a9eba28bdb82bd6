"""
Server configuration module.

This module handles server-side configuration settings.
"""

from common.address import parse_address
from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, MAX_CLIENTS, READ_CHUNK_SIZE,
    MAX_LINE_LENGTH, WRITE_TIMEOUT, LOG_DIR
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 max_clients: int = MAX_CLIENTS):
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")
        self.host = host
        self.port = port
        self.max_clients = max_clients

        # Logging configuration
        self.logs_dir = LOG_DIR
        self.chat_log = True

        # Connection settings
        self.read_chunk_size = READ_CHUNK_SIZE
        self.max_line_length = MAX_LINE_LENGTH
        self.write_timeout = WRITE_TIMEOUT  # seconds

    @classmethod
    def from_address(cls, address: str, **kwargs) -> 'ServerConfig':
        """Build a config from a ``host:port`` argument."""
        host, port = parse_address(address)
        return cls(host, port, **kwargs)

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'max_clients': self.max_clients
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir,
            'chat_log': self.chat_log
        }
