"""
Shared constants for the line relay chat.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 9000

# Capacity
MAX_CLIENTS = 50

# Protocol limits
PROTOCOL_VERSION = 1
NICKNAME_MAX_LEN = 12
MAX_MESSAGE_LEN = 255
NICKNAME_PATTERN = r'[A-Za-z0-9_]{1,%d}' % NICKNAME_MAX_LEN

# Buffer Sizes
READ_CHUNK_SIZE = 2048
MAX_LINE_LENGTH = 4096  # bytes without a newline before the line is refused

# Timeouts
WRITE_TIMEOUT = 10  # seconds a single recipient may take to drain

# Client connection retries
MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_BASE = 1.0  # seconds, doubled per attempt

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'


# Error reasons sent on the wire
class ErrorReasons:
    INVALID_NICKNAME = 'Invalid nickname'
    EMPTY_MESSAGE = 'Empty message'
    MESSAGE_TOO_LONG = 'Message too long'
    UNKNOWN_COMMAND = 'Unknown command'
    ALREADY_REGISTERED = 'Already registered'
    NICK_REQUIRED = 'Expected NICK'
    LINE_TOO_LONG = 'Line too long'
    SERVER_FULL = 'Server full'
    INVALID_CHARACTERS = 'Invalid characters'


# Message Types
class MessageTypes:
    # Client to Server
    NICK = 'NICK'

    # Server to Client
    HELLO = 'HELLO'
    OK = 'OK'
    JOIN = 'JOIN'
    ERROR = 'ERROR'

    # Both directions
    MSG = 'MSG'
    EXIT = 'EXIT'
