"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path

from common.constants import LOG_DIR, CHAT_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO, chat_log: bool = True):
        # Set up main logger
        self.logger = logging.getLogger('chat_relay_server')
        self.configure(log_level, logs_dir, chat_log)

    def configure(self, log_level: int = logging.INFO, logs_dir: str = LOG_DIR, chat_log: bool = True):
        """(Re)configure level, console handler and the chat log file."""
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Set up file paths; the directory is created on first write
        self.logs_dir = Path(logs_dir)
        self.chat_log_path = self.logs_dir / CHAT_LOG_FILE
        self.chat_log_enabled = chat_log

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_listening(self, addr: str, max_clients: int):
        """Log listener startup."""
        self.info(f"Server listening on {addr} (max {max_clients} clients)")

    def log_connection(self, addr: tuple):
        """Log client connection."""
        self.info(f"New connection from {addr}")

    def log_rejected(self, addr: tuple, reason: str):
        """Log a connection refused before the handshake finished."""
        self.warning(f"Rejected connection from {addr}: {reason}")

    def log_login(self, nickname: str, uid: int):
        """Log accepted nickname."""
        self.info(f"'{nickname}' joined the chat with id={uid}")

    def log_disconnect(self, nickname: str, uid: int):
        """Log user disconnect."""
        self.info(f"{nickname} (id={uid}) left the chat")

    def log_chat(self, nickname: str, uid: int, message: str):
        """Log relayed chat message."""
        self.info(f"{nickname}: {message}")
        if self.chat_log_enabled:
            self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {nickname} (id={uid}) | {message}")

    def log_delivery_failure(self, nickname: str, uid: int, error: Exception):
        """Log a failed write to one recipient."""
        self.error(f"Failed to deliver to {nickname} (id={uid}): {error}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
