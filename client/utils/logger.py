"""
Client logging module.

This module handles client-side logging and chat display.
"""

import logging
import sys


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_relay_client')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

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

    def log_connection(self, host: str, port: int, success: bool):
        """Log connection attempt."""
        status = "Connected" if success else "Failed to connect"
        self.info(f"{status} to {host}:{port}")

    def log_login(self, nickname: str, success: bool):
        """Log login attempt."""
        status = "Joined the chat" if success else "Login failed"
        self.info(f"{status} as '{nickname}'")

    def show_login_info(self, nickname: str):
        """Show login information."""
        self.info(f"[INFO] Joining as '{nickname}'...")

    def show_chat(self, nickname: str, text: str):
        """Show a relayed chat message."""
        self.info(f"{nickname}: {text}")

    def show_user_joined(self, nickname: str):
        """Show user joined notification."""
        self.info(f"[EVENT] '{nickname}' joined the chat")

    def show_user_left(self, nickname: str):
        """Show user left notification."""
        self.info(f"[EVENT] '{nickname}' left the chat")

    def show_server_error(self, reason: str):
        """Show an ERROR line from the server."""
        self.error(f"[ERROR] Server error: {reason}")

    def show_interactive_mode_info(self):
        """Show interactive mode information."""
        self.info("[INFO] Type messages to chat (/quit or Ctrl+D to exit)")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ClientLogger()
