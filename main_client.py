#!/usr/bin/env python3
"""
Line Relay Chat Client - Main Entry Point

Usage:
    python main_client.py HOST:PORT NICKNAME

Type a line and press Enter to send it to everyone else in the chat.
Type /quit (or press Ctrl+D) to leave.
"""

import sys

from client.main_client import main


if __name__ == "__main__":
    sys.exit(main())
