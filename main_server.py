#!/usr/bin/env python3
"""
Line Relay Chat Server - Main Entry Point

Usage:
    python main_server.py HOST:PORT

Optional arguments:
    --max-clients N       Maximum simultaneous clients (default: 50)
    --write-timeout S     Seconds a slow client may take to drain (default: 10)
    --logs-dir DIR        Chat history log directory (default: logs)
    --no-chat-log         Do not write the chat history log
    --log-level LEVEL     Console log level (default: INFO)
"""

import sys

from server.main_server import main


if __name__ == "__main__":
    sys.exit(main())
