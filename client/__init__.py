"""
Client package for the line relay chat.

This package contains the terminal client:
- Connection and nickname handshake
- Chat message sending and display
- Configuration and utilities
"""
