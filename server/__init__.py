"""
Server package for the line relay chat.

This package contains all server-side functionality including:
- Client connection management
- Nickname handshake and session lifecycle
- Message broadcasting
- Configuration and utilities
"""
