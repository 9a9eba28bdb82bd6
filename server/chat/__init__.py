"""
Chat module for server-side relay functionality.

Handles:
- Per-client sessions and the nickname handshake
- The registry of active sessions
- Message broadcasting
"""
