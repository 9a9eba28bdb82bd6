"""
Chat module for client-side messaging functionality.

Handles:
- Sending chat messages
- Displaying relayed messages and presence events
"""
