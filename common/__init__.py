"""
Shared protocol code for the line relay chat.

Contains:
- Protocol constants and limits
- Line framing over byte streams
- Command encoding and decoding
- Shared exceptions
"""
