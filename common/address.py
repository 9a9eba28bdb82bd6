"""Parsing of the HOST:PORT command line argument."""

from typing import Tuple


def parse_address(address: str) -> Tuple[str, int]:
    """
    Parse a ``host:port`` argument.

    IPv6 hosts are written in brackets, e.g. ``[::1]:9000``.
    Raises ValueError on malformed input.
    """
    host, sep, port_str = address.rpartition(':')
    if not sep or not host or not port_str:
        raise ValueError(f"Invalid address '{address}', expected HOST:PORT")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port '{port_str}' in '{address}'")
    if not 0 <= port <= 65535:
        raise ValueError(f"Port {port} out of range in '{address}'")
    return host, port
