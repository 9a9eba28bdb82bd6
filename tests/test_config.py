#!/usr/bin/env python3
"""
Unit tests for address parsing and the server/client configuration classes.
"""

import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.utils.config import ClientConfig
from common.address import parse_address
from common.constants import MAX_CLIENTS
from server.utils.config import ServerConfig


class TestParseAddress(unittest.TestCase):
    """Test cases for parse_address()."""

    def test_host_and_port(self):
        self.assertEqual(parse_address("127.0.0.1:9000"), ("127.0.0.1", 9000))
        self.assertEqual(parse_address("localhost:0"), ("localhost", 0))

    def test_bracketed_ipv6(self):
        self.assertEqual(parse_address("[::1]:9000"), ("::1", 9000))

    def test_malformed(self):
        for address in ("", "localhost", ":9000", "host:", "host:port", "host:70000"):
            with self.subTest(address=address):
                with self.assertRaises(ValueError):
                    parse_address(address)


class TestServerConfig(unittest.TestCase):
    """Test cases for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig.from_address("0.0.0.0:9000")
        self.assertEqual(config.get_connection_info(),
                         {'host': '0.0.0.0', 'port': 9000, 'max_clients': MAX_CLIENTS})
        self.assertTrue(config.get_log_settings()['chat_log'])

    def test_max_clients_must_be_positive(self):
        with self.assertRaises(ValueError):
            ServerConfig(max_clients=0)


class TestClientConfig(unittest.TestCase):
    """Test cases for ClientConfig."""

    def test_valid(self):
        config = ClientConfig.from_address("localhost:9000", "alice")
        self.assertEqual(config.get_connection_info(),
                         {'host': 'localhost', 'port': 9000, 'nickname': 'alice'})

    def test_invalid_nickname(self):
        for nickname in (None, "", "bad name", "a" * 13):
            with self.subTest(nickname=nickname):
                with self.assertRaises(ValueError):
                    ClientConfig("localhost", 9000, nickname)


if __name__ == '__main__':
    unittest.main()
