#!/usr/bin/env python3
"""
Unit tests for common/protocol_definitions.py

Covers nickname validation, decoding of client and server lines, and the
canonical wire form produced by encode().
"""

import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.constants import ErrorReasons
from common.protocol_definitions import (
    Error, Exit, Hello, Join, Msg, Nick, Ok,
    validate_nickname, decode_client_line, decode_server_line, encode,
    create_hello_message, create_chat_message, create_error_message
)


class TestValidateNickname(unittest.TestCase):
    """Nickname format rules."""

    def test_valid_nicknames(self):
        for name in ("bob", "a", "Alice_99", "x" * 12, "___"):
            with self.subTest(name=name):
                self.assertTrue(validate_nickname(name))

    def test_invalid_nicknames(self):
        for name in ("", "this_is_13ch_", "bad name", "bob\n", "bob!", "héllo", " bob"):
            with self.subTest(name=name):
                self.assertFalse(validate_nickname(name))

    def test_trailing_garbage_is_rejected(self):
        """A valid prefix must not be enough."""
        self.assertFalse(validate_nickname("alice;rm"))


class TestDecodeClientLine(unittest.TestCase):
    """Lines sent by clients to the server."""

    def test_nick(self):
        self.assertEqual(decode_client_line("NICK alice"), Nick("alice"))

    def test_nick_invalid(self):
        self.assertEqual(decode_client_line("NICK bad name"), Error(ErrorReasons.INVALID_NICKNAME))
        self.assertEqual(decode_client_line("NICK"), Error(ErrorReasons.INVALID_NICKNAME))

    def test_msg_keeps_spaces(self):
        self.assertEqual(decode_client_line("MSG hello there  world"), Msg("hello there  world"))

    def test_msg_does_not_trust_embedded_sender(self):
        """The whole remainder is the text; the server supplies the sender."""
        command = decode_client_line("MSG mallory hi")
        self.assertEqual(command, Msg("mallory hi"))
        self.assertIsNone(command.sender)

    def test_msg_length_limit(self):
        self.assertEqual(decode_client_line("MSG " + "a" * 255), Msg("a" * 255))
        self.assertEqual(decode_client_line("MSG " + "a" * 256), Error(ErrorReasons.MESSAGE_TOO_LONG))

    def test_msg_with_carriage_return(self):
        self.assertEqual(decode_client_line("MSG a\rb"), Error(ErrorReasons.INVALID_CHARACTERS))

    def test_empty_msg(self):
        self.assertEqual(decode_client_line("MSG"), Error(ErrorReasons.EMPTY_MESSAGE))
        self.assertEqual(decode_client_line("MSG   "), Error(ErrorReasons.EMPTY_MESSAGE))

    def test_exit(self):
        self.assertEqual(decode_client_line("EXIT"), Exit())
        self.assertEqual(decode_client_line("EXIT bye"), Exit())

    def test_unknown_commands(self):
        for line in ("", "HELLO 1", "msg lowercase", "JOIN bob", "PING"):
            with self.subTest(line=line):
                self.assertEqual(decode_client_line(line), Error(ErrorReasons.UNKNOWN_COMMAND))


class TestDecodeServerLine(unittest.TestCase):
    """Lines sent by the server to clients."""

    def test_greeting_and_ok(self):
        self.assertEqual(decode_server_line("HELLO 1"), Hello(1))
        self.assertEqual(decode_server_line("OK"), Ok())

    def test_bad_greeting(self):
        self.assertIsInstance(decode_server_line("HELLO one"), Error)

    def test_relayed_msg(self):
        self.assertEqual(decode_server_line("MSG bob hello world"), Msg("hello world", sender="bob"))

    def test_presence(self):
        self.assertEqual(decode_server_line("JOIN bob"), Join("bob"))
        self.assertEqual(decode_server_line("EXIT bob"), Exit("bob"))

    def test_error(self):
        self.assertEqual(decode_server_line("ERROR Message too long"), Error("Message too long"))

    def test_garbage(self):
        self.assertIsInstance(decode_server_line("WHAT"), Error)
        self.assertIsInstance(decode_server_line("JOIN"), Error)


class TestEncode(unittest.TestCase):
    """Canonical wire lines."""

    def test_server_lines(self):
        self.assertEqual(create_hello_message(), b"HELLO 1\n")
        self.assertEqual(encode(Ok()), b"OK\n")
        self.assertEqual(create_error_message("Invalid nickname"), b"ERROR Invalid nickname\n")
        self.assertEqual(create_chat_message("bob", "hello there"), b"MSG bob hello there\n")
        self.assertEqual(encode(Join("bob")), b"JOIN bob\n")
        self.assertEqual(encode(Exit("bob")), b"EXIT bob\n")

    def test_client_lines(self):
        self.assertEqual(encode(Nick("alice")), b"NICK alice\n")
        self.assertEqual(encode(Msg("hi all")), b"MSG hi all\n")
        self.assertEqual(encode(Exit()), b"EXIT\n")

    def test_embedded_newline_is_refused(self):
        with self.assertRaises(ValueError):
            create_chat_message("bob", "two\nlines")
        with self.assertRaises(ValueError):
            encode(Msg("carriage\rreturn"))

    def test_not_a_command(self):
        with self.assertRaises(TypeError):
            encode("MSG hi")


if __name__ == '__main__':
    unittest.main()
