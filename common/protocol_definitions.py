"""
Protocol definitions for the line relay chat.

This module defines the commands exchanged between client and server and the
canonical wire form of each one. Every line on the wire is a command token,
optionally followed by arguments, terminated by a single newline.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from common.constants import (
    MessageTypes, ErrorReasons, MAX_MESSAGE_LEN, NICKNAME_PATTERN, PROTOCOL_VERSION
)


_NICKNAME_RE = re.compile(NICKNAME_PATTERN)


@dataclass(frozen=True)
class Hello:
    """Server greeting carrying the protocol version."""
    version: int = PROTOCOL_VERSION


@dataclass(frozen=True)
class Nick:
    """Nickname request."""
    nickname: str


@dataclass(frozen=True)
class Ok:
    """Nickname accepted."""


@dataclass(frozen=True)
class Msg:
    """Chat message. ``sender`` is only set on lines relayed by the server."""
    text: str
    sender: Optional[str] = None


@dataclass(frozen=True)
class Join:
    """A peer became active."""
    nickname: str


@dataclass(frozen=True)
class Exit:
    """Disconnect request (client) or departure notice (server)."""
    nickname: Optional[str] = None


@dataclass(frozen=True)
class Error:
    """Rejected request, or a line that could not be decoded."""
    reason: str


Command = Union[Hello, Nick, Ok, Msg, Join, Exit, Error]


def validate_nickname(nickname: str) -> bool:
    """Return True if the whole string is a legal nickname."""
    return _NICKNAME_RE.fullmatch(nickname) is not None


def split_command(line: str) -> Tuple[str, str]:
    """Split a line into its command token and the remainder."""
    parts = line.lstrip().split(None, 1)
    if not parts:
        return '', ''
    if len(parts) == 1:
        return parts[0], ''
    return parts[0], parts[1]


def decode_client_line(line: str) -> Command:
    """
    Decode a line sent by a client.

    Never raises: anything malformed decodes to ``Error`` so the caller can
    decide whether to reply or disconnect.
    """
    command, argument = split_command(line)

    if command == MessageTypes.NICK:
        if not validate_nickname(argument):
            return Error(ErrorReasons.INVALID_NICKNAME)
        return Nick(argument)

    if command == MessageTypes.MSG:
        if not argument:
            return Error(ErrorReasons.EMPTY_MESSAGE)
        if len(argument) > MAX_MESSAGE_LEN:
            return Error(ErrorReasons.MESSAGE_TOO_LONG)
        if '\r' in argument:
            return Error(ErrorReasons.INVALID_CHARACTERS)
        return Msg(argument)

    if command == MessageTypes.EXIT:
        return Exit()

    return Error(ErrorReasons.UNKNOWN_COMMAND)


def decode_server_line(line: str) -> Command:
    """Decode a line sent by the server."""
    command, argument = split_command(line)

    if command == MessageTypes.HELLO:
        try:
            return Hello(int(argument))
        except ValueError:
            return Error(f"Bad greeting: {line}")

    if command == MessageTypes.OK:
        return Ok()

    if command == MessageTypes.ERROR:
        return Error(argument)

    if command == MessageTypes.MSG:
        sender, text = split_command(argument)
        if not sender:
            return Error(f"Malformed message: {line}")
        return Msg(text, sender=sender)

    if command == MessageTypes.JOIN and argument:
        return Join(argument)

    if command == MessageTypes.EXIT and argument:
        return Exit(argument)

    return Error(f"Unexpected line: {line}")


def _check_field(value: str) -> str:
    if '\n' in value or '\r' in value:
        raise ValueError(f"Line break inside protocol field: {value!r}")
    return value


def encode(command: Command) -> bytes:
    """Serialize a command to its newline-terminated wire form."""
    if isinstance(command, Hello):
        line = f"{MessageTypes.HELLO} {command.version}"
    elif isinstance(command, Nick):
        line = f"{MessageTypes.NICK} {_check_field(command.nickname)}"
    elif isinstance(command, Ok):
        line = MessageTypes.OK
    elif isinstance(command, Msg):
        text = _check_field(command.text)
        if command.sender is None:
            line = f"{MessageTypes.MSG} {text}"
        else:
            line = f"{MessageTypes.MSG} {_check_field(command.sender)} {text}"
    elif isinstance(command, Join):
        line = f"{MessageTypes.JOIN} {_check_field(command.nickname)}"
    elif isinstance(command, Exit):
        if command.nickname is None:
            line = MessageTypes.EXIT
        else:
            line = f"{MessageTypes.EXIT} {_check_field(command.nickname)}"
    elif isinstance(command, Error):
        line = f"{MessageTypes.ERROR} {_check_field(command.reason)}"
    else:
        raise TypeError(f"Not a protocol command: {command!r}")
    return line.encode('utf-8') + b'\n'


def create_hello_message() -> bytes:
    """Create the server greeting."""
    return encode(Hello())


def create_ok_message() -> bytes:
    """Create a nickname accepted message."""
    return encode(Ok())


def create_error_message(reason: str) -> bytes:
    """Create an error message."""
    return encode(Error(reason))


def create_chat_message(nickname: str, text: str) -> bytes:
    """Create a relayed chat message."""
    return encode(Msg(text, sender=nickname))


def create_user_joined_message(nickname: str) -> bytes:
    """Create a user joined message."""
    return encode(Join(nickname))


def create_user_left_message(nickname: str) -> bytes:
    """Create a user left message."""
    return encode(Exit(nickname))


def create_nick_message(nickname: str) -> bytes:
    """Create a nickname request."""
    return encode(Nick(nickname))


def create_send_message(text: str) -> bytes:
    """Create a chat message as sent by a client."""
    return encode(Msg(text))


def create_logout_message() -> bytes:
    """Create a disconnect request."""
    return encode(Exit())
