"""
Maps one trimmed client message to the response line and whether the session should end.

Order of checks (first match wins):
    empty message            -> "Say something..."
    "/..."                   -> command (/time, /quit, /echo, anything else is unknown)
    "hello" (any case)       -> greeting
    "bye" (any case)         -> farewell, closes the session
    anything else            -> echoed back unchanged

decide() has no state. Only /time looks at the outside world (the clock), and the clock can be
passed in.
"""
import re
from datetime import datetime
from enum import Enum
from typing import NamedTuple
from ._types import Clock

EMPTY_RESPONSE = "Say something..."
GREETING = "Hello Wor.... i mean Hello there!"
FAREWELL = "Leaving so soon? Goodbye!"
QUIT_RESPONSE = "Closing connection"
ECHO_USAGE = "Usage: /echo <message>"
UNKNOWN_COMMAND = "Unknown command: {}"

# RFC 1123 style, e.g. "Mon, 02 Jan 2006 15:04:05 MST"
RFC1123_FORMAT = "%a, %d %b %Y %H:%M:%S %Z"

_FIRST_WHITESPACE = re.compile(r"\s")


class CommandResult(NamedTuple):
    response: str
    terminate: bool = False


class Command(str, Enum):
    TIME = "/time"
    QUIT = "/quit"
    ECHO = "/echo"


class Keyword(str, Enum):
    HELLO = "hello"
    BYE = "bye"


def _local_now() -> datetime:
    return datetime.now().astimezone()


def format_rfc1123(moment: datetime) -> str:
    return moment.strftime(RFC1123_FORMAT)


def decide(message: str, clock: Clock | None = None) -> CommandResult:
    if not message.strip():
        return CommandResult(EMPTY_RESPONSE)

    if message.startswith("/"):
        return handle_command(message, clock)

    try:
        keyword = Keyword(message.lower())
    except ValueError:
        return CommandResult(message)

    if keyword is Keyword.HELLO:
        return CommandResult(GREETING)
    return CommandResult(FAREWELL, terminate=True)


def handle_command(message: str, clock: Clock | None = None) -> CommandResult:
    parts = _FIRST_WHITESPACE.split(message, maxsplit=1)
    token = parts[0].lower()
    argument = parts[1] if len(parts) > 1 else ""

    try:
        command = Command(token)
    except ValueError:
        return CommandResult(UNKNOWN_COMMAND.format(token))

    if command is Command.TIME:
        now = (clock or _local_now)()
        return CommandResult(format_rfc1123(now))
    if command is Command.QUIT:
        return CommandResult(QUIT_RESPONSE, terminate=True)
    if command is Command.ECHO:
        if argument:
            return CommandResult(argument)
        return CommandResult(ECHO_USAGE)
    raise AssertionError(f"unhandled command {command!r}")
