"""
Varnish management ("CLI") wire protocol.

Protocol Specification:
- Transport: plain TCP, one request line per command, terminated by `\\n`
- Response Framing: 13-byte header followed by the body and one terminator
- Header Format: `[3-digit status][space][6-digit length][space][\\n]`
- Body: `length` bytes of message followed by a single `\\n`

Example exchange with authentication:

    <- 107 59      \\n
    <- ixslvvxrgkjptxmcgnnsdxsvdmvfympg\\n\\nAuthentication required.\\n
    -> auth <hex sha256 digest>\\n
    <- 200 0       \\n
    -> ban req.http.host == "example.com" && req.url ~ "^/$"\\n
    <- 200 0       \\n

Status codes:
- 200: success
- 107: authentication required; the first 32 bytes of the body are the challenge
- 101: unknown or unimplemented command
- anything else: failure
"""

from __future__ import annotations

import asyncio
import hashlib
from dataclasses import dataclass
from enum import Enum, IntEnum

from loguru import logger

from vcli.datastructures.type_aliases import (
    BanExpression,
    ControlKey,
    StatusCode,
    TimeoutSeconds,
)

from .errors import CLIProtocolError, CLITimeoutError, ProtocolSessionError

# Wire protocol constants
RESPONSE_HEADER_SIZE = 13
STATUS_FIELD = slice(0, 3)
LENGTH_FIELD = slice(4, 10)
CHALLENGE_SIZE = 32
LINE_TERMINATOR = b"\n"
MAX_READ_ATTEMPTS = 2  # one transparent retry per read


class ResponseStatus(IntEnum):
    """Status codes with a defined meaning for this client."""

    UNKNOWN_COMMAND = 101
    AUTH_REQUIRED = 107
    OK = 200


class CommandKind(Enum):
    BAN = "BAN"
    PURGE = "PURGE"

    @property
    def verb(self) -> str:
        return self.value.lower()

    @classmethod
    def from_name(cls, name: str | None) -> "CommandKind":
        """Anything other than `PURGE` (case-insensitive) means `BAN`."""
        if name is not None and name.strip().upper() == cls.PURGE.value:
            return cls.PURGE
        return cls.BAN


@dataclass(frozen=True, slots=True)
class Command:
    kind: CommandKind
    expression: BanExpression

    def with_kind(self, kind: CommandKind) -> "Command":
        return Command(kind=kind, expression=self.expression)

    def to_line(self) -> bytes:
        return f"{self.kind.verb} {self.expression}\n".encode()


@dataclass(frozen=True, slots=True)
class ProtocolResponse:
    """One decoded response frame."""

    status: StatusCode
    body: bytes

    @property
    def message(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return self.status == ResponseStatus.OK

    @property
    def challenge(self) -> bytes:
        return self.body[:CHALLENGE_SIZE]


def parse_header(header: bytes) -> tuple[StatusCode, int]:
    """Return `(status, body_length)` from a 13-byte response header."""
    if len(header) != RESPONSE_HEADER_SIZE:
        raise CLIProtocolError(
            f"Malformed response header: expected {RESPONSE_HEADER_SIZE} bytes, got {len(header)}"
        )
    status_text = header[STATUS_FIELD]
    length_text = header[LENGTH_FIELD].strip()
    if not status_text.isdigit() or not length_text.isdigit():
        raise CLIProtocolError(f"Malformed response header: {header!r}")
    return int(status_text), int(length_text)


def auth_digest(challenge: bytes, secret: ControlKey) -> str:
    """Hex SHA-256 over `challenge \\n secret \\n challenge \\n`."""
    payload = (
        challenge
        + LINE_TERMINATOR
        + secret.encode("utf-8")
        + LINE_TERMINATOR
        + challenge
        + LINE_TERMINATOR
    )
    return hashlib.sha256(payload).hexdigest()


def auth_line(challenge: bytes, secret: ControlKey) -> bytes:
    return f"auth {auth_digest(challenge, secret)}\n".encode()


async def read_exactly(
    reader: asyncio.StreamReader, size: int, timeout: TimeoutSeconds
) -> bytes:
    """Read exactly `size` bytes, retrying once after a timeout or socket error.

    Buffered data is never lost on a timed out attempt, so the retry picks up
    where the first attempt stopped.
    """
    last_error: Exception | None = None
    for attempt in range(MAX_READ_ATTEMPTS):
        try:
            return await asyncio.wait_for(reader.readexactly(size), timeout=timeout)
        except asyncio.IncompleteReadError as e:
            raise CLIProtocolError("Connection closed by server") from e
        except (TimeoutError, OSError) as e:
            last_error = e
            if attempt + 1 < MAX_READ_ATTEMPTS:
                logger.debug("Read attempt {} failed ({!r}), retrying", attempt + 1, e)

    if isinstance(last_error, TimeoutError):
        raise CLITimeoutError("Socket read error: timed out") from last_error
    raise ProtocolSessionError(f"Socket read error: {last_error}") from last_error


async def read_response(
    reader: asyncio.StreamReader, timeout: TimeoutSeconds
) -> ProtocolResponse:
    """Read one framed response: header, then `length + 1` bytes."""
    header = await read_exactly(reader, RESPONSE_HEADER_SIZE, timeout)
    status, length = parse_header(header)
    payload = await read_exactly(reader, length + 1, timeout)
    return ProtocolResponse(status=status, body=payload[:length])


async def write_line(
    writer: asyncio.StreamWriter, line: bytes, timeout: TimeoutSeconds
) -> None:
    try:
        writer.write(line)
        await asyncio.wait_for(writer.drain(), timeout=timeout)
    except TimeoutError as e:
        raise CLITimeoutError("Socket write error: timed out") from e
    except OSError as e:
        raise ProtocolSessionError(f"Socket write error: {e}") from e
