"""
Single-use management session.

A session opens one TCP connection, reads the banner, answers an optional
authentication challenge, sends exactly one `ban`/`purge` line, reads the
reply and closes the connection. Nothing is pooled or reused.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from loguru import logger

from vcli.datastructures.type_aliases import ControlKey, TimeoutSeconds

from .config import clamp_timeout
from .endpoints import Endpoint
from .errors import AuthenticationError, ProtocolSessionError
from .fallback import PurgeFallbackPolicy, on_purge_unimplemented
from .protocol import (
    Command,
    ProtocolResponse,
    ResponseStatus,
    auth_line,
    read_response,
    write_line,
)

Connector: TypeAlias = Callable[
    [str, int], Awaitable[tuple[asyncio.StreamReader, asyncio.StreamWriter]]
]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of one command against one endpoint."""

    ok: bool
    detail: str = ""


def _reason(error: BaseException) -> str:
    if isinstance(error, TimeoutError):
        return "timed out"
    return str(error) or type(error).__name__


class CLISession:
    """Runs management commands, one fresh connection per command."""

    def __init__(
        self,
        *,
        fallback_policy: PurgeFallbackPolicy | None = None,
        connector: Connector | None = None,
    ) -> None:
        self._fallback = fallback_policy or PurgeFallbackPolicy()
        self._connector: Connector = connector or asyncio.open_connection

    async def execute(
        self,
        endpoint: Endpoint,
        credentials: ControlKey,
        timeout: TimeoutSeconds,
        command: Command,
    ) -> Outcome:
        """Execute `command` against `endpoint` and never raise for I/O problems."""
        timeout = clamp_timeout(timeout)
        outcome, response = await self.attempt(endpoint, credentials, timeout, command)
        if self._fallback.applies(command.kind, response):
            return await on_purge_unimplemented(
                self, endpoint, credentials, timeout, command.expression
            )
        return outcome

    async def attempt(
        self,
        endpoint: Endpoint,
        credentials: ControlKey,
        timeout: TimeoutSeconds,
        command: Command,
    ) -> tuple[Outcome, ProtocolResponse | None]:
        """One connection, one command, no fallback.

        Returns the outcome together with the final response (None when no
        final response could be read).
        """
        try:
            reader, writer = await asyncio.wait_for(
                self._connector(endpoint.connect_host, endpoint.port),
                timeout=timeout,
            )
        except (TimeoutError, OSError, ValueError) as e:
            # ValueError covers hostnames the idna codec refuses (empty or long labels)
            detail = f"connect {endpoint} failed: {_reason(e)}"
            logger.warning("[{}] Connect failed: {}", endpoint, _reason(e))
            return Outcome(False, detail), None

        try:
            response = await self._converse(
                reader, writer, endpoint, credentials, timeout, command
            )
        except AuthenticationError:
            logger.warning("[{}] Authentication failed", endpoint)
            return Outcome(False, "Authentication failed"), None
        except ProtocolSessionError as e:
            logger.warning("[{}] {}", endpoint, e)
            return Outcome(False, str(e)), None
        finally:
            await self._close(writer, timeout)

        logger.debug(
            "[{}] CMD: {} :: STATUS {} :: {}",
            endpoint,
            command.to_line().decode().rstrip(),
            response.status,
            response.message,
        )
        return self._outcome_for(command, response), response

    async def _converse(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        endpoint: Endpoint,
        credentials: ControlKey,
        timeout: TimeoutSeconds,
        command: Command,
    ) -> ProtocolResponse:
        banner = await read_response(reader, timeout)
        if banner.status == ResponseStatus.AUTH_REQUIRED:
            await self._authenticate(reader, writer, banner, credentials, timeout)
            logger.debug("[{}] Authenticated", endpoint)

        await write_line(writer, command.to_line(), timeout)
        return await read_response(reader, timeout)

    async def _authenticate(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        banner: ProtocolResponse,
        credentials: ControlKey,
        timeout: TimeoutSeconds,
    ) -> None:
        try:
            await write_line(writer, auth_line(banner.challenge, credentials), timeout)
            reply = await read_response(reader, timeout)
        except ProtocolSessionError as e:
            raise AuthenticationError("Authentication failed") from e
        if not reply.ok:
            raise AuthenticationError(f"Authentication failed: status {reply.status}")

    @staticmethod
    def _outcome_for(command: Command, response: ProtocolResponse) -> Outcome:
        if response.ok:
            return Outcome(True, response.message.strip() or f"{command.kind.value} OK")
        return Outcome(False, f"Status {response.status}: {response.message}")

    @staticmethod
    async def _close(writer: asyncio.StreamWriter, timeout: TimeoutSeconds) -> None:
        writer.close()
        with contextlib.suppress(TimeoutError, OSError):
            await asyncio.wait_for(writer.wait_closed(), timeout=timeout)
