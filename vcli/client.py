"""
Host-facing invalidation API.

`VarnishInvalidator` is what an application hooks into its cache events:
flushing a single URL, flushing a whole host, running a connection test
against the first configured server, and answering an outgoing HTTP `PURGE`
request with a CLI broadcast instead.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from vcli.core.broadcast import BroadcastResult, broadcast
from vcli.core.config import InvalidationSettings
from vcli.core.diagnostics import DiagnosticSink, diagnostic_sink, emit_safely
from vcli.core.errors import InvalidTargetError
from vcli.core.expressions import (
    ALL,
    build_expression,
    expression_for_host,
    split_target,
)
from vcli.core.protocol import Command
from vcli.core.session import CLISession
from vcli.datastructures.type_aliases import BanExpression, UrlString


@dataclass(frozen=True, slots=True)
class ConnectionTestResult:
    success: bool
    message: str
    detail: str = ""

    def to_dict(self) -> dict[str, object]:
        return {"success": self.success, "message": self.message, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class HTTPLikeResponse:
    """Stand-in for the HTTP response a PURGE request would have produced."""

    code: int
    message: str
    body: str


class VarnishInvalidator:
    def __init__(
        self,
        settings: InvalidationSettings,
        *,
        session: CLISession | None = None,
        sink: DiagnosticSink | None = None,
        concurrent: bool = False,
    ) -> None:
        self.settings = settings
        self._session = session or CLISession()
        self._sink = sink
        self._concurrent = concurrent

    @property
    def active(self) -> bool:
        return self.settings.enabled and bool(self.settings.endpoints)

    async def flush_url(self, url: UrlString) -> BroadcastResult | None:
        """Invalidate one URL on every endpoint. None when there is nothing to do."""
        if not self.active:
            logger.debug("CLI invalidation inactive; skipping {}", url)
            return None
        try:
            host, path = split_target(url)
        except InvalidTargetError as e:
            logger.warning("Skipping flush: {}", e)
            return None
        return await self._send(build_expression(host, path), label=path)

    async def flush_all(self, home_url: UrlString) -> BroadcastResult | None:
        """Invalidate every URL on the host of `home_url`."""
        if not self.active:
            return None
        try:
            host, _ = split_target(home_url)
            expression = expression_for_host(host)
        except InvalidTargetError as e:
            logger.warning("Skipping flush all: {}", e)
            return None
        return await self._send(expression, label=ALL.value)

    async def test_connection(self, home_url: UrlString) -> ConnectionTestResult:
        """Run a small invalidation of `/` on the first configured endpoint."""
        settings = self.settings
        if not settings.endpoints:
            return ConnectionTestResult(False, "No CLI servers configured.")

        endpoint = settings.endpoints[0]
        kind = settings.command_kind.value
        try:
            host, _ = split_target(home_url)
        except InvalidTargetError as e:
            return ConnectionTestResult(False, f"CLI {kind} FAILED on {endpoint}", str(e))

        command = Command(settings.command_kind, build_expression(host, "/"))
        with diagnostic_sink(settings.debug, settings.log_file) as debug_sink:
            result = await broadcast(
                [endpoint],
                settings.control_key,
                settings.timeout,
                command,
                session=self._session,
                sink=self._sink or debug_sink,
                label="TEST",
            )

        if result.overall_ok:
            return ConnectionTestResult(True, f"CLI {kind} OK on {endpoint}", result.last_detail)
        return ConnectionTestResult(False, f"CLI {kind} FAILED on {endpoint}", result.last_detail)

    async def intercept_purge(self, url: UrlString) -> HTTPLikeResponse | None:
        """Answer an HTTP `PURGE <url>` with a CLI broadcast.

        Returns None when the request should go out over HTTP untouched
        (helper inactive or no usable endpoints).
        """
        if not self.active:
            return None

        result = await self.flush_url(url)
        if result is None:
            return None

        kind = self.settings.command_kind.value
        if result.overall_ok:
            return HTTPLikeResponse(200, "OK", f"CLI {kind} OK")
        return HTTPLikeResponse(
            503, "Service Unavailable", f"CLI {kind} failed: {result.last_detail}"
        )

    async def _send(self, expression: BanExpression, *, label: str) -> BroadcastResult:
        settings = self.settings
        command = Command(settings.command_kind, expression)
        with diagnostic_sink(settings.debug, settings.log_file) as debug_sink:
            sink = self._sink or debug_sink
            emit_safely(sink, f"EVENT: CLI {command.kind.value} {label}")
            return await broadcast(
                settings.endpoints,
                settings.control_key,
                settings.timeout,
                command,
                concurrent=self._concurrent,
                session=self._session,
                sink=sink,
                label=label,
            )
