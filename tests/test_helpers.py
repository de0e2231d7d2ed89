"""
Test helper utilities for vcli testing.

`FakeManagementServer` is a scripted Varnish management port built on
`asyncio.start_server`. It speaks the real framing (13-byte header, body,
terminator), optionally issues an authentication challenge, and records every
line it receives so tests can assert on exactly what the client sent.
"""

import asyncio
import hashlib
from dataclasses import dataclass, field

from vcli.core.endpoints import Endpoint

DEFAULT_BANNER = (
    b"-----------------------------\n"
    b"Varnish Cache CLI 1.0\n"
    b"-----------------------------\n"
    b"\n"
    b"Type 'help' for command list.\n"
    b"Type 'quit' to close CLI session."
)


def frame(status: int, body: bytes | str = b"") -> bytes:
    """Encode one response the way varnishd does: `%-3d %-8d\\n` + body + `\\n`."""
    if isinstance(body, str):
        body = body.encode()
    return f"{status:03d} {len(body):<8d}\n".encode() + body + b"\n"


def expected_auth_line(challenge: str, secret: str) -> str:
    digest = hashlib.sha256(
        f"{challenge}\n{secret}\n{challenge}\n".encode()
    ).hexdigest()
    return f"auth {digest}"


@dataclass
class FakeManagementServer:
    """Scripted management port.

    `replies` maps a command verb (`ban`, `purge`) to `(status, body)`.
    """

    challenge: str | None = None
    secret: str = ""
    replies: dict[str, tuple[int, str]] = field(default_factory=dict)
    banner: bytes | None = None
    banner_delay: float = 0.0
    silent: bool = False
    close_on_connect: bool = False

    received: list[str] = field(default_factory=list)
    connections: int = 0
    port: int = 0
    _server: asyncio.Server | None = field(default=None, repr=False)

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint("127.0.0.1", self.port)

    async def start(self) -> "FakeManagementServer":
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    def commands(self) -> list[str]:
        return [line for line in self.received if not line.startswith("auth ")]

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.connections += 1
        try:
            if self.close_on_connect:
                return
            if self.silent:
                await reader.read()
                return
            if self.banner_delay:
                await asyncio.sleep(self.banner_delay)
            writer.write(self._banner_frame())
            await writer.drain()

            while True:
                raw = await reader.readline()
                if not raw:
                    break
                line = raw.decode().rstrip("\n")
                self.received.append(line)

                if line.startswith("auth "):
                    if self.challenge is not None and line == expected_auth_line(
                        self.challenge, self.secret
                    ):
                        writer.write(frame(200, ""))
                        await writer.drain()
                        continue
                    writer.write(frame(107, "Authentication required."))
                    await writer.drain()
                    break

                verb = line.split(" ", 1)[0]
                status, body = self.replies.get(verb, (200, ""))
                writer.write(frame(status, body))
                await writer.drain()
        except ConnectionError:
            pass
        finally:
            writer.close()

    def _banner_frame(self) -> bytes:
        if self.banner is not None:
            return self.banner
        if self.challenge is not None:
            return frame(107, f"{self.challenge}\n\nAuthentication required.")
        return frame(200, DEFAULT_BANNER)


