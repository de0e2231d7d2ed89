"""Pytest configuration and fixtures for vcli testing."""

import socket
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from typing import TypeAlias

import pytest
import pytest_asyncio
from loguru import logger

from .test_helpers import FakeManagementServer

ServerFactory: TypeAlias = Callable[..., Awaitable[FakeManagementServer]]


@pytest_asyncio.fixture
async def fake_server_factory() -> AsyncGenerator[ServerFactory, None]:
    """Start fake management servers on free ports; all are stopped afterwards.

    Example Usage:
        async def test_ban(fake_server_factory):
            server = await fake_server_factory(replies={"ban": (200, "")})
            outcome = await CLISession().execute(server.endpoint, "", 1, command)
    """
    servers: list[FakeManagementServer] = []

    async def _create(**kwargs: object) -> FakeManagementServer:
        server = FakeManagementServer(**kwargs)  # type: ignore[arg-type]
        servers.append(server)
        return await server.start()

    yield _create

    for server in servers:
        await server.stop()


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Put loguru back on the real stderr after tests that reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr)
