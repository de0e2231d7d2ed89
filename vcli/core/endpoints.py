"""Management endpoint parsing.

An endpoint token is `host:port` where host is a hostname, an IPv4 literal or
a bracketed IPv6 literal (`[::1]:6082`).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from vcli.datastructures.type_aliases import HostAddress, PortNumber

from .errors import EndpointParseError

ENDPOINT_PATTERN = re.compile(
    r"^(?P<host>[a-z0-9.\-]+|\[[0-9a-f:.]+\]):(?P<port>\d+)$", re.IGNORECASE
)
MAX_PORT = 65535


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A cache server's management port."""

    host: HostAddress
    port: PortNumber

    @property
    def connect_host(self) -> HostAddress:
        """Host as passed to the socket layer (IPv6 brackets removed)."""
        if self.host.startswith("[") and self.host.endswith("]"):
            return self.host[1:-1]
        return self.host

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_endpoint(token: str) -> Endpoint:
    """Parse and validate one `host:port` token."""
    candidate = token.strip()
    match = ENDPOINT_PATTERN.match(candidate)
    if match is None:
        raise EndpointParseError(
            f"Invalid endpoint {token!r} (host:port expected)"
        )

    port = int(match.group("port"))
    if not 0 < port <= MAX_PORT:
        raise EndpointParseError(f"Invalid port in endpoint {token!r}")

    return Endpoint(host=match.group("host"), port=port)


def is_valid_endpoint(token: str) -> bool:
    try:
        parse_endpoint(token)
    except EndpointParseError:
        return False
    return True


def parse_endpoint_list(raw: str | Iterable[str]) -> tuple[Endpoint, ...]:
    """Parse a whitespace separated endpoint list.

    Invalid tokens are dropped with a warning and duplicates are removed while
    keeping the configured order.
    """
    tokens = raw.split() if isinstance(raw, str) else [
        part for item in raw for part in item.split()
    ]

    endpoints: list[Endpoint] = []
    seen: set[Endpoint] = set()
    for token in tokens:
        try:
            endpoint = parse_endpoint(token)
        except EndpointParseError as e:
            logger.warning("Dropping endpoint token: {}", e)
            continue
        if endpoint in seen:
            continue
        seen.add(endpoint)
        endpoints.append(endpoint)

    return tuple(endpoints)
