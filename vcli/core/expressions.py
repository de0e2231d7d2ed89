"""
Invalidation expression builder.

Turns an invalidation target (host plus path, or the whole host) into the
expression language accepted by `ban`/`purge`:

    req.http.host == "example.com" && req.url ~ "^/foo?q=1$"
    req.http.host == "example.com" && req.url ~ ".*"
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import urlsplit

from vcli.datastructures.type_aliases import BanExpression, HostAddress, UrlString

from .errors import InvalidTargetError


class MatchAll(Enum):
    """Sentinel path meaning every URL on the host."""

    ALL = "ALL"


ALL = MatchAll.ALL

MATCH_ALL_PATTERN = ".*"


def escape_quotes(value: str) -> str:
    """Escape double quotes for embedding inside an expression string literal."""
    return value.replace('"', '\\"')


def build_expression(host: HostAddress, path: str | MatchAll) -> BanExpression:
    if path is ALL:
        pattern = MATCH_ALL_PATTERN
    else:
        pattern = f"^{escape_quotes(path)}$"
    return f'req.http.host == "{host}" && req.url ~ "{pattern}"'


def _host_as_written(netloc: str) -> HostAddress:
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        return hostport[: hostport.index("]") + 1]
    return hostport.partition(":")[0]


def split_target(url: UrlString) -> tuple[HostAddress, str]:
    """Return `(host, path_with_query)` for an absolute URL.

    The host is returned as written (case and IPv6 brackets kept, userinfo and
    port dropped). The path defaults to `/` and the query string, when
    present, is kept verbatim after `?`.
    """
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError as e:
        raise InvalidTargetError(f"Malformed URL {url!r}: {e}") from e
    if not hostname:
        raise InvalidTargetError(f"URL has no host: {url!r}")

    host = _host_as_written(parts.netloc)

    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return host, path


def expression_for_url(url: UrlString) -> BanExpression:
    host, path = split_target(url)
    return build_expression(host, path)


def expression_for_host(host: HostAddress) -> BanExpression:
    if not host:
        raise InvalidTargetError("Cannot build a whole-host expression without a host")
    return build_expression(host, ALL)
