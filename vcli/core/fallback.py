"""
PURGE to BAN fallback.

Many Varnish builds answer the CLI `purge` command with status 101 (unknown
command). When that happens the same expression is re-issued once as `ban`
against the same endpoint. The downgrade only ever goes PURGE -> BAN and is
never chained.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from vcli.datastructures.type_aliases import BanExpression, ControlKey, TimeoutSeconds

from .endpoints import Endpoint
from .protocol import Command, CommandKind, ProtocolResponse, ResponseStatus

if TYPE_CHECKING:
    from .session import CLISession, Outcome


@dataclass(frozen=True, slots=True)
class PurgeFallbackPolicy:
    enabled: bool = True

    def applies(self, kind: CommandKind, response: ProtocolResponse | None) -> bool:
        if not self.enabled or response is None:
            return False
        return (
            kind is CommandKind.PURGE
            and response.status == ResponseStatus.UNKNOWN_COMMAND
        )


async def on_purge_unimplemented(
    session: "CLISession",
    endpoint: Endpoint,
    credentials: ControlKey,
    timeout: TimeoutSeconds,
    expression: BanExpression,
) -> "Outcome":
    """Re-run the expression as `ban` once and return that outcome unchanged."""
    logger.info("[{}] PURGE not implemented (101), retrying once as BAN", endpoint)
    outcome, _ = await session.attempt(
        endpoint, credentials, timeout, Command(CommandKind.BAN, expression)
    )
    return outcome
