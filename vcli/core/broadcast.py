"""
Broadcast coordinator.

Runs one session per configured endpoint for the same command and aggregates
the outcomes. Every endpoint is always attempted; one endpoint failing never
skips the rest.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from vcli.datastructures.type_aliases import ControlKey, DiagnosticLine, TimeoutSeconds

from .diagnostics import DiagnosticSink, emit_safely
from .endpoints import Endpoint
from .protocol import Command
from .session import CLISession, Outcome


@dataclass(frozen=True, slots=True)
class BroadcastResult:
    """Aggregate of one broadcast.

    `overall_ok` is only True when at least one endpoint was attempted and
    every attempted endpoint succeeded. `last_detail` is the detail of the
    last endpoint in configured order.
    """

    overall_ok: bool
    last_detail: str
    per_endpoint: tuple[tuple[Endpoint, Outcome], ...] = field(default_factory=tuple)

    @property
    def attempted(self) -> bool:
        return bool(self.per_endpoint)

    @property
    def failures(self) -> tuple[tuple[Endpoint, Outcome], ...]:
        return tuple(pair for pair in self.per_endpoint if not pair[1].ok)


def diagnostic_line(
    command: Command, endpoint: Endpoint, outcome: Outcome, label: str = ""
) -> DiagnosticLine:
    line = f"CLI {command.kind.value} @ {endpoint}"
    if label:
        line += f" {label}"
    line += f" :: {'OK' if outcome.ok else 'FAIL'}"
    if outcome.detail:
        line += f" :: {outcome.detail}"
    return line


async def broadcast(
    endpoints: Sequence[Endpoint],
    credentials: ControlKey,
    timeout: TimeoutSeconds,
    command: Command,
    *,
    concurrent: bool = False,
    session: CLISession | None = None,
    sink: DiagnosticSink | None = None,
    label: str = "",
) -> BroadcastResult:
    """Send `command` to every endpoint and aggregate the outcomes.

    With `concurrent=True` the sessions run together via `asyncio.gather`;
    results keep submission order either way.
    """
    if not endpoints:
        logger.info("No management endpoints configured; nothing to do")
        return BroadcastResult(overall_ok=False, last_detail="")

    session = session or CLISession()

    if concurrent:
        outcomes = list(
            await asyncio.gather(
                *(
                    session.execute(endpoint, credentials, timeout, command)
                    for endpoint in endpoints
                )
            )
        )
    else:
        outcomes = []
        for endpoint in endpoints:
            outcomes.append(
                await session.execute(endpoint, credentials, timeout, command)
            )

    per_endpoint = tuple(zip(endpoints, outcomes, strict=True))
    for endpoint, outcome in per_endpoint:
        emit_safely(sink, diagnostic_line(command, endpoint, outcome, label))

    overall_ok = all(outcome.ok for outcome in outcomes)
    logger.info(
        "CLI {} broadcast to {} endpoint(s): {}",
        command.kind.value,
        len(per_endpoint),
        "OK" if overall_ok else "FAILED",
    )
    return BroadcastResult(
        overall_ok=overall_ok,
        last_detail=outcomes[-1].detail,
        per_endpoint=per_endpoint,
    )
