from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from vcli.datastructures.type_aliases import ControlKey, TimeoutSeconds

from .endpoints import Endpoint, parse_endpoint_list
from .protocol import CommandKind

DEFAULT_SERVERS = "127.0.0.1:6082"
DEFAULT_TIMEOUT: TimeoutSeconds = 2
MIN_TIMEOUT: TimeoutSeconds = 1


def clamp_timeout(value: object, default: TimeoutSeconds = DEFAULT_TIMEOUT) -> TimeoutSeconds:
    """Coerce a configured timeout to whole seconds, never below one second."""
    try:
        seconds = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        seconds = default
    return max(MIN_TIMEOUT, seconds)


@dataclass(frozen=True, slots=True)
class InvalidationSettings:
    """Configuration injected into every broadcast.

    Instances are immutable; callers build a fresh one per invalidation so
    that edits to the backing configuration are always picked up.
    """

    enabled: bool = True
    endpoints: tuple[Endpoint, ...] = field(
        default_factory=lambda: parse_endpoint_list(DEFAULT_SERVERS)
    )
    control_key: ControlKey = ""
    timeout: TimeoutSeconds = DEFAULT_TIMEOUT
    command_kind: CommandKind = CommandKind.BAN
    debug: bool = False
    log_file: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timeout", clamp_timeout(self.timeout))

    @classmethod
    def from_raw(
        cls,
        *,
        enabled: bool = True,
        servers: str | Iterable[str] = DEFAULT_SERVERS,
        control_key: str | None = "",
        timeout: object = DEFAULT_TIMEOUT,
        method: str | None = CommandKind.BAN.value,
        debug: bool = False,
        log_file: str | Path | None = None,
    ) -> "InvalidationSettings":
        """Normalize loosely typed values (form fields, env vars, CLI flags)."""
        return cls(
            enabled=bool(enabled),
            endpoints=parse_endpoint_list(servers),
            control_key=control_key or "",
            timeout=clamp_timeout(timeout),
            command_kind=CommandKind.from_name(method),
            debug=bool(debug),
            log_file=Path(log_file) if log_file else None,
        )

    @property
    def servers(self) -> str:
        """Endpoints rendered back into the space separated form."""
        return " ".join(str(endpoint) for endpoint in self.endpoints)
