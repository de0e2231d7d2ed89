"""Core Varnish management protocol client."""

from .broadcast import BroadcastResult, broadcast, diagnostic_line
from .config import InvalidationSettings, clamp_timeout
from .diagnostics import (
    DiagnosticSink,
    LoguruDiagnosticSink,
    NullDiagnosticSink,
    RecordingDiagnosticSink,
    diagnostic_sink,
    emit_safely,
)
from .endpoints import Endpoint, is_valid_endpoint, parse_endpoint, parse_endpoint_list
from .errors import (
    AuthenticationError,
    CLIProtocolError,
    CLITimeoutError,
    ConfigurationError,
    EndpointParseError,
    InvalidTargetError,
    ProtocolSessionError,
    VCLIError,
)
from .expressions import (
    ALL,
    MatchAll,
    build_expression,
    expression_for_host,
    expression_for_url,
    split_target,
)
from .fallback import PurgeFallbackPolicy, on_purge_unimplemented
from .protocol import (
    Command,
    CommandKind,
    ProtocolResponse,
    ResponseStatus,
    auth_digest,
    read_response,
)
from .session import CLISession, Outcome

__all__ = [
    "ALL",
    "AuthenticationError",
    "BroadcastResult",
    "CLIProtocolError",
    "CLISession",
    "CLITimeoutError",
    "Command",
    "CommandKind",
    "ConfigurationError",
    "DiagnosticSink",
    "Endpoint",
    "EndpointParseError",
    "InvalidTargetError",
    "InvalidationSettings",
    "LoguruDiagnosticSink",
    "MatchAll",
    "NullDiagnosticSink",
    "Outcome",
    "ProtocolResponse",
    "ProtocolSessionError",
    "PurgeFallbackPolicy",
    "RecordingDiagnosticSink",
    "ResponseStatus",
    "VCLIError",
    "auth_digest",
    "broadcast",
    "build_expression",
    "clamp_timeout",
    "diagnostic_line",
    "diagnostic_sink",
    "emit_safely",
    "expression_for_host",
    "expression_for_url",
    "is_valid_endpoint",
    "on_purge_unimplemented",
    "parse_endpoint",
    "parse_endpoint_list",
    "read_response",
    "split_target",
]
