"""Shared datastructures and type aliases for vcli."""

from .type_aliases import (
    BanExpression,
    ControlKey,
    DiagnosticLine,
    HostAddress,
    PortNumber,
    StatusCode,
    TimeoutSeconds,
    UrlString,
)

__all__ = [
    "BanExpression",
    "ControlKey",
    "DiagnosticLine",
    "HostAddress",
    "PortNumber",
    "StatusCode",
    "TimeoutSeconds",
    "UrlString",
]
