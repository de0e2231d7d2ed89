"""
Semantic type aliases for vcli.

These aliases keep signatures self-documenting: a `ControlKey` is not just any
string, and a `TimeoutSeconds` is always a whole number of seconds.
"""

from typing import TypeAlias

# Network types
HostAddress: TypeAlias = str
PortNumber: TypeAlias = int
UrlString: TypeAlias = str

# Management protocol types
ControlKey: TypeAlias = str
BanExpression: TypeAlias = str
StatusCode: TypeAlias = int
TimeoutSeconds: TypeAlias = int

# Diagnostics
DiagnosticLine: TypeAlias = str
