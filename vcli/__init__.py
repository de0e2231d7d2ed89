"""
vcli - Varnish management-port invalidation client

Sends `ban`/`purge` commands to one or more Varnish management endpoints
(`varnishd -T host:port`), answering the control-key authentication challenge
when the server asks for one.

## Architecture

- **core**: endpoints, expression builder, wire protocol, session, fallback,
  broadcast coordinator, diagnostics
- **client**: host-facing `VarnishInvalidator`
- **cli**: `vcli` command line

## Quick Start

```python
from vcli import InvalidationSettings, VarnishInvalidator

settings = InvalidationSettings.from_raw(
    servers="127.0.0.1:6082 10.0.0.5:6082",
    control_key="secret",
    method="PURGE",
)
result = await VarnishInvalidator(settings).flush_url("https://example.com/foo?q=1")
print(result.overall_ok, result.last_detail)
```
"""

from .client import ConnectionTestResult, HTTPLikeResponse, VarnishInvalidator
from .config import VCLIEnvSettings
from .core import (
    ALL,
    BroadcastResult,
    CLISession,
    Command,
    CommandKind,
    Endpoint,
    InvalidationSettings,
    Outcome,
    broadcast,
    build_expression,
    parse_endpoint,
    parse_endpoint_list,
)

__version__ = "1.4.0"
__license__ = "MIT"

__all__ = [
    "ALL",
    "BroadcastResult",
    "CLISession",
    "Command",
    "CommandKind",
    "ConnectionTestResult",
    "Endpoint",
    "HTTPLikeResponse",
    "InvalidationSettings",
    "Outcome",
    "VCLIEnvSettings",
    "VarnishInvalidator",
    "broadcast",
    "build_expression",
    "parse_endpoint",
    "parse_endpoint_list",
]
