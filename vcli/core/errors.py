"""
Exception taxonomy for the Varnish management client.

Session internals raise these; `CLISession.execute` turns every
`ProtocolSessionError` into a failing `Outcome` so that nothing escapes a
broadcast as an exception.
"""


class VCLIError(Exception):
    """Base exception for vcli errors."""

    pass


class ConfigurationError(VCLIError):
    """Raised when configuration cannot be used (detected before any network call)."""

    pass


class EndpointParseError(ConfigurationError):
    """Raised when a `host:port` token does not validate."""

    pass


class InvalidTargetError(VCLIError):
    """Raised when an invalidation target has no usable host."""

    pass


class ProtocolSessionError(VCLIError):
    """Base exception for failures inside one management session."""

    pass


class CLITimeoutError(ProtocolSessionError):
    """Raised when a read or write exceeds the session timeout."""

    pass


class CLIProtocolError(ProtocolSessionError):
    """Raised on malformed frames or an unexpected end of stream."""

    pass


class AuthenticationError(ProtocolSessionError):
    """Raised when the server rejects the `auth` response."""

    pass
