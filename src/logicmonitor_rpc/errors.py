"""
Exceptions
==========
Errors raised by the LogicMonitor RPC client. None are retried internally.
"""

from typing import Optional


class LogicMonitorError(Exception):
    """Base exception for all client errors."""


class ValidationError(LogicMonitorError, ValueError):
    """Missing, conflicting or malformed arguments, detected before any request."""


class UnsupportedEntityError(ValidationError):
    """The RPC API has no way to address this entity kind/identifier combination."""


class UnsupportedRecurrenceError(ValidationError):
    """Only one-time SDT windows are supported."""


class TransportError(LogicMonitorError):
    """Network failure, non-2xx HTTP status or an undecodable response body."""


class ApiError(LogicMonitorError):
    """The response envelope was decoded but reported a non-200 status."""

    def __init__(self, status: int, errmsg: Optional[str] = None):
        super().__init__(f"[{status}] {errmsg or 'no error message'}")
        self.status = status
        self.errmsg = errmsg


class SchemaMismatchError(LogicMonitorError):
    """A time-series payload does not match its declared datapoints."""

    def __init__(
        self,
        message: str,
        instance: Optional[str] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        super().__init__(message)
        self.instance = instance
        self.expected = expected
        self.actual = actual


class NotFoundError(LogicMonitorError):
    """A lookup by name or email matched nothing."""
