"""
Custom exceptions for the time-series database client.

Provides structured error handling: authentication and request failures are
never retried, transport failures are retried by the connection manager.
"""

from __future__ import annotations

from typing import Optional


class TSDBError(Exception):
    """Base error for the client."""

    pass


class AuthenticationError(TSDBError):
    """Server rejected the configured credentials (HTTP 401)."""

    pass


class RequestError(TSDBError):
    """Any other non-success HTTP status. Carries the response body."""

    def __init__(self, body: str, status_code: Optional[int] = None):
        super().__init__(body)
        self.body = body
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"HTTP {self.status_code}: {self.body}"
        return self.body


class TransportError(TSDBError):
    """Timeouts, refused connections and other network-level failures."""

    def __init__(self, message: str, host: Optional[str] = None):
        super().__init__(message)
        self.host = host


class ClientStoppedError(TransportError):
    """The client is stopped; no host was contacted."""

    pass


class QueueFullError(TSDBError):
    """Write queue is at capacity and the overflow policy is 'error'."""

    pass


class QueueClosedError(TSDBError):
    """Write queue was closed; the entry was not accepted."""

    pass


def map_transport_error(e: Exception, host: Optional[str] = None) -> TransportError:
    import httpx

    if isinstance(e, httpx.TimeoutException):
        return TransportError(f"timeout contacting {host}: {e!r}", host=host)
    if isinstance(e, httpx.ConnectError):
        return TransportError(f"could not connect to {host}: {e!r}", host=host)
    return TransportError(f"transport failure on {host}: {e!r}", host=host)
