"""Failure taxonomy for a single logical request.

These exceptions never leave the package: the executor raises the last one
once its attempt loop ends, and the client converts it into ``Unavailable``.
"""

from .models import FailureKind


class Context7Error(Exception):
    """Base class for classified request failures."""

    kind = FailureKind.TRANSPORT_EXHAUSTED

    def __init__(self, message: str, *, status: int | None = None, attempts: int = 1):
        self.status = status
        self.attempts = attempts
        status_part = f" (Status: {status})" if status is not None else ""
        super().__init__(f"{message}{status_part}")


class TransportError(Context7Error):
    """No HTTP response was obtained (DNS, connection reset, timeout)."""

    kind = FailureKind.TRANSPORT_EXHAUSTED


class RateLimited(Context7Error):
    """HTTP 429."""

    kind = FailureKind.RATE_LIMITED

    def __init__(self, message: str, *, retry_after: float | None = None, **kwargs):
        self.retry_after = retry_after
        super().__init__(message, **kwargs)


class ServerError(Context7Error):
    """HTTP 5xx."""

    kind = FailureKind.SERVER_EXHAUSTED


class ClientError(Context7Error):
    """HTTP 4xx other than 429. Never retried."""

    kind = FailureKind.CLIENT_ERROR


class InvalidResponse(Context7Error):
    """A 2xx response whose body does not have the expected shape."""

    kind = FailureKind.INVALID_RESPONSE
