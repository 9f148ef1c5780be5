"""Attempt outcomes, failure classification and backoff for Context7 requests."""

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from .errors import ClientError, Context7Error, RateLimited, ServerError, TransportError

# Backoff: 0.5s, 1s, 2s, ... capped at MAX_BACKOFF unless the server says otherwise
RETRY_BACKOFF = 0.5
BACKOFF_FACTOR = 2
MAX_BACKOFF = 30.0

# Transient failures worth another attempt. Other httpx.RequestErrors
# (bad scheme, proxy config, local protocol misuse) will not fix themselves.
RETRYABLE_TRANSPORT_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(frozen=True)
class Success:
    body: str
    headers: Mapping[str, str]
    status: int
    attempts: int = 1


@dataclass(frozen=True)
class TransportFailure:
    cause: Exception


@dataclass(frozen=True)
class HttpFailure:
    status: int
    headers: Mapping[str, str]
    body: str = ""


AttemptOutcome = Success | TransportFailure | HttpFailure


@dataclass(frozen=True)
class Disposition:
    """Whether a failed attempt should be retried, and the server's wait hint if any."""

    retryable: bool
    wait_hint: float | None = None


FATAL = Disposition(retryable=False)


def parse_retry_after(headers: Mapping[str, str]) -> float | None:
    val = headers.get("retry-after")
    if val is None:
        return None
    try:
        seconds = float(val)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return max(0.0, seconds)


def classify(outcome: TransportFailure | HttpFailure) -> Disposition:
    """Decide whether a failed attempt is worth retrying.

    Successful outcomes are returned to the caller directly and must not be
    passed here.
    """
    if isinstance(outcome, Success):
        raise TypeError("successful outcomes are not classified")

    if isinstance(outcome, TransportFailure):
        if isinstance(outcome.cause, RETRYABLE_TRANSPORT_ERRORS):
            return Disposition(retryable=True)
        return FATAL

    if outcome.status == 429:
        return Disposition(retryable=True, wait_hint=parse_retry_after(outcome.headers))

    if 500 <= outcome.status <= 599:
        return Disposition(retryable=True)

    # 4xx, and anything else non-2xx that survived redirect handling
    return FATAL


def _error_message(body: str) -> str | None:
    """Pull ``message`` and ``code`` out of a JSON error body, if there is one."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    message = data.get("message") if isinstance(data.get("message"), str) else None
    code = data.get("code") if isinstance(data.get("code"), str) else None
    if code is None:
        return message
    return f"{message or 'API request failed'} [{code}]"


def error_for(outcome: TransportFailure | HttpFailure, attempts: int = 1) -> Context7Error:
    """The taxonomy error describing a failed attempt."""
    if isinstance(outcome, TransportFailure):
        cause = outcome.cause
        return TransportError(f"{type(cause).__name__}: {cause}", attempts=attempts)

    status = outcome.status
    if status == 429:
        return RateLimited(
            "Rate limited due to too many requests.",
            status=status,
            retry_after=parse_retry_after(outcome.headers),
            attempts=attempts,
        )
    message = _error_message(outcome.body) or "API request failed"
    if 500 <= status <= 599:
        return ServerError(message, status=status, attempts=attempts)
    return ClientError(message, status=status, attempts=attempts)


def compute_backoff(
    attempt: int,
    wait_hint: float | None = None,
    *,
    base: float = RETRY_BACKOFF,
    ceiling: float = MAX_BACKOFF,
) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (0-indexed).

    A server-supplied hint wins over the computed exponential delay.
    """
    if wait_hint is not None:
        return wait_hint
    return min(ceiling, base * BACKOFF_FACTOR**attempt)
