"""Attempt loop for Context7 requests: send, classify, back off, retry."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

import httpx

from .errors import Context7Error
from .rate_limit import RateLimitTracker
from .retry import (
    MAX_BACKOFF,
    RETRY_BACKOFF,
    AttemptOutcome,
    HttpFailure,
    Success,
    TransportFailure,
    classify,
    compute_backoff,
    error_for,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 4  # 1 initial + 3 retries

Sleep = Callable[[float], Awaitable[None]]


class RequestExecutor:
    """Runs one logical request through up to ``max_attempts`` transport calls.

    Every response, failed or not, updates the rate-limit tracker before its
    disposition is evaluated. Calls on a shared executor run independently;
    nothing serializes them.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        tracker: RateLimitTracker,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        backoff: float = RETRY_BACKOFF,
        max_backoff: float = MAX_BACKOFF,
        sleep: Sleep = asyncio.sleep,
        headers: Mapping[str, str] | None = None,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._client = client
        self._tracker = tracker
        self._max_attempts = max_attempts
        self._backoff = backoff
        self._max_backoff = max_backoff
        self._sleep = sleep
        self._headers = dict(headers or {})
        self.attempts = 0  # transport calls made, across all requests
        self.retries = 0

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def _attempt(
        self, method: str, path: str, params: Mapping[str, str] | None, attempt: int
    ) -> AttemptOutcome:
        try:
            resp = await self._client.request(
                method, path, params=params, headers=self._headers
            )
        except httpx.RequestError as exc:
            return TransportFailure(exc)
        if resp.is_success:
            return Success(
                body=resp.text,
                headers=resp.headers,
                status=resp.status_code,
                attempts=attempt + 1,
            )
        return HttpFailure(status=resp.status_code, headers=resp.headers, body=resp.text)

    async def execute(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        method: str = "GET",
    ) -> Success:
        """Send a request, retrying transient failures.

        Returns:
            The first successful outcome.

        Raises:
            Context7Error: The classified failure of the last attempt, either
                because it was fatal or because attempts ran out.
        """
        error: Context7Error | None = None
        for attempt in range(self._max_attempts):
            logger.debug(
                "%s %s params=%s (attempt %d/%d)",
                method, path, params, attempt + 1, self._max_attempts,
            )
            outcome = await self._attempt(method, path, params, attempt)
            self.attempts += 1

            if not isinstance(outcome, TransportFailure):
                self._tracker.update(outcome.headers)

            if isinstance(outcome, Success):
                return outcome

            disposition = classify(outcome)
            error = error_for(outcome, attempts=attempt + 1)
            if not disposition.retryable:
                raise error
            if attempt == self._max_attempts - 1:
                break

            delay = compute_backoff(
                attempt,
                disposition.wait_hint,
                base=self._backoff,
                ceiling=self._max_backoff,
            )
            self.retries += 1
            logger.warning(
                "%s: %s, retry %d/%d in %.2fs",
                path, error, attempt + 1, self._max_attempts - 1, delay,
            )
            await self._sleep(delay)

        raise error
