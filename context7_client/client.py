"""Async Context7 API client with retries and rate-limit tracking."""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .errors import Context7Error, InvalidResponse
from .executor import RequestExecutor, Sleep
from .models import (
    CodeExamplesPage,
    CodeExamplesResponse,
    FailureKind,
    LibraryRecord,
    Page,
    SearchResponse,
    Unavailable,
)
from .options import (
    CODE_EXAMPLE_PARAMS,
    DOCUMENTATION_PARAMS,
    SEARCH_PARAMS,
    CodeExampleOptions,
    DocumentationOptions,
    SearchOptions,
    build_params,
    path_segment,
)
from .rate_limit import RateLimitSnapshot, RateLimitTracker
from .retry import Success
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _decode(model: type[M], outcome: Success) -> M:
    try:
        return model.model_validate_json(outcome.body)
    except ValidationError as e:
        raise InvalidResponse(
            f"Failed to parse API response: {e.error_count()} validation error(s)",
            status=outcome.status,
            attempts=outcome.attempts,
        ) from e


class Context7Client:
    """Client for the Context7 documentation/search API.

    Operations never raise for service failures: they return the payload or an
    ``Unavailable`` naming why the call failed. Transport errors, 429s and 5xx
    responses are retried with exponential backoff; other 4xx responses are not.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        httpx_client: httpx.AsyncClient | None = None,
        tracker: RateLimitTracker | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.time,
        max_attempts: int | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Defaults to ``get_settings()``.
            httpx_client: Optional existing client; it must carry the API base
                URL and is not closed by this client.
            tracker: Share one tracker between clients of the same service.
            sleep: Awaited between retries.
            clock: Wall clock used to compute time until quota reset.
            max_attempts: Overrides ``settings.max_attempts``.
        """
        settings = settings or get_settings()
        if httpx_client:
            self._client = httpx_client
            self._managed_client = False
        else:
            self._client = httpx.AsyncClient(
                base_url=settings.base_url,
                timeout=settings.timeout,
                follow_redirects=True,
            )
            self._managed_client = True

        self.rate_limits = tracker or RateLimitTracker(clock=clock)
        self._executor = RequestExecutor(
            self._client,
            self.rate_limits,
            max_attempts=settings.max_attempts if max_attempts is None else max_attempts,
            backoff=settings.retry_backoff,
            max_backoff=settings.max_backoff,
            sleep=sleep,
            headers={"Accept": "application/json", "User-Agent": settings.user_agent},
        )

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def _unavailable(self, action: str, error: Context7Error) -> Unavailable:
        logger.error("Context7 API error %s: %s", action, error)
        return Unavailable.from_error(error)

    async def search_libraries(
        self, query: str, options: SearchOptions | None = None
    ) -> Page[LibraryRecord] | Unavailable:
        """Search for libraries matching ``query`` (callers ensure it is non-empty)."""
        params = {"query": query, **build_params(options, SEARCH_PARAMS)}
        try:
            outcome = await self._executor.execute("/search", params)
            return _decode(SearchResponse, outcome).to_page()
        except Context7Error as e:
            return self._unavailable("searching libraries", e)

    async def get_library_documentation(
        self, library_id: str, options: DocumentationOptions | None = None
    ) -> str | Unavailable:
        """Fetch the documentation text (markdown by default) for a library."""
        params = build_params(options, DOCUMENTATION_PARAMS)
        try:
            outcome = await self._executor.execute(f"/docs/{path_segment(library_id)}", params)
        except Context7Error as e:
            return self._unavailable(f"fetching documentation for {library_id!r}", e)
        return outcome.body

    async def find_code_examples(
        self,
        library_id: str,
        symbol_name: str,
        options: CodeExampleOptions | None = None,
    ) -> CodeExamplesPage | Unavailable:
        """Find code examples that use ``symbol_name`` from a library."""
        path = f"/examples/{path_segment(library_id)}/{path_segment(symbol_name)}"
        params = build_params(options, CODE_EXAMPLE_PARAMS)
        try:
            outcome = await self._executor.execute(path, params)
            return _decode(CodeExamplesResponse, outcome).to_page(library_id, symbol_name)
        except Context7Error as e:
            return self._unavailable(f"finding code examples for {library_id}::{symbol_name}", e)

    async def get_rate_limit_snapshot(self) -> RateLimitSnapshot | Unavailable:
        """Make one lightweight request and return the quota its response reports."""
        try:
            outcome = await self._executor.execute("/rate_limit")
        except Context7Error as e:
            return self._unavailable("fetching rate limit info", e)
        snapshot = self.rate_limits.snapshot_from(outcome.headers)
        if snapshot is None:
            logger.error("Context7 rate limit response carried no rate-limit headers")
            return Unavailable(
                reason=FailureKind.INVALID_RESPONSE,
                detail="response carried no rate-limit headers",
                status=outcome.status,
                attempts=outcome.attempts,
            )
        return snapshot

    def get_last_known_rate_limit_snapshot(self) -> RateLimitSnapshot | None:
        """Quota state from the most recent response. Never performs I/O."""
        return self.rate_limits.snapshot()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        """Close the internal httpx client if this instance created it."""
        if self._managed_client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "Context7Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


# Process-wide quota trackers and clients, keyed by base URL
_trackers: dict[str, RateLimitTracker] = {}
_clients: dict[str, Context7Client] = {}


def get_client(base_url: str | None = None) -> Context7Client:
    """Get or create the shared client for ``base_url`` (default from settings).

    The shared client's connection pool belongs to the event loop that first
    uses it. Close it with ``aclose()`` before that loop ends; the next call
    builds a fresh client that keeps the same rate-limit tracker.
    """
    settings = get_settings()
    key = base_url or settings.base_url
    cached = _clients.get(key)
    if cached is None or cached.is_closed:
        tracker = _trackers.setdefault(key, RateLimitTracker())
        _clients[key] = Context7Client(
            settings=settings.model_copy(update={"base_url": key}), tracker=tracker
        )
    return _clients[key]
