"""Resilient async client for the Context7 documentation/search API.

Retries transport failures, 429s and 5xx responses with exponential backoff,
and tracks the service's rate-limit quota from response headers.
"""

from .cli import main
from .client import Context7Client, get_client
from .models import CodeExample, CodeExamplesPage, FailureKind, LibraryRecord, Page, Unavailable
from .options import CodeExampleOptions, DocumentationOptions, SearchOptions
from .rate_limit import RateLimitSnapshot, RateLimitTracker

__all__ = [
    "main",
    "Context7Client",
    "get_client",
    "CodeExample",
    "CodeExamplesPage",
    "FailureKind",
    "LibraryRecord",
    "Page",
    "Unavailable",
    "CodeExampleOptions",
    "DocumentationOptions",
    "SearchOptions",
    "RateLimitSnapshot",
    "RateLimitTracker",
]

if __name__ == "__main__":
    main()
