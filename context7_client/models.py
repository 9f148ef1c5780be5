"""Value objects returned by the Context7 client."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FailureKind(str, Enum):
    """Why an operation ended without a payload."""

    CLIENT_ERROR = "client_error"
    RATE_LIMITED = "rate_limited"
    SERVER_EXHAUSTED = "server_exhausted"
    TRANSPORT_EXHAUSTED = "transport_exhausted"
    INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True)
class Unavailable:
    """Terminal failure of a client operation.

    Falsy, so ``if not result`` still reads as "nothing came back", while
    ``reason`` tells callers whether retrying later makes sense.
    """

    reason: FailureKind
    detail: str = ""
    status: int | None = None
    attempts: int = 0

    def __bool__(self) -> bool:
        return False

    @classmethod
    def from_error(cls, error) -> "Unavailable":
        return cls(
            reason=error.kind,
            detail=str(error),
            status=error.status,
            attempts=error.attempts,
        )


class LibraryRecord(BaseModel):
    """One library from a search."""

    model_config = _WIRE_CONFIG

    id: str
    name: str
    description: str = ""
    version: str | None = None
    # Older payloads call this "stars"
    popularity_score: float | None = Field(
        default=None,
        validation_alias=AliasChoices("popularityScore", "stars", "popularity_score"),
        serialization_alias="popularityScore",
    )
    language: str | None = None
    tags: frozenset[str] = frozenset()
    url: str | None = None
    last_updated: str | None = None


class CodeExample(BaseModel):
    model_config = _WIRE_CONFIG

    id: str
    title: str
    code: str
    language: str
    description: str | None = None
    source: str | None = None
    url: str | None = None
    votes: int | None = None


class Page(BaseModel, Generic[T]):
    """One page of results. ``has_more`` is derived, never trusted from the wire."""

    model_config = _WIRE_CONFIG

    items: list[T]
    total_results: int
    current_page: int
    total_pages: int
    per_page: int

    @computed_field(alias="hasMore")
    @property
    def has_more(self) -> bool:
        return self.current_page < self.total_pages


class CodeExamplesPage(Page[CodeExample]):
    library_id: str
    symbol_name: str


class Pagination(BaseModel):
    model_config = _WIRE_CONFIG

    total_results: int
    current_page: int
    total_pages: int
    per_page: int
    has_more: bool | None = None


def _page_fields(items: list, pagination: Pagination | None) -> dict:
    """Page fields for a body; a body without pagination is one complete page."""
    if pagination is None:
        return {
            "items": items,
            "total_results": len(items),
            "current_page": 1,
            "total_pages": 1,
            "per_page": len(items),
        }
    return {
        "items": items,
        "total_results": pagination.total_results,
        "current_page": pagination.current_page,
        "total_pages": pagination.total_pages,
        "per_page": pagination.per_page,
    }


class SearchResponse(BaseModel):
    """Body of GET /search."""

    model_config = _WIRE_CONFIG

    results: list[LibraryRecord] = []
    pagination: Pagination | None = None

    def to_page(self) -> Page[LibraryRecord]:
        return Page[LibraryRecord](**_page_fields(self.results, self.pagination))


class CodeExamplesResponse(BaseModel):
    """Body of GET /examples/<library>/<symbol>."""

    model_config = _WIRE_CONFIG

    examples: list[CodeExample] = []
    function_name: str | None = None
    library_id: str | None = None
    pagination: Pagination | None = None

    def to_page(self, library_id: str, symbol_name: str) -> CodeExamplesPage:
        return CodeExamplesPage(
            library_id=self.library_id or library_id,
            symbol_name=self.function_name or symbol_name,
            **_page_fields(self.examples, self.pagination),
        )
