"""Optional request parameters and their query-string serialization."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import quote

SortKey = Literal["relevance", "stars", "updated", "name"]
DocFormat = Literal["markdown", "text", "html"]
ExampleFilter = Literal["popular", "recent", "recommended"]


@dataclass(frozen=True)
class SearchOptions:
    page: int | None = None
    per_page: int | None = None
    language: str | None = None
    sort: SortKey | None = None
    tags: Iterable[str] | None = None
    include_metadata: bool | None = None


@dataclass(frozen=True)
class DocumentationOptions:
    topic: str | None = None
    tokens: int | None = None
    format: DocFormat | None = None
    version: str | None = None
    include_examples: bool | None = None


@dataclass(frozen=True)
class CodeExampleOptions:
    page: int | None = None
    per_page: int | None = None
    filter: ExampleFilter | None = None
    include_description: bool | None = None


def _int(value: int) -> str:
    return str(int(value))


def _text(value: str) -> str | None:
    return value or None


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _csv(values: Iterable[str]) -> str | None:
    if isinstance(values, (set, frozenset)):
        values = sorted(values)
    return ",".join(values) or None


# field name -> (query parameter, serializer); a serializer returning None drops the field
Serializer = Callable[[Any], str | None]

SEARCH_PARAMS: dict[str, tuple[str, Serializer]] = {
    "page": ("page", _int),
    "per_page": ("per_page", _int),
    "language": ("language", _text),
    "sort": ("sort", _text),
    "tags": ("tags", _csv),
    "include_metadata": ("include_metadata", _bool),
}

DOCUMENTATION_PARAMS: dict[str, tuple[str, Serializer]] = {
    "topic": ("topic", _text),
    "tokens": ("tokens", _int),
    "format": ("format", _text),
    "version": ("version", _text),
    "include_examples": ("include_examples", _bool),
}

CODE_EXAMPLE_PARAMS: dict[str, tuple[str, Serializer]] = {
    "page": ("page", _int),
    "per_page": ("per_page", _int),
    "filter": ("filter", _text),
    "include_description": ("include_description", _bool),
}


def build_params(options: object | None, table: Mapping[str, tuple[str, Serializer]]) -> dict[str, str]:
    """Serialize the fields of ``options`` that are set, in table order."""
    params: dict[str, str] = {}
    if options is None:
        return params
    for field, (name, serialize) in table.items():
        value = getattr(options, field)
        if value is None:
            continue
        serialized = serialize(value)
        if serialized is not None:
            params[name] = serialized
    return params


def path_segment(value: str) -> str:
    """Encode a library id or symbol as a single URL path segment.

    A leading slash (``/vercel/next.js``) is dropped first.
    """
    return quote(value.lstrip("/"), safe="")
