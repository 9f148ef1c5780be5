"""Unit tests for response models."""

from .errors import ClientError, RateLimited
from .models import (
    CodeExamplesResponse,
    FailureKind,
    LibraryRecord,
    Page,
    SearchResponse,
    Unavailable,
)


def describe_LibraryRecord():
    def it_reads_camel_case_fields():
        record = LibraryRecord.model_validate(
            {
                "id": "react",
                "name": "React",
                "description": "UI library",
                "version": "18.2.0",
                "popularityScore": 0.97,
                "language": "javascript",
                "tags": ["frontend", "ui", "frontend"],
                "lastUpdated": "2024-01-01",
            }
        )
        assert record.popularity_score == 0.97
        assert record.tags == frozenset({"frontend", "ui"})
        assert record.last_updated == "2024-01-01"

    def it_accepts_stars_as_popularity():
        record = LibraryRecord.model_validate({"id": "react", "name": "React", "stars": 200000})
        assert record.popularity_score == 200000

    def it_dumps_camel_case():
        record = LibraryRecord(id="x", name="X", popularity_score=3)
        dumped = record.model_dump(by_alias=True)
        assert dumped["popularityScore"] == 3
        assert "lastUpdated" in dumped


def describe_Page():
    def it_derives_has_more_from_page_numbers():
        page = Page[int](items=[1, 2], total_results=4, current_page=1, total_pages=2, per_page=2)
        assert page.has_more is True

        last = Page[int](items=[3, 4], total_results=4, current_page=2, total_pages=2, per_page=2)
        assert last.has_more is False

    def it_dumps_has_more_by_alias():
        page = Page[int](items=[], total_results=0, current_page=1, total_pages=1, per_page=10)
        assert page.model_dump(by_alias=True)["hasMore"] is False


def describe_SearchResponse():
    def it_ignores_a_contradictory_has_more():
        body = {
            "results": [],
            "pagination": {
                "totalResults": 0,
                "currentPage": 3,
                "totalPages": 3,
                "perPage": 10,
                "hasMore": True,
            },
        }
        page = SearchResponse.model_validate(body).to_page()
        assert page.has_more is False
        assert page.current_page == 3

    def it_treats_missing_pagination_as_one_page():
        body = {"results": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}]}
        page = SearchResponse.model_validate(body).to_page()
        assert [r.id for r in page.items] == ["a", "b"]
        assert (page.total_results, page.current_page, page.total_pages, page.per_page) == (2, 1, 1, 2)
        assert page.has_more is False


def describe_CodeExamplesResponse():
    def it_prefers_ids_from_the_body():
        body = {"examples": [], "functionName": "useState", "libraryId": "react"}
        page = CodeExamplesResponse.model_validate(body).to_page("/react", "usestate")
        assert (page.library_id, page.symbol_name) == ("react", "useState")

    def it_falls_back_to_the_requested_ids():
        page = CodeExamplesResponse.model_validate({"examples": []}).to_page("react", "useState")
        assert (page.library_id, page.symbol_name) == ("react", "useState")


def describe_Unavailable():
    def it_is_falsy():
        assert not Unavailable(reason=FailureKind.SERVER_EXHAUSTED)

    def it_carries_the_error_kind():
        result = Unavailable.from_error(ClientError("Library not found", status=404))
        assert result.reason is FailureKind.CLIENT_ERROR
        assert result.status == 404
        assert result.attempts == 1
        assert result.detail == "Library not found (Status: 404)"

    def it_distinguishes_quota_exhaustion():
        result = Unavailable.from_error(RateLimited("slow down", status=429, attempts=4))
        assert result.reason is FailureKind.RATE_LIMITED
        assert result.attempts == 4
