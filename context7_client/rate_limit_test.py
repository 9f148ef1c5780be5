"""Unit tests for rate-limit tracking."""

import threading

import httpx
import pytest

from .rate_limit import RateLimitSnapshot, RateLimitTracker, parse_rate_limit_headers

NOW = 1_700_000_000.0


def _headers(limit="60", remaining="59", reset=str(int(NOW) + 30)):
    return {"x-ratelimit-limit": limit, "x-ratelimit-remaining": remaining, "x-ratelimit-reset": reset}


def describe_parse_rate_limit_headers():
    def it_parses_all_three_headers():
        quota = parse_rate_limit_headers(_headers())
        assert (quota.limit, quota.remaining, quota.reset_at) == (60, 59, int(NOW) + 30)

    def it_is_case_insensitive_with_httpx_headers():
        headers = httpx.Headers({"X-RateLimit-Limit": "10", "X-RateLimit-Remaining": "3", "X-RateLimit-Reset": "99"})
        quota = parse_rate_limit_headers(headers)
        assert (quota.limit, quota.remaining, quota.reset_at) == (10, 3, 99)

    @pytest.mark.parametrize("missing", ["x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset"])
    def it_returns_none_when_a_header_is_missing(missing):
        headers = _headers()
        del headers[missing]
        assert parse_rate_limit_headers(headers) is None

    def it_returns_none_when_a_header_is_not_an_integer():
        assert parse_rate_limit_headers(_headers(remaining="lots")) is None
        assert parse_rate_limit_headers(_headers(reset="1.5")) is None


def describe_RateLimitTracker():
    @pytest.fixture
    def tracker():
        return RateLimitTracker(clock=lambda: NOW)

    def it_starts_empty(tracker: RateLimitTracker):
        assert tracker.snapshot() is None

    def it_stores_the_latest_headers(tracker: RateLimitTracker):
        assert tracker.update(_headers()) is True
        tracker.update(_headers(remaining="58"))

        assert tracker.snapshot() == RateLimitSnapshot(
            limit=60, remaining=58, reset_at=int(NOW) + 30, reset_in_ms=30_000
        )

    def it_ignores_partial_headers(tracker: RateLimitTracker):
        tracker.update(_headers(remaining="10"))

        assert tracker.update({"x-ratelimit-remaining": "0"}) is False
        assert tracker.update({}) is False

        assert tracker.snapshot().remaining == 10

    def it_ignores_unparsable_headers(tracker: RateLimitTracker):
        tracker.update(_headers(remaining="10"))
        tracker.update(_headers(limit="sixty", remaining="9"))

        assert tracker.snapshot().remaining == 10

    def it_derives_reset_in_ms_at_read_time():
        now = [NOW]
        tracker = RateLimitTracker(clock=lambda: now[0])
        tracker.update(_headers(reset=str(int(NOW) + 10)))

        assert tracker.snapshot().reset_in_ms == 10_000
        now[0] += 4.5
        assert tracker.snapshot().reset_in_ms == 5_500

    def describe_snapshot_from():
        def it_reads_one_response_without_storing(tracker: RateLimitTracker):
            snapshot = tracker.snapshot_from(_headers(remaining="12"))

            assert snapshot == RateLimitSnapshot(
                limit=60, remaining=12, reset_at=int(NOW) + 30, reset_in_ms=30_000
            )
            assert tracker.snapshot() is None

        def it_ignores_stored_quota_when_headers_are_missing(tracker: RateLimitTracker):
            tracker.update(_headers(remaining="10"))

            assert tracker.snapshot_from({}) is None

    def it_clamps_reset_in_ms_at_zero(tracker: RateLimitTracker):
        tracker.update(_headers(reset=str(int(NOW) - 100)))
        assert tracker.snapshot().reset_in_ms == 0

    def it_never_exposes_a_mixed_write_under_concurrency(tracker: RateLimitTracker):
        stop = threading.Event()
        torn = []

        def writer(n):
            for i in range(2000):
                v = str(n * 10_000 + i)
                tracker.update(_headers(limit=v, remaining=v, reset=v))

        def reader():
            while not stop.is_set():
                snap = tracker.snapshot()
                if snap is not None and not (snap.limit == snap.remaining == snap.reset_at):
                    torn.append(snap)

        readers = [threading.Thread(target=reader) for _ in range(2)]
        writers = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        stop.set()
        for t in readers:
            t.join()

        assert torn == []
