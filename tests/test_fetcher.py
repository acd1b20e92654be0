from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from gh_stars.config import SessionSettings
from gh_stars.errors import PageFetchError, TooManyPagesError, TransportError
from gh_stars.fetcher import StargazerFetcher, total_pages
from gh_stars.models import StarEvent

UTC = timezone.utc
START = datetime(2024, 1, 1, tzinfo=UTC)


class FakeSource:
    """Serves pre-built pages, finishing later pages first."""

    def __init__(self, pages: dict[int, list[StarEvent]], failing: set[int] | None = None) -> None:
        self._pages = pages
        self._failing = failing or set()
        self.requested: list[tuple[str, int, int]] = []
        self.completed: list[int] = []

    async def get_stargazers_page(self, name: str, page: int, per_page: int) -> list[StarEvent]:
        self.requested.append((name, page, per_page))
        await asyncio.sleep(0.01 * (len(self._pages) - page + 1))
        if page in self._failing:
            raise TransportError(f"boom on {page}")
        self.completed.append(page)
        return list(self._pages.get(page, []))


def _page(offset_hours: int, count: int) -> list[StarEvent]:
    # Deliberately newest first so sorting is observable.
    return [StarEvent(START + timedelta(hours=offset_hours + i)) for i in reversed(range(count))]


def test_total_pages_uses_floor_division():
    assert total_pages(250, 100) == 2
    assert total_pages(99, 100) == 0
    assert total_pages(300, 100) == 3


def test_total_pages_can_include_the_partial_page():
    assert total_pages(250, 100, include_partial_page=True) == 3
    assert total_pages(300, 100, include_partial_page=True) == 3
    assert total_pages(0, 100, include_partial_page=True) == 0


def test_plan_for_250_stargazers_requests_two_pages():
    fetcher = StargazerFetcher(FakeSource({}), SessionSettings())

    assert fetcher.plan(250) == [1, 2]


def test_too_many_pages_fails_before_any_request():
    source = FakeSource({})
    fetcher = StargazerFetcher(source, SessionSettings())

    with pytest.raises(TooManyPagesError) as exc:
        asyncio.run(fetcher.fetch("acme/huge", 40_000))

    assert exc.value.pages == 400
    assert source.requested == []


def test_just_below_the_ceiling_is_fetched():
    source = FakeSource({})
    fetcher = StargazerFetcher(source, SessionSettings(max_pages=3))

    asyncio.run(fetcher.fetch("acme/demo", 299))

    assert sorted(page for _, page, _ in source.requested) == [1, 2]


def test_fetch_merges_pages_sorted_regardless_of_completion_order():
    pages = {1: _page(0, 100), 2: _page(500, 100), 3: _page(200, 100)}
    source = FakeSource(pages)
    fetcher = StargazerFetcher(source, SessionSettings())

    events = asyncio.run(fetcher.fetch("acme/demo", 350))

    assert source.completed == [3, 2, 1]
    assert len(events) == 300
    assert events == sorted(events, key=lambda event: event.occurred_at)
    assert {(name, per_page) for name, _, per_page in source.requested} == {("acme/demo", 100)}


def test_fetch_with_two_pages_from_250_stargazers():
    pages = {1: _page(0, 100), 2: _page(100, 100), 3: _page(200, 50)}
    source = FakeSource(pages)
    fetcher = StargazerFetcher(source, SessionSettings())

    events = asyncio.run(fetcher.fetch("acme/demo", 250))

    assert sorted(page for _, page, _ in source.requested) == [1, 2]
    assert len(events) == 200


def test_failed_page_raises_with_partial_results():
    pages = {1: _page(0, 100), 2: _page(100, 100), 3: _page(200, 100)}
    source = FakeSource(pages, failing={2})
    fetcher = StargazerFetcher(source, SessionSettings())

    with pytest.raises(PageFetchError) as exc:
        asyncio.run(fetcher.fetch("acme/demo", 300))

    error = exc.value
    assert error.page == 2
    assert isinstance(error.__cause__, TransportError)
    assert "page 2" in str(error)
    assert len(error.partial) == 200
    assert sorted(source.completed) == [1, 3]


def test_lowest_failing_page_is_reported():
    source = FakeSource({1: [], 2: [], 3: []}, failing={2, 3})
    fetcher = StargazerFetcher(source, SessionSettings())

    with pytest.raises(PageFetchError) as exc:
        asyncio.run(fetcher.fetch("acme/demo", 300))

    assert exc.value.page == 2


def test_no_full_page_means_no_requests():
    source = FakeSource({})
    fetcher = StargazerFetcher(source, SessionSettings())

    assert asyncio.run(fetcher.fetch("acme/tiny", 42)) == []
    assert source.requested == []


def test_fetch_logs_plan_and_result(caplog):
    source = FakeSource({1: _page(0, 100), 2: _page(100, 100)})
    fetcher = StargazerFetcher(source, SessionSettings())

    with caplog.at_level("INFO", logger="gh_stars.fetcher"):
        asyncio.run(fetcher.fetch("acme/demo", 200))

    assert "Fetching 2 stargazer pages for acme/demo" in caplog.text
    assert "Fetched 200 stargazers for acme/demo" in caplog.text
