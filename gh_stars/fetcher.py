"""Concurrent paginated download of a repository's stargazers."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .config import SessionSettings
from .errors import PageFetchError, TooManyPagesError
from .models import StarEvent

LOGGER = logging.getLogger(__name__)


class StargazerSource(Protocol):
    async def get_stargazers_page(self, name: str, page: int, per_page: int) -> list[StarEvent]:
        ...


def total_pages(total_stargazers: int, page_size: int, include_partial_page: bool = False) -> int:
    """Number of pages to request for ``total_stargazers``.

    Floor division leaves out the trailing partially filled page unless
    ``include_partial_page`` is set.
    """

    if include_partial_page:
        return -(-total_stargazers // page_size)
    return total_stargazers // page_size


class StargazerFetcher:
    """Fetches every stargazer page of one repository at once."""

    def __init__(self, source: StargazerSource, settings: SessionSettings) -> None:
        self._source = source
        self._settings = settings

    def plan(self, total_stargazers: int) -> list[int]:
        """Return the page numbers to request, refusing oversized repositories."""

        pages = total_pages(total_stargazers, self._settings.page_size, self._settings.include_partial_page)
        if pages >= self._settings.max_pages:
            raise TooManyPagesError(pages, self._settings.max_pages)
        return list(range(1, pages + 1))

    async def fetch(self, name: str, total_stargazers: int) -> list[StarEvent]:
        """Fetch all planned pages concurrently and return events sorted by time.

        If a page fails, :class:`PageFetchError` is raised for the lowest
        failing page once every request has finished; it carries the events
        gathered from the other pages.
        """

        pages = self.plan(total_stargazers)
        LOGGER.info("Fetching %s stargazer pages for %s", len(pages), name)

        stargazers: list[StarEvent] = []
        lock = asyncio.Lock()

        async def fetch_page(page: int) -> None:
            try:
                result = await self._source.get_stargazers_page(name, page, self._settings.page_size)
            except Exception as exc:
                raise PageFetchError(page, exc) from exc
            async with lock:
                stargazers.extend(result)
            LOGGER.debug("Fetched page %s of %s (%s stargazers)", page, name, len(result))

        outcomes = await asyncio.gather(*(fetch_page(page) for page in pages), return_exceptions=True)
        failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if failures:
            for failure in failures:
                if not isinstance(failure, PageFetchError):
                    raise failure
            error = min(failures, key=lambda failure: failure.page)
            error.partial = list(stargazers)
            LOGGER.warning("%s of %s pages failed for %s: %s", len(failures), len(pages), name, error)
            raise error

        stargazers.sort(key=lambda event: event.occurred_at)
        LOGGER.info("Fetched %s stargazers for %s", len(stargazers), name)
        return stargazers


__all__ = ["StargazerFetcher", "StargazerSource", "total_pages"]
