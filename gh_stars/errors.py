"""Exceptions raised while loading stargazer data."""

from __future__ import annotations


class StarsError(RuntimeError):
    """Base class for every error surfaced to the user."""


class ConfigurationError(StarsError):
    """Raised when the repository identifier or settings are invalid."""


class TransportError(StarsError):
    """Raised when talking to the GitHub API fails permanently."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedDataError(StarsError):
    """Raised when a response does not have the expected shape."""


class TooManyPagesError(StarsError):
    """Raised before fetching when a repository has too many stargazer pages."""

    def __init__(self, pages: int, max_pages: int) -> None:
        super().__init__(f"Too many pages to fetch ({pages} >= {max_pages})")
        self.pages = pages
        self.max_pages = max_pages


class PageFetchError(StarsError):
    """Raised when one page of stargazers could not be fetched.

    ``partial`` holds the events collected from the pages that did succeed.
    """

    def __init__(self, page: int, cause: BaseException, partial: list | None = None) -> None:
        super().__init__(f"Error fetching stargazers page {page}: {cause}")
        self.page = page
        self.partial = partial or []


__all__ = [
    "StarsError",
    "ConfigurationError",
    "TransportError",
    "MalformedDataError",
    "TooManyPagesError",
    "PageFetchError",
]
