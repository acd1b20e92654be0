"""HTTP client for the parts of GitHub's REST API used to chart stars."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from .config import GitHubSettings
from .errors import MalformedDataError, TransportError
from .models import RateLimitInfo, RepoSummary, StarEvent
from .rate_limiter import RateLimiter

LOGGER = logging.getLogger(__name__)

# Makes the stargazers listing include ``starred_at`` timestamps.
STAR_MEDIA_TYPE = "application/vnd.github.v3.star+json"

REPOSITORY_PATH = "repos/{name}"
STARGAZERS_PATH = "repos/{name}/stargazers"

_TRANSIENT_STATUSES = {502, 503, 504}


class GitHubRestClient:
    """Light-weight REST client with retry and rate-limit support."""

    def __init__(
        self,
        settings: GitHubSettings,
        client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.api_url.rstrip("/")
        headers = {
            "Accept": STAR_MEDIA_TYPE,
            "User-Agent": settings.user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if settings.token:
            headers["Authorization"] = f"bearer {settings.token}"
        self._headers = headers
        self._client = client or httpx.AsyncClient(
            headers=headers,
            timeout=settings.request_timeout,
        )
        self._owns_client = client is None
        self._rate_limiter = rate_limiter or RateLimiter()

    async def __aenter__(self) -> "GitHubRestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_repository(self, name: str) -> RepoSummary:
        """Fetch the repository summary (total stargazer count)."""

        payload = await self.get_json(REPOSITORY_PATH.format(name=name))
        return RepoSummary.from_rest(name, payload)

    async def get_stargazers_page(self, name: str, page: int, per_page: int) -> list[StarEvent]:
        """Fetch one page of stargazers with their ``starred_at`` timestamps."""

        payload = await self.get_json(
            STARGAZERS_PATH.format(name=name),
            params={"page": page, "per_page": per_page},
        )
        if not isinstance(payload, list):
            raise MalformedDataError(f"Expected a list of stargazers, got {type(payload).__name__}")
        return [StarEvent.from_rest(entry) for entry in payload]

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` with retries and exponential backoff, returning decoded JSON."""

        url = f"{self._base_url}/{path.lstrip('/')}"
        backoff = self._settings.initial_backoff
        attempt = 0

        while True:
            attempt += 1
            await self._rate_limiter.acquire()
            try:
                response = await self._client.get(url, params=params, headers=self._headers)
            except httpx.RequestError as exc:
                await self._rate_limiter.reset()
                LOGGER.warning("GitHub request error for %s: %s", path, exc)
                if attempt >= self._settings.max_retries:
                    raise TransportError(f"Request to {path} failed: {exc}") from exc
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self._settings.max_backoff)
                continue

            if rate_limit := RateLimitInfo.from_headers(response.headers):
                await self._rate_limiter.record(rate_limit)

            if response.status_code in _TRANSIENT_STATUSES:
                LOGGER.info("GitHub transient HTTP %s for %s", response.status_code, path)
                if attempt >= self._settings.max_retries:
                    raise TransportError(
                        f"GitHub API unavailable after {self._settings.max_retries} attempts",
                        status_code=response.status_code,
                    )
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self._settings.max_backoff)
                continue

            if response.status_code >= 400:
                message = _error_message(response)
                if _is_rate_limited(response, message) and attempt < self._settings.max_retries:
                    delay = _retry_after_seconds(response) or backoff
                    LOGGER.warning("GitHub rate limited: %s", message)
                    await asyncio.sleep(min(delay, self._settings.max_backoff))
                    backoff = min(max(backoff * 2, delay), self._settings.max_backoff)
                    continue
                raise TransportError(f"HTTP {response.status_code}: {message}", status_code=response.status_code)

            try:
                return response.json()
            except ValueError as exc:
                raise MalformedDataError(f"Response from {path} is not valid JSON") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or "request failed"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason_phrase or "request failed"


def _is_rate_limited(response: httpx.Response, message: str) -> bool:
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    return "rate limit" in message.lower() or "Retry-After" in response.headers


def _retry_after_seconds(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except (TypeError, ValueError):
        pass

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):  # pragma: no cover - defensive parsing
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    delta = (retry_at - datetime.now(timezone.utc)).total_seconds()
    return max(delta, 0.0)


__all__ = ["GitHubRestClient", "STAR_MEDIA_TYPE"]
