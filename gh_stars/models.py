"""Domain models parsed from GitHub REST payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from .config import UTC
from .errors import MalformedDataError


@dataclass(slots=True, frozen=True)
class StarEvent:
    """A single stargazer action."""

    occurred_at: datetime

    @classmethod
    def from_rest(cls, payload: Any) -> "StarEvent":
        """Convert one entry of the star-aware stargazers listing."""

        if not isinstance(payload, dict) or "starred_at" not in payload:
            raise MalformedDataError("Stargazer entry missing 'starred_at'; was the star media type requested?")
        return cls(occurred_at=parse_timestamp(payload["starred_at"]))


@dataclass(slots=True, frozen=True)
class RepoSummary:
    """Repository metadata needed to plan the stargazer fetch."""

    name: str
    total_stargazers: int

    @classmethod
    def from_rest(cls, name: str, payload: Any) -> "RepoSummary":
        if not isinstance(payload, dict):
            raise MalformedDataError("Repository payload is not an object")
        count = payload.get("stargazers_count")
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise MalformedDataError(f"Repository payload has invalid stargazers_count: {count!r}")
        return cls(name=name, total_stargazers=count)


@dataclass(slots=True)
class RateLimitInfo:
    """Snapshot of GitHub's REST rate limit state."""

    limit: int
    remaining: int
    reset_at: datetime

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo | None":
        """Read the ``X-RateLimit-*`` headers, if the response carries them."""

        try:
            remaining = int(headers["X-RateLimit-Remaining"])
            reset = int(headers["X-RateLimit-Reset"])
        except (KeyError, TypeError, ValueError):
            return None
        try:
            limit = int(headers.get("X-RateLimit-Limit", remaining))
        except (TypeError, ValueError):
            limit = remaining
        return cls(limit=limit, remaining=remaining, reset_at=datetime.fromtimestamp(reset, tz=UTC))


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp as returned by GitHub into an aware UTC datetime."""

    if not isinstance(value, str) or not value:
        raise MalformedDataError(f"Invalid timestamp: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise MalformedDataError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


__all__ = ["StarEvent", "RepoSummary", "RateLimitInfo", "parse_timestamp"]
