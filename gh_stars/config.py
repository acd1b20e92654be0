"""Application configuration helpers."""

from __future__ import annotations

import os
import re
from datetime import timezone
from typing import Any

from pydantic import BaseModel, Field, PositiveInt

from .errors import ConfigurationError


UTC = timezone.utc

DEFAULT_API_URL = "https://api.github.com"

_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class GitHubSettings(BaseModel):
    """Configuration options for the GitHub REST API."""

    token: str | None = Field(default=None, description="Personal access token or gh CLI token.")
    api_url: str = Field(default=DEFAULT_API_URL)
    user_agent: str = Field(default="gh-stars")
    max_retries: PositiveInt = Field(default=4, description="Maximum number of attempts per REST request.")
    initial_backoff: float = Field(default=1.0, ge=0.0, description="Initial exponential backoff in seconds.")
    max_backoff: float = Field(default=30.0, ge=0.0, description="Maximum delay for exponential backoff in seconds.")
    request_timeout: float = Field(default=30.0, ge=1.0, description="Timeout for a single HTTP request in seconds.")


class SessionSettings(BaseModel):
    """Tunable parameters for fetching and displaying stargazers."""

    window_days: PositiveInt = Field(default=30, description="Initial and minimum time window in days.")
    window_step: PositiveInt = Field(default=30, description="Days added or removed per widen/narrow action.")
    page_size: PositiveInt = Field(default=100, le=100, description="Stargazers requested per page.")
    max_pages: PositiveInt = Field(default=400, description="Refuse to fetch repositories with this many pages.")
    include_partial_page: bool = Field(
        default=False,
        description="Also fetch the trailing partially filled page of stargazers.",
    )


class AppConfig(BaseModel):
    """Root configuration container."""

    github: GitHubSettings = Field(default_factory=GitHubSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, overrides: dict[str, Any] | None = None) -> "AppConfig":
        """Construct a configuration object from environment variables."""

        env = env if env is not None else os.environ
        overrides = overrides or {}

        github = GitHubSettings(
            token=overrides.get("github_token") or env.get("GITHUB_TOKEN") or env.get("GH_TOKEN"),
            api_url=overrides.get("github_api_url") or env.get("GITHUB_API_URL") or DEFAULT_API_URL,
            max_retries=int(overrides.get("github_max_retries") or env.get("GH_STARS_MAX_RETRIES", 4)),
            initial_backoff=float(overrides.get("github_initial_backoff") or env.get("GH_STARS_INITIAL_BACKOFF", 1.0)),
            max_backoff=float(overrides.get("github_max_backoff") or env.get("GH_STARS_MAX_BACKOFF", 30.0)),
            request_timeout=float(overrides.get("github_request_timeout") or env.get("GH_STARS_REQUEST_TIMEOUT", 30.0)),
        )

        session = SessionSettings(
            window_days=int(overrides.get("window_days") or env.get("GH_STARS_WINDOW_DAYS", 30)),
            window_step=int(overrides.get("window_step") or env.get("GH_STARS_WINDOW_STEP", 30)),
            page_size=int(overrides.get("page_size") or env.get("GH_STARS_PAGE_SIZE", 100)),
            max_pages=int(overrides.get("max_pages") or env.get("GH_STARS_MAX_PAGES", 400)),
            include_partial_page=_parse_bool(
                overrides.get("include_partial_page", env.get("GH_STARS_INCLUDE_PARTIAL_PAGE"))
            ),
        )

        return cls(github=github, session=session)


def parse_repository(value: str) -> str:
    """Validate an ``owner/name`` identifier and return it stripped."""

    candidate = value.strip().removesuffix(".git")
    if not _REPOSITORY_RE.match(candidate):
        raise ConfigurationError(f"Invalid repository {value!r}, expected OWNER/NAME")
    return candidate


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "AppConfig",
    "GitHubSettings",
    "SessionSettings",
    "parse_repository",
    "UTC",
]
