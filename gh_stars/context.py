"""Discover the repository and credentials from the invoking environment."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

_REMOTE_PATTERNS = (
    re.compile(r"^(?:https?|git|ssh)://(?:[^@/]+@)?github\.com(?::\d+)?/(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^(?:[^@]+@)?github\.com:(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?$"),
)


def repository_from_remote(url: str) -> Optional[str]:
    """Extract ``owner/name`` from a github.com remote URL."""

    url = url.strip()
    for pattern in _REMOTE_PATTERNS:
        match = pattern.match(url)
        if match:
            return f"{match.group('owner')}/{match.group('name')}"
    return None


def _strip_host(value: str) -> str:
    # GH_REPO accepts [HOST/]OWNER/REPO.
    parts = value.split("/")
    if len(parts) == 3:
        return "/".join(parts[1:])
    return value


def current_repository(env: Mapping[str, str] | None = None) -> Optional[str]:
    """Return the repository of the current context, if any.

    Priority order:
    1. GH_REPO environment variable, as OWNER/REPO or HOST/OWNER/REPO
    2. the ``origin`` remote of the git checkout in the working directory
    """

    env = env if env is not None else os.environ
    repo = env.get("GH_REPO")
    if repo:
        return _strip_host(repo.strip())

    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        LOGGER.debug("No git origin remote in the working directory")
        return None
    return repository_from_remote(result.stdout)


def github_token(env: Mapping[str, str] | None = None) -> Optional[str]:
    """Get a GitHub token from the environment or the gh CLI."""

    env = env if env is not None else os.environ
    token = env.get("GITHUB_TOKEN") or env.get("GH_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, check=True)
    except (subprocess.CalledProcessError, FileNotFoundError):
        LOGGER.debug("gh CLI not available or not authenticated")
        return None
    return result.stdout.strip() or None


__all__ = ["current_repository", "github_token", "repository_from_remote"]
