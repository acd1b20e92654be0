from __future__ import annotations

import subprocess
from types import SimpleNamespace

import pytest

from gh_stars import context
from gh_stars.context import current_repository, github_token, repository_from_remote


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/acme/demo.git",
        "https://github.com/acme/demo",
        "git@github.com:acme/demo.git",
        "ssh://git@github.com/acme/demo.git",
    ],
)
def test_repository_from_remote(url):
    assert repository_from_remote(url + "\n") == "acme/demo"


def test_repository_from_non_github_remote():
    assert repository_from_remote("https://gitlab.com/acme/demo.git") is None


def test_gh_repo_variable_takes_priority(monkeypatch):
    def fail(*args, **kwargs):  # pragma: no cover - must not be called
        raise AssertionError("git should not be consulted")

    monkeypatch.setattr(context.subprocess, "run", fail)

    assert current_repository({"GH_REPO": "acme/demo"}) == "acme/demo"


def test_current_repository_reads_origin_remote(monkeypatch):
    def fake_run(args, **kwargs):
        assert args == ["git", "remote", "get-url", "origin"]
        return SimpleNamespace(stdout="git@github.com:acme/demo.git\n")

    monkeypatch.setattr(context.subprocess, "run", fake_run)

    assert current_repository({}) == "acme/demo"


def test_current_repository_outside_a_checkout(monkeypatch):
    def fake_run(args, **kwargs):
        raise subprocess.CalledProcessError(128, args)

    monkeypatch.setattr(context.subprocess, "run", fake_run)

    assert current_repository({}) is None


def test_github_token_prefers_environment(monkeypatch):
    monkeypatch.setattr(context.subprocess, "run", lambda *a, **k: SimpleNamespace(stdout="from-gh\n"))

    assert github_token({"GITHUB_TOKEN": "from-env"}) == "from-env"
    assert github_token({}) == "from-gh"


def test_github_token_without_gh(monkeypatch):
    def fake_run(args, **kwargs):
        raise FileNotFoundError("gh")

    monkeypatch.setattr(context.subprocess, "run", fake_run)

    assert github_token({}) is None


@pytest.mark.parametrize("value", ["github.com/acme/demo", "ghe.example.com/acme/demo", "acme/demo"])
def test_gh_repo_variable_may_include_a_host(value):
    assert current_repository({"GH_REPO": value}) == "acme/demo"
