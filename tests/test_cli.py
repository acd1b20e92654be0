from __future__ import annotations

import logging

from typer.testing import CliRunner

from gh_stars import cli

runner = CliRunner()


def test_missing_repository_exits_with_usage(monkeypatch):
    monkeypatch.setattr(cli, "current_repository", lambda: None)

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 1
    assert "Error: no repository specified" in result.output
    assert "Usage: gh stars [repository]" in result.output


def test_invalid_repository_exits_with_error(monkeypatch):
    monkeypatch.setattr(cli, "github_token", lambda: None)

    result = runner.invoke(cli.app, ["not-a-repository"])

    assert result.exit_code == 1
    assert "Invalid repository" in result.output


def test_repository_argument_starts_the_app(monkeypatch):
    started: list[str] = []

    class FakeApp:
        return_code = 0

        def __init__(self, name, client, settings, close_client=False):
            started.append(name)

        def run(self) -> None:
            pass

    monkeypatch.setattr(cli, "github_token", lambda: None)
    monkeypatch.setattr(cli, "StarsApp", FakeApp)

    result = runner.invoke(cli.app, ["acme/demo"])

    assert result.exit_code == 0
    assert started == ["acme/demo"]


def test_configure_logging_writes_debug_file(tmp_path):
    path = tmp_path / "debug.txt"
    root = logging.getLogger()
    previous = root.handlers[:]
    previous_level = root.level
    root.handlers = []
    try:
        cli.configure_logging(True, path)
        logging.getLogger("gh_stars.test").debug("hello")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = previous
        root.setLevel(previous_level)

    assert "hello" in path.read_text()


def test_ambient_repository_with_host_starts_the_app(monkeypatch):
    """GH_REPO in HOST/OWNER/REPO form is accepted without an argument."""

    started: list[str] = []

    class FakeApp:
        return_code = 0

        def __init__(self, name, client, settings, close_client=False):
            started.append(name)

        def run(self) -> None:
            pass

    monkeypatch.setenv("GH_REPO", "github.com/acme/demo")
    monkeypatch.setattr(cli, "github_token", lambda: None)
    monkeypatch.setattr(cli, "StarsApp", FakeApp)

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0
    assert started == ["acme/demo"]
