"""Command line interface for gh-stars."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .app import StarsApp
from .config import AppConfig, parse_repository
from .context import current_repository, github_token
from .errors import StarsError
from .github_client import GitHubRestClient

LOGGER = logging.getLogger(__name__)

USAGE = "Usage: gh stars [repository]"
DEBUG_LOG_PATH = Path("debug.txt")

app = typer.Typer(add_completion=False)


def configure_logging(debug: bool, path: Path = DEBUG_LOG_PATH) -> None:
    # The terminal belongs to the UI, so debug output goes to a file.
    if not debug:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=path,
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@app.command()
def main(
    repository: Optional[str] = typer.Argument(None, help="Repository as OWNER/NAME; defaults to the current one"),
    debug: bool = typer.Option(False, "--debug", "-d", help="enable debug output"),
) -> None:
    """Chart the stargazers of a GitHub repository over time."""

    configure_logging(debug)
    repository = repository or current_repository()
    if not repository:
        typer.echo(f"Error: no repository specified\n\n{USAGE}")
        raise typer.Exit(code=1)

    try:
        name = parse_repository(repository)
        config = AppConfig.from_env(overrides={"github_token": github_token()})
    except (StarsError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    LOGGER.debug("Starting gh-stars for %s", name)
    client = GitHubRestClient(config.github)
    stars_app = StarsApp(name, client, config.session, close_client=True)
    stars_app.run()
    if stars_app.return_code:
        raise typer.Exit(code=1)


__all__ = ["app", "configure_logging"]
