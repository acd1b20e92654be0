"""Interactive terminal UI built on textual."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Protocol

from rich.align import Align
from rich.console import RenderableType
from rich.table import Table
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Static

from .config import UTC, SessionSettings
from .errors import StarsError
from .fetcher import StargazerFetcher
from .models import RepoSummary, StarEvent
from .plot import plot_graph
from .render import (
    TABLE_COLUMNS,
    EmptyView,
    ErrorView,
    GraphView,
    HelpView,
    LoadingView,
    TableView,
    ViewPayload,
    select_view,
)
from .series import bucket_by_day
from .session import (
    KEYMAP,
    Effect,
    Event,
    FetchFailed,
    InputAction,
    RepoLoaded,
    Resized,
    SessionState,
    StargazersLoaded,
    UserInput,
    transition,
)

LOGGER = logging.getLogger(__name__)

SPINNER_FRAMES = "⣾⣽⣻⢿⡿⣟⣯⣷"
SPINNER_STYLE = "color(205)"


class RepositorySource(Protocol):
    async def get_repository(self, name: str) -> RepoSummary:
        ...

    async def get_stargazers_page(self, name: str, page: int, per_page: int) -> list[StarEvent]:
        ...


class StarsApp(App[None]):
    """Shows the stargazer history of one repository."""

    CSS = """
    Screen {
        overflow: hidden;
    }
    #view {
        width: 100%;
        height: 100%;
    }
    #table {
        width: 100%;
        height: 100%;
    }
    """

    BINDINGS = [
        Binding(",".join(binding.keys), f"session_input('{binding.action.value}')", binding.description, priority=True)
        for binding in KEYMAP
    ]

    def __init__(
        self,
        repository: str,
        client: RepositorySource,
        settings: SessionSettings | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        close_client: bool = False,
    ) -> None:
        super().__init__()
        settings = settings or SessionSettings()
        self.state = SessionState.initial(repository, settings)
        self._client = client
        self._fetcher = StargazerFetcher(client, settings)
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._close_client = close_client
        self._spinner_frame = 0
        self._table_rows: tuple[tuple[str, str], ...] | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="view")
        yield DataTable(id="table", cursor_type="row")

    def on_mount(self) -> None:
        table = self.query_one("#table", DataTable)
        table.add_column(TABLE_COLUMNS[0], width=20)
        table.add_column(TABLE_COLUMNS[1], width=10)
        table.display = False
        self.set_interval(0.1, self._tick_spinner)
        self.apply_event(Resized(self.size.width, self.size.height))
        self.run_worker(self._load_repository(), name="repository")

    async def on_unmount(self) -> None:
        if self._close_client:
            close = getattr(self._client, "close", None)
            if close is not None:
                await close()

    def on_resize(self, event: events.Resize) -> None:
        self.apply_event(Resized(event.size.width, event.size.height))

    def action_session_input(self, action: str) -> None:
        self.apply_event(UserInput(InputAction(action)))

    def apply_event(self, event: Event) -> None:
        """Feed one event through the session state machine and redraw."""

        step = transition(self.state, event)
        self.state = step.state
        LOGGER.debug("%s -> lifecycle=%s effect=%s", type(event).__name__, self.state.lifecycle.value, step.effect.value)
        if step.effect is Effect.QUIT:
            self.exit()
            return
        if step.effect is Effect.FETCH_STARGAZERS and self.state.summary is not None:
            self.run_worker(self._load_stargazers(self.state.summary), name="stargazers")
        self.redraw()

    async def _load_repository(self) -> None:
        try:
            summary = await self._client.get_repository(self.state.name)
        except StarsError as exc:
            LOGGER.error("Failed to load repository %s: %s", self.state.name, exc)
            self.apply_event(FetchFailed(exc))
            return
        LOGGER.info("Repository %s has %s stargazers", summary.name, summary.total_stargazers)
        self.apply_event(RepoLoaded(summary))

    async def _load_stargazers(self, summary: RepoSummary) -> None:
        try:
            stargazers = await self._fetcher.fetch(summary.name, summary.total_stargazers)
        except StarsError as exc:
            LOGGER.error("Failed to load stargazers of %s: %s", summary.name, exc)
            self.apply_event(FetchFailed(exc))
            return
        self.apply_event(StargazersLoaded(bucket_by_day(stargazers)))

    def _tick_spinner(self) -> None:
        if self.state.data_loaded or self.state.error is not None:
            return
        self._spinner_frame = (self._spinner_frame + 1) % len(SPINNER_FRAMES)
        self.redraw()

    def redraw(self) -> None:
        payload = select_view(self.state, self._clock())
        view = self.query_one("#view", Static)
        table = self.query_one("#table", DataTable)

        if isinstance(payload, TableView):
            view.display = False
            table.display = True
            if payload.width:
                table.styles.width = payload.width
            if payload.height:
                table.styles.height = payload.height
            if payload.rows != self._table_rows:
                table.clear()
                table.add_rows(payload.rows)
                self._table_rows = payload.rows
            table.focus()
            return

        table.display = False
        view.display = True
        view.update(self._renderable(payload))

    def _renderable(self, payload: ViewPayload) -> RenderableType:
        if isinstance(payload, LoadingView):
            frame = SPINNER_FRAMES[self._spinner_frame]
            return Text.assemble("\n ", (frame, SPINNER_STYLE), " loading...\n")
        if isinstance(payload, (ErrorView, EmptyView)):
            return Text(f"\n {payload.message}\n")
        if isinstance(payload, HelpView):
            return Align.center(
                _help_table(payload),
                vertical="middle",
                width=payload.width or None,
                height=max(payload.height, 1),
            )
        if isinstance(payload, GraphView):
            return Text.from_ansi(plot_graph(payload))
        raise TypeError(f"Cannot draw {payload!r}")


def _help_table(payload: HelpView) -> Table:
    table = Table.grid(padding=(0, 4))
    table.add_column()
    table.add_column()
    table.add_row(_help_column(payload.bindings), _help_column(payload.navigation))
    return table


def _help_column(entries: tuple[tuple[str, str], ...]) -> Text:
    lines = Text()
    for index, (key, description) in enumerate(entries):
        if index:
            lines.append("\n")
        lines.append(key, style="bold")
        lines.append(f" {description}", style="dim")
    return lines


__all__ = ["StarsApp", "RepositorySource"]
