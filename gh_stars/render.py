"""Pick what to draw for a given session state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

import humanize

from .series import DailySeries, sorted_days, window_after
from .session import KEYMAP, Lifecycle, SessionState, ViewMode

EMPTY_MESSAGE = "No stargazers found."
TABLE_COLUMNS = ("Date", "Stars")
GRAPH_COLOR = "blue"
MIN_LABEL_WIDTH = 3

TABLE_NAVIGATION = (
    ("up", "move up"),
    ("down", "move down"),
    ("pgup", "page up"),
    ("pgdown", "page down"),
    ("home", "go to start"),
    ("end", "go to end"),
)


@dataclass(slots=True, frozen=True)
class LoadingView:
    pass


@dataclass(slots=True, frozen=True)
class ErrorView:
    message: str


@dataclass(slots=True, frozen=True)
class HelpView:
    bindings: tuple[tuple[str, str], ...]
    navigation: tuple[tuple[str, str], ...]
    width: int
    height: int


@dataclass(slots=True, frozen=True)
class EmptyView:
    message: str = EMPTY_MESSAGE


@dataclass(slots=True, frozen=True)
class GraphView:
    series: tuple[float, ...]
    width: int
    height: int
    caption: str
    offset: int
    precision: int = 0
    color: str = GRAPH_COLOR


@dataclass(slots=True, frozen=True)
class TableView:
    columns: tuple[str, ...]
    rows: tuple[tuple[str, str], ...]
    width: int
    height: int


ViewPayload = Union[LoadingView, ErrorView, HelpView, EmptyView, GraphView, TableView]


def visible_series(state: SessionState, now: datetime) -> DailySeries:
    """The buckets inside the current time window (or all of them)."""

    series = state.series or {}
    if state.show_all:
        return dict(series)
    return window_after(series, now - timedelta(days=state.window_days))


def select_view(state: SessionState, now: datetime) -> ViewPayload:
    if state.lifecycle is Lifecycle.ERROR:
        return ErrorView(f"Error: {state.error}")
    if not state.data_loaded:
        return LoadingView()
    if state.show_help:
        return HelpView(
            bindings=tuple((binding.label, binding.description) for binding in KEYMAP),
            navigation=TABLE_NAVIGATION,
            width=state.width,
            height=state.height,
        )

    visible = visible_series(state, now)
    days = sorted_days(visible)

    if state.view_mode is ViewMode.TABLE:
        rows = tuple((day, str(visible[day])) for day in reversed(days))
        return TableView(columns=TABLE_COLUMNS, rows=rows, width=state.width, height=max(state.height - 1, 0))

    if not days:
        return EmptyView()
    offset = max([MIN_LABEL_WIDTH] + [len(str(visible[day])) for day in days])
    return GraphView(
        series=tuple(float(visible[day]) for day in days),
        width=max(state.width - offset - 1, 1),
        height=max(state.height - 2, 1),
        caption=graph_caption(state, days[0]),
        offset=offset,
    )


def graph_caption(state: SessionState, earliest: str) -> str:
    total = state.summary.total_stargazers if state.summary else 0
    if state.show_all:
        return f"{state.name} {total} stargazers (since {earliest})"
    relative = humanize.naturaltime(timedelta(days=state.window_days))
    return f"{state.name} {total} stargazers ({relative})"


__all__ = [
    "EMPTY_MESSAGE",
    "EmptyView",
    "ErrorView",
    "GraphView",
    "HelpView",
    "LoadingView",
    "TableView",
    "ViewPayload",
    "graph_caption",
    "select_view",
    "visible_series",
]
