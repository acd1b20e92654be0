"""State machine driving the stargazer viewer.

Every change to what is shown goes through :func:`transition`, which takes
the current :class:`SessionState` and one event and returns the next state
plus the side effect the application has to perform. Events are processed
one at a time on the UI loop, so the function never has to deal with
concurrency.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Union

from .config import SessionSettings
from .models import RepoSummary
from .series import DailySeries


class Lifecycle(enum.Enum):
    INIT = "init"
    READY = "ready"
    ERROR = "error"


class ViewMode(enum.Enum):
    GRAPH = 0
    TABLE = 1

    def next(self) -> "ViewMode":
        members = list(ViewMode)
        return members[(members.index(self) + 1) % len(members)]


class InputAction(enum.Enum):
    TOGGLE_ALL = "toggle_all"
    WIDEN = "widen"
    NARROW = "narrow"
    SWITCH_VIEW = "switch_view"
    TOGGLE_HELP = "toggle_help"
    QUIT = "quit"


class Effect(enum.Enum):
    NONE = "none"
    FETCH_STARGAZERS = "fetch_stargazers"
    QUIT = "quit"


@dataclass(slots=True, frozen=True)
class KeyBinding:
    keys: tuple[str, ...]
    action: InputAction
    label: str
    description: str


KEYMAP: tuple[KeyBinding, ...] = (
    KeyBinding(("a",), InputAction.TOGGLE_ALL, "a", "toggle all"),
    KeyBinding(("h", "left"), InputAction.WIDEN, "left", "before"),
    KeyBinding(("l", "right"), InputAction.NARROW, "right", "after"),
    KeyBinding(("tab", "shift+tab"), InputAction.SWITCH_VIEW, "tab", "section"),
    KeyBinding(("question_mark",), InputAction.TOGGLE_HELP, "?", "toggle help"),
    KeyBinding(("q", "ctrl+c"), InputAction.QUIT, "q", "quit"),
)

_KEY_ACTIONS = {key: binding.action for binding in KEYMAP for key in binding.keys}
_KEY_ACTIONS["?"] = InputAction.TOGGLE_HELP


def action_for_key(key: str) -> InputAction | None:
    """Map a key name such as ``"left"`` or ``"?"`` to its action."""

    return _KEY_ACTIONS.get(key)


@dataclass(slots=True, frozen=True)
class UserInput:
    action: InputAction


@dataclass(slots=True, frozen=True)
class RepoLoaded:
    summary: RepoSummary


@dataclass(slots=True, frozen=True)
class StargazersLoaded:
    series: DailySeries


@dataclass(slots=True, frozen=True)
class FetchFailed:
    error: Exception


@dataclass(slots=True, frozen=True)
class Resized:
    width: int
    height: int


Event = Union[UserInput, RepoLoaded, StargazersLoaded, FetchFailed, Resized]


@dataclass(slots=True, frozen=True)
class SessionState:
    name: str
    window_days: int = 30
    min_window_days: int = 30
    window_step: int = 30
    lifecycle: Lifecycle = Lifecycle.INIT
    view_mode: ViewMode = ViewMode.GRAPH
    show_all: bool = False
    show_help: bool = False
    error: Exception | None = None
    summary: RepoSummary | None = None
    series: DailySeries | None = field(default=None, compare=False)
    width: int = 0
    height: int = 0
    done: bool = False

    @classmethod
    def initial(cls, name: str, settings: SessionSettings | None = None) -> "SessionState":
        settings = settings or SessionSettings()
        return cls(
            name=name,
            window_days=settings.window_days,
            min_window_days=settings.window_days,
            window_step=settings.window_step,
        )

    @property
    def data_loaded(self) -> bool:
        return self.lifecycle is Lifecycle.READY and self.series is not None


@dataclass(slots=True, frozen=True)
class Step:
    state: SessionState
    effect: Effect = Effect.NONE


def transition(state: SessionState, event: Event) -> Step:
    """Apply ``event`` to ``state``."""

    if isinstance(event, UserInput):
        return _apply_input(state, event.action)
    if isinstance(event, Resized):
        return Step(replace(state, width=event.width, height=event.height))
    if isinstance(event, FetchFailed):
        return Step(replace(state, lifecycle=Lifecycle.ERROR, error=event.error))
    if state.lifecycle is Lifecycle.ERROR:
        # Late completions cannot revive a failed session.
        return Step(state)
    if isinstance(event, RepoLoaded):
        return Step(
            replace(state, summary=event.summary, lifecycle=Lifecycle.READY),
            Effect.FETCH_STARGAZERS,
        )
    if isinstance(event, StargazersLoaded):
        return Step(replace(state, series=dict(event.series)))
    raise TypeError(f"Unknown session event: {event!r}")


def _apply_input(state: SessionState, action: InputAction) -> Step:
    if action is InputAction.QUIT:
        return Step(replace(state, done=True), Effect.QUIT)
    if action is InputAction.TOGGLE_ALL:
        return Step(replace(state, show_all=not state.show_all))
    if action is InputAction.WIDEN:
        return Step(replace(state, window_days=state.window_days + state.window_step))
    if action is InputAction.NARROW:
        if state.window_days > state.min_window_days:
            narrowed = max(state.window_days - state.window_step, state.min_window_days)
            return Step(replace(state, window_days=narrowed))
        return Step(state)
    if action is InputAction.SWITCH_VIEW:
        return Step(replace(state, view_mode=state.view_mode.next()))
    if action is InputAction.TOGGLE_HELP:
        return Step(replace(state, show_help=not state.show_help))
    raise ValueError(f"Unhandled input action: {action!r}")


__all__ = [
    "Effect",
    "Event",
    "FetchFailed",
    "InputAction",
    "KEYMAP",
    "KeyBinding",
    "Lifecycle",
    "RepoLoaded",
    "Resized",
    "SessionState",
    "StargazersLoaded",
    "Step",
    "UserInput",
    "ViewMode",
    "action_for_key",
    "transition",
]
