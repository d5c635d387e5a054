"""Focus and modal state of the application shell.

``ShellState`` is immutable; every transition is a plain function returning
a new state, so the dispatch loop owns exactly one current value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ..widgets.screens import RenameOverlay


class FocusTarget(Enum):
    CONVERSATION_LIST = "conversation_list"
    CHAT_VIEW = "chat_view"
    INPUT_BOX = "input_box"

    def next(self) -> FocusTarget:
        order = list(FocusTarget)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> FocusTarget:
        order = list(FocusTarget)
        return order[(order.index(self) - 1) % len(order)]


# Alt/Ctrl + digit jumps straight to a panel.
FOCUS_SHORTCUTS: dict[str, FocusTarget] = {
    "1": FocusTarget.CONVERSATION_LIST,
    "2": FocusTarget.CHAT_VIEW,
    "3": FocusTarget.INPUT_BOX,
}


@dataclass(frozen=True)
class HelpModal:
    """The help overlay is showing."""


@dataclass(frozen=True)
class RenameModal:
    """Renaming ``target_id``; ``overlay`` holds the in-progress editor."""

    target_id: str
    overlay: RenameOverlay = field(compare=False)


Modal = Union[HelpModal, RenameModal]


@dataclass(frozen=True)
class ShellState:
    focus: FocusTarget = FocusTarget.CONVERSATION_LIST
    modal: Modal | None = None
    should_quit: bool = False

    @property
    def help_visible(self) -> bool:
        return isinstance(self.modal, HelpModal)

    @property
    def renaming(self) -> RenameModal | None:
        return self.modal if isinstance(self.modal, RenameModal) else None


# -- transitions ----------------------------------------------------------------


def focus_next(state: ShellState) -> ShellState:
    return replace(state, focus=state.focus.next())


def focus_previous(state: ShellState) -> ShellState:
    return replace(state, focus=state.focus.previous())


def focus_to(state: ShellState, target: FocusTarget) -> ShellState:
    return replace(state, focus=target)


def toggle_help(state: ShellState) -> ShellState:
    """Show help, or hide it if it is already showing.

    Opening help replaces an active rename; the rename is abandoned.
    """
    if state.help_visible:
        return replace(state, modal=None)
    return replace(state, modal=HelpModal())


def open_rename(state: ShellState, target_id: str, overlay: RenameOverlay) -> ShellState:
    return replace(state, modal=RenameModal(target_id, overlay))


def close_modal(state: ShellState) -> ShellState:
    return replace(state, modal=None)


def request_quit(state: ShellState) -> ShellState:
    return replace(state, should_quit=True)
