"""Typed events flowing through the event loop.

The class is the tag: dispatch code matches on ``isinstance`` rather than a
``kind`` field.  Terminal events (``Tick``, ``Key``, ``Mouse``, ``Resize``)
come from the multiplexer; every other event is produced by the shell or by
a background task, never by the terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import Union

from .core.conversation import ChatMessage, ConversationSummary


class Modifiers(Flag):
    NONE = 0
    SHIFT = auto()
    CTRL = auto()
    ALT = auto()


class MouseKind(Enum):
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    CLICK = "click"


# Terminal key names normalised to the codes the components match on.
_KEY_ALIASES: dict[str, str] = {
    "escape": "esc",
    "return": "enter",
    "pgup": "pageup",
    "pgdn": "pagedown",
    "page_up": "pageup",
    "page_down": "pagedown",
    "del": "delete",
    "backtab": "tab",
    "slash": "/",
    "space": " ",
    "minus": "-",
    "underscore": "_",
    "question_mark": "?",
}

_MODIFIER_NAMES: dict[str, Modifiers] = {
    "shift": Modifiers.SHIFT,
    "ctrl": Modifiers.CTRL,
    "control": Modifiers.CTRL,
    "alt": Modifiers.ALT,
    "meta": Modifiers.ALT,
}


# ─── Terminal events ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Tick:
    """Periodic heartbeat emitted when the tick interval elapses."""


@dataclass(frozen=True)
class Key:
    """A key press.  ``code`` is a key name (``enter``, ``pageup``...) or one character."""

    code: str
    modifiers: Modifiers = Modifiers.NONE

    @property
    def shift(self) -> bool:
        return bool(self.modifiers & Modifiers.SHIFT)

    @property
    def ctrl(self) -> bool:
        return bool(self.modifiers & Modifiers.CTRL)

    @property
    def alt(self) -> bool:
        return bool(self.modifiers & Modifiers.ALT)

    @property
    def is_char(self) -> bool:
        """True for a single printable character without Ctrl/Alt."""
        return (
            len(self.code) == 1
            and self.code.isprintable()
            and not (self.ctrl or self.alt)
        )

    @classmethod
    def parse(cls, spec: str) -> Key:
        """Build a key from a ``ctrl+q`` / ``shift+tab`` / ``G`` style spec."""
        if len(spec) == 1:
            return cls(spec)
        *mod_names, name = spec.split("+")
        if not name:
            name = "+"
        modifiers = Modifiers.NONE
        for mod in mod_names:
            modifiers |= _MODIFIER_NAMES.get(mod.lower(), Modifiers.NONE)
        if name == "backtab":
            modifiers |= Modifiers.SHIFT
        code = _KEY_ALIASES.get(name.lower(), name if len(name) == 1 else name.lower())
        return cls(code, modifiers)

    @classmethod
    def from_terminal(cls, key: str, character: str | None = None) -> Key:
        """Translate a Textual key name plus its printable character."""
        # Terminals without extended key reporting send Ctrl+J for Shift+Enter
        # and Ctrl+_ for Ctrl+/.
        if key in ("ctrl+j", "shift+enter"):
            return cls("enter", Modifiers.SHIFT)
        if key in ("ctrl+underscore", "ctrl+slash", "ctrl+/"):
            return cls("/", Modifiers.CTRL)
        parsed = cls.parse(key)
        if (
            character
            and len(character) == 1
            and character.isprintable()
            and not (parsed.ctrl or parsed.alt)
        ):
            return cls(character)
        return parsed


@dataclass(frozen=True)
class Mouse:
    kind: MouseKind
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


# ─── Application events ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SendMessage:
    """Submit *text* from the input box (chat message or slash command)."""

    text: str


@dataclass(frozen=True)
class MessageReceived:
    conversation_id: str
    text: str
    model: str | None = None
    cost: float | None = None


@dataclass(frozen=True)
class ConversationCreated:
    """A conversation was created; ``follow_up`` is a message to send into it."""

    conversation: ConversationSummary
    follow_up: str | None = None

    @property
    def conversation_id(self) -> str:
        return self.conversation.id


@dataclass(frozen=True)
class ConversationDeleted:
    conversation_id: str


@dataclass(frozen=True)
class ConversationRenamed:
    conversation_id: str
    title: str


@dataclass(frozen=True)
class ConversationsLoaded:
    conversations: tuple[ConversationSummary, ...]
    select_id: str | None = None


@dataclass(frozen=True)
class ConversationLoaded:
    conversation_id: str
    title: str
    messages: tuple[ChatMessage, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CommandCompleted:
    """Output of a slash command, shown as a system message."""

    text: str


@dataclass(frozen=True)
class CreateNewConversation:
    pass


@dataclass(frozen=True)
class SetProvider:
    name: str


@dataclass(frozen=True)
class SetModel:
    name: str


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Error:
    """A failed background operation.

    ``conversation_id`` is set when the failure belongs to a specific
    conversation (a provider reply) so stale errors can be discarded.
    ``operation`` names the task that failed (``create``, ``send``...).
    """

    text: str
    conversation_id: str | None = None
    operation: str | None = None


@dataclass(frozen=True)
class StatusUpdate:
    text: str


TerminalEvent = Union[Tick, Key, Mouse, Resize]

AppEvent = Union[
    SendMessage,
    MessageReceived,
    ConversationCreated,
    ConversationDeleted,
    ConversationRenamed,
    ConversationsLoaded,
    ConversationLoaded,
    CommandCompleted,
    CreateNewConversation,
    SetProvider,
    SetModel,
    Quit,
    Error,
    StatusUpdate,
]

Event = Union[TerminalEvent, AppEvent]

TERMINAL_EVENT_TYPES = (Tick, Key, Mouse, Resize)


def is_terminal_event(event: object) -> bool:
    return isinstance(event, TERMINAL_EVENT_TYPES)
