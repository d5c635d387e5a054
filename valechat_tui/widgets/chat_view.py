"""Scrollable transcript of the active conversation."""

from __future__ import annotations

import sys
from datetime import datetime

from rich.style import Style

from ..constants import (
    CHAT_PLACEHOLDER,
    MIN_WRAP_WIDTH,
    NO_CONVERSATION_TITLE,
    PAGE_SCROLL_LINES,
)
from ..core.conversation import ChatMessage, MessageRole
from ..events import Event, Key, Mouse, MouseKind
from ..theme import Theme
from .base import Canvas, Rect

# Offset meaning "past the end"; clamped to the real bottom on the next render.
SCROLL_TO_END = sys.maxsize

Segment = tuple[str, Style]


def wrap_text(text: str, width: int) -> list[str]:
    """Greedy word wrap of *text* to lines of at most *width* characters.

    Source lines that already fit are kept verbatim.  A word longer than
    *width* is placed on its own line unsplit.  Widths below
    ``MIN_WRAP_WIDTH`` disable wrapping.  Always returns at least one line.
    """
    if width < MIN_WRAP_WIDTH:
        return [text]

    lines: list[str] = []
    for line in text.splitlines():
        if len(line) <= width:
            lines.append(line)
            continue
        current = ""
        for word in line.split():
            if len(current) + len(word) < width:
                current = f"{current} {word}" if current else word
            else:
                if current:
                    lines.append(current)
                current = word
        if current:
            lines.append(current)
    return lines or [""]


def format_timestamp(timestamp: float) -> str:
    """``HH:MM`` in local time."""
    try:
        return datetime.fromtimestamp(timestamp).strftime("%H:%M")
    except (OverflowError, OSError, ValueError):
        return "--:--"


def format_cost(cost: float) -> str:
    return f"${cost:.4f}"


class ChatView:
    """Message list with word wrap and auto-scroll.

    ``offset`` is the index of the first visible wrapped line.  While
    ``auto_scroll`` is on, every render pins the view to the newest line.
    """

    def __init__(self, show_timestamps: bool = True) -> None:
        self.messages: list[ChatMessage] = []
        self.title = NO_CONVERSATION_TITLE
        self.offset = 0
        self.auto_scroll = True
        self.show_timestamps = show_timestamps
        # Size of the last rendered viewport, for callers that need it.
        self.viewport_height = 0
        self.total_lines = 0

    # -- content ----------------------------------------------------------------

    def set_title(self, title: str) -> None:
        self.title = title

    def set_messages(self, messages: list[ChatMessage]) -> None:
        self.messages = list(messages)
        self.scroll_to_bottom()

    def add_message(self, message: ChatMessage) -> None:
        self.messages.append(message)
        if self.auto_scroll:
            self.scroll_to_bottom()

    def clear_messages(self) -> None:
        self.messages = []
        self.offset = 0

    def reset(self) -> None:
        """Back to the empty, no-conversation state."""
        self.clear_messages()
        self.title = NO_CONVERSATION_TITLE
        self.auto_scroll = True

    # -- scrolling --------------------------------------------------------------

    def scroll_up(self) -> None:
        if self.offset > 0:
            self.offset -= 1
            self.auto_scroll = False

    def scroll_down(self) -> None:
        self.offset += 1
        self.auto_scroll = False

    def scroll_to_top(self) -> None:
        self.offset = 0
        self.auto_scroll = False

    def scroll_to_bottom(self) -> None:
        self.offset = SCROLL_TO_END
        self.auto_scroll = True

    def page_up(self) -> None:
        for _ in range(PAGE_SCROLL_LINES):
            self.scroll_up()

    def page_down(self) -> None:
        for _ in range(PAGE_SCROLL_LINES):
            self.scroll_down()

    def clamp_scroll(self, total_lines: int, height: int) -> None:
        """Bring ``offset`` back into ``[0, max(0, total_lines - height)]``."""
        max_scroll = max(0, total_lines - height)
        if self.auto_scroll or self.offset >= total_lines:
            self.offset = max_scroll
        elif self.offset + height > total_lines:
            self.offset = max_scroll
            self.auto_scroll = True

    # -- events -----------------------------------------------------------------

    def handle(self, event: Event) -> bool:
        if isinstance(event, Mouse):
            if event.kind is MouseKind.SCROLL_UP:
                self.scroll_up()
                return True
            if event.kind is MouseKind.SCROLL_DOWN:
                self.scroll_down()
                return True
            return False
        if not isinstance(event, Key) or event.ctrl or event.alt:
            return False
        actions = {
            "up": self.scroll_up,
            "k": self.scroll_up,
            "down": self.scroll_down,
            "j": self.scroll_down,
            "home": self.scroll_to_top,
            "g": self.scroll_to_top,
            "end": self.scroll_to_bottom,
            "G": self.scroll_to_bottom,
            "pageup": self.page_up,
            "pagedown": self.page_down,
        }
        action = actions.get(event.code)
        if action is None:
            return False
        action()
        return True

    # -- rendering --------------------------------------------------------------

    def build_lines(self, content_width: int, theme: Theme) -> list[list[Segment]]:
        """Header, indented body and a blank separator for every message."""
        role_styles = {
            MessageRole.USER: theme.accent_style(),
            MessageRole.ASSISTANT: theme.success_style(),
            MessageRole.SYSTEM: theme.warning_style(),
        }
        plain = Style()
        lines: list[list[Segment]] = []
        for message in self.messages:
            header: list[Segment] = [(message.role.glyph, role_styles[message.role])]
            if self.show_timestamps:
                header += [(" ", plain), (format_timestamp(message.timestamp), theme.secondary_style())]
            if message.role is MessageRole.ASSISTANT:
                if message.model:
                    header += [(" | ", plain), (message.model, theme.secondary_style())]
                if message.cost is not None and message.cost > 0:
                    header += [(" | ", plain), (format_cost(message.cost), theme.warning_style())]
            lines.append(header)
            for body in wrap_text(message.text, content_width - 2):
                lines.append([("  ", plain), (body, theme.normal())])
            lines.append([])
        return lines

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = False) -> None:
        canvas.clear(area, theme.normal())
        canvas.draw_box(area, theme.border_style(focused), f" {self.title} ", theme.highlight_style())
        inner = area.inner()
        self.viewport_height = inner.height

        if not self.messages:
            self.offset = 0
            self.total_lines = 0
            if inner.height > 0:
                x = inner.x + max(0, (inner.width - len(CHAT_PLACEHOLDER)) // 2)
                canvas.draw_text(x, inner.y, CHAT_PLACEHOLDER, theme.secondary_style(), inner.right - x)
            return

        lines = self.build_lines(max(0, area.width - 4), theme)
        self.total_lines = len(lines)
        self.clamp_scroll(len(lines), inner.height)

        for row, segments in enumerate(lines[self.offset : self.offset + inner.height]):
            x = inner.x
            for text, style in segments:
                x += canvas.draw_text(x, inner.y + row, text, style, inner.right - x)
