"""Selectable list widgets: a generic cursor list and the conversation sidebar."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Generic, TypeVar

from rich.style import Style

from ..constants import NO_CONVERSATIONS_TEXT
from ..core.conversation import ConversationSummary
from ..events import Event, Key, Mouse, MouseKind
from ..theme import Theme
from .base import Canvas, Rect

T = TypeVar("T")

HIGHLIGHT_SYMBOL = "► "

Segment = tuple[str, Style]


class SelectableList(Generic[T]):
    """Items with a wrap-around highlight and a scroll window that follows it."""

    title = ""
    empty_text = ""

    def __init__(self, items: list[T] | None = None) -> None:
        self.items: list[T] = list(items or [])
        self.selected: int | None = 0 if self.items else None
        self.top = 0

    def __len__(self) -> int:
        return len(self.items)

    @property
    def selected_item(self) -> T | None:
        if self.selected is None or not 0 <= self.selected < len(self.items):
            return None
        return self.items[self.selected]

    def set_items(self, items: list[T]) -> None:
        """Replace the items, keeping the highlight index where possible."""
        previous = self.selected or 0
        self.items = list(items)
        self.selected = min(previous, len(self.items) - 1) if self.items else None

    def insert_front(self, item: T) -> None:
        self.items.insert(0, item)
        if len(self.items) == 1:
            self.selected = 0
        elif self.selected is not None:
            self.selected += 1

    def select_index(self, index: int) -> None:
        if 0 <= index < len(self.items):
            self.selected = index

    def select_where(self, predicate: Callable[[T], bool]) -> bool:
        for index, item in enumerate(self.items):
            if predicate(item):
                self.selected = index
                return True
        return False

    def next(self) -> None:
        if not self.items:
            return
        if self.selected is None or self.selected >= len(self.items) - 1:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self) -> None:
        if not self.items:
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self.items) - 1
        else:
            self.selected -= 1

    def handle(self, event: Event) -> bool:
        if isinstance(event, Mouse):
            if event.kind is MouseKind.SCROLL_UP:
                self.previous()
                return True
            if event.kind is MouseKind.SCROLL_DOWN:
                self.next()
                return True
            return False
        if not isinstance(event, Key) or event.ctrl or event.alt:
            return False
        if event.code in ("up", "k"):
            self.previous()
            return True
        if event.code in ("down", "j"):
            self.next()
            return True
        return False

    # -- rendering --------------------------------------------------------------

    def visible_range(self, height: int) -> range:
        """Indices shown in a window of *height* rows, moving ``top`` as needed."""
        if height <= 0 or not self.items:
            return range(0)
        self.top = min(self.top, max(0, len(self.items) - height))
        if self.selected is not None:
            if self.selected < self.top:
                self.top = self.selected
            elif self.selected >= self.top + height:
                self.top = self.selected - height + 1
        return range(self.top, min(len(self.items), self.top + height))

    def format_item(self, item: T, width: int, theme: Theme) -> list[Segment]:
        return [(str(item), theme.normal())]

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = False) -> None:
        canvas.clear(area, theme.normal())
        canvas.draw_box(area, theme.border_style(focused), self.title, theme.border_style(focused))
        inner = area.inner()
        if inner.is_empty:
            return
        if not self.items:
            if self.empty_text:
                canvas.draw_text(inner.x, inner.y, self.empty_text, theme.secondary_style(), inner.width)
            return

        body_width = max(0, inner.width - len(HIGHLIGHT_SYMBOL))
        for row, index in enumerate(self.visible_range(inner.height)):
            y = inner.y + row
            highlighted = index == self.selected
            x = inner.x
            if highlighted:
                canvas.clear(Rect(inner.x, y, inner.width, 1), theme.selected())
                x += canvas.draw_text(x, y, HIGHLIGHT_SYMBOL, theme.selected(), inner.width)
            else:
                x += len(HIGHLIGHT_SYMBOL)
            for text, style in self.format_item(self.items[index], body_width, theme):
                if highlighted:
                    style = theme.selected()
                x += canvas.draw_text(x, y, text, style, inner.right - x)


def format_time_ago(timestamp: float, now: float | None = None) -> str:
    diff = int((time.time() if now is None else now) - timestamp)
    if diff < 60:
        return "now"
    if diff < 3600:
        return f"{diff // 60}m"
    if diff < 86400:
        return f"{diff // 3600}h"
    return f"{diff // 86400}d"


def format_list_cost(cost: float) -> str:
    if cost < 0.01:
        return "<$0.01"
    return f"${cost:.2f}"


class ConversationList(SelectableList[ConversationSummary]):
    """Sidebar of conversations, newest first as returned by the repository.

    Enter, n, d/Delete and r are not consumed here; the shell maps them to
    load, create, delete and rename.
    """

    title = " Conversations "
    empty_text = NO_CONVERSATIONS_TEXT

    @property
    def selected_conversation(self) -> ConversationSummary | None:
        return self.selected_item

    def select_conversation(self, conversation_id: str) -> bool:
        return self.select_where(lambda conv: conv.id == conversation_id)

    def find(self, conversation_id: str) -> ConversationSummary | None:
        for conv in self.items:
            if conv.id == conversation_id:
                return conv
        return None

    def format_item(self, item: ConversationSummary, width: int, theme: Theme) -> list[Segment]:
        # Room for " (count) 12m $0.00" after the title.
        max_title = max(0, width - 15)
        title = item.title
        if len(title) > max_title:
            title = title[: max(0, max_title - 3)] + "..."
        plain = Style()
        return [
            (title, theme.normal()),
            (" ", plain),
            (f"({item.message_count})", theme.secondary_style()),
            (" ", plain),
            (format_time_ago(item.updated_at), theme.secondary_style()),
            (" ", plain),
            (format_list_cost(item.total_cost), theme.warning_style()),
        ]
