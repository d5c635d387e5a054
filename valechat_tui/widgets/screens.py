"""Overlays drawn on top of the panels: keyboard help and the rename dialog."""

from __future__ import annotations

from rich.style import Style

from ..constants import HELP_SECTIONS, HELP_TITLE, RENAME_PLACEHOLDER, RENAME_TITLE
from ..events import Event, Key, Mouse, MouseKind
from ..theme import Theme
from .base import BORDER_ROUNDED, Canvas, Rect, centered_rect
from .editor import EditorState


class HelpOverlay:
    """Keyboard shortcut reference.

    While visible it swallows every key and mouse event.  Esc, F1, Ctrl+/
    and ``q`` close it; the arrow and page keys scroll its content.
    """

    def __init__(self, sections: tuple[tuple[str, str], ...] = HELP_SECTIONS) -> None:
        self.sections = sections
        self.offset = 0
        self._page = 1

    @staticmethod
    def is_close_key(key: Key) -> bool:
        if key.code in ("esc", "f1"):
            return True
        if key.code == "/" and key.ctrl:
            return True
        return key.code == "q" and not (key.ctrl or key.alt)

    def reset(self) -> None:
        self.offset = 0

    def _scroll(self, delta: int) -> None:
        max_offset = max(0, len(self.sections) - self._page)
        self.offset = min(max(0, self.offset + delta), max_offset)

    def handle(self, event: Event) -> bool:
        if isinstance(event, Mouse):
            if event.kind is MouseKind.SCROLL_UP:
                self._scroll(-1)
            elif event.kind is MouseKind.SCROLL_DOWN:
                self._scroll(1)
            return True
        if isinstance(event, Key):
            steps = {"up": -1, "k": -1, "down": 1, "j": 1}
            if event.code in steps:
                self._scroll(steps[event.code])
            elif event.code == "pageup":
                self._scroll(-self._page)
            elif event.code == "pagedown":
                self._scroll(self._page)
            return True
        return False

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = True) -> None:
        popup = centered_rect(60, 70, area)
        if popup.width < 4 or popup.height < 3:
            return
        canvas.clear(popup, theme.normal())
        canvas.draw_box(popup, theme.accent_style(), HELP_TITLE, theme.accent_style())
        inner = popup.inner()
        self._page = max(1, inner.height)
        self._scroll(0)

        section_style = theme.accent_style() + Style(bold=True)
        for row, (keys, description) in enumerate(
            self.sections[self.offset : self.offset + inner.height]
        ):
            y = inner.y + row
            if not keys:
                continue
            if not description:
                canvas.draw_text(inner.x, y, keys, section_style, inner.width)
                continue
            x = inner.x
            x += canvas.draw_text(x, y, keys, theme.highlight_style(), inner.right - x)
            x += canvas.draw_text(x, y, ": ", theme.normal(), inner.right - x)
            canvas.draw_text(x, y, description, theme.normal(), inner.right - x)


class RenameOverlay:
    """Single-line dialog for a new conversation title, over the sidebar."""

    def __init__(self, current_title: str = "") -> None:
        self.editor = EditorState(current_title)
        self.error: str | None = None

    @property
    def value(self) -> str:
        return self.editor.text.strip()

    def set_error(self, message: str | None) -> None:
        self.error = message

    def handle(self, event: Event) -> bool:
        """Edit the title.  Enter and Esc are handled by the shell."""
        if not isinstance(event, Key):
            return False
        handled = self.editor.handle_key(event)
        if handled:
            self.error = None
        return handled

    @staticmethod
    def dialog_area(area: Rect) -> Rect:
        return Rect(area.x + 2, area.y + area.height // 2, max(0, area.width - 4), 3)

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = True) -> None:
        dialog = self.dialog_area(area)
        if dialog.width < 4 or dialog.bottom > canvas.height:
            return
        canvas.clear(dialog, theme.normal())
        canvas.draw_box(dialog, theme.accent_style(), RENAME_TITLE, theme.accent_style(), BORDER_ROUNDED)
        inner = dialog.inner()
        if self.editor.text:
            visible, caret = self.editor.visible_text(inner.width)
            canvas.draw_text(inner.x, inner.y, visible, theme.normal(), inner.width)
        else:
            caret = 0
            canvas.draw_text(inner.x, inner.y, RENAME_PLACEHOLDER, theme.secondary_style(), inner.width)
        canvas.set_cursor(inner.x + caret, inner.y)
        if self.error and dialog.bottom < area.bottom:
            canvas.clear(Rect(dialog.x, dialog.bottom, dialog.width, 1), theme.normal())
            canvas.draw_text(dialog.x + 1, dialog.bottom, self.error, theme.error_style(), dialog.width - 2)
