"""Message input box with single-line and multiline modes."""

from __future__ import annotations

from ..constants import (
    INPUT_HEIGHT,
    INPUT_MULTILINE_TITLE,
    INPUT_PLACEHOLDER,
    INPUT_TITLE,
    MAX_INPUT_LINES,
)
from ..events import Event, Key
from ..theme import Theme
from .base import Canvas, Rect
from .editor import EditorState


class InputBox:
    """Chat input with mode-dependent Enter handling.

    Single-line mode:
        Enter -> not consumed (the shell submits), Shift+Enter -> switch to
        multiline mode.  The visible window scrolls to keep the cursor in view.

    Multiline mode:
        Enter -> not consumed (submit), Shift+Enter -> new line.  Edits apply
        to the last line only.

    Alt+M toggles the mode in both modes.  Other Ctrl/Alt combinations are
    left for the global hotkeys.
    """

    def __init__(self, placeholder: str = INPUT_PLACEHOLDER) -> None:
        self.editor = EditorState()
        self.placeholder = placeholder

    @property
    def multiline(self) -> bool:
        return self.editor.multiline

    @property
    def content(self) -> str:
        return self.editor.content

    def is_blank(self) -> bool:
        return self.editor.is_blank

    def clear(self) -> None:
        self.editor.clear()

    def toggle_multiline_mode(self) -> None:
        self.editor.toggle_mode()

    def take_content(self) -> str:
        """Return the content and clear the editor."""
        content = self.editor.content
        self.editor.clear()
        return content

    def preferred_height(self) -> int:
        """Rows wanted by the box, borders included."""
        if not self.multiline:
            return INPUT_HEIGHT
        return max(INPUT_HEIGHT, min(len(self.editor.lines), MAX_INPUT_LINES) + 2)

    # -- events -----------------------------------------------------------------

    def handle(self, event: Event) -> bool:
        if not isinstance(event, Key):
            return False
        if event.alt and event.code.lower() == "m":
            self.toggle_multiline_mode()
            return True
        if event.code == "enter":
            if not event.shift:
                return False
            if self.multiline:
                self.editor.new_line()
            else:
                self.toggle_multiline_mode()
            return True
        if event.ctrl or event.alt:
            return False
        if self.editor.handle_key(event):
            return True
        # Single-line mode swallows the remaining plain keys.
        return not self.multiline

    # -- rendering --------------------------------------------------------------

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = False) -> None:
        title = INPUT_MULTILINE_TITLE if self.multiline else INPUT_TITLE
        canvas.clear(area, theme.normal())
        canvas.draw_box(area, theme.border_style(focused), title, theme.border_style(focused))
        inner = area.inner()
        if inner.is_empty:
            return

        if not self.editor.content and not self.editor.lines:
            canvas.draw_text(inner.x, inner.y, self.placeholder, theme.secondary_style(), inner.width)
            if focused:
                canvas.set_cursor(inner.x, inner.y)
            return

        if self.multiline:
            self._render_lines(canvas, inner, theme, focused)
            return

        visible, caret = self.editor.visible_text(inner.width)
        canvas.draw_text(inner.x, inner.y, visible, theme.normal(), inner.width)
        if focused:
            canvas.set_cursor(inner.x + caret, inner.y)

    def _render_lines(self, canvas: Canvas, inner: Rect, theme: Theme, focused: bool) -> None:
        rows: list[str] = []
        for line in self.editor.lines:
            if not line:
                rows.append("")
                continue
            rows.extend(line[i : i + inner.width] for i in range(0, len(line), inner.width))
        # Keep the line being edited in view.
        rows = rows[-inner.height :]
        for offset, row in enumerate(rows):
            canvas.draw_text(inner.x, inner.y + offset, row, theme.normal(), inner.width)
        if focused and rows:
            last = rows[-1]
            column = len(last) if len(last) < inner.width else inner.width - 1
            canvas.set_cursor(inner.x + column, inner.y + len(rows) - 1)
