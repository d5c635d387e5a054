"""Line-editing state shared by the input box and the rename dialog."""

from __future__ import annotations

from ..events import Key


class EditorState:
    """Single-line ``(text, cursor)`` or multiline ``lines`` editing buffer.

    In multiline mode edits apply only to the last line.  Switching modes
    converts content: single -> multi seeds one line from the text, multi ->
    single joins the lines with single spaces.  The cursor ends up at the end.
    """

    def __init__(self, text: str = "", multiline: bool = False) -> None:
        self.multiline = False
        self.text = text
        self.cursor = len(text)
        self.lines: list[str] = []
        if multiline:
            self.toggle_mode()

    # -- content ----------------------------------------------------------------

    @property
    def content(self) -> str:
        if self.multiline:
            return "\n".join(self.lines)
        return self.text

    @property
    def is_blank(self) -> bool:
        return not self.content.strip()

    def set_text(self, text: str) -> None:
        """Replace the content with single-line *text*, cursor at the end."""
        self.multiline = False
        self.lines = []
        self.text = text
        self.cursor = len(text)

    def clear(self) -> None:
        self.text = ""
        self.cursor = 0
        self.lines = []

    def toggle_mode(self) -> None:
        if self.multiline:
            self.text = " ".join(self.lines)
            self.cursor = len(self.text)
            self.lines = []
            self.multiline = False
        else:
            self.lines = [self.text] if self.text else []
            self.text = ""
            self.cursor = 0
            self.multiline = True

    # -- single-line editing ----------------------------------------------------

    def insert(self, ch: str) -> None:
        if self.multiline:
            if self.lines:
                self.lines[-1] += ch
            else:
                self.lines.append(ch)
            return
        self.text = self.text[: self.cursor] + ch + self.text[self.cursor :]
        self.cursor += len(ch)

    def backspace(self) -> None:
        if self.multiline:
            if not self.lines:
                return
            if self.lines[-1] == "" and len(self.lines) > 1:
                self.lines.pop()
            else:
                self.lines[-1] = self.lines[-1][:-1]
            return
        if self.cursor > 0:
            self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
            self.cursor -= 1

    def delete(self) -> None:
        if not self.multiline and self.cursor < len(self.text):
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1 :]

    def move_left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def move_right(self) -> None:
        self.cursor = min(len(self.text), self.cursor + 1)

    def move_home(self) -> None:
        self.cursor = 0

    def move_end(self) -> None:
        self.cursor = len(self.text)

    def new_line(self) -> None:
        """Start a new (empty) last line.  Multiline mode only."""
        if self.multiline:
            self.lines.append("")

    def handle_key(self, key: Key) -> bool:
        """Apply a plain editing key.  Ctrl/Alt combinations are never consumed."""
        if key.ctrl or key.alt:
            return False
        if key.is_char:
            self.insert(key.code)
            return True
        if key.code == "backspace":
            self.backspace()
            return True
        if self.multiline:
            return False
        actions = {
            "delete": self.delete,
            "left": self.move_left,
            "right": self.move_right,
            "home": self.move_home,
            "end": self.move_end,
        }
        action = actions.get(key.code)
        if action is None:
            return False
        action()
        return True

    # -- viewport ---------------------------------------------------------------

    def scroll_start(self, width: int) -> int:
        """First visible character index so the cursor stays in a *width* window."""
        if width <= 0:
            return self.cursor
        if self.cursor >= width:
            return self.cursor - width + 1
        return 0

    def visible_text(self, width: int) -> tuple[str, int]:
        """Visible slice of the single-line text and the caret column in it."""
        start = self.scroll_start(width)
        return self.text[start : start + max(0, width)], self.cursor - start
