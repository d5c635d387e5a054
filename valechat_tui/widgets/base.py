"""Cell-grid canvas and the component interface shared by all panes.

Components paint into a ``Canvas`` (a width x height grid of styled cells)
and the host converts the finished frame into one Rich ``Text``.  The
canvas offers what a terminal backend offers: repaint a rectangle, draw a
styled run of text, and place the caret.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from rich.cells import get_character_cell_size
from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from ..events import Event
    from ..theme import Theme

CURSOR_STYLE = Style(reverse=True)

# Box-drawing characters: (top-left, top-right, bottom-left, bottom-right, horizontal, vertical)
BORDER_PLAIN = ("┌", "┐", "└", "┘", "─", "│")
BORDER_ROUNDED = ("╭", "╮", "╰", "╯", "─", "│")


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def inner(self, margin: int = 1) -> Rect:
        return Rect(
            self.x + margin,
            self.y + margin,
            max(0, self.width - 2 * margin),
            max(0, self.height - 2 * margin),
        )

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom


def centered_rect(percent_x: int, percent_y: int, area: Rect) -> Rect:
    """Rectangle covering the given percentages of *area*, centred in it."""
    width = area.width * percent_x // 100
    height = area.height * percent_y // 100
    return Rect(
        area.x + (area.width - width) // 2,
        area.y + (area.height - height) // 2,
        width,
        height,
    )


class Canvas:
    """A width x height grid of characters with one Rich style per cell."""

    def __init__(self, width: int, height: int, style: Style | None = None) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.base_style = style or Style()
        # "" marks the right half of a double-width character.
        self._chars = [[" "] * self.width for _ in range(self.height)]
        self._styles = [[self.base_style] * self.width for _ in range(self.height)]
        self.cursor: tuple[int, int] | None = None

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    # -- painting ---------------------------------------------------------------

    def clear(self, area: Rect, style: Style | None = None) -> None:
        """Repaint *area* with blanks in *style*."""
        fill = style or self.base_style
        for y in range(max(0, area.y), min(self.height, area.bottom)):
            for x in range(max(0, area.x), min(self.width, area.right)):
                self._chars[y][x] = " "
                self._styles[y][x] = fill

    def draw_text(
        self,
        x: int,
        y: int,
        text: str,
        style: Style | None = None,
        max_width: int | None = None,
    ) -> int:
        """Draw *text* starting at (x, y), clipped to *max_width* cells.

        Returns the number of cells written.
        """
        if not 0 <= y < self.height:
            return 0
        limit = self.width if max_width is None else min(self.width, x + max_width)
        col = x
        for ch in text:
            if ch in "\r\n":
                break
            size = get_character_cell_size(ch)
            if size == 0:
                # Combining marks and variation selectors attach to the previous cell.
                if x < col <= self.width and col > 0:
                    prev = col - 1
                    while prev > 0 and self._chars[y][prev] == "":
                        prev -= 1
                    self._chars[y][prev] += ch
                continue
            if col + size > limit:
                break
            if col >= 0:
                self._put(col, y, ch, style)
                if size == 2:
                    self._chars[y][col + 1] = ""
                    self._styles[y][col + 1] = self._styles[y][col]
            col += size
        return max(0, col - x)

    def _put(self, x: int, y: int, ch: str, style: Style | None) -> None:
        row = self._chars[y]
        # Overwriting half of a wide character blanks the other half.
        if row[x] == "" and x > 0:
            row[x - 1] = " "
        if x + 1 < self.width and row[x + 1] == "" and get_character_cell_size(row[x][:1] or " ") == 2:
            row[x + 1] = " "
        row[x] = ch
        base = self._styles[y][x]
        self._styles[y][x] = base + style if style is not None else base

    def draw_box(
        self,
        area: Rect,
        style: Style | None = None,
        title: str = "",
        title_style: Style | None = None,
        border: tuple[str, ...] = BORDER_PLAIN,
    ) -> None:
        """Draw a border around *area* with an optional title on the top edge."""
        if area.width < 2 or area.height < 2:
            return
        tl, tr, bl, br, horiz, vert = border
        inner_width = area.width - 2
        self.draw_text(area.x, area.y, tl + horiz * inner_width + tr, style)
        self.draw_text(area.x, area.bottom - 1, bl + horiz * inner_width + br, style)
        for y in range(area.y + 1, area.bottom - 1):
            self.draw_text(area.x, y, vert, style)
            self.draw_text(area.right - 1, y, vert, style)
        if title:
            self.draw_text(area.x + 1, area.y, title, title_style or style, inner_width)

    def set_cursor(self, x: int, y: int) -> None:
        """Place the caret; it is drawn as a reverse-video cell."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.cursor = (x, y)

    # -- output -----------------------------------------------------------------

    def row_text(self, y: int) -> str:
        return "".join(self._chars[y])

    def plain_lines(self) -> list[str]:
        return [self.row_text(y) for y in range(self.height)]

    def find(self, needle: str) -> tuple[int, int] | None:
        """(x, y) of the first row containing *needle*, by string index."""
        for y, line in enumerate(self.plain_lines()):
            index = line.find(needle)
            if index >= 0:
                return index, y
        return None

    def style_at(self, x: int, y: int) -> Style:
        return self._styles[y][x]

    def to_text(self) -> Text:
        """Render the grid as one Rich ``Text``, rows separated by newlines."""
        text = Text(no_wrap=True, overflow="crop", end="")
        for y in range(self.height):
            if y:
                text.append("\n")
            run = ""
            run_style: Style | None = None
            for x in range(self.width):
                ch = self._chars[y][x]
                if ch == "":
                    continue
                style = self._styles[y][x]
                if self.cursor == (x, y):
                    style = style + CURSOR_STYLE
                if style != run_style:
                    if run:
                        text.append(run, run_style)
                    run, run_style = ch, style
                else:
                    run += ch
            if run:
                text.append(run, run_style)
        return text


class Component(Protocol):
    """A pane that paints itself and reacts to events.

    ``handle`` returns ``True`` when the event was consumed, which stops the
    shell from applying its own fallback for that key.
    """

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = False) -> None: ...

    def handle(self, event: Event) -> bool: ...
