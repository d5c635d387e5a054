"""Tests for ChatView word wrap, scroll clamping and rendering."""

from __future__ import annotations

import re

import pytest

from valechat_tui.constants import CHAT_PLACEHOLDER, NO_CONVERSATION_TITLE, PAGE_SCROLL_LINES
from valechat_tui.core.conversation import ChatMessage
from valechat_tui.events import Key, Mouse, MouseKind
from valechat_tui.theme import DEFAULT_THEME
from valechat_tui.widgets import Canvas, ChatView, Rect, wrap_text
from valechat_tui.widgets.chat_view import format_timestamp

THEME = DEFAULT_THEME

# 12 rows with borders leaves a 10-line viewport.
VIEW_AREA = Rect(0, 0, 60, 12)
VIEW_HEIGHT = 10


def render(view: ChatView, area: Rect = VIEW_AREA) -> Canvas:
    canvas = Canvas(area.right, area.bottom)
    view.render(canvas, area, THEME)
    return canvas


def filled_view(count: int = 50) -> ChatView:
    view = ChatView(show_timestamps=False)
    for i in range(count):
        view.add_message(ChatMessage.user(f"message {i}"))
    return view


# -- wrap_text ---------------------------------------------------------------


class TestWrapText:
    def test_short_line_kept(self):
        assert wrap_text("hello world", 40) == ["hello world"]

    def test_greedy_wrap(self):
        assert wrap_text("aaa bbb ccc ddd", 10) == ["aaa bbb", "ccc ddd"]

    def test_long_word_on_its_own_line(self):
        word = "supercalifragilistic"
        assert wrap_text(f"a {word} b", 10) == ["a", word, "b"]

    def test_narrow_width_disables_wrap(self):
        text = "this would normally wrap"
        assert wrap_text(text, 9) == [text]

    def test_empty_text_gives_one_line(self):
        assert wrap_text("", 20) == [""]

    def test_blank_source_lines_preserved(self):
        assert wrap_text("one\n\nthree", 20) == ["one", "", "three"]

    @pytest.mark.parametrize("width", [10, 17, 33])
    def test_idempotent_on_wrapped_lines(self, width):
        text = "the quick brown fox jumps over the lazy dog " * 4
        wrapped = wrap_text(text, width)
        again = [part for line in wrapped for part in wrap_text(line, width)]
        assert again == wrapped


class TestFormatTimestamp:
    def test_hh_mm(self):
        assert re.fullmatch(r"\d\d:\d\d", format_timestamp(1_760_000_000.0))


# -- Scrolling ---------------------------------------------------------------


class TestScrolling:
    def test_auto_scroll_pins_to_bottom(self):
        view = filled_view()
        render(view)
        assert view.total_lines == 150
        assert view.offset == view.total_lines - VIEW_HEIGHT

    def test_scroll_up_disables_auto_scroll(self):
        view = filled_view()
        render(view)
        bottom = view.offset
        view.scroll_up()
        render(view)
        assert view.offset == bottom - 1
        assert view.auto_scroll is False

    def test_new_message_does_not_jump_when_scrolled_up(self):
        view = filled_view()
        render(view)
        view.scroll_up()
        render(view)
        offset = view.offset
        view.add_message(ChatMessage.user("late"))
        render(view)
        assert view.offset == offset

    def test_scroll_down_at_bottom_reenables_auto_scroll(self):
        view = filled_view()
        render(view)
        view.scroll_up()
        render(view)
        view.scroll_down()
        view.scroll_down()
        render(view)
        assert view.offset == view.total_lines - VIEW_HEIGHT
        assert view.auto_scroll is True

    def test_offset_beyond_content_clamped(self):
        view = filled_view()
        render(view)
        view.scroll_to_top()
        for _ in range(500):
            view.scroll_down()
        render(view)
        assert view.offset == view.total_lines - VIEW_HEIGHT

    def test_scroll_up_at_top_is_noop(self):
        view = filled_view()
        view.scroll_to_top()
        view.scroll_up()
        assert view.offset == 0

    def test_page_keys(self):
        view = filled_view()
        render(view)
        bottom = view.offset
        view.handle(Key("pageup"))
        render(view)
        assert view.offset == bottom - PAGE_SCROLL_LINES

    def test_home_end_keys(self):
        view = filled_view()
        render(view)
        view.handle(Key("g"))
        render(view)
        assert view.offset == 0
        view.handle(Key("G"))
        render(view)
        assert view.offset == view.total_lines - VIEW_HEIGHT

    def test_mouse_wheel(self):
        view = filled_view()
        render(view)
        bottom = view.offset
        assert view.handle(Mouse(MouseKind.SCROLL_UP)) is True
        assert view.offset == bottom - 1
        assert view.handle(Mouse(MouseKind.CLICK)) is False

    def test_unrelated_key_not_consumed(self):
        assert ChatView().handle(Key("x")) is False

    @pytest.mark.parametrize("height", [3, 5, 12, 40])
    def test_offset_always_in_range(self, height):
        view = filled_view(7)
        view.scroll_to_top()
        for _ in range(100):
            view.scroll_down()
        area = Rect(0, 0, 50, height)
        render(view, area)
        visible = height - 2
        assert 0 <= view.offset <= max(0, view.total_lines - visible)

    def test_fewer_lines_than_viewport(self):
        view = filled_view(1)
        render(view)
        assert view.offset == 0


# -- Rendering ---------------------------------------------------------------


class TestRendering:
    def test_empty_placeholder_and_title(self):
        canvas = render(ChatView())
        assert canvas.find(CHAT_PLACEHOLDER) is not None
        assert canvas.find(NO_CONVERSATION_TITLE) is not None

    def test_title_shown(self):
        view = ChatView()
        view.set_title("My Chat")
        assert render(view).find("My Chat") is not None

    def test_assistant_header_has_model_and_cost(self):
        view = ChatView(show_timestamps=False)
        view.add_message(ChatMessage.assistant("answer", model="gpt-4o", cost=0.0125))
        canvas = render(view)
        assert canvas.find("gpt-4o") is not None
        assert canvas.find("$0.0125") is not None

    def test_zero_cost_hidden(self):
        view = ChatView(show_timestamps=False)
        view.add_message(ChatMessage.assistant("answer", model="echo", cost=0.0))
        assert render(view).find("$") is None

    def test_body_indented_and_wrapped(self):
        view = ChatView(show_timestamps=False)
        view.add_message(ChatMessage.user("word " * 30))
        canvas = render(view, Rect(0, 0, 30, 20))
        body_rows = [line for line in canvas.plain_lines() if line.startswith("│  word")]
        assert len(body_rows) > 1

    def test_timestamps_toggle(self):
        view = ChatView(show_timestamps=True)
        view.add_message(ChatMessage.system("note"))
        header = render(view).row_text(1)
        assert re.search(r"\d\d:\d\d", header)

    def test_reset_clears(self):
        view = filled_view(3)
        view.set_title("Busy")
        view.reset()
        assert view.messages == []
        assert view.title == NO_CONVERSATION_TITLE
