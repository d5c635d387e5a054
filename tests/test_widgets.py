"""Tests for the canvas, the editor, the input box, lists, overlays and status bar."""

from __future__ import annotations

from valechat_tui.constants import INPUT_HEIGHT, MAX_INPUT_LINES, NO_CONVERSATIONS_TEXT
from valechat_tui.core.conversation import ConversationSummary
from valechat_tui.events import Key, Modifiers, Mouse, MouseKind
from valechat_tui.theme import DEFAULT_THEME
from valechat_tui.widgets import (
    Canvas,
    ConnectionStatus,
    ConversationList,
    EditorState,
    HelpOverlay,
    InputBox,
    KeyHint,
    Rect,
    RenameOverlay,
    SelectableList,
    StatusBar,
    centered_rect,
)
from valechat_tui.widgets.conversation_list import format_list_cost, format_time_ago

THEME = DEFAULT_THEME


def shift_enter() -> Key:
    return Key("enter", Modifiers.SHIFT)


# -- Canvas ------------------------------------------------------------------


class TestCanvas:
    def test_draw_text_returns_cells_written(self):
        canvas = Canvas(10, 2)
        assert canvas.draw_text(0, 0, "hello") == 5
        assert canvas.row_text(0) == "hello     "

    def test_draw_text_clipped_to_max_width(self):
        canvas = Canvas(10, 1)
        assert canvas.draw_text(2, 0, "abcdef", max_width=3) == 3
        assert canvas.row_text(0) == "  abc     "

    def test_draw_text_outside_rows_ignored(self):
        canvas = Canvas(5, 1)
        assert canvas.draw_text(0, 3, "x") == 0

    def test_wide_characters_take_two_cells(self):
        canvas = Canvas(6, 1)
        assert canvas.draw_text(0, 0, "日本") == 4

    def test_wide_character_not_split_at_edge(self):
        canvas = Canvas(3, 1)
        assert canvas.draw_text(0, 0, "a日本") == 3

    def test_draw_box_with_title(self):
        canvas = Canvas(12, 3)
        canvas.draw_box(Rect(0, 0, 12, 3), title=" T ")
        assert canvas.row_text(0) == "┌ T ───────┐"
        assert canvas.row_text(1) == "│          │"
        assert canvas.row_text(2) == "└──────────┘"

    def test_find(self):
        canvas = Canvas(10, 3)
        canvas.draw_text(3, 2, "needle")
        assert canvas.find("needle") == (3, 2)
        assert canvas.find("missing") is None

    def test_clear_repaints_area(self):
        canvas = Canvas(4, 1)
        canvas.draw_text(0, 0, "abcd")
        canvas.clear(Rect(1, 0, 2, 1))
        assert canvas.row_text(0) == "a  d"

    def test_cursor_rendered_reverse(self):
        canvas = Canvas(3, 1)
        canvas.set_cursor(1, 0)
        text = canvas.to_text()
        assert text.plain == "   "
        assert any(span.style.reverse for span in text.spans if span.start <= 1 < span.end)

    def test_to_text_joins_rows(self):
        canvas = Canvas(2, 2)
        canvas.draw_text(0, 0, "ab")
        canvas.draw_text(0, 1, "cd")
        assert canvas.to_text().plain == "ab\ncd"


class TestRect:
    def test_inner(self):
        assert Rect(0, 0, 10, 5).inner() == Rect(1, 1, 8, 3)

    def test_inner_never_negative(self):
        assert Rect(0, 0, 1, 1).inner().is_empty

    def test_contains(self):
        area = Rect(2, 2, 3, 3)
        assert area.contains(2, 2)
        assert not area.contains(5, 2)

    def test_centered_rect(self):
        assert centered_rect(50, 50, Rect(0, 0, 100, 40)) == Rect(25, 10, 50, 20)


# -- EditorState -------------------------------------------------------------


class TestEditorState:
    def test_insert_at_cursor(self):
        editor = EditorState("ac")
        editor.move_left()
        editor.insert("b")
        assert editor.text == "abc"
        assert editor.cursor == 2

    def test_backspace_and_delete(self):
        editor = EditorState("abc")
        editor.backspace()
        assert editor.text == "ab"
        editor.move_home()
        editor.delete()
        assert editor.text == "b"

    def test_backspace_at_start_is_noop(self):
        editor = EditorState("abc")
        editor.move_home()
        editor.backspace()
        assert editor.text == "abc"

    def test_cursor_bounds(self):
        editor = EditorState("ab")
        editor.move_right()
        assert editor.cursor == 2
        editor.move_home()
        editor.move_left()
        assert editor.cursor == 0

    def test_toggle_to_multiline_seeds_one_line(self):
        editor = EditorState("hello")
        editor.toggle_mode()
        assert editor.multiline
        assert editor.lines == ["hello"]
        assert editor.content == "hello"

    def test_toggle_back_joins_with_spaces(self):
        editor = EditorState("one", multiline=True)
        editor.new_line()
        editor.insert("two")
        editor.toggle_mode()
        assert editor.text == "one two"
        assert editor.cursor == len("one two")

    def test_double_toggle_restores_text(self):
        editor = EditorState("no newlines here")
        editor.toggle_mode()
        editor.toggle_mode()
        assert editor.text == "no newlines here"
        assert "\n" not in editor.content

    def test_multiline_edits_last_line(self):
        editor = EditorState(multiline=True)
        editor.insert("a")
        editor.new_line()
        editor.insert("b")
        editor.backspace()
        editor.backspace()
        assert editor.lines == ["a"]

    def test_handle_key_ignores_ctrl(self):
        editor = EditorState()
        assert editor.handle_key(Key("a", Modifiers.CTRL)) is False
        assert editor.text == ""

    def test_visible_text_scrolls_with_cursor(self):
        editor = EditorState("abcdefghij")
        visible, caret = editor.visible_text(5)
        assert visible == "ghij"
        assert caret == 4
        editor.move_home()
        assert editor.visible_text(5) == ("abcde", 0)


# -- InputBox ----------------------------------------------------------------


class TestInputBox:
    def test_typing_and_blank(self):
        box = InputBox()
        assert box.is_blank()
        box.handle(Key("h"))
        box.handle(Key("i"))
        assert box.content == "hi"

    def test_enter_not_consumed(self):
        box = InputBox()
        box.handle(Key("x"))
        assert box.handle(Key("enter")) is False

    def test_shift_enter_switches_to_multiline(self):
        box = InputBox()
        box.handle(Key("a"))
        assert box.handle(shift_enter()) is True
        assert box.multiline
        assert box.content == "a"

    def test_shift_enter_in_multiline_adds_line(self):
        box = InputBox()
        box.toggle_multiline_mode()
        box.handle(Key("a"))
        box.handle(shift_enter())
        box.handle(Key("b"))
        assert box.content == "a\nb"

    def test_alt_m_toggles_mode(self):
        box = InputBox()
        assert box.handle(Key("m", Modifiers.ALT)) is True
        assert box.multiline
        box.handle(Key("m", Modifiers.ALT))
        assert not box.multiline

    def test_ctrl_keys_left_for_shell(self):
        box = InputBox()
        assert box.handle(Key("q", Modifiers.CTRL)) is False
        assert box.handle(Key("1", Modifiers.ALT)) is False

    def test_single_line_swallows_navigation(self):
        box = InputBox()
        assert box.handle(Key("up")) is True

    def test_take_content_clears(self):
        box = InputBox()
        box.handle(Key("x"))
        assert box.take_content() == "x"
        assert box.is_blank()

    def test_preferred_height_grows_in_multiline(self):
        box = InputBox()
        assert box.preferred_height() == INPUT_HEIGHT
        box.toggle_multiline_mode()
        for _ in range(20):
            box.handle(Key("a"))
            box.handle(shift_enter())
        assert box.preferred_height() == MAX_INPUT_LINES + 2

    def test_render_placeholder_and_title(self):
        box = InputBox()
        canvas = Canvas(60, 3)
        box.render(canvas, canvas.area, THEME, focused=True)
        assert canvas.find("Message") is not None
        assert canvas.find("Type your message") is not None
        assert canvas.cursor == (1, 1)

    def test_render_multiline_title(self):
        box = InputBox()
        box.toggle_multiline_mode()
        canvas = Canvas(60, 4)
        box.render(canvas, canvas.area, THEME)
        assert canvas.find("Multiline Mode") is not None


# -- SelectableList / ConversationList ----------------------------------------


class TestSelectableList:
    def test_empty_has_no_selection(self):
        items: SelectableList[str] = SelectableList()
        assert items.selected is None
        items.next()
        assert items.selected is None

    def test_next_wraps(self):
        items = SelectableList(["a", "b", "c"])
        items.next()
        items.next()
        items.next()
        assert items.selected_item == "a"

    def test_previous_wraps(self):
        items = SelectableList(["a", "b", "c"])
        items.previous()
        assert items.selected_item == "c"

    def test_set_items_clamps_selection(self):
        items = SelectableList(["a", "b", "c"])
        items.select_index(2)
        items.set_items(["x"])
        assert items.selected == 0
        items.set_items([])
        assert items.selected is None

    def test_insert_front_keeps_highlighted_item(self):
        items = SelectableList(["a", "b"])
        items.select_index(1)
        items.insert_front("z")
        assert items.selected_item == "b"

    def test_handle_keys_and_wheel(self):
        items = SelectableList(["a", "b"])
        assert items.handle(Key("j")) is True
        assert items.selected_item == "b"
        assert items.handle(Mouse(MouseKind.SCROLL_UP)) is True
        assert items.selected_item == "a"
        assert items.handle(Key("enter")) is False

    def test_visible_range_follows_selection(self):
        items = SelectableList(list(range(10)))
        items.select_index(7)
        assert items.visible_range(3) == range(5, 8)


class TestConversationList:
    def _conv(self, id: str, title: str) -> ConversationSummary:
        return ConversationSummary(id=id, title=title, updated_at=0.0)

    def test_empty_placeholder(self):
        listing = ConversationList()
        canvas = Canvas(60, 5)
        listing.render(canvas, canvas.area, THEME)
        assert canvas.find(NO_CONVERSATIONS_TEXT) is not None

    def test_highlight_symbol(self):
        listing = ConversationList([self._conv("1", "First"), self._conv("2", "Second")])
        canvas = Canvas(40, 5)
        listing.render(canvas, canvas.area, THEME)
        x, y = canvas.find("First")
        assert canvas.row_text(y).startswith("│► ")

    def test_long_title_truncated(self):
        listing = ConversationList([self._conv("1", "A" * 50)])
        segments = listing.format_item(listing.items[0], 25, THEME)
        assert segments[0][0] == "A" * 7 + "..."

    def test_select_and_find(self):
        listing = ConversationList([self._conv("1", "First"), self._conv("2", "Second")])
        assert listing.select_conversation("2")
        assert listing.selected_conversation.title == "Second"
        assert listing.find("missing") is None

    def test_format_helpers(self):
        assert format_time_ago(1000.0, now=1030.0) == "now"
        assert format_time_ago(0.0, now=7200.0) == "2h"
        assert format_list_cost(0.001) == "<$0.01"
        assert format_list_cost(1.5) == "$1.50"


# -- Overlays ----------------------------------------------------------------


class TestHelpOverlay:
    def test_close_keys(self):
        assert HelpOverlay.is_close_key(Key("esc"))
        assert HelpOverlay.is_close_key(Key("f1"))
        assert HelpOverlay.is_close_key(Key("/", Modifiers.CTRL))
        assert HelpOverlay.is_close_key(Key("q"))
        assert not HelpOverlay.is_close_key(Key("x"))

    def test_swallows_all_keys(self):
        overlay = HelpOverlay()
        assert overlay.handle(Key("x")) is True
        assert overlay.handle(Mouse(MouseKind.CLICK)) is True

    def test_scroll_clamped(self):
        overlay = HelpOverlay()
        canvas = Canvas(100, 30)
        overlay.render(canvas, canvas.area, THEME)
        overlay.handle(Key("up"))
        assert overlay.offset == 0
        for _ in range(200):
            overlay.handle(Key("down"))
        overlay.render(canvas, canvas.area, THEME)
        assert overlay.offset <= len(overlay.sections)

    def test_render_title(self):
        canvas = Canvas(100, 30)
        HelpOverlay().render(canvas, canvas.area, THEME)
        assert canvas.find("Help") is not None
        assert canvas.find("Navigation") is not None


class TestRenameOverlay:
    def test_prefilled_value(self):
        overlay = RenameOverlay("  Old title  ")
        assert overlay.value == "Old title"

    def test_editing_clears_error(self):
        overlay = RenameOverlay("")
        overlay.set_error("Conversation name cannot be empty")
        overlay.handle(Key("x"))
        assert overlay.error is None
        assert overlay.value == "x"

    def test_render_shows_error(self):
        overlay = RenameOverlay("")
        overlay.set_error("Conversation name cannot be empty")
        canvas = Canvas(40, 20)
        overlay.render(canvas, canvas.area, THEME)
        assert canvas.find("Rename Conversation") is not None
        assert canvas.find("cannot be empty") is not None


# -- StatusBar ---------------------------------------------------------------


class TestStatusBar:
    def test_narrow_terminal_shows_status_only(self):
        bar = StatusBar()
        bar.set_status("Ready")
        bar.set_model_info("echo", "echo")
        assert "echo: echo" not in bar.plain_text(50, THEME)

    def test_model_info_above_threshold(self):
        bar = StatusBar()
        bar.set_model_info("anthropic", "claude")
        assert "anthropic: claude" in bar.plain_text(70, THEME)

    def test_cost_hidden_until_nonzero(self):
        bar = StatusBar()
        assert "$" not in bar.plain_text(90, THEME)
        bar.update_conversation_cost(0.5)
        assert "$0.5000" in bar.plain_text(90, THEME)

    def test_session_cost_accumulates(self):
        bar = StatusBar()
        bar.add_session_cost(0.25)
        bar.add_session_cost(0.25)
        assert bar.cost_info == "Conv: $0.0000 | Total: $0.5000"

    def test_connection_text_on_wide_terminal(self):
        bar = StatusBar()
        bar.set_connection(ConnectionStatus.ERROR, "boom")
        assert "boom" in bar.plain_text(110, THEME)

    def test_long_status_truncated(self):
        bar = StatusBar()
        bar.set_status("x" * 100)
        assert bar.plain_text(40, THEME) == "x" * 39 + "…"

    def test_key_hints_on_very_wide_terminal(self):
        bar = StatusBar()
        bar.set_key_hints([KeyHint("Enter", "Send")])
        assert "Enter: Send" in bar.plain_text(200, THEME)
        assert "Enter: Send" not in bar.plain_text(110, THEME)

    def test_spinner_advances_while_connecting(self):
        bar = StatusBar()
        bar.set_connection(ConnectionStatus.CONNECTING)
        before = bar.plain_text(80, THEME)
        bar.tick()
        assert bar.plain_text(80, THEME) != before
