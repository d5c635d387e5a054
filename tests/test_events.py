"""Tests for valechat_tui.events key parsing and event classification."""

from __future__ import annotations

from valechat_tui.core.conversation import ConversationSummary
from valechat_tui.events import (
    ConversationCreated,
    Key,
    Modifiers,
    Mouse,
    MouseKind,
    Quit,
    Resize,
    SendMessage,
    Tick,
    is_terminal_event,
)


# -- Key.parse -----------------------------------------------------------------


class TestKeyParse:
    def test_single_character(self):
        assert Key.parse("n") == Key("n")

    def test_uppercase_character_kept(self):
        assert Key.parse("G") == Key("G")

    def test_ctrl_combo(self):
        key = Key.parse("ctrl+q")
        assert key.code == "q"
        assert key.ctrl and not key.alt and not key.shift

    def test_aliases(self):
        assert Key.parse("escape") == Key("esc")
        assert Key.parse("pgup") == Key("pageup")
        assert Key.parse("space") == Key(" ")

    def test_backtab_is_shift_tab(self):
        assert Key.parse("backtab") == Key("tab", Modifiers.SHIFT)
        assert Key.parse("shift+tab") == Key("tab", Modifiers.SHIFT)

    def test_ctrl_slash(self):
        assert Key.parse("ctrl+/") == Key("/", Modifiers.CTRL)
        assert Key.parse("ctrl+slash") == Key("/", Modifiers.CTRL)

    def test_multiple_modifiers(self):
        key = Key.parse("ctrl+alt+x")
        assert key.ctrl and key.alt
        assert key.code == "x"


class TestKeyFromTerminal:
    """Textual key names plus characters map to the shell's key codes."""

    def test_printable_character_wins(self):
        assert Key.from_terminal("question_mark", "?") == Key("?")

    def test_named_key_without_character(self):
        assert Key.from_terminal("enter", "\r") == Key("enter")
        assert Key.from_terminal("tab", "\t") == Key("tab")

    def test_ctrl_j_is_shift_enter(self):
        assert Key.from_terminal("ctrl+j") == Key("enter", Modifiers.SHIFT)
        assert Key.from_terminal("shift+enter") == Key("enter", Modifiers.SHIFT)

    def test_ctrl_underscore_is_ctrl_slash(self):
        assert Key.from_terminal("ctrl+underscore") == Key("/", Modifiers.CTRL)

    def test_ctrl_combo_ignores_character(self):
        assert Key.from_terminal("ctrl+n", "\x0e") == Key("n", Modifiers.CTRL)

    def test_alt_digit(self):
        assert Key.from_terminal("alt+1", "1") == Key("1", Modifiers.ALT)


class TestKeyProperties:
    def test_is_char(self):
        assert Key("a").is_char
        assert Key(" ").is_char
        assert not Key("enter").is_char
        assert not Key("a", Modifiers.CTRL).is_char

    def test_events_are_hashable_values(self):
        assert {Key("a"), Key("a")} == {Key("a")}


# -- Event classification -------------------------------------------------------


class TestEventKinds:
    def test_terminal_events(self):
        for event in (Tick(), Key("a"), Mouse(MouseKind.CLICK), Resize(80, 24)):
            assert is_terminal_event(event)

    def test_application_events(self):
        for event in (SendMessage("hi"), Quit()):
            assert not is_terminal_event(event)

    def test_conversation_created_exposes_id(self):
        conv = ConversationSummary(id="abc", title="New Conversation")
        event = ConversationCreated(conv, follow_up="hello")
        assert event.conversation_id == "abc"
        assert event.follow_up == "hello"
