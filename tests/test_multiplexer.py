"""Tests for the event multiplexer priority order and raw input translation."""

from __future__ import annotations

import pytest

from valechat_tui.events import Key, Modifiers, Mouse, MouseKind, Resize, SendMessage, Tick
from valechat_tui.multiplexer import EventMultiplexer, TerminalInput, translate_raw


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def terminal() -> TerminalInput:
    return TerminalInput()


@pytest.fixture
def mux(terminal, clock) -> EventMultiplexer:
    return EventMultiplexer(
        terminal, tick_rate=0.25, queue_wait=0, idle_sleep=0.01, clock=clock, sleep=clock.sleep
    )


# -- translate_raw -------------------------------------------------------------


class TestTranslateRaw:
    def test_key(self):
        assert translate_raw(("key", "ctrl+q", None)) == Key("q", Modifiers.CTRL)

    def test_mouse(self):
        assert translate_raw(("mouse", MouseKind.SCROLL_UP, 3, 4)) == Mouse(MouseKind.SCROLL_UP, 3, 4)

    def test_resize_clamped(self):
        assert translate_raw(("resize", -1, 40)) == Resize(0, 40)

    def test_unknown_kind(self):
        assert translate_raw(("paste", "text")) is None

    def test_empty_key_name(self):
        assert translate_raw(("key", "", None)) is None


# -- poll priority -------------------------------------------------------------


class TestPollPriority:
    def test_app_event_before_terminal_input(self, mux, terminal):
        terminal.push_key("a", "a")
        mux.send(SendMessage("hi"))
        assert mux.poll() == SendMessage("hi")
        assert mux.poll() == Key("a")

    def test_app_events_fifo(self, mux):
        mux.send(SendMessage("one"))
        mux.send(SendMessage("two"))
        assert mux.poll() == SendMessage("one")
        assert mux.poll() == SendMessage("two")

    def test_terminal_input_in_order(self, mux, terminal):
        terminal.push_key("a", "a")
        terminal.push_resize(100, 30)
        assert mux.poll() == Key("a")
        assert mux.poll() == Resize(100, 30)

    def test_untranslatable_input_skipped(self, mux, terminal):
        terminal.push_key("", None)
        terminal.push_key("b", "b")
        assert mux.poll() == Key("b")

    def test_tick_after_interval(self, mux, clock):
        assert mux.poll() is None
        clock.now += 0.25
        assert mux.poll() == Tick()
        assert mux.poll() is None

    def test_input_preempts_due_tick(self, mux, terminal, clock):
        clock.now += 1.0
        terminal.push_key("x", "x")
        assert mux.poll() == Key("x")
        assert mux.poll() == Tick()

    def test_idle_poll_sleeps(self, mux, clock):
        assert mux.poll() is None
        assert clock.sleeps == [0.01]

    def test_pending_count(self, mux):
        mux.send(SendMessage("x"))
        assert mux.pending == 1


class TestSend:
    def test_terminal_events_rejected(self, mux):
        with pytest.raises(TypeError):
            mux.send(Key("a"))

    def test_sender_posts_to_queue(self, mux):
        mux.sender(SendMessage("via sender"))
        assert mux.poll() == SendMessage("via sender")
