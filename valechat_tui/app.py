"""Textual host for the ValeChat shell.

The Textual app owns the real terminal.  Its handlers only push raw input
into a ``TerminalInput`` inbox; a thread worker runs the poll, dispatch and
render loop and hands each finished frame back with ``call_from_thread``.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.widgets import Static
from textual.worker import get_current_worker

from .core.collaborators import Backend
from .core.shell import AppShell, Spawn
from .events import MouseKind
from .log import logger
from .multiplexer import EventMultiplexer, TerminalInput
from .preferences import Preferences, save_preferred_model, save_preferred_provider
from .theme import get_theme
from .widgets import Canvas


# ── Surface widget ──────────────────────────────────────────────────


class TerminalSurface(Static, can_focus=True):
    """Full-screen widget showing the last rendered frame.

    Every key, wheel, click and resize is forwarded to the inbox untouched.
    """

    DEFAULT_CSS = """
    TerminalSurface {
        width: 1fr;
        height: 1fr;
        padding: 0;
    }
    """

    def __init__(self, inbox: TerminalInput, **kwargs) -> None:
        super().__init__("", **kwargs)
        self.inbox = inbox

    async def _on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.inbox.push_key(event.key, event.character)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.inbox.push_mouse(MouseKind.SCROLL_UP, event.x, event.y)

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.inbox.push_mouse(MouseKind.SCROLL_DOWN, event.x, event.y)

    def on_click(self, event: events.Click) -> None:
        event.stop()
        self.inbox.push_mouse(MouseKind.CLICK, event.x, event.y)

    def on_resize(self, event: events.Resize) -> None:
        self.inbox.push_resize(event.size.width, event.size.height)


# ── Main Application ────────────────────────────────────────────────


class ValeChatApp(App):
    """ValeChat - a terminal chat client."""

    TITLE = "ValeChat"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        overflow: hidden;
    }
    """

    def __init__(
        self,
        backend: Backend,
        preferences: Preferences | None = None,
        *,
        provider: str | None = None,
        model: str | None = None,
        theme_name: str | None = None,
        tick_rate: float | None = None,
        spawn: Spawn | None = None,
        preferences_path: Path | None = None,
    ) -> None:
        super().__init__()
        prefs = preferences or Preferences()
        self.terminal_input = TerminalInput()
        self.multiplexer = EventMultiplexer(
            self.terminal_input, tick_rate if tick_rate is not None else prefs.tick_rate
        )

        save_provider = save_model = None
        if preferences_path is not None:
            save_provider = partial(save_preferred_provider, path=preferences_path)
            save_model = partial(save_preferred_model, path=preferences_path)

        self.shell = AppShell(
            backend,
            self.multiplexer.send,
            theme=get_theme(theme_name or prefs.theme),
            provider=provider or prefs.preferred_provider,
            model=model or prefs.preferred_model,
            show_timestamps=prefs.display.show_timestamps,
            spawn=spawn,
            save_provider=save_provider,
            save_model=save_model,
        )
        self._frame: Text | None = None

    # ── Layout ──────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield TerminalSurface(self.terminal_input, id="surface")

    async def on_mount(self) -> None:
        textual_theme = self.shell.theme.to_textual()
        self.register_theme(textual_theme)
        self.theme = textual_theme.name

        self.query_one("#surface", TerminalSurface).focus()
        self.terminal_input.push_resize(self.size.width, self.size.height)
        self.shell.start()
        self._start_event_loop()

    def on_unmount(self) -> None:
        self.shell.shutdown()

    # ── Event loop ──────────────────────────────────────────────

    def _start_event_loop(self) -> None:
        self._event_loop_worker()

    @work(thread=True, exclusive=True, group="event-loop")
    def _event_loop_worker(self) -> None:
        """Poll, dispatch and render until the shell asks to quit."""
        worker = get_current_worker()
        self.call_from_thread(self._show_frame, self.render_frame())
        while not worker.is_cancelled:
            frame = self.run_iteration()
            if self.shell.should_quit:
                self.call_from_thread(self.exit)
                return
            if frame is not None:
                self.call_from_thread(self._show_frame, frame)

    def run_iteration(self) -> Text | None:
        """Handle at most one event, then render.

        The render pass runs whether or not an event was handled. Returns the
        new frame, or ``None`` when it matches the one on screen.
        """
        self.step()
        frame = self.render_frame()
        return None if frame == self._frame else frame

    def step(self) -> bool:
        """Handle the next due event; ``False`` when there was none."""
        event = self.multiplexer.poll()
        if event is None:
            return False
        try:
            self.shell.handle_event(event)
        except Exception:
            logger.exception("unhandled error while handling %r", event)
            self.shell.status_bar.set_status("Error: internal error (see log)")
        return True

    def drain(self) -> None:
        """Handle every pending event, then show the frame (used without the worker)."""
        while self.step():
            pass
        if self.shell.should_quit:
            self.exit()
            return
        self._show_frame(self.render_frame())

    def render_frame(self) -> Text:
        shell = self.shell
        canvas = Canvas(shell.width, shell.height, shell.theme.normal())
        shell.render(canvas)
        return canvas.to_text()

    def _show_frame(self, frame: Text) -> None:
        self._frame = frame
        self.query_one("#surface", TerminalSurface).update(frame)

    # ── Actions ─────────────────────────────────────────────────

    async def action_quit(self) -> None:
        """Route the quit key through the shell like any other key."""
        self.terminal_input.push_key("ctrl+q")

    async def action_help_quit(self) -> None:
        self.terminal_input.push_key("ctrl+c")


def run_app(
    backend: Backend,
    preferences: Preferences | None = None,
    *,
    provider: str | None = None,
    model: str | None = None,
    theme_name: str | None = None,
    tick_rate: float | None = None,
    preferences_path: Path | None = None,
) -> None:
    """Run the ValeChat TUI application."""
    app = ValeChatApp(
        backend,
        preferences,
        provider=provider,
        model=model,
        theme_name=theme_name,
        tick_rate=tick_rate,
        preferences_path=preferences_path,
    )
    app.run()
