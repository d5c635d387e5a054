"""Status bar: status text, model, cost, connection and key hints.

Sections drop out right-to-left as the terminal narrows.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.style import Style

from ..constants import (
    DEFAULT_COST_TEXT,
    SHOW_CONNECTION_SYMBOL_WIDTH,
    SHOW_CONNECTION_TEXT_WIDTH,
    SHOW_COST_WIDTH,
    SHOW_KEY_HINTS_WIDTH,
    SHOW_MODEL_WIDTH,
    SPINNER_FRAMES,
    STATUS_MESSAGE_WIDTH,
    STATUS_SEPARATOR,
)
from ..theme import Theme
from .base import Canvas, Rect


@dataclass(frozen=True)
class KeyHint:
    key: str
    action: str

    def __str__(self) -> str:
        return f"{self.key}: {self.action}"


class ConnectionStatus(Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting..."
    CONNECTED = "Connected"
    ERROR = "Error"


class StatusBar:
    def __init__(self) -> None:
        self.status = "Ready"
        self.model_info = "No model selected"
        self.cost_info = DEFAULT_COST_TEXT
        self.connection = ConnectionStatus.DISCONNECTED
        self.connection_error = ""
        self.key_hints: list[KeyHint] = []
        self.conversation_cost = 0.0
        self.session_cost = 0.0
        self._spinner = 0

    def set_status(self, text: str) -> None:
        self.status = text

    def set_model_info(self, provider: str, model: str) -> None:
        self.model_info = f"{provider}: {model}"

    def set_connection(self, status: ConnectionStatus, error: str = "") -> None:
        self.connection = status
        self.connection_error = error

    def set_key_hints(self, hints: list[KeyHint]) -> None:
        self.key_hints = list(hints)

    def update_conversation_cost(self, cost: float) -> None:
        self.conversation_cost = cost
        self._update_cost_display()

    def add_session_cost(self, cost: float) -> None:
        self.session_cost += cost
        self._update_cost_display()

    def _update_cost_display(self) -> None:
        if self.session_cost > 0:
            self.cost_info = f"Conv: ${self.conversation_cost:.4f} | Total: ${self.session_cost:.4f}"
        elif self.conversation_cost > 0:
            self.cost_info = f"${self.conversation_cost:.4f}"
        else:
            self.cost_info = DEFAULT_COST_TEXT

    def tick(self) -> None:
        """Advance the activity spinner shown while connecting."""
        self._spinner = (self._spinner + 1) % len(SPINNER_FRAMES)

    def _connection_indicator(self, theme: Theme) -> tuple[str, Style]:
        if self.connection is ConnectionStatus.CONNECTED:
            return "●", theme.success_style()
        if self.connection is ConnectionStatus.CONNECTING:
            return SPINNER_FRAMES[self._spinner], theme.warning_style()
        if self.connection is ConnectionStatus.ERROR:
            return "●", theme.error_style()
        return "○", theme.secondary_style()

    def _connection_text(self) -> str:
        if self.connection is ConnectionStatus.ERROR and self.connection_error:
            return self.connection_error
        return self.connection.value

    def _status_text(self) -> str:
        if len(self.status) > STATUS_MESSAGE_WIDTH:
            return self.status[: STATUS_MESSAGE_WIDTH - 1] + "…"
        return self.status.ljust(STATUS_MESSAGE_WIDTH)

    def segments(self, width: int, theme: Theme) -> list[tuple[str, Style]]:
        """Styled pieces of the bar for a terminal *width* columns wide."""
        plain = Style()
        spans: list[tuple[str, Style]] = [(self._status_text(), theme.normal())]
        if width > SHOW_MODEL_WIDTH:
            spans += [(STATUS_SEPARATOR, plain), (self.model_info, theme.accent_style())]
        if width > SHOW_COST_WIDTH and self.cost_info != DEFAULT_COST_TEXT:
            spans += [(STATUS_SEPARATOR, plain), (self.cost_info, theme.warning_style())]
        symbol, symbol_style = self._connection_indicator(theme)
        if width > SHOW_CONNECTION_TEXT_WIDTH:
            spans += [
                (STATUS_SEPARATOR, plain),
                (symbol, symbol_style),
                (" ", plain),
                (self._connection_text(), theme.secondary_style()),
            ]
        elif width > SHOW_CONNECTION_SYMBOL_WIDTH:
            spans += [(STATUS_SEPARATOR, plain), (symbol, symbol_style)]

        if width > SHOW_KEY_HINTS_WIDTH and self.key_hints:
            hints = STATUS_SEPARATOR.join(str(hint) for hint in self.key_hints)
            used = sum(len(text) for text, _ in spans)
            if used + len(hints) + 5 < width:
                padding = width - used - len(hints) - 5
                spans += [
                    (" " * padding, plain),
                    (STATUS_SEPARATOR, plain),
                    (hints, theme.secondary_style()),
                ]
        return spans

    def render(self, canvas: Canvas, area: Rect, theme: Theme, focused: bool = False) -> None:
        canvas.clear(area, theme.normal())
        x = area.x
        for text, style in self.segments(area.width, theme):
            x += canvas.draw_text(x, area.y, text, style, area.right - x)

    def plain_text(self, width: int, theme: Theme) -> str:
        return "".join(text for text, _ in self.segments(width, theme))
