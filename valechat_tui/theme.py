"""Theme definitions for ValeChat TUI.

A ``Theme`` is an immutable palette with style lookups used by every
renderer.  Each built-in palette also has a matching Textual ``Theme`` so
the host app's base colors agree with what the canvas paints.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style
from textual.theme import Theme as TextualTheme


@dataclass(frozen=True)
class Theme:
    """Color palette.  All values are hex strings."""

    name: str
    bg: str
    fg: str
    accent: str
    success: str
    warning: str
    error: str
    border: str
    highlight: str
    secondary: str
    dark: bool = True

    # -- style lookups ---------------------------------------------------------

    def normal(self) -> Style:
        return Style(color=self.fg, bgcolor=self.bg)

    def accent_style(self) -> Style:
        return Style(color=self.accent)

    def success_style(self) -> Style:
        return Style(color=self.success)

    def warning_style(self) -> Style:
        return Style(color=self.warning)

    def error_style(self) -> Style:
        return Style(color=self.error)

    def highlight_style(self) -> Style:
        return Style(color=self.highlight, bold=True)

    def secondary_style(self) -> Style:
        return Style(color=self.secondary)

    def border_style(self, focused: bool = False) -> Style:
        return Style(color=self.accent if focused else self.border)

    def selected(self) -> Style:
        return Style(color=self.bg, bgcolor=self.accent)

    def to_textual(self) -> TextualTheme:
        """Build the Textual theme registered by the host app."""
        return TextualTheme(
            name=f"valechat-{self.name}",
            primary=self.accent,
            secondary=self.highlight,
            accent=self.border,
            foreground=self.fg,
            background=self.bg,
            surface=self.bg,
            panel=self.border,
            success=self.success,
            warning=self.warning,
            error=self.error,
            dark=self.dark,
        )


THEMES: dict[str, Theme] = {
    "dark": Theme(
        name="dark",
        bg="#282c34",
        fg="#abb2bf",
        accent="#61afef",
        success="#98c379",
        warning="#e5c07b",
        error="#e06c75",
        border="#5c6370",
        highlight="#56b6c2",
        secondary="#828997",
    ),
    "light": Theme(
        name="light",
        bg="#fafafa",
        fg="#3c3c3c",
        accent="#007aff",
        success="#28a745",
        warning="#ffc107",
        error="#dc3545",
        border="#c8c8c8",
        highlight="#17a2b8",
        secondary="#6c757d",
        dark=False,
    ),
    "matrix": Theme(
        name="matrix",
        bg="#000000",
        fg="#00ff00",
        accent="#00ff00",
        success="#00ff00",
        warning="#ffff00",
        error="#ff0000",
        border="#008000",
        highlight="#00ff00",
        secondary="#008000",
    ),
}

DEFAULT_THEME = THEMES["dark"]


def get_theme(name: str) -> Theme:
    """Return the named palette, falling back to the dark one."""
    return THEMES.get(name, DEFAULT_THEME)
