"""ValeChat TUI - terminal chat client."""

__version__ = "0.1.0"
