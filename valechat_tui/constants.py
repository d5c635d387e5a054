"""Module-level constants for ValeChat TUI."""

from __future__ import annotations

# Event loop timing (seconds)
DEFAULT_TICK_RATE = 0.25
QUEUE_WAIT = 0.01
IDLE_SLEEP = 0.01

# Viewport behaviour
PAGE_SCROLL_LINES = 10
MIN_WRAP_WIDTH = 10
SIDEBAR_WIDTH = 30
INPUT_HEIGHT = 3
MAX_INPUT_LINES = 10

# Status bar layout thresholds (terminal columns)
STATUS_MESSAGE_WIDTH = 40
STATUS_SEPARATOR = " │ "
DEFAULT_COST_TEXT = "$0.00"
SHOW_MODEL_WIDTH = 60
SHOW_COST_WIDTH = 80
SHOW_CONNECTION_SYMBOL_WIDTH = 70
SHOW_CONNECTION_TEXT_WIDTH = 100
SHOW_KEY_HINTS_WIDTH = 120

SPINNER_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

# Placeholders and titles
CHAT_PLACEHOLDER = "No messages yet. Start a conversation!"
NO_CONVERSATION_TITLE = "No conversation selected"
NO_CONVERSATIONS_TEXT = "No conversations yet. Press 'n' to create one."
INPUT_PLACEHOLDER = "Type your message... (Enter: Send, Shift+Enter: New line)"
INPUT_TITLE = " Message "
INPUT_MULTILINE_TITLE = " Message (Multiline Mode) "
RENAME_TITLE = " Rename Conversation "
RENAME_PLACEHOLDER = "Enter conversation name..."
HELP_TITLE = " Help - Press F1 or Esc to close "
DEFAULT_CONVERSATION_TITLE = "New Conversation"

# Status line messages per focused panel
FOCUS_STATUS: dict[str, str] = {
    "conversation_list": "Select conversation (Enter to open, n for new)",
    "chat_view": "Reading conversation (Tab to input message)",
    "input_box": "Type your message (Enter to send)",
}

# (key, action) hints shown on the right of the status bar per focused panel
FOCUS_KEY_HINTS: dict[str, tuple[tuple[str, str], ...]] = {
    "conversation_list": (
        ("Enter", "Open"),
        ("n", "New"),
        ("r", "Rename"),
        ("Del", "Delete"),
        ("Ctrl/Alt+1/2/3", "Panels"),
    ),
    "chat_view": (
        ("↑/↓", "Scroll"),
        ("PgUp/PgDn", "Page"),
        ("Home/End", "Top/Bottom"),
        ("Ctrl/Alt+1/2/3", "Panels"),
    ),
    "input_box": (
        ("Enter", "Send"),
        ("Shift+Enter", "New Line"),
        ("Alt+M", "Multiline"),
        ("Ctrl/Alt+1/2/3", "Panels"),
    ),
}

# Help overlay content: (keys, description); an empty description marks a section
HELP_SECTIONS: tuple[tuple[str, str], ...] = (
    ("Navigation", ""),
    ("  Tab / Shift+Tab", "Switch between panels"),
    ("  Ctrl/Alt+1", "Go to Conversations"),
    ("  Ctrl/Alt+2", "Go to Chat View"),
    ("  Ctrl/Alt+3", "Go to Input Box"),
    ("  Escape", "Return to Conversations"),
    ("  Arrow keys / hjkl", "Navigate lists and messages"),
    ("  Page Up/Down", "Scroll messages quickly"),
    ("  Home/End (g/G)", "Go to top/bottom of messages"),
    ("", ""),
    ("Conversations", ""),
    ("  n", "New conversation"),
    ("  Ctrl+N", "New conversation (global)"),
    ("  Enter", "Select conversation"),
    ("  d / Delete", "Delete conversation"),
    ("  r", "Rename conversation"),
    ("", ""),
    ("Chat", ""),
    ("  Enter", "Send message"),
    ("  Shift+Enter", "New line in message"),
    ("  Alt+M", "Toggle multiline mode"),
    ("  /command", "Run a slash command (try /help)"),
    ("", ""),
    ("General", ""),
    ("  F1 / Ctrl+/", "Show/hide this help"),
    ("  Ctrl+C / Ctrl+Q", "Quit application"),
)

# Canonical list of slash commands, shown in /help and used by tests.
SLASH_COMMANDS: tuple[str, ...] = (
    "/apikey",
    "/budget",
    "/cost",
    "/exit",
    "/export",
    "/help",
    "/model",
    "/provider",
    "/quit",
    "/usage",
)

EXPORT_FORMATS: tuple[str, ...] = ("markdown", "json", "txt")

# Models offered by /model list for each known provider
PROVIDER_MODELS: dict[str, tuple[str, ...]] = {
    "anthropic": (
        "claude-sonnet-4-20250514",
        "claude-opus-4-20250514",
        "claude-3-5-haiku-20241022",
    ),
    "openai": ("gpt-4o", "gpt-4o-mini", "gpt-4-turbo"),
    "echo": ("echo",),
}

# USD per million tokens: (input, output)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "claude-sonnet-4-20250514": (3.0, 15.0),
    "claude-opus-4-20250514": (15.0, 75.0),
    "claude-3-5-haiku-20241022": (0.8, 4.0),
    "gpt-4o": (2.5, 10.0),
    "gpt-4o-mini": (0.15, 0.6),
    "gpt-4-turbo": (10.0, 30.0),
}
