"""Canvas components: the three panels, the overlays and the status bar."""

from .bars import ConnectionStatus, KeyHint, StatusBar
from .base import Canvas, Component, Rect, centered_rect
from .chat_input import InputBox
from .chat_view import ChatView, wrap_text
from .conversation_list import ConversationList, SelectableList
from .editor import EditorState
from .screens import HelpOverlay, RenameOverlay

__all__ = [
    "Canvas",
    "ChatView",
    "Component",
    "ConnectionStatus",
    "ConversationList",
    "EditorState",
    "HelpOverlay",
    "InputBox",
    "KeyHint",
    "Rect",
    "RenameOverlay",
    "SelectableList",
    "StatusBar",
    "centered_rect",
    "wrap_text",
]
