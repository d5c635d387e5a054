"""JSON file persistence for conversations, credentials and usage."""

from ._base import DATA_DIR, JsonStore
from .conversations import ConversationStore
from .credentials import CredentialFileStore
from .usage import UsageStore

__all__ = [
    "ConversationStore",
    "CredentialFileStore",
    "DATA_DIR",
    "JsonStore",
    "UsageStore",
]
