"""Conversation and message storage in one JSON file.

Layout::

    {"conversations": {"<id>": {...summary...}},
     "messages": {"<id>": [{...message...}, ...]}}
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from pathlib import Path

from ..core.collaborators import NewConversation, StorageError
from ..core.conversation import ChatMessage, ConversationSummary
from ._base import DATA_DIR, JsonStore

CONVERSATIONS_FILE = DATA_DIR / "conversations.json"


class ConversationStore(JsonStore):
    """Implements both the conversation and the message repository."""

    def __init__(
        self,
        path: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(path or CONVERSATIONS_FILE)
        self._clock = clock

    def _default(self) -> dict:
        return {"conversations": {}, "messages": {}}

    def _load(self) -> dict:
        data = self.load_raw()
        if not isinstance(data, dict):
            return self._default()
        data.setdefault("conversations", {})
        data.setdefault("messages", {})
        return data

    # -- conversations ----------------------------------------------------------

    def list_conversations(self) -> list[ConversationSummary]:
        """All conversations, most recently updated first."""
        with self.lock:
            data = self._load()
        summaries = [ConversationSummary.from_dict(raw) for raw in data["conversations"].values()]
        summaries.sort(key=lambda conv: conv.updated_at, reverse=True)
        return summaries

    def get_conversation(self, conversation_id: str) -> ConversationSummary | None:
        with self.lock:
            raw = self._load()["conversations"].get(conversation_id)
        return ConversationSummary.from_dict(raw) if raw else None

    def create_conversation(self, new: NewConversation) -> ConversationSummary:
        summary = ConversationSummary(
            id=str(uuid.uuid4()),
            title=new.title,
            updated_at=self._clock(),
            provider=new.provider,
            model=new.model,
        )
        with self.lock:
            data = self._load()
            data["conversations"][summary.id] = summary.to_dict()
            data["messages"][summary.id] = []
            self.save_raw(data)
        return summary

    def delete_conversation(self, conversation_id: str) -> None:
        with self.lock:
            data = self._load()
            if conversation_id not in data["conversations"]:
                raise StorageError(f"conversation not found: {conversation_id}")
            del data["conversations"][conversation_id]
            data["messages"].pop(conversation_id, None)
            self.save_raw(data)

    def rename_title(self, conversation_id: str, title: str) -> None:
        with self.lock:
            data = self._load()
            raw = data["conversations"].get(conversation_id)
            if raw is None:
                raise StorageError(f"conversation not found: {conversation_id}")
            raw["title"] = title
            raw["updated_at"] = self._clock()
            self.save_raw(data)

    # -- messages ---------------------------------------------------------------

    def get_messages(self, conversation_id: str) -> list[ChatMessage]:
        with self.lock:
            raw = self._load()["messages"].get(conversation_id, [])
        return [ChatMessage.from_dict(item) for item in raw]

    def append_message(self, conversation_id: str, message: ChatMessage) -> None:
        """Store *message* and roll its count and cost into the summary."""
        with self.lock:
            data = self._load()
            summary = data["conversations"].get(conversation_id)
            if summary is None:
                raise StorageError(f"conversation not found: {conversation_id}")
            data["messages"].setdefault(conversation_id, []).append(message.to_dict())
            summary["message_count"] = int(summary.get("message_count", 0)) + 1
            summary["total_cost"] = float(summary.get("total_cost", 0.0)) + (message.cost or 0.0)
            summary["updated_at"] = self._clock()
            self.save_raw(data)
