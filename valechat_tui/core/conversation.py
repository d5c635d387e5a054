"""Framework-agnostic conversation records."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @property
    def glyph(self) -> str:
        return _ROLE_GLYPHS[self]


_ROLE_GLYPHS = {
    MessageRole.USER: "👤",
    MessageRole.ASSISTANT: "🤖",
    MessageRole.SYSTEM: "⚙️",
}


@dataclass
class ChatMessage:
    """One transcript entry.  ``timestamp`` is in epoch seconds."""

    role: MessageRole
    text: str
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    model: str | None = None
    cost: float | None = None

    @classmethod
    def user(cls, text: str) -> ChatMessage:
        return cls(MessageRole.USER, text)

    @classmethod
    def assistant(
        cls, text: str, model: str | None = None, cost: float | None = None
    ) -> ChatMessage:
        return cls(MessageRole.ASSISTANT, text, model=model, cost=cost)

    @classmethod
    def system(cls, text: str) -> ChatMessage:
        return cls(MessageRole.SYSTEM, text)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp,
            "model": self.model,
            "cost": self.cost,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ChatMessage:
        return cls(
            role=MessageRole(data.get("role", "system")),
            text=str(data.get("text", "")),
            timestamp=float(data.get("timestamp", 0.0)),
            id=str(data.get("id") or uuid.uuid4()),
            model=data.get("model"),
            cost=data.get("cost"),
        )


@dataclass
class ConversationSummary:
    """Sidebar entry for one conversation."""

    id: str
    title: str
    message_count: int = 0
    updated_at: float = field(default_factory=time.time)
    total_cost: float = 0.0
    provider: str = ""
    model: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message_count": self.message_count,
            "updated_at": self.updated_at,
            "total_cost": self.total_cost,
            "provider": self.provider,
            "model": self.model,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ConversationSummary:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            message_count=int(data.get("message_count", 0)),
            updated_at=float(data.get("updated_at", 0.0)),
            total_cost=float(data.get("total_cost", 0.0)),
            provider=str(data.get("provider", "")),
            model=str(data.get("model", "")),
        )
