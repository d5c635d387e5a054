"""Pure-function export helpers.

Each formatter takes a conversation's messages and a metadata dict,
returning the formatted document as a string.
"""

from __future__ import annotations

import json
import re
from datetime import datetime

from ..core.conversation import ChatMessage, ConversationSummary, MessageRole

FILE_EXTENSIONS: dict[str, str] = {"markdown": "md", "json": "json", "txt": "txt"}

# Accepted spellings for each export format.
FORMAT_ALIASES: dict[str, str] = {
    "markdown": "markdown",
    "md": "markdown",
    "json": "json",
    "txt": "txt",
    "text": "txt",
}


def normalize_format(fmt: str) -> str | None:
    return FORMAT_ALIASES.get(fmt.lower())


def get_export_metadata(
    conversation: ConversationSummary, messages: list[ChatMessage]
) -> dict[str, str]:
    """Build the metadata dict used by export formatters."""
    total_cost = sum(m.cost or 0.0 for m in messages)
    models = sorted({m.model for m in messages if m.model})
    return {
        "date": datetime.now().strftime("%Y-%m-%d %H:%M"),
        "conversation_id": conversation.id,
        "title": conversation.title,
        "model": ", ".join(models) or conversation.model or "unknown",
        "message_count": str(len(messages)),
        "total_cost": f"${total_cost:.4f}",
    }


def _timestamp(message: ChatMessage) -> str:
    return datetime.fromtimestamp(message.timestamp).strftime("%Y-%m-%d %H:%M")


def export_markdown(messages: list[ChatMessage], metadata: dict[str, str]) -> str:
    """Format *messages* as markdown."""
    lines = [f"# {metadata['title'] or 'ValeChat Conversation'}", ""]
    lines.append(f"- **Date**: {metadata['date']}")
    lines.append(f"- **Conversation**: {metadata['conversation_id']}")
    lines.append(f"- **Model**: {metadata['model']}")
    lines.append(f"- **Messages**: {metadata['message_count']}")
    lines.append(f"- **Cost**: {metadata['total_cost']}")
    lines.append("")
    lines.append("---")
    lines.append("")

    for message in messages:
        if message.role is MessageRole.SYSTEM:
            lines.append(f"> **System**: {message.text}")
        else:
            heading = "User" if message.role is MessageRole.USER else "Assistant"
            if message.model:
                heading += f" ({message.model})"
            lines.append(f"## {heading}")
            lines.append(f"*{_timestamp(message)}*")
            lines.append("")
            lines.append(message.text)
        lines.append("")
        lines.append("---")
        lines.append("")

    lines.append("*Exported from ValeChat TUI*")
    return "\n".join(lines)


def export_text(messages: list[ChatMessage], metadata: dict[str, str]) -> str:
    """Format *messages* as plain text."""
    lines: list[str] = [
        f"{metadata['title'] or 'ValeChat Conversation'} - {metadata['date']}",
        "=" * 40,
        f"Conversation: {metadata['conversation_id']}",
        f"Model: {metadata['model']}",
        f"Messages: {metadata['message_count']}",
        f"Cost: {metadata['total_cost']}",
        "=" * 40,
        "",
    ]
    labels = {
        MessageRole.USER: "You",
        MessageRole.ASSISTANT: "AI",
        MessageRole.SYSTEM: "System",
    }
    for message in messages:
        lines.append(f"[{labels[message.role]}] {_timestamp(message)}")
        lines.append(message.text)
        lines.append("")
    return "\n".join(lines)


def export_json(messages: list[ChatMessage], metadata: dict[str, str]) -> str:
    """Format *messages* as JSON."""
    data = {
        "conversation_id": metadata["conversation_id"],
        "title": metadata["title"],
        "model": metadata["model"],
        "exported_at": datetime.now().isoformat(),
        "message_count": len(messages),
        "total_cost": metadata["total_cost"],
        "messages": [m.to_dict() for m in messages],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


FORMATTERS = {
    "markdown": export_markdown,
    "json": export_json,
    "txt": export_text,
}


def export_conversation(
    conversation: ConversationSummary, messages: list[ChatMessage], fmt: str
) -> str:
    """Render one conversation in *fmt* (``markdown``, ``json`` or ``txt``)."""
    formatter = FORMATTERS[fmt]
    return formatter(messages, get_export_metadata(conversation, messages))


def export_filename(conversation: ConversationSummary, fmt: str) -> str:
    """Filesystem-safe file name for an exported conversation."""
    slug = re.sub(r"[^\w\-]+", "-", conversation.title.lower()).strip("-")[:40]
    slug = slug or "conversation"
    return f"{slug}-{conversation.id[:8]}.{FILE_EXTENSIONS[fmt]}"
