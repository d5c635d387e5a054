"""Tests for the conversation export formatters."""

from __future__ import annotations

import json

import pytest

from valechat_tui.core.conversation import ChatMessage, ConversationSummary
from valechat_tui.features.export import (
    export_conversation,
    export_filename,
    get_export_metadata,
    normalize_format,
)


class TestNormalizeFormat:
    @pytest.mark.parametrize(
        ("given", "expected"),
        [("md", "markdown"), ("Markdown", "markdown"), ("TEXT", "txt"), ("json", "json"), ("pdf", None)],
    )
    def test_aliases(self, given, expected):
        assert normalize_format(given) == expected


class TestMetadata:
    def test_models_and_cost(self, sample_conversation, sample_messages):
        meta = get_export_metadata(sample_conversation, sample_messages)
        assert meta["model"] == "echo"
        assert meta["message_count"] == "4"
        assert meta["total_cost"] == "$0.0012"

    def test_falls_back_to_conversation_model(self):
        conv = ConversationSummary(id="c", title="t", model="gpt-4o")
        assert get_export_metadata(conv, [ChatMessage.user("hi")])["model"] == "gpt-4o"


class TestFormatters:
    def test_markdown(self, sample_conversation, sample_messages):
        out = export_conversation(sample_conversation, sample_messages, "markdown")
        assert out.startswith("# Test Conversation")
        assert "## User" in out
        assert "## Assistant (echo)" in out
        assert out.rstrip().endswith("*Exported from ValeChat TUI*")

    def test_markdown_system_quote(self, sample_conversation):
        out = export_conversation(sample_conversation, [ChatMessage.system("note")], "markdown")
        assert "> **System**: note" in out

    def test_text(self, sample_conversation, sample_messages):
        out = export_conversation(sample_conversation, sample_messages, "txt")
        assert out.splitlines()[0].startswith("Test Conversation - ")
        assert "[You]" in out
        assert "[AI]" in out

    def test_json(self, sample_conversation, sample_messages):
        data = json.loads(export_conversation(sample_conversation, sample_messages, "json"))
        assert data["conversation_id"] == "conv-1"
        assert data["message_count"] == 4
        assert [m["role"] for m in data["messages"]] == ["user", "assistant", "user", "assistant"]


class TestFilename:
    def test_slug_and_extension(self, sample_conversation):
        assert export_filename(sample_conversation, "markdown") == "test-conversation-conv-1.md"

    def test_unsafe_title(self):
        conv = ConversationSummary(id="abcdef123456", title="../../etc/passwd")
        assert export_filename(conv, "txt") == "etc-passwd-abcdef12.txt"

    def test_empty_slug(self):
        conv = ConversationSummary(id="abcdef123456", title="???")
        assert export_filename(conv, "json") == "conversation-abcdef12.json"
