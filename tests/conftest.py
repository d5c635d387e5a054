"""Shared test fixtures for valechat-tui test suite."""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from valechat_tui.core.collaborators import Backend, NewConversation, ProviderConfig
from valechat_tui.core.conversation import ChatMessage, ConversationSummary
from valechat_tui.core.shell import AppShell
from valechat_tui.events import Key
from valechat_tui.persistence import ConversationStore, CredentialFileStore, UsageStore
from valechat_tui.providers import ProviderRouter

FIXED_NOW = 1_760_000_000.0


def run_inline(fn):
    """``spawn`` replacement that runs background work immediately."""
    fn()


class DeferredSpawn:
    """``spawn`` replacement that holds background work until it is run."""

    def __init__(self) -> None:
        self.tasks: list = []

    def __call__(self, fn) -> None:
        self.tasks.append(fn)

    def run_next(self) -> None:
        self.tasks.pop(0)()

    def run_all(self) -> None:
        while self.tasks:
            self.run_next()


class ShellHarness:
    """An ``AppShell`` whose posted events are queued and drained on demand."""

    def __init__(self, shell: AppShell, outbox: list) -> None:
        self.shell = shell
        self.outbox = outbox

    def drain(self) -> None:
        while self.outbox:
            self.shell.handle_event(self.outbox.pop(0))

    def send(self, event) -> None:
        self.shell.handle_event(event)
        self.drain()

    def press(self, *keys: str) -> None:
        for spec in keys:
            self.send(Key.parse(spec))

    def type(self, text: str) -> None:
        for ch in text:
            self.send(Key(ch))


# -- Backend fixtures ---------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for file-based tests."""
    return tmp_path


@pytest.fixture
def providers() -> dict[str, ProviderConfig]:
    return {
        "echo": ProviderConfig(enabled=True, default_model="echo"),
        "anthropic": ProviderConfig(enabled=False, default_model="claude-sonnet-4-20250514"),
    }


@pytest.fixture
def backend(tmp_path: Path, providers) -> Backend:
    """Real JSON stores under tmp_path with the offline echo provider.

    The conversation store's clock ticks one second per call so list order
    is deterministic.
    """
    ticks = itertools.count(FIXED_NOW)
    conversations = ConversationStore(tmp_path / "conversations.json", clock=lambda: float(next(ticks)))
    credentials = CredentialFileStore(tmp_path / "credentials.json", environ={})
    usage = UsageStore(tmp_path / "usage.json")
    router = ProviderRouter(conversations, credentials, usage, providers)
    return Backend(
        conversations=conversations,
        messages=conversations,
        provider=router,
        credentials=credentials,
        usage=usage,
        providers=providers,
    )


@pytest.fixture
def seeded(backend) -> dict[str, str]:
    """Two stored conversations, "Newer" (two messages) listed above "Older"."""
    older = backend.conversations.create_conversation(NewConversation("Older", "echo", "echo"))
    newer = backend.conversations.create_conversation(NewConversation("Newer", "echo", "echo"))
    backend.messages.append_message(newer.id, ChatMessage.user("first question"))
    backend.messages.append_message(newer.id, ChatMessage.assistant("first answer", model="echo"))
    return {"older": older.id, "newer": newer.id}


# -- Shell fixtures -----------------------------------------------------------


@pytest.fixture
def make_harness(backend):
    """Factory for shells over the tmp_path backend; kwargs go to ``AppShell``."""

    def factory(spawn=run_inline, **kwargs) -> ShellHarness:
        outbox: list = []
        kwargs.setdefault("show_timestamps", False)
        shell = AppShell(backend, outbox.append, spawn=spawn, **kwargs)
        shell.start()
        h = ShellHarness(shell, outbox)
        h.drain()
        return h

    return factory


@pytest.fixture
def harness(make_harness) -> ShellHarness:
    return make_harness()


# -- Message fixtures ---------------------------------------------------------


@pytest.fixture
def sample_messages() -> list[ChatMessage]:
    return [
        ChatMessage.user("Hello"),
        ChatMessage.assistant("Hi there! How can I help?", model="echo", cost=0.0012),
        ChatMessage.user("Tell me about Python"),
        ChatMessage.assistant("Python is a programming language...", model="echo"),
    ]


@pytest.fixture
def sample_conversation() -> ConversationSummary:
    return ConversationSummary(
        id="conv-1",
        title="Test Conversation",
        message_count=4,
        updated_at=FIXED_NOW,
        total_cost=0.0012,
        provider="echo",
        model="echo",
    )
