"""Interfaces of the services the shell and command executor consume.

The shell never talks to storage or providers directly; it calls these
protocols from background tasks and reports results as events.  Concrete
implementations live in :mod:`valechat_tui.persistence` and
:mod:`valechat_tui.providers`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .conversation import ChatMessage, ConversationSummary


class CollaboratorError(Exception):
    """A repository or provider operation failed."""


class StorageError(CollaboratorError):
    """Reading or writing persisted data failed."""


class ProviderError(CollaboratorError):
    """A provider call failed or the provider is unavailable."""


# -- records --------------------------------------------------------------------


@dataclass
class NewConversation:
    title: str
    provider: str = ""
    model: str = ""


@dataclass
class ProviderReply:
    text: str
    provider: str
    model: str
    cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class UsageRecord:
    timestamp: float
    provider: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    conversation_id: str = ""


@dataclass
class ProviderUsage:
    requests: int = 0
    cost: float = 0.0


@dataclass
class ModelUsage:
    provider: str
    requests: int = 0
    cost: float = 0.0


@dataclass
class UsageStatistics:
    total_requests: int = 0
    total_cost: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    current_month_cost: float = 0.0
    previous_month_cost: float = 0.0
    by_provider: dict[str, ProviderUsage] = field(default_factory=dict)
    by_model: dict[str, ModelUsage] = field(default_factory=dict)


@dataclass
class Budgets:
    daily: float | None = None
    monthly: float | None = None
    providers: dict[str, float] = field(default_factory=dict)


@dataclass
class ProviderConfig:
    enabled: bool = True
    default_model: str = ""


# -- protocols ------------------------------------------------------------------


class ConversationRepository(Protocol):
    def list_conversations(self) -> list[ConversationSummary]: ...

    def get_conversation(self, conversation_id: str) -> ConversationSummary | None: ...

    def create_conversation(self, new: NewConversation) -> ConversationSummary: ...

    def delete_conversation(self, conversation_id: str) -> None: ...

    def rename_title(self, conversation_id: str, title: str) -> None: ...


class MessageRepository(Protocol):
    def get_messages(self, conversation_id: str) -> list[ChatMessage]: ...

    def append_message(self, conversation_id: str, message: ChatMessage) -> None: ...


class ProviderDispatch(Protocol):
    def send_message(
        self,
        conversation_id: str,
        text: str,
        preferred_provider: str | None = None,
        preferred_model: str | None = None,
    ) -> ProviderReply: ...


class CredentialStore(Protocol):
    def get_key(self, provider: str) -> str | None: ...

    def set_key(self, provider: str, key: str) -> None: ...

    def remove_key(self, provider: str) -> None: ...


class UsageRepository(Protocol):
    def record(self, record: UsageRecord) -> None: ...

    def get_statistics(self) -> UsageStatistics: ...

    def get_daily_statistics(self) -> tuple[float, int]: ...

    def get_cost_trend(self, days: int) -> list[tuple[str, float]]: ...

    def get_budgets(self) -> Budgets: ...

    def set_daily_budget(self, limit: float) -> None: ...

    def set_monthly_budget(self, limit: float) -> None: ...

    def set_provider_budget(self, provider: str, limit: float) -> None: ...


@dataclass
class Backend:
    """Everything the UI needs from the outside world, bundled."""

    conversations: ConversationRepository
    messages: MessageRepository
    provider: ProviderDispatch
    credentials: CredentialStore
    usage: UsageRepository
    providers: dict[str, ProviderConfig] = field(default_factory=dict)

    def default_provider_and_model(self) -> tuple[str, str]:
        """First enabled provider and its default model."""
        for name, config in self.providers.items():
            if config.enabled:
                return name, config.default_model
        raise CollaboratorError("no enabled providers found")
