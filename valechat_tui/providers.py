"""Provider dispatch: route a chat turn to a model backend and account for it.

``ProviderRouter`` implements the ``ProviderDispatch`` collaborator.  It
persists the user turn, calls the selected backend with the conversation
history, persists the reply and records usage.  The SDK backends import
their client library lazily so the app runs without either installed; the
offline ``echo`` backend always works.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from .constants import MODEL_PRICING, PROVIDER_MODELS
from .core.collaborators import (
    CredentialStore,
    MessageRepository,
    ProviderConfig,
    ProviderError,
    ProviderReply,
    UsageRecord,
    UsageRepository,
)
from .core.conversation import ChatMessage, MessageRole
from .log import logger

MAX_TOKENS = 1024

DEFAULT_PROVIDERS: dict[str, ProviderConfig] = {
    "echo": ProviderConfig(enabled=True, default_model="echo"),
    "anthropic": ProviderConfig(enabled=False, default_model="claude-sonnet-4-20250514"),
    "openai": ProviderConfig(enabled=False, default_model="gpt-4o"),
}


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """USD cost of one request from the per-million-token price table."""
    input_price, output_price = MODEL_PRICING.get(model, (0.0, 0.0))
    return (input_tokens * input_price + output_tokens * output_price) / 1_000_000


def _chat_history(history: list[ChatMessage]) -> list[dict[str, str]]:
    """User/assistant turns in the role/content shape both SDKs accept."""
    return [
        {"role": m.role.value, "content": m.text}
        for m in history
        if m.role in (MessageRole.USER, MessageRole.ASSISTANT) and m.text
    ]


class Completion(Protocol):
    def __call__(
        self, history: list[ChatMessage], model: str, api_key: str | None
    ) -> tuple[str, int, int]:
        """Return ``(reply_text, input_tokens, output_tokens)``."""
        ...


def echo_completion(history: list[ChatMessage], model: str, api_key: str | None) -> tuple[str, int, int]:
    """Offline backend that repeats the last user message."""
    last = next((m.text for m in reversed(history) if m.role is MessageRole.USER), "")
    words = len(last.split())
    return f"Echo: {last}", words, words + 1


def anthropic_completion(history: list[ChatMessage], model: str, api_key: str | None) -> tuple[str, int, int]:
    try:
        import anthropic  # type: ignore[import-untyped]
    except ImportError as exc:
        raise ProviderError(
            "anthropic SDK not installed (pip install 'valechat-tui[anthropic]')"
        ) from exc
    if not api_key:
        raise ProviderError("no API key for anthropic (use /apikey anthropic set <key>)")

    try:
        client = anthropic.Anthropic(api_key=api_key)
        response = client.messages.create(
            model=model,
            max_tokens=MAX_TOKENS,
            messages=_chat_history(history),
        )
    except anthropic.APIError as exc:
        raise ProviderError(f"anthropic: {exc}") from exc

    text = "".join(block.text for block in response.content if hasattr(block, "text"))
    return text, response.usage.input_tokens, response.usage.output_tokens


def openai_completion(history: list[ChatMessage], model: str, api_key: str | None) -> tuple[str, int, int]:
    try:
        import openai  # type: ignore[import-untyped]
    except ImportError as exc:
        raise ProviderError("openai SDK not installed (pip install 'valechat-tui[openai]')") from exc
    if not api_key:
        raise ProviderError("no API key for openai (use /apikey openai set <key>)")

    try:
        client = openai.OpenAI(api_key=api_key)
        response = client.chat.completions.create(
            model=model,
            messages=_chat_history(history),
            max_tokens=MAX_TOKENS,
        )
    except openai.OpenAIError as exc:
        raise ProviderError(f"openai: {exc}") from exc

    text = response.choices[0].message.content or ""
    usage = response.usage
    return text, getattr(usage, "prompt_tokens", 0), getattr(usage, "completion_tokens", 0)


BUILTIN_COMPLETIONS: dict[str, Completion] = {
    "echo": echo_completion,
    "anthropic": anthropic_completion,
    "openai": openai_completion,
}


class ProviderRouter:
    """Implements ``ProviderDispatch`` over the configured providers."""

    def __init__(
        self,
        messages: MessageRepository,
        credentials: CredentialStore,
        usage: UsageRepository,
        providers: dict[str, ProviderConfig] | None = None,
        completions: dict[str, Completion] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.messages = messages
        self.credentials = credentials
        self.usage = usage
        self.providers = providers if providers is not None else dict(DEFAULT_PROVIDERS)
        self.completions = completions if completions is not None else dict(BUILTIN_COMPLETIONS)
        self._clock = clock

    def resolve(self, preferred_provider: str | None, preferred_model: str | None) -> tuple[str, str]:
        """Pick the provider and model for a request."""
        if preferred_provider:
            name = preferred_provider
            config = self.providers.get(name)
            if config is None:
                raise ProviderError(f"unknown provider: {name}")
            if not config.enabled:
                raise ProviderError(f"provider '{name}' is not enabled")
        else:
            enabled = [n for n, c in self.providers.items() if c.enabled]
            if not enabled:
                raise ProviderError("no providers configured")
            name = enabled[0]
            config = self.providers[name]
        model = preferred_model or config.default_model or next(iter(PROVIDER_MODELS.get(name, ())), "")
        return name, model

    def check_budgets(self, provider: str) -> None:
        """Refuse the request once a daily, monthly or provider budget is spent."""
        budgets = self.usage.get_budgets()
        if not (budgets.daily or budgets.monthly or provider in budgets.providers):
            return
        if budgets.daily:
            spent, _ = self.usage.get_daily_statistics()
            if spent >= budgets.daily:
                raise ProviderError(f"daily budget of ${budgets.daily:.2f} reached")
        stats = self.usage.get_statistics()
        if budgets.monthly and stats.current_month_cost >= budgets.monthly:
            raise ProviderError(f"monthly budget of ${budgets.monthly:.2f} reached")
        limit = budgets.providers.get(provider)
        entry = stats.by_provider.get(provider)
        if limit and entry and entry.cost >= limit:
            raise ProviderError(f"{provider} budget of ${limit:.2f} reached")

    def send_message(
        self,
        conversation_id: str,
        text: str,
        preferred_provider: str | None = None,
        preferred_model: str | None = None,
    ) -> ProviderReply:
        provider, model = self.resolve(preferred_provider, preferred_model)
        completion = self.completions.get(provider)
        if completion is None:
            raise ProviderError(f"no backend for provider: {provider}")
        self.check_budgets(provider)

        self.messages.append_message(conversation_id, ChatMessage.user(text))
        history = self.messages.get_messages(conversation_id)
        logger.debug("sending %d messages to %s/%s", len(history), provider, model)

        reply_text, input_tokens, output_tokens = completion(
            history, model, self.credentials.get_key(provider)
        )
        cost = estimate_cost(model, input_tokens, output_tokens)

        self.messages.append_message(
            conversation_id, ChatMessage.assistant(reply_text, model=model, cost=cost)
        )
        self.usage.record(
            UsageRecord(
                timestamp=self._clock(),
                provider=provider,
                model=model,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                cost=cost,
                conversation_id=conversation_id,
            )
        )
        return ProviderReply(
            text=reply_text,
            provider=provider,
            model=model,
            cost=cost,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
