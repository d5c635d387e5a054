"""Slash-command parsing.

``parse`` is pure: it maps input text to one of the frozen command records
below, or ``None`` when the text is not a command.  Command names and
sub-actions are case-insensitive; an unknown name keeps its original case
so the error can echo what the user typed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

PREFIX = "/"


class ApiKeyAction(Enum):
    STATUS = "status"
    SET = "set"
    REMOVE = "remove"


class SelectAction(Enum):
    """Shared by /provider and /model."""

    SHOW = "show"
    SET = "set"
    LIST = "list"


class CostAction(Enum):
    SHOW = "show"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    BREAKDOWN = "breakdown"
    ALERTS = "alerts"


class BudgetAction(Enum):
    SHOW = "show"
    DAILY = "daily"
    MONTHLY = "monthly"
    PROVIDER = "provider"
    ALERTS = "alerts"


@dataclass(frozen=True)
class ApiKeyCommand:
    provider: str
    action: ApiKeyAction = ApiKeyAction.STATUS
    key: str | None = None


@dataclass(frozen=True)
class UsageCommand:
    period: str | None = None
    provider: str | None = None


@dataclass(frozen=True)
class ExportCommand:
    format: str = "markdown"
    conversation: str | None = None


@dataclass(frozen=True)
class ProviderCommand:
    action: SelectAction = SelectAction.SHOW
    name: str | None = None


@dataclass(frozen=True)
class ModelCommand:
    action: SelectAction = SelectAction.SHOW
    name: str | None = None


@dataclass(frozen=True)
class CostCommand:
    action: CostAction = CostAction.SHOW


@dataclass(frozen=True)
class BudgetCommand:
    action: BudgetAction = BudgetAction.SHOW
    amount: str | None = None
    provider: str | None = None


@dataclass(frozen=True)
class QuitCommand:
    pass


@dataclass(frozen=True)
class HelpCommand:
    pass


@dataclass(frozen=True)
class UnknownCommand:
    name: str


@dataclass(frozen=True)
class InvalidCommand:
    """A known command with arguments it cannot accept."""

    name: str
    message: str


SlashCommand = Union[
    ApiKeyCommand,
    UsageCommand,
    ExportCommand,
    ProviderCommand,
    ModelCommand,
    CostCommand,
    BudgetCommand,
    QuitCommand,
    HelpCommand,
    UnknownCommand,
    InvalidCommand,
]


def is_command(text: str) -> bool:
    return text.startswith(PREFIX)


def parse(text: str) -> SlashCommand | None:
    """Parse *text* into a command, or ``None`` if it lacks the ``/`` prefix."""
    if not is_command(text):
        return None
    parts = text[len(PREFIX) :].split()
    if not parts:
        return HelpCommand()

    name = parts[0].lower()
    args = parts[1:]
    parser = _PARSERS.get(name)
    if parser is None:
        return UnknownCommand(parts[0])
    return parser(args)


def _take_options(args: list[str], options: dict[str, str]) -> dict[str, str]:
    """Collect ``--flag value`` / ``-f value`` / ``flag value`` pairs.

    *options* maps every accepted spelling to its canonical name.  A flag
    with no value after it and unrecognised words are skipped.
    """
    found: dict[str, str] = {}
    i = 0
    while i < len(args):
        canonical = options.get(args[i].lower())
        if canonical is not None and i + 1 < len(args):
            found[canonical] = args[i + 1]
            i += 2
        else:
            i += 1
    return found


def _parse_apikey(args: list[str]) -> SlashCommand:
    usage = "Usage: /apikey <provider> [status|set <key>|remove]"
    if not args:
        return InvalidCommand("apikey", usage)
    provider = args[0].lower()
    if len(args) == 1:
        return ApiKeyCommand(provider)
    action = args[1].lower().lstrip("-")
    if action == "status":
        return ApiKeyCommand(provider, ApiKeyAction.STATUS)
    if action == "set":
        if len(args) < 3:
            return InvalidCommand("apikey", "apikey set requires a key. " + usage)
        return ApiKeyCommand(provider, ApiKeyAction.SET, args[2])
    if action == "remove":
        return ApiKeyCommand(provider, ApiKeyAction.REMOVE)
    return InvalidCommand("apikey", usage)


def _parse_usage(args: list[str]) -> SlashCommand:
    found = _take_options(
        args,
        {
            "--period": "period",
            "-p": "period",
            "period": "period",
            "--provider": "provider",
            "provider": "provider",
        },
    )
    return UsageCommand(period=found.get("period"), provider=found.get("provider"))


def _parse_export(args: list[str]) -> SlashCommand:
    found = _take_options(
        args,
        {
            "--format": "format",
            "-f": "format",
            "format": "format",
            "--conversation": "conversation",
            "-c": "conversation",
            "conversation": "conversation",
        },
    )
    return ExportCommand(
        format=found.get("format", "markdown").lower(),
        conversation=found.get("conversation"),
    )


def _parse_select(args: list[str], record: type) -> SlashCommand:
    if not args:
        return record(SelectAction.SHOW)
    if args[0].lower() in ("list", "all"):
        return record(SelectAction.LIST)
    return record(SelectAction.SET, args[0])


def _parse_provider(args: list[str]) -> SlashCommand:
    return _parse_select(args, ProviderCommand)


def _parse_model(args: list[str]) -> SlashCommand:
    return _parse_select(args, ModelCommand)


_COST_ACTIONS = {
    "today": CostAction.TODAY,
    "week": CostAction.WEEK,
    "month": CostAction.MONTH,
    "breakdown": CostAction.BREAKDOWN,
    "by-provider": CostAction.BREAKDOWN,
    "alerts": CostAction.ALERTS,
}


def _parse_cost(args: list[str]) -> SlashCommand:
    if not args:
        return CostCommand()
    return CostCommand(_COST_ACTIONS.get(args[0].lower(), CostAction.SHOW))


def _parse_budget(args: list[str]) -> SlashCommand:
    if not args:
        return BudgetCommand()
    action = args[0].lower()
    if action == "daily" and len(args) >= 2:
        return BudgetCommand(BudgetAction.DAILY, amount=args[1])
    if action == "monthly" and len(args) >= 2:
        return BudgetCommand(BudgetAction.MONTHLY, amount=args[1])
    if action == "provider" and len(args) >= 3:
        return BudgetCommand(BudgetAction.PROVIDER, amount=args[2], provider=args[1].lower())
    if action == "alerts":
        return BudgetCommand(BudgetAction.ALERTS)
    return BudgetCommand()


_PARSERS = {
    "apikey": _parse_apikey,
    "usage": _parse_usage,
    "export": _parse_export,
    "provider": _parse_provider,
    "model": _parse_model,
    "cost": _parse_cost,
    "budget": _parse_budget,
    "quit": lambda args: QuitCommand(),
    "exit": lambda args: QuitCommand(),
    "help": lambda args: HelpCommand(),
}
