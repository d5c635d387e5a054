"""Slash-command execution.

``CommandExecutor.execute`` turns a parsed command into the text shown as a
system message.  It never raises: collaborator failures are rendered into
the returned text.  Commands that change application state (provider,
model, quit) post an event instead of touching the UI.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from ..constants import EXPORT_FORMATS, PROVIDER_MODELS
from ..core.collaborators import Backend, CollaboratorError
from ..events import Event, Quit, SetModel, SetProvider
from ..features.export import export_conversation, export_filename, normalize_format
from ..log import logger
from .parser import (
    ApiKeyAction,
    ApiKeyCommand,
    BudgetAction,
    BudgetCommand,
    CostAction,
    CostCommand,
    ExportCommand,
    HelpCommand,
    InvalidCommand,
    ModelCommand,
    ProviderCommand,
    QuitCommand,
    SelectAction,
    SlashCommand,
    UnknownCommand,
    UsageCommand,
)

EXPORTS_DIR = Path.home() / ".valechat" / "exports"

# Fraction of a budget at which /cost alerts starts warning.
ALERT_THRESHOLD = 0.8
CRITICAL_THRESHOLD = 0.95

HELP_TEXT = """\
🔧 **Available Slash Commands** (case-insensitive)

**Provider & Model Control:**
• `/provider` - Show current provider
• `/provider list` - List all available providers
• `/provider <name>` - Switch to provider
• `/model` - Show current model
• `/model list` - List all available models
• `/model <name>` - Switch to model

**API Key Management:**
• `/apikey <provider>` - Show API key status
• `/apikey <provider> set <key>` - Set API key
• `/apikey <provider> remove` - Remove API key

**Usage & Billing:**
• `/usage` - Show usage statistics
• `/usage period <today|week|month>` - Usage for period
• `/usage provider <name>` - Usage for specific provider

**Export:**
• `/export` - Export all conversations
• `/export format json` - Export in format (json, markdown, txt)
• `/export conversation <id>` - Export specific conversation

**Cost Tracking:**
• `/cost` - Show current spending overview
• `/cost today` - Show today's spending
• `/cost week` - Show this week's spending
• `/cost month` - Show monthly spending
• `/cost breakdown` - Show spending by provider
• `/cost alerts` - Show budget warnings

**Budget Management:**
• `/budget` - Show current budget limits
• `/budget daily <amount>` - Set daily spending limit
• `/budget monthly <amount>` - Set monthly spending limit
• `/budget provider <name> <limit>` - Set provider spending limit
• `/budget alerts` - Show budget alert configuration

**Other:**
• `/help` - Show this help message
• `/quit` or `/exit` - Exit ValeChat

**Examples:**
• `/PROVIDER anthropic` - Switch to Anthropic (case insensitive)
• `/Model LIST` - List all models
• `/APIKEY openai` - Check OpenAI API key status
• `/budget daily 50` - Set $50 daily limit"""


def _mask_key(key: str) -> str:
    if len(key) > 10:
        return f"{key[:4]}...{key[-4:]}"
    return "***"


def _parse_amount(amount: str | None) -> float | None:
    """Positive float from *amount*, or ``None`` if it is not one."""
    try:
        value = float(amount or "")
    except ValueError:
        return None
    return value if value > 0 else None


class CommandExecutor:
    """Runs slash commands against the backend collaborators."""

    def __init__(
        self,
        backend: Backend,
        send_event: Callable[[Event], None],
        exports_dir: Path | None = None,
    ) -> None:
        self.backend = backend
        self.send_event = send_event
        self.exports_dir = exports_dir or EXPORTS_DIR

    def execute(
        self,
        command: SlashCommand,
        provider: str | None = None,
        model: str | None = None,
    ) -> str:
        """Run *command*; *provider* and *model* are the session's current choices."""
        logger.debug("executing slash command %r", command)
        try:
            return self._dispatch(command, provider, model)
        except CollaboratorError as exc:
            return f"❌ Error: {exc}"
        except Exception as exc:
            logger.debug("slash command %r failed", command, exc_info=True)
            return f"❌ Command failed: {exc}"

    def _dispatch(self, command: SlashCommand, provider: str | None, model: str | None) -> str:
        if isinstance(command, ApiKeyCommand):
            return self.apikey(command)
        if isinstance(command, UsageCommand):
            return self.usage(command)
        if isinstance(command, ExportCommand):
            return self.export(command)
        if isinstance(command, ProviderCommand):
            return self.provider(command, provider)
        if isinstance(command, ModelCommand):
            return self.model(command, model)
        if isinstance(command, CostCommand):
            return self.cost(command)
        if isinstance(command, BudgetCommand):
            return self.budget(command)
        if isinstance(command, QuitCommand):
            self.send_event(Quit())
            return "👋 **Goodbye!** Exiting ValeChat..."
        if isinstance(command, HelpCommand):
            return HELP_TEXT
        if isinstance(command, InvalidCommand):
            return f"❌ {command.message}\n\nType /help for available commands."
        if isinstance(command, UnknownCommand):
            return f"Unknown command: /{command.name}\n\nType /help for available commands."
        raise TypeError(f"unsupported command {command!r}")

    # -- /apikey ----------------------------------------------------------------

    def apikey(self, command: ApiKeyCommand) -> str:
        credentials = self.backend.credentials
        name = command.provider
        if command.action is ApiKeyAction.SET:
            credentials.set_key(name, command.key or "")
            return f"✅ API key set for provider: {name}"
        if command.action is ApiKeyAction.REMOVE:
            credentials.remove_key(name)
            return f"✅ API key removed for provider: {name}"
        key = credentials.get_key(name)
        if key:
            return f"✅ API key configured for provider: {name} ({_mask_key(key)})"
        return f"❌ No API key configured for provider: {name}"

    # -- /provider and /model ---------------------------------------------------

    def provider(self, command: ProviderCommand, current: str | None) -> str:
        providers = self.backend.providers
        if command.action is SelectAction.SHOW:
            if current:
                return f"🔧 **Current Provider**: {current}"
            try:
                default, _ = self.backend.default_provider_and_model()
            except CollaboratorError:
                return "🔧 **Current Provider**: Not set (no enabled providers found)"
            return f"🔧 **Current Provider**: Not set (using default: {default})"
        if command.action is SelectAction.LIST:
            lines = ["🔧 **Available Providers**", ""]
            for name, config in providers.items():
                status = "✅ enabled" if config.enabled else "❌ disabled"
                lines.append(f"**{name}** ({status})")
            return "\n".join(lines)

        name = (command.name or "").lower()
        config = providers.get(name)
        if config is None:
            available = ", ".join(providers) or "none"
            return f"❌ Provider '{name}' not found.\n\n**Available providers**: {available}"
        if not config.enabled:
            return f"❌ Provider '{name}' is not enabled. Enable it in configuration first."
        self.send_event(SetProvider(name))
        return f"✅ **Provider switched to**: {name}"

    def model(self, command: ModelCommand, current: str | None) -> str:
        if command.action is SelectAction.SHOW:
            if current:
                return f"🤖 **Current Model**: {current}"
            try:
                _, default = self.backend.default_provider_and_model()
            except CollaboratorError:
                return "🤖 **Current Model**: Not set (no enabled providers found)"
            return f"🤖 **Current Model**: Not set (using default: {default})"
        if command.action is SelectAction.LIST:
            lines = ["🤖 **Available Models**", ""]
            for name, config in self.backend.providers.items():
                status = "✅ enabled" if config.enabled else "❌ disabled"
                lines.append(f"**{name}** ({status})")
                if config.enabled:
                    models = list(PROVIDER_MODELS.get(name, ()))
                    if config.default_model and config.default_model not in models:
                        models.insert(0, config.default_model)
                    lines.extend(f"  • {m}" for m in models or ["unknown"])
                lines.append("")
            return "\n".join(lines)

        self.send_event(SetModel(command.name or ""))
        return f"✅ **Model switched to**: {command.name}"

    # -- /usage -----------------------------------------------------------------

    def usage(self, command: UsageCommand) -> str:
        usage = self.backend.usage
        stats = usage.get_statistics()
        if command.provider:
            name = command.provider.lower()
            entry = stats.by_provider.get(name)
            if entry is None:
                return f"📊 **Usage for {name}**\n\nNo recorded requests."
            return (
                f"📊 **Usage for {name}**\n\n"
                f"Requests: {entry.requests}\n"
                f"Cost: ${entry.cost:.4f}"
            )

        period = (command.period or "").lower()
        if period == "today":
            cost, tokens = usage.get_daily_statistics()
            return f"📊 **Usage Today**\n\nCost: ${cost:.4f}\nTokens: {tokens}"
        if period == "week":
            total = sum(cost for _, cost in usage.get_cost_trend(7))
            return f"📊 **Usage This Week**\n\nCost: ${total:.4f}"
        if period == "month":
            return f"📊 **Usage This Month**\n\nCost: ${stats.current_month_cost:.4f}"

        return (
            "📊 **Usage Statistics**\n\n"
            f"Total Requests: {stats.total_requests}\n"
            f"Total Cost: ${stats.total_cost:.4f}\n"
            f"Input Tokens: {stats.total_input_tokens}\n"
            f"Output Tokens: {stats.total_output_tokens}\n"
            f"Current Month: ${stats.current_month_cost:.4f}\n"
            f"Previous Month: ${stats.previous_month_cost:.4f}"
        )

    # -- /export ----------------------------------------------------------------

    def export(self, command: ExportCommand) -> str:
        fmt = normalize_format(command.format)
        if fmt is None:
            return (
                f"❌ Unsupported export format '{command.format}'. "
                f"Use one of: {', '.join(EXPORT_FORMATS)}"
            )
        repo = self.backend.conversations
        if command.conversation:
            conversation = repo.get_conversation(command.conversation)
            if conversation is None:
                return f"❌ Conversation not found: {command.conversation}"
            targets = [conversation]
        else:
            targets = repo.list_conversations()
            if not targets:
                return "❌ No conversations to export"

        self.exports_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for conversation in targets:
            messages = self.backend.messages.get_messages(conversation.id)
            path = self.exports_dir / export_filename(conversation, fmt)
            path.write_text(export_conversation(conversation, messages, fmt), encoding="utf-8")
            written.append(path)

        if len(written) == 1:
            return f"✅ Exported conversation '{targets[0].title}' in {fmt} format to {written[0]}"
        return f"✅ Exported {len(written)} conversations in {fmt} format to {self.exports_dir}"

    # -- /cost ------------------------------------------------------------------

    def cost(self, command: CostCommand) -> str:
        usage = self.backend.usage
        action = command.action
        if action is CostAction.TODAY:
            cost, tokens = usage.get_daily_statistics()
            rate = cost / tokens if tokens else 0.0
            return (
                "📅 **Today's Spending**\n\n"
                f"**Cost**: ${cost:.4f}\n"
                f"**Tokens Used**: {tokens}\n"
                f"**Estimated Rate**: ${rate:.6f}/token"
            )
        if action is CostAction.WEEK:
            trend = usage.get_cost_trend(7)
            total = sum(cost for _, cost in trend)
            lines = [f"📊 **This Week's Spending**: ${total:.4f}", "", "**Daily Breakdown:**"]
            lines.extend(f"• {day}: ${cost:.4f}" for day, cost in trend)
            return "\n".join(lines)
        if action is CostAction.ALERTS:
            return self._cost_alerts()

        stats = usage.get_statistics()
        if action is CostAction.MONTH:
            change = stats.current_month_cost - stats.previous_month_cost
            sign = "+" if change >= 0 else ""
            if stats.previous_month_cost > 0:
                pct = f"{change / stats.previous_month_cost * 100:+.1f}%"
            else:
                pct = "N/A"
            return (
                "📊 **Monthly Spending**\n\n"
                f"**This Month**: ${stats.current_month_cost:.4f}\n"
                f"**Previous Month**: ${stats.previous_month_cost:.4f}\n"
                f"**Change**: {sign}${change:.4f} ({pct})"
            )
        if action is CostAction.BREAKDOWN:
            total = stats.total_cost
            lines = ["🔍 **Cost Breakdown by Provider**", ""]
            for name, entry in stats.by_provider.items():
                pct = entry.cost / total * 100 if total > 0 else 0.0
                lines.append(f"**{name}**: ${entry.cost:.4f} ({pct:.1f}%) - {entry.requests} requests")
            lines += ["", "**By Model:**"]
            for name, entry in stats.by_model.items():
                pct = entry.cost / total * 100 if total > 0 else 0.0
                lines.append(f"• {name} ({entry.provider}): ${entry.cost:.4f} ({pct:.1f}%)")
            return "\n".join(lines)

        average = stats.total_cost / stats.total_requests if stats.total_requests else 0.0
        return (
            "💰 **Cost Overview**\n\n"
            f"**Total Spending**: ${stats.total_cost:.4f}\n"
            f"**Total Requests**: {stats.total_requests}\n"
            f"**This Month**: ${stats.current_month_cost:.4f}\n"
            f"**Last Month**: ${stats.previous_month_cost:.4f}\n"
            f"**Average per Request**: ${average:.6f}"
        )

    def _cost_alerts(self) -> str:
        usage = self.backend.usage
        budgets = usage.get_budgets()
        stats = usage.get_statistics()
        daily_cost, _ = usage.get_daily_statistics()

        checks: list[tuple[str, float, float]] = []
        if budgets.daily:
            checks.append(("Daily", daily_cost, budgets.daily))
        if budgets.monthly:
            checks.append(("Monthly", stats.current_month_cost, budgets.monthly))
        for name, limit in budgets.providers.items():
            entry = stats.by_provider.get(name)
            checks.append((f"{name} provider", entry.cost if entry else 0.0, limit))

        alerts = []
        for label, spent, limit in checks:
            ratio = spent / limit
            if ratio >= CRITICAL_THRESHOLD:
                alerts.append(f"🚨 {label}: ${spent:.2f} of ${limit:.2f} ({ratio:.0%})")
            elif ratio >= ALERT_THRESHOLD:
                alerts.append(f"⚠️ {label}: ${spent:.2f} of ${limit:.2f} ({ratio:.0%})")

        if not checks:
            return "🔔 **Cost Alerts**\n\nNo budgets configured. Use `/budget daily <amount>` to set one."
        if not alerts:
            return "🔔 **Cost Alerts**\n\nNo active alerts. Spending is within all budgets."
        return "🔔 **Cost Alerts**\n\n" + "\n".join(alerts)

    # -- /budget ----------------------------------------------------------------

    def budget(self, command: BudgetCommand) -> str:
        usage = self.backend.usage
        action = command.action
        if action is BudgetAction.DAILY:
            limit = _parse_amount(command.amount)
            if limit is None:
                return "❌ **Invalid amount**. Please provide a positive number (e.g., `/budget daily 50`)"
            usage.set_daily_budget(limit)
            return f"✅ **Daily budget set to**: ${limit:.2f}"
        if action is BudgetAction.MONTHLY:
            limit = _parse_amount(command.amount)
            if limit is None:
                return "❌ **Invalid amount**. Please provide a positive number (e.g., `/budget monthly 1000`)"
            usage.set_monthly_budget(limit)
            return f"✅ **Monthly budget set to**: ${limit:.2f}"
        if action is BudgetAction.PROVIDER:
            name = command.provider or ""
            limit = _parse_amount(command.amount)
            if limit is None:
                return (
                    "❌ **Invalid amount**. Please provide a positive number "
                    f"(e.g., `/budget provider {name} 200`)"
                )
            usage.set_provider_budget(name, limit)
            return f"✅ **{name} provider budget set to**: ${limit:.2f}"
        if action is BudgetAction.ALERTS:
            return (
                "🔔 **Budget Alert Configuration**\n\n"
                f"Warnings: at {ALERT_THRESHOLD:.0%} of a limit\n"
                f"Critical: at {CRITICAL_THRESHOLD:.0%} of a limit\n\n"
                "Use `/cost alerts` to check current spending against your budgets."
            )

        budgets = usage.get_budgets()
        daily = f"${budgets.daily:.2f}" if budgets.daily else "Not set"
        monthly = f"${budgets.monthly:.2f}" if budgets.monthly else "Not set"
        lines = ["💳 **Budget Limits**", "", f"Daily: {daily}", f"Monthly: {monthly}"]
        if budgets.providers:
            lines.append("Provider limits:")
            lines.extend(f"  • {name}: ${limit:.2f}" for name, limit in budgets.providers.items())
        else:
            lines.append("Provider limits: None configured")
        if not (budgets.daily or budgets.monthly):
            lines += ["", "Use `/budget daily <amount>` to set daily limit"]
        return "\n".join(lines)
