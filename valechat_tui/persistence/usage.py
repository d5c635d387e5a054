"""Usage records and budgets."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import asdict
from datetime import date, datetime, timedelta
from pathlib import Path

from ..core.collaborators import (
    Budgets,
    ModelUsage,
    ProviderUsage,
    UsageRecord,
    UsageStatistics,
)
from ._base import DATA_DIR, JsonStore

USAGE_FILE = DATA_DIR / "usage.json"


def _month_key(day: date) -> tuple[int, int]:
    return day.year, day.month


def _previous_month(day: date) -> tuple[int, int]:
    first = day.replace(day=1)
    return _month_key(first - timedelta(days=1))


class UsageStore(JsonStore):
    """Append-only request log plus budget limits, in one JSON file."""

    def __init__(
        self,
        path: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(path or USAGE_FILE)
        self._clock = clock

    def _default(self) -> dict:
        return {"records": [], "budgets": {"daily": None, "monthly": None, "providers": {}}}

    def _load(self) -> dict:
        data = self.load_raw()
        if not isinstance(data, dict):
            return self._default()
        defaults = self._default()
        data.setdefault("records", defaults["records"])
        data.setdefault("budgets", defaults["budgets"])
        data["budgets"].setdefault("providers", {})
        return data

    def _records(self) -> list[UsageRecord]:
        with self.lock:
            raw = self._load()["records"]
        return [UsageRecord(**item) for item in raw]

    def _today(self) -> date:
        return datetime.fromtimestamp(self._clock()).date()

    # -- recording ----------------------------------------------------------------

    def record(self, record: UsageRecord) -> None:
        with self.lock:
            data = self._load()
            data["records"].append(asdict(record))
            self.save_raw(data)

    # -- statistics ---------------------------------------------------------------

    def get_statistics(self) -> UsageStatistics:
        today = self._today()
        this_month = _month_key(today)
        last_month = _previous_month(today)
        stats = UsageStatistics()
        for rec in self._records():
            stats.total_requests += 1
            stats.total_cost += rec.cost
            stats.total_input_tokens += rec.input_tokens
            stats.total_output_tokens += rec.output_tokens
            month = _month_key(datetime.fromtimestamp(rec.timestamp).date())
            if month == this_month:
                stats.current_month_cost += rec.cost
            elif month == last_month:
                stats.previous_month_cost += rec.cost

            provider = stats.by_provider.setdefault(rec.provider, ProviderUsage())
            provider.requests += 1
            provider.cost += rec.cost
            model = stats.by_model.setdefault(rec.model, ModelUsage(provider=rec.provider))
            model.requests += 1
            model.cost += rec.cost
        return stats

    def get_daily_statistics(self) -> tuple[float, int]:
        """Cost and total tokens of today's requests."""
        today = self._today()
        cost = 0.0
        tokens = 0
        for rec in self._records():
            if datetime.fromtimestamp(rec.timestamp).date() == today:
                cost += rec.cost
                tokens += rec.input_tokens + rec.output_tokens
        return cost, tokens

    def get_cost_trend(self, days: int) -> list[tuple[str, float]]:
        """``(YYYY-MM-DD, cost)`` for each of the last *days* days, oldest first."""
        today = self._today()
        totals = {today - timedelta(days=offset): 0.0 for offset in range(days)}
        for rec in self._records():
            day = datetime.fromtimestamp(rec.timestamp).date()
            if day in totals:
                totals[day] += rec.cost
        return [(day.isoformat(), totals[day]) for day in sorted(totals)]

    # -- budgets ------------------------------------------------------------------

    def get_budgets(self) -> Budgets:
        with self.lock:
            raw = self._load()["budgets"]
        return Budgets(
            daily=raw.get("daily"),
            monthly=raw.get("monthly"),
            providers=dict(raw.get("providers", {})),
        )

    def _update_budgets(self, **changes: object) -> None:
        with self.lock:
            data = self._load()
            data["budgets"].update(changes)
            self.save_raw(data)

    def set_daily_budget(self, limit: float) -> None:
        self._update_budgets(daily=limit)

    def set_monthly_budget(self, limit: float) -> None:
        self._update_budgets(monthly=limit)

    def set_provider_budget(self, provider: str, limit: float) -> None:
        with self.lock:
            data = self._load()
            data["budgets"]["providers"][provider] = limit
            self.save_raw(data)
