"""Filtering and ordering of ledger expenses for display."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .models import Expense

__all__ = ["AMOUNT_RANGES", "DATE_RANGES", "FilterCriteria", "apply_filters", "date_range_start"]

DATE_RANGES = ("today", "week", "month")

_TEN = Decimal("10")
_FIFTY = Decimal("50")
_HUNDRED = Decimal("100")

AMOUNT_RANGES: Dict[str, Callable[[Decimal], bool]] = {
    "0-10": lambda amount: 0 <= amount <= _TEN,
    "10-50": lambda amount: _TEN < amount <= _FIFTY,
    "50-100": lambda amount: _FIFTY < amount <= _HUNDRED,
    "100+": lambda amount: amount > _HUNDRED,
}


@dataclass(frozen=True)
class FilterCriteria:
    search: str = ""
    category: str = ""
    date_range: str = ""
    amount_range: str = ""

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, object]]) -> "FilterCriteria":
        """Build criteria from a query mapping using camelCase or snake_case keys."""
        raw = raw or {}

        def pick(*keys: str) -> str:
            for key in keys:
                value = raw.get(key)
                if value not in (None, ""):
                    return str(value)
            return ""

        return cls(
            search=pick("search"),
            category=pick("category"),
            date_range=pick("dateRange", "date_range"),
            amount_range=pick("amountRange", "amount_range"),
        )


def _previous_month(day: datetime) -> datetime:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def date_range_start(date_range: str, now: datetime) -> Optional[datetime]:
    """Return the inclusive lower bound for ``date_range`` or None when it is not a known range."""
    if now.tzinfo is None:
        now = now.astimezone()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == "today":
        return today
    if date_range == "week":
        return today - timedelta(days=7)
    if date_range == "month":
        return _previous_month(today)
    return None


def apply_filters(
    expenses: Iterable[Expense],
    criteria: Optional[FilterCriteria] = None,
    *,
    now: Optional[datetime] = None,
) -> List[Expense]:
    """Return the expenses matching every active criterion, most recent first.

    The input collection is never modified; a new list is always returned.
    """
    criteria = criteria or FilterCriteria()
    # Pre-compute normalised filter values once to avoid repeated work per record.
    search = criteria.search.lower() if criteria.search else None
    category = criteria.category or None
    start = (
        date_range_start(criteria.date_range, now or datetime.now().astimezone())
        if criteria.date_range
        else None
    )
    in_amount_range = AMOUNT_RANGES.get(criteria.amount_range)

    def matches(expense: Expense) -> bool:
        if search and search not in expense.title.lower():
            return False
        if category and expense.category != category:
            return False
        if start and expense.date < start:
            return False
        if in_amount_range and not in_amount_range(expense.amount):
            return False
        return True

    return sorted(filter(matches, expenses), key=lambda exp: exp.date, reverse=True)
