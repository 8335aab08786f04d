"""Chart data series for the category breakdown and the last-seven-days view."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from .exceptions import ValidationError
from .models import Expense, json_number

__all__ = ["CATEGORY_STYLES", "CHART_TYPES", "ChartService", "category_totals", "daily_totals"]

CHART_TYPES = ("category", "daily")
DAILY_WINDOW = 7

CATEGORY_STYLES: Dict[str, Dict[str, str]] = {
    "food": {"name": "Food & Dining", "color": "#ef4444"},
    "transport": {"name": "Transport", "color": "#3b82f6"},
    "entertainment": {"name": "Entertainment", "color": "#8b5cf6"},
    "shopping": {"name": "Shopping", "color": "#f59e0b"},
    "bills": {"name": "Bills & Utilities", "color": "#06b6d4"},
    "healthcare": {"name": "Healthcare", "color": "#10b981"},
    "other": {"name": "Other", "color": "#6b7280"},
}


def category_label(category: str) -> str:
    return CATEGORY_STYLES.get(category, {}).get("name", category.title())


def category_totals(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Sum amounts per category, keeping the order categories first appear in."""
    totals: Dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
    return totals


def daily_totals(expenses: Iterable[Expense], today: date) -> Dict[date, Decimal]:
    """Sum amounts for each of the last seven days ending ``today``, oldest first."""
    days = [today - timedelta(days=offset) for offset in range(DAILY_WINDOW - 1, -1, -1)]
    totals = {day: Decimal("0") for day in days}
    for expense in expenses:
        day = expense.date.date()
        if day in totals:
            totals[day] += expense.amount
    return totals


class ChartService:
    """Keeps the selected chart type and the last series built for it."""

    def __init__(self, chart_type: str = "category") -> None:
        self.chart_type = chart_type
        self.chart: Optional[Dict[str, Any]] = None

    def set_type(self, chart_type: str) -> None:
        if chart_type not in CHART_TYPES:
            raise ValidationError(f"chart type must be one of: {', '.join(CHART_TYPES)}")
        self.chart_type = chart_type
        self.chart = None

    def series(self, expenses: Iterable[Expense], today: Optional[date] = None) -> Dict[str, Any]:
        if self.chart_type == "daily":
            self.chart = self._daily_series(expenses, today or datetime.now(timezone.utc).date())
        else:
            self.chart = self._category_series(expenses)
        return self.chart

    def destroy(self) -> None:
        self.chart = None

    def _category_series(self, expenses: Iterable[Expense]) -> Dict[str, Any]:
        totals = category_totals(expenses)
        return {
            "type": "category",
            "labels": [category_label(category) for category in totals],
            "data": [json_number(total) for total in totals.values()],
            "colors": [
                CATEGORY_STYLES.get(category, CATEGORY_STYLES["other"])["color"] for category in totals
            ],
        }

    def _daily_series(self, expenses: Iterable[Expense], today: date) -> Dict[str, Any]:
        totals = daily_totals(expenses, today)
        return {
            "type": "daily",
            "days": [day.isoformat() for day in totals],
            "labels": [day.strftime("%a") for day in totals],
            "data": [json_number(total) for total in totals.values()],
        }
