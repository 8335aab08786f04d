"""Spending insights derived from the current ledger."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Sequence

from .charts import category_label, category_totals
from .models import Expense, Insight

__all__ = ["DEFAULT_CURRENCY_SYMBOL", "generate_insights"]

DEFAULT_CURRENCY_SYMBOL = "£"
ALERT_THRESHOLD = Decimal("90")
WARNING_THRESHOLD = Decimal("75")


def _fixed(value: Decimal, places: str) -> str:
    return str(value.quantize(Decimal(places), rounding=ROUND_HALF_UP))


def _budget_insight(total: Decimal, budget: Decimal) -> Insight:
    if budget <= 0:
        return Insight(
            "No Budget Set",
            "Set a budget to track how much of it you have used.",
            "info",
        )
    ratio = total / budget * 100
    usage = _fixed(ratio, "0.1")
    if ratio > ALERT_THRESHOLD:
        return Insight(
            "Budget Alert",
            f"You've used {usage}% of your budget. Consider reducing spending.",
            "danger",
        )
    if ratio > WARNING_THRESHOLD:
        return Insight(
            "Budget Warning",
            f"You've used {usage}% of your budget. Monitor your spending closely.",
            "warning",
        )
    return Insight("Budget Status", f"You're doing well! {usage}% of budget used.", "success")


def generate_insights(
    expenses: Sequence[Expense],
    budget: Decimal,
    currency: str = DEFAULT_CURRENCY_SYMBOL,
) -> List[Insight]:
    """Summarise budget usage, the top spending category and the average expense.

    Returns an empty list when there is nothing to summarise.
    """
    if not expenses:
        return []
    total = sum((expense.amount for expense in expenses), start=Decimal("0"))
    insights = [_budget_insight(total, budget)]

    totals = category_totals(expenses)
    # max() keeps the first category on ties, matching a stable descending sort.
    top_category, top_amount = max(totals.items(), key=lambda item: item[1])
    share = _fixed(top_amount / total * 100, "0.1") if total else "0.0"
    insights.append(
        Insight(
            "Top Spending Category",
            f"{category_label(top_category)} accounts for {share}% of your spending "
            f"({currency}{_fixed(top_amount, '0.01')}).",
            "info",
        )
    )

    average = total / len(expenses)
    insights.append(
        Insight(
            "Average Expense",
            f"Your average expense is {currency}{_fixed(average, '0.01')}. "
            f"You've made {len(expenses)} transactions.",
            "info",
        )
    )
    return insights
