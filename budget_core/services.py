"""Framework-agnostic business services for the budget tracker."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .charts import ChartService
from .exceptions import RecordNotFoundError, ValidationError
from .filters import FilterCriteria, apply_filters
from .insights import DEFAULT_CURRENCY_SYMBOL, generate_insights
from .models import Expense, Insight, Totals, ValidationResult, isoformat_utc, json_number
from .security import sanitize_input
from .storage import PersistenceManager
from .validators import (
    coerce_number,
    validate_budget,
    validate_category,
    validate_expense_amount,
    validate_expense_title,
)

__all__ = ["BudgetTracker", "DEFAULT_BUDGET_PERIOD", "EXPORT_VERSION"]

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_PERIOD = "monthly"
EXPORT_VERSION = "2.0"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BudgetTracker:
    """Owns the ledger: budget, expenses, id counter and the editing cursor.

    Every mutating operation validates its input, updates the in-memory
    ledger and then writes the whole ledger through the persistence manager.
    """

    def __init__(
        self,
        persistence: PersistenceManager,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        charts: Optional[ChartService] = None,
        currency: str = DEFAULT_CURRENCY_SYMBOL,
        autoload: bool = True,
    ) -> None:
        self.budget = Decimal("0")
        self.budget_period = DEFAULT_BUDGET_PERIOD
        self.next_id = 1
        self.editing_id: Optional[int] = None
        self._expenses: List[Expense] = []
        self._persistence = persistence
        self._clock = clock or _utc_now
        self.charts = charts or ChartService()
        self.currency = currency
        if autoload:
            self.load_data()  # Hydrate the ledger from persistence on construction.

    @property
    def expenses(self) -> List[Expense]:
        """Expenses in insertion order; a copy, so callers cannot mutate the ledger."""
        return list(self._expenses)

    # Budget ---------------------------------------------------------------
    def set_budget_from_value(self, value: object) -> ValidationResult:
        check = validate_budget(value)
        if not check.valid:
            return check
        self.budget = coerce_number(value)
        self.update_display()
        self.save_data()
        return check

    def set_budget_period(self, period: str) -> None:
        self.budget_period = sanitize_input(period).strip() or DEFAULT_BUDGET_PERIOD
        self.save_data()

    # Expenses -------------------------------------------------------------
    def add_expense(self, title: object, amount: object, category: object) -> Expense:
        if not validate_expense_title(title):
            raise ValidationError("Invalid title")
        if not validate_expense_amount(amount):
            raise ValidationError("Invalid amount")
        if not validate_category(category):
            raise ValidationError("Invalid category")

        expense = Expense(
            id=self.next_id,
            title=sanitize_input(title),
            amount=coerce_number(amount),
            category=category,
            date=self._clock(),
        )
        self.next_id += 1
        self._expenses.append(expense)
        logger.debug("Added expense %s (%s)", expense.id, expense.category)
        self.update_display()
        self.save_data()
        return expense

    def edit_expense(self, expense_id: int) -> None:
        self.editing_id = expense_id

    def cancel_edit(self) -> None:
        self.editing_id = None

    def update_expense(self, title: object, amount: object, category: object) -> bool:
        index = self._index_of(self.editing_id)
        if index is None:
            return False
        if not validate_expense_title(title):
            return False
        if not validate_expense_amount(amount):
            return False
        if not validate_category(category):
            return False

        self._expenses[index] = replace(
            self._expenses[index],
            title=sanitize_input(title),
            amount=coerce_number(amount),
            category=category,
            updated_at=self._clock(),
        )
        logger.debug("Updated expense %s", self.editing_id)
        self.editing_id = None
        self.update_display()
        self.save_data()
        return True

    def delete_expense(self, expense_id: int) -> bool:
        before = len(self._expenses)
        self._expenses = [expense for expense in self._expenses if expense.id != expense_id]
        if len(self._expenses) == before:
            return False
        if self.editing_id == expense_id:
            self.editing_id = None
        logger.debug("Deleted expense %s", expense_id)
        self.update_display()
        self.save_data()
        return True

    def clear_all_expenses(self) -> None:
        self._expenses = []
        # next_id is kept so cleared ids are never handed out again.
        self.editing_id = None
        self.update_display()
        self.save_data()

    def get_expense(self, expense_id: int) -> Expense:
        """Return an expense or raise if it does not exist."""
        index = self._index_of(expense_id)
        if index is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return self._expenses[index]

    # Derived views ----------------------------------------------------------
    def get_filtered_expenses(
        self, criteria: Union[FilterCriteria, Mapping[str, object], None] = None
    ) -> List[Expense]:
        if not isinstance(criteria, FilterCriteria):
            criteria = FilterCriteria.from_mapping(criteria)
        return apply_filters(self._expenses, criteria, now=self._clock().astimezone())

    def totals(self) -> Totals:
        total = sum((expense.amount for expense in self._expenses), start=Decimal("0"))
        return Totals(
            total_expenses=total,
            balance=self.budget - total,
            categories_used=len({expense.category for expense in self._expenses}),
        )

    def update_display(self) -> Totals:
        totals = self.totals()
        logger.debug(
            "Ledger totals: spent=%s balance=%s categories=%s",
            totals.total_expenses,
            totals.balance,
            totals.categories_used,
        )
        return totals

    def insights(self) -> List[Insight]:
        return generate_insights(self._expenses, self.budget, self.currency)

    def chart_series(self, chart_type: Optional[str] = None) -> Dict[str, Any]:
        if chart_type is not None:
            self.charts.set_type(chart_type)
        return self.charts.series(self._expenses, today=self._clock().date())

    # Persistence ------------------------------------------------------------
    def save_data(self) -> bool:
        payload = {
            "budget": json_number(self.budget),
            "budgetPeriod": self.budget_period,
            "expenses": [expense.to_dict() for expense in self._expenses],
            "nextId": self.next_id,
            "lastSaved": isoformat_utc(self._clock()),
        }
        result = self._persistence.save(payload)
        if not result.ok:
            logger.error("Ledger kept in memory only; save failed with %s", result.error)
        return result.ok

    def load_data(self) -> None:
        data = self._persistence.load()
        if data is None:
            return
        budget = coerce_number(data.get("budget"))
        self.budget = budget if budget is not None else Decimal("0")
        self.budget_period = str(data.get("budgetPeriod") or DEFAULT_BUDGET_PERIOD)
        raw_expenses = data.get("expenses")
        self._expenses = _hydrate_expenses(raw_expenses) if isinstance(raw_expenses, list) else []
        # Never hand out an id that is already present, even if nextId was lost.
        self.next_id = max(_coerce_next_id(data.get("nextId")), self._max_id() + 1)

    def export_data(self) -> Dict[str, Any]:
        return {
            "budget": json_number(self.budget),
            "budgetPeriod": self.budget_period,
            "expenses": [expense.to_dict() for expense in self._expenses],
            "exportDate": isoformat_utc(self._clock()),
            "version": EXPORT_VERSION,
        }

    def export_filename(self) -> str:
        return f"budget-tracker-export-{self._clock().date().isoformat()}.json"

    def import_data(self, payload: Mapping[str, Any]) -> int:
        """Replace the whole ledger with an exported document; returns the expense count."""
        if not isinstance(payload, Mapping):
            raise ValidationError("Import document must be a JSON object")
        if "budget" not in payload or "expenses" not in payload:
            raise ValidationError("Import document must contain budget and expenses")
        if not isinstance(payload["expenses"], list):
            raise ValidationError("expenses must be a list")

        expenses = _hydrate_expenses(payload["expenses"], strict=True)
        budget = coerce_number(payload["budget"])
        self.budget = budget if budget is not None else Decimal("0")
        self.budget_period = str(payload.get("budgetPeriod") or DEFAULT_BUDGET_PERIOD)
        self._expenses = expenses
        self.next_id = self._max_id() + 1
        self.editing_id = None
        logger.info("Imported %s expenses", len(expenses))
        self.update_display()
        self.save_data()
        return len(expenses)

    # Internal helpers -----------------------------------------------------
    def _index_of(self, expense_id: Optional[int]) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    def _max_id(self) -> int:
        return max((expense.id for expense in self._expenses), default=0)


def _coerce_next_id(raw: object) -> int:
    number = coerce_number(raw)
    if number is None or number < 1:
        return 1
    return int(number)


def _hydrate_expenses(records: Iterable[object], *, strict: bool = False) -> List[Expense]:
    expenses: List[Expense] = []
    seen = set()
    for record in records:
        try:
            if not isinstance(record, dict):
                raise TypeError("expense record must be an object")
            expense = Expense.from_dict(record)
        except (AttributeError, KeyError, TypeError, ValueError, InvalidOperation) as exc:
            if strict:
                raise ValidationError(f"Malformed expense record: {exc}") from exc
            logger.warning("Skipping malformed expense record: %s", exc)
            continue
        if expense.id in seen:
            if strict:
                raise ValidationError(f"Duplicate expense id {expense.id}")
            logger.warning("Skipping duplicate expense id %s", expense.id)
            continue
        seen.add(expense.id)
        expenses.append(expense)
    return expenses
