"""Validation helpers shared across budget tracker services."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from .models import ValidationResult

EXPENSE_CATEGORIES = (
    "food",
    "transport",
    "entertainment",
    "shopping",
    "bills",
    "healthcare",
    "other",
)

BUDGET_MIN = Decimal("0.01")
BUDGET_MAX = Decimal("999999")
AMOUNT_MIN = Decimal("0.01")
AMOUNT_MAX = Decimal("100000")
TITLE_MAX_LENGTH = 255


def coerce_number(raw: object) -> Optional[Decimal]:
    """Convert raw input to a finite Decimal, or None when it is not numeric."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    elif not isinstance(raw, (int, float, Decimal)):
        return None
    try:
        number = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def validate_budget(raw: object) -> ValidationResult:
    number = coerce_number(raw)
    if number is None:
        return ValidationResult(False, "Budget must be a number")
    if number < BUDGET_MIN:
        return ValidationResult(False, "Budget must be at least 0.01")
    if number > BUDGET_MAX:
        return ValidationResult(False, "Budget exceeds maximum")
    return ValidationResult(True)


def validate_expense_title(title: object) -> bool:
    if not isinstance(title, str):
        return False
    trimmed = title.strip()
    return 1 <= len(trimmed) <= TITLE_MAX_LENGTH


def validate_expense_amount(amount: object) -> bool:
    number = coerce_number(amount)
    if number is None:
        return False
    return AMOUNT_MIN <= number <= AMOUNT_MAX


def validate_category(category: object) -> bool:
    return isinstance(category, str) and category in EXPENSE_CATEGORIES
