"""Data models for the budget tracker domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

__all__ = [
    "Expense",
    "Insight",
    "SaveResult",
    "Totals",
    "ValidationResult",
    "isoformat_utc",
    "json_number",
    "parse_datetime",
]


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with millisecond precision and trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="milliseconds")
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Treat naive datetimes as UTC to avoid accidental timezone drift.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def json_number(value: Decimal) -> Union[int, float]:
    """Render a Decimal as a plain JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _parse_id(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ValueError(f"expense id must be a positive integer, got {raw!r}")
    return raw


def _parse_amount(raw: Any) -> Decimal:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str, Decimal)):
        raise ValueError(f"expense amount must be a number, got {raw!r}")
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValueError(f"expense amount must be a number, got {raw!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"expense amount must be finite, got {raw!r}")
    return amount


@dataclass(frozen=True)
class Expense:
    id: int
    title: str
    amount: Decimal
    category: str
    date: datetime
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "amount": json_number(self.amount),
            "category": self.category,
            "date": isoformat_utc(self.date),
        }
        if self.updated_at is not None:
            payload["updatedAt"] = isoformat_utc(self.updated_at)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data."""
        updated_at = data.get("updatedAt")
        return cls(
            id=_parse_id(data["id"]),
            title=str(data["title"]),
            amount=_parse_amount(data["amount"]),
            category=str(data["category"]),
            date=parse_datetime(data["date"]),
            updated_at=parse_datetime(updated_at) if updated_at else None,
        )


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.valid:
            return {"valid": True}
        return {"valid": False, "error": self.error}


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a persistence attempt; ``storage`` names the store that accepted it."""

    ok: bool
    storage: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Totals:
    total_expenses: Decimal
    balance: Decimal
    categories_used: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalExpenses": json_number(self.total_expenses),
            "balance": json_number(self.balance),
            "categoriesUsed": self.categories_used,
        }


@dataclass(frozen=True)
class Insight:
    title: str
    message: str
    level: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "message": self.message, "level": self.level}
