from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from budget_core.filters import FilterCriteria, apply_filters, date_range_start
from budget_core.models import Expense

from .conftest import NOW


def _expense(expense_id, title, amount, category, age):
    return Expense(
        id=expense_id,
        title=title,
        amount=Decimal(str(amount)),
        category=category,
        date=NOW - age,
    )


@pytest.fixture
def expenses():
    # Deliberately not in date order.
    return [
        _expense(3, "Lunch", 10, "food", timedelta(days=10)),
        _expense(1, "Groceries", 8, "food", timedelta(hours=1)),
        _expense(4, "Cinema", 50, "entertainment", timedelta(days=40)),
        _expense(2, "Bus pass", 45, "transport", timedelta(days=2)),
        _expense(5, "Dinner out", 10.01, "food", timedelta(hours=3)),
    ]


def ids(expenses):
    return [expense.id for expense in expenses]


def test_category_and_amount_range_compose(expenses):
    criteria = FilterCriteria.from_mapping({"category": "food", "amountRange": "0-10"})
    assert ids(apply_filters(expenses, criteria, now=NOW)) == [1, 3]


def test_input_is_not_mutated(expenses):
    snapshot = list(expenses)
    reference = expenses
    result = apply_filters(expenses, FilterCriteria(category="food"), now=NOW)
    assert expenses is reference
    assert expenses == snapshot
    assert result is not expenses


def test_no_criteria_sorts_most_recent_first(expenses):
    assert ids(apply_filters(expenses, now=NOW)) == [1, 5, 2, 3, 4]


def test_search_is_case_insensitive_substring(expenses):
    assert ids(apply_filters(expenses, FilterCriteria(search="LUNCH"), now=NOW)) == [3]
    assert ids(apply_filters(expenses, FilterCriteria(search="in"), now=NOW)) == [5, 4]


@pytest.mark.parametrize(
    "date_range, expected",
    [
        ("today", [1, 5]),
        ("week", [1, 5, 2]),
        ("month", [1, 5, 2, 3]),
        ("year", [1, 5, 2, 3, 4]),
        ("", [1, 5, 2, 3, 4]),
    ],
)
def test_date_ranges(expenses, date_range, expected):
    assert ids(apply_filters(expenses, FilterCriteria(date_range=date_range), now=NOW)) == expected


@pytest.mark.parametrize(
    "amount, bucket",
    [
        (Decimal("0.01"), "0-10"),
        (Decimal("10"), "0-10"),
        (Decimal("10.01"), "10-50"),
        (Decimal("50"), "10-50"),
        (Decimal("100"), "50-100"),
        (Decimal("100.01"), "100+"),
    ],
)
def test_amount_boundaries_belong_to_one_bucket(amount, bucket):
    expense = _expense(1, "Item", amount, "other", timedelta(hours=1))
    matched = [
        name
        for name in ("0-10", "10-50", "50-100", "100+")
        if apply_filters([expense], FilterCriteria(amount_range=name), now=NOW)
    ]
    assert matched == [bucket]


def test_unknown_amount_range_disables_axis(expenses):
    assert len(apply_filters(expenses, FilterCriteria(amount_range="huge"), now=NOW)) == 5


def test_date_range_boundaries():
    assert date_range_start("today", NOW) == datetime(2026, 10, 18, tzinfo=timezone.utc)
    assert date_range_start("week", NOW) == datetime(2026, 10, 11, tzinfo=timezone.utc)
    assert date_range_start("month", NOW) == datetime(2026, 9, 18, tzinfo=timezone.utc)
    assert date_range_start("decade", NOW) is None


def test_month_boundary_clamps_day_of_month():
    now = datetime(2026, 3, 31, 15, 30, tzinfo=timezone.utc)
    assert date_range_start("month", now) == datetime(2026, 2, 28, tzinfo=timezone.utc)


def test_month_boundary_wraps_year():
    now = datetime(2026, 1, 15, 8, 0, tzinfo=timezone.utc)
    assert date_range_start("month", now) == datetime(2025, 12, 15, tzinfo=timezone.utc)


def test_criteria_from_mapping_accepts_both_key_styles():
    camel = FilterCriteria.from_mapping({"dateRange": "week", "amountRange": "100+"})
    snake = FilterCriteria.from_mapping({"date_range": "week", "amount_range": "100+"})
    assert camel == snake == FilterCriteria(date_range="week", amount_range="100+")
    assert FilterCriteria.from_mapping(None) == FilterCriteria()
    assert FilterCriteria.from_mapping({"search": None, "category": ""}) == FilterCriteria()
