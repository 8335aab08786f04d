"""Console interface for the budget tracker."""

from __future__ import annotations

import argparse
import html
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from budget_core.charts import CHART_TYPES
from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.filters import AMOUNT_RANGES, DATE_RANGES
from budget_core.insights import DEFAULT_CURRENCY_SYMBOL
from budget_core.services import BudgetTracker
from budget_core.storage import DEFAULT_STORAGE_KEY, FileStore, MemoryStore, PersistenceManager
from budget_core.validators import EXPENSE_CATEGORIES


def _load_tracker(data_dir: Path, key: str) -> BudgetTracker:
    persistence = PersistenceManager(FileStore(data_dir), MemoryStore(), key=key)
    return BudgetTracker(
        persistence,
        currency=os.getenv("BUDGET_TRACKER_CURRENCY", DEFAULT_CURRENCY_SYMBOL),
    )


def _format_expense(expense: Dict[str, Any]) -> str:
    edited = f" (edited {expense['updatedAt']})" if expense.get("updatedAt") else ""
    return (
        f"[{expense['id']}] {expense['date']} {expense['amount']:.2f}\n"
        f"  {expense['title']} | Category: {expense['category']}{edited}\n"
    )


def _format_totals(tracker: BudgetTracker) -> str:
    totals = tracker.totals()
    return (
        f"Budget ({tracker.budget_period}): {tracker.budget:.2f}\n"
        f"Spent: {totals.total_expenses:.2f}\n"
        f"Balance: {totals.balance:.2f}\n"
        f"Categories used: {totals.categories_used}"
    )


def _require_confirmation(args: argparse.Namespace, action: str) -> bool:
    if args.yes:
        return True
    print(f"Refusing to {action} without --yes.", file=sys.stderr)
    return False


def handle_budget(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    if args.command == "set":
        result = tracker.set_budget_from_value(args.value)
        if not result.valid:
            raise ValidationError(result.error)
        if args.period:
            tracker.set_budget_period(args.period)
        print(f"{tracker.budget_period.capitalize()} budget set to {tracker.budget:.2f}.")
    elif args.command == "show":
        print(_format_totals(tracker))
    return 0


def handle_expense(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    if args.command == "add":
        expense = tracker.add_expense(args.title, args.amount, args.category)
        print("Expense added:\n" + _format_expense(expense.to_dict()))
    elif args.command == "list":
        criteria = {
            "search": args.search,
            "category": args.category,
            "dateRange": args.date_range,
            "amountRange": args.amount_range,
        }
        expenses = tracker.get_filtered_expenses(criteria)
        if not expenses:
            print("No expenses found.")
            return 0
        total = sum(expense.amount for expense in expenses)
        print(f"Found {len(expenses)} expenses (total {total:.2f}):")
        for expense in expenses:
            print(_format_expense(expense.to_dict()))
    elif args.command == "edit":
        existing = tracker.get_expense(args.id)
        tracker.edit_expense(args.id)
        updated = tracker.update_expense(
            args.title if args.title is not None else html.unescape(existing.title),
            args.amount if args.amount is not None else existing.amount,
            args.category if args.category is not None else existing.category,
        )
        if not updated:
            tracker.cancel_edit()
            raise ValidationError("title, amount and category must all be valid")
        print("Expense updated:\n" + _format_expense(tracker.get_expense(args.id).to_dict()))
    elif args.command == "delete":
        if not tracker.delete_expense(args.id):
            raise RecordNotFoundError(f"Expense {args.id} not found")
        print(f"Expense {args.id} deleted.")
    elif args.command == "clear":
        if not _require_confirmation(args, "delete all expenses"):
            return 1
        tracker.clear_all_expenses()
        print("All expenses cleared.")
    return 0


def handle_summary(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    print(_format_totals(tracker))
    return 0


def handle_insights(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    insights = tracker.insights()
    if not insights:
        print("Add some expenses to see insights!")
        return 0
    for insight in insights:
        print(f"{insight.title}: {insight.message}")
    return 0


def handle_chart(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    series = tracker.chart_series(args.type)
    for label, value in zip(series["labels"], series["data"]):
        print(f"{label:<20} {value:>10.2f}")
    return 0


def handle_export(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    target = args.path or Path(tracker.export_filename())
    try:
        target.write_text(json.dumps(tracker.export_data(), indent=2), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to write to {target}") from exc
    print(f"Data exported to {target}.")
    return 0


def handle_import(args: argparse.Namespace, tracker: BudgetTracker) -> int:
    try:
        payload = json.loads(args.path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PersistenceError(f"Unable to read from {args.path}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError("Invalid file format. Expected a JSON export.") from exc
    if not _require_confirmation(args, "replace all current data"):
        return 1
    count = tracker.import_data(payload)
    print(f"Imported {count} expenses.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Budget Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument(
        "--key",
        default=DEFAULT_STORAGE_KEY,
        help=f"Storage key for the ledger (default: {DEFAULT_STORAGE_KEY})",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    budget_parser = subparsers.add_parser("budget", help="Manage the budget")
    budget_sub = budget_parser.add_subparsers(dest="command", required=True)
    budget_set = budget_sub.add_parser("set", help="Set the budget amount")
    budget_set.add_argument("value")
    budget_set.add_argument("--period", help="Budget period label, e.g. monthly or weekly")
    budget_sub.add_parser("show", help="Show budget and totals")

    expense_parser = subparsers.add_parser("expense", help="Manage expenses")
    expense_sub = expense_parser.add_subparsers(dest="command", required=True)

    expense_add = expense_sub.add_parser("add", help="Add a new expense")
    expense_add.add_argument("title")
    expense_add.add_argument("amount")
    expense_add.add_argument("category", choices=EXPENSE_CATEGORIES)

    expense_list = expense_sub.add_parser("list", help="List expenses, most recent first")
    expense_list.add_argument("--search")
    expense_list.add_argument("--category", choices=EXPENSE_CATEGORIES)
    expense_list.add_argument("--date-range", choices=DATE_RANGES)
    expense_list.add_argument("--amount-range", choices=sorted(AMOUNT_RANGES))

    expense_edit = expense_sub.add_parser("edit", help="Edit an existing expense")
    expense_edit.add_argument("id", type=int)
    expense_edit.add_argument("--title")
    expense_edit.add_argument("--amount")
    expense_edit.add_argument("--category", choices=EXPENSE_CATEGORIES)

    expense_delete = expense_sub.add_parser("delete", help="Delete an expense")
    expense_delete.add_argument("id", type=int)

    expense_clear = expense_sub.add_parser("clear", help="Delete all expenses")
    expense_clear.add_argument("--yes", action="store_true", help="Confirm the deletion")

    subparsers.add_parser("summary", help="Show budget, spending and balance")
    subparsers.add_parser("insights", help="Show spending insights")

    chart_parser = subparsers.add_parser("chart", help="Print chart data")
    chart_parser.add_argument("type", choices=CHART_TYPES)

    export_parser = subparsers.add_parser("export", help="Export the ledger to a JSON file")
    export_parser.add_argument("path", nargs="?", type=Path)

    import_parser = subparsers.add_parser("import", help="Replace the ledger from a JSON export")
    import_parser.add_argument("path", type=Path)
    import_parser.add_argument("--yes", action="store_true", help="Confirm replacing all data")

    return parser


HANDLERS = {
    "budget": handle_budget,
    "expense": handle_expense,
    "summary": handle_summary,
    "insights": handle_insights,
    "chart": handle_chart,
    "export": handle_export,
    "import": handle_import,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    tracker = _load_tracker(args.data_dir, args.key)

    try:
        return HANDLERS[args.entity](args, tracker)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
