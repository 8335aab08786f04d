"""Flask REST API exposing the budget tracker services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.insights import DEFAULT_CURRENCY_SYMBOL
from budget_core.models import json_number
from budget_core.services import BudgetTracker
from budget_core.storage import DEFAULT_STORAGE_KEY, FileStore, MemoryStore, PersistenceManager


def create_app(data_dir: Optional[Path] = None, storage_key: Optional[str] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("BUDGET_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("BUDGET_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    data_path = Path(data_dir or os.getenv("BUDGET_TRACKER_DATA_DIR", "data"))
    key = storage_key or os.getenv("BUDGET_TRACKER_STORAGE_KEY", DEFAULT_STORAGE_KEY)
    persistence = PersistenceManager(FileStore(data_path), MemoryStore(), key=key)
    tracker = BudgetTracker(
        persistence,
        currency=os.getenv("BUDGET_TRACKER_CURRENCY", DEFAULT_CURRENCY_SYMBOL),
    )

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _budget_payload() -> Dict[str, Any]:
        return {"budget": json_number(tracker.budget), "budgetPeriod": tracker.budget_period}

    @app.get("/budget")
    def get_budget():
        return _success(_budget_payload())

    @app.put("/budget")
    def set_budget():
        payload = _json_body()
        result = tracker.set_budget_from_value(payload.get("value"))
        if not result.valid:
            raise ValidationError(result.error)
        if payload.get("period"):
            tracker.set_budget_period(str(payload["period"]))
        return _success(_budget_payload())

    @app.get("/expenses")
    def list_expenses():
        criteria = {
            "search": request.args.get("search"),
            "category": request.args.get("category"),
            "dateRange": request.args.get("dateRange"),
            "amountRange": request.args.get("amountRange"),
        }
        expenses = tracker.get_filtered_expenses(criteria)
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "totals": tracker.totals().to_dict(),
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = tracker.add_expense(
            payload.get("title"), payload.get("amount"), payload.get("category")
        )
        return _success(expense.to_dict(), 201)

    @app.delete("/expenses")
    def clear_expenses():
        tracker.clear_all_expenses()
        return _success({}, 204)

    @app.get("/expenses/<int:expense_id>")
    def get_expense(expense_id: int):
        expense = tracker.get_expense(expense_id)
        return _success(expense.to_dict())

    @app.put("/expenses/<int:expense_id>")
    def update_expense(expense_id: int):
        tracker.get_expense(expense_id)
        payload = _json_body()
        tracker.edit_expense(expense_id)
        updated = tracker.update_expense(
            payload.get("title"), payload.get("amount"), payload.get("category")
        )
        if not updated:
            tracker.cancel_edit()
            raise ValidationError("title, amount and category must all be valid")
        return _success(tracker.get_expense(expense_id).to_dict())

    @app.delete("/expenses/<int:expense_id>")
    def delete_expense(expense_id: int):
        if not tracker.delete_expense(expense_id):
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        return _success({**_budget_payload(), **tracker.totals().to_dict()})

    @app.get("/insights")
    def insights():
        return _success({"items": [insight.to_dict() for insight in tracker.insights()]})

    @app.get("/chart")
    def chart():
        return _success(tracker.chart_series(request.args.get("type")))

    @app.get("/export")
    def export_data():
        response = jsonify(tracker.export_data())
        response.headers["Content-Disposition"] = (
            f'attachment; filename="{tracker.export_filename()}"'
        )
        return response

    @app.post("/import")
    def import_data():
        payload = _json_body()
        count = tracker.import_data(payload)
        return _success({"imported": count, **_budget_payload()})

    return app
