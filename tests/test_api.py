import pytest

from budget_api.app import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app(tmp_path)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _add(client, title="Coffee", amount=3, category="food"):
    return client.post("/expenses", json={"title": title, "amount": amount, "category": category})


def test_budget_round_trip(client):
    assert client.get("/budget").get_json() == {"budget": 0, "budgetPeriod": "monthly"}
    response = client.put("/budget", json={"value": "250", "period": "weekly"})
    assert response.status_code == 200
    assert response.get_json() == {"budget": 250, "budgetPeriod": "weekly"}


def test_invalid_budget_is_rejected(client):
    response = client.put("/budget", json={"value": 0})
    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "Validation error"
    assert body["details"] == "Budget must be at least 0.01"


def test_non_json_body_is_rejected(client):
    response = client.put("/budget", data="value=5")
    assert response.status_code == 400


def test_create_and_list_expenses(client):
    client.put("/budget", json={"value": 100})
    created = _add(client)
    assert created.status_code == 201
    assert created.get_json()["id"] == 1
    _add(client, "Taxi", 12, "transport")

    body = client.get("/expenses").get_json()
    assert sorted(item["title"] for item in body["items"]) == ["Coffee", "Taxi"]
    assert body["totals"] == {"totalExpenses": 15, "balance": 85, "categoriesUsed": 2}


def test_list_expenses_applies_filters(client):
    _add(client, "Coffee", 3, "food")
    _add(client, "Dinner", 40, "food")
    _add(client, "Taxi", 8, "transport")
    body = client.get("/expenses?category=food&amountRange=0-10").get_json()
    assert [item["title"] for item in body["items"]] == ["Coffee"]
    body = client.get("/expenses?search=din").get_json()
    assert [item["title"] for item in body["items"]] == ["Dinner"]


def test_invalid_expense_is_rejected(client):
    response = _add(client, amount="lots")
    assert response.status_code == 400
    assert response.get_json()["details"] == "Invalid amount"


def test_update_expense(client):
    _add(client)
    response = client.put("/expenses/1", json={"title": "Tea", "amount": 2, "category": "food"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["title"] == "Tea"
    assert "updatedAt" in body


def test_update_missing_expense(client):
    response = client.put("/expenses/9", json={"title": "Tea", "amount": 2, "category": "food"})
    assert response.status_code == 404


def test_update_with_invalid_fields(client):
    _add(client)
    response = client.put("/expenses/1", json={"title": "Tea", "amount": 2, "category": "drinks"})
    assert response.status_code == 400
    assert client.get("/expenses/1").get_json()["title"] == "Coffee"


def test_delete_expense(client):
    _add(client)
    assert client.delete("/expenses/1").status_code == 204
    assert client.delete("/expenses/1").status_code == 404
    assert client.get("/expenses/1").status_code == 404


def test_clear_expenses(client):
    _add(client)
    _add(client, "Taxi", 12, "transport")
    assert client.delete("/expenses").status_code == 204
    assert client.get("/expenses").get_json()["items"] == []


def test_summary_and_insights(client):
    client.put("/budget", json={"value": 50})
    _add(client, "Groceries", 46, "food")
    summary = client.get("/summary").get_json()
    assert summary["balance"] == 4
    titles = [item["title"] for item in client.get("/insights").get_json()["items"]]
    assert titles[0] == "Budget Alert"


def test_chart(client):
    _add(client)
    assert client.get("/chart?type=category").get_json()["labels"] == ["Food & Dining"]
    assert len(client.get("/chart?type=daily").get_json()["data"]) == 7
    assert client.get("/chart?type=pie").status_code == 400


def test_export_and_import(client, tmp_path):
    client.put("/budget", json={"value": 300})
    _add(client)
    response = client.get("/export")
    assert response.status_code == 200
    assert "budget-tracker-export-" in response.headers["Content-Disposition"]
    exported = response.get_json()
    assert exported["version"] == "2.0"

    fresh = create_app(tmp_path / "other").test_client()
    imported = fresh.post("/import", json=exported)
    assert imported.status_code == 200
    assert imported.get_json()["imported"] == 1
    assert fresh.get("/summary").get_json()["budget"] == 300


def test_import_requires_budget_and_expenses(client):
    assert client.post("/import", json={"expenses": []}).status_code == 400


def test_data_survives_restart(tmp_path):
    first = create_app(tmp_path).test_client()
    _add(first)
    second = create_app(tmp_path).test_client()
    assert second.get("/expenses/1").get_json()["title"] == "Coffee"


def test_import_with_non_finite_amount_is_rejected(client):
    _add(client)
    document = {
        "budget": 10,
        "expenses": [
            {"id": 9, "title": "Odd", "amount": "NaN", "category": "food", "date": "2026-10-01T00:00:00Z"}
        ],
    }
    response = client.post("/import", json=document)
    assert response.status_code == 400
    assert [item["id"] for item in client.get("/expenses").get_json()["items"]] == [1]
