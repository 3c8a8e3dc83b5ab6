from __future__ import annotations

from datetime import date
from decimal import Decimal

from backend.app import models


def test_current_and_next_period_use_injected_clock(client):
    current = client.get("/billing-periods/current")
    assert current.status_code == 200, current.text
    assert current.json() == {
        "start": "2026-01-16",
        "end": "2026-01-31",
        "label": "Jan 16-31, 2026",
        "key": "2026-01-16",
    }

    upcoming = client.get("/billing-periods/next")
    assert upcoming.status_code == 200
    assert upcoming.json()["key"] == "2026-02-01"
    assert upcoming.json()["label"] == "Feb 1-15, 2026"


def test_period_for_date_endpoint(client):
    response = client.get("/billing-periods/for-date", params={"date": "2028-02-20"})

    assert response.status_code == 200
    assert response.json()["end"] == "2028-02-29"


def test_count_endpoint_and_inverted_range(client):
    response = client.get(
        "/billing-periods/count", params={"start": "2026-01-01", "end": "2026-02-15"}
    )
    assert response.status_code == 200
    assert response.json()["count"] == 3

    inverted = client.get(
        "/billing-periods/count", params={"start": "2026-02-15", "end": "2026-01-01"}
    )
    assert inverted.status_code == 400
    assert inverted.json()["detail"] == "start cannot be after end"


def test_resolve_period_key_endpoint(client):
    response = client.get("/billing-periods/2026-01-16")
    assert response.status_code == 200
    assert response.json() == {"key": "2026-01-16", "start": "2026-01-16", "end": "2026-01-31"}

    invalid = client.get("/billing-periods/2026-13-01")
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid period key format, expected YYYY-MM-DD"


def test_billing_periods_require_authentication(client):
    response = client.get("/billing-periods/current", headers={"Authorization": ""})

    assert response.status_code == 401


def test_overview_projects_half_retainer_plus_completed_work(client, make_work_order):
    make_work_order(date(2026, 1, 18), hours="4.00", rate="85.00")
    make_work_order(date(2026, 1, 25), hours="2.50", rate="85.00")
    make_work_order(date(2026, 1, 26), status=models.WorkOrderStatus.IN_PROGRESS)
    make_work_order(date(2026, 1, 5), hours="10.00")

    response = client.get("/billing-periods/overview")
    assert response.status_code == 200, response.text
    data = response.json()

    assert data["current"]["period"]["key"] == "2026-01-16"
    assert data["current"]["work_order_count"] == 2
    # 500.00 half retainer + 6.5 h * 85.00
    assert Decimal(str(data["current"]["projected"])) == Decimal("1052.50")
    assert data["current"]["invoice"] is None

    assert data["next"]["period"]["key"] == "2026-02-01"
    assert data["next"]["work_order_count"] == 0
    assert Decimal(str(data["next"]["projected"])) == Decimal("500.00")


def test_overview_includes_existing_period_invoice(client):
    draft = client.post("/invoices/draft-for-period", json={"period_key": "2026-01-16"})
    assert draft.status_code == 200, draft.text

    response = client.get("/billing-periods/overview")
    assert response.status_code == 200
    invoice = response.json()["current"]["invoice"]
    assert invoice is not None
    assert invoice["id"] == draft.json()["invoice"]["id"]
    assert invoice["period_start"] == "2026-01-16"


def test_overview_hidden_from_approvers(client, auth_headers):
    response = client.get("/billing-periods/overview", headers=auth_headers("client_approver"))

    assert response.status_code == 403
