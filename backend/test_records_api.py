"""HTTP API for rental and JCB service records."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.db.session import SessionLocal
from app.models import RentalRecord


def money(value) -> Decimal:
    return Decimal(str(value))


def create_rental(client, **overrides):
    payload = {
        "name": "Ravi Kumar",
        "details": [
            {"equipment_type": "Cage Wheel", "acres": "2.5", "rounds": "3"},
            {"equipment_type": "Dipper", "nadai": 2},
        ],
        "received_amount": "1000",
    }
    payload.update(overrides)
    resp = client.post("/rentals", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_service(client, **overrides):
    payload = {
        "company_name": "ABC Builders",
        "driver_name": "Selvam",
        "mobile_number": "9876543210",
        "work_date": "2024-06-01",
        "details": [{"equipment_type": "JCB", "hours": "1.30"}],
        "amount_received": "300",
    }
    payload.update(overrides)
    resp = client.post("/services", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ------------------------------------------------------------------ create

def test_create_rental_computes_total(auth_client):
    body = create_rental(auth_client)
    assert money(body["total_amount"]) == Decimal("3625")
    assert money(body["received_amount"]) == Decimal("1000")
    assert money(body["pending_amount"]) == Decimal("2625")
    assert body["status"] == "pending"
    assert body["old_balance"] is None
    assert body["old_balance_status"] is None
    assert body["details"][0] == {"equipment_type": "Cage Wheel", "acres": "2.5", "rounds": "3"}
    assert body["id"] > 0
    assert body["created_at"]


def test_client_total_is_ignored(auth_client):
    body = create_rental(auth_client, total_amount="1")
    assert money(body["total_amount"]) == Decimal("3625")


def test_stored_total_is_the_exact_product(auth_client):
    body = create_rental(
        auth_client,
        details=[{"equipment_type": "Cage Wheel", "acres": "0.15", "rounds": "1.15"}],
        received_amount="0",
    )
    assert money(body["total_amount"]) == Decimal("60.375")
    assert money(body["pending_amount"]) == Decimal("60.375")

    listed = auth_client.get(f"/rentals/{body['id']}").json()
    assert money(listed["total_amount"]) == Decimal("60.375")


def test_part_payment_of_exact_product(auth_client):
    body = create_rental(
        auth_client,
        details=[{"equipment_type": "Cage Wheel", "acres": "0.15", "rounds": "1.15"}],
        received_amount="60.37",
    )
    assert money(body["pending_amount"]) == Decimal("0.005")
    assert body["status"] == "pending"


def test_rental_with_pending_old_balance(auth_client):
    body = create_rental(
        auth_client,
        details=[{"equipment_type": "Rotavator", "acres": "1", "rounds": "1"}],
        received_amount="0",
        old_balance="200",
        old_balance_reason="Last season",
    )
    assert money(body["total_amount"]) == Decimal("900")
    assert body["old_balance_status"] == "pending"
    assert body["old_balance_reason"] == "Last season"


def test_rental_with_paid_old_balance(auth_client):
    body = create_rental(
        auth_client,
        details=[{"equipment_type": "Rotavator", "acres": "1", "rounds": "1"}],
        received_amount="700",
        old_balance="200",
        old_balance_status="paid",
    )
    assert money(body["total_amount"]) == Decimal("700")
    assert body["status"] == "paid"
    assert body["old_balance_status"] == "paid"


def test_old_balance_only_entry(auth_client):
    body = create_rental(auth_client, details=[], received_amount=None, old_balance="1500", old_balance_only=True)
    assert body["details"] == []
    assert money(body["total_amount"]) == Decimal("1500")
    assert money(body["received_amount"]) == Decimal("0")
    assert body["status"] == "pending"


def test_old_balance_only_paid_entry(auth_client):
    body = create_rental(
        auth_client, received_amount=None, old_balance="1500", old_balance_status="paid", old_balance_only=True,
    )
    assert body["details"] == []
    assert money(body["received_amount"]) == Decimal("1500")
    assert body["status"] == "paid"


def test_create_service(auth_client):
    body = create_service(auth_client)
    assert money(body["total_amount"]) == Decimal("1300")
    assert money(body["pending_amount"]) == Decimal("1000")
    assert body["company_name"] == "ABC Builders"
    assert body["driver_name"] == "Selvam"
    assert body["work_date"] == "2024-06-01"
    assert body["details"] == [{"equipment_type": "JCB", "hours": "1.30"}]


def test_service_advance_is_informational(auth_client):
    body = create_service(auth_client, amount_received="1300", advance_amount="500")
    assert money(body["advance_amount"]) == Decimal("500")
    assert body["status"] == "paid"


# ------------------------------------------------------------------ validation

@pytest.mark.parametrize("overrides", [
    {"name": "   "},
    {"details": [{"equipment_type": "Cage Wheel", "acres": "0", "rounds": "1"}]},
    {"details": [{"equipment_type": "Cage Wheel", "acres": "1", "rounds": "-2"}]},
    {"details": [{"equipment_type": "Dipper", "acres": "1", "rounds": "1"}]},
    {"details": [{"equipment_type": "Dipper", "nadai": 0}]},
    {"details": [{"equipment_type": "Plough", "acres": "1", "rounds": "1"}]},
    {"details": [{"equipment_type": "JCB", "hours": "1"}]},
    {"details": []},
    {"received_amount": None},
    {"received_amount": "-5"},
    {"received_amount": "60.375"},
    {"details": [{"equipment_type": "Mini", "acres": "0.155", "rounds": "1"}]},
    {"details": [{"equipment_type": "Mini", "acres": "1", "rounds": "1.125"}]},
    {"old_balance": "abc"},
    {"old_balance": "-100"},
    {"old_balance": "200.125"},
    {"old_balance_only": True},
    {"old_balance": "200", "old_balance_status": "settled"},
])
def test_invalid_rental_is_rejected(auth_client, overrides):
    payload = {
        "name": "Ravi",
        "details": [{"equipment_type": "Mini", "acres": "1", "rounds": "1"}],
        "received_amount": "0",
    }
    payload.update(overrides)
    resp = auth_client.post("/rentals", json=payload)
    assert resp.status_code == 422


@pytest.mark.parametrize("overrides", [
    {"company_name": ""},
    {"driver_name": " "},
    {"mobile_number": "12345"},
    {"mobile_number": "5876543210"},
    {"details": [{"equipment_type": "JCB", "hours": "0"}]},
    {"details": [{"equipment_type": "Mini", "hours": "1"}]},
    {"work_date": "yesterday"},
    {"amount_received": "10.001"},
    {"advance_amount": "0.999"},
    {"details": [{"equipment_type": "JCB", "hours": "1.305"}]},
])
def test_invalid_service_is_rejected(auth_client, overrides):
    payload = {
        "company_name": "ABC Builders",
        "driver_name": "Selvam",
        "details": [{"equipment_type": "JCB", "hours": "2"}],
    }
    payload.update(overrides)
    resp = auth_client.post("/services", json=payload)
    assert resp.status_code == 422


def test_blank_mobile_is_allowed(auth_client):
    body = create_service(auth_client, mobile_number="")
    assert body["mobile_number"] is None


# ------------------------------------------------------------------ read, replace, delete

def test_list_is_newest_first(auth_client):
    first = create_rental(auth_client, name="First")
    second = create_rental(auth_client, name="Second")
    ids = [row["id"] for row in auth_client.get("/rentals").json()]
    assert ids == [second["id"], first["id"]]


def test_get_one(auth_client):
    created = create_service(auth_client)
    resp = auth_client.get(f"/services/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["company_name"] == "ABC Builders"


def test_replace_recomputes_total(auth_client):
    created = create_rental(auth_client, old_balance="200")
    resp = auth_client.put(f"/rentals/{created['id']}", json={
        "name": "Ravi K",
        "details": [{"equipment_type": "Mini", "acres": "2", "rounds": "1"}],
        "received_amount": "1200",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == created["id"]
    assert body["name"] == "Ravi K"
    assert money(body["total_amount"]) == Decimal("1200")
    assert body["status"] == "paid"
    assert body["old_balance"] is None


def test_delete(auth_client):
    created = create_rental(auth_client)
    resp = auth_client.delete(f"/rentals/{created['id']}")
    assert resp.status_code == 200
    assert auth_client.get(f"/rentals/{created['id']}").status_code == 404


@pytest.mark.parametrize("method,path", [
    ("get", "/rentals/999999"),
    ("delete", "/rentals/999999"),
    ("get", "/services/999999"),
    ("delete", "/services/999999"),
])
def test_missing_record_is_404(auth_client, method, path):
    resp = getattr(auth_client, method)(path)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Resource not found"


def test_replace_missing_record_is_404(auth_client):
    resp = auth_client.put("/services/999999", json={
        "company_name": "ABC Builders",
        "driver_name": "Selvam",
        "details": [{"equipment_type": "JCB", "hours": "2"}],
    })
    assert resp.status_code == 404


# ------------------------------------------------------------------ filters and summary

def test_list_filters(auth_client):
    create_rental(auth_client, name="Ravi Kumar")
    create_rental(
        auth_client, name="Suresh",
        details=[{"equipment_type": "Mini", "acres": "1", "rounds": "1"}],
        received_amount="600",
    )

    def names(**params):
        return sorted(row["name"] for row in auth_client.get("/rentals", params=params).json())

    assert names(name="ravi") == ["Ravi Kumar"]
    assert names(equipment="Mini") == ["Suresh"]
    assert names(equipment="Dipper") == ["Ravi Kumar"]
    assert names(status="paid") == ["Suresh"]
    assert names(status="pending", equipment="Mini") == []
    assert names(equipment="Others") == []

    today = date.today()
    around_today = {"date_from": str(today - timedelta(days=1)), "date_to": str(today + timedelta(days=1))}
    assert names(**around_today) == ["Ravi Kumar", "Suresh"]
    assert names(date_to=str(today - timedelta(days=2))) == []


def test_bad_filter_value(auth_client):
    assert auth_client.get("/rentals", params={"status": "overdue"}).status_code == 422
    assert auth_client.get("/rentals", params={"date_from": "10/05/2024"}).status_code == 422


def test_old_balance_status_filter(auth_client):
    create_rental(auth_client, name="With balance", old_balance="200")
    create_rental(auth_client, name="No balance")
    rows = auth_client.get("/rentals", params={"old_balance_status": "pending"}).json()
    assert [row["name"] for row in rows] == ["With balance"]


def test_service_company_filter(auth_client):
    create_service(auth_client, company_name="ABC Builders")
    create_service(auth_client, company_name="Sri Murugan Constructions")
    rows = auth_client.get("/services", params={"company": "murugan"}).json()
    assert [row["company_name"] for row in rows] == ["Sri Murugan Constructions"]


def test_legacy_record_with_unlisted_equipment(auth_client):
    db = SessionLocal()
    try:
        db.add(RentalRecord(
            name="Old ledger",
            details=[{"equipment_type": "Plough", "acres": 1, "rounds": 1}],
            total_amount=Decimal("400"),
            received_amount=Decimal("100"),
        ))
        db.commit()
    finally:
        db.close()

    rows = auth_client.get("/rentals", params={"equipment": "Others"}).json()
    assert [row["name"] for row in rows] == ["Old ledger"]
    assert money(rows[0]["pending_amount"]) == Decimal("300")
    assert rows[0]["status"] == "pending"
    assert rows[0]["details"] == [{"equipment_type": "Plough", "acres": 1, "rounds": 1}]


def test_summary(auth_client):
    create_rental(auth_client)  # 3625 total, 1000 received
    create_rental(
        auth_client, name="Overpaid",
        details=[{"equipment_type": "Mini", "acres": "1", "rounds": "1"}],
        received_amount="800",
    )
    body = auth_client.get("/rentals/summary").json()
    assert body["count"] == 2
    assert money(body["total_amount"]) == Decimal("4225")
    assert money(body["received_amount"]) == Decimal("1800")
    assert money(body["pending_amount"]) == Decimal("2625")

    body = auth_client.get("/rentals/summary", params={"status": "paid"}).json()
    assert body["count"] == 1
    assert money(body["pending_amount"]) == Decimal("0")


def test_summary_for_services(auth_client):
    create_service(auth_client)
    body = auth_client.get("/services/summary").json()
    assert body["count"] == 1
    assert money(body["pending_amount"]) == Decimal("1000")


# ------------------------------------------------------------------ exports

def test_export_xlsx(auth_client):
    create_rental(auth_client)
    resp = auth_client.get("/rentals/export/xlsx")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert "rental-records_" in resp.headers["content-disposition"]
    assert resp.content[:2] == b"PK"


def test_export_pdf(auth_client):
    create_service(auth_client)
    resp = auth_client.get("/services/export/pdf", params={"company": "abc"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert "jcb-records_" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")
