"""Record mapping and the SQLAlchemy-backed RecordStore."""
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import RecordNotFoundError
from app.models import RentalRecord, ServiceRecord
from app.services.billing_service import (
    AreaLineItem,
    DipperLineItem,
    HourlyLineItem,
    UnpricedLineItem,
    build_transaction,
    total_for,
)
from app.services.rates import RENTAL_LINE, SERVICE_LINE
from app.services.record_mapper import from_persistence, line_item_from_dict, to_persistence
from app.services.record_store import RecordStore


def sample_rental():
    return build_transaction(
        "Ravi Kumar",
        [
            AreaLineItem(equipment_type="Cage Wheel", acres=Decimal("2.5"), rounds=Decimal("3")),
            DipperLineItem(nadai=2),
        ],
        received_amount="1000",
        old_balance="200",
    )


def sample_service():
    return build_transaction(
        "ABC Builders",
        [HourlyLineItem(equipment_type="JCB", hours=Decimal("1.30"))],
        received_amount="500",
        extra_fields={
            "driver_name": "Selvam",
            "mobile_number": "9876543210",
            "work_date": date(2024, 6, 1),
            "advance_amount": Decimal("100"),
        },
    )


def test_persisted_quantities_are_decimal_text():
    data = to_persistence(sample_rental(), RENTAL_LINE)
    assert data["name"] == "Ravi Kumar"
    assert data["received_amount"] == Decimal("1000")
    assert data["details"] == [
        {"equipment_type": "Cage Wheel", "acres": "2.5", "rounds": "3"},
        {"equipment_type": "Dipper", "nadai": "2"},
    ]
    assert data["old_balance_status"] == "pending"


def test_rental_round_trip_in_memory():
    tx = sample_rental()
    back = from_persistence(to_persistence(tx, RENTAL_LINE), RENTAL_LINE)
    assert back.party == tx.party
    assert back.line_items == tx.line_items
    assert back.total_amount == tx.total_amount == Decimal("3825")
    assert back.old_balance_status == tx.old_balance_status


def test_service_uses_its_own_field_names():
    data = to_persistence(sample_service(), SERVICE_LINE)
    assert data["company_name"] == "ABC Builders"
    assert data["amount_received"] == Decimal("500")
    assert data["driver_name"] == "Selvam"
    assert "name" not in data
    assert "received_amount" not in data


def test_legacy_float_quantities_are_read():
    item = line_item_from_dict({"equipment_type": "Cage Wheel", "acres": 2.5, "rounds": 3}, RENTAL_LINE)
    assert item == AreaLineItem(equipment_type="Cage Wheel", acres=Decimal("2.5"), rounds=Decimal("3"))


def test_unknown_tag_is_kept_unpriced():
    raw = {"equipment_type": "Plough", "acres": "1"}
    item = line_item_from_dict(raw, RENTAL_LINE)
    assert isinstance(item, UnpricedLineItem)
    assert item.raw == raw


def test_tag_of_the_other_line_is_unpriced():
    item = line_item_from_dict({"equipment_type": "JCB", "hours": "2"}, RENTAL_LINE)
    assert isinstance(item, UnpricedLineItem)


def test_unknown_columns_go_to_extra_fields():
    tx = from_persistence({"name": "Ravi", "details": [], "total_amount": "0", "note": "x"}, RENTAL_LINE)
    assert tx.extra_fields == {"note": "x"}


# ------------------------------------------------------------------ RecordStore

def test_store_round_trip_preserves_totals_and_quantities(db):
    tx = sample_rental()
    store = RecordStore(db, RentalRecord)
    saved = store.create(to_persistence(tx, RENTAL_LINE))
    assert saved["id"] is not None
    assert saved["created_at"] is not None

    back = from_persistence(store.get(saved["id"]), RENTAL_LINE)
    assert back.line_items == tx.line_items
    assert back.total_amount == tx.total_amount
    assert back.received_amount == tx.received_amount
    assert total_for(back) == tx.total_amount


def test_store_round_trip_service(db):
    tx = sample_service()
    store = RecordStore(db, ServiceRecord)
    saved = store.create(to_persistence(tx, SERVICE_LINE))
    back = from_persistence(saved, SERVICE_LINE)
    assert back.line_items == (HourlyLineItem(equipment_type="JCB", hours=Decimal("1.30")),)
    assert back.total_amount == Decimal("1300")
    assert back.extra_fields["work_date"] == date(2024, 6, 1)
    assert back.extra_fields["advance_amount"] == Decimal("100")


def test_store_lists_newest_first(db):
    store = RecordStore(db, RentalRecord)
    first = store.create(to_persistence(build_transaction("First", old_balance="10", old_balance_only=True), RENTAL_LINE))
    second = store.create(to_persistence(build_transaction("Second", old_balance="20", old_balance_only=True), RENTAL_LINE))
    ids = [row["id"] for row in store.list_all()]
    assert ids.index(second["id"]) < ids.index(first["id"])


def test_store_update_replaces_fields(db):
    store = RecordStore(db, RentalRecord)
    saved = store.create(to_persistence(sample_rental(), RENTAL_LINE))
    replacement = build_transaction("Ravi K", [DipperLineItem(nadai=1)], received_amount="500")
    updated = store.update(saved["id"], to_persistence(replacement, RENTAL_LINE))
    assert updated["id"] == saved["id"]
    assert updated["name"] == "Ravi K"
    assert updated["old_balance"] is None
    assert updated["total_amount"] == Decimal("500")


def test_store_missing_id(db):
    store = RecordStore(db, RentalRecord)
    with pytest.raises(RecordNotFoundError):
        store.get(987654)
    with pytest.raises(RecordNotFoundError):
        store.update(987654, {"name": "x"})
    with pytest.raises(RecordNotFoundError):
        store.delete(987654)


def test_store_delete(db):
    store = RecordStore(db, RentalRecord)
    saved = store.create(to_persistence(sample_rental(), RENTAL_LINE))
    store.delete(saved["id"])
    with pytest.raises(RecordNotFoundError):
        store.get(saved["id"])
