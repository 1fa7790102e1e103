"""Record workflows used by the rental and service routes.

Validated payload -> billing snapshot -> stored row, and back. Totals are
always computed here by the billing engine, never taken from the client.
"""
import logging
from typing import List, Type

from sqlalchemy.orm import Session

from app.schemas.records import DipperLineItemIn, RentalRecordIn, ServiceRecordIn
from app.services.billing_service import (
    AreaLineItem,
    DipperLineItem,
    HourlyLineItem,
    Transaction,
    build_transaction,
    old_balance_status_for,
    pending_amount_for,
    status_for,
)
from app.services.rates import BusinessLine
from app.services.record_filters import FilterCriteria, filter_records
from app.services.record_mapper import from_persistence, to_persistence
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def rental_transaction(payload: RentalRecordIn) -> Transaction:
    items = []
    for d in payload.details:
        if isinstance(d, DipperLineItemIn):
            items.append(DipperLineItem(nadai=d.nadai))
        else:
            items.append(AreaLineItem(equipment_type=d.equipment_type, acres=d.acres, rounds=d.rounds))
    return build_transaction(
        party=payload.name,
        line_items=items,
        received_amount=payload.received_amount,
        old_balance=payload.old_balance,
        old_balance_status=payload.old_balance_status,
        old_balance_reason=payload.old_balance_reason,
        old_balance_only=payload.old_balance_only,
    )


def service_transaction(payload: ServiceRecordIn) -> Transaction:
    items = [HourlyLineItem(equipment_type=d.equipment_type, hours=d.hours) for d in payload.details]
    return build_transaction(
        party=payload.company_name,
        line_items=items,
        received_amount=payload.amount_received,
        old_balance=payload.old_balance,
        old_balance_status=payload.old_balance_status,
        old_balance_reason=payload.old_balance_reason,
        old_balance_only=payload.old_balance_only,
        extra_fields={
            "driver_name": payload.driver_name,
            "mobile_number": payload.mobile_number,
            "work_date": payload.work_date,
            "advance_amount": 0 if payload.old_balance_only else payload.advance_amount,
        },
    )


def to_response(tx: Transaction, line: BusinessLine) -> dict:
    """Stored fields plus the derived status and pending amount."""
    data = to_persistence(tx, line)
    old_status = old_balance_status_for(tx)
    data.update({
        "id": tx.id,
        "created_at": tx.created_at,
        "status": status_for(tx).value,
        "pending_amount": pending_amount_for(tx),
        "old_balance_status": old_status.value if old_status else None,
    })
    return data


class RecordsService:
    """CRUD plus filtering for one business line's table."""

    def __init__(self, db: Session, model: Type, line: BusinessLine):
        self.store = RecordStore(db, model)
        self.line = line

    def list(self, criteria: FilterCriteria = FilterCriteria()) -> List[Transaction]:
        records = [from_persistence(row, self.line) for row in self.store.list_all()]
        return filter_records(records, criteria, self.line)

    def get(self, record_id: int) -> Transaction:
        return from_persistence(self.store.get(record_id), self.line)

    def create(self, tx: Transaction) -> Transaction:
        row = self.store.create(to_persistence(tx, self.line))
        logger.info(f"[{self.line.name.upper()}] saved #{row['id']} total={row['total_amount']}")
        return from_persistence(row, self.line)

    def replace(self, record_id: int, tx: Transaction) -> Transaction:
        row = self.store.update(record_id, to_persistence(tx, self.line))
        logger.info(f"[{self.line.name.upper()}] replaced #{record_id} total={row['total_amount']}")
        return from_persistence(row, self.line)

    def delete(self, record_id: int) -> None:
        self.store.delete(record_id)
