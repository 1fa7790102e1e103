"""Mapping between stored record dicts and billing snapshots.

Quantities go into the JSON details column as decimal strings ("1.30"),
so reading a record back yields exactly what was written. Older rows may
hold plain JSON numbers; those are read through parse_amount.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.services.billing_service import (
    AreaLineItem,
    DipperLineItem,
    HourlyLineItem,
    LineItem,
    OldBalanceStatus,
    Transaction,
    UnpricedLineItem,
    parse_amount,
)
from app.services.rates import BusinessLine, RentalEquipment, is_area_equipment, is_hourly_equipment

logger = logging.getLogger(__name__)

BILLING_FIELDS = (
    "id", "details", "total_amount", "old_balance", "old_balance_status",
    "old_balance_reason", "created_at",
)


def _decimal_text(value: Decimal) -> str:
    return str(parse_amount(value))


def line_item_to_dict(item: LineItem) -> Dict[str, Any]:
    if isinstance(item, DipperLineItem):
        return {"equipment_type": item.equipment_type, "nadai": _decimal_text(item.nadai)}
    if isinstance(item, AreaLineItem):
        return {
            "equipment_type": item.equipment_type,
            "acres": _decimal_text(item.acres),
            "rounds": _decimal_text(item.rounds),
        }
    if isinstance(item, HourlyLineItem):
        return {"equipment_type": item.equipment_type, "hours": _decimal_text(item.hours)}
    return dict(item.raw) if item.raw else {"equipment_type": item.equipment_type}


def line_item_from_dict(data: Dict[str, Any], line: BusinessLine) -> LineItem:
    tag = data.get("equipment_type")
    if line.is_known(tag):
        if tag == RentalEquipment.DIPPER.value:
            return DipperLineItem(nadai=parse_amount(data.get("nadai")))
        if is_area_equipment(tag):
            return AreaLineItem(
                equipment_type=tag,
                acres=parse_amount(data.get("acres")),
                rounds=parse_amount(data.get("rounds")),
            )
        if is_hourly_equipment(tag):
            return HourlyLineItem(equipment_type=tag, hours=parse_amount(data.get("hours")))
    logger.debug(f"Unpriced {line.name} line item with tag {tag!r}")
    return UnpricedLineItem(equipment_type=str(tag), raw=dict(data))


def _old_balance_status(value) -> Optional[OldBalanceStatus]:
    if value in (None, ""):
        return None
    try:
        return OldBalanceStatus(value)
    except ValueError:
        logger.warning(f"Unknown old_balance_status {value!r} read as pending")
        return OldBalanceStatus.PENDING


def to_persistence(tx: Transaction, line: BusinessLine) -> Dict[str, Any]:
    """Column dict for a record. id and created_at are left to the store."""
    data = dict(tx.extra_fields)
    data.update({
        line.party_field: tx.party,
        "details": [line_item_to_dict(item) for item in tx.line_items],
        "total_amount": tx.total_amount,
        line.received_field: tx.received_amount,
        "old_balance": tx.old_balance,
        "old_balance_status": tx.old_balance_status.value if tx.old_balance_status else None,
        "old_balance_reason": tx.old_balance_reason,
    })
    return data


def from_persistence(data: Dict[str, Any], line: BusinessLine) -> Transaction:
    known = set(BILLING_FIELDS) | {line.party_field, line.received_field}
    details: List[Dict[str, Any]] = data.get("details") or []
    total = data.get("total_amount")
    return Transaction(
        party=data.get(line.party_field) or "",
        line_items=tuple(line_item_from_dict(d, line) for d in details),
        received_amount=parse_amount(data.get(line.received_field)),
        total_amount=parse_amount(total) if total is not None else None,
        old_balance=data.get("old_balance"),
        old_balance_status=_old_balance_status(data.get("old_balance_status")),
        old_balance_reason=data.get("old_balance_reason"),
        id=data.get("id"),
        created_at=data.get("created_at"),
        extra_fields={k: v for k, v in data.items() if k not in known},
    )


def row_to_dict(row) -> Dict[str, Any]:
    """Plain dict of a SQLAlchemy row's columns."""
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}
