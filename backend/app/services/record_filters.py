"""Dashboard filters. Each criterion is optional; set ones are AND-combined."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional

from app.services.billing_service import (
    OldBalanceStatus,
    PaymentStatus,
    Transaction,
    has_old_balance,
    old_balance_status_for,
    status_for,
)
from app.services.rates import OTHERS, BusinessLine


@dataclass(frozen=True)
class FilterCriteria:
    equipment: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    party: Optional[str] = None
    status: Optional[PaymentStatus] = None
    old_balance_status: Optional[OldBalanceStatus] = None


def _calendar_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def _matches_equipment(tx: Transaction, equipment: str, line: BusinessLine) -> bool:
    tags = [item.equipment_type for item in tx.line_items]
    if equipment == OTHERS:
        return any(not line.is_known(tag) for tag in tags)
    return equipment in tags


def matches(tx: Transaction, criteria: FilterCriteria, line: BusinessLine) -> bool:
    if criteria.equipment and not _matches_equipment(tx, criteria.equipment, line):
        return False

    if criteria.date_from or criteria.date_to:
        created = _calendar_date(tx.created_at)
        if created is None:
            return False
        if criteria.date_from and created < criteria.date_from:
            return False
        if criteria.date_to and created > criteria.date_to:
            return False

    if criteria.party and criteria.party.strip().lower() not in (tx.party or "").lower():
        return False

    if criteria.status and status_for(tx) != PaymentStatus(criteria.status):
        return False

    if criteria.old_balance_status:
        if not has_old_balance(tx):
            return False
        if old_balance_status_for(tx) != OldBalanceStatus(criteria.old_balance_status):
            return False

    return True


def filter_records(records: Iterable[Transaction], criteria: FilterCriteria, line: BusinessLine) -> List[Transaction]:
    return [tx for tx in records if matches(tx, criteria, line)]
