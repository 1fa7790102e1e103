"""
Billing engine: line-item amounts, record totals, old-balance carry-forward
and paid/pending status.

Everything here is a pure function of a Transaction snapshot. Nothing is
stored or fetched; routes load a snapshot through record_mapper and pass it in.

Two status dimensions exist per record and are never merged:
- status: derived from total vs received (status_for)
- old_balance_status: stored, set by staff, only describes the prior balance
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import ClassVar, Iterable, Optional, Union

from app.core.exceptions import UnknownEquipmentError
from app.services.rates import DIPPER_RATE, RentalEquipment, rate_for

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"


class OldBalanceStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"


# ==============================================================================
# LINE ITEMS (one shape per equipment kind)
# ==============================================================================

@dataclass(frozen=True)
class AreaLineItem:
    """Area-based rental implement: acres (maa) x rounds (saal) x rate."""
    equipment_type: str
    acres: Decimal
    rounds: Decimal


@dataclass(frozen=True)
class DipperLineItem:
    """Dipper run billed per nadai at the flat dipper rate."""
    equipment_type: ClassVar[str] = RentalEquipment.DIPPER.value
    nadai: Decimal


@dataclass(frozen=True)
class HourlyLineItem:
    """Hourly service machine. Hours are decimal, e.g. 1.30."""
    equipment_type: str
    hours: Decimal


@dataclass(frozen=True)
class UnpricedLineItem:
    """A stored line item whose tag has no rate (legacy or foreign data).

    Kept so such records still list, filter and export. Pricing one fails loudly.
    """
    equipment_type: str
    raw: dict = field(default_factory=dict, compare=False)


LineItem = Union[AreaLineItem, DipperLineItem, HourlyLineItem, UnpricedLineItem]


@dataclass(frozen=True)
class Transaction:
    """Billing snapshot of one stored record."""
    party: str
    line_items: tuple = ()
    received_amount: Decimal = ZERO
    total_amount: Optional[Decimal] = None  # stored figure; None before first save
    old_balance: Optional[str] = None
    old_balance_status: Optional[OldBalanceStatus] = None
    old_balance_reason: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    extra_fields: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Summary:
    count: int
    total_amount: Decimal
    received_amount: Decimal
    pending_amount: Decimal


# ==============================================================================
# AMOUNTS
# ==============================================================================

def parse_amount(value) -> Decimal:
    """Coerce a stored number or numeric text to Decimal.

    Unparseable input becomes zero so one corrupt record cannot break a
    total. Input validation happens before this, in the request schemas.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        logger.warning(f"Coercing boolean {value!r} to zero")
        return ZERO
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            logger.warning(f"Unparseable amount {value!r} coerced to zero")
            return ZERO
    if not result.is_finite():
        logger.warning(f"Non-finite amount {value!r} coerced to zero")
        return ZERO
    return result


def amount_for(item: LineItem) -> Decimal:
    """Amount for one line item. No rounding is applied."""
    if isinstance(item, DipperLineItem):
        return parse_amount(item.nadai) * DIPPER_RATE
    if isinstance(item, AreaLineItem):
        return parse_amount(item.acres) * parse_amount(item.rounds) * rate_for(item.equipment_type)
    if isinstance(item, HourlyLineItem):
        return parse_amount(item.hours) * rate_for(item.equipment_type)
    raise UnknownEquipmentError(getattr(item, "equipment_type", item))


def line_items_total(items: Iterable[LineItem]) -> Decimal:
    return sum((amount_for(item) for item in items), ZERO)


# ==============================================================================
# OLD BALANCE
# ==============================================================================

def has_old_balance(tx: Transaction) -> bool:
    return tx.old_balance is not None and str(tx.old_balance).strip() != ""


def is_old_balance_only(tx: Transaction) -> bool:
    """Standalone historical balance entry: no equipment usage at all."""
    return not tx.line_items and has_old_balance(tx)


def old_balance_status_for(tx: Transaction) -> Optional[OldBalanceStatus]:
    """Stored prior-balance status; pending when a balance exists without one."""
    if not has_old_balance(tx):
        return None
    if tx.old_balance_status is None:
        return OldBalanceStatus.PENDING
    return OldBalanceStatus(tx.old_balance_status)


def old_balance_only_received(old_balance, status) -> Decimal:
    """Received amount recorded for an old-balance-only entry."""
    if status is not None and OldBalanceStatus(status) == OldBalanceStatus.PAID:
        return parse_amount(old_balance)
    return ZERO


# ==============================================================================
# TOTALS AND STATUS
# ==============================================================================

def total_for(tx: Transaction) -> Decimal:
    """Sum of line items plus the old balance while it is still pending.

    Old-balance-only entries total the balance verbatim whatever its status.
    """
    old_balance = parse_amount(tx.old_balance) if has_old_balance(tx) else ZERO
    if is_old_balance_only(tx):
        return old_balance

    total = line_items_total(tx.line_items)
    if old_balance_status_for(tx) == OldBalanceStatus.PENDING:
        total += old_balance
    return total


def _billed(tx: Transaction) -> Decimal:
    if tx.total_amount is not None:
        return parse_amount(tx.total_amount)
    return total_for(tx)


def pending_amount_for(tx: Transaction) -> Decimal:
    """Outstanding amount, floored at zero. Overpayment shows as nothing due."""
    return max(_billed(tx) - parse_amount(tx.received_amount), ZERO)


def status_for(tx: Transaction) -> PaymentStatus:
    if pending_amount_for(tx) <= 0:
        return PaymentStatus.PAID
    return PaymentStatus.PENDING


def summarize(transactions: Iterable[Transaction]) -> Summary:
    """Dashboard cards. Pending is the sum of per-record floored pending amounts."""
    count = 0
    total = received = pending = ZERO
    for tx in transactions:
        count += 1
        total += _billed(tx)
        received += parse_amount(tx.received_amount)
        pending += pending_amount_for(tx)
    return Summary(count=count, total_amount=total, received_amount=received, pending_amount=pending)


# ==============================================================================
# SUBMISSION
# ==============================================================================

def build_transaction(
    party: str,
    line_items: Iterable[LineItem] = (),
    received_amount=ZERO,
    old_balance: Optional[str] = None,
    old_balance_status: Optional[OldBalanceStatus] = None,
    old_balance_reason: Optional[str] = None,
    old_balance_only: bool = False,
    extra_fields: Optional[dict] = None,
) -> Transaction:
    """Assemble the snapshot to be saved, with total_amount computed.

    - old_balance_only drops any line items, totals the balance verbatim and
      records it as received when it is already paid.
    - Without an old balance all three old-balance fields are cleared.
    """
    old_balance = old_balance.strip() if old_balance and old_balance.strip() else None
    if old_balance is None:
        old_balance_status = None
        old_balance_reason = None
    elif old_balance_status is None:
        old_balance_status = OldBalanceStatus.PENDING
    else:
        old_balance_status = OldBalanceStatus(old_balance_status)

    if old_balance_only:
        items = ()
        received = old_balance_only_received(old_balance, old_balance_status)
    else:
        items = tuple(line_items)
        received = parse_amount(received_amount)

    draft = Transaction(
        party=party.strip(),
        line_items=items,
        received_amount=received,
        old_balance=old_balance,
        old_balance_status=old_balance_status,
        old_balance_reason=old_balance_reason or None,
        extra_fields=dict(extra_fields or {}),
    )
    return replace(draft, total_amount=total_for(draft))
