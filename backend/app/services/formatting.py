"""Display formatting shared by API rows and reports. Rupees, no paise."""
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from app.services.billing_service import parse_amount


def group_indian(digits: str) -> str:
    """'1500000' -> '15,00,000' (last three digits, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_inr(amount, symbol: str = "₹") -> str:
    value = parse_amount(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{group_indian(str(abs(value)))}"


def format_quantity(value) -> str:
    """Quantities as typed: 2.5 stays 2.5, 3.00 becomes 3."""
    value = parse_amount(value)
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return format(value.normalize(), "f")


def format_date(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%d %b %Y")
    return str(value)
