"""
Rate tables for the two business lines.

Rental line: area-based implements are billed per maa (area unit) per saal
(pass); the Dipper is billed per nadai (pass count) at a flat rate.
Service line: the JCB is billed per hour.

Tables are keyed by the plain tag string, which is what the records store.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from app.core.exceptions import UnknownEquipmentError


class RentalEquipment(str, Enum):
    CAGE_WHEEL = "Cage Wheel"
    PUZHUTHI = "புழுதி"  # dust-wheel run, billed like Cage Wheel
    ROTAVATOR = "Rotavator"
    MINI = "Mini"
    DIPPER = "Dipper"


class ServiceEquipment(str, Enum):
    JCB = "JCB"


# Filter value meaning "a tag outside the known set for this line"
OTHERS = "Others"

AREA_RATES = {
    RentalEquipment.CAGE_WHEEL.value: Decimal("350"),
    RentalEquipment.PUZHUTHI.value: Decimal("350"),
    RentalEquipment.ROTAVATOR.value: Decimal("700"),
    RentalEquipment.MINI.value: Decimal("600"),
}

DIPPER_RATE = Decimal("500")  # per nadai, independent of AREA_RATES

HOURLY_RATES = {
    ServiceEquipment.JCB.value: Decimal("1000"),
}


@dataclass(frozen=True)
class BusinessLine:
    """Field names and tag set that differ between the two lines."""
    name: str
    party_field: str
    received_field: str
    known_tags: frozenset

    def is_known(self, tag) -> bool:
        return _tag_value(tag) in self.known_tags


RENTAL_LINE = BusinessLine(
    name="rental",
    party_field="name",
    received_field="received_amount",
    known_tags=frozenset(e.value for e in RentalEquipment),
)

SERVICE_LINE = BusinessLine(
    name="service",
    party_field="company_name",
    received_field="amount_received",
    known_tags=frozenset(e.value for e in ServiceEquipment),
)


def _tag_value(tag) -> str:
    return tag.value if isinstance(tag, Enum) else tag


def is_area_equipment(tag) -> bool:
    return _tag_value(tag) in AREA_RATES


def is_hourly_equipment(tag) -> bool:
    return _tag_value(tag) in HOURLY_RATES


def rate_for(tag) -> Decimal:
    """Price per usage unit for an equipment tag of either line.

    Raises UnknownEquipmentError for a tag with no rate entry.
    """
    key = _tag_value(tag)
    if key == RentalEquipment.DIPPER.value:
        return DIPPER_RATE
    if key in AREA_RATES:
        return AREA_RATES[key]
    if key in HOURLY_RATES:
        return HOURLY_RATES[key]
    raise UnknownEquipmentError(key)
