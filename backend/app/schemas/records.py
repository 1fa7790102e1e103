"""Request and response models for rental and JCB service records.

Line items are a discriminated union on equipment_type, so a Dipper entry
cannot carry acres and a Cage Wheel entry cannot carry nadai.
Quantities must be > 0; validation errors never reach the billing engine.
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from app.services.rates import RentalEquipment, ServiceEquipment

MOBILE_RE = re.compile(r"^[6-9][0-9]{9}$")


# ==============================================================================
# LINE ITEMS
# ==============================================================================

class AreaLineItemIn(BaseModel):
    equipment_type: Literal[
        RentalEquipment.CAGE_WHEEL.value,
        RentalEquipment.PUZHUTHI.value,
        RentalEquipment.ROTAVATOR.value,
        RentalEquipment.MINI.value,
    ]
    acres: Decimal = Field(gt=0, decimal_places=2)
    rounds: Decimal = Field(gt=0, decimal_places=2)


class DipperLineItemIn(BaseModel):
    equipment_type: Literal[RentalEquipment.DIPPER.value]
    nadai: int = Field(gt=0)


class HourlyLineItemIn(BaseModel):
    equipment_type: Literal[ServiceEquipment.JCB.value] = ServiceEquipment.JCB.value
    hours: Decimal = Field(gt=0, decimal_places=2)  # 1.30 = one hour thirty, billed as 1.30


RentalLineItemIn = Annotated[
    Union[AreaLineItemIn, DipperLineItemIn],
    Field(discriminator="equipment_type"),
]


# ==============================================================================
# RECORDS
# ==============================================================================

class OldBalanceIn(BaseModel):
    """Prior-period balance block shared by both lines."""
    old_balance: Optional[str] = None
    old_balance_status: Optional[Literal["paid", "pending"]] = None
    old_balance_reason: Optional[str] = None
    old_balance_only: bool = False

    @field_validator("old_balance")
    @classmethod
    def old_balance_is_number(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        try:
            value = Decimal(v.replace(",", ""))
        except InvalidOperation:
            raise ValueError("Old balance must be a number")
        if not value.is_finite() or value < 0:
            raise ValueError("Old balance must be a non-negative number")
        if value.as_tuple().exponent < -2:
            raise ValueError("Old balance can have at most 2 decimal places")
        return v

    def _check_old_balance(self, has_details: bool):
        if self.old_balance_only:
            if self.old_balance is None:
                raise ValueError("Old balance is required for an old-balance-only entry")
        elif not has_details:
            raise ValueError("At least one line item is required")


class RentalRecordIn(OldBalanceIn):
    name: str = Field(min_length=1, max_length=255)
    details: List[RentalLineItemIn] = []
    received_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @model_validator(mode="after")
    def check_shape(self):
        self._check_old_balance(bool(self.details))
        if not self.old_balance_only and self.received_amount is None:
            raise ValueError("Received amount is required")
        return self


class ServiceRecordIn(OldBalanceIn):
    company_name: str = Field(min_length=1, max_length=255)
    driver_name: str = Field(min_length=1, max_length=255)
    mobile_number: Optional[str] = None
    work_date: Optional[date] = None
    details: List[HourlyLineItemIn] = []
    amount_received: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    advance_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)

    @field_validator("company_name", "driver_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("mobile_number")
    @classmethod
    def indian_mobile(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not MOBILE_RE.match(v):
            raise ValueError("Mobile number must be 10 digits starting with 6, 7, 8 or 9")
        return v

    @model_validator(mode="after")
    def check_shape(self):
        self._check_old_balance(bool(self.details))
        return self


# ==============================================================================
# RESPONSES
# ==============================================================================

class RecordOut(BaseModel):
    id: int
    details: List[Dict[str, Any]]
    total_amount: Decimal
    pending_amount: Decimal
    status: Literal["paid", "pending"]
    old_balance: Optional[str] = None
    old_balance_status: Optional[Literal["paid", "pending"]] = None
    old_balance_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class RentalRecordOut(RecordOut):
    name: str
    received_amount: Decimal


class ServiceRecordOut(RecordOut):
    company_name: str
    driver_name: str
    mobile_number: Optional[str] = None
    work_date: Optional[date] = None
    amount_received: Decimal
    advance_amount: Decimal


class SummaryOut(BaseModel):
    count: int
    total_amount: Decimal
    received_amount: Decimal
    pending_amount: Decimal

    class Config:
        from_attributes = True
