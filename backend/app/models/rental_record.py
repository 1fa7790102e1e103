"""
RentalRecord: one customer visit on the tractor rental line.

details is a JSON list of line items; quantities are stored as decimal
strings so a round trip through the DB is exact. total_amount is computed
by the billing engine at submission time and stored, never recomputed on read.
Inputs carry at most 2 decimal places, so an area product (2dp x 2dp x
whole-rupee rate) fits the 4-place money columns without rounding.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from app.db.base import Base


class RentalRecord(Base):
    __tablename__ = "rental_records"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    details = Column(JSON, nullable=False, default=list)  # [{equipment_type, acres, rounds} | {equipment_type: "Dipper", nadai}]
    total_amount = Column(Numeric(16, 4), nullable=False, default=0)
    received_amount = Column(Numeric(16, 4), nullable=False, default=0)
    old_balance = Column(String(64), nullable=True)  # numeric-as-text, as typed by staff
    old_balance_status = Column(String(16), nullable=True)  # paid | pending
    old_balance_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<RentalRecord id={self.id} name={self.name!r} total={self.total_amount}>"
