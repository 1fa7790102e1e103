"""
ServiceRecord: one company job on the hourly earth-mover (JCB) line.

Same billing fields as RentalRecord; the party is a company plus the
driver who ran the machine. advance_amount is recorded for reference only
and does not take part in the paid/pending status.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Date, Text
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from app.db.base import Base


class ServiceRecord(Base):
    __tablename__ = "service_records"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(255), nullable=False, index=True)
    driver_name = Column(String(255), nullable=False)
    mobile_number = Column(String(16), nullable=True)
    work_date = Column(Date, nullable=True)
    details = Column(JSON, nullable=False, default=list)  # [{equipment_type: "JCB", hours}]
    total_amount = Column(Numeric(16, 4), nullable=False, default=0)
    amount_received = Column(Numeric(16, 4), nullable=False, default=0)
    advance_amount = Column(Numeric(16, 4), nullable=False, default=0)
    old_balance = Column(String(64), nullable=True)
    old_balance_status = Column(String(16), nullable=True)  # paid | pending
    old_balance_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<ServiceRecord id={self.id} company={self.company_name!r} total={self.total_amount}>"
