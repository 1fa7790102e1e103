"""Rental records (tractor line): list/filter, summary cards, CRUD, exports."""
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.core.exceptions import BusinessError, RecordNotFoundError
from app.models.rental_record import RentalRecord
from app.models.user import User
from app.schemas.records import RentalRecordIn, RentalRecordOut, SummaryOut
from app.services.billing_service import summarize
from app.services.export_service import export_xlsx
from app.services.pdf_service import generate_records_pdf
from app.services.rates import RENTAL_LINE
from app.services.record_filters import FilterCriteria
from app.services.records_service import RecordsService, rental_transaction, to_response

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _records(db: Session) -> RecordsService:
    return RecordsService(db, RentalRecord, RENTAL_LINE)


def rental_filters(
    equipment: Optional[str] = Query(None, description="Equipment type, or 'Others' for unlisted types"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    name: Optional[str] = Query(None, description="Case-insensitive name search"),
    status: Optional[Literal["paid", "pending"]] = Query(None),
    old_balance_status: Optional[Literal["paid", "pending"]] = Query(None),
) -> FilterCriteria:
    return FilterCriteria(
        equipment=equipment,
        date_from=date_from,
        date_to=date_to,
        party=name,
        status=status,
        old_balance_status=old_balance_status,
    )


@router.get("", response_model=List[RentalRecordOut])
def list_rentals(
    criteria: FilterCriteria = Depends(rental_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rental records, newest first, with derived status and pending amount."""
    return [to_response(tx, RENTAL_LINE) for tx in _records(db).list(criteria)]


@router.get("/summary", response_model=SummaryOut)
def rental_summary(
    criteria: FilterCriteria = Depends(rental_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Dashboard cards for the filtered records."""
    return summarize(_records(db).list(criteria))


@router.get("/export/xlsx")
def export_rentals_xlsx(
    criteria: FilterCriteria = Depends(rental_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    buffer = export_xlsx(_records(db).list(criteria), RENTAL_LINE)
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=rental-records_{date.today()}.xlsx"},
    )


@router.get("/export/pdf")
def export_rentals_pdf(
    criteria: FilterCriteria = Depends(rental_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    buffer = generate_records_pdf(_records(db).list(criteria), RENTAL_LINE)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=rental-records_{date.today()}.pdf"},
    )


@router.get("/{record_id}", response_model=RentalRecordOut)
def get_rental(record_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        return to_response(_records(db).get(record_id), RENTAL_LINE)
    except RecordNotFoundError as e:
        raise BusinessError.not_found("Rental record", str(e))


@router.post("", response_model=RentalRecordOut, status_code=201)
def create_rental(data: RentalRecordIn, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Create a rental record. total_amount is computed server-side."""
    tx = _records(db).create(rental_transaction(data))
    return to_response(tx, RENTAL_LINE)


@router.put("/{record_id}", response_model=RentalRecordOut)
def replace_rental(
    record_id: int,
    data: RentalRecordIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace every field of a rental record."""
    try:
        tx = _records(db).replace(record_id, rental_transaction(data))
    except RecordNotFoundError as e:
        raise BusinessError.not_found("Rental record", str(e))
    return to_response(tx, RENTAL_LINE)


@router.delete("/{record_id}")
def delete_rental(record_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        _records(db).delete(record_id)
    except RecordNotFoundError as e:
        raise BusinessError.not_found("Rental record", str(e))
    return {"message": "Record deleted", "id": record_id}
