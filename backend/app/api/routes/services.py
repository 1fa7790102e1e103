"""JCB service records: list/filter, summary cards, CRUD, exports."""
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.core.exceptions import BusinessError, RecordNotFoundError
from app.models.service_record import ServiceRecord
from app.models.user import User
from app.schemas.records import ServiceRecordIn, ServiceRecordOut, SummaryOut
from app.services.billing_service import summarize
from app.services.export_service import export_xlsx
from app.services.pdf_service import generate_records_pdf
from app.services.rates import SERVICE_LINE
from app.services.record_filters import FilterCriteria
from app.services.records_service import RecordsService, service_transaction, to_response

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _records(db: Session) -> RecordsService:
    return RecordsService(db, ServiceRecord, SERVICE_LINE)


def service_filters(
    equipment: Optional[str] = Query(None, description="Equipment type, or 'Others' for anything but JCB"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    company: Optional[str] = Query(None, description="Case-insensitive company name search"),
    status: Optional[Literal["paid", "pending"]] = Query(None),
    old_balance_status: Optional[Literal["paid", "pending"]] = Query(None),
) -> FilterCriteria:
    return FilterCriteria(
        equipment=equipment,
        date_from=date_from,
        date_to=date_to,
        party=company,
        status=status,
        old_balance_status=old_balance_status,
    )


@router.get("", response_model=List[ServiceRecordOut])
def list_services(
    criteria: FilterCriteria = Depends(service_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Service records, newest first, with derived status and pending amount."""
    return [to_response(tx, SERVICE_LINE) for tx in _records(db).list(criteria)]


@router.get("/summary", response_model=SummaryOut)
def service_summary(
    criteria: FilterCriteria = Depends(service_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Dashboard cards for the filtered records."""
    return summarize(_records(db).list(criteria))


@router.get("/export/xlsx")
def export_services_xlsx(
    criteria: FilterCriteria = Depends(service_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    buffer = export_xlsx(_records(db).list(criteria), SERVICE_LINE)
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=jcb-records_{date.today()}.xlsx"},
    )


@router.get("/export/pdf")
def export_services_pdf(
    criteria: FilterCriteria = Depends(service_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    buffer = generate_records_pdf(_records(db).list(criteria), SERVICE_LINE)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=jcb-records_{date.today()}.pdf"},
    )


@router.get("/{record_id}", response_model=ServiceRecordOut)
def get_service(record_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        return to_response(_records(db).get(record_id), SERVICE_LINE)
    except RecordNotFoundError as e:
        raise BusinessError.not_found("Service record", str(e))


@router.post("", response_model=ServiceRecordOut, status_code=201)
def create_service(data: ServiceRecordIn, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Create a service record. total_amount is computed server-side."""
    tx = _records(db).create(service_transaction(data))
    return to_response(tx, SERVICE_LINE)


@router.put("/{record_id}", response_model=ServiceRecordOut)
def replace_service(
    record_id: int,
    data: ServiceRecordIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace every field of a service record."""
    try:
        tx = _records(db).replace(record_id, service_transaction(data))
    except RecordNotFoundError as e:
        raise BusinessError.not_found("Service record", str(e))
    return to_response(tx, SERVICE_LINE)


@router.delete("/{record_id}")
def delete_service(record_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        _records(db).delete(record_id)
    except RecordNotFoundError as e:
        raise BusinessError.not_found("Service record", str(e))
    return {"message": "Record deleted", "id": record_id}
