"""Report layout and the Excel (xlsx) exporter.

A report has one row per line item. Record-level columns (party, amounts,
status, dates) are filled on a record's first row and merged down across
its line items. Old-balance-only records take a single row.

All figures come from the billing engine so reports match the dashboard.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any, Callable, List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.core.config import settings
from app.services.billing_service import (
    DipperLineItem,
    LineItem,
    PaymentStatus,
    Transaction,
    UnpricedLineItem,
    old_balance_status_for,
    parse_amount,
    pending_amount_for,
    status_for,
)
from app.services.formatting import format_date, format_quantity
from app.services.rates import RENTAL_LINE, BusinessLine

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="2563EB", end_color="2563EB", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"),
    top=Side(style="thin"), bottom=Side(style="thin"),
)

STATUS_LABELS = {PaymentStatus.PAID.value: "Paid", PaymentStatus.PENDING.value: "Pending"}


@dataclass(frozen=True)
class ReportColumn:
    header: str
    value: Callable[[Transaction, Any], Any]  # (record, line item or None) -> cell value
    per_item: bool = False
    money: bool = False


def _item_quantity(item: LineItem, name: str):
    if isinstance(item, UnpricedLineItem):
        value = item.raw.get(name)
    else:
        value = getattr(item, name, None)
    return "" if value in (None, "") else format_quantity(value)


def _item_label(item: LineItem) -> str:
    if item is None:
        return ""
    if isinstance(item, DipperLineItem):
        return f"{format_quantity(item.nadai)} nadai - {item.equipment_type}"
    return item.equipment_type


def _status_label(tx: Transaction, item) -> str:
    return STATUS_LABELS[status_for(tx).value]


def _old_balance(tx: Transaction, item):
    return parse_amount(tx.old_balance) if tx.old_balance else ""


def _old_balance_status(tx: Transaction, item) -> str:
    status = old_balance_status_for(tx)
    return STATUS_LABELS[status.value] if status else ""


RENTAL_COLUMNS = [
    ReportColumn("Name", lambda tx, item: tx.party),
    ReportColumn("Acres", lambda tx, item: _item_quantity(item, "acres"), per_item=True),
    ReportColumn("Rounds", lambda tx, item: _item_quantity(item, "rounds"), per_item=True),
    ReportColumn("Equipment", lambda tx, item: _item_label(item), per_item=True),
    ReportColumn("Total", lambda tx, item: parse_amount(tx.total_amount), money=True),
    ReportColumn("Received", lambda tx, item: parse_amount(tx.received_amount), money=True),
    ReportColumn("Pending", lambda tx, item: pending_amount_for(tx), money=True),
    ReportColumn("Status", _status_label),
    ReportColumn("Old Balance", _old_balance, money=True),
    ReportColumn("Old Balance Status", _old_balance_status),
    ReportColumn("Date", lambda tx, item: format_date(tx.created_at)),
]

SERVICE_COLUMNS = [
    ReportColumn("Company", lambda tx, item: tx.party),
    ReportColumn("Driver", lambda tx, item: tx.extra_fields.get("driver_name") or ""),
    ReportColumn("Mobile", lambda tx, item: tx.extra_fields.get("mobile_number") or ""),
    ReportColumn("Hours", lambda tx, item: _item_quantity(item, "hours"), per_item=True),
    ReportColumn("Equipment", lambda tx, item: _item_label(item), per_item=True),
    ReportColumn("Total", lambda tx, item: parse_amount(tx.total_amount), money=True),
    ReportColumn("Received", lambda tx, item: parse_amount(tx.received_amount), money=True),
    ReportColumn("Advance", lambda tx, item: parse_amount(tx.extra_fields.get("advance_amount")), money=True),
    ReportColumn("Pending", lambda tx, item: pending_amount_for(tx), money=True),
    ReportColumn("Status", _status_label),
    ReportColumn("Old Balance", _old_balance, money=True),
    ReportColumn("Old Balance Status", _old_balance_status),
    ReportColumn("Work Date", lambda tx, item: format_date(tx.extra_fields.get("work_date"))),
    ReportColumn("Date", lambda tx, item: format_date(tx.created_at)),
]


def report_columns(line: BusinessLine) -> List[ReportColumn]:
    return RENTAL_COLUMNS if line is RENTAL_LINE else SERVICE_COLUMNS


def record_rows(tx: Transaction, columns: Sequence[ReportColumn]) -> List[List[Any]]:
    """Rows for one record. Record-level cells are None after the first row."""
    items = list(tx.line_items) or [None]
    rows = []
    for index, item in enumerate(items):
        rows.append([
            column.value(tx, item) if (column.per_item or index == 0) else None
            for column in columns
        ])
    return rows


def report_title(line: BusinessLine) -> str:
    kind = "RENTAL" if line is RENTAL_LINE else "JCB SERVICE"
    return f"{settings.BUSINESS_NAME.upper()} - {kind} RECORDS"


def export_xlsx(transactions: Sequence[Transaction], line: BusinessLine) -> BytesIO:
    """Excel workbook of the given records, newest first as passed in."""
    columns = report_columns(line)
    wb = Workbook()
    ws = wb.active
    ws.title = "Rental Records" if line is RENTAL_LINE else "JCB Records"

    last_col = get_column_letter(len(columns))
    ws.merge_cells(f"A1:{last_col}1")
    ws["A1"] = report_title(line)
    ws["A1"].font = Font(bold=True, size=14)
    ws["A1"].alignment = Alignment(horizontal="center")
    ws.merge_cells(f"A2:{last_col}2")
    ws["A2"] = f"Generated on: {datetime.now().strftime('%d %b %Y %I:%M %p')}"
    ws["A2"].alignment = Alignment(horizontal="center")

    header_row = 4
    for col, column in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col, value=column.header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal="center")
        cell.border = BORDER

    row = header_row + 1
    for tx in transactions:
        rows = record_rows(tx, columns)
        start = row
        for values in rows:
            for col, (column, value) in enumerate(zip(columns, values), 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = BORDER
                cell.alignment = Alignment(vertical="top")
                if column.money:
                    cell.number_format = '#,##0'
                    cell.alignment = Alignment(horizontal="right", vertical="top")
            row += 1
        if len(rows) > 1:
            for col, column in enumerate(columns, 1):
                if not column.per_item:
                    ws.merge_cells(start_row=start, start_column=col, end_row=row - 1, end_column=col)

    for col, column in enumerate(columns, 1):
        max_len = max(
            (len(str(ws.cell(row=r, column=col).value or "")) for r in range(header_row, ws.max_row + 1)),
            default=10,
        )
        ws.column_dimensions[get_column_letter(col)].width = min(max(max_len + 2, 10), 40)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    logger.info(f"Exported {len(transactions)} {line.name} records to xlsx")
    return buffer
