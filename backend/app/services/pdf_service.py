"""
PDF report generation.

Same layout as the Excel export: one row per line item, record-level cells
spanning a record's rows. Landscape A4 so the full column set fits.
"""
import logging
from io import BytesIO
from xml.sax.saxutils import escape
from datetime import datetime
from typing import Sequence
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER, TA_RIGHT

from app.services.billing_service import Summary, Transaction, summarize
from app.services.export_service import record_rows, report_columns, report_title
from app.services.formatting import format_inr
from app.services.rates import BusinessLine

# The built-in PDF fonts have no rupee glyph
CURRENCY = "Rs. "

logger = logging.getLogger(__name__)


def _cell_text(value, money: bool) -> str:
    if value is None or value == "":
        return ""
    if money:
        return format_inr(value, CURRENCY)
    return escape(str(value))


def _summary_table(summary: Summary, style) -> Table:
    data = [
        [Paragraph("<b>Records</b>", style), Paragraph("<b>Total</b>", style),
         Paragraph("<b>Received</b>", style), Paragraph("<b>Pending</b>", style)],
        [Paragraph(str(summary.count), style), Paragraph(format_inr(summary.total_amount, CURRENCY), style),
         Paragraph(format_inr(summary.received_amount, CURRENCY), style), Paragraph(format_inr(summary.pending_amount, CURRENCY), style)],
    ]
    table = Table(data, colWidths=[1.6*inch] * 4)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    return table


def generate_records_pdf(transactions: Sequence[Transaction], line: BusinessLine) -> BytesIO:
    """
    Generate the records report for one business line.

    Args:
        transactions: Records to include, in display order
        line: RENTAL_LINE or SERVICE_LINE (selects the columns)

    Returns:
        BytesIO buffer containing PDF data
    """
    columns = report_columns(line)
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(A4),
        topMargin=0.4*inch, bottomMargin=0.4*inch, leftMargin=0.3*inch, rightMargin=0.3*inch,
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=18,
        textColor=colors.HexColor('#1a56db'),
        alignment=TA_CENTER,
        spaceAfter=4
    )

    cell_style = ParagraphStyle(
        'ReportCell',
        parent=styles['Normal'],
        fontSize=7,
        leading=9,
        textColor=colors.HexColor('#111827')
    )
    money_style = ParagraphStyle('ReportMoney', parent=cell_style, alignment=TA_RIGHT)
    header_style = ParagraphStyle('ReportHeader', parent=cell_style, textColor=colors.white)

    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )

    elements.append(Paragraph(escape(report_title(line)), title_style))
    elements.append(Paragraph(
        f"Generated on: {datetime.now().strftime('%d %b %Y at %I:%M %p')}", footer_style
    ))
    elements.append(Spacer(1, 0.2*inch))
    elements.append(_summary_table(summarize(transactions), cell_style))
    elements.append(Spacer(1, 0.2*inch))

    data = [[Paragraph(f"<b>{column.header}</b>", header_style) for column in columns]]
    spans = []
    for tx in transactions:
        rows = record_rows(tx, columns)
        start = len(data)
        for values in rows:
            data.append([
                Paragraph(_cell_text(value, column.money), money_style if column.money else cell_style)
                for column, value in zip(columns, values)
            ])
        if len(rows) > 1:
            end = len(data) - 1
            for col, column in enumerate(columns):
                if not column.per_item:
                    spans.append(('SPAN', (col, start), (col, end)))

    usable_width = landscape(A4)[0] - 0.6*inch
    table = Table(data, colWidths=[usable_width / len(columns)] * len(columns), repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2563eb')),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#222222')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f3f4f6')]),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ('LEFTPADDING', (0, 0), (-1, -1), 3),
        ('RIGHTPADDING', (0, 0), (-1, -1), 3),
    ] + spans))
    elements.append(table)

    doc.build(elements)

    buffer.seek(0)
    logger.info(f"Exported {len(transactions)} {line.name} records to pdf")
    return buffer
