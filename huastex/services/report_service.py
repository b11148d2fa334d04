"""Report service - daily cash reconciliation per branch."""
import logging
from datetime import date
from io import BytesIO
from typing import Any, Dict, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from sqlalchemy.orm import Session

from huastex.core.constants import Branch, PaymentType, PAYMENT_TYPE_LABELS
from huastex.core.report import summarize_day, reconcile, ALL_LOCATIONS
from huastex.exceptions import ValidationError
from huastex.models import Transaction, DailyAccounting
from huastex.utils.formatters import money_mx, date_mx
from huastex.utils.number_format import to_decimal, quantize_money

logger = logging.getLogger(__name__)


def _normalize_location(location: Optional[str]) -> str:
    if not location or location == ALL_LOCATIONS:
        return ALL_LOCATIONS
    try:
        return Branch.parse(location).value
    except ValueError as e:
        raise ValidationError(str(e), field='location')


def get_daily_accounting(session: Session, day: date, location: str) -> Optional[DailyAccounting]:
    return (
        session.query(DailyAccounting)
        .filter(DailyAccounting.date == day, DailyAccounting.location == _normalize_location(location))
        .first()
    )


def save_daily_accounting(session: Session, day: date, location: str, data: Dict[str, Any]) -> DailyAccounting:
    """Upsert the cash count of a branch for a day."""
    location = _normalize_location(location)
    if location == ALL_LOCATIONS:
        raise ValidationError('Selecciona una sucursal para registrar el corte', field='location')

    try:
        accounting = get_daily_accounting(session, day, location)
        if not accounting:
            accounting = DailyAccounting(date=day, location=location)
            session.add(accounting)

        for field in ('counted_amount', 'cash_in_register'):
            if field in data:
                amount = to_decimal(data[field])
                if data[field] not in (None, '') and amount is None:
                    raise ValidationError(f'El campo {field} debe ser numérico', field=field)
                setattr(accounting, field, quantize_money(amount) if amount is not None else None)
        if 'cashier_name' in data:
            accounting.cashier_name = (data['cashier_name'] or '').strip() or None

        session.commit()
        return accounting
    except Exception:
        session.rollback()
        raise


def get_daily_report(session: Session, day: date, location: Optional[str] = None) -> Dict[str, Any]:
    """
    Drawer totals of a day for one branch (or all of them) plus the saved
    cash count and its difference against the expected net.
    """
    location = _normalize_location(location)
    query = session.query(Transaction).filter(Transaction.transaction_date == day)
    if location != ALL_LOCATIONS:
        query = query.filter(Transaction.location == location)
    transactions = query.order_by(Transaction.id.asc()).all()

    summary = summarize_day(transactions, day, location)

    accounting = get_daily_accounting(session, day, location) if location != ALL_LOCATIONS else None
    summary['accounting'] = accounting
    summary.update(reconcile(summary, accounting.counted_amount if accounting else None))

    logger.debug(f"Daily report {day} {location}: in={summary['total_in']} out={summary['total_out']}")
    return summary


def _payment_label(payment_type: Optional[str]) -> str:
    try:
        return PAYMENT_TYPE_LABELS[PaymentType(payment_type)]
    except ValueError:
        return payment_type or '-'


def generate_daily_report_pdf(summary: Dict[str, Any], business_info: Dict[str, Any]) -> BytesIO:
    """Render the daily report (totals, transactions and cash count) as a PDF."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.6*inch,
        leftMargin=0.6*inch,
        topMargin=0.6*inch,
        bottomMargin=0.6*inch
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#2C3E50'),
        spaceAfter=8,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )
    header_style = ParagraphStyle(
        'ReportHeader',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#7F8C8D'),
        alignment=TA_CENTER,
        spaceAfter=4
    )

    # 1. Header
    elements.append(Paragraph("CORTE DE CAJA", title_style))
    if business_info.get('name'):
        elements.append(Paragraph(f"<b>{business_info['name']}</b>", header_style))
    contact = ' | '.join(v for v in (business_info.get('address'), business_info.get('phone')) if v)
    if contact:
        elements.append(Paragraph(contact, header_style))
    location = summary['location']
    location_label = 'Todas las sucursales' if location == ALL_LOCATIONS else location
    elements.append(Paragraph(f"{location_label} | {date_mx(summary['day'])}", header_style))
    elements.append(Spacer(1, 0.25*inch))

    # 2. Transactions
    table_data = [['Tipo', 'Nombre', 'Método', 'Monto', 'Saldo', 'Por pagar']]
    for t in summary['transactions']:
        table_data.append([
            'Ingreso' if t.transaction_type == 'income' else 'Egreso',
            (t.name or '')[:28],
            _payment_label(t.payment_type),
            money_mx(t.value),
            money_mx(t.saldo),
            money_mx(t.por_pagar),
        ])
    if len(table_data) == 1:
        table_data.append(['-', 'Sin transacciones', '', '', '', ''])

    items_table = Table(table_data, colWidths=[0.8*inch, 2.1*inch, 1.2*inch, 1*inch, 1*inch, 1*inch])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498DB')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (3, 1), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#BDC3C7')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#ECF0F1')]),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.25*inch))

    # 3. Totals
    totals_data = [
        ['Ingresos en caja:', money_mx(summary['total_in'])],
        ['Egresos en caja:', money_mx(summary['total_out'])],
        ['Total neto:', money_mx(summary['net'])],
        ['No ingresa a caja (tarjeta/transferencia/online):', money_mx(summary['excluded_total'])],
    ]
    if summary.get('counted_amount') is not None:
        totals_data.append(['Efectivo contado:', money_mx(summary['counted_amount'])])
        totals_data.append(['Diferencia:', money_mx(summary['difference'])])
    accounting = summary.get('accounting')
    if accounting is not None and accounting.cashier_name:
        totals_data.append(['Cajero:', accounting.cashier_name])

    totals_table = Table(totals_data, colWidths=[4.6*inch, 1.5*inch])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 2), (-1, 2), colors.HexColor('#27AE60')),
    ]))
    elements.append(totals_table)

    doc.build(elements)
    buffer.seek(0)
    return buffer
