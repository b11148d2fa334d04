"""Reports blueprint - daily cash report and corte de caja."""
from datetime import date

from flask import Blueprint, jsonify, request, send_file, current_app

from huastex.database import get_session
from huastex.exceptions import NotFoundError
from huastex.services.report_service import (
    get_daily_report, get_daily_accounting, save_daily_accounting, generate_daily_report_pdf
)
from huastex.utils.number_format import money_float
from huastex.utils.request_args import json_body, date_arg

reports_bp = Blueprint('reports', __name__)


def _serialize_report(report):
    accounting = report.get('accounting')
    return {
        'date': report['day'].isoformat(),
        'location': report['location'],
        'transactions': [t.to_dict() for t in report['transactions']],
        'total_in': money_float(report['total_in']),
        'total_out': money_float(report['total_out']),
        'net': money_float(report['net']),
        'excluded_total': money_float(report['excluded_total']),
        'by_payment_type': {
            payment_type: {
                'income': money_float(bucket['income']),
                'outcome': money_float(bucket['outcome']),
                'count': bucket['count'],
            }
            for payment_type, bucket in report['by_payment_type'].items()
        },
        'accounting': accounting.to_dict() if accounting else None,
        'counted_amount': money_float(report.get('counted_amount')),
        'difference': money_float(report.get('difference')),
    }


@reports_bp.route('/reports/daily', methods=['GET'])
def daily():
    """Drawer totals of a day. ?date=YYYY-MM-DD (default today) &location=<branch>|all"""
    db_session = get_session()
    day = date_arg(request.args.get('date'), default=date.today())
    report = get_daily_report(db_session, day, request.args.get('location'))
    return jsonify(_serialize_report(report))


@reports_bp.route('/reports/daily.pdf', methods=['GET'])
def daily_pdf():
    db_session = get_session()
    day = date_arg(request.args.get('date'), default=date.today())
    report = get_daily_report(db_session, day, request.args.get('location'))

    business_info = {
        'name': current_app.config.get('BUSINESS_NAME'),
        'address': current_app.config.get('BUSINESS_ADDRESS'),
        'phone': current_app.config.get('BUSINESS_PHONE'),
    }
    pdf_buffer = generate_daily_report_pdf(report, business_info)

    filename = f"corte_{report['location']}_{day.strftime('%Y%m%d')}.pdf"
    return send_file(
        pdf_buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=filename
    )


@reports_bp.route('/daily-accounting/<day>', methods=['GET'])
def accounting_detail(day):
    db_session = get_session()
    parsed = date_arg(day)
    accounting = get_daily_accounting(db_session, parsed, request.args.get('location'))
    if not accounting:
        raise NotFoundError(f'No hay corte registrado para {parsed.isoformat()}')
    return jsonify(accounting.to_dict())


@reports_bp.route('/daily-accounting/<day>', methods=['PUT'])
def accounting_save(day):
    """Save the cash counted in a branch drawer. Body: location, counted_amount, cash_in_register, cashier_name."""
    db_session = get_session()
    data = json_body()
    location = data.get('location') or request.args.get('location')
    accounting = save_daily_accounting(db_session, date_arg(day), location, data)
    return jsonify(accounting.to_dict())
