"""Export routes (payments Excel export)."""
import io

from flask import Response
from flask_login import login_required
from openpyxl import Workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from blueprints.booking.routes.payments import payment_filters
from models.reports import get_payments
from utils.datetime_helpers import format_date, get_today
from utils.decorators import tab_required


def register_routes(bp):
    """Register export routes on the blueprint."""

    @bp.route('/payments/export')
    @login_required
    @tab_required('payments')
    def export_payments():
        """Export the invoice listing to Excel."""
        return export_payments_xlsx(payment_filters())


def export_payments_xlsx(filters: dict) -> Response:
    """
    Generate and return the payments Excel export.

    Args:
        filters: Same filters as the payments listing

    Returns:
        Response: Excel file download response
    """
    payments = get_payments(**filters)

    wb = Workbook()
    ws = wb.active
    ws.title = "Payments"

    # Styles
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(
        start_color="1A3A5C", end_color="1A3A5C", fill_type="solid"
    )
    header_alignment = Alignment(
        horizontal="center", vertical="center", wrap_text=True
    )
    thin_border = Border(
        left=Side(style='thin', color="D4D4D4"),
        right=Side(style='thin', color="D4D4D4"),
        top=Side(style='thin', color="D4D4D4"),
        bottom=Side(style='thin', color="D4D4D4")
    )
    data_alignment = Alignment(vertical="center")
    center_alignment = Alignment(horizontal="center", vertical="center")
    alt_fill = PatternFill(
        start_color="F5F5F5", end_color="F5F5F5", fill_type="solid"
    )

    headers = [
        "Invoice", "Reservation", "Guest", "Room", "Check-in", "Check-out",
        "Total", "Paid", "Balance", "Status", "Method", "Paid at"
    ]
    last_col = chr(ord('A') + len(headers) - 1)

    # Title row
    ws.merge_cells(f'A1:{last_col}1')
    title_cell = ws.cell(row=1, column=1, value="Payments")
    title_cell.font = Font(bold=True, size=14, color="1A3A5C")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Subtitle with filter info
    subtitle_parts = [f"{key}: {value}" for key, value in filters.items()]
    subtitle_parts.append(f"Total: {len(payments)} invoices")
    ws.merge_cells(f'A2:{last_col}2')
    subtitle_cell = ws.cell(row=2, column=1, value=" | ".join(subtitle_parts))
    subtitle_cell.font = Font(size=10, color="666666")
    subtitle_cell.alignment = Alignment(horizontal="center", vertical="center")

    header_row = 4
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border

    ws.freeze_panes = f'A{header_row + 1}'

    for row_idx, payment in enumerate(payments, header_row + 1):
        paid_at = payment.get('paid_at')
        values = [
            payment.get('invoice_number') or '-',
            payment.get('reservation_code'),
            payment.get('full_name'),
            payment.get('room_number') or '-',
            payment.get('start_date'),
            payment.get('end_date'),
            payment.get('total_price') or 0,
            payment.get('amount_paid') or 0,
            payment.get('balance') or 0,
            payment.get('payment_status'),
            payment.get('payment_method') or '-',
            str(paid_at) if paid_at else '-',
        ]
        is_alt = (row_idx - header_row) % 2 == 0
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = thin_border
            cell.alignment = data_alignment
            if is_alt:
                cell.fill = alt_fill

        for col in (4, 5, 6, 10, 11):
            ws.cell(row=row_idx, column=col).alignment = center_alignment
        for col in (7, 8, 9):
            ws.cell(row=row_idx, column=col).number_format = '#,##0.00'

    # Column widths
    for col_cells in ws.columns:
        anchor_cell = next((c for c in col_cells if not isinstance(c, MergedCell)), None)
        if anchor_cell is None:
            continue
        max_length = 10
        for cell in col_cells:
            if isinstance(cell, MergedCell):
                continue
            max_length = max(max_length, len(str(cell.value or '')))
        ws.column_dimensions[anchor_cell.column_letter].width = min(max_length + 3, 40)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)

    filename = f"payments_{format_date(get_today())}.xlsx"

    return Response(
        output.getvalue(),
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )
