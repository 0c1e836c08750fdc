"""Payments/invoices listing and manual-reconciliation report."""
from typing import Any
from database import get_db
from models.notification import PAYMENT_UNRECONCILED, get_notifications_by_type


def get_payments(
    payment_status: str | None = None,
    payment_method: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None
) -> list[dict[str, Any]]:
    """
    Get the invoice listing for the payments tab.

    Args:
        payment_status: 'PAID', 'UNPAID', or None for all
        payment_method: 'cash', 'card', or None for all
        start_date: Check-in on or after (YYYY-MM-DD)
        end_date: Check-in on or before (YYYY-MM-DD)

    Returns:
        List of dicts with invoice, guest, room, amounts and balance
    """
    query = """
        SELECT
            r.id,
            r.invoice_number,
            r.reservation_code,
            r.full_name,
            r.start_date,
            r.end_date,
            r.total_price,
            r.amount_paid,
            r.payment_method,
            r.payment_status,
            r.paid_at,
            r.cancelled_at,
            rm.room_number,
            rm.type as room_type
        FROM reservations r
        JOIN rooms rm ON r.room_id = rm.id
        WHERE r.admin_hidden = 0
    """
    params: list[Any] = []

    if payment_status in ('PAID', 'UNPAID'):
        query += " AND r.payment_status = ?"
        params.append(payment_status)

    if payment_method in ('cash', 'card'):
        query += " AND r.payment_method = ?"
        params.append(payment_method)

    if start_date:
        query += " AND r.start_date >= ?"
        params.append(start_date)

    if end_date:
        query += " AND r.start_date <= ?"
        params.append(end_date)

    query += " ORDER BY r.id DESC"

    cursor = get_db().cursor()
    cursor.execute(query, params)

    payments = []
    for row in cursor.fetchall():
        payment = dict(row)
        total = float(payment['total_price'] or 0)
        paid = float(payment['amount_paid'] or 0)
        payment['balance'] = round(max(total - paid, 0), 2)
        payments.append(payment)
    return payments


def get_unreconciled_payments() -> list[dict[str, Any]]:
    """
    Payments captured by the processor that never became a reservation.

    Each entry comes from a payment_unreconciled notification and carries
    the session id, payer email, amount, requested stay and the reason
    (user not found, no room at commit time). Staff settle them by hand.

    Returns:
        List of dicts, newest first
    """
    report = []
    for notification in get_notifications_by_type(PAYMENT_UNRECONCILED):
        payload = notification.get('payload') or {}
        report.append({
            'notification_id': notification['id'],
            'created_at': notification['created_at'],
            'session_id': payload.get('session_id'),
            'customer_email': payload.get('customer_email'),
            'amount': payload.get('amount'),
            'room_type': payload.get('room_type'),
            'start_date': payload.get('start_date'),
            'end_date': payload.get('end_date'),
            'reason': payload.get('reason'),
        })
    return report
