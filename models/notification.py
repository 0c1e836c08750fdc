"""
Staff notification data access functions.
Notifications feed the dashboard bell; writes are best-effort.
"""

import json
import logging
from database import get_db

logger = logging.getLogger(__name__)

# Notification types
NEW_RESERVATION = 'new_reservation'
RESERVATION_CANCELLED = 'reservation_cancelled'
PAYMENT_UNRECONCILED = 'payment_unreconciled'


def create_notification(
    type: str,
    title: str,
    message: str = None,
    reservation_id: int = None,
    user_id: int = None,
    payload: dict = None
) -> int | None:
    """
    Create a notification for staff.

    Never raises: a failure is logged and reported as None so the
    operation that triggered it stands.

    Args:
        type: Notification type (new_reservation, reservation_cancelled, ...)
        title: Short title
        message: Body text
        reservation_id: Related reservation (optional)
        user_id: Related user (optional)
        payload: Extra structured data stored as JSON (optional)

    Returns:
        New notification ID, or None if the write failed
    """
    try:
        payload_json = json.dumps(payload, default=str, ensure_ascii=False) if payload else None
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT INTO notifications (type, title, message, reservation_id, user_id, payload)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (type, title, message, reservation_id, user_id, payload_json))
            return cursor.lastrowid
    except Exception as e:
        logger.error(f'Failed to create notification ({type}): {e}', exc_info=True)
        return None


def _decode(row) -> dict:
    notification = dict(row)
    if notification.get('payload'):
        notification['payload'] = json.loads(notification['payload'])
    return notification


def get_recent_notifications(limit: int = 20) -> list:
    """
    Get the most recent notifications, newest first.

    Args:
        limit: Maximum number of notifications

    Returns:
        List of notification dicts
    """
    cursor = get_db().cursor()
    cursor.execute('''
        SELECT * FROM notifications
        ORDER BY created_at DESC, id DESC
        LIMIT ?
    ''', (limit,))
    return [_decode(row) for row in cursor.fetchall()]


def get_notifications_by_type(type: str) -> list:
    cursor = get_db().cursor()
    cursor.execute('''
        SELECT * FROM notifications
        WHERE type = ?
        ORDER BY created_at DESC, id DESC
    ''', (type,))
    return [_decode(row) for row in cursor.fetchall()]


def get_notification_for_session(type: str, session_id: str) -> dict | None:
    """First notification of a type whose payload names a payment session."""
    if not session_id:
        return None
    cursor = get_db().cursor()
    cursor.execute('''
        SELECT * FROM notifications
        WHERE type = ? AND json_extract(payload, '$.session_id') = ?
        ORDER BY id
        LIMIT 1
    ''', (type, session_id))
    row = cursor.fetchone()
    return _decode(row) if row else None


def count_unread() -> int:
    """Number of unread notifications."""
    cursor = get_db().cursor()
    cursor.execute('SELECT COUNT(*) FROM notifications WHERE is_read = 0')
    return cursor.fetchone()[0]


def mark_all_read() -> int:
    """
    Mark every unread notification as read.

    Returns:
        Number of notifications updated
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('UPDATE notifications SET is_read = 1 WHERE is_read = 0')
    db.commit()
    return cursor.rowcount
