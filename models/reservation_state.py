"""
Reservation cancellation and soft-delete state.

Three independent persisted flags (cancelled_at, admin_hidden,
client_hidden) with a computed visibility variant on top. Only rows with
cancelled_at IS NULL and admin_hidden = 0 count toward availability.
"""

from database import get_db
from utils.datetime_helpers import get_today, now_timestamp, parse_date
from utils.exceptions import AuthorizationError, NotFoundError, ValidationError
from utils.messages import MESSAGES


# =============================================================================
# VISIBILITY
# =============================================================================

VISIBILITY_ACTIVE = 'active'
VISIBILITY_CLIENT_CANCELLED = 'client_cancelled'
VISIBILITY_ADMIN_ARCHIVED = 'admin_archived'
VISIBILITY_CANCELLED_AND_ARCHIVED = 'cancelled_and_archived'

CANCEL_REASON_MAX_LENGTH = 255


def reservation_visibility(reservation: dict) -> str:
    """
    Compute the visibility variant from the persisted flags.

    Returns:
        'active', 'client_cancelled', 'admin_archived' or 'cancelled_and_archived'
    """
    cancelled = reservation.get('cancelled_at') is not None
    archived = bool(reservation.get('admin_hidden'))

    if cancelled and archived:
        return VISIBILITY_CANCELLED_AND_ARCHIVED
    if cancelled:
        return VISIBILITY_CLIENT_CANCELLED
    if archived:
        return VISIBILITY_ADMIN_ARCHIVED
    return VISIBILITY_ACTIVE


def is_active(reservation: dict) -> bool:
    """Counts toward availability."""
    return reservation_visibility(reservation) == VISIBILITY_ACTIVE


def _get_flags(cursor, reservation_id: int) -> dict:
    cursor.execute('''
        SELECT id, user_id, start_date, cancelled_at, admin_hidden, client_hidden
        FROM reservations WHERE id = ?
    ''', (reservation_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFoundError(MESSAGES['reservation_not_found'])
    return dict(row)


def _check_owner(reservation: dict, user) -> None:
    user_id = getattr(user, 'id', None)
    if user_id is None or reservation['user_id'] is None or int(reservation['user_id']) != int(user_id):
        raise AuthorizationError()


# =============================================================================
# TRANSITIONS
# =============================================================================

def cancel_reservation(reservation_id: int, user, reason: str = None) -> dict:
    """
    Guest-initiated cancellation.

    Args:
        reservation_id: Reservation ID
        user: Acting user; must own the reservation
        reason: Optional reason (truncated to 255 chars)

    Returns:
        dict: id, cancelled_at, cancel_reason

    Raises:
        NotFoundError: Unknown reservation
        AuthorizationError: Not the owner
        ValidationError: Already cancelled, or check-in date is today or past (UTC)
    """
    db = get_db()
    cursor = db.cursor()

    reservation = _get_flags(cursor, reservation_id)
    _check_owner(reservation, user)

    if reservation['cancelled_at'] is not None:
        raise ValidationError(MESSAGES['already_cancelled'])

    if parse_date(reservation['start_date']) <= get_today():
        raise ValidationError(MESSAGES['cancel_after_checkin'])

    cancel_reason = reason[:CANCEL_REASON_MAX_LENGTH] if isinstance(reason, str) else None
    cancelled_at = now_timestamp()

    cursor.execute('''
        UPDATE reservations
        SET cancelled_at = ?, cancel_reason = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ? AND cancelled_at IS NULL
    ''', (cancelled_at, cancel_reason, reservation_id))
    db.commit()

    if cursor.rowcount == 0:
        raise ValidationError(MESSAGES['already_cancelled'])

    return {
        'id': reservation_id,
        'cancelled_at': cancelled_at,
        'cancel_reason': cancel_reason,
    }


def archive_reservation(reservation_id: int) -> dict:
    """
    Staff soft delete: hides the reservation and releases its room.

    Returns:
        dict: id, admin_hidden, admin_hidden_at
    """
    db = get_db()
    cursor = db.cursor()
    _get_flags(cursor, reservation_id)

    archived_at = now_timestamp()
    cursor.execute('''
        UPDATE reservations
        SET admin_hidden = 1,
            admin_hidden_at = COALESCE(admin_hidden_at, ?),
            updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (archived_at, reservation_id))
    db.commit()

    cursor.execute('SELECT admin_hidden_at FROM reservations WHERE id = ?', (reservation_id,))
    return {
        'id': reservation_id,
        'admin_hidden': 1,
        'admin_hidden_at': cursor.fetchone()['admin_hidden_at'],
    }


def hide_reservation(reservation_id: int, user) -> dict:
    """
    Guest removes a reservation from their own list. Availability is untouched.

    Raises:
        NotFoundError: Unknown reservation
        AuthorizationError: Not the owner
    """
    db = get_db()
    cursor = db.cursor()

    reservation = _get_flags(cursor, reservation_id)
    _check_owner(reservation, user)

    cursor.execute('''
        UPDATE reservations
        SET client_hidden = 1, client_hidden_at = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (now_timestamp(), reservation_id))
    db.commit()

    return {'id': reservation_id, 'client_hidden': 1}
