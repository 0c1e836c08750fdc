"""
Reservation Service - Booking flows layered on the commit protocol.

Handles:
- Direct booking (staff walk-ins and client requests)
- Cancellation, archive and hide with their side effects
- Best-effort notification and activity-log writes after each commit
"""

from typing import Any, Dict

from models.notification import (
    NEW_RESERVATION, RESERVATION_CANCELLED, create_notification
)
from models.reservation import (
    archive_reservation, cancel_reservation, create_reservation,
    get_reservation_by_id, hide_reservation
)
from models.user import get_user_by_id
from utils.audit import log_activity
from utils.exceptions import NotFoundError
from utils.messages import MESSAGES
from utils.validators import parse_positive_integer


def reservation_snapshot(reservation: Dict[str, Any]) -> Dict[str, Any]:
    """Fields worth keeping in the activity log."""
    keys = ('reservation_code', 'invoice_number', 'room_id', 'room_number',
            'start_date', 'end_date', 'status', 'total_price',
            'payment_status', 'amount_paid', 'cancelled_at', 'admin_hidden')
    return {k: reservation.get(k) for k in keys if k in reservation}


def book_reservation(data: Dict[str, Any], acting_user) -> Dict[str, Any]:
    """
    Direct booking from the dashboard or the client area.

    Staff may book for any guest (optionally linking data['user_id']) and
    set the payment state. Clients book for themselves only: the request
    starts pending and unpaid.

    Args:
        data: Reservation input (see create_reservation)
        acting_user: Current user

    Returns:
        dict: The created reservation

    Raises:
        ValidationError, NoRoomAvailable, PersistenceError
    """
    data = dict(data)

    if acting_user.role == 'client':
        user_id = acting_user.id
        data['status'] = 'pending'
        data['payment_status'] = 'UNPAID'
        data.pop('room_id', None)
        data.pop('total_price', None)
    else:
        user_id = None
        if data.get('user_id') not in (None, ''):
            user_id = parse_positive_integer(data['user_id'], 'user_id')
            if not get_user_by_id(user_id):
                raise NotFoundError(MESSAGES['user_not_found'])
        data.setdefault('status', 'confirmed')

    reservation = create_reservation(
        data,
        user_id=user_id,
        created_by=acting_user.email
    )

    create_notification(
        NEW_RESERVATION,
        'New reservation',
        f'Reservation {reservation["reservation_code"]} for {reservation["full_name"]} '
        f'({reservation["start_date"]} to {reservation["end_date"]}).',
        reservation_id=reservation['id'],
        user_id=user_id
    )
    log_activity('CREATE', 'reservation', reservation['id'],
                 description=f'Created reservation {reservation["reservation_code"]} '
                             f'in room {reservation["room_number"]}',
                 after=reservation_snapshot(reservation))

    return reservation


def cancel_reservation_for_user(reservation_id: int, user, reason: str = None) -> Dict[str, Any]:
    """
    Guest cancellation plus staff notification.

    Returns:
        dict: id, cancelled_at, cancel_reason
    """
    result = cancel_reservation(reservation_id, user, reason)

    create_notification(
        RESERVATION_CANCELLED,
        'Reservation cancelled',
        f'Reservation #{reservation_id} was cancelled by client.',
        reservation_id=reservation_id,
        user_id=user.id
    )
    log_activity('CANCEL', 'reservation', reservation_id,
                 description=f'Reservation #{reservation_id} cancelled by client',
                 after={'cancelled_at': result['cancelled_at'],
                        'cancel_reason': result['cancel_reason']})
    return result


def archive_reservation_by_staff(reservation_id: int) -> Dict[str, Any]:
    """Admin soft delete with activity entry."""
    before = get_reservation_by_id(reservation_id)
    if not before:
        raise NotFoundError(MESSAGES['reservation_not_found'])

    result = archive_reservation(reservation_id)
    log_activity('ARCHIVE', 'reservation', reservation_id,
                 description=f'Archived reservation {before["reservation_code"]}',
                 before=reservation_snapshot(before), after=result)
    return result


def hide_reservation_for_user(reservation_id: int, user) -> Dict[str, Any]:
    """Client hides a reservation from their list."""
    result = hide_reservation(reservation_id, user)
    log_activity('HIDE', 'reservation', reservation_id,
                 description=f'Reservation #{reservation_id} hidden by client')
    return result
