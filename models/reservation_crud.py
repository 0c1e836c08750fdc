"""
Reservation CRUD operations.
Handles the commit protocol for new reservations, reads, and edits.

The availability check before an insert is a courtesy to the caller; the
overlap triggers in the store decide. Both outcomes surface as the same
NoRoomAvailable error.
"""

import logging
import secrets
import sqlite3

from flask import current_app

from database import get_db
from database.schema import OVERLAP_ERROR
from utils.datetime_helpers import format_date, get_today, nights_between, now_timestamp, parse_date
from utils.exceptions import (
    AuthorizationError, DuplicateEventError, NoRoomAvailable,
    NotFoundError, PersistenceError, ValidationError
)
from utils.messages import MESSAGES
from utils.validators import (
    parse_positive_integer, require_fields, sanitize_input, validate_stay_dates
)
from .reservation_availability import find_availability, pick_room

logger = logging.getLogger(__name__)

RESERVATION_STATUSES = ('pending', 'confirmed', 'completed', 'cancelled')
PAYMENT_METHODS = ('cash', 'card')
PAYMENT_STATUSES = ('PAID', 'UNPAID')

REQUIRED_FIELDS = ('full_name', 'phone', 'type', 'start_date', 'end_date')


# =============================================================================
# NUMBERING
# =============================================================================

def generate_reservation_code(cursor=None, max_retries: int = 5) -> str:
    """
    Generate a unique human-readable reservation code.

    Format: RYYMMDD-XXXXXX (creation date + random hex suffix)

    Args:
        cursor: Active transaction cursor
        max_retries: Max attempts on collision

    Returns:
        str: Unique reservation code

    Raises:
        PersistenceError: If unable to generate a unique code
    """
    prefix = get_today().strftime('R%y%m%d')
    cur = cursor or get_db().cursor()

    for _ in range(max_retries):
        code = f'{prefix}-{secrets.token_hex(3).upper()}'
        cur.execute('SELECT id FROM reservations WHERE reservation_code = ?', (code,))
        if not cur.fetchone():
            return code

    raise PersistenceError()


def format_invoice_number(reservation_id: int, year: int = None, padding: int = None) -> str:
    """
    Build the invoice number for a reservation: INV-{year}-{zero-padded id}.

    Derived from the reservation's own id, so no separate counter can race.
    """
    if year is None:
        year = get_today().year
    if padding is None:
        padding = current_app.config.get('INVOICE_NUMBER_PADDING', 6)
    return f'INV-{year}-{reservation_id:0{padding}d}'


def assign_invoice_number(reservation_id: int, year: int = None) -> str | None:
    """
    Persist the invoice number as a second write after the insert.

    Returns:
        The invoice number, or None if the write failed (logged)
    """
    invoice_number = format_invoice_number(reservation_id, year)
    db = get_db()
    try:
        db.execute('''
            UPDATE reservations
            SET invoice_number = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (invoice_number, reservation_id))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        logger.error(f'Failed to assign invoice number to reservation {reservation_id}: {e}',
                     exc_info=True)
        return None
    return invoice_number


# =============================================================================
# ERROR TRANSLATION
# =============================================================================

def translate_store_error(error: sqlite3.Error) -> Exception:
    """
    Map a raw store error to the domain taxonomy.

    Overlap trigger -> NoRoomAvailable, duplicate payment session ->
    DuplicateEventError, anything else -> PersistenceError (logged).
    """
    text = str(error)
    if isinstance(error, sqlite3.IntegrityError):
        if OVERLAP_ERROR in text:
            return NoRoomAvailable()
        if 'stripe_session_id' in text:
            return DuplicateEventError()
    logger.error(f'Reservation store failure: {text}', exc_info=error)
    return PersistenceError()


# =============================================================================
# CREATE
# =============================================================================

def _normalize_payment(data: dict, total_price: float, paid_online: bool) -> dict:
    """Payment fields: UNPAID unless explicitly PAID; amount/paid_at follow."""
    if paid_online:
        payment_method = 'card'
        paid = True
    else:
        payment_method = data.get('payment_method') or 'cash'
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(MESSAGES['invalid_payment_method'], field='payment_method')
        paid = str(data.get('payment_status') or '').upper() == 'PAID'

    return {
        'payment_method': payment_method,
        'payment_status': 'PAID' if paid else 'UNPAID',
        'amount_paid': total_price if paid else 0,
        'paid_at': now_timestamp() if paid else None,
    }


def _resolve_total_price(value, room: dict, start, end) -> float:
    if value in (None, ''):
        return round(float(room['price']) * nights_between(start, end), 2)
    try:
        total = float(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_value'], field='total_price')
    if total != total or total < 0:
        raise ValidationError(MESSAGES['invalid_amount'], field='total_price')
    return round(total, 2)


def create_reservation(
    data: dict,
    user_id: int = None,
    created_by: str = None,
    stripe_session_id: str = None,
    paid_online: bool = False
) -> dict:
    """
    Create a reservation through the commit protocol.

    Args:
        data: full_name, phone, type, start_date, end_date (required);
            address, guests, room_id, total_price, payment_method,
            payment_status, status (optional)
        user_id: Owning client account (optional for walk-ins)
        created_by: Actor label for the record
        stripe_session_id: Payment-session key (online flow); unique
        paid_online: Paid through the processor: card + PAID

    Returns:
        dict: The persisted reservation (with invoice_number)

    Raises:
        ValidationError: Missing/malformed input, past dates, end <= start
        NoRoomAvailable: No free room, before or at commit
        DuplicateEventError: stripe_session_id already used
        PersistenceError: Unexpected store failure
    """
    require_fields(data, REQUIRED_FIELDS)
    start, end = validate_stay_dates(data['start_date'], data['end_date'])

    room_type = sanitize_input(data['type'], 64)
    guests = parse_positive_integer(data.get('guests'), 'guests', default=1)

    status = data.get('status') or 'confirmed'
    if status not in RESERVATION_STATUSES or status == 'cancelled':
        raise ValidationError(MESSAGES['invalid_status'], field='status')

    room_id = None
    if data.get('room_id') not in (None, ''):
        room_id = parse_positive_integer(data['room_id'], 'room_id')

    availability = find_availability(room_type, start, end)
    room = pick_room(availability['available_rooms'], room_id)
    if room is None:
        raise NoRoomAvailable()

    total_price = _resolve_total_price(data.get('total_price'), room, start, end)
    payment = _normalize_payment(data, total_price, paid_online)

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('BEGIN IMMEDIATE')

        reservation_code = generate_reservation_code(cursor)

        cursor.execute('''
            INSERT INTO reservations (
                reservation_code, room_id, user_id,
                full_name, phone, address, guests,
                start_date, end_date, status, total_price,
                payment_method, payment_status, amount_paid, paid_at,
                stripe_session_id, created_by
            ) VALUES (
                ?, ?, ?,
                ?, ?, ?, ?,
                ?, ?, ?, ?,
                ?, ?, ?, ?,
                ?, ?
            )
        ''', (
            reservation_code, room['id'], user_id,
            sanitize_input(data['full_name'], 120), sanitize_input(data['phone'], 40),
            sanitize_input(data.get('address'), 255), guests,
            format_date(start), format_date(end), status, total_price,
            payment['payment_method'], payment['payment_status'],
            payment['amount_paid'], payment['paid_at'],
            stripe_session_id, created_by
        ))

        reservation_id = cursor.lastrowid
        db.commit()

    except sqlite3.Error as e:
        db.rollback()
        raise translate_store_error(e)

    logger.info(f'Reservation {reservation_code} created on room {room["room_number"]} '
                f'({format_date(start)} to {format_date(end)})')

    assign_invoice_number(reservation_id)

    return get_reservation_by_id(reservation_id)


# =============================================================================
# READ
# =============================================================================

RESERVATION_SELECT = '''
    SELECT r.*,
           rm.room_number, rm.type as room_type, rm.name as room_name,
           rm.price as room_price,
           u.email as user_email, u.name as user_name
    FROM reservations r
    JOIN rooms rm ON r.room_id = rm.id
    LEFT JOIN users u ON r.user_id = u.id
'''


def get_reservation_by_id(reservation_id: int) -> dict:
    """
    Get reservation by ID with room and user info.

    Returns:
        dict: Reservation or None
    """
    cursor = get_db().cursor()
    cursor.execute(RESERVATION_SELECT + ' WHERE r.id = ?', (reservation_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_reservation_by_code(reservation_code: str) -> dict:
    cursor = get_db().cursor()
    cursor.execute(RESERVATION_SELECT + ' WHERE r.reservation_code = ?', (reservation_code,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_reservation_by_session_id(stripe_session_id: str) -> dict:
    """
    Get the reservation created for a payment session (idempotency key).

    Returns:
        dict: Reservation or None
    """
    if not stripe_session_id:
        return None
    cursor = get_db().cursor()
    cursor.execute(RESERVATION_SELECT + ' WHERE r.stripe_session_id = ?', (stripe_session_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def list_reservations(user_id: int = None, role: str = None, include_hidden: bool = False) -> list:
    """
    List reservations, newest first.

    Clients see their own rows minus the ones they hid. Staff see every
    non-archived row, archived ones too when include_hidden is set.

    Args:
        user_id: Requesting user ID
        role: Requesting user role (admin, worker, client)
        include_hidden: Staff only, include admin-archived rows

    Returns:
        List of reservation dicts
    """
    query = RESERVATION_SELECT
    params = []

    if role == 'client':
        query += ' WHERE r.user_id = ? AND r.client_hidden = 0'
        params.append(user_id)
    elif not include_hidden:
        query += ' WHERE r.admin_hidden = 0'

    query += ' ORDER BY r.id DESC'

    cursor = get_db().cursor()
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_latest_reservation(user_id: int) -> dict:
    """Most recent reservation of a user (checkout success page)."""
    cursor = get_db().cursor()
    cursor.execute(RESERVATION_SELECT + '''
        WHERE r.user_id = ?
        ORDER BY r.created_at DESC, r.id DESC
        LIMIT 1
    ''', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_active_reservations_for_room(room_id: int) -> list:
    """Active reservations (not cancelled, not archived) on a room, by start date."""
    cursor = get_db().cursor()
    cursor.execute('''
        SELECT * FROM reservations
        WHERE room_id = ? AND cancelled_at IS NULL AND admin_hidden = 0
        ORDER BY start_date, id
    ''', (room_id,))
    return [dict(row) for row in cursor.fetchall()]


# =============================================================================
# UPDATE
# =============================================================================

EDITABLE_FIELDS = ('full_name', 'phone', 'address', 'guests', 'total_price')


def update_reservation(reservation_id: int, fields: dict, acting_user=None) -> dict:
    """
    Edit a reservation's guest details and, optionally, its type or dates.

    When the type or dates change the availability engine runs again,
    ignoring this reservation, and the stay moves to the first free room.
    The not-in-the-past rule applies only when the dates change.

    Args:
        reservation_id: Reservation ID
        fields: Any of full_name, phone, address, guests, total_price,
            type, start_date, end_date, room_id
        acting_user: User performing the edit (staff only)

    Returns:
        dict: Updated reservation

    Raises:
        NotFoundError, AuthorizationError, ValidationError, NoRoomAvailable
    """
    existing = get_reservation_by_id(reservation_id)
    if not existing:
        raise NotFoundError(MESSAGES['reservation_not_found'])

    if acting_user is not None and getattr(acting_user, 'role', None) not in ('admin', 'worker'):
        raise AuthorizationError()

    updates = {}

    for field in ('full_name', 'phone'):
        if field in fields:
            value = sanitize_input(fields[field], 120)
            if not value:
                raise ValidationError(MESSAGES['missing_fields'], field=field)
            updates[field] = value

    if 'address' in fields:
        updates['address'] = sanitize_input(fields['address'], 255)

    if 'guests' in fields:
        updates['guests'] = parse_positive_integer(fields['guests'], 'guests')

    new_type = sanitize_input(fields.get('type') or existing['room_type'], 64)
    new_start = fields.get('start_date') or existing['start_date']
    new_end = fields.get('end_date') or existing['end_date']

    try:
        dates_changed = (
            parse_date(new_start) != parse_date(existing['start_date'])
            or parse_date(new_end) != parse_date(existing['end_date'])
        )
    except (ValueError, TypeError):
        dates_changed = True

    type_changed = new_type != existing['room_type']
    requested_room_id = None
    if fields.get('room_id') not in (None, ''):
        requested_room_id = parse_positive_integer(fields['room_id'], 'room_id')
    room_requested = requested_room_id is not None and requested_room_id != existing['room_id']

    if dates_changed or type_changed or room_requested:
        start, end = validate_stay_dates(new_start, new_end, allow_past=not dates_changed)
        availability = find_availability(new_type, start, end, exclude_reservation_id=reservation_id)
        room = pick_room(availability['available_rooms'], requested_room_id)
        if room is None:
            raise NoRoomAvailable()
        updates['room_id'] = room['id']
        updates['start_date'] = format_date(start)
        updates['end_date'] = format_date(end)

    if 'total_price' in fields:
        updates['total_price'] = _resolve_total_price(
            fields['total_price'], {'price': existing['room_price']},
            updates.get('start_date', existing['start_date']),
            updates.get('end_date', existing['end_date'])
        )

    if not updates:
        return existing

    assignments = [f'{field} = ?' for field in updates]
    values = list(updates.values())
    assignments.append('updated_at = CURRENT_TIMESTAMP')
    values.append(reservation_id)

    db = get_db()
    try:
        db.execute(f'UPDATE reservations SET {", ".join(assignments)} WHERE id = ?', values)
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise translate_store_error(e)

    return get_reservation_by_id(reservation_id)


def change_reservation_status(reservation_id: int, new_status: str) -> dict:
    """
    Change the business status (pending, confirmed, completed, cancelled).

    Business status is independent of the cancellation/archive flags that
    drive availability.

    Returns:
        dict: Updated reservation
    """
    if new_status not in RESERVATION_STATUSES:
        raise ValidationError(MESSAGES['invalid_status'], field='status')

    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute('''
            UPDATE reservations SET status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (new_status, reservation_id))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise translate_store_error(e)

    if cursor.rowcount == 0:
        raise NotFoundError(MESSAGES['reservation_not_found'])

    return get_reservation_by_id(reservation_id)


def record_payment(reservation_id: int, amount, method: str = 'cash') -> dict:
    """
    Record a payment against a reservation's balance.

    amount_paid accumulates up to total_price; once fully paid the
    reservation becomes PAID and paid_at is set.

    Args:
        reservation_id: Reservation ID
        amount: Amount received (> 0)
        method: cash or card

    Returns:
        dict: Updated reservation
    """
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_amount'], field='amount')
    if amount != amount or amount <= 0:
        raise ValidationError(MESSAGES['invalid_amount'], field='amount')

    if method not in PAYMENT_METHODS:
        raise ValidationError(MESSAGES['invalid_payment_method'], field='method')

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('BEGIN IMMEDIATE')
        cursor.execute(
            'SELECT total_price, amount_paid, paid_at FROM reservations WHERE id = ?',
            (reservation_id,)
        )
        row = cursor.fetchone()
        if not row:
            db.rollback()
            raise NotFoundError(MESSAGES['reservation_not_found'])

        total = float(row['total_price'] or 0)
        paid = min(round(float(row['amount_paid'] or 0) + amount, 2), total)
        fully_paid = paid >= total

        cursor.execute('''
            UPDATE reservations
            SET amount_paid = ?,
                payment_method = ?,
                payment_status = ?,
                paid_at = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (
            paid, method,
            'PAID' if fully_paid else 'UNPAID',
            (row['paid_at'] or now_timestamp()) if fully_paid else None,
            reservation_id
        ))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise translate_store_error(e)

    return get_reservation_by_id(reservation_id)
