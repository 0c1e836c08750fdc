"""
Room data access functions.
Handles room CRUD, room-type summaries, and date-derived room status.
"""

import sqlite3
from database import get_db
from utils.datetime_helpers import format_date, get_today
from utils.exceptions import ValidationError, NotFoundError
from utils.messages import MESSAGES

ROOM_STATUSES = ('available', 'booked', 'needs_cleaning', 'out_of_order')

# Statuses set by staff and kept until changed; the rest are derived per date
STAFF_SET_STATUSES = ('needs_cleaning', 'out_of_order')

ROOM_FIELDS = ('room_number', 'type', 'name', 'price', 'description')


# =============================================================================
# READ
# =============================================================================

def get_room_by_id(room_id: int) -> dict:
    """
    Get room by ID.

    Args:
        room_id: Room ID

    Returns:
        Room dict or None if not found
    """
    cursor = get_db().cursor()
    cursor.execute('SELECT * FROM rooms WHERE id = ?', (room_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_rooms(room_type: str = None) -> list:
    """
    Get rooms in listing order: room number compared numerically (so '9'
    precedes '10'), then as text, then id.

    Args:
        room_type: Restrict to one room type (optional)

    Returns:
        List of room dicts
    """
    query = 'SELECT * FROM rooms'
    params = []

    if room_type:
        query += ' WHERE type = ?'
        params.append(room_type)

    query += ' ORDER BY CAST(room_number AS INTEGER), room_number, id'

    cursor = get_db().cursor()
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_room_types() -> list:
    """
    Get one summary entry per room type for the public booking page.

    Returns:
        List of dicts: type, name, price, description, room_count
    """
    cursor = get_db().cursor()
    cursor.execute('''
        SELECT type,
               MIN(name) as name,
               MIN(price) as price,
               MIN(description) as description,
               COUNT(*) as room_count
        FROM rooms
        GROUP BY type
        ORDER BY MIN(price), type
    ''')
    return [dict(row) for row in cursor.fetchall()]


def count_rooms() -> int:
    cursor = get_db().cursor()
    cursor.execute('SELECT COUNT(*) FROM rooms')
    return cursor.fetchone()[0]


def get_rooms_with_status(selected_date=None) -> list:
    """
    Get all rooms with their status derived for a given date.

    Persisted needs_cleaning/out_of_order win. Otherwise a room is 'booked'
    when an active reservation covers the date (start <= date < end), and
    'available' when none does.

    Args:
        selected_date: Date to evaluate (default: today, UTC)

    Returns:
        List of room dicts with 'current_status' and 'reservation'
    """
    day = format_date(selected_date or get_today())

    rooms = get_rooms()

    cursor = get_db().cursor()
    cursor.execute('''
        SELECT id, room_id, reservation_code, full_name, start_date, end_date,
               payment_status, status
        FROM reservations
        WHERE cancelled_at IS NULL
          AND admin_hidden = 0
          AND start_date <= ?
          AND end_date > ?
    ''', (day, day))
    covering = {row['room_id']: dict(row) for row in cursor.fetchall()}

    for room in rooms:
        reservation = covering.get(room['id'])
        if room['status'] in STAFF_SET_STATUSES:
            room['current_status'] = room['status']
        elif reservation:
            room['current_status'] = 'booked'
        else:
            room['current_status'] = 'available'
        room['reservation'] = reservation
        room['date'] = day

    return rooms


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def _check_room_number_unique(cursor, room_type: str, room_number: str, exclude_id: int = None) -> None:
    query = 'SELECT id FROM rooms WHERE type = ? AND room_number = ?'
    params = [room_type, room_number]
    if exclude_id:
        query += ' AND id != ?'
        params.append(exclude_id)
    cursor.execute(query, params)
    if cursor.fetchone():
        raise ValidationError(MESSAGES['room_number_exists'], field='room_number')


def _clean_room_data(data: dict, partial: bool = False) -> dict:
    """Validate and normalize room input fields."""
    clean = {}

    for field in ROOM_FIELDS:
        if field not in data:
            if not partial and field in ('room_number', 'type', 'name', 'price'):
                raise ValidationError(MESSAGES['missing_fields'], field=field)
            continue

        value = data[field]
        if field == 'price':
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ValidationError(MESSAGES['invalid_amount'], field='price')
            if value < 0:
                raise ValidationError(MESSAGES['invalid_amount'], field='price')
        else:
            value = str(value or '').strip()
            if field != 'description' and not value:
                raise ValidationError(MESSAGES['missing_fields'], field=field)
        clean[field] = value

    return clean


def create_room(data: dict) -> int:
    """
    Create a room.

    Args:
        data: room_number, type, name, price, description

    Returns:
        New room ID

    Raises:
        ValidationError: Missing fields, bad price, or duplicate number within the type
    """
    clean = _clean_room_data(data)
    clean.setdefault('description', '')

    db = get_db()
    cursor = db.cursor()
    _check_room_number_unique(cursor, clean['type'], clean['room_number'])

    try:
        cursor.execute('''
            INSERT INTO rooms (room_number, type, name, price, description)
            VALUES (?, ?, ?, ?, ?)
        ''', (clean['room_number'], clean['type'], clean['name'],
              clean['price'], clean['description']))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationError(MESSAGES['room_number_exists'], field='room_number')

    return cursor.lastrowid


def update_room(room_id: int, data: dict) -> dict:
    """
    Update room fields.

    Args:
        room_id: Room ID
        data: Any of room_number, type, name, price, description

    Returns:
        Updated room dict

    Raises:
        NotFoundError: Unknown room
        ValidationError: Bad field values or duplicate number within the type
    """
    room = get_room_by_id(room_id)
    if not room:
        raise NotFoundError(MESSAGES['room_not_found'])

    clean = _clean_room_data(data, partial=True)
    if not clean:
        return room

    db = get_db()
    cursor = db.cursor()
    _check_room_number_unique(
        cursor,
        clean.get('type', room['type']),
        clean.get('room_number', room['room_number']),
        exclude_id=room_id
    )

    updates = [f'{field} = ?' for field in clean]
    values = list(clean.values())
    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(room_id)

    try:
        cursor.execute(f'UPDATE rooms SET {", ".join(updates)} WHERE id = ?', values)
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationError(MESSAGES['room_number_exists'], field='room_number')

    return get_room_by_id(room_id)


def delete_room(room_id: int) -> bool:
    """
    Delete a room that has no reservations.

    Raises:
        NotFoundError: Unknown room
        ValidationError: The room still has reservations on record
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('SELECT id FROM rooms WHERE id = ?', (room_id,))
    if not cursor.fetchone():
        raise NotFoundError(MESSAGES['room_not_found'])

    cursor.execute('SELECT COUNT(*) FROM reservations WHERE room_id = ?', (room_id,))
    if cursor.fetchone()[0] > 0:
        raise ValidationError(MESSAGES['room_has_reservations'])

    cursor.execute('DELETE FROM rooms WHERE id = ?', (room_id,))
    db.commit()
    return cursor.rowcount > 0


def set_room_status(room_id: int, status: str) -> dict:
    """
    Persist a staff-set room status.

    Args:
        room_id: Room ID
        status: One of available, needs_cleaning, out_of_order

    Returns:
        Updated room dict
    """
    if status not in ROOM_STATUSES or status == 'booked':
        raise ValidationError(MESSAGES['invalid_status'], field='status')

    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE rooms SET status = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (status, room_id))
    db.commit()

    if cursor.rowcount == 0:
        raise NotFoundError(MESSAGES['room_not_found'])

    return get_room_by_id(room_id)


def mark_room_cleaned(room_id: int) -> dict:
    """Housekeeping done: the room goes back to 'available'."""
    return set_room_status(room_id, 'available')
