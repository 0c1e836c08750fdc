"""
Room availability engine.

Single home of the interval-overlap rule. Every call site (availability
preview, direct booking, payment webhook, reservation edit) goes through
find_availability() so the rule cannot drift between them.
"""

from datetime import date

from database import get_db
from utils.datetime_helpers import parse_date, format_date
from utils.exceptions import ValidationError
from utils.messages import MESSAGES


OUT_OF_ORDER_REASON = 'Out of order'
BOOKED_REASON = 'Booked'


# =============================================================================
# PURE FUNCTIONS
# =============================================================================

def dates_overlap(start_a, end_a, start_b, end_b) -> bool:
    """
    Check whether two half-open ranges [start_a, end_a) and [start_b, end_b)
    overlap. Touching boundaries do not overlap.
    """
    return parse_date(start_a) < parse_date(end_b) and parse_date(start_b) < parse_date(end_a)


def _normalize_range(start_date, end_date) -> tuple:
    try:
        start = parse_date(start_date)
    except (ValueError, TypeError):
        raise ValidationError(MESSAGES['invalid_date'], field='start_date')
    try:
        end = parse_date(end_date)
    except (ValueError, TypeError):
        raise ValidationError(MESSAGES['invalid_date'], field='end_date')
    if end <= start:
        raise ValidationError(MESSAGES['invalid_date_range'], field='end_date')
    return start, end


def evaluate_rooms(rooms: list, reservations: list, start: date, end: date) -> dict:
    """
    Split rooms into available and unavailable for [start, end).

    Args:
        rooms: Room dicts in listing order
        reservations: Active reservations on those rooms
        start: First night
        end: Checkout date (exclusive)

    Returns:
        dict: {
            'available_rooms': [room, ...],      # listing order preserved
            'unavailable_rooms': [
                {'room_id', 'room_number', 'name', 'reason',
                 'available_from', 'reservation_id', 'reservation_code'}
            ]
        }
    """
    by_room = {}
    for reservation in reservations:
        by_room.setdefault(reservation['room_id'], []).append(reservation)

    available = []
    unavailable = []

    for room in rooms:
        info = {
            'room_id': room['id'],
            'room_number': room['room_number'],
            'name': room['name'],
        }

        if room['status'] == 'out_of_order':
            info.update(reason=OUT_OF_ORDER_REASON, available_from=None,
                        reservation_id=None, reservation_code=None)
            unavailable.append(info)
            continue

        conflicts = [
            r for r in by_room.get(room['id'], [])
            if dates_overlap(r['start_date'], r['end_date'], start, end)
        ]
        if not conflicts:
            available.append(room)
            continue

        # The conflict that ends first tells the guest when the room frees up
        nearest = min(conflicts, key=lambda r: (parse_date(r['end_date']), r['id']))
        info.update(
            reason=BOOKED_REASON,
            available_from=format_date(nearest['end_date']),
            reservation_id=nearest['id'],
            reservation_code=nearest.get('reservation_code'),
        )
        unavailable.append(info)

    return {'available_rooms': available, 'unavailable_rooms': unavailable}


def pick_room(available_rooms: list, room_id: int = None) -> dict:
    """
    First-fit room selection.

    Args:
        available_rooms: Available rooms in listing order
        room_id: Explicitly requested room (optional)

    Returns:
        The requested room if it is available, else the first available
        room when none was requested; None when nothing fits
    """
    if room_id is not None:
        for room in available_rooms:
            if room['id'] == int(room_id):
                return room
        return None
    return available_rooms[0] if available_rooms else None


# =============================================================================
# DATA ACCESS
# =============================================================================

def _load_active_reservations(room_ids: list, start: date, end: date,
                              exclude_reservation_id: int = None) -> list:
    """Active reservations on the given rooms that could touch [start, end)."""
    if not room_ids:
        return []

    placeholders = ','.join('?' * len(room_ids))
    query = f'''
        SELECT id, room_id, reservation_code, start_date, end_date
        FROM reservations
        WHERE room_id IN ({placeholders})
          AND cancelled_at IS NULL
          AND admin_hidden = 0
          AND start_date < ?
          AND end_date > ?
    '''
    params = list(room_ids) + [format_date(end), format_date(start)]

    if exclude_reservation_id:
        query += ' AND id != ?'
        params.append(exclude_reservation_id)

    cursor = get_db().cursor()
    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def find_availability(room_type: str, start_date, end_date,
                      exclude_reservation_id: int = None) -> dict:
    """
    Find which rooms of a type are free for [start_date, end_date).

    Args:
        room_type: Room category (e.g. 'hotel-double')
        start_date: Check-in date (str or date)
        end_date: Check-out date (str or date), exclusive
        exclude_reservation_id: Reservation being edited, ignored as a conflict

    Returns:
        dict with 'available_rooms' and 'unavailable_rooms' (see evaluate_rooms)

    Raises:
        ValidationError: Malformed dates or end on or before start
    """
    start, end = _normalize_range(start_date, end_date)

    if not room_type:
        return {'available_rooms': [], 'unavailable_rooms': []}

    from .room import get_rooms
    rooms = get_rooms(room_type)
    if not rooms:
        return {'available_rooms': [], 'unavailable_rooms': []}

    reservations = _load_active_reservations(
        [r['id'] for r in rooms if r['status'] != 'out_of_order'],
        start, end, exclude_reservation_id
    )
    return evaluate_rooms(rooms, reservations, start, end)


def check_availability(room_type: str, start_date, end_date,
                       exclude_reservation_id: int = None) -> dict:
    """
    Availability preview for the booking form.

    Returns:
        dict: {'available': bool, 'available_rooms': [...], 'unavailable_rooms': [...]}
    """
    result = find_availability(room_type, start_date, end_date, exclude_reservation_id)
    return {
        'available': bool(result['available_rooms']),
        'available_rooms': result['available_rooms'],
        'unavailable_rooms': result['unavailable_rooms'],
    }
