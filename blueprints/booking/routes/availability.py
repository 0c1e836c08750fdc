"""Availability preview API route."""

from flask import request
from flask_login import current_user

from models.reservation import check_availability
from utils.api_response import api_success
from utils.validators import parse_positive_integer, require_fields, validate_stay_dates

PUBLIC_CONFLICT_FIELDS = ('room_id', 'room_number', 'name', 'reason', 'available_from')


def _public_room(room: dict) -> dict:
    return {
        'id': room['id'],
        'room_number': room['room_number'],
        'name': room['name'],
        'type': room['type'],
        'price': room['price'],
    }


def _conflict_view(conflict: dict, staff: bool) -> dict:
    """Reservation identifiers of other guests are for staff only."""
    if staff:
        return conflict
    return {field: conflict.get(field) for field in PUBLIC_CONFLICT_FIELDS}


def register_routes(bp):
    """Register availability routes on the blueprint."""

    @bp.route('/availability')
    def availability():
        """
        Check which rooms of a type are free for a stay.

        Query params:
            room_type: Room category
            start_date: Check-in YYYY-MM-DD
            end_date: Check-out YYYY-MM-DD (exclusive)
            exclude_reservation_id: Reservation being edited (optional)

        Returns:
            JSON with available flag, available_rooms and unavailable_rooms
        """
        args = request.args
        require_fields(args, ('room_type', 'start_date', 'end_date'))

        exclude_id = None
        if args.get('exclude_reservation_id'):
            exclude_id = parse_positive_integer(args['exclude_reservation_id'],
                                                'exclude_reservation_id')

        # Editing an existing stay may look at past dates; new stays may not
        start, end = validate_stay_dates(args['start_date'], args['end_date'],
                                         allow_past=exclude_id is not None)

        result = check_availability(args['room_type'], start, end, exclude_id)
        staff = current_user.is_authenticated and current_user.is_staff

        return api_success(
            data={
                'available_rooms': [_public_room(r) for r in result['available_rooms']],
                'unavailable_rooms': [_conflict_view(c, staff)
                                      for c in result['unavailable_rooms']],
            },
            available=result['available']
        )
