"""
Room API routes.
Room catalogue with per-day status, room management and housekeeping.
"""

from flask import request
from flask_login import login_required

from models.room import (
    create_room, delete_room, get_room_by_id, get_rooms_with_status,
    mark_room_cleaned, set_room_status, update_room
)
from utils.api_response import api_success
from utils.audit import log_activity
from utils.decorators import tab_required
from utils.exceptions import NotFoundError
from utils.messages import MESSAGES
from utils.validators import parse_date_field


def register_routes(bp):
    """Register room routes on the blueprint."""

    @bp.route('/rooms')
    @login_required
    @tab_required('rooms')
    def list_rooms():
        """
        All rooms with their status on a date.

        Query params:
            date: YYYY-MM-DD (default: today, UTC)
        """
        value = request.args.get('date')
        selected = parse_date_field(value, 'date') if value else None
        return api_success(data=get_rooms_with_status(selected))

    @bp.route('/rooms', methods=['POST'])
    @login_required
    @tab_required('manageRooms')
    def add_room():
        """
        Create a room.

        Request body:
            room_number, type, name, price (required), description
        """
        data = request.get_json(silent=True) or {}
        room_id = create_room(data)
        room = get_room_by_id(room_id)

        log_activity('CREATE', 'room', room_id,
                     description=f'Created room {room["room_number"]} ({room["type"]})',
                     after=room)
        return api_success(data=room, message=MESSAGES['room_created'], status=201)

    @bp.route('/rooms/<int:room_id>', methods=['PATCH'])
    @login_required
    @tab_required('manageRooms')
    def edit_room(room_id):
        """Update room number, type, name, price or description."""
        before = get_room_by_id(room_id)
        if not before:
            raise NotFoundError(MESSAGES['room_not_found'])

        data = request.get_json(silent=True) or {}
        room = update_room(room_id, data)

        log_activity('UPDATE', 'room', room_id,
                     description=f'Updated room {room["room_number"]}',
                     before=before, after=room)
        return api_success(data=room, message=MESSAGES['room_updated'])

    @bp.route('/rooms/<int:room_id>', methods=['DELETE'])
    @login_required
    @tab_required('manageRooms')
    def remove_room(room_id):
        """Delete a room with no reservations on record."""
        before = get_room_by_id(room_id)
        delete_room(room_id)

        log_activity('DELETE', 'room', room_id,
                     description=f'Deleted room {before["room_number"]}',
                     before=before)
        return api_success(data={'id': room_id}, message=MESSAGES['room_deleted'])

    @bp.route('/rooms/<int:room_id>/status', methods=['PATCH'])
    @login_required
    @tab_required('rooms')
    def change_room_status(room_id):
        """
        Set a staff-managed room status.

        Request body:
            status: available, needs_cleaning or out_of_order
        """
        before = get_room_by_id(room_id)
        if not before:
            raise NotFoundError(MESSAGES['room_not_found'])

        data = request.get_json(silent=True) or {}
        room = set_room_status(room_id, data.get('status'))

        log_activity('UPDATE', 'room', room_id,
                     description=f'Room {room["room_number"]} status '
                                 f'{before["status"]} -> {room["status"]}',
                     before={'status': before['status']},
                     after={'status': room['status']})
        return api_success(data=room, message=MESSAGES['room_updated'])

    @bp.route('/rooms/<int:room_id>/cleaned', methods=['POST'])
    @login_required
    @tab_required('rooms')
    def room_cleaned(room_id):
        """Housekeeping finished: room back to available."""
        room = mark_room_cleaned(room_id)
        log_activity('UPDATE', 'room', room_id,
                     description=f'Room {room["room_number"]} cleaned',
                     after={'status': room['status']})
        return api_success(data=room, message=MESSAGES['room_cleaned'])
