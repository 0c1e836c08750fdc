"""
Tests for the room availability engine.
"""

from datetime import date

import pytest

from conftest import future
from models.reservation import (
    BOOKED_REASON, OUT_OF_ORDER_REASON, check_availability, create_reservation,
    dates_overlap, evaluate_rooms, find_availability, pick_room
)
from models.room import create_room, get_rooms, set_room_status
from utils.exceptions import ValidationError


def _room(room_id, number, status='available'):
    return {'id': room_id, 'room_number': number, 'name': f'Room {number}', 'status': status}


def _booking(reservation_id, room_id, start, end):
    return {'id': reservation_id, 'room_id': room_id, 'reservation_code': f'R-{reservation_id}',
            'start_date': start, 'end_date': end}


def _book(room_type, start, end, **extra):
    data = {'full_name': 'Test Guest', 'phone': '+355690000000',
            'type': room_type, 'start_date': start, 'end_date': end}
    data.update(extra)
    return create_reservation(data, created_by='tests')


class TestDatesOverlap:
    """Tests for the half-open interval rule."""

    def test_touching_ranges_do_not_overlap(self):
        assert dates_overlap('2025-06-01', '2025-06-05', '2025-06-05', '2025-06-08') is False
        assert dates_overlap('2025-06-05', '2025-06-08', '2025-06-01', '2025-06-05') is False

    def test_overlapping_ranges(self):
        assert dates_overlap('2025-06-01', '2025-06-05', '2025-06-04', '2025-06-06') is True
        assert dates_overlap('2025-06-01', '2025-06-10', '2025-06-03', '2025-06-04') is True


class TestEvaluateRooms:
    """Tests for the pure availability split."""

    def test_out_of_order_room_is_unavailable(self):
        rooms = [_room(1, '101', 'out_of_order'), _room(2, '102')]
        result = evaluate_rooms(rooms, [], date(2025, 6, 1), date(2025, 6, 3))

        assert [r['id'] for r in result['available_rooms']] == [2]
        blocked = result['unavailable_rooms'][0]
        assert blocked['room_id'] == 1
        assert blocked['reason'] == OUT_OF_ORDER_REASON
        assert blocked['available_from'] is None

    def test_nearest_conflict_reported(self):
        rooms = [_room(1, '101')]
        reservations = [
            _booking(10, 1, '2025-06-02', '2025-06-09'),
            _booking(11, 1, '2025-05-30', '2025-06-03'),
        ]
        result = evaluate_rooms(rooms, reservations, date(2025, 6, 1), date(2025, 6, 5))

        assert result['available_rooms'] == []
        blocked = result['unavailable_rooms'][0]
        assert blocked['reason'] == BOOKED_REASON
        assert blocked['available_from'] == '2025-06-03'
        assert blocked['reservation_id'] == 11
        assert blocked['reservation_code'] == 'R-11'

    def test_listing_order_preserved(self):
        rooms = [_room(3, '103'), _room(1, '101'), _room(2, '102')]
        result = evaluate_rooms(rooms, [], date(2025, 6, 1), date(2025, 6, 2))
        assert [r['id'] for r in result['available_rooms']] == [3, 1, 2]


class TestPickRoom:
    """Tests for first-fit selection."""

    def test_first_fit(self):
        assert pick_room([_room(5, '105'), _room(2, '102')])['id'] == 5

    def test_requested_room(self):
        rooms = [_room(5, '105'), _room(2, '102')]
        assert pick_room(rooms, 2)['id'] == 2
        assert pick_room(rooms, 9) is None

    def test_nothing_available(self):
        assert pick_room([]) is None


class TestFindAvailability:
    """Tests for availability against the store."""

    def test_all_rooms_free(self, app):
        with app.app_context():
            result = check_availability('hotel-double', future(5), future(7))
            assert result['available'] is True
            assert [r['room_number'] for r in result['available_rooms']] == ['201', '202', '203']
            assert result['unavailable_rooms'] == []

    def test_unknown_type_is_empty(self, app):
        with app.app_context():
            result = check_availability('penthouse', future(5), future(7))
            assert result['available'] is False
            assert result['available_rooms'] == []
            assert result['unavailable_rooms'] == []

    def test_end_before_start_rejected(self, app):
        with app.app_context():
            with pytest.raises(ValidationError):
                find_availability('hotel-double', future(7), future(5))

    def test_malformed_date_rejected(self, app):
        with app.app_context():
            with pytest.raises(ValidationError):
                find_availability('hotel-double', future(10) + 'garbage', future(12))
            with pytest.raises(ValidationError):
                find_availability('hotel-double', future(10), future(12) + 'x')

    def test_first_fit_follows_numeric_room_order(self, app):
        with app.app_context():
            create_room({'room_number': '9', 'type': 'suite', 'name': 'Suite', 'price': 150})
            create_room({'room_number': '10', 'type': 'suite', 'name': 'Suite', 'price': 150})

            assert [r['room_number'] for r in get_rooms('suite')] == ['9', '10']
            reservation = create_reservation({
                'full_name': 'Suite Guest', 'phone': '+355690000009', 'type': 'suite',
                'start_date': future(4), 'end_date': future(6)
            })
            assert reservation['room_number'] == '9'

    def test_booked_room_reported(self, app):
        with app.app_context():
            reservation = _book('hotel-single', future(10), future(14))
            result = find_availability('hotel-single', future(12), future(13))

            assert [r['room_number'] for r in result['available_rooms']] == ['102']
            blocked = result['unavailable_rooms'][0]
            assert blocked['room_number'] == '101'
            assert blocked['available_from'] == future(14)
            assert blocked['reservation_code'] == reservation['reservation_code']

    def test_checkout_day_is_bookable(self, app):
        with app.app_context():
            _book('hotel-single', future(10), future(14), room_id=1)
            result = find_availability('hotel-single', future(14), future(16))
            assert [r['id'] for r in result['available_rooms']][0] == 1

    def test_exclude_reservation_being_edited(self, app):
        with app.app_context():
            first = _book('apartment', future(3), future(6))
            _book('apartment', future(3), future(6))

            assert find_availability('apartment', future(4), future(5))['available_rooms'] == []
            result = find_availability('apartment', future(4), future(5),
                                       exclude_reservation_id=first['id'])
            assert [r['id'] for r in result['available_rooms']] == [first['room_id']]

    def test_out_of_order_skipped(self, app):
        with app.app_context():
            single_rooms = get_rooms('hotel-single')
            set_room_status(single_rooms[0]['id'], 'out_of_order')

            result = find_availability('hotel-single', future(2), future(3))
            assert [r['id'] for r in result['available_rooms']] == [single_rooms[1]['id']]
            assert result['unavailable_rooms'][0]['reason'] == OUT_OF_ORDER_REASON

    def test_cancelled_and_archived_do_not_block(self, app, client_user):
        from models.reservation import archive_reservation, cancel_reservation
        from models.user import User, get_user_by_id

        with app.app_context():
            owner = User(get_user_by_id(client_user['id']))
            cancelled = create_reservation(
                {'full_name': 'A', 'phone': '+355690000001', 'type': 'hotel-single',
                 'start_date': future(20), 'end_date': future(22), 'room_id': 1},
                user_id=owner.id
            )
            cancel_reservation(cancelled['id'], owner)

            archived = _book('hotel-single', future(20), future(22), room_id=2)
            archive_reservation(archived['id'])

            result = find_availability('hotel-single', future(20), future(22))
            assert len(result['available_rooms']) == 2
