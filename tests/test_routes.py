"""
Tests for the booking HTTP surface: availability, reservations, activity log.
"""

from conftest import future
from models.activity_log import get_activity_logs
from models.notification import NEW_RESERVATION, RESERVATION_CANCELLED, get_notifications_by_type
from utils.datetime_helpers import format_date, get_today


def _booking_body(**overrides):
    body = {
        'full_name': 'Web Guest',
        'phone': '+355691234567',
        'type': 'hotel-single',
        'start_date': future(4),
        'end_date': future(6),
    }
    body.update(overrides)
    return body


class TestAvailabilityRoute:
    """Tests for GET /api/availability."""

    def test_preview(self, client):
        response = client.get(f'/api/availability?room_type=hotel-single'
                              f'&start_date={future(4)}&end_date={future(6)}')
        assert response.status_code == 200
        body = response.get_json()
        assert body['available'] is True
        assert [r['room_number'] for r in body['data']['available_rooms']] == ['101', '102']

    def test_reports_conflicts(self, client, staff_client):
        staff_client.post('/api/reservations', json=_booking_body(room_id=1))
        staff_client.post('/api/reservations', json=_booking_body(room_id=2))

        body = client.get(f'/api/availability?room_type=hotel-single'
                          f'&start_date={future(5)}&end_date={future(7)}').get_json()
        assert body['available'] is False
        assert body['data']['available_rooms'] == []
        assert {r['available_from'] for r in body['data']['unavailable_rooms']} == {future(6)}

    def test_conflicts_hide_reservation_identifiers_from_public(self, client, staff_client,
                                                                guest_client):
        staff_client.post('/api/reservations', json=_booking_body(room_id=1))
        query = (f'/api/availability?room_type=hotel-single'
                 f'&start_date={future(5)}&end_date={future(7)}')

        for caller in (client, guest_client):
            blocked = caller.get(query).get_json()['data']['unavailable_rooms']
            assert blocked == [{'room_id': 1, 'room_number': '101', 'name': blocked[0]['name'],
                                'reason': 'Booked', 'available_from': future(6)}]

        staff_view = staff_client.get(query).get_json()['data']['unavailable_rooms']
        assert staff_view[0]['reservation_code']
        assert staff_view[0]['reservation_id']

    def test_rejects_bad_ranges(self, client):
        missing = client.get('/api/availability?room_type=hotel-single')
        assert missing.status_code == 400

        inverted = client.get(f'/api/availability?room_type=hotel-single'
                              f'&start_date={future(6)}&end_date={future(4)}')
        assert inverted.status_code == 400

        past = client.get(f'/api/availability?room_type=hotel-single'
                          f'&start_date={future(-3)}&end_date={future(2)}')
        assert past.status_code == 400
        assert past.get_json()['field'] == 'start_date'

        trailing = client.get(f'/api/availability?room_type=hotel-single'
                              f'&start_date={future(4)}garbage&end_date={future(6)}')
        assert trailing.status_code == 400

    def test_past_dates_allowed_when_editing(self, app, staff_client, client):
        created = staff_client.post('/api/reservations', json=_booking_body()).get_json()['data']
        response = client.get(f'/api/availability?room_type=hotel-single'
                              f'&start_date={future(-3)}&end_date={future(2)}'
                              f'&exclude_reservation_id={created["id"]}')
        assert response.status_code == 200


class TestReservationRoutes:
    """Tests for booking, listing and lifecycle routes."""

    def test_staff_booking_and_conflict(self, staff_client):
        first = staff_client.post('/api/reservations', json=_booking_body(type='apartment'))
        second = staff_client.post('/api/reservations', json=_booking_body(type='apartment'))
        third = staff_client.post('/api/reservations', json=_booking_body(type='apartment'))

        assert first.status_code == 201
        assert second.status_code == 201
        assert third.status_code == 409
        assert third.get_json() == {'success': False, 'error': 'No rooms available for selected dates'}
        assert first.get_json()['data']['room_id'] != second.get_json()['data']['room_id']

    def test_client_booking_is_pending_request(self, app, guest_client, client_user):
        response = guest_client.post('/api/reservations', json=_booking_body(
            room_id=2, payment_status='PAID', status='confirmed'))
        assert response.status_code == 201
        reservation = response.get_json()['data']
        assert reservation['user_id'] == client_user['id']
        assert reservation['status'] == 'pending'
        assert reservation['payment_status'] == 'UNPAID'
        assert reservation['room_id'] == 1

        with app.app_context():
            notifications = get_notifications_by_type(NEW_RESERVATION)
            assert notifications[0]['reservation_id'] == reservation['id']
            logs = get_activity_logs(entity_type='reservation', action='CREATE')
            assert logs[0]['entity_id'] == reservation['id']
            assert logs[0]['performed_by'] == client_user['email']

    def test_staff_booking_for_unknown_user(self, staff_client):
        response = staff_client.post('/api/reservations', json=_booking_body(user_id=9999))
        assert response.status_code == 404

    def test_listing_scopes(self, staff_client, guest_client):
        staff_client.post('/api/reservations', json=_booking_body())
        guest_client.post('/api/reservations', json=_booking_body(type='hotel-double'))

        mine = guest_client.get('/api/reservations').get_json()['data']
        assert len(mine) == 1
        assert mine[0]['visibility'] == 'active'

        everything = staff_client.get('/api/reservations').get_json()['data']
        assert len(everything) == 2

        latest = guest_client.get('/api/reservations/latest').get_json()['data']
        assert latest['id'] == mine[0]['id']

    def test_detail_access(self, staff_client, guest_client):
        other = staff_client.post('/api/reservations', json=_booking_body()).get_json()['data']
        own = guest_client.post('/api/reservations',
                                json=_booking_body(type='hotel-double')).get_json()['data']

        assert guest_client.get(f'/api/reservations/{own["id"]}').status_code == 200
        assert guest_client.get(f'/api/reservations/{other["id"]}').status_code == 403
        assert staff_client.get(f'/api/reservations/{own["id"]}').status_code == 200
        assert staff_client.get('/api/reservations/9999').status_code == 404

    def test_patch_status_only_and_full_edit(self, staff_client):
        created = staff_client.post('/api/reservations', json=_booking_body()).get_json()['data']

        status = staff_client.patch(f'/api/reservations/{created["id"]}', json={'status': 'completed'})
        assert status.get_json()['data']['status'] == 'completed'

        edited = staff_client.patch(f'/api/reservations/{created["id"]}',
                                    json={'full_name': 'Edited', 'end_date': future(8)})
        data = edited.get_json()['data']
        assert data['full_name'] == 'Edited'
        assert data['end_date'] == future(8)

        explicit = staff_client.patch(f'/api/reservations/{created["id"]}/status',
                                      json={'status': 'bogus'})
        assert explicit.status_code == 400

    def test_guest_cannot_edit(self, guest_client):
        created = guest_client.post('/api/reservations', json=_booking_body()).get_json()['data']
        response = guest_client.patch(f'/api/reservations/{created["id"]}', json={'status': 'confirmed'})
        assert response.status_code == 403

    def test_desk_payment(self, staff_client):
        created = staff_client.post('/api/reservations', json=_booking_body()).get_json()['data']
        response = staff_client.post(f'/api/reservations/{created["id"]}/payments',
                                     json={'amount': created['total_price'], 'method': 'cash'})
        assert response.get_json()['data']['payment_status'] == 'PAID'

        bad = staff_client.post(f'/api/reservations/{created["id"]}/payments', json={'amount': -1})
        assert bad.status_code == 400

    def test_cancel_flow(self, app, client, guest_client, staff_client):
        tomorrow = guest_client.post('/api/reservations', json=_booking_body(
            start_date=future(1), end_date=future(3))).get_json()['data']
        today = guest_client.post('/api/reservations', json=_booking_body(
            type='hotel-double', start_date=format_date(get_today()), end_date=future(1)
        )).get_json()['data']

        assert staff_client.patch(f'/api/reservations/{tomorrow["id"]}/cancel').status_code == 403

        rejected = guest_client.patch(f'/api/reservations/{today["id"]}/cancel', json={})
        assert rejected.status_code == 400
        assert rejected.get_json()['error'] == 'Cannot cancel on/after check-in date'

        cancelled = guest_client.patch(f'/api/reservations/{tomorrow["id"]}/cancel',
                                       json={'reason': 'Flight cancelled'})
        assert cancelled.status_code == 200
        assert cancelled.get_json()['data']['cancel_reason'] == 'Flight cancelled'

        again = guest_client.patch(f'/api/reservations/{tomorrow["id"]}/cancel', json={})
        assert again.status_code == 400

        available = client.get(f'/api/availability?room_type=hotel-single'
                               f'&start_date={future(1)}&end_date={future(3)}').get_json()
        assert len(available['data']['available_rooms']) == 2

        with app.app_context():
            assert get_notifications_by_type(RESERVATION_CANCELLED)[0]['reservation_id'] == tomorrow['id']

    def test_hide_and_archive(self, staff_client, guest_client, worker_client):
        created = guest_client.post('/api/reservations', json=_booking_body()).get_json()['data']

        assert staff_client.patch(f'/api/reservations/{created["id"]}/hide').status_code == 403
        assert guest_client.patch(f'/api/reservations/{created["id"]}/hide').status_code == 200
        assert guest_client.get('/api/reservations').get_json()['data'] == []

        assert worker_client.patch(f'/api/reservations/{created["id"]}/archive').status_code == 403
        archived = staff_client.patch(f'/api/reservations/{created["id"]}/archive')
        assert archived.status_code == 200
        assert staff_client.get('/api/reservations').get_json()['data'] == []

        listed = staff_client.get('/api/reservations?archived=1').get_json()['data']
        assert listed[0]['visibility'] == 'admin_archived'

    def test_requires_login(self, client):
        assert client.get('/api/reservations').status_code == 401
        assert client.post('/api/reservations', json=_booking_body()).status_code == 401


class TestActivityLogRoute:
    """Tests for GET /api/activity-log."""

    def test_records_mutations_with_pagination(self, staff_client):
        for offset in (0, 3, 6):
            staff_client.post('/api/reservations', json=_booking_body(
                start_date=future(10 + offset), end_date=future(11 + offset)))

        body = staff_client.get('/api/activity-log?entity_type=reservation&per_page=2').get_json()
        assert len(body['data']) == 2
        assert body['pagination']['total'] == 3
        assert body['pagination']['total_pages'] == 2

        entry = body['data'][0]
        assert entry['action'] == 'CREATE'
        assert entry['performed_by'] == 'admin@hotel.local'
        assert entry['changes']['after']['reservation_code']

    def test_guest_denied(self, guest_client):
        assert guest_client.get('/api/activity-log').status_code == 403
