"""
Tests for staff notifications, the unread stream, email and activity sinks.
"""

from blueprints.booking.routes.notifications import unread_event_stream
from blueprints.booking.services.email_service import (
    send_admin_reservation_notice, send_reservation_confirmation
)
from extensions import mail
from models.activity_log import cleanup_old_logs, count_activity_logs, get_activity_logs
from models.notification import (
    NEW_RESERVATION, count_unread, create_notification, get_recent_notifications, mark_all_read
)
from utils.audit import log_activity


class TestNotificationModel:
    """Tests for notification storage."""

    def test_create_list_and_mark_read(self, app):
        with app.app_context():
            first = create_notification(NEW_RESERVATION, 'First')
            second = create_notification(NEW_RESERVATION, 'Second', 'Body',
                                         payload={'amount': 10})
            assert first and second

            recent = get_recent_notifications(limit=1)
            assert [n['title'] for n in recent] == ['Second']
            assert get_recent_notifications()[0]['payload'] == {'amount': 10}

            assert count_unread() == 2
            assert mark_all_read() == 2
            assert count_unread() == 0

    def test_failure_is_swallowed(self, app):
        with app.app_context():
            # Unknown reservation violates the foreign key
            assert create_notification(NEW_RESERVATION, 'Broken', reservation_id=9999) is None


class TestUnreadStream:
    """Tests for the server-sent unread count."""

    def test_emits_count_then_changes(self, app):
        with app.app_context():
            stream = unread_event_stream(poll_seconds=0)
            assert next(stream) == 'event: unread\ndata: 0\n\n'
            assert next(stream) == ': ping\n\n'

            create_notification(NEW_RESERVATION, 'New')
            assert next(stream) == 'event: unread\ndata: 1\n\n'

            stream.close()

    def test_stream_route(self, staff_client, guest_client):
        assert guest_client.get('/api/notifications/stream').status_code == 403

        response = staff_client.get('/api/notifications/stream')
        assert response.status_code == 200
        assert response.mimetype == 'text/event-stream'
        first = next(iter(response.response))
        assert b'event: unread' in (first if isinstance(first, bytes) else first.encode())
        response.close()


class TestNotificationRoutes:
    """Tests for the notification API."""

    def test_staff_and_client_views(self, app, staff_client, guest_client):
        with app.app_context():
            create_notification(NEW_RESERVATION, 'Hello')

        client_view = guest_client.get('/api/notifications').get_json()
        assert client_view['data'] == []

        staff_view = staff_client.get('/api/notifications').get_json()
        assert staff_view['unread'] == 1
        assert staff_view['data'][0]['title'] == 'Hello'

        assert guest_client.patch('/api/notifications/read-all').status_code == 403
        marked = staff_client.patch('/api/notifications/read-all').get_json()
        assert marked['data']['updated'] == 1


class TestEmail:
    """Tests for outbound reservation email."""

    def _reservation(self):
        return {
            'reservation_code': 'R250101-ABC123', 'invoice_number': 'INV-2025-000001',
            'full_name': 'Mail Guest', 'phone': '+355690000000', 'user_email': 'mail@example.com',
            'room_name': 'Double Room', 'room_number': '201', 'start_date': '2025-06-01',
            'end_date': '2025-06-03', 'guests': 2, 'total_price': 140.0, 'amount_paid': 140.0,
        }

    def test_confirmation_and_admin_notice(self, app):
        with app.app_context(), mail.record_messages() as outbox:
            assert send_reservation_confirmation(self._reservation()) is True
            assert send_admin_reservation_notice(self._reservation(), 'cs_1') is True

        assert outbox[0].recipients == ['mail@example.com']
        assert 'R250101-ABC123' in outbox[0].subject
        assert 'R250101-ABC123' in outbox[0].html
        assert outbox[1].recipients == [app.config['ADMIN_NOTIFICATION_EMAIL']]
        assert 'cs_1' in outbox[1].html

    def test_no_recipient(self, app):
        reservation = self._reservation()
        reservation['user_email'] = None
        with app.app_context():
            assert send_reservation_confirmation(reservation) is False

    def test_transport_failure_returns_false(self, app, monkeypatch):
        def broken_send(message):
            raise ConnectionRefusedError('smtp down')

        monkeypatch.setattr(mail, 'send', broken_send)
        with app.app_context():
            assert send_reservation_confirmation(self._reservation()) is False


class TestActivityLog:
    """Tests for activity logging outside a request."""

    def test_system_actor_and_filters(self, app):
        with app.app_context():
            log_id = log_activity('UPDATE', 'room', 1, description='Room repainted',
                                  before={'status': 'available'}, after={'status': 'out_of_order'})
            assert log_id is not None

            logs = get_activity_logs(entity_type='room')
            assert logs[0]['performed_by'] == 'system'
            assert logs[0]['changes'] == {'before': {'status': 'available'},
                                          'after': {'status': 'out_of_order'}}
            assert count_activity_logs(action='UPDATE') == 1
            assert count_activity_logs(action='DELETE') == 0

    def test_cleanup_keeps_recent(self, app):
        with app.app_context():
            log_activity('CREATE', 'expense', 1)
            assert cleanup_old_logs(days=30) == 0
            assert count_activity_logs() == 1
