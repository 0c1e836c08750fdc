"""
Tests for authentication, roles and dashboard tab permissions.
"""

from conftest import CLIENT_EMAIL, CLIENT_PASSWORD, WORKER_EMAIL, login
from database import get_db
from extensions import mail
from models.permission import (
    DASHBOARD_TABS, get_allowed_tabs, normalize_tabs, set_allowed_tabs, user_has_tab
)
from models.user import create_user, get_user_by_email, set_verification_token


class TestAllowedTabs:
    """Tests for stored tab grants."""

    def test_admin_holds_every_tab(self, app):
        with app.app_context():
            admin = get_user_by_email('admin@hotel.local')
            assert get_allowed_tabs(admin['id']) == list(DASHBOARD_TABS)

    def test_worker_tabs_replaced(self, app):
        with app.app_context():
            worker = get_user_by_email(WORKER_EMAIL)
            assert get_allowed_tabs(worker['id']) == ['overview', 'rooms', 'reservations', 'payments']

            stored = set_allowed_tabs(worker['id'], ['expenses', 'bogus', 'rooms', 'expenses'])
            assert stored == ['expenses', 'rooms']
            assert get_allowed_tabs(worker['id']) == ['expenses', 'rooms']
            assert user_has_tab(worker['id'], 'rooms') is True
            assert user_has_tab(worker['id'], 'payments') is False

    def test_client_has_no_tabs(self, app, client_user):
        with app.app_context():
            set_allowed_tabs(client_user['id'], ['overview'])
            assert get_allowed_tabs(client_user['id']) == []

    def test_normalize_tabs(self):
        assert normalize_tabs(None) == []
        assert normalize_tabs(['users', 'users', 'nope', 'overview']) == ['users', 'overview']


class TestAuthRoutes:
    """Tests for register, login, logout and current user."""

    def test_register_logs_in_as_client(self, client):
        response = client.post('/auth/register', json={
            'name': 'New Guest', 'email': 'New.Guest@Example.com',
            'password': 'verysecret', 'phone': '+355691234000'
        })
        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['role'] == 'client'
        assert data['email'] == 'new.guest@example.com'
        assert data['allowed_tabs'] == []

        me = client.get('/auth/me')
        assert me.status_code == 200
        assert me.get_json()['data']['email'] == 'new.guest@example.com'

    def test_register_validation(self, client, client_user):
        short = client.post('/auth/register', json={
            'name': 'X', 'email': 'x@example.com', 'password': 'short'})
        assert short.status_code == 400
        assert short.get_json()['field'] == 'password'

        bad_email = client.post('/auth/register', json={
            'name': 'X', 'email': 'not-an-email', 'password': 'longenough'})
        assert bad_email.get_json()['field'] == 'email'

        taken = client.post('/auth/register', json={
            'name': 'X', 'email': CLIENT_EMAIL, 'password': 'longenough'})
        assert taken.status_code == 409

    def test_login_failures(self, app, client, client_user):
        wrong = client.post('/auth/login', json={'email': CLIENT_EMAIL, 'password': 'nope'})
        assert wrong.status_code == 401

        with app.app_context():
            create_user(email='gone@example.com', name='Gone', password='longenough')
            from models.user import set_user_active
            set_user_active(get_user_by_email('gone@example.com')['id'], False)

        disabled = client.post('/auth/login', json={'email': 'gone@example.com',
                                                     'password': 'longenough'})
        assert disabled.status_code == 403

    def test_login_case_insensitive_and_logout(self, client, client_user):
        login(client, CLIENT_EMAIL.upper(), CLIENT_PASSWORD)
        assert client.post('/auth/logout').status_code == 200
        assert client.get('/auth/me').status_code == 401

    def test_me_lists_worker_tabs(self, worker_client):
        data = worker_client.get('/auth/me').get_json()['data']
        assert data['role'] == 'worker'
        assert 'payments' in data['allowed_tabs']
        assert 'users' not in data['allowed_tabs']


class TestProfileAndVerification:
    """Tests for profile updates and the email verification flow."""

    def test_profile_update(self, app, guest_client, client_user):
        response = guest_client.patch('/auth/profile', json={
            'name': 'Guest Renamed', 'phone': '+355692222222',
            'address': 'Rruga e Kavajes 10, Tirane'
        })
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['name'] == 'Guest Renamed'
        assert data['address'] == 'Rruga e Kavajes 10, Tirane'

        with app.app_context():
            stored = get_user_by_email(CLIENT_EMAIL)
            assert stored['phone'] == '+355692222222'
            assert stored['address'] == 'Rruga e Kavajes 10, Tirane'

        me = guest_client.get('/auth/me').get_json()['data']
        assert me['name'] == 'Guest Renamed'

    def test_profile_update_validation(self, client, guest_client):
        assert client.patch('/auth/profile', json={'name': 'Anon'}).status_code == 401

        missing = guest_client.patch('/auth/profile', json={'phone': '+355692222222'})
        assert missing.status_code == 400
        assert missing.get_json()['field'] == 'name'

        bad_phone = guest_client.patch('/auth/profile', json={'name': 'Guest', 'phone': 'call me'})
        assert bad_phone.status_code == 400
        assert bad_phone.get_json()['field'] == 'phone'

    def test_register_sends_verification_link(self, app, client):
        with mail.record_messages() as outbox:
            response = client.post('/auth/register', json={
                'name': 'Fresh Guest', 'email': 'fresh@example.com', 'password': 'verysecret'
            })
        assert response.status_code == 201
        assert response.get_json()['data']['email_verified'] is False

        assert len(outbox) == 1
        assert outbox[0].subject == 'Verify your email'
        assert outbox[0].recipients == ['fresh@example.com']

        with app.app_context():
            token = get_user_by_email('fresh@example.com')['email_verification_token']
        assert token
        assert f'/auth/verify-email?token={token}' in outbox[0].html

        verified = client.get(f'/auth/verify-email?token={token}')
        assert verified.status_code == 200
        assert verified.get_json()['data']['email_verified'] is True

        with app.app_context():
            user = get_user_by_email('fresh@example.com')
            assert user['email_verified'] == 1
            assert user['email_verification_token'] is None

        # Tokens are single use
        assert client.get(f'/auth/verify-email?token={token}').status_code == 400

    def test_expired_or_unknown_token_rejected(self, app, client, client_user):
        with app.app_context():
            token = set_verification_token(client_user['id'])
            db = get_db()
            db.execute("UPDATE users SET email_verification_expires = '2000-01-01 00:00:00' "
                       "WHERE id = ?", (client_user['id'],))
            db.commit()

        expired = client.get(f'/auth/verify-email?token={token}')
        assert expired.status_code == 400
        assert expired.get_json()['field'] == 'token'
        assert client.get('/auth/verify-email?token=nope').status_code == 400
        assert client.get('/auth/verify-email').status_code == 400

        with app.app_context():
            assert get_user_by_email(CLIENT_EMAIL)['email_verified'] == 0

    def test_resend_verification(self, app, client, client_user):
        assert client.post('/auth/resend-verification', json={}).status_code == 400

        with mail.record_messages() as outbox:
            unknown = client.post('/auth/resend-verification', json={'email': 'nobody@example.com'})
            sent = client.post('/auth/resend-verification', json={'email': CLIENT_EMAIL})

        assert unknown.status_code == 200
        assert unknown.get_json()['message'] == 'If the email exists, we sent a link.'
        assert sent.get_json()['message'] == 'Verification email sent.'
        assert [m.recipients for m in outbox] == [[CLIENT_EMAIL]]

        with app.app_context():
            token = get_user_by_email(CLIENT_EMAIL)['email_verification_token']
        assert client.get(f'/auth/verify-email?token={token}').status_code == 200

        again = client.post('/auth/resend-verification', json={'email': CLIENT_EMAIL})
        assert again.get_json()['message'] == 'Email already verified.'



class TestAdminRoutes:
    """Tests for user administration."""

    def test_create_worker_with_tabs(self, staff_client):
        response = staff_client.post('/admin/users', json={
            'email': 'cleaner@hotel.local', 'name': 'Cleaner', 'password': 'cleaner123',
            'role': 'worker', 'allowed_tabs': ['rooms', 'unknown']
        })
        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['allowed_tabs'] == ['rooms']
        assert 'password_hash' not in data

    def test_create_requires_admin(self, worker_client):
        response = worker_client.post('/admin/users', json={
            'email': 'x@hotel.local', 'name': 'X', 'password': 'longenough'})
        assert response.status_code == 403

    def test_list_users_requires_users_tab(self, staff_client, worker_client):
        assert worker_client.get('/admin/users').status_code == 403
        users = staff_client.get('/admin/users').get_json()['data']
        assert {u['email'] for u in users} >= {'admin@hotel.local', WORKER_EMAIL}
        assert all('password_hash' not in u for u in users)

    def test_update_tabs_takes_effect(self, app, staff_client, worker_client):
        with app.app_context():
            worker_id = get_user_by_email(WORKER_EMAIL)['id']

        assert worker_client.get('/api/expenses').status_code == 200
        assert worker_client.get('/api/activity-log').status_code == 403

        response = staff_client.patch(f'/admin/users/{worker_id}/allowed-tabs',
                                      json={'allowed_tabs': ['activityLogsTab', 'activityLogsTab']})
        assert response.get_json()['data']['allowed_tabs'] == ['activityLogsTab']

        assert worker_client.get('/api/activity-log').status_code == 200
        assert worker_client.get('/api/rooms').status_code == 403

        tabs = staff_client.get(f'/admin/users/{worker_id}/allowed-tabs').get_json()['data']
        assert tabs['allowed_tabs'] == ['activityLogsTab']
        assert tabs['all_tabs'] == list(DASHBOARD_TABS)

    def test_role_and_active_changes(self, app, staff_client, client_user):
        user_id = client_user['id']
        promoted = staff_client.patch(f'/admin/users/{user_id}/role', json={'role': 'worker'})
        assert promoted.get_json()['data']['role'] == 'worker'

        invalid = staff_client.patch(f'/admin/users/{user_id}/role', json={'role': 'owner'})
        assert invalid.status_code == 400

        disabled = staff_client.patch(f'/admin/users/{user_id}/active', json={'active': False})
        assert disabled.get_json()['data']['active'] == 0

        blocked = app.test_client().post('/auth/login', json={
            'email': CLIENT_EMAIL, 'password': CLIENT_PASSWORD})
        assert blocked.status_code == 403

    def test_admin_cannot_modify_self(self, app, staff_client):
        with app.app_context():
            admin_id = get_user_by_email('admin@hotel.local')['id']
        response = staff_client.patch(f'/admin/users/{admin_id}/role', json={'role': 'worker'})
        assert response.status_code == 400

    def test_user_detail(self, staff_client, client_user):
        response = staff_client.get(f'/admin/users/{client_user["id"]}')
        assert response.status_code == 200
        assert response.get_json()['data']['activity']['total_actions'] >= 0
        assert staff_client.get('/admin/users/9999').status_code == 404
