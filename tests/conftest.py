"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import hashlib
import hmac
import json
import os
import time

import pytest

from utils.datetime_helpers import add_days, format_date, get_today

os.environ['FLASK_ENV'] = 'test'

ADMIN_EMAIL = 'admin@hotel.local'
ADMIN_PASSWORD = 'admin123'
WORKER_EMAIL = 'reception@hotel.local'
WORKER_PASSWORD = 'worker123'
CLIENT_EMAIL = 'guest@example.com'
CLIENT_PASSWORD = 'guestpass1'


def future(days: int) -> str:
    """ISO date a number of days after today (UTC)."""
    return format_date(add_days(get_today(), days))


def sign_payload(payload: str, secret: str, timestamp: int = None) -> str:
    """Build a Stripe-Signature header the way the processor does."""
    timestamp = timestamp or int(time.time())
    signed = f'{timestamp}.{payload}'.encode('utf-8')
    signature = hmac.new(secret.encode('utf-8'), signed, hashlib.sha256).hexdigest()
    return f't={timestamp},v1={signature}'


def checkout_event(session_id: str, email: str, room_type: str, start: str, end: str,
                   amount_total: int = 14000, event_type: str = 'checkout.session.completed',
                   payment_status: str = 'paid') -> dict:
    """A completed checkout event as the processor sends it."""
    return {
        'id': f'evt_{session_id}',
        'type': event_type,
        'data': {
            'object': {
                'id': session_id,
                'object': 'checkout.session',
                'customer_email': email,
                'payment_status': payment_status,
                'amount_total': amount_total,
                'metadata': {
                    'type': room_type,
                    'startDate': start,
                    'endDate': end,
                    'fullname': 'Online Guest',
                    'phone': '+355691234567',
                    'address': 'Rruga e Durresit 1',
                    'guests': '2',
                    'totalPrice': f'{amount_total / 100:.2f}',
                    'roomName': 'Double Room',
                },
            }
        },
    }


def post_webhook(client, app, event: dict, secret: str = None):
    """POST a signed event to the payment webhook."""
    payload = json.dumps(event)
    header = sign_payload(payload, secret or app.config['STRIPE_WEBHOOK_SECRET'])
    return client.post('/api/payments/webhook', data=payload,
                       headers={'Stripe-Signature': header},
                       content_type='application/json')


def login(client, email: str, password: str):
    response = client.post('/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database file."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'hotel_test.db')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Anonymous test client."""
    return app.test_client()


@pytest.fixture
def staff_client(app):
    """Test client logged in as the seeded admin."""
    return login(app.test_client(), ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def worker_client(app):
    """Test client logged in as the seeded reception worker."""
    return login(app.test_client(), WORKER_EMAIL, WORKER_PASSWORD)


@pytest.fixture
def client_user(app):
    """A registered client account."""
    from models.user import create_user, get_user_by_id

    with app.app_context():
        user_id = create_user(email=CLIENT_EMAIL, name='Guest User',
                              password=CLIENT_PASSWORD, role='client',
                              phone='+355691111111')
        user = get_user_by_id(user_id)
    user.pop('password_hash', None)
    return user


@pytest.fixture
def guest_client(app, client_user):
    """Test client logged in as the client account."""
    return login(app.test_client(), CLIENT_EMAIL, CLIENT_PASSWORD)


@pytest.fixture
def reservation_data():
    """Valid direct-booking input for a future stay."""
    return {
        'full_name': 'Arben Hoxha',
        'phone': '+355691234567',
        'address': 'Tirana',
        'guests': 2,
        'type': 'hotel-double',
        'start_date': future(10),
        'end_date': future(13),
    }
