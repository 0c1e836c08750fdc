"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Staff accounts
    users_data = [
        ('admin@hotel.local', 'Administrator', 'admin123', 'admin'),
        ('reception@hotel.local', 'Reception', 'worker123', 'worker'),
    ]

    for email, name, password, role in users_data:
        db.execute('''
            INSERT INTO users (email, name, password_hash, role, email_verified)
            VALUES (?, ?, ?, ?, 1)
        ''', (email, name, generate_password_hash(password, method='pbkdf2:sha256'), role))

    # Reception works the front desk tabs only
    reception_id = db.execute(
        "SELECT id FROM users WHERE email = 'reception@hotel.local'"
    ).fetchone()[0]
    for tab in ('overview', 'rooms', 'reservations', 'payments'):
        db.execute(
            'INSERT INTO user_allowed_tabs (user_id, tab_key) VALUES (?, ?)',
            (reception_id, tab)
        )

    # 2. Rooms
    rooms_data = [
        ('101', 'hotel-single', 'Single Room', 45.0, 'Cosy single room with city view'),
        ('102', 'hotel-single', 'Single Room', 45.0, 'Cosy single room with city view'),
        ('201', 'hotel-double', 'Double Room', 70.0, 'Double bed, balcony'),
        ('202', 'hotel-double', 'Double Room', 70.0, 'Double bed, balcony'),
        ('203', 'hotel-double', 'Double Room', 70.0, 'Double bed, balcony'),
        ('A1', 'apartment', 'Premium Apartment', 120.0, 'Two bedrooms, kitchen and living room'),
        ('A2', 'apartment', 'Premium Apartment', 120.0, 'Two bedrooms, kitchen and living room'),
    ]

    for room_number, room_type, name, price, description in rooms_data:
        db.execute('''
            INSERT INTO rooms (room_number, type, name, price, description)
            VALUES (?, ?, ?, ?, ?)
        ''', (room_number, room_type, name, price, description))
